"""
Bid Model
"""
import enum

from sqlalchemy import Column, String, Float, DateTime, ForeignKey

from wealth_oven.models.base import Base, enum_column_type, generate_id, isoformat, utcnow


class BidStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    PENDING_OFFER = "pending_offer"
    EXPIRED = "expired"


class Bid(Base):
    """Bid database model (offers are bids with `offer_amount` set)"""

    __tablename__ = "bids"

    id = Column(String(36), primary_key=True, default=generate_id)
    auction_id = Column(String(36), ForeignKey("auctions.id", ondelete="CASCADE"), nullable=False, index=True)
    bidder_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    offer_amount = Column(Float, nullable=True)
    status = Column(enum_column_type(BidStatus), nullable=False, default=BidStatus.CONFIRMED)
    setup_intent_id = Column(String(255), nullable=True)
    payment_method_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self, include_payment: bool = True):
        """
        Convert to dictionary

        Public bid history passes include_payment=False so Stripe ids are
        only shown to the bidder and to admins.
        """
        data = {
            "id": self.id,
            "auction_id": self.auction_id,
            "bidder_id": self.bidder_id,
            "amount": self.amount,
            "offer_amount": self.offer_amount,
            "status": self.status.value if isinstance(self.status, BidStatus) else self.status,
            "created_at": isoformat(self.created_at),
        }
        if include_payment:
            data["setup_intent_id"] = self.setup_intent_id
            data["payment_method_id"] = self.payment_method_id
        return data
