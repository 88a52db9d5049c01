"""
Purchase model - a completed (or attempted) transaction
"""
import enum

from sqlalchemy import Column, String, Float, DateTime, ForeignKey

from wealth_oven.models.base import Base, enum_column_type, generate_id, isoformat, utcnow


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PurchaseNote(str, enum.Enum):
    """What was bought"""
    AUCTION = "auction"
    BUY_NOW = "buy_now"
    DIRECT_SALE = "direct_sale"


class PurchaseType(str, enum.Enum):
    """Payment provider"""
    STRIPE = "stripe"
    PAYPAL = "paypal"


PURCHASE_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
}


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(String(36), primary_key=True, default=generate_id)
    note = Column(enum_column_type(PurchaseNote), nullable=False)
    funnel_id = Column(String(36), ForeignKey("funnels.id", ondelete="SET NULL"), nullable=True, index=True)
    auction_id = Column(String(36), ForeignKey("auctions.id", ondelete="SET NULL"), nullable=True)
    buyer_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    amount = Column(Float, nullable=False)
    payment_status = Column(enum_column_type(PaymentStatus), nullable=False, default=PaymentStatus.PENDING, index=True)
    type = Column(enum_column_type(PurchaseType), nullable=False, default=PurchaseType.STRIPE)
    stripe_payment_intent_id = Column(String(255), nullable=True, unique=True)
    paypal_order_id = Column(String(255), nullable=True)
    paypal_transaction_id = Column(String(255), nullable=True)
    provider_fee = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "note": self.note.value if isinstance(self.note, PurchaseNote) else self.note,
            "funnel_id": self.funnel_id,
            "auction_id": self.auction_id,
            "buyer_id": self.buyer_id,
            "amount": self.amount,
            "payment_status": (
                self.payment_status.value if isinstance(self.payment_status, PaymentStatus) else self.payment_status
            ),
            "type": self.type.value if isinstance(self.type, PurchaseType) else self.type,
            "stripe_payment_intent_id": self.stripe_payment_intent_id,
            "paypal_order_id": self.paypal_order_id,
            "paypal_transaction_id": self.paypal_transaction_id,
            "provider_fee": self.provider_fee,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
