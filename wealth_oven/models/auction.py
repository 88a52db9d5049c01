"""
Auction Model
"""
import enum

from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from wealth_oven.models.base import Base, enum_column_type, generate_id, isoformat, utcnow
from wealth_oven.models.catalog import auction_tags


class AuctionStatus(str, enum.Enum):
    """Auction status enum"""
    DRAFT = "draft"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"
    SOLD = "sold"


AUCTION_TRANSITIONS = {
    AuctionStatus.DRAFT: {AuctionStatus.UPCOMING, AuctionStatus.ACTIVE},
    AuctionStatus.UPCOMING: {AuctionStatus.ACTIVE, AuctionStatus.ENDED, AuctionStatus.DRAFT},
    AuctionStatus.ACTIVE: {AuctionStatus.ENDED, AuctionStatus.SOLD},
    AuctionStatus.ENDED: set(),
    AuctionStatus.SOLD: set(),
}


class Auction(Base):
    """Auction database model"""

    __tablename__ = "auctions"

    id = Column(String(36), primary_key=True, default=generate_id)
    funnel_id = Column(String(36), ForeignKey("funnels.id", ondelete="SET NULL"), nullable=True, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(enum_column_type(AuctionStatus), nullable=False, default=AuctionStatus.DRAFT, index=True)
    starting_price = Column(Float, nullable=False)
    reserve_price = Column(Float, nullable=True)
    current_price = Column(Float, nullable=False)
    min_increment = Column(Float, nullable=False, default=25.0)
    buy_now_price = Column(Float, nullable=True)
    winning_bid_id = Column(String(36), nullable=True)
    winner_id = Column(String(36), nullable=True, index=True)
    total_bids = Column(Integer, nullable=False, default=0)
    starts_at = Column(DateTime, nullable=False, default=utcnow)
    ends_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    funnel = relationship("Funnel", lazy="joined")
    category = relationship("Category", lazy="joined")
    tags = relationship("Tag", secondary=auction_tags, lazy="selectin")

    @property
    def minimum_bid(self) -> float:
        """Lowest amount the next bid may have"""
        return self.current_price + self.min_increment

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "id": self.id,
            "funnel_id": self.funnel_id,
            "category_id": self.category_id,
            "title": self.title or (self.funnel.title if self.funnel else None),
            "description": self.description,
            "status": self.status.value if isinstance(self.status, AuctionStatus) else self.status,
            "starting_price": self.starting_price,
            "reserve_price": self.reserve_price,
            "current_price": self.current_price,
            "min_increment": self.min_increment,
            "minimum_bid": self.minimum_bid,
            "buy_now_price": self.buy_now_price,
            "winning_bid_id": self.winning_bid_id,
            "winner_id": self.winner_id,
            "total_bids": self.total_bids,
            "starts_at": isoformat(self.starts_at),
            "ends_at": isoformat(self.ends_at),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "tags": [tag.name for tag in self.tags],
        }
