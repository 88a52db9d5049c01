"""
Categories and tags
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Table

from wealth_oven.models.base import Base, generate_id, isoformat, utcnow

auction_tags = Table(
    "auction_tags",
    Base.metadata,
    Column("auction_id", String(36), ForeignKey("auctions.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(120), nullable=False, unique=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class Tag(Base):
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(80), nullable=False, unique=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name}
