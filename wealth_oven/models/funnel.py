"""
Funnel Model - a sellable funnel product
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from wealth_oven.models.base import Base, generate_id, isoformat, utcnow


class Funnel(Base):
    """Funnel template referenced by auctions and purchases"""

    __tablename__ = "funnels"

    id = Column(String(36), primary_key=True, default=generate_id)
    funnel_id = Column(String(64), nullable=False, unique=True, index=True)  # public slug
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    is_available_for_lease = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship("Category", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "funnel_id": self.funnel_id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "category_id": self.category_id,
            "category": self.category.to_dict() if self.category else None,
            "is_available_for_lease": self.is_available_for_lease,
            "active": self.active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
