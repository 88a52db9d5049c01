"""
Strategy call booking model
"""
from sqlalchemy import Column, String, DateTime, ForeignKey

from wealth_oven.models.base import Base, generate_id, isoformat, utcnow


class StrategyCallBooking(Base):
    __tablename__ = "strategy_call_bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    email = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=True)
    name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    preferred_date = Column(String(20), nullable=False)  # YYYY-MM-DD
    preferred_time_slot = Column(String(40), nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "email": self.email,
            "phone_number": self.phone_number,
            "name": self.name,
            "company": self.company,
            "preferred_date": self.preferred_date,
            "preferred_time_slot": self.preferred_time_slot,
            "timezone": self.timezone,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
