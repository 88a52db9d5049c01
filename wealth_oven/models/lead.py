"""
Lead model - newsletter / contact captures
"""
from sqlalchemy import Column, String, DateTime

from wealth_oven.models.base import Base, generate_id, isoformat, utcnow


class Lead(Base):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(50), nullable=True)
    username = Column(String(120), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "phone_number": self.phone_number,
            "username": self.username,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
