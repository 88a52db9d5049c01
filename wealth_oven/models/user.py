"""
User (profile) and login session models
"""
import enum

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from wealth_oven.models.base import Base, enum_column_type, generate_id, isoformat, utcnow


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """Account row; `role` gates the admin screens"""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    role = Column(enum_column_type(UserRole), nullable=False, default=UserRole.USER)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role.value if isinstance(self.role, UserRole) else self.role,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")
