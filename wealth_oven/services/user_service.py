"""
User Service - signup, login sessions and role administration
"""
import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from wealth_oven.core.config import get_settings
from wealth_oven.core.security import generate_session_token, hash_password, verify_password
from wealth_oven.models import AuthSession, User, UserRole, utcnow
from wealth_oven.services.errors import ConflictError, NotFoundError, ValidationError
from wealth_oven.services.transitions import parse_status

logger = logging.getLogger(__name__)


class AuthenticationError(ValidationError):
    """Raised when credentials don't match"""
    status_code = 401


class UserService:

    # ==================== Auth ====================

    @staticmethod
    def signup(email: str, password: str, db: Session, display_name: Optional[str] = None) -> User:
        email = email.strip().lower()
        if db.query(User.id).filter(User.email == email).first():
            raise ConflictError("An account with this email already exists")

        user = User(
            email=email,
            display_name=display_name,
            role=UserRole.USER,
            password_hash=hash_password(password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info("User signed up", extra={"user_id": user.id})
        return user

    @staticmethod
    def login(email: str, password: str, db: Session) -> AuthSession:
        """
        Raises:
            AuthenticationError: unknown email or wrong password
        """
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        settings = get_settings()
        now = utcnow()
        session = AuthSession(
            token=generate_session_token(),
            user_id=user.id,
            created_at=now,
            expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
        )
        db.add(session)
        db.commit()
        db.refresh(session)

        logger.info("User logged in", extra={"user_id": user.id})
        return session

    @staticmethod
    def logout(token: str, db: Session) -> None:
        db.query(AuthSession).filter(AuthSession.token == token).delete(synchronize_session=False)
        db.commit()

    @staticmethod
    def get_user_for_token(token: str, db: Session) -> Optional[User]:
        """User behind a live session token, or None"""
        if not token:
            return None

        session = db.query(AuthSession).filter(AuthSession.token == token).first()
        if session is None:
            return None

        if session.expires_at <= utcnow():
            db.delete(session)
            db.commit()
            return None

        return session.user

    # ==================== Administration ====================

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.created_at.desc()).all()

    @staticmethod
    def search_users(q: str, db: Session) -> List[User]:
        pattern = f"%{q.strip().lower()}%"
        return (
            db.query(User)
            .filter(or_(func.lower(User.email).like(pattern), func.lower(User.display_name).like(pattern)))
            .order_by(User.created_at.desc())
            .all()
        )

    @staticmethod
    def get_user(user_id: str, db: Session) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update_role(user_id: str, role: str, db: Session) -> User:
        user = UserService.get_user(user_id, db)
        new_role = parse_status(UserRole, role)

        if user.role != new_role:
            user.role = new_role
            db.commit()
            db.refresh(user)
            logger.info(f"Role changed to {new_role.value}", extra={"user_id": user_id})
        return user
