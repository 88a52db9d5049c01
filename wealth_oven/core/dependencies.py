"""
FastAPI Dependencies
"""
from typing import Iterator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from wealth_oven.infrastructure.cache import AuctionCache, get_auction_cache as _get_auction_cache
from wealth_oven.infrastructure.database import get_db
from wealth_oven.infrastructure.stripe_client import StripeClient
from wealth_oven.models import User
from wealth_oven.services.payment_service import PaymentService
from wealth_oven.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_auction_cache() -> AuctionCache:
    """Get auction cache"""
    return _get_auction_cache()


def get_stripe_client() -> Iterator[StripeClient]:
    """Per-request Stripe client"""
    client = StripeClient()
    try:
        yield client
    finally:
        client.close()


def get_payment_service(stripe_client: StripeClient = Depends(get_stripe_client)) -> PaymentService:
    return PaymentService(stripe_client)


def get_session_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_optional_user(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Signed-in user or None (public forms)"""
    if not token:
        return None
    return UserService.get_user_for_token(token, db)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Signed-in user; 401 otherwise"""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Admin-only routes; 403 for everyone else"""
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
