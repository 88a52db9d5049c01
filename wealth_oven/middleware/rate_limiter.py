"""
Rate limiting using SlowAPI (bids, offers, buy-now)
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from wealth_oven.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def get_identifier(request: Request) -> str:
    """
    Rate limit key: the bearer token when present, else the client IP
    """
    authorization = request.headers.get("Authorization", "")
    if authorization.lower().startswith("bearer "):
        return f"token:{authorization[7:]}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """429 with Retry-After"""
    logger.warning(
        f"Rate limit exceeded for {request.url.path}",
        extra={"path": request.url.path},
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": "60"},
    )
