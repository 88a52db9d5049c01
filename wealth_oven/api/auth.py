"""
Auth API Routes - signup, login, logout, me
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wealth_oven.core.dependencies import get_current_user, get_session_token
from wealth_oven.infrastructure.database import get_db
from wealth_oven.models import User
from wealth_oven.models.base import isoformat
from wealth_oven.schemas.user import LoginRequest, SignupRequest
from wealth_oven.services import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=201)
def signup(request: SignupRequest, db: Session = Depends(get_db)):
    """Create an account"""
    user = UserService.signup(
        email=request.email,
        password=request.password,
        display_name=request.display_name,
        db=db,
    )
    return {"success": True, "user": user.to_dict()}


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Exchange credentials for a bearer token"""
    session = UserService.login(request.email, request.password, db)
    return {
        "access_token": session.token,
        "token_type": "bearer",
        "expires_at": isoformat(session.expires_at),
        "user": session.user.to_dict(),
    }


@router.post("/logout")
def logout(
    token: str = Depends(get_session_token),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    UserService.logout(token, db)
    return {"success": True}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return user.to_dict()
