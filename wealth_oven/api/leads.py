"""
Lead capture API Routes - custom builds, strategy calls, newsletter
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wealth_oven.core.dependencies import get_optional_user
from wealth_oven.infrastructure.database import get_db
from wealth_oven.models import User
from wealth_oven.schemas.requests import CustomRequestCreate, LeadCreate, StrategyCallCreate
from wealth_oven.services import CustomRequestService, LeadService, StrategyCallService

router = APIRouter(tags=["leads"])


@router.post("/custom-request", status_code=201)
def create_custom_request(request: CustomRequestCreate, db: Session = Depends(get_db)):
    custom_request = CustomRequestService.create_request(request.model_dump(), db)
    return {"success": True, "request": custom_request.to_dict()}


@router.post("/strategy-call", status_code=201)
def book_strategy_call(
    request: StrategyCallCreate,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    booking = StrategyCallService.create_booking(
        request.model_dump(),
        db,
        user_id=user.id if user else None,
    )
    return {"success": True, "booking": booking.to_dict()}


@router.post("/leads", status_code=201)
def create_lead(request: LeadCreate, db: Session = Depends(get_db)):
    lead = LeadService.create_lead(request.model_dump(), db)
    return {"success": True, "lead": lead.to_dict()}
