"""
Dashboard API Routes - the signed-in user's activity
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wealth_oven.core.dependencies import get_current_user
from wealth_oven.infrastructure.database import get_db
from wealth_oven.models import User
from wealth_oven.services import (
    AuctionService,
    BidService,
    CustomRequestService,
    LeaseRequestService,
    PurchaseService,
    StrategyCallService,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def get_dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {
        "user": user.to_dict(),
        "bids": BidService.get_user_bids(user.id, db),
        "winning_auctions": AuctionService.get_winning_auctions(user.id, db),
        "purchases": PurchaseService.get_purchases_by_user(user.id, db),
        "custom_requests": [r.to_dict() for r in CustomRequestService.list_by_email(user.email, db)],
        "lease_requests": [r.to_dict() for r in LeaseRequestService.list_by_email(user.email, db)],
        "strategy_calls": [b.to_dict() for b in StrategyCallService.list_user_bookings(user.id, db)],
        "has_strategy_call": StrategyCallService.has_existing_bookings(user.id, db),
    }


@router.get("/bids")
def get_my_bids(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return BidService.get_user_bids(user.id, db)


@router.get("/purchases")
def get_my_purchases(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return PurchaseService.get_purchases_by_user(user.id, db)
