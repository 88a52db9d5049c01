"""
Payment API Routes - Stripe setup/payment intents
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from wealth_oven.core.config import get_settings
from wealth_oven.core.dependencies import get_current_user, get_payment_service
from wealth_oven.infrastructure.database import get_db
from wealth_oven.models import Auction, User
from wealth_oven.schemas.payment import ConfirmPaymentRequest, PaymentIntentRequest, SetupIntentRequest
from wealth_oven.services import PaymentResult, PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


def payment_response(result: PaymentResult) -> dict:
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.to_dict()


@router.post("/setup-intent")
def create_setup_intent(
    request: SetupIntentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Save a card before bidding"""
    if not db.query(Auction.id).filter(Auction.id == request.auction_id).first():
        raise HTTPException(status_code=404, detail="Auction not found")
    return payment_response(payment_service.create_setup_intent(request.auction_id, user.id))


@router.post("/payment-intent")
def create_payment_intent(
    request: PaymentIntentRequest,
    user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
):
    metadata = {"buyer_id": user.id, "type": request.note}
    if request.funnel_id:
        metadata["funnel_id"] = request.funnel_id
    if request.auction_id:
        metadata["auction_id"] = request.auction_id

    return payment_response(
        payment_service.create_payment_intent(request.amount, currency=request.currency, metadata=metadata)
    )


@router.post("/confirm")
def confirm_payment(
    request: ConfirmPaymentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Confirm the intent and record the purchase"""
    result = payment_service.confirm_payment(
        request.payment_intent_id, db, metadata=dict(request.metadata), buyer_id=user.id
    )
    return payment_response(result)


@router.get("/{payment_intent_id}/status")
def get_payment_status(
    payment_intent_id: str,
    wait: bool = False,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Current status; `wait=true` polls briefly until it settles"""
    if wait:
        settings = get_settings()
        max_attempts = min(settings.PAYMENT_POLL_HTTP_MAX_ATTEMPTS, settings.PAYMENT_POLL_MAX_ATTEMPTS)
        result = payment_service.wait_for_terminal_status(payment_intent_id, db, max_attempts=max_attempts)
    else:
        result = payment_service.verify_payment_status(payment_intent_id, db)
    return payment_response(result)
