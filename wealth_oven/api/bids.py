"""
Bid API Routes - bids, buy-now and offers
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from wealth_oven.core.config import get_settings
from wealth_oven.core.dependencies import get_auction_cache, get_current_user, get_payment_service
from wealth_oven.infrastructure.cache import AuctionCache
from wealth_oven.infrastructure.database import get_db
from wealth_oven.middleware.rate_limiter import limiter
from wealth_oven.models import User
from wealth_oven.schemas.auction import BidCreate, OfferCreate
from wealth_oven.services import AuctionService, BidResult, BidService, PaymentService
from wealth_oven.services.bid_service import NOT_FOUND

router = APIRouter(prefix="/auctions", tags=["bids"])

settings = get_settings()


def bid_response(result: BidResult) -> dict:
    """Map a BidResult to the response body or an HTTP error"""
    if not result.success:
        raise HTTPException(
            status_code=404 if result.reason == NOT_FOUND else 400,
            detail={"reason": result.reason, "error": result.error, "auction": result.auction},
        )
    return {"success": True, "auction": result.auction, "bid": result.bid}


@router.get("/{auction_id}/bids")
def get_bid_history(auction_id: str, limit: int = 50, db: Session = Depends(get_db)):
    bids = AuctionService.get_bid_history(auction_id, db, limit=limit)
    return {"auction_id": auction_id, "total": len(bids), "bids": bids}


@router.post("/{auction_id}/bids", status_code=201)
@limiter.limit(settings.RATE_LIMIT_BIDS)
def place_bid(
    request: Request,
    auction_id: str,
    bid: BidCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """
    Place a bid

    Requires amount >= current price + minimum increment and, when payment
    authorization is enforced, a saved card (setup intent id).
    """
    result = BidService.place_bid(
        auction_id=auction_id,
        bidder_id=user.id,
        amount=bid.amount,
        db=db,
        payment_authorization_id=bid.payment_authorization_id,
        payment_method_id=bid.payment_method_id,
        payment_service=payment_service,
        cache=cache,
    )
    return bid_response(result)


@router.post("/{auction_id}/buy-now")
@limiter.limit(settings.RATE_LIMIT_BIDS)
def buy_now(
    request: Request,
    auction_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    result = BidService.buy_now(auction_id, user.id, db, cache=cache)
    return bid_response(result)


@router.post("/{auction_id}/offers", status_code=201)
@limiter.limit(settings.RATE_LIMIT_BIDS)
def submit_offer(
    request: Request,
    auction_id: str,
    offer: OfferCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = BidService.submit_offer(auction_id, user.id, offer.offer_amount, db)
    return bid_response(result)
