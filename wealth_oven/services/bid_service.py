"""
Bid Service - Business Logic

Handles:
- Bid validation and placement
- Buy-now
- Offers (make-an-offer flow)
- Bid history per user

Placement never raises for business-rule failures: callers get a BidResult
whose `reason` says why the bid was refused.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from wealth_oven.core.config import get_settings
from wealth_oven.core.metrics import bids_total, buy_now_total, offers_total
from wealth_oven.infrastructure.cache import AuctionCache
from wealth_oven.models import Auction, AuctionStatus, Bid, BidStatus, generate_id, utcnow

if TYPE_CHECKING:
    from wealth_oven.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

# Failure reasons
NOT_FOUND = "not_found"
AUCTION_INACTIVE = "auction_inactive"
AUCTION_ENDED = "auction_ended"
BID_TOO_LOW = "bid_too_low"
PAYMENT_UNAUTHORIZED = "payment_unauthorized"
BUY_NOW_UNAVAILABLE = "buy_now_unavailable"
OFFER_TOO_LOW = "offer_too_low"


@dataclass
class BidResult:
    """Outcome of a bid, buy-now or offer"""
    success: bool
    reason: Optional[str] = None
    error: Optional[str] = None
    auction: Optional[Dict] = None
    bid: Optional[Dict] = None

    @classmethod
    def rejected(cls, reason: str, error: str, auction: Optional[Auction] = None) -> "BidResult":
        return cls(
            success=False,
            reason=reason,
            error=error,
            auction=auction.to_dict() if auction is not None else None,
        )


class BidService:
    """Service for bid-related business logic"""

    @staticmethod
    def minimum_bid(auction: Auction) -> float:
        """Lowest acceptable next bid"""
        return auction.current_price + auction.min_increment

    @staticmethod
    def _check_open(auction: Optional[Auction], now) -> Optional[BidResult]:
        """Shared guards: exists, active, not past its end"""
        if auction is None:
            return BidResult.rejected(NOT_FOUND, "Auction not found")

        status = AuctionStatus(auction.status)
        if status != AuctionStatus.ACTIVE:
            return BidResult.rejected(AUCTION_INACTIVE, f"Auction is {status.value}", auction)

        if now >= auction.ends_at:
            return BidResult.rejected(AUCTION_ENDED, "Auction has ended", auction)

        return None

    @staticmethod
    def _classify_failure(auction_id: str, amount: float, db: Session) -> BidResult:
        """Re-read after a lost conditional update to report the precise reason"""
        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        failure = BidService._check_open(auction, utcnow())
        if failure:
            return failure

        minimum = BidService.minimum_bid(auction)
        return BidResult.rejected(BID_TOO_LOW, f"Bid must be at least ${minimum:,.2f}", auction)

    @staticmethod
    def place_bid(
        auction_id: str,
        bidder_id: str,
        amount: float,
        db: Session,
        payment_authorization_id: Optional[str] = None,
        payment_method_id: Optional[str] = None,
        payment_service: Optional["PaymentService"] = None,
        cache: Optional[AuctionCache] = None,
    ) -> BidResult:
        """
        Place a bid

        Checks, in order:
        1. Auction exists
        2. Auction is active
        3. Auction not past its end time
        4. amount >= current_price + min_increment
        5. Payment authorization usable (when required)

        The price update is a single conditional UPDATE in the same
        transaction as the bid insert; a concurrent higher bid makes it
        match zero rows and this bid is rejected.
        """
        settings = get_settings()
        now = utcnow()

        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        failure = BidService._check_open(auction, now)
        if failure is None and amount < BidService.minimum_bid(auction):
            minimum = BidService.minimum_bid(auction)
            failure = BidResult.rejected(BID_TOO_LOW, f"Bid must be at least ${minimum:,.2f}", auction)

        if failure is None and settings.REQUIRE_PAYMENT_AUTHORIZATION:
            authorized = bool(payment_authorization_id) and payment_service is not None and \
                payment_service.verify_authorization(
                    payment_authorization_id, bidder_id=bidder_id, auction_id=auction_id
                )
            if not authorized:
                failure = BidResult.rejected(
                    PAYMENT_UNAUTHORIZED,
                    "A valid payment authorization is required to bid",
                    auction,
                )

        if failure:
            bids_total.labels(failure.reason).inc()
            logger.info(
                f"Bid rejected ({failure.reason}): {failure.error}",
                extra={"auction_id": auction_id, "user_id": bidder_id},
            )
            return failure

        bid = Bid(
            id=generate_id(),
            auction_id=auction_id,
            bidder_id=bidder_id,
            amount=amount,
            status=BidStatus.CONFIRMED,
            setup_intent_id=payment_authorization_id,
            payment_method_id=payment_method_id,
            created_at=now,
        )

        result = db.execute(
            update(Auction)
            .where(
                Auction.id == auction_id,
                Auction.status == AuctionStatus.ACTIVE,
                Auction.ends_at > now,
                Auction.current_price + Auction.min_increment <= amount,
            )
            .values(
                current_price=amount,
                winning_bid_id=bid.id,
                winner_id=bidder_id,
                total_bids=Auction.total_bids + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            db.rollback()
            failure = BidService._classify_failure(auction_id, amount, db)
            bids_total.labels(failure.reason).inc()
            logger.info(
                f"Bid lost race ({failure.reason})",
                extra={"auction_id": auction_id, "user_id": bidder_id},
            )
            return failure

        db.add(bid)
        db.commit()

        if cache is not None:
            cache.invalidate(auction_id)

        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        bids_total.labels("accepted").inc()
        logger.info(
            f"Bid accepted: ${amount:,.2f}",
            extra={"auction_id": auction_id, "user_id": bidder_id, "bid_id": bid.id},
        )
        return BidResult(success=True, auction=auction.to_dict(), bid=bid.to_dict())

    @staticmethod
    def buy_now(
        auction_id: str,
        buyer_id: str,
        db: Session,
        cache: Optional[AuctionCache] = None,
    ) -> BidResult:
        """
        Buy an auction outright at its buy-now price

        Marks the auction sold, records the winner and closes it; no bid row
        is written. Payment is collected separately through the payments API.
        """
        now = utcnow()
        auction = db.query(Auction).filter(Auction.id == auction_id).first()

        if auction is not None and auction.buy_now_price is None:
            failure = BidResult.rejected(BUY_NOW_UNAVAILABLE, "This auction has no buy-now price", auction)
        else:
            failure = BidService._check_open(auction, now)

        if failure is None:
            result = db.execute(
                update(Auction)
                .where(
                    Auction.id == auction_id,
                    Auction.status == AuctionStatus.ACTIVE,
                    Auction.ends_at > now,
                    Auction.buy_now_price.isnot(None),
                )
                .values(
                    status=AuctionStatus.SOLD,
                    winner_id=buyer_id,
                    winning_bid_id=None,
                    current_price=Auction.buy_now_price,
                    ends_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                db.rollback()
                auction = db.query(Auction).filter(Auction.id == auction_id).first()
                failure = BidService._check_open(auction, utcnow()) or BidResult.rejected(
                    AUCTION_INACTIVE, "Auction is no longer available", auction
                )

        if failure:
            buy_now_total.labels(failure.reason).inc()
            logger.info(
                f"Buy-now rejected ({failure.reason})",
                extra={"auction_id": auction_id, "user_id": buyer_id},
            )
            return failure

        db.commit()

        if cache is not None:
            cache.invalidate(auction_id)

        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        buy_now_total.labels("accepted").inc()
        logger.info(
            f"Auction bought now for ${auction.current_price:,.2f}",
            extra={"auction_id": auction_id, "user_id": buyer_id},
        )
        return BidResult(success=True, auction=auction.to_dict())

    @staticmethod
    def submit_offer(
        auction_id: str,
        bidder_id: str,
        offer_amount: float,
        db: Session,
    ) -> BidResult:
        """
        Record a private offer for admin review

        Offers don't move the auction price; they are stored as bids with
        status pending_offer.
        """
        settings = get_settings()
        auction = db.query(Auction).filter(Auction.id == auction_id).first()

        failure = None
        if auction is None:
            failure = BidResult.rejected(NOT_FOUND, "Auction not found")
        elif AuctionStatus(auction.status) in (AuctionStatus.ENDED, AuctionStatus.SOLD):
            failure = BidResult.rejected(
                AUCTION_INACTIVE, f"Auction is {AuctionStatus(auction.status).value}", auction
            )
        elif offer_amount < settings.MIN_OFFER_AMOUNT:
            failure = BidResult.rejected(
                OFFER_TOO_LOW,
                f"Offers must be at least ${settings.MIN_OFFER_AMOUNT:,.2f}",
                auction,
            )

        if failure:
            offers_total.labels(failure.reason).inc()
            return failure

        bid = Bid(
            auction_id=auction_id,
            bidder_id=bidder_id,
            amount=offer_amount,
            offer_amount=offer_amount,
            status=BidStatus.PENDING_OFFER,
        )
        db.add(bid)
        db.commit()
        db.refresh(bid)

        offers_total.labels("accepted").inc()
        logger.info(
            f"Offer recorded: ${offer_amount:,.2f}",
            extra={"auction_id": auction_id, "user_id": bidder_id, "bid_id": bid.id},
        )
        return BidResult(success=True, auction=auction.to_dict(), bid=bid.to_dict())

    @staticmethod
    def get_user_bids(user_id: str, db: Session, limit: int = 50) -> List[Dict]:
        """All bids and offers by a user, newest first, with the auction title"""
        rows = (
            db.query(Bid, Auction)
            .join(Auction, Auction.id == Bid.auction_id)
            .filter(Bid.bidder_id == user_id)
            .order_by(Bid.created_at.desc())
            .limit(limit)
            .all()
        )

        result = []
        for bid, auction in rows:
            bid_data = bid.to_dict()
            bid_data["auction_title"] = auction.to_dict()["title"]
            bid_data["auction_status"] = AuctionStatus(auction.status).value
            bid_data["is_winning"] = auction.winning_bid_id == bid.id
            result.append(bid_data)
        return result

    @staticmethod
    def list_offers(db: Session) -> List[Dict]:
        """Pending offers across all auctions (admin)"""
        offers = (
            db.query(Bid)
            .filter(Bid.offer_amount.isnot(None))
            .order_by(Bid.created_at.desc())
            .all()
        )
        return [offer.to_dict() for offer in offers]
