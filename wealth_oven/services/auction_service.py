"""
Auction Service - Business Logic

Handles:
- Auction queries (through the read cache)
- Admin create / update / delete
- Status transitions and expiry
- Auction statistics
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from wealth_oven.core.config import get_settings
from wealth_oven.infrastructure.cache import AuctionCache
from wealth_oven.models import (
    Auction,
    AuctionStatus,
    Bid,
    BidStatus,
    Funnel,
    Tag,
    utcnow,
)
from wealth_oven.models.auction import AUCTION_TRANSITIONS
from wealth_oven.models.base import to_naive_utc
from wealth_oven.services.errors import NotFoundError, ValidationError
from wealth_oven.services.transitions import apply_transition, parse_status

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "funnel_id",
    "category_id",
    "title",
    "description",
    "reserve_price",
    "min_increment",
    "buy_now_price",
    "starts_at",
    "ends_at",
)


class AuctionService:
    """
    Service for auction-related business logic

    Every write invalidates the auction's cache entry when a cache is given.
    """

    # ==================== Queries ====================

    @staticmethod
    def get_auction_by_id(
        auction_id: str,
        db: Session,
        cache: Optional[AuctionCache] = None,
        bid_limit: int = 50,
    ) -> Optional[Dict]:
        """
        Auction snapshot plus its bids, newest first

        Returns:
            Auction dict with a "bids" list, or None if not found
        """
        AuctionService.refresh_statuses(db, cache)

        if cache is not None:
            auction_data = cache.get(auction_id, db)
        else:
            auction = db.query(Auction).filter(Auction.id == auction_id).first()
            auction_data = auction.to_dict() if auction else None

        if not auction_data:
            return None

        result = dict(auction_data)
        result["bids"] = AuctionService.get_bid_history(auction_id, db, limit=bid_limit)
        return result

    @staticmethod
    def get_bid_history(auction_id: str, db: Session, limit: int = 50) -> List[Dict]:
        """Regular bids for an auction, newest first (offers excluded)"""
        bids = (
            db.query(Bid)
            .filter(Bid.auction_id == auction_id, Bid.status != BidStatus.PENDING_OFFER)
            .order_by(Bid.created_at.desc())
            .limit(limit)
            .all()
        )
        return [bid.to_dict(include_payment=False) for bid in bids]

    @staticmethod
    def list_auctions(
        db: Session,
        status: Optional[str] = None,
        limit: Optional[int] = 50,
        cache: Optional[AuctionCache] = None,
    ) -> List[Dict]:
        """
        List auctions newest first

        Statuses are refreshed before listing so an expired auction never
        shows as active.
        """
        AuctionService.refresh_statuses(db, cache)

        query = db.query(Auction.id)
        if status:
            query = query.filter(Auction.status == parse_status(AuctionStatus, status))

        query = query.order_by(Auction.created_at.desc())
        if limit:
            query = query.limit(limit)

        auction_ids = [row[0] for row in query.all()]
        if not auction_ids:
            return []

        if cache is not None:
            auctions_by_id = cache.get_many(auction_ids, db)
        else:
            auctions = db.query(Auction).filter(Auction.id.in_(auction_ids)).all()
            auctions_by_id = {auction.id: auction.to_dict() for auction in auctions}

        return [auctions_by_id[aid] for aid in auction_ids if aid in auctions_by_id]

    @staticmethod
    def list_buy_now_auctions(db: Session) -> List[Dict]:
        """Active auctions that can be bought outright"""
        AuctionService.refresh_statuses(db)

        auctions = (
            db.query(Auction)
            .filter(Auction.status == AuctionStatus.ACTIVE, Auction.buy_now_price.isnot(None))
            .order_by(Auction.ends_at.asc())
            .all()
        )
        return [auction.to_dict() for auction in auctions]

    @staticmethod
    def get_winning_auctions(user_id: str, db: Session) -> List[Dict]:
        """Auctions the user currently leads or has won"""
        auctions = (
            db.query(Auction)
            .filter(Auction.winner_id == user_id)
            .order_by(Auction.updated_at.desc())
            .all()
        )
        return [auction.to_dict() for auction in auctions]

    @staticmethod
    def get_auction_statistics(auction_id: str, db: Session) -> Dict:
        """
        Bid statistics for one auction

        Raises:
            NotFoundError: If the auction doesn't exist
        """
        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        if not auction:
            raise NotFoundError("Auction not found")

        bids = (
            db.query(Bid)
            .filter(Bid.auction_id == auction_id, Bid.status == BidStatus.CONFIRMED)
            .all()
        )

        price_increase = auction.current_price - auction.starting_price
        if bids:
            unique_bidders = len(set(bid.bidder_id for bid in bids))
            average_bid = sum(bid.amount for bid in bids) / len(bids)
        else:
            unique_bidders = 0
            average_bid = 0

        status = AuctionStatus(auction.status)
        if status == AuctionStatus.ACTIVE:
            time_remaining = max(0, int((auction.ends_at - utcnow()).total_seconds()))
        else:
            time_remaining = 0

        return {
            "auction_id": auction_id,
            "status": status.value,
            "total_bids": auction.total_bids,
            "unique_bidders": unique_bidders,
            "starting_price": auction.starting_price,
            "current_price": auction.current_price,
            "price_increase": price_increase,
            "price_increase_percent": round(price_increase / auction.starting_price * 100, 2),
            "average_bid": round(average_bid, 2),
            "time_remaining_seconds": time_remaining,
        }

    # ==================== Admin writes ====================

    @staticmethod
    def create_auction(db: Session, **fields: Any) -> Auction:
        """
        Create an auction

        Business rules:
        - Starting price and min increment must be positive
        - Ends after it starts
        - Buy-now price, when given, exceeds the starting price

        Raises:
            ValidationError: If validation fails
        """
        settings = get_settings()

        starting_price = fields.get("starting_price")
        min_increment = fields.get("min_increment") or settings.DEFAULT_MIN_INCREMENT
        starts_at = to_naive_utc(fields.get("starts_at")) or utcnow()
        ends_at = to_naive_utc(fields.get("ends_at"))
        buy_now_price = fields.get("buy_now_price")
        status = parse_status(AuctionStatus, fields.get("status") or AuctionStatus.DRAFT)

        if starting_price is None or starting_price <= 0:
            raise ValidationError("Starting price must be positive")
        if min_increment <= 0:
            raise ValidationError("Minimum increment must be positive")
        if ends_at is None or ends_at <= starts_at:
            raise ValidationError("Auction must end after it starts")
        if buy_now_price is not None and buy_now_price <= starting_price:
            raise ValidationError("Buy-now price must exceed the starting price")
        if status in (AuctionStatus.ENDED, AuctionStatus.SOLD):
            raise ValidationError(f"Cannot create an auction with status '{status.value}'")

        funnel_id = fields.get("funnel_id")
        if funnel_id and not db.query(Funnel.id).filter(Funnel.id == funnel_id).first():
            raise ValidationError("Funnel not found")

        auction = Auction(
            funnel_id=funnel_id,
            category_id=fields.get("category_id"),
            title=fields.get("title"),
            description=fields.get("description"),
            status=status,
            starting_price=starting_price,
            reserve_price=fields.get("reserve_price"),
            current_price=starting_price,
            min_increment=min_increment,
            buy_now_price=buy_now_price,
            starts_at=starts_at,
            ends_at=ends_at,
            total_bids=0,
        )
        auction.tags = AuctionService._resolve_tags(fields.get("tags") or [], db)

        db.add(auction)
        db.commit()
        db.refresh(auction)

        logger.info(f"Created auction {auction.id}", extra={"auction_id": auction.id})
        return auction

    @staticmethod
    def update_auction(
        auction_id: str,
        fields: Dict[str, Any],
        db: Session,
        cache: Optional[AuctionCache] = None,
    ) -> Auction:
        """
        Update editable auction fields (prices and winner are bid-driven)

        Raises:
            NotFoundError, ValidationError
        """
        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        if not auction:
            raise NotFoundError("Auction not found")

        changes = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS}
        for key in ("starts_at", "ends_at"):
            if key in changes:
                changes[key] = to_naive_utc(changes[key])

        starts_at = changes.get("starts_at", auction.starts_at)
        ends_at = changes.get("ends_at", auction.ends_at)
        if ends_at is None or starts_at is None or ends_at <= starts_at:
            raise ValidationError("Auction must end after it starts")

        buy_now_price = changes.get("buy_now_price", auction.buy_now_price)
        if buy_now_price is not None and buy_now_price <= auction.starting_price:
            raise ValidationError("Buy-now price must exceed the starting price")

        if "min_increment" in changes and (changes["min_increment"] is None or changes["min_increment"] <= 0):
            raise ValidationError("Minimum increment must be positive")

        for key, value in changes.items():
            setattr(auction, key, value)

        if fields.get("tags") is not None:
            auction.tags = AuctionService._resolve_tags(fields["tags"], db)

        db.commit()
        db.refresh(auction)

        if cache is not None:
            cache.invalidate(auction_id)

        logger.info(f"Updated auction {auction_id}", extra={"auction_id": auction_id})
        return auction

    @staticmethod
    def delete_auction(auction_id: str, db: Session, cache: Optional[AuctionCache] = None) -> None:
        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        if not auction:
            raise NotFoundError("Auction not found")

        db.query(Bid).filter(Bid.auction_id == auction_id).delete(synchronize_session=False)
        db.delete(auction)
        db.commit()

        if cache is not None:
            cache.invalidate(auction_id)

        logger.info(f"Deleted auction {auction_id}", extra={"auction_id": auction_id})

    @staticmethod
    def change_status(
        auction_id: str,
        new_status: str,
        db: Session,
        cache: Optional[AuctionCache] = None,
    ) -> Auction:
        """
        Move an auction through its lifecycle

        Raises:
            NotFoundError, ValidationError, InvalidTransitionError
        """
        auction = db.query(Auction).filter(Auction.id == auction_id).first()
        if not auction:
            raise NotFoundError("Auction not found")

        previous = AuctionStatus(auction.status)
        if not apply_transition(auction, new_status, AUCTION_TRANSITIONS, AuctionStatus):
            return auction

        db.commit()
        db.refresh(auction)

        if cache is not None:
            cache.invalidate(auction_id)

        logger.info(
            f"Auction {auction_id} status {previous.value} -> {AuctionStatus(auction.status).value}",
            extra={"auction_id": auction_id},
        )
        return auction

    # ==================== Expiry ====================

    @staticmethod
    def expire_auctions(db: Session, cache: Optional[AuctionCache] = None, now: Optional[datetime] = None) -> int:
        """
        End every active auction past its end time

        Returns:
            Number of auctions expired
        """
        now = now or utcnow()

        expired_ids = [
            row[0]
            for row in db.query(Auction.id)
            .filter(Auction.status == AuctionStatus.ACTIVE, Auction.ends_at <= now)
            .all()
        ]
        if not expired_ids:
            return 0

        db.execute(
            update(Auction)
            .where(
                Auction.id.in_(expired_ids),
                Auction.status == AuctionStatus.ACTIVE,
                Auction.ends_at <= now,
            )
            .values(status=AuctionStatus.ENDED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()

        if cache is not None:
            cache.invalidate_many(expired_ids)

        logger.info(f"Expired {len(expired_ids)} auctions")
        return len(expired_ids)

    @staticmethod
    def activate_started_auctions(
        db: Session,
        cache: Optional[AuctionCache] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Open every upcoming auction whose start time has passed"""
        now = now or utcnow()

        started_ids = [
            row[0]
            for row in db.query(Auction.id)
            .filter(
                Auction.status == AuctionStatus.UPCOMING,
                Auction.starts_at <= now,
                Auction.ends_at > now,
            )
            .all()
        ]
        if not started_ids:
            return 0

        db.execute(
            update(Auction)
            .where(Auction.id.in_(started_ids), Auction.status == AuctionStatus.UPCOMING)
            .values(status=AuctionStatus.ACTIVE, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()

        if cache is not None:
            cache.invalidate_many(started_ids)

        logger.info(f"Activated {len(started_ids)} auctions")
        return len(started_ids)

    @staticmethod
    def refresh_statuses(db: Session, cache: Optional[AuctionCache] = None) -> None:
        now = utcnow()
        AuctionService.activate_started_auctions(db, cache, now)
        AuctionService.expire_auctions(db, cache, now)

    # ==================== Helpers ====================

    @staticmethod
    def _resolve_tags(names: List[str], db: Session) -> List[Tag]:
        """Look up tags by name, creating the missing ones"""
        tags = []
        for name in dict.fromkeys(n.strip() for n in names if n and n.strip()):
            tag = db.query(Tag).filter(Tag.name == name).first()
            if tag is None:
                tag = Tag(name=name)
                db.add(tag)
            tags.append(tag)
        return tags
