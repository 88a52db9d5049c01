"""
Auction Cache - auction snapshots for the listing and detail pages

Short TTL; every write to an auction (bid, buy-now, status change, edit)
invalidates its entry.
"""
from typing import Optional, Dict, List

from sqlalchemy.orm import Session

from wealth_oven.infrastructure.cache.base_cache import BaseCache
from wealth_oven.models import Auction, AuctionStatus


class AuctionCache(BaseCache[Auction]):
    """Cache for auction entities"""

    def _get_key_prefix(self) -> str:
        return "auction"

    def _fetch_from_db(self, auction_id: str, db: Session) -> Optional[Auction]:
        return db.query(Auction).filter(Auction.id == auction_id).first()

    def _fetch_many_from_db(self, auction_ids: List[str], db: Session) -> Dict[str, Auction]:
        auctions = db.query(Auction).filter(Auction.id.in_(auction_ids)).all()
        return {auction.id: auction for auction in auctions}

    def _serialize(self, auction: Auction) -> Dict:
        return auction.to_dict()

    def warm_active(self, db: Session) -> int:
        """Warm cache with active auctions (startup)"""
        active_auctions = db.query(Auction).filter(Auction.status == AuctionStatus.ACTIVE).all()
        return self.warm(active_auctions)
