"""
Auction API Routes - public reads
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from wealth_oven.core.dependencies import get_auction_cache
from wealth_oven.infrastructure.cache import AuctionCache
from wealth_oven.infrastructure.database import get_db
from wealth_oven.services import AuctionService

router = APIRouter(prefix="/auctions", tags=["auctions"])


@router.get("")
def list_auctions(
    status: Optional[str] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    """List auctions, newest first"""
    auctions = AuctionService.list_auctions(db, status=status, limit=limit, cache=cache)
    return {"total": len(auctions), "auctions": auctions}


@router.get("/{auction_id}")
def get_auction(
    auction_id: str,
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    """Auction snapshot with its bid history"""
    auction = AuctionService.get_auction_by_id(auction_id, db, cache=cache)
    if not auction:
        raise HTTPException(status_code=404, detail="Auction not found")

    bids = auction.pop("bids")
    return {"auction": auction, "bids": bids, "bid_count": auction["total_bids"]}


@router.get("/{auction_id}/statistics")
def get_auction_statistics(auction_id: str, db: Session = Depends(get_db)):
    return AuctionService.get_auction_statistics(auction_id, db)
