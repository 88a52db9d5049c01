"""
Admin Service - dashboard figures
"""
from typing import Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from wealth_oven.models import (
    Auction,
    AuctionStatus,
    CustomRequest,
    CustomRequestStatus,
    Lead,
    PaymentStatus,
    Purchase,
)


class AdminService:

    @staticmethod
    def get_stats(db: Session) -> Dict:
        total_revenue = (
            db.query(func.coalesce(func.sum(Purchase.amount), 0.0))
            .filter(Purchase.payment_status == PaymentStatus.COMPLETED)
            .scalar()
        )

        return {
            "total_leads": db.query(func.count(Lead.id)).scalar() or 0,
            "total_requests": db.query(func.count(CustomRequest.id)).scalar() or 0,
            "pending_requests": db.query(func.count(CustomRequest.id))
            .filter(CustomRequest.status == CustomRequestStatus.PENDING)
            .scalar() or 0,
            "total_revenue": float(total_revenue or 0.0),
            "active_auctions": db.query(func.count(Auction.id))
            .filter(Auction.status == AuctionStatus.ACTIVE)
            .scalar() or 0,
            "total_purchases": db.query(func.count(Purchase.id)).scalar() or 0,
        }
