"""
Lead Service - newsletter leads and the combined lead-source view
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from wealth_oven.models import Bid, CustomRequest, Lead, User
from wealth_oven.models.base import isoformat

logger = logging.getLogger(__name__)


class LeadService:

    @staticmethod
    def create_lead(data: Dict[str, Any], db: Session) -> Lead:
        lead = Lead(
            email=data["email"],
            phone_number=data.get("phone_number"),
            username=data.get("username"),
        )
        db.add(lead)
        db.commit()
        db.refresh(lead)
        logger.info("Lead captured", extra={"request_id": lead.id})
        return lead

    @staticmethod
    def list_leads(db: Session) -> List[Lead]:
        return db.query(Lead).order_by(Lead.created_at.desc()).all()

    @staticmethod
    def get_lead_sources(db: Session) -> List[Dict]:
        """
        Custom requests and offer bids merged into one list, newest first
        """
        sources = []

        for request in db.query(CustomRequest).all():
            sources.append({
                "id": request.id,
                "source": "custom_request",
                "name": request.name,
                "email": request.email,
                "phone": request.phone,
                "company": request.company,
                "project_type": request.project_type,
                "budget": request.budget,
                "status": request.to_dict()["status"],
                "offer_amount": None,
                "auction_id": None,
                "created_at": request.created_at,
            })

        offers = (
            db.query(Bid, User)
            .outerjoin(User, User.id == Bid.bidder_id)
            .filter(Bid.offer_amount.isnot(None))
            .all()
        )
        for bid, user in offers:
            sources.append({
                "id": bid.id,
                "source": "bid_offer",
                "name": (user.display_name if user else None) or "Unknown",
                "email": user.email if user else "Unknown",
                "phone": None,
                "company": None,
                "project_type": None,
                "budget": None,
                "status": bid.to_dict()["status"],
                "offer_amount": bid.offer_amount,
                "auction_id": bid.auction_id,
                "created_at": bid.created_at,
            })

        sources.sort(key=lambda source: source["created_at"], reverse=True)
        for source in sources:
            source["created_at"] = isoformat(source["created_at"])
        return sources
