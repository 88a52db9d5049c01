"""
Lease Request Service - leasing wizard submissions
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from wealth_oven.models import LeaseRequest, LeaseRequestStatus, LeaseType, utcnow
from wealth_oven.models.lease_request import LEASE_REQUEST_TRANSITIONS
from wealth_oven.services.custom_request_service import quarter_label
from wealth_oven.services.errors import NotFoundError, ValidationError
from wealth_oven.services.transitions import apply_transition, parse_status

logger = logging.getLogger(__name__)

CONTACT_FIELDS = ("name", "email", "company", "phone")

EDITABLE_FIELDS = (
    "name",
    "company",
    "phone",
    "project_type",
    "industry",
    "target_audience",
    "primary_goal",
    "pages",
    "features",
    "integrations",
    "inspiration",
    "additional_notes",
    "preferred_contact",
    "lease_type",
)

# Stand-ins for required fields until the wizard is finished
PLACEHOLDER = "TBD"


class LeaseRequestService:

    @staticmethod
    def create_request(data: Dict[str, Any], db: Session) -> LeaseRequest:
        fields = {key: data.get(key) for key in CONTACT_FIELDS + EDITABLE_FIELDS if data.get(key) is not None}
        fields["lease_type"] = parse_status(LeaseType, fields.get("lease_type") or LeaseType.PERFORMANCE_BASED)

        estimated_revenue = data.get("estimated_revenue")
        if estimated_revenue is not None and estimated_revenue < 0:
            raise ValidationError("Estimated revenue cannot be negative")

        now = utcnow()
        request = LeaseRequest(
            **fields,
            estimated_revenue=estimated_revenue,
            status=LeaseRequestStatus.PENDING,
            quarter=quarter_label(now),
            submitted_at=now,
            created_at=now,
            updated_at=now,
        )
        db.add(request)
        db.commit()
        db.refresh(request)

        logger.info(f"Lease request received from {request.email}", extra={"request_id": request.id})
        return request

    @staticmethod
    def create_draft(data: Dict[str, Any], db: Session) -> LeaseRequest:
        """Save step one (contact details) so an abandoned wizard still leaves a lead"""
        return LeaseRequestService.create_request(
            {
                "name": data.get("name") or "Anonymous",
                "email": data["email"],
                "company": data.get("company"),
                "phone": data.get("phone"),
                "project_type": PLACEHOLDER,
                "industry": PLACEHOLDER,
                "primary_goal": PLACEHOLDER,
                "pages": [],
                "features": [],
                "integrations": [],
                "preferred_contact": "email",
                "lease_type": LeaseType.PERFORMANCE_BASED,
            },
            db,
        )

    @staticmethod
    def update_fields(request_id: str, fields: Dict[str, Any], db: Session) -> LeaseRequest:
        request = LeaseRequestService.get_request(request_id, db)

        for key, value in fields.items():
            if key not in EDITABLE_FIELDS or value is None:
                continue
            if key == "lease_type":
                value = parse_status(LeaseType, value)
            setattr(request, key, value)

        request.updated_at = utcnow()
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def list_requests(db: Session, status: Optional[str] = None) -> List[LeaseRequest]:
        query = db.query(LeaseRequest)
        if status:
            query = query.filter(LeaseRequest.status == parse_status(LeaseRequestStatus, status))
        return query.order_by(LeaseRequest.created_at.desc()).all()

    @staticmethod
    def list_by_email(email: str, db: Session) -> List[LeaseRequest]:
        return (
            db.query(LeaseRequest)
            .filter(LeaseRequest.email == email)
            .order_by(LeaseRequest.created_at.desc())
            .all()
        )

    @staticmethod
    def get_request(request_id: str, db: Session) -> LeaseRequest:
        request = db.query(LeaseRequest).filter(LeaseRequest.id == request_id).first()
        if not request:
            raise NotFoundError("Lease request not found")
        return request

    @staticmethod
    def update_status(
        request_id: str,
        new_status: str,
        db: Session,
        assigned_team_member: Optional[str] = None,
    ) -> LeaseRequest:
        request = LeaseRequestService.get_request(request_id, db)
        changed = apply_transition(request, new_status, LEASE_REQUEST_TRANSITIONS, LeaseRequestStatus)

        if assigned_team_member and assigned_team_member != request.assigned_team_member:
            request.assigned_team_member = assigned_team_member
            request.updated_at = utcnow()
            changed = True

        if changed:
            db.commit()
            db.refresh(request)
            logger.info(
                f"Lease request status {LeaseRequestStatus(request.status).value}",
                extra={"request_id": request_id},
            )
        return request

    @staticmethod
    def update_revenue(request_id: str, estimated_revenue: float, db: Session) -> LeaseRequest:
        if estimated_revenue is None or estimated_revenue < 0:
            raise ValidationError("Estimated revenue cannot be negative")

        request = LeaseRequestService.get_request(request_id, db)
        request.estimated_revenue = estimated_revenue
        request.updated_at = utcnow()
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def delete_request(request_id: str, db: Session) -> None:
        request = LeaseRequestService.get_request(request_id, db)
        db.delete(request)
        db.commit()
