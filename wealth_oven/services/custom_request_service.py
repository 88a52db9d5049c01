"""
Custom Request Service - "build me a funnel" enquiries
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from wealth_oven.models import CustomRequest, CustomRequestStatus, utcnow
from wealth_oven.models.custom_request import CUSTOM_REQUEST_TRANSITIONS
from wealth_oven.services.errors import NotFoundError
from wealth_oven.services.transitions import apply_transition

logger = logging.getLogger(__name__)

FIELDS = (
    "name",
    "email",
    "company",
    "phone",
    "project_type",
    "industry",
    "target_audience",
    "primary_goal",
    "pages",
    "features",
    "timeline",
    "budget",
    "inspiration",
    "additional_notes",
    "preferred_contact",
)


def quarter_label(moment: Optional[datetime] = None) -> str:
    """Reporting quarter, e.g. "Q3 2025" """
    moment = moment or utcnow()
    return f"Q{(moment.month - 1) // 3 + 1} {moment.year}"


class CustomRequestService:

    @staticmethod
    def create_request(data: Dict[str, Any], db: Session) -> CustomRequest:
        now = utcnow()
        request = CustomRequest(
            **{key: data.get(key) for key in FIELDS if data.get(key) is not None},
            status=CustomRequestStatus.PENDING,
            quarter=quarter_label(now),
            submitted_at=now,
            created_at=now,
            updated_at=now,
        )
        db.add(request)
        db.commit()
        db.refresh(request)

        logger.info(f"Custom request received from {request.email}", extra={"request_id": request.id})
        return request

    @staticmethod
    def list_requests(db: Session) -> List[CustomRequest]:
        return db.query(CustomRequest).order_by(CustomRequest.created_at.desc()).all()

    @staticmethod
    def list_by_email(email: str, db: Session) -> List[CustomRequest]:
        return (
            db.query(CustomRequest)
            .filter(CustomRequest.email == email)
            .order_by(CustomRequest.created_at.desc())
            .all()
        )

    @staticmethod
    def get_request(request_id: str, db: Session) -> CustomRequest:
        request = db.query(CustomRequest).filter(CustomRequest.id == request_id).first()
        if not request:
            raise NotFoundError("Custom request not found")
        return request

    @staticmethod
    def update_status(
        request_id: str,
        new_status: str,
        db: Session,
        assigned_team_member: Optional[str] = None,
    ) -> CustomRequest:
        """
        Move a request along its review pipeline

        Re-sending the current status is a no-op, but a team member
        assignment is still applied.
        """
        request = CustomRequestService.get_request(request_id, db)
        changed = apply_transition(request, new_status, CUSTOM_REQUEST_TRANSITIONS, CustomRequestStatus)

        if assigned_team_member and assigned_team_member != request.assigned_team_member:
            request.assigned_team_member = assigned_team_member
            request.updated_at = utcnow()
            changed = True

        if changed:
            db.commit()
            db.refresh(request)
            logger.info(
                f"Custom request status {CustomRequestStatus(request.status).value}",
                extra={"request_id": request_id},
            )
        return request

    @staticmethod
    def delete_request(request_id: str, db: Session) -> None:
        request = CustomRequestService.get_request(request_id, db)
        db.delete(request)
        db.commit()
