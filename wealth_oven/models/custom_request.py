"""
Custom build request model (lead capture)
"""
import enum

from sqlalchemy import Column, String, Text, DateTime, JSON

from wealth_oven.models.base import Base, enum_column_type, generate_id, isoformat, utcnow


class CustomRequestStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWING = "reviewing"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


CUSTOM_REQUEST_TRANSITIONS = {
    CustomRequestStatus.PENDING: {CustomRequestStatus.REVIEWING, CustomRequestStatus.REJECTED},
    CustomRequestStatus.REVIEWING: {CustomRequestStatus.APPROVED, CustomRequestStatus.REJECTED},
    CustomRequestStatus.APPROVED: {CustomRequestStatus.IN_PROGRESS, CustomRequestStatus.REJECTED},
    CustomRequestStatus.IN_PROGRESS: {CustomRequestStatus.COMPLETED},
    CustomRequestStatus.COMPLETED: set(),
    CustomRequestStatus.REJECTED: set(),
}


class CustomRequest(Base):
    __tablename__ = "custom_requests"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    project_type = Column(String(120), nullable=False)
    industry = Column(String(120), nullable=False)
    target_audience = Column(Text, nullable=True)
    primary_goal = Column(Text, nullable=False)
    pages = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    timeline = Column(String(120), nullable=True)
    budget = Column(String(120), nullable=True)
    inspiration = Column(Text, nullable=True)
    additional_notes = Column(Text, nullable=True)
    preferred_contact = Column(String(50), nullable=False, default="email")
    status = Column(enum_column_type(CustomRequestStatus), nullable=False, default=CustomRequestStatus.PENDING, index=True)
    assigned_team_member = Column(String(255), nullable=True)
    quarter = Column(String(16), nullable=True)
    submitted_at = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "company": self.company,
            "phone": self.phone,
            "project_type": self.project_type,
            "industry": self.industry,
            "target_audience": self.target_audience,
            "primary_goal": self.primary_goal,
            "pages": list(self.pages or []),
            "features": list(self.features or []),
            "timeline": self.timeline,
            "budget": self.budget,
            "inspiration": self.inspiration,
            "additional_notes": self.additional_notes,
            "preferred_contact": self.preferred_contact,
            "status": self.status.value if isinstance(self.status, CustomRequestStatus) else self.status,
            "assigned_team_member": self.assigned_team_member,
            "quarter": self.quarter,
            "submitted_at": isoformat(self.submitted_at),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
