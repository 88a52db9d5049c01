"""
Lease request model
"""
import enum

from sqlalchemy import Column, String, Text, Float, DateTime, JSON

from wealth_oven.models.base import Base, enum_column_type, generate_id, isoformat, utcnow


class LeaseRequestStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    ACTIVE = "active"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeaseType(str, enum.Enum):
    PERFORMANCE_BASED = "performance_based"
    FIXED_RATE = "fixed_rate"
    REVENUE_SHARE = "revenue_share"


LEASE_REQUEST_TRANSITIONS = {
    LeaseRequestStatus.PENDING: {
        LeaseRequestStatus.UNDER_REVIEW, LeaseRequestStatus.REJECTED, LeaseRequestStatus.CANCELLED,
    },
    LeaseRequestStatus.UNDER_REVIEW: {
        LeaseRequestStatus.APPROVED, LeaseRequestStatus.REJECTED, LeaseRequestStatus.CANCELLED,
    },
    LeaseRequestStatus.APPROVED: {LeaseRequestStatus.ACTIVE, LeaseRequestStatus.CANCELLED},
    LeaseRequestStatus.ACTIVE: {LeaseRequestStatus.COMPLETED, LeaseRequestStatus.CANCELLED},
    LeaseRequestStatus.COMPLETED: set(),
    LeaseRequestStatus.REJECTED: set(),
    LeaseRequestStatus.CANCELLED: set(),
}


class LeaseRequest(Base):
    __tablename__ = "lease_requests"

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
    integrations = Column(JSON, nullable=False, default=list)
    inspiration = Column(Text, nullable=True)
    additional_notes = Column(Text, nullable=True)
    preferred_contact = Column(String(50), nullable=False, default="email")
    lease_type = Column(enum_column_type(LeaseType), nullable=False, default=LeaseType.PERFORMANCE_BASED)
    estimated_revenue = Column(Float, nullable=True)
    status = Column(enum_column_type(LeaseRequestStatus), nullable=False, default=LeaseRequestStatus.PENDING, index=True)
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
            "integrations": list(self.integrations or []),
            "inspiration": self.inspiration,
            "additional_notes": self.additional_notes,
            "preferred_contact": self.preferred_contact,
            "lease_type": self.lease_type.value if isinstance(self.lease_type, LeaseType) else self.lease_type,
            "estimated_revenue": self.estimated_revenue,
            "status": self.status.value if isinstance(self.status, LeaseRequestStatus) else self.status,
            "assigned_team_member": self.assigned_team_member,
            "quarter": self.quarter,
            "submitted_at": isoformat(self.submitted_at),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
