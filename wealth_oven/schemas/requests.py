"""Pydantic schemas for lead capture: custom builds, leases, strategy calls, leads"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ContactFields(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class ProjectFields(ContactFields):
    project_type: str = Field(..., min_length=1, max_length=120)
    industry: str = Field(..., min_length=1, max_length=120)
    target_audience: Optional[str] = None
    primary_goal: str = Field(..., min_length=1)
    pages: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    inspiration: Optional[str] = None
    additional_notes: Optional[str] = None
    preferred_contact: str = "email"


class CustomRequestCreate(ProjectFields):
    timeline: Optional[str] = Field(None, max_length=120)
    budget: Optional[str] = Field(None, max_length=120)


class LeaseRequestCreate(ProjectFields):
    integrations: List[str] = Field(default_factory=list)
    lease_type: str = "performance_based"
    estimated_revenue: Optional[float] = Field(None, ge=0)


class LeaseDraftCreate(BaseModel):
    """Step one of the leasing wizard"""
    name: Optional[str] = Field(None, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class LeaseRequestUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    company: Optional[str] = None
    phone: Optional[str] = None
    project_type: Optional[str] = Field(None, min_length=1, max_length=120)
    industry: Optional[str] = Field(None, min_length=1, max_length=120)
    target_audience: Optional[str] = None
    primary_goal: Optional[str] = Field(None, min_length=1)
    pages: Optional[List[str]] = None
    features: Optional[List[str]] = None
    integrations: Optional[List[str]] = None
    inspiration: Optional[str] = None
    additional_notes: Optional[str] = None
    preferred_contact: Optional[str] = None
    lease_type: Optional[str] = None


class StatusUpdate(BaseModel):
    status: str
    assigned_team_member: Optional[str] = Field(None, max_length=255)


class RevenueUpdate(BaseModel):
    estimated_revenue: float = Field(..., ge=0)


class StrategyCallCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    preferred_date: date
    preferred_time_slot: str = Field(..., min_length=1, max_length=40)
    timezone: str = Field("UTC", max_length=64)


class StrategyCallUpdate(BaseModel):
    phone_number: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    preferred_date: Optional[date] = None
    preferred_time_slot: Optional[str] = Field(None, min_length=1, max_length=40)
    timezone: Optional[str] = Field(None, max_length=64)


class LeadCreate(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    username: Optional[str] = Field(None, max_length=120)
