"""Pydantic schemas for auth and user administration"""
from typing import Optional

from pydantic import BaseModel, Field

from wealth_oven.schemas.requests import EMAIL_PATTERN


class SignupRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    display_name: Optional[str] = Field(None, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class RoleUpdate(BaseModel):
    role: str
