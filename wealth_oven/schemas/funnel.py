"""Pydantic schemas for funnels and catalog entries"""
from typing import Optional

from pydantic import BaseModel, Field


class FunnelCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[str] = None
    is_available_for_lease: bool = False


class FunnelUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[str] = None
    is_available_for_lease: Optional[bool] = None
    active: Optional[bool] = None


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
