"""Pydantic schemas for auctions, bids and offers"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AuctionCreate(BaseModel):
    funnel_id: Optional[str] = None
    category_id: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    status: str = "draft"
    starting_price: float = Field(..., gt=0)
    reserve_price: Optional[float] = Field(None, ge=0)
    min_increment: Optional[float] = Field(None, gt=0)
    buy_now_price: Optional[float] = Field(None, gt=0)
    starts_at: Optional[datetime] = None
    ends_at: datetime
    tags: List[str] = Field(default_factory=list)


class AuctionUpdate(BaseModel):
    funnel_id: Optional[str] = None
    category_id: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    reserve_price: Optional[float] = Field(None, ge=0)
    min_increment: Optional[float] = Field(None, gt=0)
    buy_now_price: Optional[float] = Field(None, gt=0)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    tags: Optional[List[str]] = None


class AuctionStatusUpdate(BaseModel):
    status: str


class BidCreate(BaseModel):
    amount: float = Field(..., gt=0)
    payment_authorization_id: Optional[str] = Field(None, max_length=255)
    payment_method_id: Optional[str] = Field(None, max_length=255)


class OfferCreate(BaseModel):
    offer_amount: float = Field(..., gt=0)
