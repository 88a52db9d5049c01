"""Pydantic schemas for purchases"""
from typing import Optional

from pydantic import BaseModel, Field

from wealth_oven.models import PurchaseNote, PurchaseType


class PurchaseCreate(BaseModel):
    note: PurchaseNote
    funnel_id: Optional[str] = None
    auction_id: Optional[str] = None
    buyer_id: Optional[str] = None
    amount: float = Field(..., gt=0)
    type: PurchaseType = PurchaseType.STRIPE
    stripe_payment_intent_id: Optional[str] = None
    paypal_order_id: Optional[str] = None
    paypal_transaction_id: Optional[str] = None
    provider_fee: float = Field(0.0, ge=0)


class PurchaseUpdate(BaseModel):
    funnel_id: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    provider_fee: Optional[float] = Field(None, ge=0)
    paypal_order_id: Optional[str] = None
    paypal_transaction_id: Optional[str] = None


class PurchaseStatusUpdate(BaseModel):
    payment_status: str
