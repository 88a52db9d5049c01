"""Pydantic schemas for the payment endpoints"""
from typing import Dict, Optional

from pydantic import BaseModel, Field


class SetupIntentRequest(BaseModel):
    auction_id: str


class PaymentIntentRequest(BaseModel):
    amount: float = Field(..., gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    funnel_id: Optional[str] = None
    auction_id: Optional[str] = None
    note: str = "direct_sale"


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str
    metadata: Dict[str, str] = Field(default_factory=dict)
