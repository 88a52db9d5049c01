"""
Services Layer - Business Logic
"""
from wealth_oven.services.errors import (
    ServiceError,
    NotFoundError,
    ValidationError,
    InvalidTransitionError,
    ConflictError,
)
from wealth_oven.services.auction_service import AuctionService
from wealth_oven.services.bid_service import BidService, BidResult
from wealth_oven.services.purchase_service import PurchaseService
from wealth_oven.services.payment_service import PaymentService, PaymentResult
from wealth_oven.services.custom_request_service import CustomRequestService
from wealth_oven.services.lease_request_service import LeaseRequestService
from wealth_oven.services.strategy_call_service import StrategyCallService
from wealth_oven.services.lead_service import LeadService
from wealth_oven.services.funnel_service import FunnelService
from wealth_oven.services.user_service import UserService, AuthenticationError
from wealth_oven.services.admin_service import AdminService

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ValidationError",
    "InvalidTransitionError",
    "ConflictError",
    "AuctionService",
    "BidService",
    "BidResult",
    "PurchaseService",
    "PaymentService",
    "PaymentResult",
    "CustomRequestService",
    "LeaseRequestService",
    "StrategyCallService",
    "LeadService",
    "FunnelService",
    "UserService",
    "AuthenticationError",
    "AdminService",
]
