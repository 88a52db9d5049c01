"""
Database Models
"""
from wealth_oven.models.base import Base, generate_id, utcnow

# Import models after Base is defined
from wealth_oven.models.user import User, UserRole, AuthSession
from wealth_oven.models.catalog import Category, Tag, auction_tags
from wealth_oven.models.funnel import Funnel
from wealth_oven.models.auction import Auction, AuctionStatus
from wealth_oven.models.bid import Bid, BidStatus
from wealth_oven.models.purchase import Purchase, PaymentStatus, PurchaseNote, PurchaseType
from wealth_oven.models.custom_request import CustomRequest, CustomRequestStatus
from wealth_oven.models.lease_request import LeaseRequest, LeaseRequestStatus, LeaseType
from wealth_oven.models.lead import Lead
from wealth_oven.models.strategy_call import StrategyCallBooking

__all__ = [
    "Base",
    "generate_id",
    "utcnow",
    "User",
    "UserRole",
    "AuthSession",
    "Category",
    "Tag",
    "auction_tags",
    "Funnel",
    "Auction",
    "AuctionStatus",
    "Bid",
    "BidStatus",
    "Purchase",
    "PaymentStatus",
    "PurchaseNote",
    "PurchaseType",
    "CustomRequest",
    "CustomRequestStatus",
    "LeaseRequest",
    "LeaseRequestStatus",
    "LeaseType",
    "Lead",
    "StrategyCallBooking",
]
