"""
Admin API Routes - CRUD screens, exports and dashboard figures

Every route requires the admin role. List endpoints share the same query
parameters: q (search), sort ("-" prefix for descending), page, page_size
and format=csv.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from wealth_oven.core.dependencies import get_auction_cache, get_payment_service, require_admin
from wealth_oven.infrastructure.cache import AuctionCache, get_cache_manager
from wealth_oven.infrastructure.database import get_db
from wealth_oven.models import utcnow
from wealth_oven.schemas.auction import AuctionCreate, AuctionStatusUpdate, AuctionUpdate
from wealth_oven.schemas.funnel import CategoryCreate, FunnelCreate, FunnelUpdate, TagCreate
from wealth_oven.schemas.purchase import PurchaseCreate, PurchaseStatusUpdate, PurchaseUpdate
from wealth_oven.schemas.requests import (
    LeaseRequestUpdate,
    RevenueUpdate,
    StatusUpdate,
    StrategyCallUpdate,
)
from wealth_oven.schemas.user import RoleUpdate
from wealth_oven.services import (
    AdminService,
    AuctionService,
    BidService,
    CustomRequestService,
    FunnelService,
    LeadService,
    LeaseRequestService,
    PaymentService,
    PurchaseService,
    StrategyCallService,
    UserService,
)
from wealth_oven.utils.csv_export import export_to_csv
from wealth_oven.utils.listing import paginate, search_rows, sort_rows

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ============================================================================
# LIST HELPERS
# ============================================================================

class ListParams:
    """Shared query parameters of the admin tables"""

    def __init__(
        self,
        q: Optional[str] = None,
        sort: Optional[str] = None,
        page: int = Query(1, ge=1),
        page_size: int = Query(25, ge=1, le=500),
        format: Optional[str] = Query(None, pattern="^(json|csv)$"),
    ):
        self.q = q
        self.sort = sort
        self.page = page
        self.page_size = page_size
        self.format = format


def table_response(rows: List[Dict[str, Any]], columns: Sequence[str], params: ListParams, name: str):
    """Search, sort, then paginate (JSON) or export everything (CSV)"""
    rows = search_rows(rows, params.q, columns)
    rows = sort_rows(rows, params.sort, columns)

    if params.format == "csv":
        filename = f"{name}-{utcnow():%Y-%m-%d}.csv"
        return Response(
            content=export_to_csv(rows, list(columns)),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return paginate(rows, params.page, params.page_size)


LEAD_COLUMNS = ("id", "email", "phone_number", "username", "created_at")
LEAD_SOURCE_COLUMNS = ("id", "source", "name", "email", "phone", "company", "offer_amount", "status", "created_at")
CUSTOM_REQUEST_COLUMNS = (
    "id", "name", "email", "company", "phone", "project_type", "industry", "budget",
    "timeline", "status", "assigned_team_member", "quarter", "submitted_at",
)
LEASE_REQUEST_COLUMNS = (
    "id", "name", "email", "company", "phone", "project_type", "industry", "lease_type",
    "estimated_revenue", "status", "assigned_team_member", "quarter", "submitted_at",
)
STRATEGY_CALL_COLUMNS = (
    "id", "name", "email", "phone_number", "company", "preferred_date",
    "preferred_time_slot", "timezone", "created_at",
)
PURCHASE_COLUMNS = (
    "id", "note", "funnel_title", "buyer_name", "amount", "payment_status", "type",
    "stripe_payment_intent_id", "paypal_order_id", "paypal_transaction_id", "provider_fee", "created_at",
)
AUCTION_COLUMNS = (
    "id", "title", "status", "starting_price", "current_price", "min_increment",
    "buy_now_price", "total_bids", "winner_id", "starts_at", "ends_at",
)
OFFER_COLUMNS = ("id", "auction_id", "bidder_id", "offer_amount", "status", "created_at")
FUNNEL_COLUMNS = ("id", "funnel_id", "title", "category_id", "is_available_for_lease", "active", "created_at")
USER_COLUMNS = ("id", "email", "display_name", "role", "created_at")


# ============================================================================
# DASHBOARD
# ============================================================================

@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    return AdminService.get_stats(db)


@router.get("/cache-stats")
def get_cache_stats():
    return get_cache_manager().get_stats()


# ============================================================================
# LEADS
# ============================================================================

@router.get("/leads")
def list_leads(params: ListParams = Depends(), db: Session = Depends(get_db)):
    rows = [lead.to_dict() for lead in LeadService.list_leads(db)]
    return table_response(rows, LEAD_COLUMNS, params, "leads")


@router.get("/lead-sources")
def list_lead_sources(params: ListParams = Depends(), db: Session = Depends(get_db)):
    """Custom requests and offers in one list"""
    return table_response(LeadService.get_lead_sources(db), LEAD_SOURCE_COLUMNS, params, "lead-sources")


# ============================================================================
# CUSTOM REQUESTS
# ============================================================================

@router.get("/custom-requests")
def list_custom_requests(params: ListParams = Depends(), db: Session = Depends(get_db)):
    rows = [request.to_dict() for request in CustomRequestService.list_requests(db)]
    return table_response(rows, CUSTOM_REQUEST_COLUMNS, params, "custom-requests")


@router.get("/custom-requests/{request_id}")
def get_custom_request(request_id: str, db: Session = Depends(get_db)):
    return CustomRequestService.get_request(request_id, db).to_dict()


@router.patch("/custom-requests/{request_id}/status")
def update_custom_request_status(request_id: str, update: StatusUpdate, db: Session = Depends(get_db)):
    request = CustomRequestService.update_status(
        request_id, update.status, db, assigned_team_member=update.assigned_team_member
    )
    return request.to_dict()


@router.delete("/custom-requests/{request_id}", status_code=204)
def delete_custom_request(request_id: str, db: Session = Depends(get_db)):
    CustomRequestService.delete_request(request_id, db)
    return Response(status_code=204)


# ============================================================================
# LEASE REQUESTS
# ============================================================================

@router.get("/lease-requests")
def list_lease_requests(
    status: Optional[str] = None,
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
):
    rows = [request.to_dict() for request in LeaseRequestService.list_requests(db, status=status)]
    return table_response(rows, LEASE_REQUEST_COLUMNS, params, "lease-requests")


@router.get("/lease-requests/{request_id}")
def get_lease_request(request_id: str, db: Session = Depends(get_db)):
    return LeaseRequestService.get_request(request_id, db).to_dict()


@router.patch("/lease-requests/{request_id}")
def update_lease_request(request_id: str, update: LeaseRequestUpdate, db: Session = Depends(get_db)):
    return LeaseRequestService.update_fields(request_id, update.model_dump(exclude_unset=True), db).to_dict()


@router.patch("/lease-requests/{request_id}/status")
def update_lease_request_status(request_id: str, update: StatusUpdate, db: Session = Depends(get_db)):
    request = LeaseRequestService.update_status(
        request_id, update.status, db, assigned_team_member=update.assigned_team_member
    )
    return request.to_dict()


@router.patch("/lease-requests/{request_id}/revenue")
def update_lease_request_revenue(request_id: str, update: RevenueUpdate, db: Session = Depends(get_db)):
    return LeaseRequestService.update_revenue(request_id, update.estimated_revenue, db).to_dict()


@router.delete("/lease-requests/{request_id}", status_code=204)
def delete_lease_request(request_id: str, db: Session = Depends(get_db)):
    LeaseRequestService.delete_request(request_id, db)
    return Response(status_code=204)


# ============================================================================
# STRATEGY CALLS
# ============================================================================

@router.get("/strategy-calls")
def list_strategy_calls(params: ListParams = Depends(), db: Session = Depends(get_db)):
    rows = [booking.to_dict() for booking in StrategyCallService.list_bookings(db)]
    return table_response(rows, STRATEGY_CALL_COLUMNS, params, "strategy-calls")


@router.get("/strategy-calls/{booking_id}")
def get_strategy_call(booking_id: str, db: Session = Depends(get_db)):
    return StrategyCallService.get_booking(booking_id, db).to_dict()


@router.patch("/strategy-calls/{booking_id}")
def update_strategy_call(booking_id: str, update: StrategyCallUpdate, db: Session = Depends(get_db)):
    return StrategyCallService.update_booking(booking_id, update.model_dump(exclude_unset=True), db).to_dict()


@router.delete("/strategy-calls/{booking_id}", status_code=204)
def delete_strategy_call(booking_id: str, db: Session = Depends(get_db)):
    StrategyCallService.delete_booking(booking_id, db)
    return Response(status_code=204)


# ============================================================================
# PURCHASES
# ============================================================================

@router.get("/purchases")
def list_purchases(
    payment_status: Optional[str] = None,
    type: Optional[str] = None,
    note: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
):
    rows = PurchaseService.list_purchases(
        db,
        payment_status=payment_status,
        type=type,
        note=note,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    return table_response(rows, PURCHASE_COLUMNS, params, "purchases")


@router.get("/purchases/stats")
def get_purchase_stats(db: Session = Depends(get_db)):
    return PurchaseService.get_purchase_stats(db)


@router.get("/purchases/recent")
def get_recent_purchases(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return PurchaseService.get_recent_purchases(db, limit=limit)


@router.get("/purchases/search")
def search_purchases(q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Lookup by purchase or payment-processor id"""
    return PurchaseService.search_purchases(q, db)


@router.get("/purchases/by-user/{user_id}")
def get_purchases_by_user(user_id: str, db: Session = Depends(get_db)):
    return PurchaseService.get_purchases_by_user(user_id, db)


@router.get("/purchases/by-funnel/{funnel_id}")
def get_purchases_by_funnel(funnel_id: str, db: Session = Depends(get_db)):
    return PurchaseService.get_purchases_by_funnel(funnel_id, db)


@router.get("/purchases/{purchase_id}")
def get_purchase(purchase_id: str, db: Session = Depends(get_db)):
    return PurchaseService.get_purchase(purchase_id, db).to_dict()


@router.post("/purchases", status_code=201)
def create_purchase(purchase: PurchaseCreate, db: Session = Depends(get_db)):
    return PurchaseService.create_purchase(db, **purchase.model_dump()).to_dict()


@router.patch("/purchases/{purchase_id}")
def update_purchase(purchase_id: str, update: PurchaseUpdate, db: Session = Depends(get_db)):
    return PurchaseService.update_purchase(purchase_id, update.model_dump(exclude_unset=True), db).to_dict()


@router.patch("/purchases/{purchase_id}/status")
def update_purchase_status(purchase_id: str, update: PurchaseStatusUpdate, db: Session = Depends(get_db)):
    return PurchaseService.update_purchase_status(purchase_id, update.payment_status, db).to_dict()


@router.delete("/purchases/{purchase_id}", status_code=204)
def delete_purchase(purchase_id: str, db: Session = Depends(get_db)):
    PurchaseService.delete_purchase(purchase_id, db)
    return Response(status_code=204)


@router.post("/payments/{payment_intent_id}/refund")
def refund_payment(
    payment_intent_id: str,
    db: Session = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
):
    result = payment_service.refund_payment(payment_intent_id, db)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.to_dict()


# ============================================================================
# AUCTIONS
# ============================================================================

@router.get("/auctions")
def list_auctions(
    status: Optional[str] = None,
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    rows = AuctionService.list_auctions(db, status=status, limit=None, cache=cache)
    return table_response(rows, AUCTION_COLUMNS, params, "auctions")


@router.post("/auctions", status_code=201)
def create_auction(auction: AuctionCreate, db: Session = Depends(get_db)):
    return AuctionService.create_auction(db, **auction.model_dump()).to_dict()


@router.patch("/auctions/{auction_id}")
def update_auction(
    auction_id: str,
    update: AuctionUpdate,
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    return AuctionService.update_auction(auction_id, update.model_dump(exclude_unset=True), db, cache=cache).to_dict()


@router.patch("/auctions/{auction_id}/status")
def change_auction_status(
    auction_id: str,
    update: AuctionStatusUpdate,
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    return AuctionService.change_status(auction_id, update.status, db, cache=cache).to_dict()


@router.delete("/auctions/{auction_id}", status_code=204)
def delete_auction(
    auction_id: str,
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    AuctionService.delete_auction(auction_id, db, cache=cache)
    return Response(status_code=204)


@router.post("/auctions/expire")
def expire_auctions(db: Session = Depends(get_db), cache: AuctionCache = Depends(get_auction_cache)):
    return {"expired": AuctionService.expire_auctions(db, cache=cache)}


@router.get("/offers")
def list_offers(params: ListParams = Depends(), db: Session = Depends(get_db)):
    return table_response(BidService.list_offers(db), OFFER_COLUMNS, params, "offers")


# ============================================================================
# FUNNELS & CATALOG
# ============================================================================

@router.get("/funnels")
def list_funnels(params: ListParams = Depends(), db: Session = Depends(get_db)):
    rows = [funnel.to_dict() for funnel in FunnelService.list_funnels(db, include_inactive=True)]
    return table_response(rows, FUNNEL_COLUMNS, params, "funnels")


@router.post("/funnels", status_code=201)
def create_funnel(funnel: FunnelCreate, db: Session = Depends(get_db)):
    return FunnelService.create_funnel(funnel.model_dump(), db).to_dict()


@router.patch("/funnels/{funnel_pk}")
def update_funnel(
    funnel_pk: str,
    update: FunnelUpdate,
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    fields = update.model_dump(exclude_unset=True)
    return FunnelService.update_funnel(funnel_pk, fields, db, cache=cache).to_dict()


@router.delete("/funnels/{funnel_pk}")
def delete_funnel(
    funnel_pk: str,
    db: Session = Depends(get_db),
    cache: AuctionCache = Depends(get_auction_cache),
):
    """Soft delete"""
    return FunnelService.delete_funnel(funnel_pk, db, cache=cache).to_dict()


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    return [category.to_dict() for category in FunnelService.list_categories(db)]


@router.post("/categories", status_code=201)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    return FunnelService.create_category(category.name, db).to_dict()


@router.get("/tags")
def list_tags(db: Session = Depends(get_db)):
    return [tag.to_dict() for tag in FunnelService.list_tags(db)]


@router.post("/tags", status_code=201)
def create_tag(tag: TagCreate, db: Session = Depends(get_db)):
    return FunnelService.create_tag(tag.name, db).to_dict()


# ============================================================================
# USERS
# ============================================================================

@router.get("/users")
def list_users(params: ListParams = Depends(), db: Session = Depends(get_db)):
    rows = [user.to_dict() for user in UserService.list_users(db)]
    return table_response(rows, USER_COLUMNS, params, "users")


@router.get("/users/search")
def search_users(q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return [user.to_dict() for user in UserService.search_users(q, db)]


@router.get("/users/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db)):
    return UserService.get_user(user_id, db).to_dict()


@router.patch("/users/{user_id}/role")
def update_user_role(user_id: str, update: RoleUpdate, db: Session = Depends(get_db)):
    return UserService.update_role(user_id, update.role, db).to_dict()
