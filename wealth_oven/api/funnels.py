"""
Funnel API Routes - catalog, buy-now listing and leasing
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wealth_oven.infrastructure.database import get_db
from wealth_oven.schemas.requests import LeaseDraftCreate, LeaseRequestCreate, LeaseRequestUpdate
from wealth_oven.services import AuctionService, FunnelService, LeaseRequestService

router = APIRouter(tags=["funnels"])


@router.get("/funnels")
def list_funnels(db: Session = Depends(get_db)):
    funnels = FunnelService.list_funnels(db)
    return {"total": len(funnels), "funnels": [funnel.to_dict() for funnel in funnels]}


@router.get("/funnels/{funnel_id}")
def get_funnel(funnel_id: str, db: Session = Depends(get_db)):
    """Lookup by public funnel id (slug)"""
    return FunnelService.get_by_public_id(funnel_id, db).to_dict()


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    return [category.to_dict() for category in FunnelService.list_categories(db)]


@router.get("/buy-now")
def list_buy_now(db: Session = Depends(get_db)):
    """Active auctions that can be bought outright"""
    auctions = AuctionService.list_buy_now_auctions(db)
    return {"total": len(auctions), "auctions": auctions}


# ==================== Leasing ====================

@router.get("/leasing/funnels")
def list_leasable_funnels(db: Session = Depends(get_db)):
    funnels = FunnelService.list_leasable_funnels(db)
    return {"total": len(funnels), "funnels": [funnel.to_dict() for funnel in funnels]}


@router.post("/leasing/requests", status_code=201)
def create_lease_request(request: LeaseRequestCreate, db: Session = Depends(get_db)):
    lease_request = LeaseRequestService.create_request(request.model_dump(), db)
    return {"success": True, "request": lease_request.to_dict()}


@router.post("/leasing/drafts", status_code=201)
def create_lease_draft(request: LeaseDraftCreate, db: Session = Depends(get_db)):
    """Step one of the wizard: contact details only"""
    lease_request = LeaseRequestService.create_draft(request.model_dump(), db)
    return {"success": True, "request": lease_request.to_dict()}


@router.patch("/leasing/requests/{request_id}")
def update_lease_request(request_id: str, request: LeaseRequestUpdate, db: Session = Depends(get_db)):
    """Later wizard steps fill in the draft"""
    lease_request = LeaseRequestService.update_fields(request_id, request.model_dump(exclude_unset=True), db)
    return {"success": True, "request": lease_request.to_dict()}
