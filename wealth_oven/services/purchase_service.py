"""
Purchase Service - transaction records for auctions, buy-now and direct sales
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from wealth_oven.models import (
    Funnel,
    Purchase,
    PaymentStatus,
    PurchaseNote,
    PurchaseType,
    User,
)
from wealth_oven.models.base import to_naive_utc
from wealth_oven.models.purchase import PURCHASE_TRANSITIONS
from wealth_oven.services.errors import ConflictError, NotFoundError, ValidationError
from wealth_oven.services.transitions import apply_transition, parse_status

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("funnel_id", "amount", "provider_fee", "paypal_order_id", "paypal_transaction_id")


class PurchaseService:
    """Service for purchase bookkeeping"""

    @staticmethod
    def _with_names(purchases: List[Purchase], db: Session) -> List[Dict]:
        """Serialize purchases with funnel title and buyer name attached"""
        funnel_ids = {p.funnel_id for p in purchases if p.funnel_id}
        buyer_ids = {p.buyer_id for p in purchases if p.buyer_id}

        funnels = {}
        if funnel_ids:
            funnels = dict(db.query(Funnel.id, Funnel.title).filter(Funnel.id.in_(funnel_ids)).all())

        buyers = {}
        if buyer_ids:
            for user_id, display_name, email in (
                db.query(User.id, User.display_name, User.email).filter(User.id.in_(buyer_ids)).all()
            ):
                buyers[user_id] = display_name or email

        result = []
        for purchase in purchases:
            data = purchase.to_dict()
            data["funnel_title"] = funnels.get(purchase.funnel_id)
            data["buyer_name"] = buyers.get(purchase.buyer_id) or purchase.buyer_id
            result.append(data)
        return result

    @staticmethod
    def list_purchases(
        db: Session,
        payment_status: Optional[str] = None,
        type: Optional[str] = None,
        note: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
    ) -> List[Dict]:
        """Purchases newest first, optionally filtered"""
        query = db.query(Purchase)

        if payment_status:
            query = query.filter(Purchase.payment_status == parse_status(PaymentStatus, payment_status))
        if type:
            query = query.filter(Purchase.type == parse_status(PurchaseType, type))
        if note:
            query = query.filter(Purchase.note == parse_status(PurchaseNote, note))
        if date_from:
            query = query.filter(Purchase.created_at >= to_naive_utc(date_from))
        if date_to:
            query = query.filter(Purchase.created_at <= to_naive_utc(date_to))
        if min_amount is not None:
            query = query.filter(Purchase.amount >= min_amount)
        if max_amount is not None:
            query = query.filter(Purchase.amount <= max_amount)

        purchases = query.order_by(Purchase.created_at.desc()).all()
        return PurchaseService._with_names(purchases, db)

    @staticmethod
    def get_purchase(purchase_id: str, db: Session) -> Purchase:
        purchase = db.query(Purchase).filter(Purchase.id == purchase_id).first()
        if not purchase:
            raise NotFoundError("Purchase not found")
        return purchase

    @staticmethod
    def get_by_payment_intent(payment_intent_id: str, db: Session) -> Optional[Purchase]:
        return db.query(Purchase).filter(Purchase.stripe_payment_intent_id == payment_intent_id).first()

    @staticmethod
    def get_purchases_by_user(user_id: str, db: Session) -> List[Dict]:
        purchases = (
            db.query(Purchase)
            .filter(Purchase.buyer_id == user_id)
            .order_by(Purchase.created_at.desc())
            .all()
        )
        return PurchaseService._with_names(purchases, db)

    @staticmethod
    def get_purchases_by_funnel(funnel_id: str, db: Session) -> List[Dict]:
        purchases = (
            db.query(Purchase)
            .filter(Purchase.funnel_id == funnel_id)
            .order_by(Purchase.created_at.desc())
            .all()
        )
        return PurchaseService._with_names(purchases, db)

    @staticmethod
    def create_purchase(db: Session, **fields: Any) -> Purchase:
        """
        Record a purchase

        Raises:
            ValidationError: non-positive amount
            ConflictError: payment intent already recorded
        """
        amount = fields.get("amount")
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be positive")

        intent_id = fields.get("stripe_payment_intent_id")
        if intent_id and PurchaseService.get_by_payment_intent(intent_id, db):
            raise ConflictError("A purchase for this payment already exists")

        purchase = Purchase(
            note=parse_status(PurchaseNote, fields.get("note") or PurchaseNote.DIRECT_SALE),
            funnel_id=fields.get("funnel_id"),
            auction_id=fields.get("auction_id"),
            buyer_id=fields.get("buyer_id"),
            amount=amount,
            payment_status=parse_status(PaymentStatus, fields.get("payment_status") or PaymentStatus.PENDING),
            type=parse_status(PurchaseType, fields.get("type") or PurchaseType.STRIPE),
            stripe_payment_intent_id=intent_id,
            paypal_order_id=fields.get("paypal_order_id"),
            paypal_transaction_id=fields.get("paypal_transaction_id"),
            provider_fee=fields.get("provider_fee") or 0.0,
        )
        db.add(purchase)
        db.commit()
        db.refresh(purchase)

        logger.info(
            f"Recorded purchase of ${amount:,.2f}",
            extra={"purchase_id": purchase.id, "user_id": purchase.buyer_id},
        )
        return purchase

    @staticmethod
    def update_purchase_status(purchase_id: str, new_status: str, db: Session) -> Purchase:
        """
        Raises:
            NotFoundError, ValidationError, InvalidTransitionError
        """
        purchase = PurchaseService.get_purchase(purchase_id, db)
        if apply_transition(purchase, new_status, PURCHASE_TRANSITIONS, PaymentStatus, field="payment_status"):
            db.commit()
            db.refresh(purchase)
            logger.info(
                f"Purchase status -> {PaymentStatus(purchase.payment_status).value}",
                extra={"purchase_id": purchase_id},
            )
        return purchase

    @staticmethod
    def update_purchase(purchase_id: str, fields: Dict[str, Any], db: Session) -> Purchase:
        purchase = PurchaseService.get_purchase(purchase_id, db)

        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                continue
            if key == "amount" and (value is None or value <= 0):
                raise ValidationError("Amount must be positive")
            setattr(purchase, key, value)

        db.commit()
        db.refresh(purchase)
        return purchase

    @staticmethod
    def delete_purchase(purchase_id: str, db: Session) -> None:
        purchase = PurchaseService.get_purchase(purchase_id, db)
        db.delete(purchase)
        db.commit()
        logger.info("Deleted purchase", extra={"purchase_id": purchase_id})

    @staticmethod
    def search_purchases(q: str, db: Session) -> List[Dict]:
        """Case-insensitive match on processor ids and purchase id"""
        pattern = f"%{q.strip().lower()}%"
        purchases = (
            db.query(Purchase)
            .filter(
                or_(
                    func.lower(Purchase.id).like(pattern),
                    func.lower(Purchase.stripe_payment_intent_id).like(pattern),
                    func.lower(Purchase.paypal_order_id).like(pattern),
                    func.lower(Purchase.paypal_transaction_id).like(pattern),
                )
            )
            .order_by(Purchase.created_at.desc())
            .all()
        )
        return PurchaseService._with_names(purchases, db)

    @staticmethod
    def get_recent_purchases(db: Session, limit: int = 10) -> List[Dict]:
        purchases = db.query(Purchase).order_by(Purchase.created_at.desc()).limit(limit).all()
        return PurchaseService._with_names(purchases, db)

    @staticmethod
    def get_purchase_stats(db: Session) -> Dict:
        """Revenue figures over completed purchases"""
        total_purchases = db.query(func.count(Purchase.id)).scalar() or 0
        successful, revenue = (
            db.query(func.count(Purchase.id), func.coalesce(func.sum(Purchase.amount), 0.0))
            .filter(Purchase.payment_status == PaymentStatus.COMPLETED)
            .one()
        )

        return {
            "total_revenue": float(revenue or 0.0),
            "successful_purchases": successful,
            "average_order_value": round(float(revenue) / successful, 2) if successful else 0.0,
            "total_purchases": total_purchases,
        }
