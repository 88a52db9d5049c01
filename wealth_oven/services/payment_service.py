"""
Payment Service - Stripe adapter plus Purchase bookkeeping

Every public method returns a PaymentResult; gateway failures are logged
in full and surfaced with a generic message.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from wealth_oven.core.config import get_settings
from wealth_oven.core.metrics import payments_total
from wealth_oven.infrastructure.stripe_client import PaymentGatewayError, StripeClient
from wealth_oven.models import PaymentStatus, Purchase, PurchaseNote, PurchaseType
from wealth_oven.models.purchase import PURCHASE_TRANSITIONS
from wealth_oven.services.errors import ServiceError
from wealth_oven.services.purchase_service import PurchaseService
from wealth_oven.services.transitions import apply_transition

logger = logging.getLogger(__name__)

# Stripe intent status -> purchase status
INTENT_STATUS_MAP = {
    "succeeded": PaymentStatus.COMPLETED,
    "processing": PaymentStatus.PENDING,
    "requires_capture": PaymentStatus.PENDING,
    "requires_action": PaymentStatus.PENDING,
    "requires_confirmation": PaymentStatus.PENDING,
    "canceled": PaymentStatus.FAILED,
    "requires_payment_method": PaymentStatus.FAILED,
}

TERMINAL_INTENT_STATUSES = {"succeeded", "canceled", "requires_payment_method"}
AUTHORIZED_STATUSES = {"succeeded", "requires_capture"}

GENERIC_ERROR = "Payment processing failed. Please try again."


@dataclass
class PaymentResult:
    success: bool
    status: Optional[str] = None
    payment_intent_id: Optional[str] = None
    setup_intent_id: Optional[str] = None
    client_secret: Optional[str] = None
    purchase: Optional[Dict] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        return {key: value for key, value in self.__dict__.items() if value is not None}


class PaymentService:
    """Payment authorization adapter"""

    def __init__(self, stripe_client: StripeClient, sleep: Callable[[float], None] = time.sleep):
        self.stripe = stripe_client
        self.sleep = sleep
        self.settings = get_settings()

    # ==================== Bid authorization ====================

    def create_setup_intent(self, auction_id: str, buyer_id: str) -> PaymentResult:
        """Save a card for a bid; charged only if the bidder wins"""
        try:
            intent = self.stripe.create_setup_intent(
                metadata={"auction_id": auction_id, "buyer_id": buyer_id}
            )
        except PaymentGatewayError as e:
            payments_total.labels("setup_intent", "error").inc()
            logger.error(f"Setup intent failed: {e}", extra={"auction_id": auction_id, "user_id": buyer_id})
            return PaymentResult(success=False, error=GENERIC_ERROR)

        payments_total.labels("setup_intent", "ok").inc()
        return PaymentResult(
            success=True,
            status=intent.get("status"),
            setup_intent_id=intent["id"],
            client_secret=intent.get("client_secret"),
        )

    def verify_authorization(
        self,
        authorization_id: str,
        bidder_id: Optional[str] = None,
        auction_id: Optional[str] = None,
    ) -> bool:
        """
        True when the setup/payment intent can back a bid

        When bidder_id/auction_id are given, the intent's metadata must name
        the same buyer and auction; a card saved by someone else, or for
        another auction, does not authorize the bid.
        """
        if not authorization_id:
            return False

        try:
            if authorization_id.startswith("pi_"):
                intent = self.stripe.retrieve_payment_intent(authorization_id)
            else:
                intent = self.stripe.retrieve_setup_intent(authorization_id)
        except PaymentGatewayError as e:
            payments_total.labels("verify_authorization", "error").inc()
            logger.warning(f"Authorization lookup failed for {authorization_id}: {e}")
            return False

        metadata = intent.get("metadata") or {}
        for key, expected in (("buyer_id", bidder_id), ("auction_id", auction_id)):
            if expected is not None and metadata.get(key) != expected:
                payments_total.labels("verify_authorization", "mismatch").inc()
                logger.warning(
                    f"Authorization {authorization_id} does not match {key}",
                    extra={"auction_id": auction_id, "user_id": bidder_id},
                )
                return False

        authorized = intent.get("status") in AUTHORIZED_STATUSES
        payments_total.labels("verify_authorization", "ok" if authorized else "declined").inc()
        return authorized

    # ==================== Payment intents ====================

    def create_payment_intent(
        self,
        amount: float,
        currency: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentResult:
        """Create a payment intent; `amount` is in dollars"""
        if amount is None or amount <= 0:
            return PaymentResult(success=False, error="Amount must be positive")

        amount_cents = int(round(amount * 100))
        try:
            intent = self.stripe.create_payment_intent(
                amount_cents=amount_cents,
                currency=(currency or self.settings.PAYMENT_CURRENCY).lower(),
                metadata=metadata,
            )
        except PaymentGatewayError as e:
            payments_total.labels("create_intent", "error").inc()
            logger.error(f"Payment intent creation failed: {e}")
            return PaymentResult(success=False, error=GENERIC_ERROR)

        payments_total.labels("create_intent", "ok").inc()
        logger.info(
            f"Created payment intent for {amount_cents} cents",
            extra={"payment_intent_id": intent["id"]},
        )
        return PaymentResult(
            success=True,
            status=intent.get("status"),
            payment_intent_id=intent["id"],
            client_secret=intent.get("client_secret"),
        )

    def confirm_payment(
        self,
        payment_intent_id: str,
        db: Session,
        metadata: Optional[Dict[str, str]] = None,
        buyer_id: Optional[str] = None,
    ) -> PaymentResult:
        """
        Confirm an intent and record the Purchase

        Purchase status follows the intent: succeeded -> completed,
        processing -> pending, anything else -> failed. Confirming the same
        intent twice updates the existing purchase instead of adding one.

        The intent's own metadata decides who bought what; `metadata` only
        fills keys the intent doesn't carry. An intent stamped with another
        buyer_id is refused before it is confirmed.
        """
        try:
            intent = self.stripe.retrieve_payment_intent(payment_intent_id)
        except PaymentGatewayError as e:
            payments_total.labels("confirm", "error").inc()
            logger.error(f"Payment confirmation failed: {e}", extra={"payment_intent_id": payment_intent_id})
            return PaymentResult(success=False, payment_intent_id=payment_intent_id, error=GENERIC_ERROR)

        owner = (intent.get("metadata") or {}).get("buyer_id")
        if buyer_id is not None and owner and owner != buyer_id:
            payments_total.labels("confirm", "forbidden").inc()
            logger.warning(
                "Payment intent belongs to another buyer",
                extra={"payment_intent_id": payment_intent_id, "user_id": buyer_id},
            )
            return PaymentResult(
                success=False,
                payment_intent_id=payment_intent_id,
                error="Payment belongs to another buyer",
            )

        try:
            if intent.get("status") == "requires_confirmation":
                intent = self.stripe.confirm_payment_intent(payment_intent_id)
        except PaymentGatewayError as e:
            payments_total.labels("confirm", "error").inc()
            logger.error(f"Payment confirmation failed: {e}", extra={"payment_intent_id": payment_intent_id})
            return PaymentResult(success=False, payment_intent_id=payment_intent_id, error=GENERIC_ERROR)

        intent_status = intent.get("status")
        purchase_status = INTENT_STATUS_MAP.get(intent_status, PaymentStatus.FAILED)

        details = {key: value for key, value in (metadata or {}).items() if value}
        if buyer_id is not None:
            details["buyer_id"] = buyer_id
        details.update({key: value for key, value in (intent.get("metadata") or {}).items() if value})

        try:
            purchase = PurchaseService.get_by_payment_intent(payment_intent_id, db)
            if purchase is None:
                purchase = PurchaseService.create_purchase(
                    db,
                    note=details.get("type") or PurchaseNote.DIRECT_SALE,
                    funnel_id=details.get("funnel_id"),
                    auction_id=details.get("auction_id"),
                    buyer_id=details.get("buyer_id"),
                    amount=(intent.get("amount") or 0) / 100,
                    payment_status=purchase_status,
                    type=PurchaseType.STRIPE,
                    stripe_payment_intent_id=payment_intent_id,
                )
            else:
                self._sync_purchase(purchase, purchase_status, db)
        except ServiceError as e:
            payments_total.labels("confirm", "error").inc()
            logger.error(f"Recording purchase failed: {e}", extra={"payment_intent_id": payment_intent_id})
            return PaymentResult(success=False, payment_intent_id=payment_intent_id, error=GENERIC_ERROR)

        succeeded = purchase_status != PaymentStatus.FAILED
        payments_total.labels("confirm", "ok" if succeeded else "declined").inc()
        logger.info(
            f"Payment {intent_status}",
            extra={"payment_intent_id": payment_intent_id, "purchase_id": purchase.id},
        )
        return PaymentResult(
            success=succeeded,
            status=intent_status,
            payment_intent_id=payment_intent_id,
            purchase=purchase.to_dict(),
            error=None if succeeded else "Payment was declined",
        )

    def verify_payment_status(self, payment_intent_id: str, db: Session) -> PaymentResult:
        """Current intent status; terminal statuses are synced to the Purchase"""
        try:
            intent = self.stripe.retrieve_payment_intent(payment_intent_id)
        except PaymentGatewayError as e:
            payments_total.labels("verify", "error").inc()
            logger.error(f"Payment status lookup failed: {e}", extra={"payment_intent_id": payment_intent_id})
            return PaymentResult(success=False, payment_intent_id=payment_intent_id, error=GENERIC_ERROR)

        intent_status = intent.get("status")
        purchase = PurchaseService.get_by_payment_intent(payment_intent_id, db)

        if purchase is not None and intent_status in TERMINAL_INTENT_STATUSES:
            self._sync_purchase(purchase, INTENT_STATUS_MAP[intent_status], db)

        payments_total.labels("verify", "ok").inc()
        return PaymentResult(
            success=True,
            status=intent_status,
            payment_intent_id=payment_intent_id,
            purchase=purchase.to_dict() if purchase is not None else None,
        )

    def wait_for_terminal_status(
        self,
        payment_intent_id: str,
        db: Session,
        max_attempts: Optional[int] = None,
    ) -> PaymentResult:
        """
        Poll until the intent reaches a terminal status

        Bounded by `max_attempts` (default PAYMENT_POLL_MAX_ATTEMPTS);
        returns the last result seen.
        """
        attempts = max_attempts or self.settings.PAYMENT_POLL_MAX_ATTEMPTS
        result = PaymentResult(success=False, payment_intent_id=payment_intent_id, error=GENERIC_ERROR)

        for attempt in range(attempts):
            result = self.verify_payment_status(payment_intent_id, db)
            if result.success and result.status in TERMINAL_INTENT_STATUSES:
                return result
            if attempt < attempts - 1:
                self.sleep(self.settings.PAYMENT_POLL_INTERVAL_SECONDS)

        logger.warning(
            f"Payment still {result.status} after {attempts} checks",
            extra={"payment_intent_id": payment_intent_id},
        )
        return result

    def refund_payment(self, payment_intent_id: str, db: Session) -> PaymentResult:
        """Refund a completed payment and mark its Purchase refunded"""
        purchase = PurchaseService.get_by_payment_intent(payment_intent_id, db)
        if purchase is None:
            return PaymentResult(success=False, payment_intent_id=payment_intent_id, error="Purchase not found")

        if PaymentStatus(purchase.payment_status) != PaymentStatus.COMPLETED:
            return PaymentResult(
                success=False,
                payment_intent_id=payment_intent_id,
                error="Only completed payments can be refunded",
            )

        try:
            refund = self.stripe.create_refund(payment_intent_id)
        except PaymentGatewayError as e:
            payments_total.labels("refund", "error").inc()
            logger.error(f"Refund failed: {e}", extra={"payment_intent_id": payment_intent_id})
            return PaymentResult(success=False, payment_intent_id=payment_intent_id, error=GENERIC_ERROR)

        self._sync_purchase(purchase, PaymentStatus.REFUNDED, db)
        payments_total.labels("refund", "ok").inc()
        logger.info("Payment refunded", extra={"payment_intent_id": payment_intent_id, "purchase_id": purchase.id})
        return PaymentResult(
            success=True,
            status=refund.get("status"),
            payment_intent_id=payment_intent_id,
            purchase=purchase.to_dict(),
        )

    # ==================== Helpers ====================

    @staticmethod
    def _sync_purchase(purchase: Purchase, target: PaymentStatus, db: Session) -> None:
        """Move the purchase to `target` when the table allows it, else leave it"""
        current = PaymentStatus(purchase.payment_status)
        if current == target or target not in PURCHASE_TRANSITIONS[current]:
            return

        apply_transition(purchase, target, PURCHASE_TRANSITIONS, PaymentStatus, field="payment_status")
        db.commit()
        db.refresh(purchase)
