"""
Tests for purchase bookkeeping
"""
import pytest

from wealth_oven.models import PaymentStatus
from wealth_oven.services import (
    AdminService,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PurchaseService,
    ValidationError,
)


class TestPurchaseLifecycle:

    def test_create_defaults(self, db):
        purchase = PurchaseService.create_purchase(db, amount=99.5)
        assert purchase.payment_status == PaymentStatus.PENDING
        assert purchase.to_dict()["note"] == "direct_sale"
        assert purchase.to_dict()["type"] == "stripe"
        assert purchase.provider_fee == 0.0

    def test_amount_must_be_positive(self, db):
        with pytest.raises(ValidationError):
            PurchaseService.create_purchase(db, amount=0)

    def test_duplicate_payment_intent(self, db):
        PurchaseService.create_purchase(db, amount=10, stripe_payment_intent_id="pi_dup")
        with pytest.raises(ConflictError):
            PurchaseService.create_purchase(db, amount=10, stripe_payment_intent_id="pi_dup")

    def test_pending_to_completed_to_refunded(self, db):
        purchase = PurchaseService.create_purchase(db, amount=10)
        PurchaseService.update_purchase_status(purchase.id, "completed", db)
        refunded = PurchaseService.update_purchase_status(purchase.id, "refunded", db)
        assert refunded.payment_status == PaymentStatus.REFUNDED

    def test_refunded_is_final(self, db):
        purchase = PurchaseService.create_purchase(db, amount=10, payment_status="refunded")
        with pytest.raises(InvalidTransitionError):
            PurchaseService.update_purchase_status(purchase.id, "completed", db)

    def test_failed_can_retry(self, db):
        """A failed payment may go back to pending for a retry"""
        purchase = PurchaseService.create_purchase(db, amount=10, payment_status="failed")
        retried = PurchaseService.update_purchase_status(purchase.id, "pending", db)
        assert retried.payment_status == PaymentStatus.PENDING

    def test_same_status_noop(self, db):
        purchase = PurchaseService.create_purchase(db, amount=10)
        before = purchase.updated_at
        again = PurchaseService.update_purchase_status(purchase.id, "pending", db)
        assert again.updated_at == before

    def test_missing_purchase(self, db):
        with pytest.raises(NotFoundError):
            PurchaseService.update_purchase_status("missing", "completed", db)

    def test_update_ignores_protected_fields(self, db):
        purchase = PurchaseService.create_purchase(db, amount=10)
        updated = PurchaseService.update_purchase(
            purchase.id, {"amount": 25, "provider_fee": 1.2, "payment_status": "completed"}, db
        )
        assert updated.amount == 25
        assert updated.provider_fee == 1.2
        assert updated.payment_status == PaymentStatus.PENDING


class TestPurchaseQueries:

    def test_names_attached(self, db, user, funnel):
        PurchaseService.create_purchase(db, amount=10, buyer_id=user.id, funnel_id=funnel.id)
        PurchaseService.create_purchase(db, amount=20, buyer_id="ghost-user")

        rows = {row["amount"]: row for row in PurchaseService.list_purchases(db)}
        assert rows[10]["funnel_title"] == "Sales Machine"
        assert rows[10]["buyer_name"] == "Bidder One"
        assert rows[20]["funnel_title"] is None
        assert rows[20]["buyer_name"] == "ghost-user"

    def test_filters(self, db):
        PurchaseService.create_purchase(db, amount=10, payment_status="completed", note="auction")
        PurchaseService.create_purchase(db, amount=500, payment_status="failed")

        assert len(PurchaseService.list_purchases(db, payment_status="completed")) == 1
        assert len(PurchaseService.list_purchases(db, note="auction")) == 1
        assert len(PurchaseService.list_purchases(db, min_amount=100)) == 1
        assert len(PurchaseService.list_purchases(db, max_amount=100)) == 1

    def test_bad_filter_value(self, db):
        with pytest.raises(ValidationError):
            PurchaseService.list_purchases(db, payment_status="lost")

    def test_search_by_intent(self, db):
        PurchaseService.create_purchase(db, amount=10, stripe_payment_intent_id="pi_ABC123")
        PurchaseService.create_purchase(db, amount=10, stripe_payment_intent_id="pi_other")
        results = PurchaseService.search_purchases("abc", db)
        assert [row["stripe_payment_intent_id"] for row in results] == ["pi_ABC123"]

    def test_by_user_and_funnel(self, db, user, funnel):
        PurchaseService.create_purchase(db, amount=10, buyer_id=user.id, funnel_id=funnel.id)
        PurchaseService.create_purchase(db, amount=20)
        assert len(PurchaseService.get_purchases_by_user(user.id, db)) == 1
        assert len(PurchaseService.get_purchases_by_funnel(funnel.id, db)) == 1

    def test_stats_count_completed_revenue(self, db):
        """Revenue and average only include completed purchases"""
        PurchaseService.create_purchase(db, amount=100, payment_status="completed")
        PurchaseService.create_purchase(db, amount=300, payment_status="completed")
        PurchaseService.create_purchase(db, amount=1000, payment_status="failed")

        stats = PurchaseService.get_purchase_stats(db)
        assert stats == {
            "total_revenue": 400.0,
            "successful_purchases": 2,
            "average_order_value": 200.0,
            "total_purchases": 3,
        }

    def test_stats_empty(self, db):
        stats = PurchaseService.get_purchase_stats(db)
        assert stats["average_order_value"] == 0.0
        assert stats["total_revenue"] == 0.0

    def test_admin_stats(self, db, make_auction):
        make_auction()
        PurchaseService.create_purchase(db, amount=250, payment_status="completed")

        stats = AdminService.get_stats(db)
        assert stats["active_auctions"] == 1
        assert stats["total_revenue"] == 250.0
        assert stats["total_purchases"] == 1
        assert stats["total_leads"] == 0
