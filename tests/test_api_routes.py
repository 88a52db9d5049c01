"""
Tests for the HTTP API
"""
import csv
import io
from datetime import timedelta

from wealth_oven.models import utcnow


class TestHealthRoutes:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/health"

    def test_health(self, client):
        """Database reachable, cache switched off in tests"""
        response = client.get("/health")
        data = response.json()

        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["cache"] == "disabled"

    def test_trace_id_header(self, client):
        response = client.get("/", headers={"X-Trace-ID": "trace-123"})
        assert response.headers["X-Trace-ID"] == "trace-123"

    def test_metrics(self, client):
        client.get("/health")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "http_requests_total" in response.text


class TestAuthRoutes:

    def test_signup_and_login(self, client):
        response = client.post(
            "/auth/signup",
            json={"email": "New@Example.com", "password": "long-enough", "display_name": "New"},
        )
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "new@example.com"

        response = client.post("/auth/login", json={"email": "new@example.com", "password": "long-enough"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["display_name"] == "New"

    def test_duplicate_signup(self, client, user):
        response = client.post("/auth/signup", json={"email": "bidder@example.com", "password": "long-enough"})
        assert response.status_code == 409

    def test_short_password(self, client):
        response = client.post("/auth/signup", json={"email": "a@example.com", "password": "short"})
        assert response.status_code == 422

    def test_wrong_password(self, client, user):
        response = client.post("/auth/login", json={"email": "bidder@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_me_requires_token(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_logout_revokes_token(self, client, user_headers):
        assert client.post("/auth/logout", headers=user_headers).status_code == 200
        assert client.get("/auth/me", headers=user_headers).status_code == 401


class TestAuctionRoutes:

    def test_list_and_detail(self, client, make_auction):
        auction = make_auction()

        listing = client.get("/auctions").json()
        assert listing["total"] == 1

        detail = client.get(f"/auctions/{auction.id}").json()
        assert detail["auction"]["id"] == auction.id
        assert detail["auction"]["minimum_bid"] == 525
        assert detail["bids"] == []
        assert detail["bid_count"] == 0

    def test_missing_auction(self, client):
        assert client.get("/auctions/missing").status_code == 404

    def test_statistics_missing(self, client):
        assert client.get("/auctions/missing/statistics").status_code == 404


class TestBidRoutes:

    def test_bid_requires_login(self, client, make_auction):
        auction = make_auction()
        response = client.post(f"/auctions/{auction.id}/bids", json={"amount": 525})
        assert response.status_code == 401

    def test_bid_with_saved_card(self, client, make_auction, stripe, user, user_headers):
        auction = make_auction()
        stripe.add_setup_intent("seti_mine", "succeeded", {"buyer_id": user.id, "auction_id": auction.id})
        response = client.post(
            f"/auctions/{auction.id}/bids",
            json={"amount": 525, "payment_authorization_id": "seti_mine", "payment_method_id": "pm_card_visa"},
            headers=user_headers,
        )

        assert response.status_code == 201
        assert response.json()["auction"]["current_price"] == 525
        assert response.json()["bid"]["setup_intent_id"] == "seti_mine"

        history = client.get(f"/auctions/{auction.id}/bids").json()
        assert history["total"] == 1

    def test_public_history_hides_payment_ids(self, client, make_auction, stripe, user, user_headers):
        """Anonymous readers never see Stripe ids; the bidder's dashboard does"""
        auction = make_auction()
        stripe.add_setup_intent("seti_mine", "succeeded", {"buyer_id": user.id, "auction_id": auction.id})
        client.post(
            f"/auctions/{auction.id}/bids",
            json={"amount": 525, "payment_authorization_id": "seti_mine", "payment_method_id": "pm_card_visa"},
            headers=user_headers,
        )

        history = client.get(f"/auctions/{auction.id}/bids").json()
        detail = client.get(f"/auctions/{auction.id}").json()
        for bid in history["bids"] + detail["bids"]:
            assert "setup_intent_id" not in bid
            assert "payment_method_id" not in bid

        mine = client.get("/dashboard/bids", headers=user_headers).json()
        assert mine[0]["setup_intent_id"] == "seti_mine"

    def test_low_bid_reason(self, client, make_auction, user_headers):
        """Refusals carry a machine-readable reason and the current auction"""
        auction = make_auction()
        response = client.post(
            f"/auctions/{auction.id}/bids",
            json={"amount": 524, "payment_authorization_id": "seti_ok"},
            headers=user_headers,
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["reason"] == "bid_too_low"
        assert detail["auction"]["current_price"] == 500

    def test_bid_without_card(self, client, make_auction, user_headers):
        auction = make_auction()
        response = client.post(f"/auctions/{auction.id}/bids", json={"amount": 525}, headers=user_headers)
        assert response.json()["detail"]["reason"] == "payment_unauthorized"

    def test_bid_on_missing_auction(self, client, user_headers):
        response = client.post("/auctions/missing/bids", json={"amount": 525}, headers=user_headers)
        assert response.status_code == 404
        assert response.json()["detail"]["reason"] == "not_found"

    def test_negative_bid(self, client, make_auction, user_headers):
        auction = make_auction()
        response = client.post(f"/auctions/{auction.id}/bids", json={"amount": -5}, headers=user_headers)
        assert response.status_code == 422

    def test_buy_now(self, client, make_auction, user_headers):
        auction = make_auction(buy_now_price=3000.0)
        response = client.post(f"/auctions/{auction.id}/buy-now", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["auction"]["status"] == "sold"

    def test_offer(self, client, make_auction, user_headers):
        auction = make_auction()
        low = client.post(f"/auctions/{auction.id}/offers", json={"offer_amount": 500}, headers=user_headers)
        assert low.json()["detail"]["reason"] == "offer_too_low"

        ok = client.post(f"/auctions/{auction.id}/offers", json={"offer_amount": 12000}, headers=user_headers)
        assert ok.status_code == 201
        assert ok.json()["bid"]["status"] == "pending_offer"


class TestPaymentRoutes:

    def test_setup_intent(self, client, make_auction, user_headers):
        auction = make_auction()
        response = client.post("/payments/setup-intent", json={"auction_id": auction.id}, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["setup_intent_id"].startswith("seti_")

    def test_setup_intent_unknown_auction(self, client, user_headers):
        response = client.post("/payments/setup-intent", json={"auction_id": "missing"}, headers=user_headers)
        assert response.status_code == 404

    def test_buy_now_checkout(self, client, funnel, user, user_headers):
        """Create intent, confirm, purchase recorded for the signed-in buyer"""
        created = client.post(
            "/payments/payment-intent",
            json={"amount": 199.99, "funnel_id": funnel.id, "note": "buy_now"},
            headers=user_headers,
        )
        assert created.status_code == 200
        intent_id = created.json()["payment_intent_id"]

        confirmed = client.post("/payments/confirm", json={"payment_intent_id": intent_id}, headers=user_headers)
        assert confirmed.status_code == 200
        purchase = confirmed.json()["purchase"]
        assert purchase["amount"] == 199.99
        assert purchase["buyer_id"] == user.id
        assert purchase["note"] == "buy_now"

        status = client.get(f"/payments/{intent_id}/status", headers=user_headers)
        assert status.json()["status"] == "succeeded"

        mine = client.get("/dashboard/purchases", headers=user_headers).json()
        assert len(mine) == 1

    def test_confirm_other_buyers_intent(self, client, funnel, stripe, user_headers):
        """Confirming an intent issued to someone else records nothing"""
        stripe.add_payment_intent(
            "pi_x", 50000, "succeeded", {"buyer_id": "someone-else", "type": "buy_now", "funnel_id": funnel.id}
        )

        response = client.post(
            "/payments/confirm",
            json={"payment_intent_id": "pi_x", "metadata": {"type": "direct_sale", "funnel_id": "bogus"}},
            headers=user_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Payment belongs to another buyer"
        assert client.get("/dashboard/purchases", headers=user_headers).json() == []

    def test_status_wait_is_capped(self, client, stripe, user_headers, monkeypatch):
        """`wait=true` polls at most the HTTP attempt cap"""
        from wealth_oven.core.config import get_settings

        monkeypatch.setattr(get_settings(), "PAYMENT_POLL_HTTP_MAX_ATTEMPTS", 2)
        stripe.add_payment_intent("pi_stuck", 10000, "processing")

        response = client.get("/payments/pi_stuck/status?wait=true", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "processing"
        assert len(stripe.requests) == 2

    def test_gateway_failure(self, client, stripe, user_headers):
        stripe.fail = True
        response = client.post("/payments/payment-intent", json={"amount": 10}, headers=user_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Payment processing failed. Please try again."


class TestPublicRoutes:

    def test_custom_request(self, client):
        response = client.post(
            "/custom-request",
            json={
                "name": "Dana",
                "email": "dana@example.com",
                "project_type": "sales",
                "industry": "fitness",
                "primary_goal": "Signups",
                "pages": ["landing"],
            },
        )
        assert response.status_code == 201
        assert response.json()["request"]["status"] == "pending"

    def test_custom_request_bad_email(self, client):
        response = client.post(
            "/custom-request",
            json={"name": "Dana", "email": "nope", "project_type": "x", "industry": "y", "primary_goal": "z"},
        )
        assert response.status_code == 422

    def test_strategy_call_links_user(self, client, user, user_headers):
        booking = {
            "name": "Bidder",
            "email": "bidder@example.com",
            "preferred_date": "2025-08-01",
            "preferred_time_slot": "14:00",
        }
        response = client.post("/strategy-call", json=booking, headers=user_headers)
        assert response.status_code == 201
        assert response.json()["booking"]["user_id"] == user.id

        dashboard = client.get("/dashboard", headers=user_headers).json()
        assert dashboard["has_strategy_call"] is True

    def test_anonymous_strategy_call(self, client):
        booking = {
            "name": "Guest",
            "email": "guest@example.com",
            "preferred_date": "2025-08-01",
            "preferred_time_slot": "09:00",
        }
        response = client.post("/strategy-call", json=booking)
        assert response.json()["booking"]["user_id"] is None

    def test_lead(self, client):
        response = client.post("/leads", json={"email": "news@example.com"})
        assert response.status_code == 201

    def test_lease_draft(self, client):
        response = client.post("/leasing/drafts", json={"email": "early@example.com"})
        assert response.status_code == 201
        assert response.json()["request"]["project_type"] == "TBD"

    def test_funnel_by_slug(self, client, funnel):
        response = client.get(f"/funnels/{funnel.funnel_id}")
        assert response.status_code == 200
        assert response.json()["title"] == "Sales Machine"
        assert client.get("/funnels/unknown-slug").status_code == 404


class TestAdminRoutes:

    def test_requires_admin(self, client, user_headers):
        assert client.get("/admin/stats", headers=user_headers).status_code == 403

    def test_requires_login(self, client):
        assert client.get("/admin/stats").status_code == 401

    def test_stats(self, client, admin_headers, make_auction):
        make_auction()
        data = client.get("/admin/stats", headers=admin_headers).json()
        assert data["active_auctions"] == 1

    def test_custom_request_workflow(self, client, admin_headers, db):
        from wealth_oven.services import CustomRequestService

        request = CustomRequestService.create_request(
            {"name": "Dana", "email": "d@example.com", "project_type": "sales", "industry": "fit", "primary_goal": "g"},
            db,
        )

        ok = client.patch(
            f"/admin/custom-requests/{request.id}/status",
            json={"status": "reviewing", "assigned_team_member": "sam"},
            headers=admin_headers,
        )
        assert ok.status_code == 200
        assert ok.json()["assigned_team_member"] == "sam"

        skipped = client.patch(
            f"/admin/custom-requests/{request.id}/status", json={"status": "completed"}, headers=admin_headers
        )
        assert skipped.status_code == 409

        unknown = client.patch(
            f"/admin/custom-requests/{request.id}/status", json={"status": "lost"}, headers=admin_headers
        )
        assert unknown.status_code == 400

        missing = client.get("/admin/custom-requests/missing", headers=admin_headers)
        assert missing.status_code == 404

    def test_table_search_and_pages(self, client, admin_headers, db):
        from wealth_oven.services import LeadService

        for index in range(3):
            LeadService.create_lead({"email": f"lead{index}@example.com"}, db)
        LeadService.create_lead({"email": "other@test.org"}, db)

        page = client.get(
            "/admin/leads",
            params={"q": "example", "sort": "email", "page": 1, "page_size": 2},
            headers=admin_headers,
        ).json()

        assert page["total"] == 3
        assert page["pages"] == 2
        assert [row["email"] for row in page["items"]] == ["lead0@example.com", "lead1@example.com"]

    def test_bad_sort_column(self, client, admin_headers):
        response = client.get("/admin/leads", params={"sort": "password"}, headers=admin_headers)
        assert response.status_code == 400

    def test_csv_export(self, client, admin_headers, db):
        from wealth_oven.services import LeadService

        LeadService.create_lead({"email": "lead@example.com", "username": 'The "Closer"'}, db)
        response = client.get("/admin/leads", params={"format": "csv"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["id", "email", "phone_number", "username", "created_at"]
        assert rows[1][1] == "lead@example.com"
        assert rows[1][3] == 'The "Closer"'

    def test_create_auction_and_expire(self, client, admin_headers, funnel):
        now = utcnow()
        created = client.post(
            "/admin/auctions",
            json={
                "funnel_id": funnel.id,
                "starting_price": 1000,
                "status": "active",
                "starts_at": (now - timedelta(days=2)).isoformat(),
                "ends_at": (now - timedelta(days=1)).isoformat(),
            },
            headers=admin_headers,
        )
        assert created.status_code == 201

        expired = client.post("/admin/auctions/expire", headers=admin_headers)
        assert expired.json()["expired"] == 1

    def test_invalid_auction(self, client, admin_headers):
        now = utcnow()
        response = client.post(
            "/admin/auctions",
            json={"starting_price": 100, "starts_at": now.isoformat(), "ends_at": now.isoformat()},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_refund(self, client, admin_headers, db, stripe):
        from wealth_oven.services import PurchaseService

        PurchaseService.create_purchase(db, amount=50, payment_status="completed", stripe_payment_intent_id="pi_paid")
        response = client.post("/admin/payments/pi_paid/refund", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["purchase"]["payment_status"] == "refunded"

    def test_promote_user(self, client, admin_headers, user, user_headers):
        response = client.patch(f"/admin/users/{user.id}/role", json={"role": "admin"}, headers=admin_headers)
        assert response.json()["role"] == "admin"
        assert client.get("/admin/stats", headers=user_headers).status_code == 200

    def test_funnel_soft_delete(self, client, admin_headers):
        created = client.post("/admin/funnels", json={"title": "Webinar Funnel!"}, headers=admin_headers).json()
        assert created["funnel_id"].startswith("webinar-funnel-")

        client.delete(f"/admin/funnels/{created['id']}", headers=admin_headers)

        assert client.get(f"/funnels/{created['funnel_id']}").status_code == 404
        listed = client.get("/admin/funnels", headers=admin_headers).json()
        assert listed["items"][0]["active"] is False
