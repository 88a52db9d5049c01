"""
Tests for bid placement, buy-now and offers
"""
from datetime import timedelta

import pytest
from sqlalchemy import update

from wealth_oven.core.config import get_settings
from wealth_oven.models import Auction, AuctionStatus, Bid, BidStatus, utcnow
from wealth_oven.services import BidService


@pytest.fixture
def no_payment_check(monkeypatch):
    monkeypatch.setattr(get_settings(), "REQUIRE_PAYMENT_AUTHORIZATION", False)


class TestPlaceBid:
    """Validation order and the conditional price update"""

    def test_bid_must_clear_increment(self, db, user, make_auction, no_payment_check):
        """At 500 with a 25 increment, 524 is refused and 525 accepted"""
        auction = make_auction()

        low = BidService.place_bid(auction.id, user.id, 524, db)
        assert low.success is False
        assert low.reason == "bid_too_low"
        assert "525.00" in low.error

        ok = BidService.place_bid(auction.id, user.id, 525, db)
        assert ok.success is True
        assert ok.auction["current_price"] == 525
        assert ok.auction["total_bids"] == 1
        assert ok.auction["winner_id"] == user.id
        assert ok.auction["winning_bid_id"] == ok.bid["id"]
        assert ok.bid["status"] == "confirmed"

    def test_unknown_auction(self, db, user, no_payment_check):
        """Missing auction reports not_found"""
        result = BidService.place_bid("missing", user.id, 1000, db)
        assert result.success is False
        assert result.reason == "not_found"
        assert result.auction is None

    def test_inactive_auction(self, db, user, make_auction, no_payment_check):
        """Draft auctions don't take bids"""
        auction = make_auction(status=AuctionStatus.DRAFT)
        result = BidService.place_bid(auction.id, user.id, 1000, db)
        assert result.reason == "auction_inactive"

    def test_ended_auction(self, db, user, make_auction, no_payment_check):
        """An active auction past its end time refuses bids"""
        now = utcnow()
        auction = make_auction(starts_at=now - timedelta(days=2), ends_at=now - timedelta(minutes=1))
        result = BidService.place_bid(auction.id, user.id, 1000, db)
        assert result.reason == "auction_ended"

    def test_outbid(self, db, user, other_user, make_auction, no_payment_check):
        """A higher bid takes over the lead"""
        auction = make_auction()
        BidService.place_bid(auction.id, user.id, 600, db)
        result = BidService.place_bid(auction.id, other_user.id, 625, db)

        assert result.success is True
        assert result.auction["winner_id"] == other_user.id
        assert result.auction["total_bids"] == 2
        assert result.auction["minimum_bid"] == 650

    def test_stale_read_rejected_by_conditional_update(self, db, user, make_auction, no_payment_check):
        """A bid validated against an outdated price loses at the UPDATE"""
        auction = make_auction()
        assert auction.current_price == 500

        # Another writer raises the price; the session still holds 500
        db.execute(
            update(Auction)
            .where(Auction.id == auction.id)
            .values(current_price=1000)
            .execution_options(synchronize_session=False)
        )

        result = BidService.place_bid(auction.id, user.id, 525, db)

        assert result.success is False
        assert result.reason == "bid_too_low"
        assert db.query(Bid).count() == 0

    def test_payment_authorization_required(self, db, user, make_auction, payment_service):
        """Without an authorization id the bid is refused"""
        auction = make_auction()
        result = BidService.place_bid(auction.id, user.id, 525, db, payment_service=payment_service)
        assert result.reason == "payment_unauthorized"

    def test_declined_authorization(self, db, user, make_auction, payment_service):
        """A setup intent still needing a payment method doesn't count"""
        auction = make_auction()
        result = BidService.place_bid(
            auction.id,
            user.id,
            525,
            db,
            payment_authorization_id="seti_declined",
            payment_service=payment_service,
        )
        assert result.reason == "payment_unauthorized"

    def test_unknown_authorization(self, db, user, make_auction, payment_service):
        """Stripe 404 on the intent means unauthorized"""
        auction = make_auction()
        result = BidService.place_bid(
            auction.id, user.id, 525, db,
            payment_authorization_id="seti_missing",
            payment_service=payment_service,
        )
        assert result.reason == "payment_unauthorized"

    def test_authorized_bid_keeps_intent(self, db, user, make_auction, payment_service, stripe):
        """A succeeded setup intent backs the bid and is stored on it"""
        auction = make_auction()
        stripe.add_setup_intent("seti_mine", "succeeded", {"buyer_id": user.id, "auction_id": auction.id})
        result = BidService.place_bid(
            auction.id,
            user.id,
            525,
            db,
            payment_authorization_id="seti_mine",
            payment_method_id="pm_card_visa",
            payment_service=payment_service,
        )
        assert result.success is True
        assert result.bid["setup_intent_id"] == "seti_mine"
        assert result.bid["payment_method_id"] == "pm_card_visa"

    def test_someone_elses_card_refused(self, db, user, other_user, make_auction, payment_service, stripe):
        """A setup intent saved by another user can't back this user's bid"""
        auction = make_auction()
        stripe.add_setup_intent("seti_theirs", "succeeded", {"buyer_id": user.id, "auction_id": auction.id})

        result = BidService.place_bid(
            auction.id, other_user.id, 525, db,
            payment_authorization_id="seti_theirs",
            payment_service=payment_service,
        )

        assert result.success is False
        assert result.reason == "payment_unauthorized"
        assert db.query(Bid).count() == 0

    def test_card_saved_for_other_auction_refused(self, db, user, make_auction, payment_service, stripe):
        """Authorizations are per auction"""
        first = make_auction()
        second = make_auction()
        stripe.add_setup_intent("seti_first", "succeeded", {"buyer_id": user.id, "auction_id": first.id})

        result = BidService.place_bid(
            second.id, user.id, 525, db,
            payment_authorization_id="seti_first",
            payment_service=payment_service,
        )

        assert result.reason == "payment_unauthorized"

    def test_low_bid_skips_payment_lookup(self, db, user, make_auction, payment_service, stripe):
        """Cheap checks run before the gateway is called"""
        auction = make_auction()
        BidService.place_bid(
            auction.id, user.id, 501, db,
            payment_authorization_id="seti_ok",
            payment_service=payment_service,
        )
        assert stripe.requests == []


class TestBuyNow:

    def test_buy_now_sells_auction(self, db, user, make_auction):
        """Buy-now closes the auction at the buy-now price"""
        auction = make_auction(buy_now_price=5000.0)
        result = BidService.buy_now(auction.id, user.id, db)

        assert result.success is True
        assert result.auction["status"] == "sold"
        assert result.auction["current_price"] == 5000
        assert result.auction["winner_id"] == user.id

    def test_bid_after_buy_now_fails(self, db, user, other_user, make_auction, no_payment_check):
        """Sold auctions are no longer active"""
        auction = make_auction(buy_now_price=5000.0)
        BidService.buy_now(auction.id, user.id, db)

        result = BidService.place_bid(auction.id, other_user.id, 6000, db)
        assert result.reason == "auction_inactive"

    def test_second_buy_now_fails(self, db, user, other_user, make_auction):
        """Only one buyer wins a buy-now"""
        auction = make_auction(buy_now_price=5000.0)
        BidService.buy_now(auction.id, user.id, db)

        result = BidService.buy_now(auction.id, other_user.id, db)
        assert result.success is False
        assert result.reason == "auction_inactive"

    def test_no_buy_now_price(self, db, user, make_auction):
        """Auctions without a buy-now price refuse it"""
        auction = make_auction()
        result = BidService.buy_now(auction.id, user.id, db)
        assert result.reason == "buy_now_unavailable"

    def test_buy_now_missing_auction(self, db, user):
        result = BidService.buy_now("missing", user.id, db)
        assert result.reason == "not_found"


class TestOffers:

    def test_offer_below_minimum(self, db, user, make_auction):
        """Offers under 10,000 are refused"""
        auction = make_auction()
        result = BidService.submit_offer(auction.id, user.id, 9999.99, db)
        assert result.success is False
        assert result.reason == "offer_too_low"

    def test_offer_recorded_without_moving_price(self, db, user, make_auction):
        """An offer is a pending_offer bid; the auction price is untouched"""
        auction = make_auction()
        result = BidService.submit_offer(auction.id, user.id, 10000, db)

        assert result.success is True
        assert result.bid["status"] == "pending_offer"
        assert result.bid["offer_amount"] == 10000
        assert result.auction["current_price"] == 500
        assert result.auction["total_bids"] == 0

    def test_offer_on_sold_auction(self, db, user, make_auction):
        auction = make_auction(status=AuctionStatus.SOLD)
        result = BidService.submit_offer(auction.id, user.id, 20000, db)
        assert result.reason == "auction_inactive"

    def test_offers_listed_but_not_in_bid_history(self, db, user, make_auction):
        """Offers show up for admins, not in the public bid history"""
        from wealth_oven.services import AuctionService

        auction = make_auction()
        BidService.submit_offer(auction.id, user.id, 15000, db)

        offers = BidService.list_offers(db)
        assert len(offers) == 1
        assert offers[0]["offer_amount"] == 15000
        assert AuctionService.get_bid_history(auction.id, db) == []


class TestUserBids:

    def test_user_bids_flag_winning(self, db, user, other_user, make_auction, no_payment_check):
        """Only the leading bid is marked winning"""
        auction = make_auction(title="Lead Magnet Funnel")
        BidService.place_bid(auction.id, user.id, 525, db)
        BidService.place_bid(auction.id, other_user.id, 550, db)
        BidService.place_bid(auction.id, user.id, 600, db)

        bids = BidService.get_user_bids(user.id, db)
        assert len(bids) == 2
        assert all(bid["auction_title"] == "Lead Magnet Funnel" for bid in bids)
        winning = [bid for bid in bids if bid["is_winning"]]
        assert len(winning) == 1
        assert winning[0]["amount"] == 600

    def test_bid_statuses_stored(self, db, user, make_auction, no_payment_check):
        auction = make_auction()
        BidService.place_bid(auction.id, user.id, 525, db)
        bid = db.query(Bid).one()
        assert bid.status == BidStatus.CONFIRMED
