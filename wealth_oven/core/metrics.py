"""
Prometheus metrics for monitoring
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

# ==================== HTTP Metrics ====================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"]
)

# ==================== Auction Metrics ====================

bids_total = Counter(
    "bids_total",
    "Bid placement attempts",
    ["outcome"]  # accepted, bid_too_low, auction_inactive, ...
)

buy_now_total = Counter(
    "buy_now_total",
    "Buy-now attempts",
    ["outcome"]
)

offers_total = Counter(
    "offers_total",
    "Offers submitted",
    ["outcome"]
)

# ==================== Payment Metrics ====================

payments_total = Counter(
    "payments_total",
    "Payment adapter calls",
    ["operation", "outcome"]  # operation: create_intent, confirm, verify, refund, setup_intent
)


def render_metrics():
    """Return (payload, content_type) for the /metrics endpoint"""
    return generate_latest(), CONTENT_TYPE_LATEST
