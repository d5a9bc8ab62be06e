from prometheus_client import Counter, Gauge, Histogram
# Prometheus metrics definitions

# Search requests by outcome (ok / bad_request / error)
search_requests_total = Counter(
    "search_requests_total", "Combined search requests", ["status"]
)

_search_latency_buckets = (
    0.01,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
)

# Time spent in the aggregator, both lookups included
search_latency_seconds = Histogram(
    "search_latency_seconds", "Combined search latency", buckets=_search_latency_buckets
)

# Chat messages appended, split by author (user / bot)
chat_messages_total = Counter(
    "chat_messages_total", "Chat messages appended", ["author"]
)

# Anonymous sends rejected because the weekly allowance is used up
quota_reject_total = Counter(
    "quota_reject_total", "Number of quota rejected chat messages"
)

# Live relay
ws_connections = Gauge(
    "ws_connections", "Currently connected chat WebSockets"
)
ws_malformed_total = Counter(
    "ws_malformed_total", "Discarded malformed WebSocket frames"
)

__all__ = [
    "search_requests_total",
    "search_latency_seconds",
    "chat_messages_total",
    "quota_reject_total",
    "ws_connections",
    "ws_malformed_total",
]
