# ledger_observability/metrics.py
"""
Prometheus metrics for the ledger services.

This module does NOT start a standalone HTTP server. Each FastAPI app exposes
the default registry by mounting the ASGI exporter:

    from prometheus_client import make_asgi_app
    app.mount("/metrics", make_asgi_app())
"""

from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Histogram

# ----------------------------
# Registration helper (avoid duplicate collectors)
# ----------------------------
_METRICS: Dict[Tuple[Type[Any], str], Any] = {}


def get_metric(cls: Type[Any], name: str, *args, **kwargs):
    key = (cls, name)
    if key in _METRICS:
        return _METRICS[key]
    metric = cls(name, *args, **kwargs)
    _METRICS[key] = metric
    return metric


# ----------------------------
# Transaction history
# ----------------------------

# outcome: ok | bad_request | store_error
transactions_query_total = get_metric(
    Counter,
    "ledger_transactions_query_total",
    "Transaction listing requests by outcome",
    ["outcome"],
)

transactions_query_latency_seconds = get_metric(
    Histogram,
    "ledger_transactions_query_latency_seconds",
    "Latency of the count+fetch transaction listing in seconds",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2),
)

# ----------------------------
# Financial invariants
# ----------------------------

validation_failures_total = get_metric(
    Counter,
    "ledger_validation_failures_total",
    "Monetary values rejected by the invariant validator",
    ["code"],
)

# ----------------------------
# Pay config administration
# ----------------------------

# action: create | update | delete
pay_config_writes_total = get_metric(
    Counter,
    "ledger_pay_config_writes_total",
    "Successful user pay config writes",
    ["action"],
)
