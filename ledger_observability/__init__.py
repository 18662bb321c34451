"""Prometheus metrics for ledger services."""

from .metrics import (pay_config_writes_total, transactions_query_latency_seconds,
                      transactions_query_total, validation_failures_total)

__all__ = [
    "transactions_query_total",
    "transactions_query_latency_seconds",
    "validation_failures_total",
    "pay_config_writes_total",
]
