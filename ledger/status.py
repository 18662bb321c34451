"""Public ⇄ persisted order status vocabulary.

Clients filter and read statuses in the public vocabulary; the ``orders``
table stores the internal one. Only the tokens listed in
``EXTERNAL_TO_INTERNAL`` differ; every other status is spelled the same on
both sides. Extend the table, not the callers.
"""
from __future__ import annotations

from typing import Dict, Literal

from .models import OrderStatus

__all__ = [
    "ExternalStatus",
    "EXTERNAL_TO_INTERNAL",
    "INTERNAL_TO_EXTERNAL",
    "EXTERNAL_STATUSES",
    "to_internal_status",
    "to_external_status",
]

ExternalStatus = Literal["success", "pending", "failed", "disputing", "refunded"]

EXTERNAL_TO_INTERNAL: Dict[str, str] = {
    "refunded": OrderStatus.REFUND.value,
}

INTERNAL_TO_EXTERNAL: Dict[str, str] = {v: k for k, v in EXTERNAL_TO_INTERNAL.items()}

EXTERNAL_STATUSES = tuple(INTERNAL_TO_EXTERNAL.get(s.value, s.value) for s in OrderStatus)


def to_internal_status(token: str) -> OrderStatus:
    """Map a public status token to the persisted ``OrderStatus``.

    Unknown tokens, including internal-only spellings such as ``refund``,
    raise ``ValueError``; request schemas reject them first.
    """
    if token not in EXTERNAL_STATUSES:
        raise ValueError(f"unknown external status: {token!r}")
    return OrderStatus(EXTERNAL_TO_INTERNAL.get(token, token))


def to_external_status(status: OrderStatus | str) -> str:
    value = status.value if isinstance(status, OrderStatus) else status
    return INTERNAL_TO_EXTERNAL.get(value, value)
