"""Transaction history queries.

A listing is always scoped to one ledger party: the builder starts from
``payer_username == U OR payee_username == U`` and every optional filter is
ANDed on top of it. Count and page are two separate reads; by default they do
not share a snapshot, so ``total`` may drift from the page under concurrent
writes. Pass ``consistent=True`` to run both reads at SERIALIZABLE isolation
on a fresh session.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from common.datetime import TRADE_TIME_LAYOUT, parse_trade_time
from ledger_observability.metrics import transactions_query_latency_seconds

from .errors import InvalidTimeFormat, RequestError, StoreError
from .models import Order, OrderType
from .pagination import Pagination, normalize_pagination
from .status import to_internal_status

__all__ = [
    "TransactionFilter",
    "TransactionPage",
    "TransactionQueryBuilder",
    "TransactionQueryEngine",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransactionFilter:
    """Raw optional filters as received from the caller (public vocabulary)."""

    type: Optional[str] = None
    status: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


@dataclass(slots=True)
class TransactionPage:
    total: int
    items: List[Order] = field(default_factory=list)


def _parse_bound(name: str, value: str) -> datetime:
    try:
        return parse_trade_time(value)
    except (TypeError, ValueError) as exc:
        raise InvalidTimeFormat(name, TRADE_TIME_LAYOUT) from exc


class TransactionQueryBuilder:
    """Accumulates WHERE clauses for the ``orders`` table."""

    def __init__(self) -> None:
        self._conditions: List[Any] = []
        self._party: Optional[str] = None

    # ------------------------------------------------------------------
    def for_party(self, username: str) -> "TransactionQueryBuilder":
        self._party = username
        self._conditions.append(
            or_(Order.payer_username == username, Order.payee_username == username)
        )
        return self

    def with_type(self, order_type: OrderType | str) -> "TransactionQueryBuilder":
        try:
            order_type = OrderType(order_type)
        except ValueError as exc:
            raise RequestError(f"unknown transaction type: {order_type}") from exc
        self._conditions.append(Order.type == order_type)
        return self

    def with_status(self, external_status: str) -> "TransactionQueryBuilder":
        try:
            status = to_internal_status(external_status)
        except ValueError as exc:
            raise RequestError(f"unknown transaction status: {external_status}") from exc
        self._conditions.append(Order.status == status)
        return self

    def since(self, start: datetime) -> "TransactionQueryBuilder":
        self._conditions.append(Order.trade_time >= start)
        return self

    def until(self, end: datetime) -> "TransactionQueryBuilder":
        self._conditions.append(Order.trade_time <= end)
        return self

    # ------------------------------------------------------------------
    @classmethod
    def from_filter(cls, username: str, flt: TransactionFilter) -> "TransactionQueryBuilder":
        """Compose the predicate for *username*; raises ``RequestError`` on bad input."""
        builder = cls().for_party(username)
        if flt.type:
            builder.with_type(flt.type)
        if flt.status:
            builder.with_status(flt.status)
        if flt.start_time:
            builder.since(_parse_bound("startTime", flt.start_time))
        if flt.end_time:
            builder.until(_parse_bound("endTime", flt.end_time))
        return builder

    @property
    def conditions(self) -> tuple:
        if self._party is None:
            # never issue an unscoped listing
            raise RuntimeError("transaction query built without a ledger party")
        return tuple(self._conditions)

    def count_statement(self):
        return select(func.count()).select_from(Order).where(*self.conditions)

    def page_statement(self, pagination: Pagination):
        # id breaks trade_time ties so paging is deterministic
        return (
            select(Order)
            .where(*self.conditions)
            .order_by(Order.trade_time.desc(), Order.id.desc())
            .offset(pagination.offset)
            .limit(pagination.page_size)
        )


class TransactionQueryEngine:
    """Count + fetch a page of a party's transactions."""

    def __init__(self, session: Session, *, consistent: bool = False):
        self.session = session
        self.consistent = consistent

    def list(
        self,
        username: str,
        flt: TransactionFilter | None = None,
        pagination: Pagination | None = None,
    ) -> TransactionPage:
        # input errors surface here, before the store is touched
        builder = TransactionQueryBuilder.from_filter(username, flt or TransactionFilter())
        pagination = pagination or normalize_pagination()

        try:
            with transactions_query_latency_seconds.time():
                if self.consistent:
                    self.session.connection(execution_options={"isolation_level": "SERIALIZABLE"})
                total = self.session.exec(builder.count_statement()).one()
                items = list(self.session.exec(builder.page_statement(pagination)).all())
        except SQLAlchemyError as exc:
            logger.exception(
                "transactions_store_error",
                extra={"username": username},
            )
            raise StoreError() from exc

        return TransactionPage(total=int(total), items=items)
