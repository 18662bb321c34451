"""FastAPI router exposing the caller's transaction history."""
from __future__ import annotations
import os
from common.logging import configure_logging
configure_logging(os.getenv("LOG_FORMAT", "json"), service_name="ledger")

import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, status
from prometheus_client import make_asgi_app
from pydantic import BaseModel, Field
from sqlmodel import Session

from common.auth import current_username
from common.datetime import format_trade_time
from ledger_observability.metrics import transactions_query_total

from .db import get_session
from .errors import RequestError, StoreError
from .models import Order, OrderType
from .pagination import MAX_PAGE_SIZE, normalize_pagination
from .query import TransactionFilter, TransactionQueryEngine
from .status import ExternalStatus, to_external_status

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------


class TransactionListRequest(BaseModel):
    # 0 is accepted and treated like an omitted value
    page: Optional[int] = Field(default=None, ge=0)
    page_size: Optional[int] = Field(default=None, ge=0, le=MAX_PAGE_SIZE)
    type: Optional[Literal["receive", "payment", "transfer", "community"]] = None
    status: Optional[ExternalStatus] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None

    def as_filter(self) -> TransactionFilter:
        return TransactionFilter(
            type=self.type,
            status=self.status,
            start_time=self.startTime,
            end_time=self.endTime,
        )


class OrderRead(BaseModel):
    """Order as exposed to clients; ``status`` uses the public vocabulary."""

    id: int
    order_name: Optional[str] = None
    type: OrderType
    status: ExternalStatus
    payer_username: str
    payee_username: str
    amount: Decimal
    fee_rate: Decimal
    remark: Optional[str] = None
    trade_time: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderRead":
        return cls(
            id=order.id,
            order_name=order.order_name,
            type=order.type,
            status=to_external_status(order.status),
            payer_username=order.payer_username,
            payee_username=order.payee_username,
            amount=order.amount,
            fee_rate=order.fee_rate,
            remark=order.remark,
            trade_time=format_trade_time(order.trade_time),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class TransactionListResponse(BaseModel):
    total: int
    page: int
    size: int
    data: List[OrderRead]


# ---------------------------------------------------------------------------
# Router definition
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api/v1", tags=["transactions"])


@router.post("/transactions", response_model=TransactionListResponse)
def list_transactions(
    req: TransactionListRequest | None = None,
    username: str = Depends(current_username),
    session: Session = Depends(get_session),
):
    """List the caller's transactions, newest first."""
    req = req or TransactionListRequest()
    pagination = normalize_pagination(req.page, req.page_size)
    t0 = time.perf_counter()

    try:
        result = TransactionQueryEngine(session).list(username, req.as_filter(), pagination)
    except RequestError as exc:
        transactions_query_total.labels(outcome="bad_request").inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except StoreError as exc:
        transactions_query_total.labels(outcome="store_error").inc()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.code
        )

    transactions_query_total.labels(outcome="ok").inc()
    logger.info(
        "transactions_listed",
        extra={
            "endpoint": "/api/v1/transactions",
            "username": username,
            "total": result.total,
            "elapsed_ms": int((time.perf_counter() - t0) * 1000),
        },
    )
    return TransactionListResponse(
        total=result.total,
        page=pagination.page,
        size=pagination.page_size,
        data=[OrderRead.from_order(o) for o in result.items],
    )


def create_app() -> FastAPI:
    """Factory used by tests and the ASGI entrypoint (``ledger.main``)."""
    from pay_config.api import router as pay_config_router

    app = FastAPI(title="Ledger Service")
    app.include_router(router)
    app.include_router(pay_config_router)

    @app.get("/healthz", response_model=dict)
    def healthz():
        return {"ok": True, "service": "ledger"}

    app.mount("/metrics", make_asgi_app())
    return app
