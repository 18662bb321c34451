"""SQLModel ORM definitions for the transaction ledger.

Monetary columns are ``Numeric`` with scale 2 and map to ``Decimal``; binary
floats never touch money. Amount and fee-rate invariants are enforced by
``ledger.validators`` at the entry points that write these rows, not here.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, func
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from common.datetime import utcnow

__all__ = ["OrderType", "OrderStatus", "Order", "UserPayConfig"]


class OrderType(str, Enum):
    RECEIVE = "receive"
    PAYMENT = "payment"
    TRANSFER = "transfer"
    COMMUNITY = "community"


class OrderStatus(str, Enum):
    """Internally persisted status vocabulary (see ``ledger.status`` for the public one)."""

    SUCCESS = "success"
    PENDING = "pending"
    FAILED = "failed"
    DISPUTING = "disputing"
    REFUND = "refund"


def _enum_column(name: str, enum_cls: type[Enum]) -> Column:
    # store the .value strings, not member names
    return Column(
        name,
        SAEnum(enum_cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=16),
        nullable=False,
        index=True,
    )


class Order(SQLModel, table=True):
    """A transaction between a payer and a payee."""

    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_name: Optional[str] = Field(default=None, max_length=64)

    type: OrderType = Field(sa_column=_enum_column("type", OrderType))
    status: OrderStatus = Field(sa_column=_enum_column("status", OrderStatus))

    payer_username: str = Field(sa_column=Column("payer_username", String(64), nullable=False, index=True))
    payee_username: str = Field(sa_column=Column("payee_username", String(64), nullable=False, index=True))

    amount: Decimal = Field(sa_column=Column("amount", Numeric(20, 2), nullable=False))
    fee_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column("fee_rate", Numeric(10, 2), nullable=False, default=Decimal("0")),
    )
    remark: Optional[str] = Field(default=None, max_length=200)

    trade_time: datetime = Field(sa_column=Column("trade_time", DateTime, nullable=False, index=True))

    created_at: Optional[datetime] = Field(
        default=None, sa_column=Column("created_at", DateTime, server_default=func.now())
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column("updated_at", DateTime, server_default=func.now(), onupdate=func.now()),
    )

    __table_args__ = (
        Index("ix_orders_payer_trade_time", "payer_username", "trade_time"),
        Index("ix_orders_payee_trade_time", "payee_username", "trade_time"),
    )


class UserPayConfig(SQLModel, table=True):
    """Fee / limit policy for a payer tier, selected by credit score."""

    __tablename__ = "user_pay_configs"

    id: Optional[int] = Field(default=None, primary_key=True)
    level: int = Field(sa_column=Column("level", Integer, nullable=False, unique=True))

    # min_score inclusive, max_score exclusive; None means open-ended
    min_score: int = Field(nullable=False, index=True)
    max_score: Optional[int] = Field(default=None, index=True)
    daily_limit: Optional[int] = None

    fee_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column("fee_rate", Numeric(10, 2), nullable=False, default=Decimal("0")),
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column("created_at", DateTime, nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column("updated_at", DateTime, nullable=False),
    )
