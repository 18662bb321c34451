"""Datetime helpers common to the ledger services.

Currently provides:
    parse_trade_time(s): strict parser for the ``YYYY-MM-DD HH:mm:ss`` literal
    used by transaction filters. Returns a *naive* datetime interpreted as UTC,
    matching how ``trade_time`` is stored.

Anything else (ISO-8601 with ``T``, slashes, missing seconds, trailing offsets)
is rejected rather than guessed, so callers get a request error instead of a
silently widened or shifted time window.
"""
from __future__ import annotations

import datetime as _dt
import re
from typing import Union

__all__ = [
    "TRADE_TIME_FORMAT",
    "TRADE_TIME_LAYOUT",
    "parse_trade_time",
    "format_trade_time",
    "utcnow",
]

TRADE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
# Human readable form used in error messages.
TRADE_TIME_LAYOUT = "YYYY-MM-DD HH:mm:ss"
# strptime alone accepts unpadded fields and runs of whitespace
_TRADE_TIME_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", re.ASCII)


def parse_trade_time(value: Union[str, _dt.datetime]) -> _dt.datetime:
    """Parse *value* into a naive UTC datetime.

    Datetime objects pass through; aware ones are converted to UTC first.
    Raises ``ValueError`` when a string does not match the fixed layout.
    """
    if isinstance(value, _dt.datetime):
        if value.tzinfo is not None and value.tzinfo.utcoffset(value) is not None:
            return value.astimezone(_dt.timezone.utc).replace(tzinfo=None)
        return value

    if not isinstance(value, str):
        raise TypeError("parse_trade_time expects str or datetime, got " + type(value).__name__)

    if not _TRADE_TIME_RE.fullmatch(value):
        raise ValueError(f"invalid trade time {value!r}, expected {TRADE_TIME_LAYOUT}")
    try:
        return _dt.datetime.strptime(value, TRADE_TIME_FORMAT)
    except ValueError as exc:
        raise ValueError(f"invalid trade time {value!r}, expected {TRADE_TIME_LAYOUT}") from exc


def format_trade_time(value: _dt.datetime) -> str:
    return value.strftime(TRADE_TIME_FORMAT)


def utcnow() -> _dt.datetime:
    """Current time as a naive UTC datetime, the form every ledger column stores."""
    return _dt.datetime.now(_dt.timezone.utc).replace(tzinfo=None)
