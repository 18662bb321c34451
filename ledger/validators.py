"""Financial invariant checks for monetary configuration values.

All helpers are pure and deterministic so they can be called from any entry
point (admin API, settlement jobs, scripts) without side-effects beyond a
Prometheus counter bump on rejection.

Rules
-----
* rate:   ``0 <= rate <= 1`` and at most 2 decimal places
* amount: ``amount > 0`` and at most 2 decimal places

Decimal places are counted on the *minimal* representation, so
``Decimal("0.500")`` has one decimal place and passes.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from ledger_observability.metrics import validation_failures_total

from .errors import (AmountDecimalPlacesExceeded, AmountMustBeGreaterThanZero,
                     RateDecimalPlacesExceeded, RateOutOfRange, ValidationError)

__all__ = [
    "MAX_DECIMAL_PLACES",
    "decimal_places",
    "validate_rates",
    "validate_amount",
]

MAX_DECIMAL_PLACES = 2

DecimalLike = Union[Decimal, int, str]

_ZERO = Decimal(0)
_ONE = Decimal(1)


def _as_decimal(value: DecimalLike) -> Decimal:
    # bool is an int subclass; True as a fee rate is always a caller bug
    if isinstance(value, (float, bool)):
        raise TypeError(f"monetary values must be Decimal, int or str, got {type(value).__name__}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise TypeError(f"not a decimal value: {value!r}") from exc


def decimal_places(value: DecimalLike) -> int:
    """Return the minimal number of fractional digits needed to represent *value*."""
    dec = _as_decimal(value)
    if not dec.is_finite():
        raise ValueError(f"non-finite decimal: {dec}")
    # count on the digit tuple rather than normalize(), which rounds to context precision
    _, digits, exponent = dec.as_tuple()
    if exponent >= 0 or not any(digits):
        return 0
    trailing_zeros = len(digits) - len("".join(map(str, digits)).rstrip("0"))
    return max(0, -exponent - trailing_zeros)


def _reject(error: ValidationError) -> None:
    validation_failures_total.labels(code=error.code).inc()
    raise error


def validate_rates(*rates: DecimalLike) -> None:
    """Check every rate in order; raise on the first violation.

    Raises ``RateOutOfRange`` or ``RateDecimalPlacesExceeded``. Calling with no
    rates is a no-op.
    """
    for raw in rates:
        rate = _as_decimal(raw)
        if not rate.is_finite() or rate < _ZERO or rate > _ONE:
            _reject(RateOutOfRange())
        if decimal_places(rate) > MAX_DECIMAL_PLACES:
            _reject(RateDecimalPlacesExceeded())


def validate_amount(amount: DecimalLike) -> None:
    """Raise ``AmountMustBeGreaterThanZero`` or ``AmountDecimalPlacesExceeded``."""
    value = _as_decimal(amount)
    if not value.is_finite() or value <= _ZERO:
        # NaN never compares, +Infinity is not a payable amount either
        _reject(AmountMustBeGreaterThanZero())
    if decimal_places(value) > MAX_DECIMAL_PLACES:
        _reject(AmountDecimalPlacesExceeded())
