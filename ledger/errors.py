"""Error taxonomy for the ledger slice.

``ValidationError``  caller-supplied monetary value broke an invariant.
``RequestError``     malformed request input, rejected before the store is touched.
``StoreError``       the persistent store failed; details stay in the logs.
"""
from __future__ import annotations

__all__ = [
    "LedgerError",
    "ValidationError",
    "RateOutOfRange",
    "RateDecimalPlacesExceeded",
    "AmountMustBeGreaterThanZero",
    "AmountDecimalPlacesExceeded",
    "RequestError",
    "InvalidTimeFormat",
    "StoreError",
]


class LedgerError(Exception):
    """Base class; ``code`` is the stable token reported to clients."""

    code = "ledger_error"
    message = "ledger error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class ValidationError(LedgerError):
    code = "validation_error"


class RateOutOfRange(ValidationError):
    code = "rate_out_of_range"
    message = "rate must be between 0 and 1"


class RateDecimalPlacesExceeded(ValidationError):
    code = "rate_decimal_places_exceeded"
    message = "rate must have at most 2 decimal places"


class AmountMustBeGreaterThanZero(ValidationError):
    code = "amount_must_be_greater_than_zero"
    message = "amount must be greater than 0"


class AmountDecimalPlacesExceeded(ValidationError):
    code = "amount_decimal_places_exceeded"
    message = "amount must have at most 2 decimal places"


class RequestError(LedgerError):
    code = "bad_request"


class InvalidTimeFormat(RequestError):
    code = "invalid_time_format"

    def __init__(self, field: str, layout: str) -> None:
        self.field = field
        super().__init__(f"{field} format is invalid, expected {layout}")


class StoreError(LedgerError):
    code = "store_unavailable"
    message = "transaction store unavailable"
