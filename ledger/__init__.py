"""Transaction ledger: invariant validation and transaction history queries."""

from .errors import (AmountDecimalPlacesExceeded, AmountMustBeGreaterThanZero,
                     RateDecimalPlacesExceeded, RateOutOfRange, RequestError,
                     StoreError, ValidationError)
from .pagination import Pagination, normalize_pagination
from .validators import validate_amount, validate_rates

__all__ = [
    "ValidationError",
    "RateOutOfRange",
    "RateDecimalPlacesExceeded",
    "AmountMustBeGreaterThanZero",
    "AmountDecimalPlacesExceeded",
    "RequestError",
    "StoreError",
    "Pagination",
    "normalize_pagination",
    "validate_rates",
    "validate_amount",
]
