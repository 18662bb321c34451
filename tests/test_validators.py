"""Tests for ledger.validators."""
from decimal import Decimal

import pytest

from ledger.errors import (AmountDecimalPlacesExceeded, AmountMustBeGreaterThanZero,
                           RateDecimalPlacesExceeded, RateOutOfRange)
from ledger.validators import decimal_places, validate_amount, validate_rates


@pytest.mark.parametrize(
    "rate",
    ["0", "0.00", "0.01", "0.5", "0.50", "0.99", "1", "1.00", "0.500"],
)
def test_rates_in_range_with_two_places_pass(rate):
    assert validate_rates(Decimal(rate)) is None


@pytest.mark.parametrize("rate", ["-0.01", "-1", "1.01", "2", "100"])
def test_rate_out_of_range(rate):
    with pytest.raises(RateOutOfRange):
        validate_rates(Decimal(rate))


@pytest.mark.parametrize("rate", ["0.333", "0.001", "0.125", "0.9999"])
def test_rate_too_many_decimal_places(rate):
    with pytest.raises(RateDecimalPlacesExceeded):
        validate_rates(Decimal(rate))


def test_out_of_range_wins_over_precision():
    # 1.005 breaks both rules; the range check runs first
    with pytest.raises(RateOutOfRange):
        validate_rates(Decimal("1.005"))


def test_no_rates_is_ok():
    assert validate_rates() is None


def test_rates_short_circuit_in_order():
    # second rate fails on range, third would fail on precision
    with pytest.raises(RateOutOfRange):
        validate_rates(Decimal("0.5"), 2, Decimal("0.333"))

    with pytest.raises(RateDecimalPlacesExceeded):
        validate_rates(Decimal("0.5"), Decimal("0.333"), Decimal("2"))


def test_rates_accept_int_and_str():
    validate_rates(0, 1, "0.25")


@pytest.mark.parametrize("bad", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_rate_is_out_of_range(bad):
    with pytest.raises(RateOutOfRange):
        validate_rates(Decimal(bad))


def test_float_rate_rejected():
    with pytest.raises(TypeError):
        validate_rates(0.5)


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("-0.01"), 0, -5])
def test_amount_must_be_positive(amount):
    with pytest.raises(AmountMustBeGreaterThanZero):
        validate_amount(amount)


def test_amount_decimal_places_exceeded():
    with pytest.raises(AmountDecimalPlacesExceeded):
        validate_amount(Decimal("10.005"))


@pytest.mark.parametrize("amount", ["10.00", "10", "0.01", "10.000", "1E+3", "99999999.99"])
def test_amount_ok(amount):
    assert validate_amount(Decimal(amount)) is None


def test_non_finite_amount_rejected():
    with pytest.raises(AmountMustBeGreaterThanZero):
        validate_amount(Decimal("NaN"))
    with pytest.raises(AmountMustBeGreaterThanZero):
        validate_amount(Decimal("Infinity"))


@pytest.mark.parametrize(
    "value,expected",
    [
        ("10", 0),
        ("10.00", 0),
        ("10.000", 0),
        ("10.50", 1),
        ("0.333", 3),
        ("1E+2", 0),
        ("0.000", 0),
        # beyond default context precision, must not be rounded away
        ("0.1000000000000000000000000000001", 31),
    ],
)
def test_decimal_places_counts_minimal_scale(value, expected):
    assert decimal_places(Decimal(value)) == expected


def test_validation_error_codes():
    with pytest.raises(RateOutOfRange) as exc_info:
        validate_rates(Decimal("-1"))
    assert exc_info.value.code == "rate_out_of_range"
    assert str(exc_info.value) == "rate must be between 0 and 1"
