"""Field Encoder — fixed-width padding, reference folding, amounts and validity.

Tests:
    - Zero padding and low-order truncation; strict mode raises EncodingOverflow
    - Reference normalisation and positional fold
    - Cents conversion rounds half-up on the floating point product
    - Validity date is issuance + N calendar days as YYMMDD
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from capture_lines.core.domain_types import OverflowMode
from capture_lines.core.errors import EncodingOverflow
from capture_lines.core.field_encoding import (
    amount_to_cents, decode_amount, decode_validity, encode_amount,
    encode_fixed_width, encode_reference, encode_validity, fold_reference,
    normalize_reference,
)


# ─── encode_fixed_width ─────────────────────────────────────────

def test_pads_with_leading_zeros():
    assert encode_fixed_width(5, 2) == "05"
    assert encode_fixed_width("9", 2) == "09"


def test_exact_width_is_unchanged():
    assert encode_fixed_width(12345678, 8) == "12345678"


def test_truncate_keeps_low_order_digits():
    assert encode_fixed_width(123456789, 8) == "23456789"


def test_strict_mode_raises_on_overflow():
    with pytest.raises(EncodingOverflow) as exc_info:
        encode_fixed_width(123456789, 8, OverflowMode.STRICT, "amount")
    assert exc_info.value.field_name == "amount"
    assert exc_info.value.width == 8
    assert exc_info.value.code == "ENCODING_OVERFLOW"


def test_strict_mode_accepts_values_that_fit():
    assert encode_fixed_width(42, 8, OverflowMode.STRICT) == "00000042"


# ─── References ─────────────────────────────────────────────────

def test_normalize_strips_and_uppercases():
    assert normalize_reference("abc-123") == "ABC123"
    assert normalize_reference(" x y.z ") == "XYZ"


def test_fold_is_weighted_by_position():
    assert fold_reference("ABC123") == 1150
    assert fold_reference("abc-123") == 1150


def test_fold_is_order_sensitive():
    assert fold_reference("AB") != fold_reference("BA")


def test_encode_reference_pads_fold():
    assert encode_reference("12345678") == "00001932"


def test_reference_of_only_separators_folds_to_zero():
    assert encode_reference("---") == "00000000"


# ─── Amounts ────────────────────────────────────────────────────

def test_amount_to_cents():
    assert amount_to_cents(Decimal("1500.00")) == 150000
    assert amount_to_cents(1500) == 150000
    assert amount_to_cents("12.34") == 1234


def test_amount_rounds_half_up():
    assert amount_to_cents(Decimal("0.005")) == 1
    assert amount_to_cents(0.125) == 13
    assert amount_to_cents(Decimal("0.004")) == 0


@pytest.mark.parametrize("amount, cents", [
    ("1.005", 100),
    ("2.675", 267),
    (1.005, 100),
    (Decimal("2.675"), 267),
])
def test_amount_uses_binary_product(amount, cents):
    assert amount_to_cents(amount) == cents
    assert amount_to_cents(amount) == round(float(amount) * 100)


def test_encode_amount():
    assert encode_amount(Decimal("1500.00")) == "00150000"
    assert encode_amount(0) == "00000000"


def test_encode_amount_truncates_one_million():
    assert encode_amount(Decimal("1000000.00")) == "00000000"


def test_encode_amount_strict_rejects_one_million():
    with pytest.raises(EncodingOverflow):
        encode_amount(Decimal("1000000.00"), OverflowMode.STRICT)


def test_encode_amount_max_in_strict_mode():
    assert encode_amount(Decimal("999999.99"), OverflowMode.STRICT) == "99999999"


def test_negative_amount_rejected():
    with pytest.raises(ValueError):
        encode_amount(Decimal("-1.00"))


def test_decode_amount():
    assert decode_amount("00150000") == Decimal("1500.00")
    assert decode_amount("00000001") == Decimal("0.01")


# ─── Validity ───────────────────────────────────────────────────

def test_encode_validity_adds_calendar_days():
    assert encode_validity(datetime(2026, 1, 28, 10, 0), 15) == "260212"


def test_encode_validity_crosses_year():
    assert encode_validity(date(2026, 12, 25), 10) == "270104"


def test_encode_validity_zero_days():
    assert encode_validity(date(2026, 10, 18), 0) == "261018"


def test_decode_validity():
    assert decode_validity("260212") == "2026-02-12"


def test_decode_validity_does_not_check_calendar():
    assert decode_validity("261399") == "2026-13-99"


def test_decode_validity_rejects_wrong_width():
    with pytest.raises(ValueError):
        decode_validity("2602")
