"""Field Encoder — fixed-width digit substrings for each capture line field.

Invariants:
    - Every encoder returns exactly `width` ASCII digits
    - TRUNCATE mode keeps the least significant `width` digits; STRICT mode raises
    - Cents round half-up on the binary product amount * 100, so 1.005 gives 100
    - decode_validity is total: any 6 digits map to "20YY-MM-DD" without calendar checks
"""

import re
from datetime import datetime, date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from capture_lines.core.domain_types import (
    AMOUNT_WIDTH, REFERENCE_WIDTH, VALIDITY_WIDTH, OverflowMode,
)
from capture_lines.core.errors import EncodingOverflow

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")
_CENT = Decimal("0.01")


def encode_fixed_width(
    value: int | str,
    width: int,
    mode: OverflowMode = OverflowMode.TRUNCATE,
    field_name: str = "value",
) -> str:
    """Zero-pad `value` to `width` digits, keeping only the low-order digits."""
    text = str(value)
    if len(text) > width and mode is OverflowMode.STRICT:
        raise EncodingOverflow(field_name, text, width)
    return text.zfill(width)[-width:]


def normalize_reference(reference: str) -> str:
    """Strip non-alphanumerics and uppercase (license plates, folios)."""
    return _NON_ALPHANUMERIC.sub("", reference).upper()


def fold_reference(reference: str) -> int:
    """Positional weighted character-code sum (weight = 1-based index)."""
    return sum(
        ord(char) * position
        for position, char in enumerate(normalize_reference(reference), start=1)
    )


def encode_reference(
    reference: str, mode: OverflowMode = OverflowMode.TRUNCATE,
) -> str:
    return encode_fixed_width(
        fold_reference(reference), REFERENCE_WIDTH, mode, "reference",
    )


def amount_to_cents(amount: Decimal | int | float | str) -> int:
    """Convert major units to integer cents.

    The product is taken in binary floating point and then rounded half-up,
    so 1.005 and 2.675 land on 100 and 267 like any float-based issuer.
    """
    product = float(amount) * 100
    return int(Decimal(product).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def encode_amount(
    amount: Decimal | int | float | str,
    mode: OverflowMode = OverflowMode.TRUNCATE,
) -> str:
    cents = amount_to_cents(amount)
    if cents < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
    return encode_fixed_width(cents, AMOUNT_WIDTH, mode, "amount")


def encode_validity(issued_at: datetime | date, days: int) -> str:
    """YYMMDD of the issuance instant plus `days` calendar days."""
    return (issued_at + timedelta(days=days)).strftime("%y%m%d")


def decode_amount(field: str) -> Decimal:
    """8-digit cents field back to a two-decimal currency amount."""
    return Decimal(int(field)).scaleb(-2).quantize(_CENT)


def decode_validity(field: str) -> str:
    """YYMMDD to a 4-digit-year ISO date string, assuming the 20YY century."""
    if len(field) != VALIDITY_WIDTH:
        raise ValueError(f"Validity field must be {VALIDITY_WIDTH} digits: {field!r}")
    return f"20{field[0:2]}-{field[2:4]}-{field[4:6]}"
