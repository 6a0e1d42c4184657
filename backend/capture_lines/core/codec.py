"""Capture Line Codec — builds, validates, decodes and formats 27-digit codes.

Layout: EE CC RRRRRRRR IIIIIIII YYMMDD V
    - EE / CC:   entity and concept codes
    - RRRRRRRR:  reference (folded external reference, or random)
    - IIIIIIII:  amount in cents
    - YYMMDD:    validity date (issuance + N calendar days)
    - V:         MOD-11 check digit over the 26 preceding digits

Invariants:
    - encode() always returns exactly 27 ASCII digits
    - decode() strips whitespace and hyphens, then rejects wrong length or
      non-digits (FormatError) before checking the digit (ChecksumError)
    - format_for_display() never raises; malformed input is returned unchanged
    - The codec holds no mutable state: config is frozen, clock and rng are injected

Design Decisions:
    - Uniqueness is NOT the codec's concern; the service retries against storage
    - Random references use randrange(10**8), so every 8-digit value is reachable
"""

import random
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from capture_lines.core.checksum import mod11_check_digit
from capture_lines.core.domain_types import (
    BASE_LENGTH, CODE_LENGTH, CONCEPT_WIDTH, ENTITY_WIDTH, REFERENCE_SPACE,
    REFERENCE_WIDTH, FIELD_LAYOUT, CaptureLineCode,
)
from capture_lines.core.errors import ChecksumError, FormatError
from capture_lines.core.field_encoding import (
    decode_amount, decode_validity, encode_amount,
    encode_fixed_width, encode_reference, encode_validity,
)
from capture_lines.core.issuance_config import IssuanceConfig

_SEPARATORS = re.compile(r"[\s-]")
_ASCII_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class IssuanceParams:
    """Caller-supplied fields; None falls back to the IssuanceConfig default."""
    amount: Decimal | int | float | str = Decimal("0")
    entity_code: str | None = None
    concept_code: str | None = None
    reference: str | None = None
    validity_days: int | None = None


@dataclass(frozen=True)
class DecodedCaptureLine:
    """Fields recovered from a canonical 27-digit code."""
    code: CaptureLineCode
    entity_code: str
    concept_code: str
    reference: str
    amount: Decimal
    amount_cents: int
    validity: str          # YYMMDD as embedded
    validity_date: str     # 20YY-MM-DD
    check_digit: int

    @property
    def base(self) -> str:
        return self.code[:BASE_LENGTH]

    @property
    def formatted(self) -> str:
        return format_for_display(self.code)


def strip_separators(candidate: str) -> str:
    """Remove spaces, tabs, newlines and hyphens."""
    return _SEPARATORS.sub("", candidate)


def format_for_display(code: str) -> str:
    """Insert single spaces between fields: EE CC RRRRRRRR IIIIIIII YYMMDD V."""
    clean = strip_separators(code)
    if len(clean) != CODE_LENGTH:
        return code
    return " ".join((
        clean[0:2], clean[2:4], clean[4:12], clean[12:20], clean[20:26], clean[26:27],
    ))


def _parse_fields(clean: str) -> DecodedCaptureLine:
    fields = {name: clean[start:end] for name, start, end in FIELD_LAYOUT}
    return DecodedCaptureLine(
        code=CaptureLineCode(clean),
        entity_code=fields["entity_code"],
        concept_code=fields["concept_code"],
        reference=fields["reference"],
        amount=decode_amount(fields["amount"]),
        amount_cents=int(fields["amount"]),
        validity=fields["validity"],
        validity_date=decode_validity(fields["validity"]),
        check_digit=int(fields["check_digit"]),
    )


def breakdown(code: str) -> DecodedCaptureLine | None:
    """Split a code into its fields without verifying the check digit."""
    clean = strip_separators(code)
    if len(clean) != CODE_LENGTH or not _ASCII_DIGITS.fullmatch(clean):
        return None
    return _parse_fields(clean)


def decode(candidate: str) -> DecodedCaptureLine:
    """Validate format and check digit, then decode. Raises FormatError / ChecksumError."""
    clean = strip_separators(candidate)
    if len(clean) != CODE_LENGTH:
        raise FormatError(
            f"Incorrect length (must be {CODE_LENGTH} digits, got {len(clean)})",
            candidate,
        )
    if not _ASCII_DIGITS.fullmatch(clean):
        raise FormatError("Capture line must contain digits only", candidate)

    expected = mod11_check_digit(clean[:BASE_LENGTH])
    received = int(clean[BASE_LENGTH])
    if expected != received:
        raise ChecksumError(clean, expected, received)
    return _parse_fields(clean)


def is_valid(candidate: str) -> bool:
    try:
        decode(candidate)
    except (FormatError, ChecksumError):
        return False
    return True


class CaptureLineCodec:
    """Encodes issuance parameters into capture lines under a fixed configuration."""

    def __init__(
        self,
        config: IssuanceConfig,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self._rng = rng or random.SystemRandom()
        self._clock = clock or (lambda: datetime.now(config.tzinfo))

    def now(self) -> datetime:
        """Current instant from the injected clock."""
        return self._clock()

    def random_reference(self) -> str:
        return encode_fixed_width(self._rng.randrange(REFERENCE_SPACE), REFERENCE_WIDTH)

    def encode(self, params: IssuanceParams) -> CaptureLineCode:
        """Build the 26 base digits, append the check digit."""
        mode = self.config.overflow_mode
        entity = encode_fixed_width(
            params.entity_code or self.config.default_entity_code,
            ENTITY_WIDTH, mode, "entity_code",
        )
        concept = encode_fixed_width(
            params.concept_code or self.config.default_concept_code,
            CONCEPT_WIDTH, mode, "concept_code",
        )
        reference = (
            encode_reference(params.reference, mode)
            if params.reference
            else self.random_reference()
        )
        amount = encode_amount(params.amount, mode)
        days = (
            self.config.validity_days
            if params.validity_days is None
            else params.validity_days
        )
        validity = encode_validity(self.now(), days)

        base = f"{entity}{concept}{reference}{amount}{validity}"
        return CaptureLineCode(f"{base}{mod11_check_digit(base)}")

    # Stateless helpers re-exported for callers holding a codec instance
    decode = staticmethod(decode)
    breakdown = staticmethod(breakdown)
    is_valid = staticmethod(is_valid)
    format_for_display = staticmethod(format_for_display)
    strip_separators = staticmethod(strip_separators)
