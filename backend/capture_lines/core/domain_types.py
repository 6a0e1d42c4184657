"""Domain Types — code layout, lifecycle states, and value aliases.

Invariants:
    - A full capture line is CODE_LENGTH (27) ASCII digits
    - FIELD_LAYOUT widths sum to BASE_LENGTH (26); the check digit is the 27th
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB `status` column without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CaptureLineCode = NewType("CaptureLineCode", str)   # 27 ASCII digits


# ─── Field Layout ────────────────────────────────────────────────

ENTITY_WIDTH: int = 2
CONCEPT_WIDTH: int = 2
REFERENCE_WIDTH: int = 8
AMOUNT_WIDTH: int = 8
VALIDITY_WIDTH: int = 6

BASE_LENGTH: int = (
    ENTITY_WIDTH + CONCEPT_WIDTH + REFERENCE_WIDTH + AMOUNT_WIDTH + VALIDITY_WIDTH
)
CODE_LENGTH: int = BASE_LENGTH + 1

# (field name, start, end) slices over the canonical 27-digit string
FIELD_LAYOUT: tuple[tuple[str, int, int], ...] = (
    ("entity_code", 0, 2),
    ("concept_code", 2, 4),
    ("reference", 4, 12),
    ("amount", 12, 20),
    ("validity", 20, 26),
    ("check_digit", 26, 27),
)

REFERENCE_SPACE: int = 10 ** REFERENCE_WIDTH


# ─── Enums ───────────────────────────────────────────────────────

class LineStatus(str, Enum):
    """Capture line lifecycle states — maps to DB `status` column."""
    AVAILABLE = "available"
    USED = "used"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class LifecycleEvent(str, Enum):
    """Events that drive a capture line out of `available`."""
    USE = "use"
    EXPIRE = "expire"
    CANCEL = "cancel"


class OverflowMode(str, Enum):
    """What the field encoder does when a value exceeds its fixed width."""
    TRUNCATE = "truncate"   # keep the low-order digits (legacy wire behaviour)
    STRICT = "strict"       # raise EncodingOverflow
