"""MOD-11 Check Digit — weighted modular checksum over a digit string.

Invariants:
    - Weights cycle (3, 7, 1) from the leftmost digit
    - Output is always a single digit 0–9 (a raw result of 10 collapses to 0)
    - Caller guarantees digit-only input
"""

from collections.abc import Sequence

CHECKSUM_WEIGHTS: tuple[int, ...] = (3, 7, 1)
CHECKSUM_MODULUS: int = 11


def mod11_check_digit(digits: str | Sequence[int]) -> int:
    """Compute the check digit for a base digit sequence."""
    total = sum(
        int(digit) * CHECKSUM_WEIGHTS[i % len(CHECKSUM_WEIGHTS)]
        for i, digit in enumerate(digits)
    )
    remainder = total % CHECKSUM_MODULUS
    check = 0 if remainder == 0 else CHECKSUM_MODULUS - remainder
    return 0 if check == 10 else check
