"""Lifecycle State Machine — legal transitions for an issued capture line.

    available ──use────▶ used
        │  ├────expire──▶ expired
        │  └────cancel──▶ cancelled

Invariants:
    - Every transition leaves `available`; used, expired and cancelled are terminal
    - transition() is PURE: (state, event) -> new state | InvalidStateTransition
    - Expiry is evaluated only for `available` lines and only when expiry_date < today
    - Nothing here persists; the shell records each returned state exactly once
"""

from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType

from capture_lines.core.domain_types import LifecycleEvent, LineStatus
from capture_lines.core.errors import InvalidStateTransition


ALLOWED_TRANSITIONS = MappingProxyType({
    LineStatus.AVAILABLE: MappingProxyType({
        LifecycleEvent.USE: LineStatus.USED,
        LifecycleEvent.EXPIRE: LineStatus.EXPIRED,
        LifecycleEvent.CANCEL: LineStatus.CANCELLED,
    }),
    LineStatus.USED: MappingProxyType({}),
    LineStatus.EXPIRED: MappingProxyType({}),
    LineStatus.CANCELLED: MappingProxyType({}),
})

TERMINAL_STATES: frozenset[LineStatus] = frozenset(
    state for state, events in ALLOWED_TRANSITIONS.items() if not events
)


def transition(current: LineStatus, event: LifecycleEvent) -> LineStatus:
    """Apply `event` to `current`. Raises InvalidStateTransition when illegal."""
    current = LineStatus(current)
    event = LifecycleEvent(event)
    new_state = ALLOWED_TRANSITIONS[current].get(event)
    if new_state is None:
        raise InvalidStateTransition(current.value, event.value)
    return new_state


def can_transition(current: LineStatus, event: LifecycleEvent) -> bool:
    return LifecycleEvent(event) in ALLOWED_TRANSITIONS[LineStatus(current)]


def check_expiry(
    current: LineStatus, expiry_date: date, today: date,
) -> LineStatus | None:
    """Return EXPIRED when an available line is past its expiry date, else None."""
    if not can_transition(current, LifecycleEvent.EXPIRE):
        return None
    if expiry_date < today:
        return transition(current, LifecycleEvent.EXPIRE)
    return None


@dataclass(frozen=True)
class UsageRecord:
    """Metadata the shell persists alongside the `used` state."""
    status: LineStatus
    used_by: str | None
    payment_reference: str | None
    used_at: datetime


def record_use(
    current: LineStatus,
    used_by: str | None,
    payment_reference: str | None,
    used_at: datetime,
) -> UsageRecord:
    """available -> used, carrying payer and payment reference."""
    return UsageRecord(
        status=transition(current, LifecycleEvent.USE),
        used_by=used_by,
        payment_reference=payment_reference,
        used_at=used_at,
    )


# (error_code, message) returned for lines that can no longer be paid
_TERMINAL_VERDICTS = MappingProxyType({
    LineStatus.USED: ("ALREADY_USED", "Capture line has already been used"),
    LineStatus.CANCELLED: ("CANCELLED", "Capture line has been cancelled"),
    LineStatus.EXPIRED: ("EXPIRED", "Capture line has expired"),
})


@dataclass(frozen=True)
class PaymentEligibility:
    """Outcome of checking whether a stored line may still be paid."""
    payable: bool
    status: LineStatus
    error_code: str | None = None
    message: str = ""
    expired_now: bool = False   # True when this check performed available -> expired


def evaluate_payment_eligibility(
    current: LineStatus, expiry_date: date, today: date,
) -> PaymentEligibility:
    """Checks in order: used, cancelled, already expired, past expiry, payable."""
    current = LineStatus(current)
    if current in TERMINAL_STATES:
        error_code, message = _TERMINAL_VERDICTS[current]
        return PaymentEligibility(False, current, error_code, message)

    expired = check_expiry(current, expiry_date, today)
    if expired is not None:
        return PaymentEligibility(
            False, expired, *_TERMINAL_VERDICTS[expired], expired_now=True,
        )
    return PaymentEligibility(True, current, None, "Capture line is valid for payment")
