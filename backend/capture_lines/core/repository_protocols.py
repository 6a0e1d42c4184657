"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Records cross the boundary as frozen CaptureLineRecord values, never ORM rows

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the core pure functions that consume their results are never async
    - update_state takes an expected_state guard so the store can serialize
      concurrent transitions with a conditional update
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol

from capture_lines.core.domain_types import CaptureLineCode, LineStatus


@dataclass(frozen=True)
class CaptureLineRecord:
    """Persisted view of an issued capture line."""
    code: CaptureLineCode
    entity_code: str
    concept_code: str
    amount: Decimal
    issued_at: datetime
    expiry_date: date
    status: LineStatus = LineStatus.AVAILABLE
    description: str | None = None
    external_reference: str | None = None
    used_by: str | None = None
    used_at: datetime | None = None
    payment_reference: str | None = None


class CaptureLineRepository(Protocol):
    """Contract for capture line persistence — implemented by shell."""
    async def exists(self, code: CaptureLineCode) -> bool: ...
    async def insert(self, record: CaptureLineRecord) -> CaptureLineRecord: ...
    async def insert_many(
        self, records: list[CaptureLineRecord],
    ) -> list[CaptureLineRecord]: ...
    async def find_by_code(self, code: CaptureLineCode) -> CaptureLineRecord | None: ...
    async def update_state(
        self,
        code: CaptureLineCode,
        new_state: LineStatus,
        *,
        expected_state: LineStatus,
        **metadata: object,
    ) -> CaptureLineRecord | None: ...
    async def list_available(
        self, limit: int, as_of: date,
    ) -> list[CaptureLineRecord]: ...
