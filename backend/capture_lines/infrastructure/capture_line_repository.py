"""SQL Capture Line Repository — CaptureLineRepository over an AsyncSession.

Invariants:
    - Every write commits before returning (one durable write per transition)
    - update_state is a conditional UPDATE guarded by expected_state; returns None
      when another writer moved the line first
    - Primary-key collisions surface as DuplicateCodeError, never as IntegrityError
    - Rows never leave this module; callers get frozen CaptureLineRecord values
"""

import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from capture_lines.core.domain_types import CaptureLineCode, LineStatus
from capture_lines.core.errors import DuplicateCodeError
from capture_lines.core.repository_protocols import CaptureLineRecord
from capture_lines.models.capture_line import CaptureLine

logger = logging.getLogger(__name__)


def _to_record(row: CaptureLine) -> CaptureLineRecord:
    return CaptureLineRecord(
        code=CaptureLineCode(row.code),
        entity_code=row.entity_code,
        concept_code=row.concept_code,
        amount=row.amount,
        issued_at=row.issued_at,
        expiry_date=row.expiry_date,
        status=LineStatus(row.status),
        description=row.description,
        external_reference=row.external_reference,
        used_by=row.used_by,
        used_at=row.used_at,
        payment_reference=row.payment_reference,
    )


def _to_row(record: CaptureLineRecord) -> CaptureLine:
    return CaptureLine(
        code=record.code,
        entity_code=record.entity_code,
        concept_code=record.concept_code,
        amount=record.amount,
        description=record.description,
        external_reference=record.external_reference,
        status=record.status.value,
        issued_at=record.issued_at,
        expiry_date=record.expiry_date,
        used_by=record.used_by,
        used_at=record.used_at,
        payment_reference=record.payment_reference,
    )


class SqlCaptureLineRepository:
    """Capture line persistence backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, code: CaptureLineCode) -> bool:
        result = await self.db.execute(
            select(CaptureLine.code).where(CaptureLine.code == code),
        )
        return result.scalar_one_or_none() is not None

    async def insert(self, record: CaptureLineRecord) -> CaptureLineRecord:
        self.db.add(_to_row(record))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(
                "Capture line insert collided",
                extra={"capture_line": record.code},
            )
            raise DuplicateCodeError(record.code)
        return record

    async def insert_many(
        self, records: list[CaptureLineRecord],
    ) -> list[CaptureLineRecord]:
        self.db.add_all([_to_row(r) for r in records])
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Batch insert collided: {e}")
            raise DuplicateCodeError(records[0].code if records else "")
        return list(records)

    async def find_by_code(self, code: CaptureLineCode) -> CaptureLineRecord | None:
        result = await self.db.execute(
            select(CaptureLine)
            .where(CaptureLine.code == code)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return _to_record(row) if row else None

    async def update_state(
        self,
        code: CaptureLineCode,
        new_state: LineStatus,
        *,
        expected_state: LineStatus,
        **metadata: object,
    ) -> CaptureLineRecord | None:
        result = await self.db.execute(
            update(CaptureLine)
            .where(CaptureLine.code == code)
            .where(CaptureLine.status == expected_state.value)
            .values(status=new_state.value, **metadata)
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        if result.rowcount == 0:
            return None
        return await self.find_by_code(code)

    async def list_available(
        self, limit: int, as_of: date,
    ) -> list[CaptureLineRecord]:
        result = await self.db.execute(
            select(CaptureLine)
            .where(CaptureLine.status == LineStatus.AVAILABLE.value)
            .where(CaptureLine.expiry_date >= as_of)
            .order_by(CaptureLine.issued_at.asc())
            .limit(limit),
        )
        return [_to_record(row) for row in result.scalars().all()]
