"""SQL Capture Line Repository — guarded updates and duplicate detection.

Tests:
    - insert/exists/find_by_code round trip through frozen records
    - Duplicate primary key raises DuplicateCodeError, session stays usable
    - update_state only applies when the stored state matches expected_state
    - list_available filters by status and expiry, oldest first
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from capture_lines.core.domain_types import CaptureLineCode, LineStatus
from capture_lines.core.errors import DuplicateCodeError
from capture_lines.core.repository_protocols import CaptureLineRecord

T0 = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _record(code: str, *, issued_at=T0, expiry=date(2026, 11, 9), status=LineStatus.AVAILABLE):
    return CaptureLineRecord(
        code=CaptureLineCode(code),
        entity_code="09",
        concept_code="01",
        amount=Decimal("10.00"),
        issued_at=issued_at,
        expiry_date=expiry,
        status=status,
    )


async def test_insert_and_find(repository):
    await repository.insert(_record("1" * 27))
    assert await repository.exists("1" * 27)
    assert not await repository.exists("2" * 27)

    found = await repository.find_by_code("1" * 27)
    assert found.amount == Decimal("10.00")
    assert found.expiry_date == date(2026, 11, 9)
    assert found.status == LineStatus.AVAILABLE


async def test_find_missing_returns_none(repository):
    assert await repository.find_by_code("3" * 27) is None


async def test_duplicate_insert(repository):
    await repository.insert(_record("1" * 27))
    with pytest.raises(DuplicateCodeError) as exc_info:
        await repository.insert(_record("1" * 27))
    assert exc_info.value.duplicate_code == "1" * 27

    await repository.insert(_record("2" * 27))
    assert await repository.exists("2" * 27)


async def test_insert_many(repository):
    saved = await repository.insert_many([_record("1" * 27), _record("2" * 27)])
    assert len(saved) == 2
    assert await repository.exists("2" * 27)


async def test_update_state_with_matching_guard(repository):
    await repository.insert(_record("1" * 27))
    updated = await repository.update_state(
        "1" * 27, LineStatus.USED,
        expected_state=LineStatus.AVAILABLE,
        used_by="Ana", payment_reference="PAY-1", used_at=T0,
    )
    assert updated.status == LineStatus.USED
    assert updated.used_by == "Ana"
    assert updated.payment_reference == "PAY-1"


async def test_update_state_with_stale_guard(repository):
    await repository.insert(_record("1" * 27, status=LineStatus.USED))
    result = await repository.update_state(
        "1" * 27, LineStatus.EXPIRED, expected_state=LineStatus.AVAILABLE,
    )
    assert result is None
    found = await repository.find_by_code("1" * 27)
    assert found.status == LineStatus.USED


async def test_list_available(repository):
    await repository.insert(_record("1" * 27, issued_at=T0 + timedelta(hours=1)))
    await repository.insert(_record("2" * 27, issued_at=T0))
    await repository.insert(_record("3" * 27, status=LineStatus.USED))
    await repository.insert(_record("4" * 27, expiry=date(2026, 10, 1)))

    available = await repository.list_available(10, date(2026, 10, 19))
    assert [r.code for r in available] == ["2" * 27, "1" * 27]


async def test_list_available_includes_expiry_day(repository):
    await repository.insert(_record("1" * 27, expiry=date(2026, 10, 19)))
    available = await repository.list_available(10, date(2026, 10, 19))
    assert len(available) == 1
