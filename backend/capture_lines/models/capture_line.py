"""CaptureLine ORM — persists one issued capture line keyed by its 27-digit code.

Invariants:
    - code is the primary key (27 ASCII digits, canonical form without separators)
    - status holds a LineStatus value; transitions are decided by core/lifecycle.py
    - expiry_date is the business-day expiry, independent of the validity digits in the code
    - used_by / used_at / payment_reference are set together, only on available -> used
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Numeric, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from capture_lines.core.domain_types import CODE_LENGTH, LineStatus
from capture_lines.db.base import Base


class CaptureLine(Base):
    """Issued capture line and its lifecycle state."""
    __tablename__ = "capture_lines"

    code: Mapped[str] = mapped_column(String(CODE_LENGTH), primary_key=True)
    entity_code: Mapped[str] = mapped_column(String(2), nullable=False)
    concept_code: Mapped[str] = mapped_column(String(2), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    external_reference: Mapped[str | None] = mapped_column(
        String(64), nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LineStatus.AVAILABLE.value, index=True,
    )
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Usage
    used_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    payment_reference: Mapped[str | None] = mapped_column(
        String(128), nullable=True,
    )
