"""Capture Line Schemas — Pydantic models for the capture line endpoints.

Invariants:
    - IssueCaptureLineRequest.amount > 0; codes are exactly 2 digits when given
    - BatchIssueRequest.quantity >= 1 (upper bound checked by the service against config)
    - Responses always carry both the canonical and the display form of the code

Design Decisions:
    - Decimal amounts end to end: serialized as strings, never floats
    - from_record / from_report classmethods keep the routes free of field mapping
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from capture_lines.core.codec import DecodedCaptureLine, format_for_display
from capture_lines.core.domain_types import LineStatus
from capture_lines.core.issuance_config import IssuanceConfig
from capture_lines.core.repository_protocols import CaptureLineRecord


class IssueCaptureLineRequest(BaseModel):
    """Single issuance — amount required, everything else falls back to config."""
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    concept_code: str | None = Field(None, pattern=r"^\d{1,2}$")
    entity_code: str | None = Field(None, pattern=r"^\d{1,2}$")
    description: str | None = Field(None, max_length=255)
    external_reference: str | None = Field(None, max_length=64)
    validity_days: int | None = Field(None, ge=0, le=3650)

    @field_validator("description", "external_reference")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class BatchIssueRequest(BaseModel):
    quantity: int = Field(10, ge=1)
    default_amount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)


class UseCaptureLineRequest(BaseModel):
    """Payment confirmation metadata."""
    payment_reference: str | None = Field(None, max_length=64)
    paid_by: str | None = Field(None, max_length=100)


class CaptureLineResponse(BaseModel):
    """Public view of a stored capture line."""
    code: str
    formatted_code: str
    entity_code: str
    concept_code: str
    amount: Decimal
    description: str | None = None
    external_reference: str | None = None
    status: LineStatus
    issued_at: datetime
    expiry_date: date
    used_by: str | None = None
    used_at: datetime | None = None
    payment_reference: str | None = None

    @classmethod
    def from_record(cls, record: CaptureLineRecord) -> "CaptureLineResponse":
        return cls(
            code=record.code,
            formatted_code=format_for_display(record.code),
            entity_code=record.entity_code,
            concept_code=record.concept_code,
            amount=record.amount,
            description=record.description,
            external_reference=record.external_reference,
            status=record.status,
            issued_at=record.issued_at,
            expiry_date=record.expiry_date,
            used_by=record.used_by,
            used_at=record.used_at,
            payment_reference=record.payment_reference,
        )


class CaptureLineListResponse(BaseModel):
    total: int
    capture_lines: list[CaptureLineResponse]


class BatchIssueResponse(BaseModel):
    generated: int
    capture_lines: list[CaptureLineResponse]


class BreakdownResponse(BaseModel):
    """Fields recovered from the code itself (no storage lookup)."""
    entity_code: str
    concept_code: str
    reference: str
    amount: Decimal
    validity: str
    validity_date: str
    check_digit: int
    entity_label: str | None = None
    concept_label: str | None = None

    @classmethod
    def from_decoded(
        cls, decoded: DecodedCaptureLine, config: IssuanceConfig | None = None,
    ) -> "BreakdownResponse":
        """Labels come from the configured code tables; unknown codes stay None."""
        return cls(
            entity_code=decoded.entity_code,
            concept_code=decoded.concept_code,
            reference=decoded.reference,
            amount=decoded.amount,
            validity=decoded.validity,
            validity_date=decoded.validity_date,
            check_digit=decoded.check_digit,
            entity_label=config.entity_label(decoded.entity_code) if config else None,
            concept_label=config.concept_label(decoded.concept_code) if config else None,
        )


class ValidationResponse(BaseModel):
    """Outcome of GET /{code}/validate — always 200, `valid` says the verdict."""
    code: str
    valid: bool
    message: str
    error_code: str | None = None
    status: LineStatus | None = None
    breakdown: BreakdownResponse | None = None
    capture_line: CaptureLineResponse | None = None
