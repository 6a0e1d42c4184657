"""Capture Line Service — imperative shell around the codec and lifecycle core.

Invariants:
    - Issuance runs a bounded lookup-then-insert loop (config.max_issue_attempts);
      a primary-key collision on insert counts as one failed attempt
    - Every lifecycle change goes through core/lifecycle.py, then is persisted once
      with a conditional update guarded by the state it was computed from
    - Time is read only from codec.now(); "today" is the codec clock's calendar date

Design Decisions:
    - Service receives repository + codec + config by injection: tests pass a
      deterministic codec and an SQLite-backed repository
    - Entity/concept codes are checked against the config tables here, not in the
      codec: the codec only pads, the service enforces the catalogue
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from capture_lines.core.business_days import add_business_days
from capture_lines.core.codec import CaptureLineCodec, DecodedCaptureLine, IssuanceParams
from capture_lines.core.domain_types import CaptureLineCode, LifecycleEvent, LineStatus
from capture_lines.core.errors import (
    BatchLimitExceededError, ChecksumError, DuplicateCodeError, FormatError,
    InvalidStateTransition, ResourceNotFoundError, UniqueCodeExhaustedError,
    UnknownCodeError,
)
from capture_lines.core.field_encoding import amount_to_cents, encode_fixed_width
from capture_lines.core.issuance_config import IssuanceConfig
from capture_lines.core.lifecycle import evaluate_payment_eligibility, record_use
from capture_lines.core.repository_protocols import (
    CaptureLineRecord, CaptureLineRepository,
)

logger = logging.getLogger(__name__)

PRE_GENERATED_DESCRIPTION = "Pre-generated capture line"


@dataclass(frozen=True)
class ValidationReport:
    """Result of validating a candidate code against format, checksum and storage."""
    code: str
    valid: bool
    message: str
    error_code: str | None = None
    decoded: DecodedCaptureLine | None = None
    record: CaptureLineRecord | None = None


class CaptureLineService:
    """Issue, look up, validate and consume capture lines."""

    def __init__(
        self,
        repository: CaptureLineRepository,
        codec: CaptureLineCodec,
        config: IssuanceConfig | None = None,
    ):
        self.repository = repository
        self.codec = codec
        self.config = config or codec.config

    # ─── Issuance ────────────────────────────────────────────────

    def _resolve_code(self, kind: str, value: str | None, table, default: str) -> str:
        code = encode_fixed_width(value or default, 2, self.config.overflow_mode, kind)
        if table and code not in table:
            raise UnknownCodeError(kind, code)
        return code

    async def _generate_unique(
        self, params: IssuanceParams, reserved: set[str] | None = None,
    ) -> CaptureLineCode:
        reserved = reserved if reserved is not None else set()
        for attempt in range(1, self.config.max_issue_attempts + 1):
            code = self.codec.encode(params)
            if code not in reserved and not await self.repository.exists(code):
                return code
            logger.info(
                "Capture line collision, retrying",
                extra={"capture_line": code, "attempt": attempt},
            )
        raise UniqueCodeExhaustedError(self.config.max_issue_attempts)

    def _build_record(
        self,
        code: CaptureLineCode,
        params: IssuanceParams,
        description: str | None,
        issued_at: datetime,
    ) -> CaptureLineRecord:
        return CaptureLineRecord(
            code=code,
            entity_code=params.entity_code,
            concept_code=params.concept_code,
            amount=Decimal(amount_to_cents(params.amount)).scaleb(-2),
            issued_at=issued_at,
            expiry_date=add_business_days(
                issued_at, self.config.expiry_business_days,
            ),
            status=LineStatus.AVAILABLE,
            description=description,
            external_reference=params.reference,
        )

    async def issue(
        self,
        amount: Decimal,
        *,
        entity_code: str | None = None,
        concept_code: str | None = None,
        description: str | None = None,
        external_reference: str | None = None,
        validity_days: int | None = None,
    ) -> CaptureLineRecord:
        """Generate, uniqueness-check and persist a single capture line."""
        params = IssuanceParams(
            amount=amount,
            entity_code=self._resolve_code(
                "entity", entity_code, self.config.entity_codes,
                self.config.default_entity_code,
            ),
            concept_code=self._resolve_code(
                "concept", concept_code, self.config.concept_codes,
                self.config.default_concept_code,
            ),
            reference=external_reference,
            validity_days=validity_days,
        )
        description = description or self.config.concept_label(params.concept_code)

        for attempt in range(1, self.config.max_issue_attempts + 1):
            code = await self._generate_unique(params)
            record = self._build_record(code, params, description, self.codec.now())
            try:
                saved = await self.repository.insert(record)
            except DuplicateCodeError:
                logger.warning(
                    "Capture line taken between lookup and insert",
                    extra={"capture_line": code, "attempt": attempt},
                )
                continue
            logger.info(
                "Capture line issued",
                extra={"capture_line": code, "status": saved.status.value},
            )
            return saved
        raise UniqueCodeExhaustedError(self.config.max_issue_attempts)

    async def issue_batch(
        self, quantity: int, default_amount: Decimal = Decimal("0"),
    ) -> list[CaptureLineRecord]:
        """Pre-generate `quantity` lines with random references in one commit."""
        if quantity < 1 or quantity > self.config.max_batch_size:
            raise BatchLimitExceededError(quantity, self.config.max_batch_size)

        params = IssuanceParams(
            amount=default_amount,
            entity_code=self.config.default_entity_code,
            concept_code=self.config.default_concept_code,
        )
        issued_at = self.codec.now()
        reserved: set[str] = set()
        records: list[CaptureLineRecord] = []
        for _ in range(quantity):
            code = await self._generate_unique(params, reserved)
            reserved.add(code)
            records.append(
                self._build_record(code, params, PRE_GENERATED_DESCRIPTION, issued_at),
            )

        saved = await self.repository.insert_many(records)
        logger.info(
            f"Issued batch of {len(saved)} capture lines",
            extra={"quantity": len(saved)},
        )
        return saved

    # ─── Lookup ──────────────────────────────────────────────────

    async def get(self, candidate: str) -> CaptureLineRecord:
        """Fetch a stored line. Raises FormatError / ChecksumError / ResourceNotFoundError."""
        decoded = self.codec.decode(candidate)
        record = await self.repository.find_by_code(decoded.code)
        if record is None:
            raise ResourceNotFoundError("Capture line", decoded.code)
        return record

    async def list_available(self, limit: int = 10) -> list[CaptureLineRecord]:
        today = self.codec.now().date()
        return await self.repository.list_available(limit, today)

    # ─── Validation & lifecycle ──────────────────────────────────

    async def validate(self, candidate: str) -> ValidationReport:
        """Format + checksum + stored state; expires available lines past their date."""
        try:
            decoded = self.codec.decode(candidate)
        except (FormatError, ChecksumError) as e:
            return ValidationReport(
                code=candidate, valid=False, message=e.message, error_code=e.code,
            )

        record = await self.repository.find_by_code(decoded.code)
        if record is None:
            return ValidationReport(
                code=decoded.code, valid=False,
                message="Capture line not found",
                error_code="RESOURCE_NOT_FOUND", decoded=decoded,
            )

        eligibility = evaluate_payment_eligibility(
            record.status, record.expiry_date, self.codec.now().date(),
        )
        if eligibility.expired_now:
            updated = await self.repository.update_state(
                decoded.code, eligibility.status,
                expected_state=record.status,
            )
            if updated is not None:
                record = updated
                logger.info(
                    "Capture line expired on validation",
                    extra={"capture_line": decoded.code, "status": record.status.value},
                )
            else:
                # Another writer moved it first; report what is stored now
                record = await self.repository.find_by_code(decoded.code) or record
                eligibility = evaluate_payment_eligibility(
                    record.status, record.expiry_date, self.codec.now().date(),
                )

        return ValidationReport(
            code=decoded.code,
            valid=eligibility.payable,
            message=eligibility.message,
            error_code=eligibility.error_code,
            decoded=decoded,
            record=record,
        )

    async def mark_used(
        self,
        candidate: str,
        *,
        paid_by: str | None = None,
        payment_reference: str | None = None,
    ) -> CaptureLineRecord:
        """available -> used. Raises InvalidStateTransition from any other state."""
        record = await self.get(candidate)
        usage = record_use(
            record.status, paid_by, payment_reference, self.codec.now(),
        )
        updated = await self.repository.update_state(
            record.code, usage.status,
            expected_state=LineStatus.AVAILABLE,
            used_by=usage.used_by,
            used_at=usage.used_at,
            payment_reference=usage.payment_reference,
        )
        if updated is None:
            current = await self.repository.find_by_code(record.code)
            state = current.status if current else record.status
            raise InvalidStateTransition(state.value, LifecycleEvent.USE.value)

        logger.info(
            "Capture line marked as used",
            extra={"capture_line": record.code, "status": updated.status.value},
        )
        return updated
