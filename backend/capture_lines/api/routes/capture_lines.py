"""Capture Line Routes — issue, list, validate, consume and fetch capture lines.

Invariants:
    - Static paths (/available, /batch) are declared before /{code}
    - Path codes may contain separators; the codec canonicalises them
    - Validation never raises for malformed codes: the verdict is in the 200 body

Design Decisions:
    - One CaptureLineService per request, built from the request's DB session
    - Codec built from the cached Settings so every request sees the same config
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from capture_lines.config import get_settings
from capture_lines.core.codec import CaptureLineCodec
from capture_lines.infrastructure.capture_line_repository import SqlCaptureLineRepository
from capture_lines.infrastructure.database import get_db
from capture_lines.schemas.capture_line import (
    BatchIssueRequest, BatchIssueResponse, BreakdownResponse,
    CaptureLineListResponse, CaptureLineResponse, IssueCaptureLineRequest,
    UseCaptureLineRequest, ValidationResponse,
)
from capture_lines.services.capture_line_service import CaptureLineService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/capture-lines", tags=["capture-lines"])


def get_capture_line_service(
    db: AsyncSession = Depends(get_db),
) -> CaptureLineService:
    config = get_settings().issuance_config()
    return CaptureLineService(
        SqlCaptureLineRepository(db), CaptureLineCodec(config), config,
    )


@router.post(
    "", response_model=CaptureLineResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_capture_line(
    body: IssueCaptureLineRequest,
    service: CaptureLineService = Depends(get_capture_line_service),
):
    """Generate and persist a new capture line."""
    record = await service.issue(
        body.amount,
        entity_code=body.entity_code,
        concept_code=body.concept_code,
        description=body.description,
        external_reference=body.external_reference,
        validity_days=body.validity_days,
    )
    return CaptureLineResponse.from_record(record)


@router.get("/available", response_model=CaptureLineListResponse)
async def list_available(
    limit: int = Query(10, ge=1, le=100),
    service: CaptureLineService = Depends(get_capture_line_service),
):
    """Available, non-expired lines, oldest first."""
    records = await service.list_available(limit)
    return CaptureLineListResponse(
        total=len(records),
        capture_lines=[CaptureLineResponse.from_record(r) for r in records],
    )


@router.post(
    "/batch", response_model=BatchIssueResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_batch(
    body: BatchIssueRequest,
    service: CaptureLineService = Depends(get_capture_line_service),
):
    """Pre-generate a batch of lines with random references."""
    records = await service.issue_batch(body.quantity, body.default_amount)
    return BatchIssueResponse(
        generated=len(records),
        capture_lines=[CaptureLineResponse.from_record(r) for r in records],
    )


@router.get("/{code}/validate", response_model=ValidationResponse)
async def validate_capture_line(
    code: str,
    service: CaptureLineService = Depends(get_capture_line_service),
):
    """Format, check digit and stored state; expires overdue lines."""
    report = await service.validate(code)
    return ValidationResponse(
        code=report.code,
        valid=report.valid,
        message=report.message,
        error_code=report.error_code,
        status=report.record.status if report.record else None,
        breakdown=(
            BreakdownResponse.from_decoded(report.decoded, service.config)
            if report.decoded else None
        ),
        capture_line=(
            CaptureLineResponse.from_record(report.record)
            if report.record else None
        ),
    )


@router.post("/{code}/use", response_model=CaptureLineResponse)
async def use_capture_line(
    code: str,
    body: UseCaptureLineRequest | None = None,
    service: CaptureLineService = Depends(get_capture_line_service),
):
    """Mark an available line as used (paid)."""
    body = body or UseCaptureLineRequest()
    record = await service.mark_used(
        code, paid_by=body.paid_by, payment_reference=body.payment_reference,
    )
    return CaptureLineResponse.from_record(record)


@router.get("/{code}", response_model=CaptureLineResponse)
async def get_capture_line(
    code: str,
    service: CaptureLineService = Depends(get_capture_line_service),
):
    record = await service.get(code)
    return CaptureLineResponse.from_record(record)
