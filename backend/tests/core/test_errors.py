"""Error Hierarchy — codes, HTTP statuses and the REST envelope.

Tests:
    - Every error maps to its documented code and HTTP status
    - to_response() carries capture_line and current_state context
"""

import pytest

from capture_lines.core.errors import (
    BatchLimitExceededError, CaptureLineError, ChecksumError, DatabaseError,
    DuplicateCodeError, EncodingOverflow, ErrorCategory, FormatError,
    InvalidStateTransition, ResourceNotFoundError, UniqueCodeExhaustedError,
    UnknownCodeError,
)


@pytest.mark.parametrize("error,code,status", [
    (FormatError("bad", "x"), "INVALID_FORMAT", 400),
    (ChecksumError("1" * 27, 4, 5), "CHECKSUM_MISMATCH", 400),
    (InvalidStateTransition("used", "use"), "INVALID_STATE_TRANSITION", 400),
    (EncodingOverflow("amount", "100000000", 8), "ENCODING_OVERFLOW", 400),
    (UnknownCodeError("entity", "77"), "UNKNOWN_CODE", 400),
    (BatchLimitExceededError(101, 100), "BATCH_LIMIT_EXCEEDED", 400),
    (ResourceNotFoundError("Capture line", "1"), "RESOURCE_NOT_FOUND", 404),
    (DuplicateCodeError("1" * 27), "DUPLICATE_CODE", 409),
    (UniqueCodeExhaustedError(5), "UNIQUE_CODE_EXHAUSTED", 409),
    (DatabaseError("boom", "commit"), "DATABASE_ERROR", 503),
])
def test_error_codes_and_statuses(error, code, status):
    assert isinstance(error, CaptureLineError)
    assert error.code == code
    assert error.http_status == status


def test_response_envelope_shape():
    body = InvalidStateTransition("used", "use").to_response()
    error = body["error"]
    assert error["code"] == "INVALID_STATE_TRANSITION"
    assert error["message"] == "Capture line not available. Current state: used"
    assert error["category"] == ErrorCategory.BUSINESS_RULE.value
    assert error["context"]["current_state"] == "used"
    assert "timestamp" in error


def test_checksum_error_records_code_in_context():
    error = ChecksumError("0" * 27, 0, 1)
    assert error.to_response()["error"]["context"]["capture_line"] == "0" * 27


def test_duplicate_code_keeps_code():
    assert DuplicateCodeError("123").duplicate_code == "123"


def test_batch_limit_message():
    assert "Maximum 100" in BatchLimitExceededError(150, 100).message
