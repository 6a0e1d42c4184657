"""Issuance Configuration — immutable value passed into the codec and service.

Invariants:
    - Frozen: built once from Settings, never mutated at runtime
    - Code tables map 2-digit codes to human labels
    - validity_days (calendar, embedded in the code) and expiry_business_days
      (business days, persisted) are independent settings
"""

from dataclasses import dataclass, field
from collections.abc import Mapping
from types import MappingProxyType
from zoneinfo import ZoneInfo

from capture_lines.core.domain_types import OverflowMode

DEFAULT_ENTITY_CODES: dict[str, str] = {"09": "Ciudad de México"}
DEFAULT_CONCEPT_CODES: dict[str, str] = {"01": "Multa de tránsito"}


def _frozen(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class IssuanceConfig:
    """Everything the core needs to issue and describe capture lines."""
    entity_codes: Mapping[str, str] = field(
        default_factory=lambda: _frozen(DEFAULT_ENTITY_CODES),
    )
    concept_codes: Mapping[str, str] = field(
        default_factory=lambda: _frozen(DEFAULT_CONCEPT_CODES),
    )
    default_entity_code: str = "09"
    default_concept_code: str = "01"
    validity_days: int = 15
    expiry_business_days: int = 15
    max_batch_size: int = 100
    max_issue_attempts: int = 5
    overflow_mode: OverflowMode = OverflowMode.TRUNCATE
    timezone: str = "America/Mexico_City"

    def __post_init__(self) -> None:
        object.__setattr__(self, "entity_codes", _frozen(self.entity_codes))
        object.__setattr__(self, "concept_codes", _frozen(self.concept_codes))
        if self.validity_days < 0:
            raise ValueError(f"validity_days must be >= 0, got {self.validity_days}")
        if self.expiry_business_days < 0:
            raise ValueError(
                f"expiry_business_days must be >= 0, got {self.expiry_business_days}"
            )
        if self.max_batch_size < 1:
            raise ValueError(f"max_batch_size must be >= 1, got {self.max_batch_size}")
        if self.max_issue_attempts < 1:
            raise ValueError(
                f"max_issue_attempts must be >= 1, got {self.max_issue_attempts}"
            )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def entity_label(self, code: str) -> str | None:
        return self.entity_codes.get(code)

    def concept_label(self, code: str) -> str | None:
        return self.concept_codes.get(code)
