"""Pydantic models for taxonomy validation results returned by the processing backend."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ValidationSeverity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ValidationErrorItem(BaseModel):
    """
    A single validation finding.

    Attributes:
        message:        Human-readable description of the finding.
        error_type:     Machine category, e.g. "REQUIRED_FIELD_MISSING".
        severity:       ERROR, WARNING or INFO.
        actual_value:   The offending value, if the validator reported one.
        recommendation: Suggested fix, if any.
    """

    message: str
    error_type: str = "VALIDATION_ERROR"
    severity: ValidationSeverity = ValidationSeverity.ERROR
    actual_value: Any = None
    recommendation: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _normalise_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


def _coerce_item(raw: Any) -> Any:
    # some validators send bare strings instead of structured findings
    if isinstance(raw, str):
        return {"message": raw}
    return raw


class ValidationReport(BaseModel):
    """
    Validation outcome for a mapped filing, with findings grouped by category.

    The total number of findings is always the sum of the per-category list lengths.
    """

    validation_status: str = "error"
    is_valid: bool = False
    validation_timestamp: str | None = None
    taxonomy_version: str | None = None
    validation_errors: dict[str, list[ValidationErrorItem]] = Field(default_factory=dict)

    @field_validator("validation_errors", mode="before")
    @classmethod
    def _coerce_errors(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        coerced = {}
        for category, items in value.items():
            if items is None:
                items = []
            elif not isinstance(items, list):
                items = [items]
            coerced[category] = [_coerce_item(item) for item in items]
        return coerced

    def categories(self) -> list[str]:
        return list(self.validation_errors.keys())


class ValidationSummary(BaseModel):
    total_count: int
    counts_by_severity: dict[ValidationSeverity, int]
    counts_by_category: dict[str, int]
    severity_percentages: dict[ValidationSeverity, int]


class CategorySummary(BaseModel):
    category: str
    display_name: str
    error_count: int
    counts_by_severity: dict[ValidationSeverity, int]
    has_errors: bool
