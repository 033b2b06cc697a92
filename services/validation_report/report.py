"""Operations on validation reports: counting, filtering, ordering and user-facing wording.

All functions are pure and leave the given report untouched.
"""

import math
from typing import Callable

from shared.models.validation import (
    CategorySummary,
    ValidationErrorItem,
    ValidationReport,
    ValidationSeverity,
    ValidationSummary,
)

ItemPredicate = Callable[[str, ValidationErrorItem], bool]

ERROR_TYPE_LABELS = {
    "VALIDATION_ERROR": "Data Format Issue",
    "SCHEMA_ERROR": "Structure Problem",
    "TYPE_ERROR": "Incorrect Data Type",
    "REQUIRED_FIELD_MISSING": "Missing Required Information",
    "REFERENCE_ERROR": "Reference Problem",
    "CONSTRAINT_ERROR": "Data Constraint Issue",
    "FORMAT_ERROR": "Formatting Problem",
}


def _empty_severity_counts() -> dict[ValidationSeverity, int]:
    return {severity: 0 for severity in ValidationSeverity}


def _percent(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(math.floor(part * 100 / total + 0.5))


def _plural(count: int, singular: str, plural: str) -> str:
    return f"is 1 {singular}" if count == 1 else f"are {count} {plural}"


##########################################
############### COUNTING #################
##########################################

def summarize(report: ValidationReport) -> ValidationSummary:
    """
    Count findings per severity and per category.

    The total is the sum of the per-category counts.
    """
    counts_by_severity = _empty_severity_counts()
    counts_by_category: dict[str, int] = {}
    for category, items in report.validation_errors.items():
        counts_by_category[category] = len(items)
        for item in items:
            counts_by_severity[item.severity] += 1

    total = sum(counts_by_category.values())
    return ValidationSummary(
        total_count=total,
        counts_by_severity=counts_by_severity,
        counts_by_category=counts_by_category,
        severity_percentages={severity: _percent(count, total) for severity, count in counts_by_severity.items()},
    )


def category_summaries(report: ValidationReport) -> list[CategorySummary]:
    """
    Per-category summaries in display order: categories holding at least one ERROR first,
    then by descending number of findings. Equal categories keep their report order.
    """
    summaries = []
    for category, items in report.validation_errors.items():
        counts = _empty_severity_counts()
        for item in items:
            counts[item.severity] += 1
        summaries.append(CategorySummary(
            category=category,
            display_name=humanize_category(category),
            error_count=len(items),
            counts_by_severity=counts,
            has_errors=counts[ValidationSeverity.ERROR] > 0,
        ))
    summaries.sort(key=lambda summary: (not summary.has_errors, -summary.error_count))
    return summaries


def order_categories(report: ValidationReport) -> list[str]:
    return [summary.category for summary in category_summaries(report)]


def default_expanded_categories(report: ValidationReport) -> list[str]:
    """Categories to show expanded initially: every category with an ERROR, else just the first one."""
    with_errors = [
        category
        for category, items in report.validation_errors.items()
        if any(item.severity == ValidationSeverity.ERROR for item in items)
    ]
    if with_errors:
        return with_errors
    return report.categories()[:1]


##########################################
############### FILTERING ################
##########################################

def filter_report(report: ValidationReport, predicate: ItemPredicate) -> ValidationReport:
    """
    Keep only findings matching a predicate.

    Args:
        report (ValidationReport): The source report.
        predicate (ItemPredicate): Called with (category, item); truthy keeps the item.

    Returns:
        ValidationReport: A copy without non-matching items; categories left empty are dropped.
    """
    filtered: dict[str, list[ValidationErrorItem]] = {}
    for category, items in report.validation_errors.items():
        matching = [item for item in items if predicate(category, item)]
        if matching:
            filtered[category] = matching
    return report.model_copy(update={"validation_errors": filtered})


def search_report(report: ValidationReport, term: str | None) -> ValidationReport:
    """Case-insensitive free-text search over message, error type, recommendation and category."""
    if not term or not term.strip():
        return report
    needle = term.strip().lower()

    def matches(category: str, item: ValidationErrorItem) -> bool:
        haystacks = (item.message, item.error_type, item.recommendation or "", category)
        return any(needle in haystack.lower() for haystack in haystacks)

    return filter_report(report, matches)


def filter_by_severity(report: ValidationReport, *severities: ValidationSeverity | str) -> ValidationReport:
    wanted = {ValidationSeverity(str(severity).upper()) if not isinstance(severity, ValidationSeverity) else severity for severity in severities}
    return filter_report(report, lambda _category, item: item.severity in wanted)


##########################################
################ WORDING #################
##########################################

def humanize_category(category: str) -> str:
    """e.g. "statement_of_cash_flows" -> "Statement Of Cash Flows"."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in category.replace("_", " ").split(" ") if word)


def translate_error_type(error_type: str) -> str:
    if error_type in ERROR_TYPE_LABELS:
        return ERROR_TYPE_LABELS[error_type]
    return humanize_category(error_type)


def first_error_message(report: ValidationReport) -> str | None:
    """One-line description of the first finding, e.g. "audit_report: Missing opinion (Add the opinion)"."""
    for category, items in report.validation_errors.items():
        if not items:
            continue
        first = items[0]
        message = f"{category}: {first.message}"
        if first.recommendation:
            message += f" ({first.recommendation})"
        return message
    return None


def summary_message(report: ValidationReport) -> str | None:
    """The sentence summarising how many findings block, need attention or are informational."""
    counts = summarize(report).counts_by_severity
    errors = counts[ValidationSeverity.ERROR]
    warnings = counts[ValidationSeverity.WARNING]
    infos = counts[ValidationSeverity.INFO]

    if errors > 0:
        head = "There is 1 critical issue" if errors == 1 else f"There are {errors} critical issues"
        message = f"{head} that must be fixed before proceeding."
        if warnings > 0:
            message += f" Additionally, there {_plural(warnings, 'item', 'items')} that may need your attention."
        return message
    if warnings > 0:
        return f"No critical issues found, but there {_plural(warnings, 'item', 'items')} that may need your attention."
    if infos > 0:
        return f"No problems found. There {_plural(infos, 'informational note', 'informational notes')} available."
    return None


def validation_title(report: ValidationReport) -> str:
    counts = summarize(report).counts_by_severity
    if counts[ValidationSeverity.ERROR] > 0:
        return "Data Issues Found - Action Required"
    if counts[ValidationSeverity.WARNING] > 0:
        return "Data Review - Some Items Need Attention"
    if counts[ValidationSeverity.INFO] > 0:
        return "Data Review - Information Available"
    return "Data Review Results"
