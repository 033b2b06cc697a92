import pytest

from services.validation_report.report import (
    category_summaries,
    default_expanded_categories,
    filter_by_severity,
    filter_report,
    first_error_message,
    humanize_category,
    order_categories,
    search_report,
    summarize,
    summary_message,
    translate_error_type,
    validation_title,
)
from shared.models.validation import ValidationReport, ValidationSeverity


@pytest.fixture
def report() -> ValidationReport:
    return ValidationReport(
        validation_status="error",
        taxonomy_version="2022.2",
        validation_errors={
            "filing_information": [
                {"message": "Period end precedes period start", "error_type": "CONSTRAINT_ERROR", "severity": "warning"},
            ],
            "audit_report": [
                {
                    "message": "Missing auditor opinion",
                    "error_type": "REQUIRED_FIELD_MISSING",
                    "severity": "ERROR",
                    "recommendation": "Add the opinion",
                },
            ],
            "statement_of_cash_flows": [
                {"message": "Cash flow totals do not reconcile", "severity": "ERROR"},
                {"message": "Rounded figures detected", "severity": "INFO"},
            ],
        },
    )


##########################################
################ MODEL ###################
##########################################

def test_bare_strings_become_findings():
    report = ValidationReport(validation_errors={"notes": ["Revenue note missing"], "equity": None})

    item = report.validation_errors["notes"][0]
    assert item.message == "Revenue note missing"
    assert item.error_type == "VALIDATION_ERROR"
    assert item.severity == ValidationSeverity.ERROR
    assert report.validation_errors["equity"] == []


def test_missing_errors_are_an_empty_mapping():
    assert ValidationReport(validation_errors=None).validation_errors == {}


##########################################
############### COUNTING #################
##########################################

def test_summarize_counts(report):
    summary = summarize(report)

    assert summary.total_count == 4
    assert summary.counts_by_severity == {
        ValidationSeverity.ERROR: 2,
        ValidationSeverity.WARNING: 1,
        ValidationSeverity.INFO: 1,
    }
    assert summary.counts_by_category == {"filing_information": 1, "audit_report": 1, "statement_of_cash_flows": 2}
    assert summary.total_count == sum(summary.counts_by_category.values())
    assert summary.severity_percentages[ValidationSeverity.ERROR] == 50
    assert summary.severity_percentages[ValidationSeverity.WARNING] == 25


def test_percentages_round_half_up():
    report = ValidationReport(validation_errors={"a": [
        {"message": "x", "severity": "ERROR"},
        {"message": "y", "severity": "ERROR"},
        {"message": "z", "severity": "WARNING"},
    ]})

    percentages = summarize(report).severity_percentages
    assert percentages[ValidationSeverity.ERROR] == 67
    assert percentages[ValidationSeverity.WARNING] == 33
    assert percentages[ValidationSeverity.INFO] == 0


def test_summarize_empty_report():
    summary = summarize(ValidationReport())

    assert summary.total_count == 0
    assert all(value == 0 for value in summary.severity_percentages.values())


def test_categories_with_errors_come_first(report):
    assert order_categories(report) == ["statement_of_cash_flows", "audit_report", "filing_information"]

    first = category_summaries(report)[0]
    assert first.display_name == "Statement Of Cash Flows"
    assert first.error_count == 2
    assert first.has_errors is True


def test_order_is_stable_for_ties():
    report = ValidationReport(validation_errors={
        "b": [{"message": "x", "severity": "WARNING"}],
        "a": [{"message": "y", "severity": "WARNING"}],
    })

    assert order_categories(report) == ["b", "a"]


def test_default_expanded_categories(report):
    assert default_expanded_categories(report) == ["audit_report", "statement_of_cash_flows"]


def test_default_expanded_falls_back_to_first_category():
    report = ValidationReport(validation_errors={
        "notes": [{"message": "x", "severity": "INFO"}],
        "equity": [{"message": "y", "severity": "WARNING"}],
    })

    assert default_expanded_categories(report) == ["notes"]
    assert default_expanded_categories(ValidationReport()) == []


##########################################
############### FILTERING ################
##########################################

def test_filter_drops_empty_categories_and_keeps_original(report):
    filtered = filter_report(report, lambda category, item: item.severity == ValidationSeverity.ERROR)

    assert filtered.categories() == ["audit_report", "statement_of_cash_flows"]
    assert len(filtered.validation_errors["statement_of_cash_flows"]) == 1
    assert summarize(report).total_count == 4
    assert filtered.taxonomy_version == "2022.2"


def test_search_is_case_insensitive(report):
    assert search_report(report, "OPINION").categories() == ["audit_report"]
    assert search_report(report, "constraint").categories() == ["filing_information"]
    assert search_report(report, "cash_flows").categories() == ["statement_of_cash_flows"]


def test_blank_search_returns_report(report):
    assert search_report(report, "  ") is report
    assert search_report(report, None) is report


def test_filter_by_severity_accepts_strings(report):
    assert filter_by_severity(report, "info").categories() == ["statement_of_cash_flows"]
    assert summarize(filter_by_severity(report, ValidationSeverity.ERROR, "warning")).total_count == 3


##########################################
################ WORDING #################
##########################################

def test_translate_error_type():
    assert translate_error_type("REQUIRED_FIELD_MISSING") == "Missing Required Information"
    assert translate_error_type("CALCULATION_MISMATCH") == "Calculation Mismatch"


def test_humanize_category():
    assert humanize_category("trade_and_other_receivables") == "Trade And Other Receivables"


def test_first_error_message(report):
    assert first_error_message(report) == "filing_information: Period end precedes period start"
    assert first_error_message(filter_by_severity(report, "ERROR")) == "audit_report: Missing auditor opinion (Add the opinion)"
    assert first_error_message(ValidationReport()) is None


def test_summary_message_and_title(report):
    assert summary_message(report) == (
        "There are 2 critical issues that must be fixed before proceeding."
        " Additionally, there is 1 item that may need your attention."
    )
    assert validation_title(report) == "Data Issues Found - Action Required"


def test_summary_message_without_errors(report):
    warnings_only = filter_by_severity(report, "WARNING")
    infos_only = filter_by_severity(report, "INFO")

    assert summary_message(warnings_only) == "No critical issues found, but there is 1 item that may need your attention."
    assert validation_title(warnings_only) == "Data Review - Some Items Need Attention"
    assert summary_message(infos_only) == "No problems found. There is 1 informational note available."
    assert validation_title(infos_only) == "Data Review - Information Available"
    assert summary_message(ValidationReport()) is None
    assert validation_title(ValidationReport()) == "Data Review Results"
