import copy

import pytest

from services.filing_transform.field_table import FIELDS, SECTIONS, ItemKind
from services.filing_transform.transform import (
    TransformOptions,
    extract_references,
    from_tagged,
    to_domain,
    to_tagged,
    to_wire,
    to_wire_request,
    unwrap_wire_payload,
)

TOP_LEVEL_DOMAIN_SECTIONS = {
    "filingInformation",
    "directorsStatement",
    "auditReport",
    "statementOfFinancialPosition",
    "incomeStatement",
    "statementOfCashFlows",
    "statementOfChangesInEquity",
    "notes",
}


def _get(source: dict, path: tuple[str, ...]):
    for key in path:
        source = source[key]
    return source


def _fully_populated_domain() -> dict:
    domain = to_domain({})
    for index, field in enumerate(FIELDS):
        if field.kind == ItemKind.BOOLEAN:
            value = index % 2 == 0
        elif field.kind == ItemKind.DATE:
            value = "2024-06-30"
        elif field.kind == ItemKind.STRING:
            value = f"text {index}"
        else:
            value = index * 1000.25
        section = _get(domain, field.domain_path[:-1])
        section[field.element_name] = value
    return domain


##########################################
############### FIELD TABLE ##############
##########################################

def test_table_covers_every_leaf_once():
    assert len(FIELDS) == 138
    assert len({field.domain_path for field in FIELDS}) == len(FIELDS)
    assert len({field.wire_path for field in FIELDS}) == len(FIELDS)


def test_semantic_renames_are_explicit():
    by_domain = {field.domain_path: field.wire_path for field in FIELDS}
    assert by_domain[("statementOfFinancialPosition", "currentAssets", "CurrentAssets")] == (
        "statement_of_financial_position", "current_assets", "total_current_assets"
    )
    assert by_domain[("statementOfFinancialPosition", "Assets")] == ("statement_of_financial_position", "total_assets")
    assert by_domain[("notes", "revenue", "Revenue")] == ("notes", "revenue", "total_revenue")


def test_field_description_splits_element_name():
    field = next(f for f in FIELDS if f.element_name == "TypeOfXBRLFiling")
    assert field.description == "Type Of XBRL Filing"
    assert field.element_id == "sg-dei_TypeOfXBRLFiling"


##########################################
############ DOMAIN <-> WIRE #############
##########################################

def test_to_domain_of_empty_input_returns_skeleton():
    domain = to_domain({})

    assert set(domain) == TOP_LEVEL_DOMAIN_SECTIONS
    assert domain["filingInformation"] == {}
    assert domain["incomeStatement"] == {}
    sfp = domain["statementOfFinancialPosition"]
    assert sfp["currentAssets"] == {}
    assert sfp["equity"] == {}
    assert sfp["Assets"] is None
    assert sfp["Liabilities"] is None
    assert domain["notes"] == {"tradeAndOtherReceivables": {}, "tradeAndOtherPayables": {}, "revenue": {}}


def test_to_wire_of_empty_input_returns_skeleton():
    wire = to_wire({})

    assert wire["id"] is None
    assert "document" not in wire
    assert wire["filing_information"] == {}
    assert wire["statement_of_financial_position"]["noncurrent_liabilities"] == {}
    assert wire["statement_of_financial_position"]["total_assets"] is None
    assert wire["notes"]["trade_and_other_payables"] == {}


@pytest.mark.parametrize("garbage", [None, "oops", 42, [], [{"filing_information": {}}]])
def test_malformed_input_never_raises(garbage):
    assert to_domain(garbage) == to_domain({})
    assert to_wire(garbage) == to_wire({})


def test_non_dict_sections_degrade_to_empty_sections():
    domain = to_domain({
        "filing_information": "not a section",
        "statement_of_financial_position": {"current_assets": [1, 2, 3], "total_assets": 10},
        "notes": None,
    })

    assert domain["filingInformation"] == {}
    assert domain["statementOfFinancialPosition"]["currentAssets"] == {}
    assert domain["statementOfFinancialPosition"]["Assets"] == 10
    assert domain["notes"]["revenue"] == {}


def test_to_domain_copies_values_and_preserves_types(wire_record):
    domain = to_domain(wire_record)

    info = domain["filingInformation"]
    assert info["NameOfCompany"] == "Acme Pte. Ltd."
    assert info["WhetherTheFinancialStatementsArePreparedOnGoingConcernBasis"] is True
    assert domain["directorsStatement"][
        "WhetherThereAreReasonableGroundsToBelieveThatCompanyWillBeAbleToPayItsDebtsAsAndWhenTheyFallDueAtDateOfStatement"
    ] is False
    current_assets = domain["statementOfFinancialPosition"]["currentAssets"]
    assert current_assets["CashAndBankBalances"] == 120000
    assert isinstance(current_assets["CashAndBankBalances"], int)
    assert current_assets["Inventories"] == 30500.5
    assert current_assets["CurrentAssets"] == 150500.5
    assert domain["statementOfFinancialPosition"]["Assets"] == 230500.5
    assert domain["notes"]["revenue"]["RevenueFromServicesTransferredOverTime"] == 250000


def test_na_sentinel_and_missing_leaves_become_none(wire_record):
    info = to_domain(wire_record)["filingInformation"]

    assert info["NameOfParentEntity"] is None
    assert info["NameOfUltimateParentOfGroup"] is None
    # a present section carries every field of its table rows
    assert len(info) == 23


def test_absent_sections_stay_empty(wire_record):
    domain = to_domain(wire_record)

    assert domain["auditReport"] == {}
    assert domain["statementOfCashFlows"] == {}
    assert domain["statementOfFinancialPosition"]["currentLiabilities"] == {}


def test_custom_null_sentinels():
    options = TransformOptions(null_sentinels=("N/A", "-"))
    domain = to_domain({"income_statement": {"revenue": "-", "profit_loss": "N/A"}}, options=options)

    assert domain["incomeStatement"]["Revenue"] is None
    assert domain["incomeStatement"]["ProfitLoss"] is None


def test_fields_outside_table_are_dropped_and_logged(caplog):
    import logging

    logger = logging.getLogger("tests.transform")
    with caplog.at_level(logging.DEBUG, logger="tests.transform"):
        domain = to_domain({"income_statement": {"revenue": 1, "made_up_field": 2}}, options=TransformOptions(logger=logger))

    assert "made_up_field" not in domain["incomeStatement"]
    assert "MadeUpField" not in domain["incomeStatement"]
    assert "made_up_field" in caplog.text


@pytest.mark.parametrize("envelope_key", ["data", "mapped_data"])
def test_envelopes_are_unwrapped(wire_record, envelope_key):
    wrapped = {"success": True, envelope_key: wire_record}

    assert unwrap_wire_payload(wrapped) is wire_record
    assert to_domain(wrapped) == to_domain(wire_record)


def test_round_trip_of_canonical_domain(wire_record):
    domain = to_domain(wire_record)

    assert to_domain(to_wire(domain)) == domain


def test_round_trip_of_fully_populated_domain():
    domain = _fully_populated_domain()
    original = copy.deepcopy(domain)

    assert to_domain(to_wire(domain)) == original
    assert domain == original


def test_round_trip_of_skeleton():
    skeleton = to_domain({})

    assert to_domain(to_wire(skeleton)) == skeleton


def test_empty_section_stays_empty_in_both_directions():
    wire = to_wire({"auditReport": {}, "incomeStatement": {"Revenue": 10}})

    assert wire["audit_report"] == {}
    assert wire["income_statement"]["revenue"] == 10
    assert to_domain({"audit_report": {}})["auditReport"] == {}
    assert to_tagged({"audit_report": {}})["audit_report"] == {}
    assert from_tagged({"audit_report": {}})["audit_report"] == {}


def test_references_pass_through_unchanged(wire_record):
    references = extract_references(wire_record)
    wire = to_wire(to_domain(wire_record), references=references)

    assert references == {"id": "filing-42", "document": "doc-7", "mapped_filing": 42}
    assert wire["id"] == "filing-42"
    assert wire["document"] == "doc-7"
    assert wire["mapped_filing"] == 42


def test_to_wire_request_wraps_mapped_data(wire_record):
    request = to_wire_request(to_domain(wire_record))

    assert set(request) == {"mapped_data"}
    assert request["mapped_data"]["statement_of_financial_position"]["current_assets"]["total_current_assets"] == 150500.5


##########################################
############# TAGGED FORMAT ##############
##########################################

def test_to_tagged_wraps_leaves_in_envelopes(wire_record):
    tagged = to_tagged(wire_record)

    cash = tagged["statement_of_financial_position"]["current_assets"]["cash_and_bank_balances"]
    assert cash["value"] == 120000
    assert cash["numeric_value"] == 120000
    assert cash["string_value"] is None
    assert cash["boolean_value"] is None
    tag = cash["tags"][0]
    assert tag["element_name"] == "CashAndBankBalances"
    assert tag["prefix"] == "sg-as"
    assert tag["data_type"] == "xbrli:monetaryItemType"
    assert tag["period_type"] == "instant"
    assert tag["balance_type"] == "debit"
    assert tag["abstract"] is False


def test_to_tagged_uses_typed_slots(wire_record):
    info = to_tagged(wire_record)["filing_information"]

    assert info["current_period_start"]["date_value"] == "2023-01-01"
    assert info["current_period_start"]["string_value"] is None
    assert info["current_period_start"]["tags"][0]["data_type"] == "xbrli:dateItemType"
    assert info["is_going_concern"]["boolean_value"] is True
    assert info["company_name"]["string_value"] == "Acme Pte. Ltd."
    assert info["company_name"]["tags"][0]["prefix"] == "sg-dei"
    assert info["company_name"]["tags"][0]["period_type"] == "duration"


def test_to_tagged_keeps_null_leaves_literal(wire_record):
    tagged = to_tagged(wire_record)

    assert tagged["filing_information"]["parent_entity_name"] is None
    assert tagged["statement_of_financial_position"]["current_assets"]["development_properties"] is None
    assert tagged["audit_report"] == {}
    assert tagged["id"] == "filing-42"


def test_from_tagged_restores_wire_values(wire_record):
    restored = from_tagged(to_tagged(wire_record))

    assert restored == to_wire(to_domain(wire_record), references=extract_references(wire_record))


def test_from_tagged_accepts_bare_scalars():
    restored = from_tagged({"income_statement": {"revenue": 10, "profit_loss": {"value": 3, "tags": []}}})

    assert restored["income_statement"]["revenue"] == 10
    assert restored["income_statement"]["profit_loss"] == 3


def test_every_section_has_a_distinct_path():
    assert len({section.domain_path for section in SECTIONS}) == len(SECTIONS)
    assert len({section.wire_path for section in SECTIONS}) == len(SECTIONS)
