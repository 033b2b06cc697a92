import logging

import pytest

from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

STORE_URL = "http://store.test"
BACKEND_URL = "http://backend.test"
SESSION_ID = "3f2b8c1e-7d4a-4e6b-9a51-2c8f0d9e4b17"


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_ENGINE", "supabase")
    monkeypatch.setenv("STORE_SUPABASE_BASE_URL", STORE_URL)
    monkeypatch.setenv("STORE_SUPABASE_API_KEY", "anon-key")
    monkeypatch.setenv("BACKEND_ENGINE", "django")
    monkeypatch.setenv("BACKEND_DJANGO_BASE_URL", BACKEND_URL)
    monkeypatch.delenv("BACKEND_DJANGO_API_KEY", raising=False)
    for key in ("POLL_MAX_ATTEMPTS", "PROGRESS_TAU_SECONDS", "PROGRESS_MAX_PERCENT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def helper_config(env: None) -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


@pytest.fixture
def session_id() -> str:
    return SESSION_ID


@pytest.fixture
def wire_record() -> dict:
    """A mapped filing in Wire Format as the backend stores it."""
    return {
        "id": "filing-42",
        "document": "doc-7",
        "mapped_filing": 42,
        "filing_information": {
            "company_name": "Acme Pte. Ltd.",
            "unique_entity_number": "201912345K",
            "current_period_start": "2023-01-01",
            "current_period_end": "2023-12-31",
            "is_going_concern": True,
            "parent_entity_name": "N/A",
            "presentation_currency": "SGD",
        },
        "directors_statement": {
            "directors_opinion_true_fair_view": True,
            "reasonable_grounds_company_debts": False,
        },
        "statement_of_financial_position": {
            "current_assets": {
                "cash_and_bank_balances": 120000,
                "inventories": 30500.5,
                "total_current_assets": 150500.5,
            },
            "noncurrent_assets": {
                "property_plant_equipment": 80000,
                "total_noncurrent_assets": 80000,
            },
            "equity": {"share_capital": 100000, "total_equity": 100000},
            "total_assets": 230500.5,
            "total_liabilities": 130500.5,
        },
        "income_statement": {"revenue": 500000, "profit_loss": 42000},
        "notes": {
            "revenue": {"revenue_from_services_over_time": 250000, "total_revenue": 500000},
        },
    }
