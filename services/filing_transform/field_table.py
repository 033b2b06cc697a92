"""Translation table between the Domain Model, the Wire Format and the Tagged Format.

Every leaf field of a filing appears exactly once, as a row of a section. The same rows
drive both directions of the transform, so domain and wire names can never drift apart.

Hierarchy:
  SectionSpec: a fixed section of the filing (e.g. current assets), with its paths on both sides.
  FieldSpec:   one leaf field (domain path, wire path, item kind and taxonomy metadata).
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ItemKind(str, Enum):
    MONETARY = "monetary"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"

    @property
    def data_type(self) -> str:
        return f"xbrli:{self.value}ItemType"


class PeriodType(str, Enum):
    INSTANT = "instant"
    DURATION = "duration"


class BalanceType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class FieldSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain_path: tuple[str, ...]
    wire_path: tuple[str, ...]
    kind: ItemKind = ItemKind.MONETARY
    prefix: str = "sg-as"
    period_type: PeriodType = PeriodType.DURATION
    balance_type: BalanceType | None = None

    @property
    def element_name(self) -> str:
        return self.domain_path[-1]

    @property
    def wire_name(self) -> str:
        return self.wire_path[-1]

    @property
    def element_id(self) -> str:
        return f"{self.prefix}_{self.element_name}"

    @property
    def description(self) -> str:
        """Readable label derived from the element name, e.g. "Cash And Bank Balances"."""
        return " ".join(re.findall(r"[A-Z]+(?![a-z])|[A-Z][a-z]*|\d+", self.element_name))


class SectionSpec(BaseModel):
    """
    A fixed section of the filing.

    Container sections (statement of financial position, notes) are always emitted, because
    they hold subsections; their own leaves are filled with None when the source lacks them.
    Plain sections are emitted as an empty dict when absent in the source.
    """

    model_config = ConfigDict(frozen=True)

    domain_path: tuple[str, ...]
    wire_path: tuple[str, ...]
    container: bool = False
    fields: tuple[FieldSpec, ...] = ()


##########################################
############### TABLE ROWS ###############
##########################################

M, S, B, D = ItemKind.MONETARY, ItemKind.STRING, ItemKind.BOOLEAN, ItemKind.DATE
DR, CR = BalanceType.DEBIT, BalanceType.CREDIT
INSTANT, DURATION = PeriodType.INSTANT, PeriodType.DURATION

# (domain name, wire name, kind, balance type[, period override])
_FILING_INFORMATION = [
    ("NameOfCompany", "company_name", S, None),
    ("UniqueEntityNumber", "unique_entity_number", S, None),
    ("CurrentPeriodStartDate", "current_period_start", D, None),
    ("CurrentPeriodEndDate", "current_period_end", D, None),
    ("PriorPeriodStartDate", "prior_period_start", D, None),
    ("TypeOfXBRLFiling", "xbrl_filing_type", S, None),
    ("NatureOfFinancialStatementsCompanyLevelOrConsolidated", "financial_statement_type", S, None),
    ("TypeOfAccountingStandardUsedToPrepareFinancialStatements", "accounting_standard", S, None),
    ("DateOfAuthorisationForIssueOfFinancialStatements", "authorisation_date", D, None),
    ("TypeOfStatementOfFinancialPosition", "financial_position_type", S, None),
    ("WhetherTheFinancialStatementsArePreparedOnGoingConcernBasis", "is_going_concern", B, None),
    ("WhetherThereAreAnyChangesToComparativeAmounts", "has_comparative_changes", B, None),
    ("DescriptionOfPresentationCurrency", "presentation_currency", S, None),
    ("DescriptionOfFunctionalCurrency", "functional_currency", S, None),
    ("LevelOfRoundingUsedInFinancialStatements", "rounding_level", S, None),
    ("DescriptionOfNatureOfEntitysOperationsAndPrincipalActivities", "entity_operations_description", S, None),
    ("PrincipalPlaceOfBusinessIfDifferentFromRegisteredOffice", "principal_place_of_business", S, None),
    ("WhetherCompanyOrGroupIfConsolidatedAccountsArePreparedHasMoreThan50Employees", "has_more_than_50_employees", B, None),
    ("NameOfParentEntity", "parent_entity_name", S, None),
    ("NameOfUltimateParentOfGroup", "ultimate_parent_name", S, None),
    ("TaxonomyVersion", "taxonomy_version", S, None),
    ("NameAndVersionOfSoftwareUsedToGenerateXBRLFile", "xbrl_software", S, None),
    ("HowWasXBRLFilePrepared", "xbrl_preparation_method", S, None),
]

_DIRECTORS_STATEMENT = [
    ("WhetherInDirectorsOpinionFinancialStatementsAreDrawnUpSoAsToExhibitATrueAndFairView", "directors_opinion_true_fair_view", B, None),
    ("WhetherThereAreReasonableGroundsToBelieveThatCompanyWillBeAbleToPayItsDebtsAsAndWhenTheyFallDueAtDateOfStatement", "reasonable_grounds_company_debts", B, None),
]

_AUDIT_REPORT = [
    ("TypeOfAuditOpinionInIndependentAuditorsReport", "audit_opinion", S, None),
    ("AuditingStandardsUsedToConductTheAudit", "auditing_standards", S, None),
    ("WhetherThereIsAnyMaterialUncertaintyRelatingToGoingConcern", "material_uncertainty_going_concern", B, None),
    ("WhetherInAuditorsOpinionAccountingAndOtherRecordsRequiredAreProperlyKept", "proper_accounting_records", B, None),
]

_FINANCIAL_POSITION_TOTALS = [
    ("Assets", "total_assets", M, DR),
    ("Liabilities", "total_liabilities", M, CR),
]

_CURRENT_ASSETS = [
    ("CashAndBankBalances", "cash_and_bank_balances", M, DR),
    ("TradeAndOtherReceivablesCurrent", "trade_and_other_receivables", M, DR),
    ("CurrentFinanceLeaseReceivables", "current_finance_lease_receivables", M, DR),
    ("CurrentDerivativeFinancialAssets", "current_derivative_financial_assets", M, DR),
    ("CurrentFinancialAssetsMeasuredAtFairValueThroughProfitOrLoss", "current_financial_assets_at_fair_value", M, DR),
    ("OtherCurrentFinancialAssets", "other_current_financial_assets", M, DR),
    ("DevelopmentProperties", "development_properties", M, DR),
    ("Inventories", "inventories", M, DR),
    ("OtherCurrentNonfinancialAssets", "other_current_nonfinancial_assets", M, DR),
    ("NoncurrentAssetsOrDisposalGroupsClassifiedAsHeldForSaleOrAsHeldForDistributionToOwners", "held_for_sale_assets", M, DR),
    ("CurrentAssets", "total_current_assets", M, DR),
]

_NONCURRENT_ASSETS = [
    ("TradeAndOtherReceivablesNoncurrent", "trade_and_other_receivables", M, DR),
    ("NoncurrentFinanceLeaseReceivables", "noncurrent_finance_lease_receivables", M, DR),
    ("NoncurrentDerivativeFinancialAssets", "noncurrent_derivative_financial_assets", M, DR),
    ("NoncurrentFinancialAssetsMeasuredAtFairValueThroughProfitOrLoss", "noncurrent_financial_assets_at_fair_value", M, DR),
    ("OtherNoncurrentFinancialAssets", "other_noncurrent_financial_assets", M, DR),
    ("PropertyPlantAndEquipment", "property_plant_equipment", M, DR),
    ("InvestmentProperties", "investment_properties", M, DR),
    ("Goodwill", "goodwill", M, DR),
    ("IntangibleAssetsOtherThanGoodwill", "intangible_assets", M, DR),
    ("InvestmentsInSubsidiariesAssociatesOrJointVentures", "investments_in_entities", M, DR),
    ("DeferredTaxAssets", "deferred_tax_assets", M, DR),
    ("OtherNoncurrentNonfinancialAssets", "other_noncurrent_nonfinancial_assets", M, DR),
    ("NoncurrentAssets", "total_noncurrent_assets", M, DR),
]

_CURRENT_LIABILITIES = [
    ("TradeAndOtherPayablesCurrent", "trade_and_other_payables", M, CR),
    ("CurrentLoansAndBorrowings", "current_loans_and_borrowings", M, CR),
    ("CurrentFinancialLiabilitiesMeasuredAtFairValueThroughProfitOrLoss", "current_financial_liabilities_at_fair_value", M, CR),
    ("CurrentFinanceLeaseLiabilities", "current_finance_lease_liabilities", M, CR),
    ("OtherCurrentFinancialLiabilities", "other_current_financial_liabilities", M, CR),
    ("CurrentIncomeTaxLiabilities", "current_income_tax_liabilities", M, CR),
    ("CurrentProvisions", "current_provisions", M, CR),
    ("OtherCurrentNonfinancialLiabilities", "other_current_nonfinancial_liabilities", M, CR),
    ("LiabilitiesClassifiedAsHeldForSale", "liabilities_held_for_sale", M, CR),
    ("CurrentLiabilities", "total_current_liabilities", M, CR),
]

_NONCURRENT_LIABILITIES = [
    ("TradeAndOtherPayablesNoncurrent", "trade_and_other_payables", M, CR),
    ("NoncurrentLoansAndBorrowings", "noncurrent_loans_and_borrowings", M, CR),
    ("NoncurrentFinancialLiabilitiesMeasuredAtFairValueThroughProfitOrLoss", "noncurrent_financial_liabilities_at_fair_value", M, CR),
    ("NoncurrentFinanceLeaseLiabilities", "noncurrent_finance_lease_liabilities", M, CR),
    ("OtherNoncurrentFinancialLiabilities", "other_noncurrent_financial_liabilities", M, CR),
    ("DeferredTaxLiabilities", "deferred_tax_liabilities", M, CR),
    ("NoncurrentProvisions", "noncurrent_provisions", M, CR),
    ("OtherNoncurrentNonfinancialLiabilities", "other_noncurrent_nonfinancial_liabilities", M, CR),
    ("NoncurrentLiabilities", "total_noncurrent_liabilities", M, CR),
]

_EQUITY = [
    ("ShareCapital", "share_capital", M, CR),
    ("TreasuryShares", "treasury_shares", M, DR),
    ("AccumulatedProfitsLosses", "accumulated_profits_losses", M, CR),
    ("ReservesOtherThanAccumulatedProfitsLosses", "other_reserves", M, CR),
    ("NoncontrollingInterests", "noncontrolling_interests", M, CR),
    ("Equity", "total_equity", M, CR),
]

_INCOME_STATEMENT = [
    ("Revenue", "revenue", M, CR),
    ("OtherIncome", "other_income", M, CR),
    ("EmployeeBenefitsExpense", "employee_expenses", M, DR),
    ("DepreciationExpense", "depreciation_expense", M, DR),
    ("AmortisationExpense", "amortisation_expense", M, DR),
    ("RepairsAndMaintenanceExpense", "repairs_and_maintenance_expense", M, DR),
    ("SalesAndMarketingExpense", "sales_and_marketing_expense", M, DR),
    ("OtherExpensesByNature", "other_expenses_by_nature", M, DR),
    ("OtherGainsLosses", "other_gains_losses", M, CR),
    ("FinanceCosts", "finance_costs", M, DR),
    ("ShareOfProfitLossOfAssociatesAndJointVenturesAccountedForUsingEquityMethod", "share_of_profit_loss_of_associates_and_joint_ventures_accounted_for_using_equity_method", M, CR),
    ("ProfitLossBeforeTaxation", "profit_loss_before_taxation", M, CR),
    ("TaxExpenseBenefitContinuingOperations", "tax_expense_benefit_continuing_operations", M, DR),
    ("ProfitLossFromDiscontinuedOperations", "profit_loss_from_discontinued_operations", M, CR),
    ("ProfitLoss", "profit_loss", M, CR),
    ("ProfitLossAttributableToOwnersOfCompany", "profit_loss_attributable_to_owners_of_company", M, CR),
    ("ProfitLossAttributableToNoncontrollingInterests", "profit_loss_attributable_to_noncontrolling_interests", M, CR),
]

_CASH_FLOWS = [
    ("NetCashFromOperatingActivities", "cash_flows_from_used_in_operating_activities", M, DR),
    ("NetCashFromInvestingActivities", "cash_flows_from_used_in_investing_activities", M, DR),
    ("NetCashFromFinancingActivities", "cash_flows_from_used_in_financing_activities", M, DR),
]

_CHANGES_IN_EQUITY = [
    ("ShareCapitalAtBeginning", "share_capital_at_beginning", M, CR, INSTANT),
    ("TreasurySharesAtBeginning", "treasury_shares_at_beginning", M, DR, INSTANT),
    ("AccumulatedProfitsLossesAtBeginning", "accumulated_profits_losses_at_beginning", M, CR, INSTANT),
    ("OtherReservesAtBeginning", "other_reserves_at_beginning", M, CR, INSTANT),
    ("NoncontrollingInterestsAtBeginning", "noncontrolling_interests_at_beginning", M, CR, INSTANT),
    ("TotalEquityAtBeginning", "total_equity_at_beginning", M, CR, INSTANT),
    ("IssueOfShareCapital", "issue_of_share_capital", M, CR),
    ("PurchaseOfTreasuryShares", "purchase_of_treasury_shares", M, DR),
    ("ProfitLossForPeriod", "profit_loss_for_period", M, CR),
    ("OtherComprehensiveIncome", "other_comprehensive_income", M, CR),
    ("TotalComprehensiveIncome", "total_comprehensive_income", M, CR),
    ("DividendsDeclared", "dividends_declared", M, DR),
    ("TransfersToFromReserves", "transfers_to_from_reserves", M, CR),
    ("ChangesInNoncontrollingInterests", "changes_in_noncontrolling_interests", M, CR),
    ("ShareCapitalAtEnd", "share_capital_at_end", M, CR, INSTANT),
    ("TreasurySharesAtEnd", "treasury_shares_at_end", M, DR, INSTANT),
    ("AccumulatedProfitsLossesAtEnd", "accumulated_profits_losses_at_end", M, CR, INSTANT),
    ("OtherReservesAtEnd", "other_reserves_at_end", M, CR, INSTANT),
    ("NoncontrollingInterestsAtEnd", "noncontrolling_interests_at_end", M, CR, INSTANT),
    ("TotalEquityAtEnd", "total_equity_at_end", M, CR, INSTANT),
]

_RECEIVABLES = [
    ("TradeAndOtherReceivablesDueFromThirdParties", "receivables_from_third_parties", M, DR),
    ("TradeAndOtherReceivablesDueFromRelatedParties", "receivables_from_related_parties", M, DR),
    ("UnbilledReceivables", "unbilled_receivables", M, DR),
    ("OtherReceivables", "other_receivables", M, DR),
    ("TradeAndOtherReceivables", "total_trade_and_other_receivables", M, DR),
]

_PAYABLES = [
    ("TradeAndOtherPayablesDueToThirdParties", "payables_to_third_parties", M, CR),
    ("TradeAndOtherPayablesDueToRelatedParties", "payables_to_related_parties", M, CR),
    ("DeferredIncome", "deferred_income", M, CR),
    ("OtherPayables", "other_payables", M, CR),
    ("TradeAndOtherPayables", "total_trade_and_other_payables", M, CR),
]

_REVENUE = [
    ("RevenueFromPropertyTransferredAtPointInTime", "revenue_from_property_point_in_time", M, CR),
    ("RevenueFromGoodsTransferredAtPointInTime", "revenue_from_goods_point_in_time", M, CR),
    ("RevenueFromServicesTransferredAtPointInTime", "revenue_from_services_point_in_time", M, CR),
    ("RevenueFromPropertyTransferredOverTime", "revenue_from_property_over_time", M, CR),
    ("RevenueFromConstructionContractsOverTime", "revenue_from_construction_over_time", M, CR),
    ("RevenueFromServicesTransferredOverTime", "revenue_from_services_over_time", M, CR),
    ("OtherRevenue", "other_revenue", M, CR),
    ("Revenue", "total_revenue", M, CR),
]


##########################################
############### SECTIONS #################
##########################################

def _section(
    domain_path: tuple[str, ...],
    wire_path: tuple[str, ...],
    rows: list[tuple],
    prefix: str = "sg-as",
    period_type: PeriodType = DURATION,
    container: bool = False,
) -> SectionSpec:
    fields = []
    for row in rows:
        domain_name, wire_name, kind, balance_type = row[:4]
        fields.append(FieldSpec(
            domain_path=domain_path + (domain_name,),
            wire_path=wire_path + (wire_name,),
            kind=kind,
            prefix=prefix,
            period_type=row[4] if len(row) > 4 else period_type,
            balance_type=balance_type,
        ))
    return SectionSpec(domain_path=domain_path, wire_path=wire_path, container=container, fields=tuple(fields))


SFP_DOMAIN, SFP_WIRE = ("statementOfFinancialPosition",), ("statement_of_financial_position",)
NOTES_DOMAIN, NOTES_WIRE = ("notes",), ("notes",)

# Ordered top-down: a container precedes its subsections.
SECTIONS: tuple[SectionSpec, ...] = (
    _section(("filingInformation",), ("filing_information",), _FILING_INFORMATION, prefix="sg-dei"),
    _section(("directorsStatement",), ("directors_statement",), _DIRECTORS_STATEMENT),
    _section(("auditReport",), ("audit_report",), _AUDIT_REPORT),
    _section(SFP_DOMAIN, SFP_WIRE, _FINANCIAL_POSITION_TOTALS, period_type=INSTANT, container=True),
    _section(SFP_DOMAIN + ("currentAssets",), SFP_WIRE + ("current_assets",), _CURRENT_ASSETS, period_type=INSTANT),
    _section(SFP_DOMAIN + ("nonCurrentAssets",), SFP_WIRE + ("noncurrent_assets",), _NONCURRENT_ASSETS, period_type=INSTANT),
    _section(SFP_DOMAIN + ("currentLiabilities",), SFP_WIRE + ("current_liabilities",), _CURRENT_LIABILITIES, period_type=INSTANT),
    _section(SFP_DOMAIN + ("nonCurrentLiabilities",), SFP_WIRE + ("noncurrent_liabilities",), _NONCURRENT_LIABILITIES, period_type=INSTANT),
    _section(SFP_DOMAIN + ("equity",), SFP_WIRE + ("equity",), _EQUITY, period_type=INSTANT),
    _section(("incomeStatement",), ("income_statement",), _INCOME_STATEMENT),
    _section(("statementOfCashFlows",), ("statement_of_cash_flows",), _CASH_FLOWS),
    _section(("statementOfChangesInEquity",), ("statement_of_changes_in_equity",), _CHANGES_IN_EQUITY),
    _section(NOTES_DOMAIN, NOTES_WIRE, [], container=True),
    _section(NOTES_DOMAIN + ("tradeAndOtherReceivables",), NOTES_WIRE + ("trade_and_other_receivables",), _RECEIVABLES, period_type=INSTANT),
    _section(NOTES_DOMAIN + ("tradeAndOtherPayables",), NOTES_WIRE + ("trade_and_other_payables",), _PAYABLES, period_type=INSTANT),
    _section(NOTES_DOMAIN + ("revenue",), NOTES_WIRE + ("revenue",), _REVENUE),
)

FIELDS: tuple[FieldSpec, ...] = tuple(field for section in SECTIONS for field in section.fields)

# Opaque top-level cross references of the Wire Format
WIRE_REFERENCE_KEYS = ("id", "document", "mapped_filing")
