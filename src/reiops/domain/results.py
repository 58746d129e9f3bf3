from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from reiops.domain.errors import FieldError
from reiops.domain.property import NormalizedInputs
from reiops.domain.reference import MarketBenchmark

Grade = Literal["A", "B", "C", "D", "F"]
Severity = Literal["info", "warning", "error"]


@dataclass(frozen=True)
class LandTransferResult:
    provincial_tax: float
    municipal_tax: float
    rebate: float
    net_tax: float
    breakdown: tuple[str, ...] = ()


@dataclass(frozen=True)
class RenovationEstimate:
    low: float
    mid: float
    high: float


@dataclass(frozen=True)
class AcquisitionResult:
    purchase_price: float
    down_payment_amount: float
    land_transfer_tax: float
    land_transfer: LandTransferResult
    mortgage_insurance_premium: float
    premium_rate: float          # percent of insured principal
    renovation_cost: float
    renovation_range: RenovationEstimate
    legal_fees: float
    inspection: float
    appraisal: float
    title_insurance: float
    closing_costs_total: float
    total_acquisition_cost: float


@dataclass(frozen=True)
class FinancingResult:
    base_loan: float             # price - down payment, before the premium
    mortgage_principal: float    # base loan + capitalized premium
    contract_rate: float
    amortization_years: int
    monthly_payment: float
    annual_payment: float
    stress_test_rate: float
    stress_test_payment: float
    loan_to_value: float         # principal / price, as a fraction


@dataclass(frozen=True)
class OperatingResult:
    gross_monthly_rent: float
    other_income: float
    vacancy_loss_monthly: float
    effective_gross_income: float

    property_tax: float
    insurance: float
    property_management: float
    maintenance: float
    utilities: float
    hoa_condo_fees: float
    other_expenses: float
    operating_expenses: float

    noi_monthly: float

    @property
    def noi_annual(self) -> float:
        return self.noi_monthly * 12.0


@dataclass(frozen=True)
class CashFlowResult:
    noi_monthly: float
    monthly_net: float
    annual_net: float


@dataclass(frozen=True)
class MetricsResult:
    cap_rate: float
    cash_on_cash_return: float | None
    dscr: float | None
    qualification_dscr: float | None
    total_cash_invested: float
    grm: float | None = None
    expense_ratio: float | None = None
    breakeven_occupancy: float | None = None
    break_even_rent: float | None = None
    gds: float | None = None
    tds: float | None = None


@dataclass(frozen=True)
class MarketComparison:
    benchmark: MarketBenchmark
    cap_rate_vs_market: float          # deal - benchmark, percentage points
    deal_rent_to_price: float
    rent_to_price_vs_market: float


@dataclass(frozen=True)
class BrrrrResult:
    total_investment: float
    after_repair_value: float
    refinance_ltv_percent: float
    refinance_amount: float
    original_mortgage_balance: float
    cash_recovered: float
    cash_left_in_deal: float
    infinite_return: bool
    new_monthly_payment: float
    cash_flow_after_refi: float
    effective_coc_return: float | None


@dataclass(frozen=True)
class BorrowerProfile:
    gross_annual_income: float
    other_monthly_debts: float = 0.0
    heating_monthly: float | None = None
    credit_score: int | None = None


@dataclass(frozen=True)
class QualificationResult:
    gds: float | None
    tds: float | None
    housing_costs_monthly: float
    lender_tier: Literal["A-Lender", "B-Lender", "Private", "Unqualified"]
    approval_odds: Literal["High", "Medium", "Low", "None"]
    passes_prime_limits: bool
    max_purchase_price: float
    recommendation: str


@dataclass(frozen=True)
class RiskFlag:
    code: str
    severity: Severity
    message: str


@dataclass(frozen=True)
class ScoringResult:
    total_score: int
    grade: Grade
    reasons: tuple[str, ...]
    warnings: tuple[str, ...]
    components: tuple[tuple[str, float], ...] = ()


@dataclass(frozen=True)
class DealAnalysis:
    property: NormalizedInputs
    acquisition: AcquisitionResult
    financing: FinancingResult
    operations: OperatingResult
    cash_flow: CashFlowResult
    metrics: MetricsResult
    market: MarketComparison
    scoring: ScoringResult
    flags: tuple[RiskFlag, ...] = ()
    brrrr: BrrrrResult | None = None
    qualification: QualificationResult | None = None
    reference_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["property"] = self.property.model_dump(mode="json")
        out["operations"]["noi_annual"] = self.operations.noi_annual
        return out


@dataclass(frozen=True)
class NormalizationResult:
    inputs: NormalizedInputs | None
    errors: tuple[FieldError, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.inputs is not None and not self.errors


@dataclass(frozen=True)
class AnalysisResult:
    """Either a DealAnalysis or every field problem found, never both."""
    analysis: DealAnalysis | None
    errors: tuple[FieldError, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.analysis is not None and not self.errors
