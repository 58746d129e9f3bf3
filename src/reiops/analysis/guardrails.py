# src/reiops/analysis/guardrails.py
from __future__ import annotations

from typing import List

from reiops.analysis.acquisition import max_loan_to_value, minimum_down_payment_percent
from reiops.domain.property import NormalizedInputs
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import (
    AcquisitionResult,
    CashFlowResult,
    FinancingResult,
    MarketComparison,
    MetricsResult,
    RiskFlag,
)

# float noise tolerance for regulatory limit comparisons
_EPS = 1e-9


def collect_risk_flags(
    inputs: NormalizedInputs,
    acquisition: AcquisitionResult,
    financing: FinancingResult,
    cash_flow: CashFlowResult,
    metrics: MetricsResult,
    market: MarketComparison,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> tuple[RiskFlag, ...]:
    """
    Risk flags for a computed deal, in a fixed order.

    These never block the analysis; they explain what a reader should worry
    about. Undefined metrics also land here so the caller can see why a
    number is missing.
    """
    flags: List[RiskFlag] = []

    # ------------------------------------------------------------------
    # 1) Cash flow / coverage
    # ------------------------------------------------------------------
    if cash_flow.monthly_net < 0:
        flags.append(
            RiskFlag(
                "NEGATIVE_CASH_FLOW",
                "error",
                f"Negative cash flow: -${abs(cash_flow.monthly_net):,.2f}/mo",
            )
        )

    dscr = metrics.dscr
    if dscr is not None and dscr < 1.0:
        flags.append(
            RiskFlag(
                "DSCR_BELOW_ONE",
                "error",
                f"DSCR below 1.0 ({dscr:.2f}): rent does not cover the mortgage",
            )
        )
    elif dscr is not None and dscr < reference.lender_min_dscr:
        flags.append(
            RiskFlag(
                "DSCR_BELOW_LENDER_MIN",
                "warning",
                f"DSCR below {reference.lender_min_dscr:.2f} ({dscr:.2f}); may face lender challenges",
            )
        )

    q_dscr = metrics.qualification_dscr
    if q_dscr is not None and q_dscr < 1.0:
        flags.append(
            RiskFlag(
                "STRESS_TEST_COVERAGE",
                "warning",
                f"NOI covers only {q_dscr:.2f}x the payment at the {financing.stress_test_rate:.2f}% qualifying rate",
            )
        )

    # ------------------------------------------------------------------
    # 2) Financing limits
    # ------------------------------------------------------------------
    base_ltv = financing.base_loan / inputs.purchase_price
    max_ltv = max_loan_to_value(inputs.purchase_price, inputs.owner_occupied, reference)
    if base_ltv > max_ltv + _EPS:
        use = "owner-occupied" if inputs.owner_occupied else "investment"
        flags.append(
            RiskFlag(
                "LTV_ABOVE_MAX",
                "error",
                f"Loan-to-value {base_ltv:.1%} exceeds the {max_ltv:.0%} maximum for this price and {use} use",
            )
        )

    min_down = minimum_down_payment_percent(inputs.purchase_price, inputs.owner_occupied, reference)
    if inputs.down_payment_percent < min_down - _EPS:
        flags.append(
            RiskFlag(
                "DOWN_PAYMENT_BELOW_MIN",
                "error",
                f"Down payment {inputs.down_payment_percent:.2f}% is below the {min_down:.2f}% minimum",
            )
        )

    if acquisition.mortgage_insurance_premium > 0 and inputs.amortization_years > reference.max_amortization_insured:
        flags.append(
            RiskFlag(
                "INSURED_AMORTIZATION",
                "warning",
                f"Insured mortgages are limited to {reference.max_amortization_insured}-year amortization",
            )
        )

    # ------------------------------------------------------------------
    # 3) Market / operating sanity
    # ------------------------------------------------------------------
    if market.cap_rate_vs_market < 0:
        flags.append(
            RiskFlag(
                "CAP_RATE_BELOW_MARKET",
                "warning",
                f"Cap rate {abs(market.cap_rate_vs_market):.1f}% below {market.benchmark.label} average",
            )
        )

    if metrics.cap_rate < 3.0:
        flags.append(
            RiskFlag(
                "VERY_LOW_CAP_RATE",
                "warning",
                f"Very low cap rate ({metrics.cap_rate:.1f}%); difficult to cash flow",
            )
        )

    if metrics.breakeven_occupancy is not None and metrics.breakeven_occupancy > 80.0:
        flags.append(
            RiskFlag(
                "HIGH_BREAKEVEN_OCCUPANCY",
                "warning",
                f"High break-even occupancy ({metrics.breakeven_occupancy:.1f}%); limited margin for error",
            )
        )

    if metrics.expense_ratio is not None and metrics.expense_ratio > 50.0:
        flags.append(
            RiskFlag(
                "HIGH_EXPENSE_RATIO",
                "warning",
                f"High expense ratio ({metrics.expense_ratio:.1f}%); verify operating costs",
            )
        )

    if inputs.property_condition in ("heavy_reno", "gut_job"):
        flags.append(
            RiskFlag(
                "MAJOR_RENOVATION",
                "warning",
                "Major renovations required; budget a 15-20% contingency",
            )
        )

    # ------------------------------------------------------------------
    # 4) Undefined metrics
    # ------------------------------------------------------------------
    if metrics.cash_on_cash_return is None:
        flags.append(
            RiskFlag("COC_UNDEFINED", "info", "No cash invested; cash-on-cash return is undefined")
        )
    if metrics.dscr is None:
        flags.append(
            RiskFlag("DSCR_UNDEFINED", "info", "No debt service; DSCR is undefined")
        )
    if metrics.grm is None:
        flags.append(
            RiskFlag("NO_INCOME", "warning", "No rental income; income-based ratios are undefined")
        )

    return tuple(flags)
