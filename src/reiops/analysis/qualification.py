# src/reiops/analysis/qualification.py
from __future__ import annotations

from reiops.analysis.financing import monthly_payment
from reiops.domain.property import NormalizedInputs
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import BorrowerProfile, FinancingResult, QualificationResult


def _debt_service_ratios(
    housing_costs: float,
    other_debts: float,
    monthly_income: float,
) -> tuple[float | None, float | None]:
    if monthly_income <= 0:
        return None, None
    gds = housing_costs / monthly_income * 100.0
    tds = (housing_costs + other_debts) / monthly_income * 100.0
    return gds, tds


def _heating(borrower: BorrowerProfile, reference: ReferenceData) -> float:
    if borrower.heating_monthly is not None:
        return borrower.heating_monthly
    return reference.default_heating_monthly


def _is_prime_credit(credit_score: int | None, reference: ReferenceData) -> bool:
    return credit_score is None or credit_score >= reference.credit_score_prime


def _lender_tier(
    gds: float,
    tds: float,
    credit_score: int | None,
    reference: ReferenceData,
) -> tuple[str, str, str]:
    prime_credit = _is_prime_credit(credit_score, reference)
    alt_credit = credit_score is None or credit_score >= reference.credit_score_alt

    if credit_score is not None and credit_score < reference.credit_score_floor:
        return "Unqualified", "None", "Credit score is too low for most mortgages. Focus on credit repair."
    if gds <= reference.gds_limit_prime and tds <= reference.tds_limit_prime and prime_credit:
        return "A-Lender", "High", "Likely qualifies for prime rates with a major bank."
    if gds <= reference.gds_limit_alt and tds <= reference.tds_limit_alt and alt_credit:
        return "B-Lender", "Medium", "May need an alternative (B) lender due to ratios or credit. Expect higher rates."
    return (
        "Private",
        "Low",
        "Traditional qualification is unlikely. Consider private lending or reducing debts / increasing income.",
    )


def max_purchase_price(
    borrower: BorrowerProfile,
    qualifying_rate: float,
    amortization_years: int,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> float:
    """
    Largest price whose housing costs fit inside the GDS/TDS limits, assuming
    the reference down payment and property tax at a flat share of value.

    Payment is linear in principal, so this solves directly rather than
    searching: price * (ltv * pmt_per_dollar + tax_rate / 12) = budget - heat.
    """
    monthly_income = borrower.gross_annual_income / 12.0
    if monthly_income <= 0:
        return 0.0

    if _is_prime_credit(borrower.credit_score, reference):
        gds_limit, tds_limit = reference.gds_limit_prime, reference.tds_limit_prime
    else:
        gds_limit, tds_limit = reference.gds_limit_alt, reference.tds_limit_alt

    budget = min(
        monthly_income * gds_limit / 100.0,
        monthly_income * tds_limit / 100.0 - borrower.other_monthly_debts,
    )

    ltv = 1.0 - reference.qualifying_down_payment_percent / 100.0
    per_dollar = ltv * monthly_payment(1.0, qualifying_rate, amortization_years)
    per_dollar += reference.qualifying_property_tax_rate / 100.0 / 12.0

    price = (budget - _heating(borrower, reference)) / per_dollar
    # round down to the nearest $1,000
    return max(float(int(price // 1000) * 1000), 0.0)


def qualify_borrower(
    financing: FinancingResult,
    inputs: NormalizedInputs,
    borrower: BorrowerProfile,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> QualificationResult:
    """
    GDS / TDS at the stress-test payment.

    GDS = (qualifying P&I + property tax + heat + 50% condo fees) / gross income
    TDS = (GDS housing costs + other recurring debts) / gross income
    """
    housing = (
        financing.stress_test_payment
        + inputs.property_tax_annual / 12.0
        + _heating(borrower, reference)
        + 0.5 * inputs.hoa_condo_fees_monthly
    )
    monthly_income = borrower.gross_annual_income / 12.0

    gds, tds = _debt_service_ratios(housing, borrower.other_monthly_debts, monthly_income)
    ceiling = max_purchase_price(borrower, financing.stress_test_rate, financing.amortization_years, reference)

    if gds is None or tds is None:
        return QualificationResult(
            gds=None,
            tds=None,
            housing_costs_monthly=housing,
            lender_tier="Unqualified",
            approval_odds="None",
            passes_prime_limits=False,
            max_purchase_price=0.0,
            recommendation="Income must be greater than zero.",
        )

    tier, odds, recommendation = _lender_tier(gds, tds, borrower.credit_score, reference)

    return QualificationResult(
        gds=gds,
        tds=tds,
        housing_costs_monthly=housing,
        lender_tier=tier,
        approval_odds=odds,
        passes_prime_limits=gds <= reference.gds_limit_prime and tds <= reference.tds_limit_prime,
        max_purchase_price=ceiling,
        recommendation=recommendation,
    )
