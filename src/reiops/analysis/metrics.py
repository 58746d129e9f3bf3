# src/reiops/analysis/metrics.py
from __future__ import annotations

from reiops.domain.property import NormalizedInputs
from reiops.domain.results import (
    AcquisitionResult,
    CashFlowResult,
    FinancingResult,
    MetricsResult,
    OperatingResult,
    QualificationResult,
)


def _ratio(numerator: float, denominator: float, scale: float = 1.0) -> float | None:
    # undefined rather than inf/nan so results stay comparable field-for-field
    if denominator == 0:
        return None
    return numerator / denominator * scale


def break_even_rent(inputs: NormalizedInputs, financing: FinancingResult) -> float | None:
    """
    Scheduled rent at which monthly cash flow after debt is exactly zero.

    Vacancy, management and maintenance scale with rent; everything else is
    fixed. None when the rent-proportional costs eat the whole rent.
    """
    rent_share_kept = 1.0 - (
        inputs.vacancy_rate + inputs.property_management_percent + inputs.maintenance_percent
    ) / 100.0
    if rent_share_kept <= 0:
        return None

    fixed = (
        inputs.property_tax_annual / 12.0
        + inputs.insurance_annual / 12.0
        + inputs.utilities_monthly
        + inputs.hoa_condo_fees_monthly
        + inputs.other_expenses_monthly
    )
    needed = fixed + financing.monthly_payment - inputs.other_income
    return max(needed / rent_share_kept, 0.0)


def compute_metrics(
    inputs: NormalizedInputs,
    acquisition: AcquisitionResult,
    financing: FinancingResult,
    operations: OperatingResult,
    cash_flow: CashFlowResult,
    qualification: QualificationResult | None = None,
) -> MetricsResult:
    """
    Investment return metrics. All percentages are on a 0-100 scale.

    Ratios whose denominator is zero are reported as None; the guardrails
    turn those into explanatory warnings.
    """
    price = inputs.purchase_price
    noi_annual = cash_flow.noi_monthly * 12.0

    # Cap rate = NOI / purchase price
    cap_rate = noi_annual / price * 100.0

    # Cash-on-cash = annual cash flow / cash actually put in
    cash_invested = (
        acquisition.down_payment_amount
        + acquisition.closing_costs_total
        + acquisition.renovation_cost
    )
    coc = _ratio(cash_flow.annual_net, cash_invested, 100.0)

    # DSCR against the contract payment, and against the qualifying payment
    dscr = _ratio(cash_flow.noi_monthly, financing.monthly_payment)
    qualification_dscr = _ratio(cash_flow.noi_monthly, financing.stress_test_payment)

    gross_monthly = operations.gross_monthly_rent + operations.other_income
    grm = _ratio(price, gross_monthly * 12.0)
    expense_ratio = _ratio(operations.operating_expenses, gross_monthly, 100.0)
    breakeven_occupancy = _ratio(
        operations.operating_expenses + financing.monthly_payment,
        gross_monthly,
        100.0,
    )

    return MetricsResult(
        cap_rate=cap_rate,
        cash_on_cash_return=coc,
        dscr=dscr,
        qualification_dscr=qualification_dscr,
        total_cash_invested=cash_invested,
        grm=grm,
        expense_ratio=expense_ratio,
        breakeven_occupancy=breakeven_occupancy,
        break_even_rent=break_even_rent(inputs, financing),
        gds=qualification.gds if qualification is not None else None,
        tds=qualification.tds if qualification is not None else None,
    )
