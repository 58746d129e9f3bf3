# src/reiops/analysis/strategies.py
from __future__ import annotations

from reiops.analysis.financing import monthly_payment, remaining_balance
from reiops.domain.property import NormalizedInputs
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import AcquisitionResult, BrrrrResult, CashFlowResult, FinancingResult


def analyze_brrrr(
    inputs: NormalizedInputs,
    acquisition: AcquisitionResult,
    financing: FinancingResult,
    cash_flow: CashFlowResult,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> BrrrrResult | None:
    """
    Buy, rehab, rent, refinance: refinance at a fixed share of ARV once the
    holding period is over and see how much cash comes back out.

    Only meaningful when the strategy is 'brrrr' and an ARV was supplied.
    """
    if inputs.strategy != "brrrr" or not inputs.after_repair_value:
        return None

    arv = inputs.after_repair_value
    ltv_percent = float(reference.brrrr["refinance_ltv_percent"])
    months_held = int(reference.brrrr["holding_period_months"])

    total_investment = acquisition.total_acquisition_cost
    refinance_amount = arv * ltv_percent / 100.0

    balance = remaining_balance(
        financing.mortgage_principal,
        inputs.interest_rate,
        inputs.amortization_years,
        months_held,
    )

    cash_recovered = max(refinance_amount - balance, 0.0)
    cash_left = total_investment - cash_recovered
    infinite_return = cash_left <= 0

    new_payment = monthly_payment(refinance_amount, inputs.interest_rate, inputs.amortization_years)
    cash_flow_after_refi = cash_flow.monthly_net - (new_payment - financing.monthly_payment)

    effective_coc = None
    if not infinite_return:
        effective_coc = cash_flow_after_refi * 12.0 / cash_left * 100.0

    return BrrrrResult(
        total_investment=total_investment,
        after_repair_value=arv,
        refinance_ltv_percent=ltv_percent,
        refinance_amount=refinance_amount,
        original_mortgage_balance=balance,
        cash_recovered=cash_recovered,
        cash_left_in_deal=cash_left,
        infinite_return=infinite_return,
        new_monthly_payment=new_payment,
        cash_flow_after_refi=cash_flow_after_refi,
        effective_coc_return=effective_coc,
    )
