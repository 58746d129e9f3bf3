# src/reiops/analysis/financing.py
from __future__ import annotations

from reiops.domain.property import NormalizedInputs
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import AcquisitionResult, FinancingResult


def monthly_rate(annual_rate_percent: float) -> float:
    """
    Canadian fixed-rate mortgages quote a nominal rate compounded
    semi-annually, not in advance:
      i = (1 + R/200) ** (1/6) - 1
    """
    return (1.0 + annual_rate_percent / 200.0) ** (1.0 / 6.0) - 1.0


def monthly_payment(principal: float, annual_rate_percent: float, amortization_years: int) -> float:
    """
    Standard fixed-rate amortization formula:
    M = P * i / (1 - (1 + i) ** -n)
    P = principal
    i = monthly rate (semi-annual compounding)
    n = number of monthly payments
    """
    if principal <= 0 or amortization_years <= 0:
        return 0.0

    n = amortization_years * 12
    i = monthly_rate(annual_rate_percent)
    if i == 0:
        return principal / n
    return principal * i / (1.0 - (1.0 + i) ** -n)


def remaining_balance(
    principal: float,
    annual_rate_percent: float,
    amortization_years: int,
    payments_made: int,
) -> float:
    """Outstanding balance after `payments_made` regular payments."""
    if principal <= 0:
        return 0.0

    n = amortization_years * 12
    k = min(max(payments_made, 0), n)
    i = monthly_rate(annual_rate_percent)
    if i == 0:
        return principal * (1.0 - k / n)

    pmt = monthly_payment(principal, annual_rate_percent, amortization_years)
    growth = (1.0 + i) ** k
    return max(principal * growth - pmt * (growth - 1.0) / i, 0.0)


def stress_test_rate(contract_rate: float, reference: ReferenceData = DEFAULT_REFERENCE_DATA) -> float:
    """OSFI minimum qualifying rate: greater of contract + buffer and the floor."""
    return max(contract_rate + reference.stress_test_buffer, reference.stress_test_floor)


def compute_financing(
    inputs: NormalizedInputs,
    acquisition: AcquisitionResult,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> FinancingResult:
    price = inputs.purchase_price
    base_loan = max(price - acquisition.down_payment_amount, 0.0)

    # premium is capitalized into the loan
    principal = base_loan + acquisition.mortgage_insurance_premium

    payment = monthly_payment(principal, inputs.interest_rate, inputs.amortization_years)

    qualifying_rate = stress_test_rate(inputs.interest_rate, reference)
    qualifying_payment = monthly_payment(principal, qualifying_rate, inputs.amortization_years)

    return FinancingResult(
        base_loan=base_loan,
        mortgage_principal=principal,
        contract_rate=inputs.interest_rate,
        amortization_years=inputs.amortization_years,
        monthly_payment=payment,
        annual_payment=payment * 12.0,
        stress_test_rate=qualifying_rate,
        stress_test_payment=qualifying_payment,
        loan_to_value=principal / price,
    )
