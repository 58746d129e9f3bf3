# src/reiops/analysis/operations.py
from __future__ import annotations

from reiops.domain.property import NormalizedInputs
from reiops.domain.results import OperatingResult


def compute_operations(inputs: NormalizedInputs) -> OperatingResult:
    """
    Effective gross income and operating expenses for one month.

    Operating expenses do NOT include the mortgage; debt service is
    financing, not operations. Vacancy applies to scheduled rent only,
    management and maintenance are a share of scheduled rent.
    """
    rent = inputs.monthly_rent

    vacancy_loss = rent * inputs.vacancy_rate / 100.0
    egi = rent - vacancy_loss + inputs.other_income

    property_tax = inputs.property_tax_annual / 12.0
    insurance = inputs.insurance_annual / 12.0
    management = rent * inputs.property_management_percent / 100.0
    maintenance = rent * inputs.maintenance_percent / 100.0

    total = (
        property_tax
        + insurance
        + inputs.utilities_monthly
        + inputs.hoa_condo_fees_monthly
        + inputs.other_expenses_monthly
        + management
        + maintenance
    )

    return OperatingResult(
        gross_monthly_rent=rent,
        other_income=inputs.other_income,
        vacancy_loss_monthly=vacancy_loss,
        effective_gross_income=egi,
        property_tax=property_tax,
        insurance=insurance,
        property_management=management,
        maintenance=maintenance,
        utilities=inputs.utilities_monthly,
        hoa_condo_fees=inputs.hoa_condo_fees_monthly,
        other_expenses=inputs.other_expenses_monthly,
        operating_expenses=total,
        noi_monthly=egi - total,
    )
