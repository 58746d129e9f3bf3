# src/reiops/analysis/acquisition.py
from __future__ import annotations

from reiops.domain.property import NormalizedInputs
from reiops.domain.rates import LandTransferSchedule, TaxBracket
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import AcquisitionResult, LandTransferResult, RenovationEstimate


def marginal_tax(amount: float, brackets: tuple[TaxBracket, ...]) -> float:
    """
    Apply a marginal-bracket schedule: each band's rate only touches the
    slice of `amount` that falls inside it.
    """
    tax = 0.0
    lower = 0.0
    for upper, rate in brackets:
        if amount <= lower:
            break
        taxable = min(amount, upper) - lower
        tax += taxable * rate / 100.0
        lower = upper
    return tax


def _first_time_relief(schedule: LandTransferSchedule, tax: float, price: float) -> float:
    if schedule.ftb_rebate_max <= 0 or tax <= 0:
        return 0.0

    relief = min(schedule.ftb_rebate_max, tax)
    if price <= schedule.ftb_price_ceiling:
        return relief

    end = schedule.ftb_phase_out_to
    if end is None or price >= end:
        return 0.0
    # linear phase-out between the ceiling and the end of the window
    remaining = (end - price) / (end - schedule.ftb_price_ceiling)
    return relief * remaining


def land_transfer_tax(
    province: str,
    city: str | None,
    purchase_price: float,
    first_time_buyer: bool = False,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> LandTransferResult:
    """
    Provincial schedule + (where the city has one) an independently computed
    municipal schedule on the same price, less first-time-buyer relief.
    Each jurisdiction's relief is floored at its own tax.
    """
    provincial, _ = reference.land_transfer_schedule(province)
    municipal = reference.municipal_schedule(province, city)

    provincial_tax = marginal_tax(purchase_price, provincial.brackets)
    breakdown = [f"{provincial.name}: ${provincial_tax:,.2f}"]

    municipal_tax = 0.0
    if municipal is not None:
        municipal_tax = marginal_tax(purchase_price, municipal.brackets)
        breakdown.append(f"{municipal.name}: ${municipal_tax:,.2f}")

    rebate = 0.0
    if first_time_buyer:
        rebate = _first_time_relief(provincial, provincial_tax, purchase_price)
        if municipal is not None:
            rebate += _first_time_relief(municipal, municipal_tax, purchase_price)
        if rebate > 0:
            breakdown.append(f"First-time buyer rebate: -${rebate:,.2f}")

    net_tax = max(provincial_tax + municipal_tax - rebate, 0.0)

    return LandTransferResult(
        provincial_tax=provincial_tax,
        municipal_tax=municipal_tax,
        rebate=rebate,
        net_tax=net_tax,
        breakdown=tuple(breakdown),
    )


# ---------------------------------------------------------------------
# Down payment rules / mortgage default insurance
# ---------------------------------------------------------------------


def minimum_down_payment_percent(
    purchase_price: float,
    owner_occupied: bool = False,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> float:
    """
    Owner-occupied:
      - <= $500k: 5%
      - $500k-$1M: 5% of the first $500k + 10% of the rest
      - > $1M: 20% (not insurable)
    Investment properties need the conventional 20% regardless.
    """
    mins = reference.min_down_payment
    tier_1 = reference.down_payment_tier_1
    tier_2 = reference.down_payment_tier_2

    if purchase_price <= tier_1:
        required = mins["first_500k"]
    elif purchase_price <= tier_2:
        dollars = tier_1 * mins["first_500k"] / 100.0 + (purchase_price - tier_1) * mins["above_500k"] / 100.0
        required = dollars / purchase_price * 100.0
    else:
        required = mins["over_1m"]

    if not owner_occupied:
        required = max(required, mins["investment"])
    return required


def max_loan_to_value(
    purchase_price: float,
    owner_occupied: bool = False,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> float:
    """Largest base loan / price allowed for the price tier and use, as a fraction."""
    return 1.0 - minimum_down_payment_percent(purchase_price, owner_occupied, reference) / 100.0


def insurable_minimum_percent(reference: ReferenceData = DEFAULT_REFERENCE_DATA) -> float:
    """Smallest down-payment percent any premium band covers."""
    return min(b.min_down_percent for b in reference.premium_bands)


def premium_rate(down_payment_percent: float, reference: ReferenceData = DEFAULT_REFERENCE_DATA) -> float:
    """CMHC premium rate (percent of insured principal) for a down-payment percent."""
    if down_payment_percent >= reference.conventional_down_payment_percent:
        return 0.0
    for band in reference.premium_bands:
        if band.min_down_percent <= down_payment_percent < band.max_down_percent:
            return band.premium_rate
    lowest = insurable_minimum_percent(reference)
    raise ValueError(f"Down payment of {down_payment_percent:.2f}% is below the insurable minimum of {lowest:.0f}%")


def mortgage_insurance_premium(
    down_payment_percent: float,
    principal: float,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> float:
    """Premium on the insured (pre-premium) principal; zero at 20%+ down."""
    return principal * premium_rate(down_payment_percent, reference) / 100.0


# ---------------------------------------------------------------------
# Renovation / closing costs
# ---------------------------------------------------------------------


def estimate_renovation(
    condition: str,
    square_feet: float,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> RenovationEstimate:
    per_sf = reference.renovation_rates(condition)
    sqft = max(square_feet, 0.0)
    return RenovationEstimate(
        low=per_sf["low"] * sqft,
        mid=per_sf["mid"] * sqft,
        high=per_sf["high"] * sqft,
    )


def compute_acquisition(
    inputs: NormalizedInputs,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> AcquisitionResult:
    price = inputs.purchase_price
    down = inputs.down_payment_amount

    ltt = land_transfer_tax(
        province=inputs.province,
        city=inputs.city,
        purchase_price=price,
        first_time_buyer=inputs.is_first_time_buyer,
        reference=reference,
    )

    # no insurer covers a loan below the lowest band; guardrails flag the shortfall
    rate = 0.0
    if inputs.down_payment_percent >= insurable_minimum_percent(reference):
        rate = premium_rate(inputs.down_payment_percent, reference)
    premium = (price - down) * rate / 100.0

    renovation_range = estimate_renovation(inputs.property_condition, inputs.square_feet, reference)

    costs = reference.closing_costs
    legal = inputs.legal_fees if inputs.legal_fees is not None else float(costs["legal_fees"])
    inspection = inputs.inspection_cost if inputs.inspection_cost is not None else float(costs["inspection"])
    appraisal = inputs.appraisal_cost if inputs.appraisal_cost is not None else float(costs["appraisal"])
    title_insurance = float(costs["title_insurance"])

    closing_costs_total = ltt.net_tax + legal + inspection + appraisal + title_insurance

    # The premium is financed, so it is not part of the cash needed to close.
    total = down + closing_costs_total + inputs.renovation_cost

    return AcquisitionResult(
        purchase_price=price,
        down_payment_amount=down,
        land_transfer_tax=ltt.net_tax,
        land_transfer=ltt,
        mortgage_insurance_premium=premium,
        premium_rate=rate,
        renovation_cost=inputs.renovation_cost,
        renovation_range=renovation_range,
        legal_fees=legal,
        inspection=inspection,
        appraisal=appraisal,
        title_insurance=title_insurance,
        closing_costs_total=closing_costs_total,
        total_acquisition_cost=total,
    )
