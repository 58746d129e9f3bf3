# src/reiops/services/validation.py
from __future__ import annotations

import re
from typing import Any, List, Mapping, get_args

from pydantic import ValidationError

from reiops.adapters.config import AppConfig, config
from reiops.adapters.logging_utils import get_logger
from reiops.analysis.acquisition import max_loan_to_value, minimum_down_payment_percent
from reiops.domain.errors import FieldError
from reiops.domain.property import (
    DOWN_PAYMENT_TOLERANCE,
    NormalizedInputs,
    PropertyCondition,
    PropertyInputs,
    PropertyType,
    Province,
    Strategy,
)
from reiops.domain.rates import PROVINCE_NAMES
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import NormalizationResult

logger = get_logger(__name__)

# Core fields that are truly required to reason about a deal
REQUIRED_TEXT_FIELDS = ("address", "city")

_PERCENT_FIELDS = (
    "down_payment_percent",
    "interest_rate",
    "vacancy_rate",
    "property_management_percent",
    "maintenance_percent",
)

_NON_NEGATIVE_FIELDS = (
    "bedrooms",
    "bathrooms",
    "square_feet",
    "down_payment_amount",
    "renovation_cost",
    "after_repair_value",
    "monthly_rent",
    "other_income",
    "property_tax_annual",
    "insurance_annual",
    "utilities_monthly",
    "hoa_condo_fees_monthly",
    "other_expenses_monthly",
    "legal_fees",
    "inspection_cost",
    "appraisal_cost",
)

_AMORTIZATION_RANGE = (1, 40)

_SEPARATORS = re.compile(r"[\s\-_]+")


def _key(text: str) -> str:
    return _SEPARATORS.sub(" ", text.strip().casefold())


_PROPERTY_TYPE_ALIASES: dict[str, str] = {
    **{_key(t): t for t in get_args(PropertyType)},
    "single family home": "single_family",
    "single family house": "single_family",
    "detached": "single_family",
    "semi detached": "single_family",
    "house": "single_family",
    "sfh": "single_family",
    "sfr": "single_family",
    "2 plex": "duplex",
    "2plex": "duplex",
    "3 plex": "triplex",
    "3plex": "triplex",
    "4 plex": "fourplex",
    "4plex": "fourplex",
    "quadplex": "fourplex",
    "5+ units": "multi_unit_5plus",
    "5+ unit": "multi_unit_5plus",
    "5 plus": "multi_unit_5plus",
    "multi unit": "multi_unit_5plus",
    "apartment": "multi_unit_5plus",
    "apartment building": "multi_unit_5plus",
}

# aliases that name a multi-unit class without saying how many doors
_UNSIZED_MULTI_ALIASES = {"multi family", "multifamily", "plex"}

_STRATEGY_ALIASES: dict[str, str] = {
    **{_key(s): s for s in get_args(Strategy)},
    "buy and hold": "buy_hold",
    "hold": "buy_hold",
    "flip": "fix_flip",
    "fix and flip": "fix_flip",
}

_CONDITION_ALIASES: dict[str, str] = {
    **{_key(c): c for c in get_args(PropertyCondition)},
    "turnkey": "move_in_ready",
    "move in": "move_in_ready",
    "moderate": "moderate_reno",
    "heavy": "heavy_reno",
    "gut": "gut_job",
}

_PROVINCE_CODES = frozenset(get_args(Province))


def _type_from_unit_count(n: int) -> str:
    if n <= 1:
        return "single_family"
    if n == 2:
        return "duplex"
    if n == 3:
        return "triplex"
    if n == 4:
        return "fourplex"
    return "multi_unit_5plus"


def _pydantic_errors(err: ValidationError) -> list[FieldError]:
    out: list[FieldError] = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "__root__"
        code = "missing" if e.get("type") == "missing" else "invalid"
        out.append(FieldError(loc, code, str(e.get("msg", "invalid value"))))
    return out


def _parse(raw: PropertyInputs | Mapping[str, Any]) -> tuple[PropertyInputs, list[FieldError]]:
    """
    Parse a raw payload, collecting every coercion failure instead of
    stopping at the first. Fields that fail are dropped so the remaining
    business rules can still run and report their own problems.
    """
    if isinstance(raw, PropertyInputs):
        return raw, []

    payload = dict(raw)
    try:
        return PropertyInputs.model_validate(payload), []
    except ValidationError as err:
        errors = _pydantic_errors(err)

    bad = {fe.field.split(".", 1)[0] for fe in errors}
    cleaned = {k: v for k, v in payload.items() if k not in bad}
    return PropertyInputs.model_validate(cleaned), errors


def _resolve_province(value: str | None, defaults: AppConfig, reference: ReferenceData, warnings: List[str]) -> str:
    if value is None:
        code = defaults.DEFAULT_PROVINCE
        warnings.append(f"Province not provided; assuming {code}")
    else:
        s = value.strip()
        if s.upper() in _PROVINCE_CODES:
            code = s.upper()
        else:
            code = PROVINCE_NAMES.get(s.casefold(), s.upper())

    _, is_default = reference.land_transfer_schedule(code)
    if is_default:
        warnings.append(f"Unknown province '{code}'; using the default land-transfer schedule")
    return code


def _resolve_property_type(
    value: str | None,
    unit_count: int,
    defaults: AppConfig,
    errors: List[FieldError],
) -> str | None:
    if value is None:
        if unit_count:
            return _type_from_unit_count(unit_count)
        return defaults.DEFAULT_PROPERTY_TYPE

    k = _key(value)
    if k in _PROPERTY_TYPE_ALIASES:
        return _PROPERTY_TYPE_ALIASES[k]
    if k in _UNSIZED_MULTI_ALIASES:
        return _type_from_unit_count(unit_count) if unit_count >= 2 else "duplex"

    errors.append(FieldError("property_type", "out_of_range", f"Unknown property type '{value}'"))
    return None


def _resolve_choice(
    field: str,
    value: str | None,
    aliases: Mapping[str, str],
    default: str,
    errors: List[FieldError],
) -> str | None:
    if value is None:
        return default
    resolved = aliases.get(_key(value))
    if resolved is None:
        allowed = ", ".join(sorted(set(aliases.values())))
        errors.append(FieldError(field, "out_of_range", f"'{value}' is not one of: {allowed}"))
    return resolved


def _clamp_percent(field: str, value: float | None, warnings: List[str]) -> float | None:
    if value is None:
        return None
    if value < 0:
        warnings.append(f"{field} of {value:g}% clamped to 0%")
        return 0.0
    if value > 100:
        warnings.append(f"{field} of {value:g}% clamped to 100%")
        return 100.0
    return value


def normalize_inputs(
    raw: PropertyInputs | Mapping[str, Any],
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
    *,
    defaults: AppConfig = config,
) -> NormalizationResult:
    """
    Turn a partial deal description into a complete NormalizedInputs.

    Responsibilities:
      - Coerce numeric-ish strings and collect every field error at once.
      - Enforce required fields (address, city, purchase_price > 0).
      - Fill missing operating assumptions from the property-type profile.
      - Keep down payment amount and percent consistent with each other.
      - Reject down payments below the minimum for the price tier and use.
      - Clamp out-of-range percentages, leaving a warning for each clamp.
    """
    inputs, errors = _parse(raw)
    warnings: List[str] = []
    failed = {fe.field.split(".", 1)[0] for fe in errors}

    # ------------------------------------------------------------------
    # 1) Required fields
    # ------------------------------------------------------------------
    for name in REQUIRED_TEXT_FIELDS:
        if getattr(inputs, name) is None and name not in failed:
            errors.append(FieldError(name, "missing", f"{name} is required"))

    price = inputs.purchase_price
    if price is None:
        if "purchase_price" not in failed:
            errors.append(FieldError("purchase_price", "missing", "purchase_price is required"))
    elif price <= 0:
        errors.append(FieldError("purchase_price", "out_of_range", "purchase_price must be greater than 0"))
        price = None

    for name in _NON_NEGATIVE_FIELDS:
        v = getattr(inputs, name)
        if v is not None and v < 0:
            errors.append(FieldError(name, "out_of_range", f"{name} must not be negative"))

    # ------------------------------------------------------------------
    # 2) Categorical fields
    # ------------------------------------------------------------------
    units = tuple(inputs.units or ())
    province = _resolve_province(inputs.province, defaults, reference, warnings)
    property_type = _resolve_property_type(inputs.property_type, len(units), defaults, errors)
    strategy = _resolve_choice("strategy", inputs.strategy, _STRATEGY_ALIASES, "buy_hold", errors)
    condition = _resolve_choice(
        "property_condition", inputs.property_condition, _CONDITION_ALIASES, "move_in_ready", errors
    )

    # ------------------------------------------------------------------
    # 3) Percentages & loan terms
    # ------------------------------------------------------------------
    pct = {name: _clamp_percent(name, getattr(inputs, name), warnings) for name in _PERCENT_FIELDS}

    interest_rate = pct["interest_rate"]
    if interest_rate is None:
        interest_rate = defaults.DEFAULT_INTEREST_RATE

    amortization: int | None = defaults.DEFAULT_AMORTIZATION_YEARS
    if inputs.amortization_years is not None:
        lo, hi = _AMORTIZATION_RANGE
        years = inputs.amortization_years
        if not lo <= years <= hi:
            errors.append(
                FieldError("amortization_years", "out_of_range", f"amortization_years must be between {lo} and {hi}")
            )
            amortization = None
        else:
            amortization = int(round(years))
            if amortization != years:
                warnings.append(f"amortization_years of {years:g} rounded to {amortization}")

    # ------------------------------------------------------------------
    # 4) Revenue & expense defaults
    # ------------------------------------------------------------------
    monthly_rent = inputs.monthly_rent
    if monthly_rent is None:
        monthly_rent = sum(u.rent for u in units)

    profile = reference.expense_profile(property_type or defaults.DEFAULT_PROPERTY_TYPE)

    vacancy = pct["vacancy_rate"]
    management = pct["property_management_percent"]
    maintenance = pct["maintenance_percent"]
    if vacancy is None:
        vacancy = float(profile["vacancy_rate"])
    if management is None:
        management = float(profile["property_management_percent"])
    if maintenance is None:
        maintenance = float(profile["maintenance_percent"])

    insurance = inputs.insurance_annual
    if insurance is None:
        insurance = float(profile["insurance_annual_base"])

    property_tax = inputs.property_tax_annual
    if property_tax is None and price is not None:
        property_tax = price * float(profile["property_tax_percent_of_value"]) / 100.0

    # ------------------------------------------------------------------
    # 5) Down payment pair + minimums
    # ------------------------------------------------------------------
    owner_occupied = bool(inputs.owner_occupied)
    dp_amount = inputs.down_payment_amount
    dp_percent = pct["down_payment_percent"]

    if price is not None:
        min_percent = minimum_down_payment_percent(price, owner_occupied, reference)

        if dp_amount is not None and dp_percent is not None:
            implied = price * dp_percent / 100.0
            if abs(implied - dp_amount) > DOWN_PAYMENT_TOLERANCE:
                warnings.append(
                    f"Down payment amount ${dp_amount:,.2f} disagrees with {dp_percent:g}%; using the amount"
                )
                dp_percent = dp_amount / price * 100.0
            else:
                dp_amount = implied
        elif dp_amount is not None:
            dp_percent = dp_amount / price * 100.0
        elif dp_percent is not None:
            dp_amount = price * dp_percent / 100.0
        else:
            dp_percent = min_percent
            dp_amount = price * dp_percent / 100.0
            warnings.append(f"Down payment not provided; assuming the {min_percent:.2f}% minimum")

        # derived percents can land a hair under a band edge
        dp_percent = round(dp_percent, 6)

        if dp_amount is not None and dp_amount > price:
            errors.append(
                FieldError("down_payment_amount", "above_maximum", "down payment cannot exceed the purchase price")
            )
        elif dp_percent < min_percent - 1e-6:
            use = "owner-occupied" if owner_occupied else "investment"
            errors.append(
                FieldError(
                    "down_payment_percent",
                    "below_minimum",
                    f"{dp_percent:.2f}% is below the {min_percent:.2f}% minimum for this price ({use})",
                )
            )
            max_ltv = max_loan_to_value(price, owner_occupied, reference)
            errors.append(
                FieldError(
                    "loan_to_value",
                    "above_maximum",
                    f"loan-to-value {1 - dp_percent / 100:.1%} exceeds the {max_ltv:.1%} maximum",
                )
            )

    # ------------------------------------------------------------------
    # 6) Renovation
    # ------------------------------------------------------------------
    renovation = inputs.renovation_cost
    square_feet = inputs.square_feet or 0.0
    if renovation is None and condition is not None:
        per_sf = reference.renovation_rates(condition)
        renovation = float(per_sf["mid"]) * square_feet
        if per_sf["mid"] > 0 and square_feet <= 0:
            warnings.append(f"Square footage not provided; renovation for '{condition}' estimated at $0")

    if strategy == "brrrr" and not inputs.after_repair_value:
        warnings.append("BRRRR strategy without an after-repair value; refinance analysis skipped")

    # ------------------------------------------------------------------
    # 7) Market benchmark fallback
    # ------------------------------------------------------------------
    if inputs.city is not None and property_type is not None:
        bench = reference.benchmark(inputs.city, property_type)
        if bench.is_default:
            warnings.append(f"No market benchmark for '{inputs.city}'; using national default")

    if errors:
        logger.info(
            "input validation failed",
            extra={"context": {"errors": [e.to_dict() for e in errors]}},
        )
        return NormalizationResult(inputs=None, errors=tuple(errors), warnings=tuple(warnings))

    try:
        normalized = NormalizedInputs(
            address=inputs.address,
            city=inputs.city,
            province=province,
            postal_code=inputs.postal_code,
            property_type=property_type,
            bedrooms=inputs.bedrooms or 0.0,
            bathrooms=inputs.bathrooms or 0.0,
            square_feet=square_feet,
            year_built=int(inputs.year_built) if inputs.year_built is not None else None,
            purchase_price=price,
            down_payment_percent=dp_percent,
            down_payment_amount=dp_amount,
            interest_rate=interest_rate,
            amortization_years=amortization,
            owner_occupied=owner_occupied,
            is_first_time_buyer=bool(inputs.is_first_time_buyer),
            strategy=strategy,
            property_condition=condition,
            renovation_cost=renovation or 0.0,
            after_repair_value=inputs.after_repair_value,
            monthly_rent=monthly_rent,
            units=units,
            other_income=inputs.other_income or 0.0,
            vacancy_rate=vacancy,
            property_tax_annual=property_tax or 0.0,
            insurance_annual=insurance,
            property_management_percent=management,
            maintenance_percent=maintenance,
            utilities_monthly=inputs.utilities_monthly or 0.0,
            hoa_condo_fees_monthly=inputs.hoa_condo_fees_monthly or 0.0,
            other_expenses_monthly=inputs.other_expenses_monthly or 0.0,
            legal_fees=inputs.legal_fees,
            inspection_cost=inputs.inspection_cost,
            appraisal_cost=inputs.appraisal_cost,
        )
    except ValidationError as err:
        return NormalizationResult(inputs=None, errors=tuple(_pydantic_errors(err)), warnings=tuple(warnings))

    return NormalizationResult(inputs=normalized, errors=(), warnings=tuple(warnings))
