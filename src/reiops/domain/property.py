from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Provinces and territories with a land-transfer schedule in the reference tables
Province = Literal["ON", "BC", "AB", "SK", "MB", "QC", "NB", "NS", "PE", "NL", "YT", "NT", "NU"]

# Unit-count driven asset classes; expense and vacancy defaults are keyed on these
PropertyType = Literal[
    "single_family",
    "duplex",
    "triplex",
    "fourplex",
    "multi_unit_5plus",
]

Strategy = Literal["buy_hold", "brrrr", "fix_flip"]

PropertyCondition = Literal[
    "move_in_ready",
    "cosmetic",
    "moderate_reno",
    "heavy_reno",
    "gut_job",
]

# dollars of disagreement tolerated between a down payment amount and percent
DOWN_PAYMENT_TOLERANCE = 1.0

_NUMERIC_JUNK = re.compile(r"[\s$,_]|CAD|C\$", re.IGNORECASE)


def coerce_number(val: Any) -> Any:
    """
    Coerce numeric-ish values coming from listings or scraped pages.

      - 299900
      - "299900"
      - "$299,900"
      - "5.5%"
      - " 1 800 CAD "

    Blank strings become None (treated as "not provided").
    Anything else is handed back untouched so pydantic reports it.
    """
    if val is None or isinstance(val, bool):
        return val
    if isinstance(val, (int, float)):
        return float(val)
    if isinstance(val, str):
        s = _NUMERIC_JUNK.sub("", val.strip())
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            return None
        try:
            return float(s)
        except ValueError:
            return val
    return val


class Unit(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    unit_number: str = ""
    bedrooms: float | None = None
    rent: float = Field(default=0.0, ge=0)

    @field_validator("bedrooms", "rent", mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> Any:
        return coerce_number(v)


_NUMERIC_FIELDS = (
    "bedrooms",
    "bathrooms",
    "square_feet",
    "year_built",
    "purchase_price",
    "down_payment_percent",
    "down_payment_amount",
    "interest_rate",
    "amortization_years",
    "renovation_cost",
    "after_repair_value",
    "monthly_rent",
    "other_income",
    "vacancy_rate",
    "property_tax_annual",
    "insurance_annual",
    "property_management_percent",
    "maintenance_percent",
    "utilities_monthly",
    "hoa_condo_fees_monthly",
    "other_expenses_monthly",
    "legal_fees",
    "inspection_cost",
    "appraisal_cost",
)


class PropertyInputs(BaseModel):
    """
    Raw, possibly partial deal description.

    Listing lookups and page scrapers produce this same field shape: dollars,
    percents as 0-100, square feet. Everything is optional here; the
    normalizer decides what is required and fills defaults.
    """
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, allow_inf_nan=False)

    # Location
    address: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None

    # Property details
    property_type: str | None = None
    bedrooms: float | None = None
    bathrooms: float | None = None
    square_feet: float | None = None
    year_built: float | None = None

    # Purchase & financing
    purchase_price: float | None = None
    down_payment_percent: float | None = None
    down_payment_amount: float | None = None
    interest_rate: float | None = None
    amortization_years: float | None = None
    owner_occupied: bool | None = None
    is_first_time_buyer: bool | None = None

    strategy: str | None = None
    property_condition: str | None = None
    renovation_cost: float | None = None
    after_repair_value: float | None = None

    # Revenue (monthly)
    monthly_rent: float | None = None
    units: list[Unit] | None = None
    other_income: float | None = None
    vacancy_rate: float | None = None

    # Expenses
    property_tax_annual: float | None = None
    insurance_annual: float | None = None
    property_management_percent: float | None = None
    maintenance_percent: float | None = None
    utilities_monthly: float | None = None
    hoa_condo_fees_monthly: float | None = None
    other_expenses_monthly: float | None = None

    # Closing-cost overrides
    legal_fees: float | None = None
    inspection_cost: float | None = None
    appraisal_cost: float | None = None

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _numeric(cls, v: Any) -> Any:
        return coerce_number(v)

    @field_validator("address", "city", "province", "property_type", "strategy", "property_condition", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class NormalizedInputs(BaseModel):
    """
    Complete, internally consistent snapshot the calculators consume.

    Immutable: any edit means building a new snapshot and re-running the
    pipeline.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    address: str
    city: str
    province: str
    postal_code: str | None = None

    property_type: PropertyType
    bedrooms: float = 0.0
    bathrooms: float = 0.0
    square_feet: float = 0.0
    year_built: int | None = None

    purchase_price: float = Field(..., gt=0)
    down_payment_percent: float = Field(..., ge=0, le=100)
    down_payment_amount: float = Field(..., ge=0)
    interest_rate: float = Field(..., ge=0, le=100)
    amortization_years: int = Field(..., ge=1, le=40)
    owner_occupied: bool = False
    is_first_time_buyer: bool = False

    strategy: Strategy = "buy_hold"
    property_condition: PropertyCondition = "move_in_ready"
    renovation_cost: float = Field(default=0.0, ge=0)
    after_repair_value: float | None = None

    monthly_rent: float = Field(default=0.0, ge=0)
    units: tuple[Unit, ...] = ()
    other_income: float = Field(default=0.0, ge=0)
    vacancy_rate: float = Field(default=0.0, ge=0, le=100)

    property_tax_annual: float = Field(default=0.0, ge=0)
    insurance_annual: float = Field(default=0.0, ge=0)
    property_management_percent: float = Field(default=0.0, ge=0, le=100)
    maintenance_percent: float = Field(default=0.0, ge=0, le=100)
    utilities_monthly: float = Field(default=0.0, ge=0)
    hoa_condo_fees_monthly: float = Field(default=0.0, ge=0)
    other_expenses_monthly: float = Field(default=0.0, ge=0)

    legal_fees: float | None = None
    inspection_cost: float | None = None
    appraisal_cost: float | None = None

    @model_validator(mode="after")
    def _down_payment_pair(self) -> "NormalizedInputs":
        price = self.purchase_price
        amount = self.down_payment_amount
        # half a cent of float slack for amounts derived from 100%
        if amount > price + 0.005:
            raise ValueError(f"down_payment_amount {amount:,.2f} exceeds purchase_price {price:,.2f}")
        implied = price * self.down_payment_percent / 100.0
        if abs(implied - amount) > DOWN_PAYMENT_TOLERANCE:
            raise ValueError(
                f"down_payment_amount {amount:,.2f} disagrees with down_payment_percent "
                f"{self.down_payment_percent:g}% of {price:,.2f}"
            )
        return self

    @property
    def unit_count(self) -> int:
        return max(len(self.units), 1)

    @property
    def is_multi_unit(self) -> bool:
        return self.property_type != "single_family"
