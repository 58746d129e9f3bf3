# src/reiops/domain/reference.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from reiops.domain import market_data, rates
from reiops.domain.rates import LandTransferSchedule, PremiumBand


@dataclass(frozen=True)
class MarketBenchmark:
    market: str           # matched table key, "default" on fallback
    is_default: bool
    cap_rate: float       # percent
    rent_to_price: float  # monthly rent / price, percent
    days_on_market: int

    @property
    def label(self) -> str:
        return "national default" if self.is_default else self.market


def _match_key(table: Mapping[str, object], city: str | None) -> str:
    if city:
        wanted = city.strip().casefold()
        for key in table:
            if key != "default" and key.casefold() == wanted:
                return key
    return "default"


@dataclass(frozen=True)
class ReferenceData:
    """
    Read-only reference tables injected into every calculator.

    Tests can build one with synthetic tables; production uses
    DEFAULT_REFERENCE_DATA.
    """
    version: str = rates.RATES_VERSION

    market_benchmarks: Mapping[str, Mapping] = field(default_factory=lambda: market_data.MARKET_BENCHMARKS)
    operating_expenses: Mapping[str, Mapping[str, float]] = field(default_factory=lambda: market_data.OPERATING_EXPENSES)
    renovation_costs_per_sf: Mapping[str, Mapping[str, float]] = field(
        default_factory=lambda: market_data.RENOVATION_COSTS_PER_SF
    )
    closing_costs: Mapping[str, float] = field(default_factory=lambda: market_data.CLOSING_COSTS)
    brrrr: Mapping[str, float] = field(default_factory=lambda: market_data.BRRRR_STRATEGY)

    premium_bands: tuple[PremiumBand, ...] = rates.CMHC_PREMIUM_BANDS
    conventional_down_payment_percent: float = rates.CONVENTIONAL_DOWN_PAYMENT_PERCENT
    stress_test_buffer: float = rates.STRESS_TEST_BUFFER
    stress_test_floor: float = rates.STRESS_TEST_FLOOR

    min_down_payment: Mapping[str, float] = field(default_factory=lambda: rates.MIN_DOWN_PAYMENT)
    down_payment_tier_1: float = rates.DOWN_PAYMENT_TIER_1
    down_payment_tier_2: float = rates.DOWN_PAYMENT_TIER_2
    max_amortization_insured: int = rates.MAX_AMORTIZATION_INSURED
    lender_min_dscr: float = rates.LENDER_MIN_DSCR

    gds_limit_prime: float = rates.GDS_LIMIT_PRIME
    tds_limit_prime: float = rates.TDS_LIMIT_PRIME
    gds_limit_alt: float = rates.GDS_LIMIT_ALT
    tds_limit_alt: float = rates.TDS_LIMIT_ALT
    credit_score_prime: int = rates.CREDIT_SCORE_PRIME
    credit_score_alt: int = rates.CREDIT_SCORE_ALT
    credit_score_floor: int = rates.CREDIT_SCORE_FLOOR
    qualifying_property_tax_rate: float = rates.QUALIFYING_PROPERTY_TAX_RATE
    qualifying_down_payment_percent: float = rates.QUALIFYING_DOWN_PAYMENT_PERCENT
    default_heating_monthly: float = rates.DEFAULT_HEATING_MONTHLY

    provincial_ltt: Mapping[str, LandTransferSchedule] = field(default_factory=lambda: rates.PROVINCIAL_LTT)
    municipal_ltt: Mapping[tuple[str, str], LandTransferSchedule] = field(default_factory=lambda: rates.MUNICIPAL_LTT)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def benchmark(self, city: str | None, property_type: str = "single_family") -> MarketBenchmark:
        cap_rates = self.market_benchmarks["cap_rates"]
        key = _match_key(cap_rates, city)
        column = "multi_unit" if property_type in market_data.MULTI_UNIT_TYPES else "single_family"

        rent_ratios = self.market_benchmarks["rent_to_price_ratios"]
        dom = self.market_benchmarks["average_days_on_market"]

        return MarketBenchmark(
            market=key,
            is_default=key == "default",
            cap_rate=float(cap_rates[key][column]),
            rent_to_price=float(rent_ratios.get(key, rent_ratios["default"])),
            days_on_market=int(dom.get(key, dom["default"])),
        )

    def expense_profile(self, property_type: str) -> Mapping[str, float]:
        return self.operating_expenses.get(property_type, self.operating_expenses["single_family"])

    def renovation_rates(self, condition: str) -> Mapping[str, float]:
        return self.renovation_costs_per_sf[condition]

    def land_transfer_schedule(self, province: str) -> tuple[LandTransferSchedule, bool]:
        """Provincial schedule and whether we had to fall back to 'default'."""
        if province in self.provincial_ltt and province != "default":
            return self.provincial_ltt[province], False
        return self.provincial_ltt["default"], True

    def municipal_schedule(self, province: str, city: str | None) -> LandTransferSchedule | None:
        if not city:
            return None
        return self.municipal_ltt.get((province, city.strip().casefold()))


DEFAULT_REFERENCE_DATA = ReferenceData()
