# src/reiops/domain/rates.py
"""
Versioned Canadian regulatory tables.

These are a documented approximation of the published schedules (CMHC
premium grid, OSFI B-20 minimum qualifying rate, provincial and municipal
land-transfer taxes). They are not a substitute for a government calculator.
Verify annually and bump RATES_VERSION when anything changes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

RATES_VERSION = "2024.1"

INF = float("inf")


class TaxBracket(NamedTuple):
    upper: float  # inclusive upper bound of this band, in dollars
    rate: float   # marginal rate, percent


@dataclass(frozen=True)
class LandTransferSchedule:
    """
    One jurisdiction's marginal-bracket schedule plus its first-time-buyer relief.

    Relief is min(tax, ftb_rebate_max) while price <= ftb_price_ceiling, then
    shrinks linearly to zero at ftb_phase_out_to (when set).
    """
    name: str
    brackets: tuple[TaxBracket, ...]
    ftb_rebate_max: float = 0.0
    ftb_price_ceiling: float = INF
    ftb_phase_out_to: float | None = None


# ---------------------------------------------------------------------
# CMHC mortgage default insurance (premium as % of the insured loan)
# ---------------------------------------------------------------------


class PremiumBand(NamedTuple):
    min_down_percent: float  # inclusive
    max_down_percent: float  # exclusive
    premium_rate: float      # percent of principal


CMHC_PREMIUM_BANDS: tuple[PremiumBand, ...] = (
    PremiumBand(5.0, 10.0, 4.00),
    PremiumBand(10.0, 15.0, 3.10),
    PremiumBand(15.0, 20.0, 2.80),
)

# down payment at or above this needs no insurance
CONVENTIONAL_DOWN_PAYMENT_PERCENT = 20.0

# ---------------------------------------------------------------------
# OSFI B-20 minimum qualifying rate
# ---------------------------------------------------------------------

STRESS_TEST_BUFFER = 2.0   # percentage points over contract
STRESS_TEST_FLOOR = 5.25   # percent

# ---------------------------------------------------------------------
# Down payment / LTV limits
# ---------------------------------------------------------------------

MIN_DOWN_PAYMENT = {
    "first_500k": 5.0,
    "above_500k": 10.0,
    "over_1m": 20.0,
    "investment": 20.0,
}
DOWN_PAYMENT_TIER_1 = 500_000.0
DOWN_PAYMENT_TIER_2 = 1_000_000.0

MAX_AMORTIZATION_INSURED = 25

# ---------------------------------------------------------------------
# Lending thresholds
# ---------------------------------------------------------------------

LENDER_MIN_DSCR = 1.20

GDS_LIMIT_PRIME = 39.0
TDS_LIMIT_PRIME = 44.0
GDS_LIMIT_ALT = 45.0
TDS_LIMIT_ALT = 50.0
CREDIT_SCORE_PRIME = 680
CREDIT_SCORE_ALT = 600
CREDIT_SCORE_FLOOR = 500

# Max-borrowing assumptions
QUALIFYING_PROPERTY_TAX_RATE = 1.1  # % of value per year
QUALIFYING_DOWN_PAYMENT_PERCENT = 20.0
DEFAULT_HEATING_MONTHLY = 150.0  # lender heating estimate when the borrower gives none

# ---------------------------------------------------------------------
# Land transfer tax
# ---------------------------------------------------------------------

_ONTARIO = LandTransferSchedule(
    name="Ontario Land Transfer Tax",
    brackets=(
        TaxBracket(55_000, 0.5),
        TaxBracket(250_000, 1.0),
        TaxBracket(400_000, 1.5),
        TaxBracket(2_000_000, 2.0),
        TaxBracket(INF, 2.5),
    ),
    ftb_rebate_max=4_000.0,
)

PROVINCIAL_LTT: dict[str, LandTransferSchedule] = {
    "ON": _ONTARIO,
    "BC": LandTransferSchedule(
        name="BC Property Transfer Tax",
        brackets=(
            TaxBracket(200_000, 1.0),
            TaxBracket(2_000_000, 2.0),
            TaxBracket(3_000_000, 3.0),
            TaxBracket(INF, 5.0),
        ),
        # exemption on the first $500k (= $8,000) for homes up to $835k
        ftb_rebate_max=8_000.0,
        ftb_price_ceiling=835_000.0,
        ftb_phase_out_to=860_000.0,
    ),
    "AB": LandTransferSchedule(
        name="Alberta (registration fees only)",
        brackets=(TaxBracket(INF, 0.0),),
    ),
    "SK": LandTransferSchedule(
        name="Saskatchewan Land Titles Transfer Fee",
        brackets=(TaxBracket(6_300, 0.0), TaxBracket(INF, 0.3)),
    ),
    "MB": LandTransferSchedule(
        name="Manitoba Land Transfer Tax",
        brackets=(
            TaxBracket(30_000, 0.0),
            TaxBracket(90_000, 0.5),
            TaxBracket(150_000, 1.0),
            TaxBracket(200_000, 1.5),
            TaxBracket(INF, 2.0),
        ),
    ),
    "QC": LandTransferSchedule(
        name="Quebec Welcome Tax",
        brackets=(
            TaxBracket(58_900, 0.5),
            TaxBracket(294_600, 1.0),
            TaxBracket(INF, 1.5),
        ),
    ),
    "NB": LandTransferSchedule(
        name="New Brunswick Real Property Transfer Tax",
        brackets=(TaxBracket(INF, 1.0),),
    ),
    "NS": LandTransferSchedule(
        name="Nova Scotia Deed Transfer Tax",
        brackets=(TaxBracket(INF, 1.5),),
    ),
    "PE": LandTransferSchedule(
        name="PEI Real Property Transfer Tax",
        brackets=(TaxBracket(30_000, 0.0), TaxBracket(INF, 1.0)),
        ftb_rebate_max=INF,
    ),
    "NL": LandTransferSchedule(
        name="Newfoundland and Labrador Registration Fee",
        brackets=(TaxBracket(500, 0.0), TaxBracket(INF, 0.4)),
    ),
    "YT": LandTransferSchedule(name="Yukon (title fees only)", brackets=(TaxBracket(INF, 0.0),)),
    "NT": LandTransferSchedule(name="Northwest Territories (title fees only)", brackets=(TaxBracket(INF, 0.0),)),
    "NU": LandTransferSchedule(name="Nunavut (title fees only)", brackets=(TaxBracket(INF, 0.0),)),
    "default": _ONTARIO,
}

# (province, casefolded city) -> municipal schedule stacked on top of the provincial one
MUNICIPAL_LTT: dict[tuple[str, str], LandTransferSchedule] = {
    ("ON", "toronto"): LandTransferSchedule(
        name="Toronto Municipal Land Transfer Tax",
        brackets=(
            TaxBracket(55_000, 0.5),
            TaxBracket(250_000, 1.0),
            TaxBracket(400_000, 1.5),
            TaxBracket(2_000_000, 2.0),
            TaxBracket(3_000_000, 2.5),
            TaxBracket(4_000_000, 3.5),
            TaxBracket(5_000_000, 4.5),
            TaxBracket(10_000_000, 5.5),
            TaxBracket(20_000_000, 6.5),
            TaxBracket(INF, 7.5),
        ),
        ftb_rebate_max=4_475.0,
    ),
    # Montreal's welcome tax bands above the provincial 1.5% tier, as an excess
    ("QC", "montreal"): LandTransferSchedule(
        name="Montreal Welcome Tax surcharge",
        brackets=(
            TaxBracket(552_300, 0.0),
            TaxBracket(1_104_700, 0.5),
            TaxBracket(2_136_500, 1.0),
            TaxBracket(3_113_000, 2.0),
            TaxBracket(INF, 2.5),
        ),
    ),
}

PROVINCE_NAMES: dict[str, str] = {
    "ontario": "ON",
    "british columbia": "BC",
    "alberta": "AB",
    "saskatchewan": "SK",
    "manitoba": "MB",
    "quebec": "QC",
    "québec": "QC",
    "new brunswick": "NB",
    "nova scotia": "NS",
    "prince edward island": "PE",
    "pei": "PE",
    "newfoundland and labrador": "NL",
    "newfoundland": "NL",
    "yukon": "YT",
    "northwest territories": "NT",
    "nunavut": "NU",
}
