# src/reiops/analysis/scoring.py
from __future__ import annotations

from typing import Iterable, List

from reiops.domain.results import (
    CashFlowResult,
    Grade,
    MarketComparison,
    MetricsResult,
    RiskFlag,
    ScoringResult,
)

# Weights sum to 100 so the weighted sub-scores land in [0, 100].
WEIGHTS = {
    "cash_on_cash": 30,
    "cap_rate_vs_market": 25,
    "dscr": 25,
    "cash_flow": 20,
}

# Lower bounds, highest grade first.
GRADE_BANDS: tuple[tuple[int, Grade], ...] = (
    (85, "A"),
    (70, "B"),
    (55, "C"),
    (40, "D"),
    (0, "F"),
)

GRADE_DESCRIPTIONS = {
    "A": "Excellent Deal",
    "B": "Good Deal",
    "C": "Fair Deal",
    "D": "Below Average",
    "F": "Poor Deal",
}

WORTH_PURSUING_SCORE = 55


# =====================================================================
# Sub-scores (each 0-100, non-decreasing in its metric)
# =====================================================================


def _coc_score(coc: float | None) -> int:
    if coc is None:
        return 0
    if coc > 15:
        return 100
    if coc > 10:
        return 80
    if coc > 6:
        return 60
    if coc > 3:
        return 40
    if coc > 0:
        return 20
    return 0


def _cap_rate_score(diff: float) -> int:
    if diff > 1:
        return 100
    if diff > 0:
        return 80
    if diff > -1:
        return 50
    return 20


def _dscr_score(dscr: float | None) -> int:
    # no debt at all means coverage is not a concern
    if dscr is None:
        return 100
    if dscr > 1.5:
        return 100
    if dscr > 1.25:
        return 80
    if dscr > 1.0:
        return 50
    return 0


def _cash_flow_score(monthly_net: float) -> int:
    if monthly_net > 500:
        return 100
    if monthly_net > 200:
        return 70
    if monthly_net > 0:
        return 40
    return 0


# =====================================================================
# Grades
# =====================================================================


def grade_for_score(score: float) -> Grade:
    for floor, grade in GRADE_BANDS:
        if score >= floor:
            return grade
    return "F"


def grade_description(grade: str) -> str:
    return GRADE_DESCRIPTIONS.get(grade, "Unknown")


def is_worth_pursuing(score: float) -> bool:
    return score >= WORTH_PURSUING_SCORE


def _reasons(metrics: MetricsResult, cash_flow: CashFlowResult, market: MarketComparison) -> List[str]:
    reasons: List[str] = []
    coc = metrics.cash_on_cash_return

    if coc is not None and coc > 10:
        reasons.append(f"Excellent cash-on-cash return ({coc:.1f}%)")
    elif coc is not None and coc > 6:
        reasons.append(f"Good cash-on-cash return ({coc:.1f}%)")

    if market.cap_rate_vs_market > 0:
        reasons.append(
            f"Cap rate exceeds {market.benchmark.label} benchmark "
            f"({metrics.cap_rate:.2f}% vs {market.benchmark.cap_rate:.2f}%)"
        )

    if metrics.dscr is None:
        reasons.append("No debt service to cover")
    elif metrics.dscr > 1.25:
        reasons.append(f"Strong debt coverage (DSCR {metrics.dscr:.2f})")

    if cash_flow.monthly_net > 200:
        reasons.append(f"Strong positive cash flow (${cash_flow.monthly_net:,.2f}/mo)")
    elif cash_flow.monthly_net > 0:
        reasons.append(f"Positive cash flow (${cash_flow.monthly_net:,.2f}/mo)")

    return reasons


def score_deal(
    metrics: MetricsResult,
    cash_flow: CashFlowResult,
    market: MarketComparison,
    flags: Iterable[RiskFlag] = (),
    notes: Iterable[str] = (),
) -> ScoringResult:
    """
    Weighted 0-100 deal score and letter grade.

    Pure function of already-computed metrics and the benchmark comparison.
    `notes` are warnings carried over from input normalization; they come
    first in `warnings`, followed by risk-flag messages in flag order.
    """
    components = (
        ("cash_on_cash", float(_coc_score(metrics.cash_on_cash_return))),
        ("cap_rate_vs_market", float(_cap_rate_score(market.cap_rate_vs_market))),
        ("dscr", float(_dscr_score(metrics.dscr))),
        ("cash_flow", float(_cash_flow_score(cash_flow.monthly_net))),
    )

    weighted = sum(WEIGHTS[name] * sub for name, sub in components) / 100.0
    # half-up rounding; weighted is never negative
    total = min(int(weighted + 0.5), 100)

    warnings = [*notes, *(f.message for f in flags)]

    return ScoringResult(
        total_score=total,
        grade=grade_for_score(total),
        reasons=tuple(_reasons(metrics, cash_flow, market)),
        warnings=tuple(warnings),
        components=components,
    )
