# reiops/services/portfolio.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List

import numpy as np
import pandas as pd
from loguru import logger

from reiops.analysis.scoring import is_worth_pursuing
from reiops.domain.ports import DealRepository
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import DealAnalysis
from reiops.services.deal_analyzer import analyze_deal

COMPARISON_COLUMNS = [
    "address",
    "city",
    "province",
    "property_type",
    "purchase_price",
    "total_cash_invested",
    "noi_monthly",
    "monthly_cash_flow",
    "cap_rate",
    "cash_on_cash_return",
    "dscr",
    "total_score",
    "grade",
    "worth_pursuing",
]


@dataclass
class PortfolioSummary:
    """
    Cap rate / CoC / DSCR stats across a batch of analyzed deals.

    Undefined metrics (no cash invested, no debt) are ignored by the
    nan-aware reductions rather than dragging the averages.
    """
    n_deals: int
    mean_cap_rate: float
    p5_cap_rate: float
    p50_cap_rate: float
    p95_cap_rate: float
    mean_coc: float
    p5_coc: float
    p50_coc: float
    p95_coc: float
    mean_dscr: float
    p5_dscr: float
    p50_dscr: float
    p95_dscr: float


@dataclass
class BatchResult:
    comparison: pd.DataFrame
    rejected: List[Dict[str, Any]] = field(default_factory=list)


def _nan_if_none(v: float | None) -> float:
    return float("nan") if v is None else float(v)


def compare_deals(analyses: Iterable[DealAnalysis]) -> pd.DataFrame:
    """One row per deal, best score first (ties keep input order)."""
    rows: List[Dict[str, Any]] = []
    for a in analyses:
        rows.append(
            {
                "address": a.property.address,
                "city": a.property.city,
                "province": a.property.province,
                "property_type": a.property.property_type,
                "purchase_price": a.property.purchase_price,
                "total_cash_invested": a.metrics.total_cash_invested,
                "noi_monthly": a.cash_flow.noi_monthly,
                "monthly_cash_flow": a.cash_flow.monthly_net,
                "cap_rate": a.metrics.cap_rate,
                "cash_on_cash_return": _nan_if_none(a.metrics.cash_on_cash_return),
                "dscr": _nan_if_none(a.metrics.dscr),
                "total_score": a.scoring.total_score,
                "grade": a.scoring.grade,
                "worth_pursuing": is_worth_pursuing(a.scoring.total_score),
            }
        )

    df = pd.DataFrame(rows, columns=COMPARISON_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("total_score", ascending=False, kind="stable").reset_index(drop=True)


def summarize_portfolio(df: pd.DataFrame) -> PortfolioSummary:
    """
    Reduction step over a compare_deals frame.
    """
    n = int(len(df))
    if n == 0:
        nan = float("nan")
        return PortfolioSummary(0, nan, nan, nan, nan, nan, nan, nan, nan, nan, nan, nan, nan)

    cap = df["cap_rate"].to_numpy(dtype=float)
    coc = df["cash_on_cash_return"].to_numpy(dtype=float)
    dscr = df["dscr"].to_numpy(dtype=float)

    def _stats(x: np.ndarray) -> tuple[float, float, float, float]:
        if np.all(np.isnan(x)):
            nan = float("nan")
            return nan, nan, nan, nan
        return (
            float(np.nanmean(x)),
            float(np.nanquantile(x, 0.05)),
            float(np.nanquantile(x, 0.50)),
            float(np.nanquantile(x, 0.95)),
        )

    return PortfolioSummary(n, *_stats(cap), *_stats(coc), *_stats(dscr))


def _row_to_payload(row: pd.Series) -> Dict[str, Any]:
    """
    Convert a CSV row into an analyze_deal payload.

    Empty cells are dropped so the normalizer applies its defaults; numpy
    scalars are unwrapped to plain Python values.
    """
    payload: Dict[str, Any] = {}
    for key, value in row.dropna().items():
        payload[str(key)] = value.item() if isinstance(value, np.generic) else value
    return payload


def analyze_csv(
    path: Path,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
    repo: DealRepository | None = None,
) -> BatchResult:
    """
    Run the deal pipeline over every row of a CSV of PropertyInputs fields.

    Rows that fail validation are logged and returned in `rejected` with
    their field errors; the rest are compared and optionally persisted.
    """
    path = Path(path)
    logger.info("Starting batch deal analysis", csv=str(path))

    if not path.exists():
        raise FileNotFoundError(f"Deal CSV not found at {path}")

    df = pd.read_csv(path)

    analyses: List[DealAnalysis] = []
    rejected: List[Dict[str, Any]] = []

    for idx, row in df.iterrows():
        payload = _row_to_payload(row)
        result = analyze_deal(payload, reference)

        if result.analysis is None:
            errors = [e.to_dict() for e in result.errors]
            logger.warning("Rejected deal row", row=int(idx), errors=errors)
            rejected.append({"row": int(idx), "address": payload.get("address"), "errors": errors})
            continue

        analyses.append(result.analysis)
        if repo is not None:
            repo.save_analysis(result.analysis.to_dict(), payload)

    comparison = compare_deals(analyses)
    logger.info(
        "Batch deal analysis complete",
        analyzed=len(analyses),
        rejected=len(rejected),
    )
    return BatchResult(comparison=comparison, rejected=rejected)
