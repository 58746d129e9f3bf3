# tests/test_portfolio.py
import math

import pandas as pd
import pytest

from reiops.adapters.memory_listing_source import InMemoryDealRepository
from reiops.services.deal_analyzer import analyze_deal_or_raise, analyze_normalized
from reiops.services.portfolio import analyze_csv, compare_deals, summarize_portfolio


def test_compare_deals_sorted_by_score(make_inputs):
    weak = analyze_normalized(make_inputs(address="weak", monthly_rent=1_500.0))
    strong = analyze_normalized(make_inputs(address="strong", purchase_price=300_000.0, monthly_rent=3_200.0))

    df = compare_deals([weak, strong])

    assert list(df["address"]) == ["strong", "weak"]
    assert df.loc[0, "total_score"] >= df.loc[1, "total_score"]
    assert bool(df.loc[0, "worth_pursuing"])


def test_compare_deals_empty():
    df = compare_deals([])
    assert df.empty
    assert "total_score" in df.columns


def test_summary_ignores_undefined_metrics(make_inputs):
    financed = analyze_normalized(make_inputs(address="financed"))
    all_cash = analyze_normalized(make_inputs(address="cash", down_payment_percent=100.0))

    df = compare_deals([financed, all_cash])
    summary = summarize_portfolio(df)

    assert summary.n_deals == 2
    assert math.isnan(df.loc[df["address"] == "cash", "dscr"].iloc[0])
    assert summary.mean_dscr == pytest.approx(financed.metrics.dscr)
    assert summary.p5_cap_rate <= summary.p50_cap_rate <= summary.p95_cap_rate


def test_summary_of_empty_frame_is_nan():
    summary = summarize_portfolio(compare_deals([]))
    assert summary.n_deals == 0
    assert math.isnan(summary.mean_cap_rate)


def test_analyze_csv_splits_rejected_rows(tmp_path, scenario_payload):
    good = dict(scenario_payload)
    bad = dict(scenario_payload, address="No City Rd", city=None)
    path = tmp_path / "deals.csv"
    pd.DataFrame([good, bad]).to_csv(path, index=False)

    repo = InMemoryDealRepository()
    batch = analyze_csv(path, repo=repo)

    assert len(batch.comparison) == 1
    assert batch.comparison.loc[0, "city"] == "Port Colborne"
    assert batch.comparison.loc[0, "total_score"] == analyze_deal_or_raise(scenario_payload).scoring.total_score

    assert len(batch.rejected) == 1
    assert batch.rejected[0]["row"] == 1
    assert batch.rejected[0]["errors"][0]["field"] == "city"

    saved = repo.list_recent()
    assert len(saved) == 1
    assert saved[0]["request_payload"]["address"] == "12 King St"


def test_analyze_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        analyze_csv(tmp_path / "nope.csv")
