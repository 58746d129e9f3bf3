from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import typer

from reiops.analysis.scoring import grade_description
from reiops.domain.results import AnalysisResult, BorrowerProfile
from reiops.services.deal_analyzer import analyze_deal
from reiops.services.portfolio import analyze_csv, summarize_portfolio

app = typer.Typer(help="Canadian rental deal analysis (analyze, compare, qualify).")

_OWNER_OCCUPIED_HELP = (
    "Treat the deal as the buyer's home: the 5/10% insured minimums apply "
    "instead of the 20% investment minimum"
)


def _load_payload(path: Path) -> dict[str, Any]:
    if not path.exists():
        typer.echo(f"File not found: {path}", err=True)
        raise typer.Exit(code=2)
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        typer.echo("Deal JSON must be an object", err=True)
        raise typer.Exit(code=2)
    return payload


def _deal_payload(path: Path, owner_occupied: bool) -> dict[str, Any]:
    payload = _load_payload(path)
    if owner_occupied:
        payload["owner_occupied"] = True
    return payload


def _fail_with_errors(result: AnalysisResult) -> None:
    typer.echo(
        json.dumps(
            {
                "errors": [e.to_dict() for e in result.errors],
                "warnings": list(result.warnings),
            },
            indent=2,
        )
    )
    raise typer.Exit(code=1)


@app.command()
def analyze(
    deal_json: Path = typer.Argument(..., help="Path to a JSON object of PropertyInputs fields"),
    owner_occupied: bool = typer.Option(False, "--owner-occupied", help=_OWNER_OCCUPIED_HELP),
) -> None:
    """
    Analyze one deal and print the full DealAnalysis as JSON.

    Deals are investment properties unless the JSON sets owner_occupied or
    --owner-occupied is passed, so anything under 20% down is rejected.
    """
    result = analyze_deal(_deal_payload(deal_json, owner_occupied))
    if result.analysis is None:
        _fail_with_errors(result)
        return

    typer.echo(json.dumps(result.analysis.to_dict(), indent=2, default=str))


@app.command()
def compare(
    deals_csv: Path = typer.Argument(..., help="CSV with one deal per row"),
    top: int = typer.Option(20, help="Show at most this many deals"),
) -> None:
    """
    Analyze every row of a CSV and print deals ranked by score.
    """
    if not deals_csv.exists():
        typer.echo(f"File not found: {deals_csv}", err=True)
        raise typer.Exit(code=2)

    batch = analyze_csv(deals_csv)
    df = batch.comparison

    if df.empty:
        typer.echo("No deals could be analyzed.")
    else:
        cols = ["address", "city", "purchase_price", "monthly_cash_flow", "cap_rate", "dscr", "total_score", "grade"]
        typer.echo(df[cols].head(top).to_string(index=False))

        summary = summarize_portfolio(df)
        typer.echo(
            f"\n{summary.n_deals} deals | median cap rate {summary.p50_cap_rate:.2f}% | "
            f"median CoC {summary.p50_coc:.2f}% | median DSCR {summary.p50_dscr:.2f}"
        )

    if batch.rejected:
        typer.echo(f"{len(batch.rejected)} row(s) rejected:")
        for rej in batch.rejected:
            fields = ", ".join(e["field"] for e in rej["errors"])
            typer.echo(f"  row {rej['row']}: {fields}")


@app.command()
def qualify(
    deal_json: Path = typer.Argument(..., help="Path to a JSON object of PropertyInputs fields"),
    income: float = typer.Option(..., "--income", help="Gross annual household income"),
    debts: float = typer.Option(0.0, "--debts", help="Other recurring monthly debt payments"),
    credit_score: Optional[int] = typer.Option(None, "--credit-score"),
    heating: Optional[float] = typer.Option(None, "--heating", help="Monthly heating estimate"),
    owner_occupied: bool = typer.Option(False, "--owner-occupied", help=_OWNER_OCCUPIED_HELP),
) -> None:
    """
    GDS / TDS qualification for a deal at the stress-test rate.
    """
    borrower = BorrowerProfile(
        gross_annual_income=income,
        other_monthly_debts=debts,
        heating_monthly=heating,
        credit_score=credit_score,
    )
    result = analyze_deal(_deal_payload(deal_json, owner_occupied), borrower=borrower)
    if result.analysis is None:
        _fail_with_errors(result)
        return

    a = result.analysis
    out = {
        "address": a.property.address,
        "stress_test_rate": a.financing.stress_test_rate,
        "stress_test_payment": a.financing.stress_test_payment,
        "qualification": asdict(a.qualification),
        "score": a.scoring.total_score,
        "grade": a.scoring.grade,
        "grade_description": grade_description(a.scoring.grade),
    }
    typer.echo(json.dumps(out, indent=2))


if __name__ == "__main__":
    app()
