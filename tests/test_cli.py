# tests/test_cli.py
import json

import pandas as pd
from typer.testing import CliRunner

from reiops.entrypoints.cli import app

runner = CliRunner()


def _write_json(tmp_path, payload):
    path = tmp_path / "deal.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_analyze_prints_analysis(tmp_path, scenario_payload):
    result = runner.invoke(app, ["analyze", str(_write_json(tmp_path, scenario_payload))])
    assert result.exit_code == 0, result.output
    assert '"grade": "F"' in result.output
    assert '"stress_test_rate": 7.5' in result.output


def test_analyze_exits_with_field_errors(tmp_path):
    result = runner.invoke(app, ["analyze", str(_write_json(tmp_path, {"city": "Hamilton"}))])
    assert result.exit_code == 1
    assert '"field": "purchase_price"' in result.output
    assert '"field": "address"' in result.output


def test_analyze_missing_file(tmp_path):
    result = runner.invoke(app, ["analyze", str(tmp_path / "nope.json")])
    assert result.exit_code == 2


def test_qualify(tmp_path, scenario_payload):
    path = _write_json(tmp_path, scenario_payload)
    result = runner.invoke(app, ["qualify", str(path), "--income", "120000", "--credit-score", "720"])
    assert result.exit_code == 0, result.output
    assert '"lender_tier": "A-Lender"' in result.output


def test_compare(tmp_path, scenario_payload):
    path = tmp_path / "deals.csv"
    cheap = dict(scenario_payload, address="1 Cheap St", purchase_price=220_000)
    pd.DataFrame([scenario_payload, cheap]).to_csv(path, index=False)

    result = runner.invoke(app, ["compare", str(path)])
    assert result.exit_code == 0, result.output
    assert "1 Cheap St" in result.output
    assert "12 King St" in result.output
    assert "2 deals" in result.output


def test_owner_occupied_flag_opens_insured_path(tmp_path, scenario_payload):
    path = _write_json(tmp_path, dict(scenario_payload, down_payment_percent=5))

    rejected = runner.invoke(app, ["analyze", str(path)])
    assert rejected.exit_code == 1
    assert '"code": "below_minimum"' in rejected.output

    result = runner.invoke(app, ["analyze", str(path), "--owner-occupied"])
    assert result.exit_code == 0, result.output
    assert '"premium_rate": 4.0' in result.output
    assert '"owner_occupied": true' in result.output


def test_qualify_accepts_owner_occupied(tmp_path, scenario_payload):
    path = _write_json(tmp_path, dict(scenario_payload, down_payment_percent=10))
    result = runner.invoke(app, ["qualify", str(path), "--income", "120000", "--owner-occupied"])
    assert result.exit_code == 0, result.output
