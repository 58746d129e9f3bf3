# tests/test_deal_analyzer_scenario.py
import pytest

from reiops.domain.errors import InputValidationError
from reiops.domain.results import BorrowerProfile
from reiops.services.deal_analyzer import analyze_deal, analyze_deal_or_raise, analyze_normalized


def test_port_colborne_scenario(scenario_payload):
    result = analyze_deal(scenario_payload)
    assert result.ok, result.errors
    a = result.analysis

    assert a.acquisition.mortgage_insurance_premium == 0.0
    assert a.financing.stress_test_rate == pytest.approx(7.5)
    assert a.financing.mortgage_principal == pytest.approx(239_920.0)
    assert a.cash_flow.noi_monthly == pytest.approx(1_036.0)
    assert a.financing.loan_to_value == pytest.approx(239_920 / 299_900)

    assert a.market.benchmark.is_default
    assert a.metrics.cap_rate == pytest.approx(12_432 / 299_900 * 100)

    # negative cash flow, DSCR < 1, cap rate under the default benchmark
    assert a.scoring.total_score == 13
    assert a.scoring.grade == "F"

    warnings = " | ".join(a.scoring.warnings)
    assert "Loan-to-value" not in warnings
    assert "Down payment" not in warnings
    assert "national default" in warnings
    assert "Negative cash flow" in warnings
    assert result.warnings == a.scoring.warnings


def test_invariants_hold(scenario_payload):
    a = analyze_deal_or_raise(scenario_payload)
    assert a.acquisition.total_acquisition_cost >= a.acquisition.down_payment_amount >= 0
    assert a.financing.stress_test_rate >= a.financing.contract_rate
    assert a.financing.stress_test_rate >= 5.25
    assert a.financing.loan_to_value <= 1.0
    assert a.acquisition.down_payment_amount + a.financing.base_loan == pytest.approx(a.property.purchase_price)


def test_identical_inputs_give_identical_analysis(scenario_inputs):
    first = analyze_normalized(scenario_inputs)
    second = analyze_normalized(scenario_inputs)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_to_dict_is_plain_data(scenario_payload):
    d = analyze_deal_or_raise(scenario_payload).to_dict()
    assert d["property"]["city"] == "Port Colborne"
    assert d["operations"]["noi_annual"] == pytest.approx(12_432.0)
    assert d["scoring"]["grade"] == "F"
    assert d["reference_version"]


def test_validation_errors_instead_of_analysis():
    result = analyze_deal({"city": "Hamilton", "purchase_price": -5})
    assert result.analysis is None
    assert not result.ok
    assert {e.field for e in result.errors} == {"address", "purchase_price"}


def test_or_raise_carries_every_error():
    with pytest.raises(InputValidationError) as excinfo:
        analyze_deal_or_raise({})
    assert {e.field for e in excinfo.value.errors} == {"address", "city", "purchase_price"}


def test_borrower_fills_gds_tds(scenario_payload):
    a = analyze_deal_or_raise(scenario_payload, borrower=BorrowerProfile(gross_annual_income=120_000))
    assert a.qualification is not None
    assert a.metrics.gds == a.qualification.gds
    assert a.metrics.tds == a.qualification.tds
    assert a.metrics.gds > 0


def test_zero_income_borrower_warns(scenario_payload):
    a = analyze_deal_or_raise(scenario_payload, borrower=BorrowerProfile(gross_annual_income=0))
    assert a.metrics.gds is None
    assert any("GDS/TDS are undefined" in w for w in a.scoring.warnings)


def test_multiplex_with_units(scenario_payload):
    payload = dict(scenario_payload)
    payload.pop("monthly_rent")
    payload.update(
        city="Hamilton",
        purchase_price=650_000,
        units=[{"unit_number": "A", "rent": 1_900}, {"unit_number": "B", "rent": 1_700}],
    )
    a = analyze_deal_or_raise(payload)
    assert a.property.property_type == "duplex"
    assert a.operations.gross_monthly_rent == pytest.approx(3_600)
    assert a.market.benchmark.cap_rate == 5.0
