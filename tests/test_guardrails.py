# tests/test_guardrails.py
import pytest
from hypothesis import given, settings, strategies as st

from reiops.services.deal_analyzer import analyze_normalized


def _codes(analysis):
    return [f.code for f in analysis.flags]


def test_healthy_deal_has_no_flags(make_inputs):
    a = analyze_normalized(make_inputs(purchase_price=300_000.0, monthly_rent=3_200.0))
    assert a.cash_flow.monthly_net > 0
    assert _codes(a) == []


def test_below_minimum_down_payment_is_flagged_when_built_directly(make_inputs):
    a = analyze_normalized(make_inputs(down_payment_percent=10.0))
    codes = _codes(a)
    assert "DOWN_PAYMENT_BELOW_MIN" in codes
    assert "LTV_ABOVE_MAX" in codes


def test_owner_occupied_insured_loan_is_within_limits(make_inputs):
    a = analyze_normalized(make_inputs(owner_occupied=True, down_payment_percent=5.0))
    codes = _codes(a)
    assert "DOWN_PAYMENT_BELOW_MIN" not in codes
    assert "LTV_ABOVE_MAX" not in codes
    # premium pushes principal over 95% of price, limits apply to the base loan
    assert a.financing.loan_to_value > 0.95


def test_insured_amortization_over_25_years(make_inputs):
    a = analyze_normalized(make_inputs(owner_occupied=True, down_payment_percent=10.0, amortization_years=30))
    assert "INSURED_AMORTIZATION" in _codes(a)


def test_coverage_flags(make_inputs):
    a = analyze_normalized(make_inputs(monthly_rent=3_150.0))
    codes = _codes(a)
    assert 1.0 <= a.metrics.dscr < 1.2
    assert "DSCR_BELOW_LENDER_MIN" in codes
    assert "DSCR_BELOW_ONE" not in codes


def test_zero_rent_explains_undefined_ratios(make_inputs):
    a = analyze_normalized(make_inputs(monthly_rent=0.0))
    codes = _codes(a)
    assert "NO_INCOME" in codes
    assert "NEGATIVE_CASH_FLOW" in codes
    assert codes.index("NEGATIVE_CASH_FLOW") < codes.index("NO_INCOME")


def test_all_cash_purchase_explains_missing_dscr(make_inputs):
    a = analyze_normalized(make_inputs(down_payment_percent=100.0))
    assert "DSCR_UNDEFINED" in _codes(a)


def test_major_renovation(make_inputs):
    a = analyze_normalized(make_inputs(property_condition="gut_job", square_feet=1_200.0, renovation_cost=240_000.0))
    assert "MAJOR_RENOVATION" in _codes(a)


def test_flag_messages_become_score_warnings(make_inputs):
    a = analyze_normalized(make_inputs(monthly_rent=1_500.0), notes=("note first",))
    assert a.scoring.warnings[0] == "note first"
    assert list(a.scoring.warnings[1:]) == [f.message for f in a.flags]


@pytest.mark.parametrize("owner_occupied", [False, True])
def test_uninsurable_down_payment_is_flagged_not_raised(make_inputs, owner_occupied):
    a = analyze_normalized(make_inputs(owner_occupied=owner_occupied, down_payment_percent=3.0))
    codes = _codes(a)
    assert a.acquisition.premium_rate == 0.0
    assert a.acquisition.mortgage_insurance_premium == 0.0
    assert a.financing.base_loan == pytest.approx(388_000.0)
    assert "DOWN_PAYMENT_BELOW_MIN" in codes
    assert "LTV_ABOVE_MAX" in codes


def test_zero_down_is_fully_financed_without_premium(make_inputs):
    a = analyze_normalized(make_inputs(down_payment_percent=0.0))
    assert a.financing.loan_to_value == pytest.approx(1.0)
    assert "DOWN_PAYMENT_BELOW_MIN" in _codes(a)


@settings(max_examples=75, deadline=None)
@given(
    price=st.integers(min_value=50_000, max_value=3_000_000),
    down_pct=st.floats(min_value=0.0, max_value=100.0),
    owner_occupied=st.booleans(),
    rent=st.integers(min_value=0, max_value=25_000),
)
def test_any_consistent_snapshot_analyzes_within_loan_limits(make_inputs, price, down_pct, owner_occupied, rent):
    a = analyze_normalized(
        make_inputs(
            purchase_price=float(price),
            down_payment_percent=down_pct,
            owner_occupied=owner_occupied,
            monthly_rent=float(rent),
        )
    )
    assert 0.0 <= a.financing.loan_to_value <= 1.0
    assert a.financing.base_loan <= a.property.purchase_price
    assert 0 <= a.scoring.total_score <= 100
