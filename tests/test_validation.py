# tests/test_validation.py
import pytest
from pydantic import ValidationError

from reiops.adapters.config import AppConfig
from reiops.domain.property import NormalizedInputs, PropertyInputs
from reiops.services.validation import normalize_inputs


def _base(**overrides):
    payload = {
        "address": "9 Elm St",
        "city": "Hamilton",
        "province": "ON",
        "purchase_price": 400_000,
        "down_payment_percent": 20,
        "monthly_rent": 2_800,
    }
    payload.update(overrides)
    return payload


def _fields(result):
    return {e.field for e in result.errors}


def test_string_numbers_are_coerced():
    result = normalize_inputs(
        _base(purchase_price="$299,900", down_payment_percent="20%", interest_rate=" 5.5% ", monthly_rent="1,800")
    )
    assert result.ok, result.errors
    inputs = result.inputs
    assert inputs.purchase_price == 299_900
    assert inputs.down_payment_percent == 20
    assert inputs.down_payment_amount == pytest.approx(59_980)
    assert inputs.interest_rate == 5.5
    assert inputs.monthly_rent == 1_800


def test_all_missing_required_fields_reported_together():
    result = normalize_inputs({})
    assert not result.ok
    assert result.inputs is None
    assert _fields(result) == {"address", "city", "purchase_price"}
    assert {e.code for e in result.errors} == {"missing"}


def test_unparseable_and_missing_reported_together():
    result = normalize_inputs({"city": "Hamilton", "purchase_price": "lots", "monthly_rent": "n/a"})
    by_field = {e.field: e.code for e in result.errors}
    assert by_field == {"purchase_price": "invalid", "monthly_rent": "invalid", "address": "missing"}


def test_non_positive_price_rejected():
    result = normalize_inputs(_base(purchase_price=0))
    assert [(e.field, e.code) for e in result.errors] == [("purchase_price", "out_of_range")]


def test_negative_money_rejected():
    result = normalize_inputs(_base(insurance_annual=-10))
    assert ("insurance_annual", "out_of_range") in {(e.field, e.code) for e in result.errors}


def test_accepts_property_inputs_model():
    result = normalize_inputs(PropertyInputs(**_base()))
    assert result.ok


def test_percentages_clamped_with_warning():
    result = normalize_inputs(_base(vacancy_rate=150, maintenance_percent=-3))
    assert result.ok
    assert result.inputs.vacancy_rate == 100.0
    assert result.inputs.maintenance_percent == 0.0
    assert any("vacancy_rate" in w and "clamped" in w for w in result.warnings)
    assert any("maintenance_percent" in w and "clamped" in w for w in result.warnings)


# ---------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, code",
    [("Ontario", "ON"), ("on", "ON"), ("british columbia", "BC"), ("Québec", "QC"), ("PEI", "PE")],
)
def test_province_names_and_codes(raw, code):
    result = normalize_inputs(_base(province=raw))
    assert result.inputs.province == code


def test_missing_province_uses_configured_default():
    payload = _base()
    del payload["province"]
    result = normalize_inputs(payload, defaults=AppConfig(DEFAULT_PROVINCE="BC"))
    assert result.inputs.province == "BC"
    assert any("assuming BC" in w for w in result.warnings)


def test_unknown_province_warns_but_analyzes():
    result = normalize_inputs(_base(province="Atlantis"))
    assert result.ok
    assert any("Unknown province" in w for w in result.warnings)


def test_unknown_city_warns_about_default_benchmark():
    result = normalize_inputs(_base(city="Port Colborne"))
    assert any("national default" in w for w in result.warnings)


# ---------------------------------------------------------------------
# Property type / units
# ---------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Single Family", "single_family"),
        ("4-plex", "fourplex"),
        ("Duplex", "duplex"),
        ("5+ units", "multi_unit_5plus"),
        ("multi_unit_5plus", "multi_unit_5plus"),
    ],
)
def test_property_type_aliases(raw, expected):
    assert normalize_inputs(_base(property_type=raw)).inputs.property_type == expected


def test_property_type_inferred_from_units_and_rent_summed():
    payload = _base(units=[{"rent": "1,200"}, {"rent": 1_100}, {"rent": 1_000}])
    del payload["monthly_rent"]
    inputs = normalize_inputs(payload).inputs

    assert inputs.property_type == "triplex"
    assert inputs.unit_count == 3
    assert inputs.monthly_rent == pytest.approx(3_300)
    # triplex expense profile
    assert inputs.vacancy_rate == 6
    assert inputs.maintenance_percent == 15


def test_unknown_enums_are_field_errors():
    result = normalize_inputs(_base(property_type="castle", strategy="moon", property_condition="haunted"))
    codes = {(e.field, e.code) for e in result.errors}
    assert codes == {
        ("property_type", "out_of_range"),
        ("strategy", "out_of_range"),
        ("property_condition", "out_of_range"),
    }


# ---------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------


def test_expense_defaults_from_profile():
    inputs = normalize_inputs(_base()).inputs
    assert inputs.property_management_percent == 8
    assert inputs.maintenance_percent == 12
    assert inputs.vacancy_rate == 4
    assert inputs.insurance_annual == 1_200
    assert inputs.property_tax_annual == pytest.approx(400_000 * 0.009)
    assert inputs.interest_rate == 5.5
    assert inputs.amortization_years == 25
    assert inputs.strategy == "buy_hold"
    assert inputs.property_condition == "move_in_ready"


def test_amortization_out_of_range():
    result = normalize_inputs(_base(amortization_years=45))
    assert ("amortization_years", "out_of_range") in {(e.field, e.code) for e in result.errors}


def test_renovation_estimated_from_square_feet():
    inputs = normalize_inputs(_base(property_condition="heavy_reno", square_feet=1_000)).inputs
    assert inputs.renovation_cost == pytest.approx(150_000)


def test_renovation_override_wins():
    inputs = normalize_inputs(_base(property_condition="heavy_reno", square_feet=1_000, renovation_cost=90_000)).inputs
    assert inputs.renovation_cost == 90_000


def test_renovation_without_square_feet_warns():
    result = normalize_inputs(_base(property_condition="moderate_reno"))
    assert result.inputs.renovation_cost == 0.0
    assert any("Square footage" in w for w in result.warnings)


# ---------------------------------------------------------------------
# Down payment
# ---------------------------------------------------------------------


def test_amount_only_derives_percent():
    payload = _base(down_payment_amount=100_000)
    del payload["down_payment_percent"]
    inputs = normalize_inputs(payload).inputs
    assert inputs.down_payment_percent == pytest.approx(25.0)


def test_conflicting_amount_and_percent_uses_amount():
    result = normalize_inputs(_base(down_payment_amount=100_000, down_payment_percent=20))
    assert result.inputs.down_payment_percent == pytest.approx(25.0)
    assert result.inputs.down_payment_amount == 100_000
    assert any("using the amount" in w for w in result.warnings)


def test_missing_down_payment_defaults_to_minimum():
    payload = _base(owner_occupied=True)
    del payload["down_payment_percent"]
    result = normalize_inputs(payload)
    assert result.inputs.down_payment_percent == pytest.approx(5.0)
    assert result.inputs.down_payment_amount == pytest.approx(20_000)
    assert any("minimum" in w for w in result.warnings)


def test_investment_below_twenty_percent_rejected():
    result = normalize_inputs(_base(down_payment_percent=10))
    codes = {(e.field, e.code) for e in result.errors}
    assert ("down_payment_percent", "below_minimum") in codes
    assert ("loan_to_value", "above_maximum") in codes


def test_owner_occupied_tier_minimums():
    assert normalize_inputs(_base(owner_occupied=True, down_payment_percent=5)).ok

    over_500k = normalize_inputs(_base(purchase_price=750_000, owner_occupied=True, down_payment_percent=5))
    assert ("down_payment_percent", "below_minimum") in {(e.field, e.code) for e in over_500k.errors}

    assert normalize_inputs(_base(purchase_price=750_000, owner_occupied=True, down_payment_percent=7)).ok


def test_tiered_minimum_default_is_not_rejected():
    payload = _base(purchase_price=750_000, owner_occupied=True)
    del payload["down_payment_percent"]
    result = normalize_inputs(payload)
    assert result.ok, result.errors
    assert result.inputs.down_payment_amount == pytest.approx(50_000)


def test_down_payment_above_price_rejected():
    payload = _base(down_payment_amount=500_000)
    del payload["down_payment_percent"]
    result = normalize_inputs(payload)
    assert ("down_payment_amount", "above_maximum") in {(e.field, e.code) for e in result.errors}


def test_snapshot_rejects_stale_down_payment_pair(make_inputs):
    # 5% of 400k is 20k, not 200k
    with pytest.raises(ValidationError):
        make_inputs(down_payment_percent=5.0, down_payment_amount=200_000.0)


def test_snapshot_rejects_down_payment_above_price(make_inputs):
    with pytest.raises(ValidationError):
        make_inputs(down_payment_percent=100.0, down_payment_amount=500_000.0)


def test_snapshot_tolerates_sub_dollar_pair_drift(make_inputs):
    inputs = make_inputs(down_payment_amount=80_000.75)
    assert inputs.down_payment_amount == 80_000.75


def test_normalized_snapshot_satisfies_pair_invariant():
    result = normalize_inputs(_base(down_payment_amount=123_456.78, down_payment_percent=20))
    assert result.ok, result.errors
    inputs = result.inputs
    assert inputs.purchase_price * inputs.down_payment_percent / 100 == pytest.approx(123_456.78, abs=1.0)
    # rebuilding from the dump re-runs the cross-field checks
    assert NormalizedInputs(**inputs.model_dump()) == inputs


@pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "$inf", float("inf"), float("nan")])
def test_non_finite_numbers_rejected(raw):
    result = normalize_inputs(_base(purchase_price=raw))
    assert not result.ok
    assert ("purchase_price", "invalid") in {(e.field, e.code) for e in result.errors}


def test_non_finite_rent_rejected():
    result = normalize_inputs(_base(monthly_rent="NaN"))
    assert [(e.field, e.code) for e in result.errors] == [("monthly_rent", "invalid")]


def test_snapshot_rejects_non_finite_values(make_inputs):
    with pytest.raises(ValidationError):
        make_inputs(monthly_rent=float("inf"))
