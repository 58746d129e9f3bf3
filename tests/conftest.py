# tests/conftest.py
import pytest

from reiops.domain.property import NormalizedInputs
from reiops.services.validation import normalize_inputs


@pytest.fixture
def scenario_payload():
    """Port Colborne single-family rental at 20% down."""
    return {
        "address": "12 King St",
        "city": "Port Colborne",
        "purchase_price": 299_900,
        "down_payment_percent": 20,
        "interest_rate": 5.5,
        "amortization_years": 25,
        "monthly_rent": 1_800,
        "property_tax_annual": 3_000,
        "insurance_annual": 1_200,
        "property_management_percent": 8,
        "maintenance_percent": 10,
        "vacancy_rate": 5,
    }


@pytest.fixture
def scenario_inputs(scenario_payload):
    result = normalize_inputs(scenario_payload)
    assert result.ok, result.errors
    return result.inputs


@pytest.fixture(scope="session")
def make_inputs():
    """Build a NormalizedInputs directly, bypassing the normalizer."""

    def _make(**overrides):
        fields = {
            "address": "1 Test Ave",
            "city": "Hamilton",
            "province": "ON",
            "property_type": "single_family",
            "purchase_price": 400_000.0,
            "down_payment_percent": 20.0,
            "down_payment_amount": 80_000.0,
            "interest_rate": 5.0,
            "amortization_years": 25,
            "monthly_rent": 2_800.0,
            "vacancy_rate": 4.0,
            "property_tax_annual": 3_600.0,
            "insurance_annual": 1_200.0,
            "property_management_percent": 8.0,
            "maintenance_percent": 10.0,
        }
        fields.update(overrides)
        if "purchase_price" in overrides or "down_payment_percent" in overrides:
            if "down_payment_amount" not in overrides:
                fields["down_payment_amount"] = fields["purchase_price"] * fields["down_payment_percent"] / 100.0
        return NormalizedInputs(**fields)

    return _make
