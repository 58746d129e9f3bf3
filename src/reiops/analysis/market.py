from __future__ import annotations

from reiops.domain.property import NormalizedInputs
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import MarketComparison, MetricsResult


def compare_to_market(
    inputs: NormalizedInputs,
    metrics: MetricsResult,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
) -> MarketComparison:
    """Deal cap rate and rent-to-price against the city benchmark (or 'default')."""
    benchmark = reference.benchmark(inputs.city, inputs.property_type)

    deal_rent_to_price = inputs.monthly_rent / inputs.purchase_price * 100.0

    return MarketComparison(
        benchmark=benchmark,
        cap_rate_vs_market=metrics.cap_rate - benchmark.cap_rate,
        deal_rent_to_price=deal_rent_to_price,
        rent_to_price_vs_market=deal_rent_to_price - benchmark.rent_to_price,
    )
