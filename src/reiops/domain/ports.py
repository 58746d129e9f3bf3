# src/reiops/domain/ports.py
from __future__ import annotations

from typing import Any, Mapping, Protocol, TypedDict


# ----------------------------
# Listing collaborators
# ----------------------------

class ListingRecord(TypedDict, total=False):
    """
    Partial deal description as produced by an MLS lookup or a page scraper.

    Same field names and units as PropertyInputs: dollars, percents 0-100,
    square feet. Values may still be numeric-ish strings ("$299,900").
    """
    address: str
    city: str
    province: str
    postal_code: str
    property_type: str
    bedrooms: Any
    bathrooms: Any
    square_feet: Any
    year_built: Any
    purchase_price: Any
    monthly_rent: Any
    property_tax_annual: Any
    hoa_condo_fees_monthly: Any
    units: list[dict[str, Any]]


class ListingSource(Protocol):
    def fetch(self, ref: str) -> Mapping[str, Any]:
        """Return the listing record for `ref`; raise KeyError when unknown."""
        ...


# ----------------------------
# Deal persistence
# ----------------------------

class DealRepository(Protocol):
    def save_analysis(self, analysis: dict[str, Any], payload: dict[str, Any] | None = None) -> int:
        ...

    def list_recent(self, limit: int = 50) -> list[dict[str, Any]]:
        ...
