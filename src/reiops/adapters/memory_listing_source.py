from typing import Any, Mapping

from reiops.domain.ports import DealRepository, ListingSource


class InMemoryListingSource(ListingSource):
    def __init__(self, listings: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._listings: dict[str, dict[str, Any]] = {
            ref: dict(rec) for ref, rec in (listings or {}).items()
        }

    def add(self, ref: str, record: Mapping[str, Any]) -> None:
        self._listings[ref] = dict(record)

    def fetch(self, ref: str) -> Mapping[str, Any]:
        try:
            return dict(self._listings[ref])
        except KeyError:
            raise KeyError(f"unknown listing: {ref}") from None


class InMemoryDealRepository(DealRepository):
    def __init__(self) -> None:
        self._items: list[dict[str, Any]] = []

    def save_analysis(
        self,
        analysis: dict[str, Any],
        payload: dict[str, Any] | None = None,
    ) -> int:
        rec = dict(analysis)
        if payload is not None:
            rec["request_payload"] = payload
        self._items.append(rec)
        return len(self._items)

    def list_recent(self, limit: int = 50) -> list[dict[str, Any]]:
        return list(reversed(self._items))[:limit]
