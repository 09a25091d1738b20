from typing import Any

import pytest

from bulkadd.neighborhoods.client_base import BaseNeighborhoodClient
from bulkadd.places.example_client_adapter import ExamplePlacesClient
from bulkadd.submission.client_base import BaseAdminClient
from bulkadd.submission.models import OUTCOME_ADDED, OUTCOME_SKIPPED, BatchResult, ItemOutcome
from bulkadd.submission.schemas import BulkAddRequest, CheckExistingRequest


class StaticNeighborhoodClient(BaseNeighborhoodClient):
    """Serves neighborhoods from a fixed zipcode map and records lookups."""

    def __init__(self, by_zipcode: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.by_zipcode = by_zipcode or {}
        self.calls: list[str] = []

    def lookup_by_zipcode(self, zipcode: str) -> list[dict[str, Any]]:
        self.calls.append(zipcode)
        return self.by_zipcode.get(zipcode, [])


class InMemoryAdminClient(BaseAdminClient):
    """Keeps rows keyed by (type, name, restaurant) and skips conflicting inserts."""

    def __init__(self) -> None:
        self.rows: dict[tuple[str, str, str], int] = {}
        self.check_calls: list[tuple[str, CheckExistingRequest]] = []
        self.bulk_add_calls: list[tuple[str, BulkAddRequest]] = []
        self._next_id = 1

    def seed(self, item_type: str, name: str, restaurant_name: str = "", row_id: int = 99) -> None:
        self.rows[_key(item_type, name, restaurant_name)] = row_id

    def check_existing(
        self, resource_type: str, request: CheckExistingRequest
    ) -> list[dict[str, Any] | None]:
        self.check_calls.append((resource_type, request))
        results: list[dict[str, Any] | None] = []
        for item in request.items:
            row_id = self.rows.get(_key(item.type, item.name, item.restaurant_name or ""))
            results.append({"id": row_id, "name": item.name} if row_id else None)
        return results

    def bulk_add(self, resource_type: str, request: BulkAddRequest) -> BatchResult:
        self.bulk_add_calls.append((resource_type, request))
        outcomes: list[ItemOutcome] = []
        for item in request.items:
            key = _key(item.type, item.name, item.restaurant_name or "")
            if key in self.rows:
                outcomes.append(
                    ItemOutcome(
                        input_name=item.name,
                        input_type=item.type,
                        status=OUTCOME_SKIPPED,
                        reason="Already exists.",
                    )
                )
                continue
            self.rows[key] = self._next_id
            outcomes.append(
                ItemOutcome(
                    input_name=item.name,
                    input_type=item.type,
                    status=OUTCOME_ADDED,
                    inserted_id=self._next_id,
                )
            )
            self._next_id += 1
        return BatchResult.from_outcomes(outcomes)


def _key(item_type: str, name: str, restaurant_name: str) -> tuple[str, str, str]:
    return (item_type, name.lower(), restaurant_name.lower())


@pytest.fixture()
def example_places_client() -> ExamplePlacesClient:
    return ExamplePlacesClient()


@pytest.fixture()
def neighborhood_client() -> StaticNeighborhoodClient:
    return StaticNeighborhoodClient(
        {
            "10003": [{"id": 7, "name": "Gramercy"}],
            "10002": [{"id": 9, "name": "Lower East Side"}],
        }
    )


@pytest.fixture()
def admin_client() -> InMemoryAdminClient:
    return InMemoryAdminClient()
