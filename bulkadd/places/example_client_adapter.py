"""Example places client adapter.

No network calls. Serves a small fixed catalogue so the pipeline can run
locally and in tests without the backend's places proxy.
"""

import copy
from typing import Any, ClassVar

from bulkadd.places.client_base import BasePlacesClient


class ExamplePlacesClient(BasePlacesClient):
    """Matches queries against a fixed catalogue by case-insensitive name prefix."""

    DEFAULT_PLACES: ClassVar[list[dict[str, Any]]] = [
        {
            "place_id": "example-thai-villa",
            "name": "Thai Villa",
            "formatted_address": "5 E 19th St, New York, NY 10003, USA",
            "address_components": [
                {"long_name": "5", "short_name": "5", "types": ["street_number"]},
                {"long_name": "East 19th Street", "short_name": "E 19th St", "types": ["route"]},
                {
                    "long_name": "New York",
                    "short_name": "New York",
                    "types": ["locality", "political"],
                },
                {
                    "long_name": "New York",
                    "short_name": "NY",
                    "types": ["administrative_area_level_1", "political"],
                },
                {"long_name": "10003", "short_name": "10003", "types": ["postal_code"]},
            ],
            "geometry": {"location": {"lat": 40.7388, "lng": -73.9900}},
            "formatted_phone_number": "(212) 802-7660",
            "website": "https://www.thaivillany.com",
        },
        {
            "place_id": "example-katz",
            "name": "Katz's Delicatessen",
            "formatted_address": "205 E Houston St, New York, NY 10002, USA",
            "address_components": [],
            "geometry": {"location": {"lat": 40.7222, "lng": -73.9874}},
        },
    ]

    def __init__(self, places: list[dict[str, Any]] | None = None) -> None:
        self._places = copy.deepcopy(places if places is not None else self.DEFAULT_PLACES)

    def search(self, query: str) -> dict[str, Any]:
        name = query.split(",", 1)[0].strip().casefold()
        results = [
            {
                "place_id": place["place_id"],
                "name": place["name"],
                "formatted_address": place.get("formatted_address", ""),
            }
            for place in self._places
            if place["name"].casefold().startswith(name)
        ]
        return {"results": results}

    def details(self, place_id: str) -> dict[str, Any]:
        for place in self._places:
            if place["place_id"] == place_id:
                return {"result": copy.deepcopy(place)}
        return {"result": None}
