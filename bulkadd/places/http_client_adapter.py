from typing import Any

import httpx

from bulkadd.places.client_base import BasePlacesClient
from bulkadd.places.exceptions import PlacesNetworkError, PlacesValidationError


class HttpPlacesClient(BasePlacesClient):
    """Place lookup through the backend's ``/places`` proxy endpoints."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int,
        api_token: str = "",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=headers,
            transport=transport,
        )

    def search(self, query: str) -> dict[str, Any]:
        return self._get("/places/search", {"query": query})

    def details(self, place_id: str) -> dict[str, Any]:
        return self._get("/places/details", {"place_id": place_id})

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise PlacesNetworkError(f"Place API timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise PlacesNetworkError(
                f"Place API returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise PlacesNetworkError(f"Place API network error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise PlacesValidationError(f"Place API returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise PlacesValidationError("Place API response must be an object")
        return payload
