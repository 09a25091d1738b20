from typing import Any
from urllib.parse import quote

import httpx

from bulkadd.neighborhoods.client_base import BaseNeighborhoodClient
from bulkadd.neighborhoods.exceptions import NeighborhoodLookupError


class HttpNeighborhoodClient(BaseNeighborhoodClient):
    """Calls ``GET /neighborhoods/by-zipcode/<zip>``; expects ``{"data": [...]}``."""

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

    def lookup_by_zipcode(self, zipcode: str) -> list[dict[str, Any]]:
        try:
            response = self._client.get(f"/neighborhoods/by-zipcode/{quote(zipcode, safe='')}")
            if response.status_code == 404:
                return []
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise NeighborhoodLookupError(f"Neighborhood lookup failed: {exc}") from exc
        except ValueError as exc:
            raise NeighborhoodLookupError(
                f"Neighborhood lookup returned invalid JSON: {exc}"
            ) from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if data is None:
            return []
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise NeighborhoodLookupError("'data' must be a list of neighborhoods")
        return [entry for entry in data if isinstance(entry, dict)]

    def close(self) -> None:
        self._client.close()
