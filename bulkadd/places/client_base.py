from abc import ABC, abstractmethod
from typing import Any


class BasePlacesClient(ABC):
    """Contract for place-search providers."""

    @abstractmethod
    def search(self, query: str) -> dict[str, Any]:
        """Return the raw search payload, ``{"results": [...]}``.

        Raises:
            PlacesNetworkError: on timeout, transport or HTTP status failure.
        """

    @abstractmethod
    def details(self, place_id: str) -> dict[str, Any]:
        """Return the raw details payload, ``{"result": {...}}``.

        Raises:
            PlacesNetworkError: on timeout, transport or HTTP status failure.
        """

    def close(self) -> None:
        """Release any held connections. Adapters without resources keep this no-op."""
