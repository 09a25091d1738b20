from abc import ABC, abstractmethod
from typing import Any


class BaseNeighborhoodClient(ABC):
    """Contract for neighborhood lookup providers."""

    @abstractmethod
    def lookup_by_zipcode(self, zipcode: str) -> list[dict[str, Any]]:
        """Return neighborhoods covering a postal code, possibly empty.

        Raises:
            NeighborhoodLookupError: on network failure or malformed payload.
        """

    def close(self) -> None:
        """Release any held connections. Adapters without resources keep this no-op."""
