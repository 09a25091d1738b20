import threading

from bulkadd.logging.logger import Log
from bulkadd.neighborhoods.client_base import BaseNeighborhoodClient
from bulkadd.neighborhoods.exceptions import NeighborhoodLookupError
from bulkadd.neighborhoods.models import NeighborhoodRef
from bulkadd.parsing.models import ParsedItem
from bulkadd.places.models import ResolvedPlace


class NeighborhoodEnricher:
    """Assigns a neighborhood from a place's postal code.

    Never fails an item: a missing postal code, an empty lookup or a failed
    lookup all produce the unassigned fallback reference. Empty lookups are
    cached per postal code; failed lookups are retried on the next item.
    """

    def __init__(
        self,
        client: BaseNeighborhoodClient,
        *,
        default_neighborhood_id: int = 1,
        default_neighborhood_name: str = "Default Neighborhood",
    ) -> None:
        self._client = client
        self._fallback = NeighborhoodRef.unassigned(
            default_neighborhood_id, default_neighborhood_name
        )
        self._cache: dict[str, NeighborhoodRef] = {}
        self._cache_lock = threading.Lock()

    def close(self) -> None:
        self._client.close()

    def enrich(self, item: ParsedItem, place: ResolvedPlace) -> NeighborhoodRef:
        zipcode = (place.postal_code or "").strip()
        if not zipcode:
            Log.debug(f"Line {item.line_number}: no postal code, using default neighborhood")
            return self._fallback

        with self._cache_lock:
            cached = self._cache.get(zipcode)
        if cached is not None:
            return cached

        try:
            neighborhoods = self._client.lookup_by_zipcode(zipcode)
        except NeighborhoodLookupError as exc:
            Log.warning(
                f"Line {item.line_number}: neighborhood lookup for {zipcode} failed, "
                f"using default: {exc}"
            )
            return self._fallback

        ref = _first_valid(neighborhoods)
        if ref is None:
            Log.warning(
                f"Line {item.line_number}: no neighborhood for zipcode {zipcode}, using default"
            )
            ref = self._fallback
        else:
            Log.info(f"Line {item.line_number}: zipcode {zipcode} is in {ref.neighborhood_name}")

        with self._cache_lock:
            self._cache[zipcode] = ref
        return ref


def _first_valid(neighborhoods: list[dict[str, object]]) -> NeighborhoodRef | None:
    for entry in neighborhoods:
        raw_id = entry.get("id")
        try:
            neighborhood_id = int(raw_id)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            continue
        return NeighborhoodRef(
            neighborhood_id=neighborhood_id,
            neighborhood_name=str(entry.get("name") or ""),
        )
    return None
