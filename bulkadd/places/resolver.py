from bulkadd.logging.logger import Log
from bulkadd.parsing.models import ParsedItem
from bulkadd.places.client_base import BasePlacesClient
from bulkadd.places.exceptions import PlacesError
from bulkadd.places.models import PlaceCandidate, Resolution, ResolutionStatus
from bulkadd.places.validator import build_candidates, build_resolved_place

NO_MATCH_MESSAGE = "No places found matching this name and location"
SELECTION_POLICIES = ("first", "disambiguate")


def build_search_query(item: ParsedItem) -> str:
    if item.location_text:
        return f"{item.name}, {item.location_text}"
    return item.name


class PlaceResolver:
    """Matches a restaurant item against the place API and fetches its details.

    Failures come back as an unsuccessful Resolution rather than an exception,
    so one item's lookup never affects another. Nothing is retried here.
    """

    def __init__(self, client: BasePlacesClient, selection_policy: str = "first") -> None:
        if selection_policy not in SELECTION_POLICIES:
            raise ValueError(
                f"Unknown place selection policy '{selection_policy}'. "
                f"Choose from: {list(SELECTION_POLICIES)}"
            )
        self._client = client
        self._selection_policy = selection_policy

    def close(self) -> None:
        self._client.close()

    def resolve(self, item: ParsedItem) -> Resolution:
        query = build_search_query(item)
        Log.debug(f"Line {item.line_number}: searching places for '{query}'")
        try:
            candidates = build_candidates(self._client.search(query))
        except PlacesError as exc:
            Log.error(f"Line {item.line_number}: place search failed: {exc}")
            return _failure(str(exc))

        if not candidates:
            Log.info(f"Line {item.line_number}: no places found for '{query}'")
            return _failure(NO_MATCH_MESSAGE)

        if len(candidates) > 1 and self._selection_policy == "disambiguate":
            Log.info(
                f"Line {item.line_number}: {len(candidates)} places found, awaiting selection"
            )
            return Resolution(
                success=False,
                status=ResolutionStatus.NEEDS_SELECTION,
                message=f"Multiple places found ({len(candidates)}). Please select one.",
                candidates=candidates,
            )

        return self._fetch_details(item, candidates, candidates[0])

    def resolve_selected(
        self,
        item: ParsedItem,
        place_id: str,
        candidates: list[PlaceCandidate],
    ) -> Resolution:
        """Continue an ambiguous item with the caller's chosen candidate."""
        selected = next((c for c in candidates if c.place_id == place_id), None)
        if selected is None:
            return _failure(
                f"Place '{place_id}' is not one of the candidates for this item",
                candidates,
            )
        return self._fetch_details(item, candidates, selected)

    def _fetch_details(
        self,
        item: ParsedItem,
        candidates: list[PlaceCandidate],
        selected: PlaceCandidate,
    ) -> Resolution:
        try:
            place = build_resolved_place(self._client.details(selected.place_id))
        except PlacesError as exc:
            Log.error(
                f"Line {item.line_number}: details for {selected.place_id} failed: {exc}"
            )
            return _failure(f"Failed to get place details: {exc}", candidates)

        Log.info(f"Line {item.line_number}: resolved '{item.name}' to {place.formatted_address}")
        return Resolution(
            success=True,
            status=ResolutionStatus.RESOLVED,
            message=f"Matched {selected.name or selected.place_id}",
            candidates=candidates,
            selected=selected,
            place=place,
        )


def _failure(message: str, candidates: list[PlaceCandidate] | None = None) -> Resolution:
    return Resolution(
        success=False,
        status=ResolutionStatus.ERROR,
        message=message,
        candidates=candidates or [],
    )
