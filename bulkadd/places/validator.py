"""Validates raw place API payloads and builds domain records."""

from typing import Any

from bulkadd.places.exceptions import PlacesValidationError
from bulkadd.places.models import AddressComponents, PlaceCandidate, ResolvedPlace

_COMPONENT_FIELDS = {
    "street_number": ("street_number", "long_name"),
    "route": ("route", "long_name"),
    "city": ("locality", "long_name"),
    "state": ("administrative_area_level_1", "short_name"),
    "postal_code": ("postal_code", "long_name"),
}


def build_candidates(payload: dict[str, Any]) -> list[PlaceCandidate]:
    """Build search candidates from ``{"results": [...]}``.

    Entries without a place id are dropped; a missing or null ``results``
    counts as no match.

    Raises:
        PlacesValidationError: if ``results`` is present but not a list.
    """
    raw_results = payload.get("results")
    if raw_results is None:
        return []
    if not isinstance(raw_results, list):
        raise PlacesValidationError("'results' must be a list")

    candidates: list[PlaceCandidate] = []
    for raw in raw_results:
        if not isinstance(raw, dict):
            continue
        place_id = raw.get("place_id") or raw.get("placeId")
        if not place_id:
            continue
        candidates.append(
            PlaceCandidate(
                place_id=str(place_id),
                name=str(raw.get("name") or raw.get("description") or ""),
                formatted_address=str(raw.get("formatted_address") or ""),
            )
        )
    return candidates


def build_resolved_place(payload: dict[str, Any]) -> ResolvedPlace:
    """Build a ResolvedPlace from ``{"result": {...}}``.

    Raises:
        PlacesValidationError: if the result is missing or has no place id.
    """
    raw = payload.get("result")
    if not isinstance(raw, dict):
        raise PlacesValidationError("Place details response has no 'result' object")
    place_id = raw.get("place_id") or raw.get("placeId")
    if not place_id:
        raise PlacesValidationError("Place details result has no place_id")

    formatted_address = str(raw.get("formatted_address") or raw.get("address") or "")
    components = extract_address_components(raw.get("address_components"))
    if components == AddressComponents() and formatted_address:
        components = parse_formatted_address(formatted_address)

    latitude, longitude = _coordinates(raw.get("geometry"))
    return ResolvedPlace(
        place_id=str(place_id),
        formatted_address=formatted_address,
        latitude=latitude,
        longitude=longitude,
        postal_code=components.postal_code or None,
        phone=_optional_str(
            raw.get("phone")
            or raw.get("formatted_phone_number")
            or raw.get("international_phone_number")
        ),
        website=_optional_str(raw.get("website")),
        street_address=components.street_address,
        city=components.city,
        state=components.state,
    )


def extract_address_components(raw: Any) -> AddressComponents:
    """Pick street, city, state and postal code out of Google-style components."""
    if not isinstance(raw, list):
        return AddressComponents()
    values: dict[str, str] = {}
    for field_name, (component_type, name_key) in _COMPONENT_FIELDS.items():
        for component in raw:
            if not isinstance(component, dict):
                continue
            if component_type in (component.get("types") or []):
                values[field_name] = str(component.get(name_key) or "")
                break
    return AddressComponents(**values)


def parse_formatted_address(formatted_address: str) -> AddressComponents:
    """Best-effort split of ``"<number> <route>, <city>, <state> <zip>[, country]"``."""
    parts = [part.strip() for part in formatted_address.split(",")]
    street_number = route = city = state = postal_code = ""

    if parts and parts[0]:
        street_number, _, route = parts[0].partition(" ")
    if len(parts) > 1:
        city = parts[1]
    if len(parts) > 2:
        state_parts = parts[2].split()
        state = state_parts[0] if state_parts else ""
        postal_code = state_parts[1] if len(state_parts) > 1 else ""

    return AddressComponents(
        street_number=street_number,
        route=route,
        city=city,
        state=state,
        postal_code=postal_code,
    )


def _coordinates(geometry: Any) -> tuple[float | None, float | None]:
    location = geometry.get("location") if isinstance(geometry, dict) else None
    if not isinstance(location, dict):
        return None, None
    lat, lng = location.get("lat"), location.get("lng")
    if lat is None or lng is None:
        return None, None
    try:
        return float(lat), float(lng)
    except (TypeError, ValueError) as exc:
        raise PlacesValidationError(f"Invalid coordinates: {location}") from exc


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
