from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class PlaceCandidate:
    """One place-search hit."""

    place_id: str
    name: str
    formatted_address: str = ""


@dataclass(frozen=True)
class ResolvedPlace:
    """Full place details for a selected candidate."""

    place_id: str
    formatted_address: str
    latitude: float | None = None
    longitude: float | None = None
    postal_code: str | None = None
    phone: str | None = None
    website: str | None = None
    street_address: str = ""
    city: str = ""
    state: str = ""


@dataclass(frozen=True)
class AddressComponents:
    street_number: str = ""
    route: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""

    @property
    def street_address(self) -> str:
        return " ".join(part for part in (self.street_number, self.route) if part)


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    NEEDS_SELECTION = "needs_selection"
    ERROR = "error"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one item against the place API."""

    success: bool
    status: ResolutionStatus
    message: str
    candidates: list[PlaceCandidate] = field(default_factory=list)
    selected: PlaceCandidate | None = None
    place: ResolvedPlace | None = None
