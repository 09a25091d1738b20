from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from bulkadd.neighborhoods.models import NeighborhoodRef
from bulkadd.places.models import PlaceCandidate, ResolvedPlace


class ItemType(str, Enum):
    RESTAURANT = "restaurant"
    DISH = "dish"
    UNKNOWN = "unknown"


class ItemStatus(str, Enum):
    """Per-item lifecycle.

    pending -> processing -> (processed | needs_selection | error) -> (ready | error).
    ``ready`` is only assigned by the readiness gate right before submission.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    NEEDS_SELECTION = "needs_selection"
    READY = "ready"
    ERROR = "error"


TERMINAL_STATUSES = frozenset(
    {ItemStatus.PROCESSED, ItemStatus.NEEDS_SELECTION, ItemStatus.READY, ItemStatus.ERROR}
)


@dataclass(frozen=True)
class ParsedItem:
    """A candidate restaurant or dish parsed from one input line.

    Stages never mutate an item; they return a copy via ``dataclasses.replace``.
    """

    line_number: int
    name: str
    item_type: ItemType
    location_text: str = ""
    tags: tuple[str, ...] = ()
    status: ItemStatus = ItemStatus.PENDING
    status_message: str = "Ready for processing"
    city_id: int | None = None
    candidates: tuple[PlaceCandidate, ...] = ()
    place: ResolvedPlace | None = None
    neighborhood: NeighborhoodRef | None = None
    existing: dict[str, Any] | None = None
    local_duplicate_of: int | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def restaurant_name(self) -> str:
        """Parent restaurant name; only meaningful for dishes."""
        return self.location_text if self.item_type is ItemType.DISH else ""


@dataclass(frozen=True)
class ParseIssue:
    """One malformed input line, reported instead of raised."""

    line_number: int
    message: str
    content: str


@dataclass(frozen=True)
class ParseResult:
    items: list[ParsedItem] = field(default_factory=list)
    errors: list[ParseIssue] = field(default_factory=list)
