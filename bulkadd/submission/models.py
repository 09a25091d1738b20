from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from bulkadd.parsing.models import ParsedItem

OUTCOME_ADDED = "added"
OUTCOME_SKIPPED = "skipped"
OUTCOME_ERROR = "error"


@dataclass(frozen=True)
class DuplicateCheck:
    """Existing-entity lookup result for one item."""

    line_number: int
    name: str
    existing: dict[str, Any] | None = None

    @property
    def is_duplicate(self) -> bool:
        return self.existing is not None


@dataclass(frozen=True)
class ItemOutcome:
    """Per-row result of the batch insert."""

    input_name: str
    input_type: str
    status: str
    reason: str | None = None
    inserted_id: int | None = None


@dataclass(frozen=True)
class BatchResult:
    """Counts and per-row details of one batch insert.

    Raises ValueError on construction when the counts and details disagree.
    """

    processed_count: int = 0
    added_count: int = 0
    skipped_count: int = 0
    details: list[ItemOutcome] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.processed_count != self.added_count + self.skipped_count:
            raise ValueError(
                f"processed_count {self.processed_count} != added_count {self.added_count} "
                f"+ skipped_count {self.skipped_count}"
            )
        if len(self.details) != self.processed_count:
            raise ValueError(
                f"details has {len(self.details)} entries for processed_count "
                f"{self.processed_count}"
            )

    @classmethod
    def from_outcomes(cls, outcomes: list[ItemOutcome]) -> "BatchResult":
        added = sum(1 for outcome in outcomes if outcome.status == OUTCOME_ADDED)
        return cls(
            processed_count=len(outcomes),
            added_count=added,
            skipped_count=len(outcomes) - added,
            details=list(outcomes),
        )


@dataclass(frozen=True)
class SubmissionBatch:
    """The ready items sent in one bulk-add call."""

    items: tuple[ParsedItem, ...]
    submitted_at: datetime


@dataclass(frozen=True)
class SubmissionReport:
    batch: SubmissionBatch | None
    result: BatchResult
    not_submitted: list[ParsedItem] = field(default_factory=list)
