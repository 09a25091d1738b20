from dataclasses import dataclass, field

from bulkadd.parsing.models import ParsedItem, ParseIssue
from bulkadd.submission.models import DuplicateCheck, SubmissionReport


@dataclass(frozen=True)
class BulkAddReport:
    """Everything an operator needs to see about one bulk-add run."""

    parse_errors: list[ParseIssue] = field(default_factory=list)
    items: list[ParsedItem] = field(default_factory=list)
    duplicates: list[DuplicateCheck] = field(default_factory=list)
    submission: SubmissionReport | None = None
    cancelled: bool = False
    duplicate_check_error: str | None = None
