from abc import ABC, abstractmethod
from typing import Any

from bulkadd.submission.models import BatchResult
from bulkadd.submission.schemas import BulkAddRequest, CheckExistingRequest


class BaseAdminClient(ABC):
    """Contract for the admin duplicate-check and bulk-add backends."""

    @abstractmethod
    def check_existing(
        self, resource_type: str, request: CheckExistingRequest
    ) -> list[dict[str, Any] | None]:
        """Return the matching existing record (or None) per request item, in order.

        Raises:
            DuplicateCheckError: on call failure or malformed response.
        """

    @abstractmethod
    def bulk_add(self, resource_type: str, request: BulkAddRequest) -> BatchResult:
        """Insert all items in one transaction and report per-row outcomes.

        Raises:
            TransactionFailureError: if the batch itself fails.
            SubmissionError: if the response breaks the BatchResult invariants.
        """

    def close(self) -> None:
        """Release any held connections. Adapters without resources keep this no-op."""
