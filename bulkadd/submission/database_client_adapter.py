from typing import Any

from bulkadd.database.repositories.bulk_add_repository import BulkAddRepository
from bulkadd.database.repositories.existing_items_repository import ExistingItemsRepository
from bulkadd.submission.client_base import BaseAdminClient
from bulkadd.submission.models import BatchResult
from bulkadd.submission.schemas import BulkAddRequest, CheckExistingRequest


class DatabaseAdminClient(BaseAdminClient):
    """Runs the duplicate check and bulk insert directly against Postgres."""

    def __init__(
        self,
        existing_repo: ExistingItemsRepository,
        bulk_repo: BulkAddRepository,
    ) -> None:
        self._existing_repo = existing_repo
        self._bulk_repo = bulk_repo

    def check_existing(
        self, resource_type: str, request: CheckExistingRequest
    ) -> list[dict[str, Any] | None]:
        _ = resource_type
        return self._existing_repo.check_existing(request.items)

    def bulk_add(self, resource_type: str, request: BulkAddRequest) -> BatchResult:
        _ = resource_type
        return self._bulk_repo.bulk_add_items(request.items)
