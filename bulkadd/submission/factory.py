from bulkadd.config.settings import Settings
from bulkadd.database.repositories.bulk_add_repository import BulkAddRepository
from bulkadd.database.repositories.existing_items_repository import ExistingItemsRepository
from bulkadd.submission.client_base import BaseAdminClient
from bulkadd.submission.database_client_adapter import DatabaseAdminClient
from bulkadd.submission.http_client_adapter import HttpAdminClient


class AdminClientFactory:
    """Creates the configured duplicate-check / bulk-add backend."""

    @staticmethod
    def create(settings: Settings) -> BaseAdminClient:
        backend = settings.submission_backend.lower()
        if backend == "http":
            return HttpAdminClient(
                base_url=settings.api_base_url,
                timeout_seconds=settings.submission_timeout_seconds,
                api_token=settings.api_token,
                bulk_add_path=settings.admin_bulk_add_path,
            )
        if backend == "database":
            return DatabaseAdminClient(
                existing_repo=ExistingItemsRepository(),
                bulk_repo=BulkAddRepository(
                    default_neighborhood_name=settings.default_neighborhood_name,
                    reason_max_length=settings.reason_max_length,
                    default_city_id=settings.default_city_id,
                ),
            )
        raise ValueError(
            f"Unknown submission backend '{backend}'. Choose from: ['database', 'http']"
        )
