from typing import Any

import httpx
from pydantic import ValidationError

from bulkadd.logging.logger import Log
from bulkadd.submission.client_base import BaseAdminClient
from bulkadd.submission.exceptions import (
    DuplicateCheckError,
    SubmissionError,
    TransactionFailureError,
)
from bulkadd.submission.models import BatchResult, ItemOutcome
from bulkadd.submission.schemas import (
    BulkAddRequest,
    BulkAddResponse,
    CheckExistingEntry,
    CheckExistingRequest,
)


class HttpAdminClient(BaseAdminClient):
    """Admin API client for ``/admin/check-existing`` and ``/admin/bulk-add``."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int,
        api_token: str = "",
        bulk_add_path: str = "/admin/bulk-add/{resource_type}",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        self._bulk_add_path = bulk_add_path
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=headers,
            transport=transport,
        )

    def check_existing(
        self, resource_type: str, request: CheckExistingRequest
    ) -> list[dict[str, Any] | None]:
        body = request.model_dump(mode="json", by_alias=True)
        try:
            response = self._client.post(f"/admin/check-existing/{resource_type}", json=body)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise DuplicateCheckError(f"Duplicate check failed: {exc}") from exc
        except ValueError as exc:
            raise DuplicateCheckError(f"Duplicate check returned invalid JSON: {exc}") from exc

        entries = _unwrap(payload)
        if not isinstance(entries, list) or len(entries) != len(request.items):
            raise DuplicateCheckError(
                f"Duplicate check must return one entry per item ({len(request.items)})"
            )
        try:
            return [CheckExistingEntry.model_validate(entry).existing for entry in entries]
        except ValidationError as exc:
            raise DuplicateCheckError(f"Malformed duplicate check entry: {exc}") from exc

    def bulk_add(self, resource_type: str, request: BulkAddRequest) -> BatchResult:
        body = request.model_dump(mode="json", by_alias=True)
        path = self._bulk_add_path.format(resource_type=resource_type)
        Log.info(f"Submitting {len(request.items)} items to {path}")
        try:
            response = self._client.post(path, json=body)
        except httpx.HTTPError as exc:
            raise TransactionFailureError(f"Bulk add request failed: {exc}") from exc
        if response.status_code >= 500:
            raise TransactionFailureError(
                f"Bulk add transaction failed with HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )
        if response.is_error:
            raise SubmissionError(
                f"Bulk add rejected with HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            parsed = BulkAddResponse.model_validate(_unwrap(response.json()))
        except (ValueError, ValidationError) as exc:
            raise SubmissionError(f"Malformed bulk add response: {exc}") from exc
        return _to_batch_result(parsed)

    def close(self) -> None:
        self._client.close()


def _unwrap(payload: Any) -> Any:
    """Accept both bare payloads and the ``{"success": ..., "data": ...}`` envelope."""
    if isinstance(payload, dict) and "data" in payload and "processedCount" not in payload:
        return payload["data"]
    return payload


def _to_batch_result(parsed: BulkAddResponse) -> BatchResult:
    details = [
        ItemOutcome(
            input_name=detail.input.name,
            input_type=detail.input.type,
            status=detail.status,
            reason=detail.reason,
            inserted_id=detail.id,
        )
        for detail in parsed.details
    ]
    try:
        return BatchResult(
            processed_count=parsed.processed_count,
            added_count=parsed.added_count,
            skipped_count=parsed.skipped_count,
            details=details,
        )
    except ValueError as exc:
        raise SubmissionError(f"Inconsistent bulk add response: {exc}") from exc
