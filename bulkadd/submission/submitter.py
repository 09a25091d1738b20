from dataclasses import replace
from datetime import datetime, timezone

from bulkadd.logging.logger import Log
from bulkadd.parsing.models import ItemStatus, ItemType, ParsedItem
from bulkadd.submission.client_base import BaseAdminClient
from bulkadd.submission.exceptions import DuplicateCheckError, SubmissionError
from bulkadd.submission.models import (
    BatchResult,
    DuplicateCheck,
    SubmissionBatch,
    SubmissionReport,
)
from bulkadd.submission.schemas import (
    BulkAddItemPayload,
    BulkAddRequest,
    CheckExistingItem,
    CheckExistingRequest,
)

_RESOURCE_TYPES = {ItemType.RESTAURANT: "restaurants", ItemType.DISH: "dishes"}


def is_ready(item: ParsedItem) -> bool:
    """Readiness gate: only fully processed items with the data insert needs."""
    if item.status is not ItemStatus.PROCESSED:
        return False
    if item.item_type is ItemType.RESTAURANT:
        return (
            item.place is not None
            and bool(item.place.formatted_address.strip())
            and item.neighborhood is not None
        )
    if item.item_type is ItemType.DISH:
        return bool(item.restaurant_name.strip())
    return False


def resource_type_for(items: list[ParsedItem]) -> str:
    kinds = {item.item_type for item in items}
    if len(kinds) == 1:
        return _RESOURCE_TYPES[kinds.pop()]
    return "items"


class Submitter:
    """Duplicate check, readiness gate and the single batch insert call."""

    def __init__(self, client: BaseAdminClient, *, default_city_id: int = 1) -> None:
        self._client = client
        self._default_city_id = default_city_id

    def close(self) -> None:
        self._client.close()

    def check_existing(self, items: list[ParsedItem]) -> list[DuplicateCheck]:
        """Look up every item in the existing-entity store; results follow input order.

        Raises:
            DuplicateCheckError: if the backend fails or answers with the wrong shape.
        """
        checks = [DuplicateCheck(line_number=item.line_number, name=item.name) for item in items]
        for item_type, resource_type in _RESOURCE_TYPES.items():
            indexed = [(i, item) for i, item in enumerate(items) if item.item_type is item_type]
            if not indexed:
                continue
            request = CheckExistingRequest(items=[self._check_item(item) for _, item in indexed])
            existing = self._client.check_existing(resource_type, request)
            if len(existing) != len(indexed):
                raise DuplicateCheckError(
                    f"Expected {len(indexed)} {resource_type} check results, got {len(existing)}"
                )
            for (i, item), record in zip(indexed, existing):
                checks[i] = DuplicateCheck(
                    line_number=item.line_number,
                    name=item.name,
                    existing=record,
                )

        found = sum(1 for check in checks if check.is_duplicate)
        Log.info(f"Duplicate check: {found} of {len(items)} items already exist")
        return checks

    @staticmethod
    def annotate_existing(
        items: list[ParsedItem], checks: list[DuplicateCheck]
    ) -> list[ParsedItem]:
        """Attach duplicate-check results for operator review; nothing is dropped."""
        annotated: list[ParsedItem] = []
        for item, check in zip(items, checks, strict=True):
            if check.existing is None:
                annotated.append(item)
                continue
            existing_id = check.existing.get("id")
            annotated.append(
                replace(
                    item,
                    existing=check.existing,
                    status_message=(
                        f"Possible duplicate of existing {item.item_type.value} #{existing_id}"
                    ),
                )
            )
        return annotated

    @staticmethod
    def gate(items: list[ParsedItem]) -> tuple[list[ParsedItem], list[ParsedItem]]:
        """Split items into ready copies (status ``ready``) and those not submitted."""
        ready: list[ParsedItem] = []
        not_submitted: list[ParsedItem] = []
        for item in items:
            if is_ready(item):
                ready.append(replace(item, status=ItemStatus.READY))
            else:
                not_submitted.append(item)
        return ready, not_submitted

    def submit(self, items: list[ParsedItem]) -> SubmissionReport:
        """Submit every ready item in one bulk-add call.

        Raises:
            TransactionFailureError: if the batch call itself fails.
            SubmissionError: if the backend reports a result for a different batch size.
        """
        ready, not_submitted = self.gate(items)
        for item in not_submitted:
            Log.info(f"Line {item.line_number}: not submitted ({item.status.value})")
        if not ready:
            Log.warning("No items ready for submission")
            return SubmissionReport(batch=None, result=BatchResult(), not_submitted=not_submitted)

        batch = SubmissionBatch(items=tuple(ready), submitted_at=datetime.now(timezone.utc))
        request = BulkAddRequest(items=[self._payload(item) for item in ready])
        result = self._client.bulk_add(resource_type_for(ready), request)
        if result.processed_count != len(ready):
            raise SubmissionError(
                f"Bulk add processed {result.processed_count} items, expected {len(ready)}"
            )

        Log.info(
            f"Bulk add finished: {result.added_count} added, {result.skipped_count} skipped, "
            f"{len(not_submitted)} not submitted"
        )
        return SubmissionReport(batch=batch, result=result, not_submitted=not_submitted)

    def _check_item(self, item: ParsedItem) -> CheckExistingItem:
        return CheckExistingItem(
            name=item.name,
            type=item.item_type.value,
            city_id=self._city_id(item),
            city=_city_name(item) or None,
            google_place_id=item.place.place_id if item.place is not None else None,
            restaurant_name=item.restaurant_name or None,
            line_number=item.line_number,
        )

    def _payload(self, item: ParsedItem) -> BulkAddItemPayload:
        payload = BulkAddItemPayload(
            name=item.name,
            type=item.item_type.value,
            city=_city_name(item),
            city_id=self._city_id(item),
            restaurant_name=item.restaurant_name or None,
            tags=list(item.tags),
            line_number=item.line_number,
        )
        if item.item_type is not ItemType.RESTAURANT or item.place is None:
            return payload

        place = item.place
        update: dict[str, object] = {
            "address": place.formatted_address,
            "city": _city_name(item),
            "state": place.state,
            "zipcode": place.postal_code or "",
            "latitude": place.latitude,
            "longitude": place.longitude,
            "phone": place.phone,
            "website": place.website,
            "place_id": place.place_id,
        }
        if item.neighborhood is not None:
            update["neighborhood_id"] = item.neighborhood.neighborhood_id
            update["neighborhood_name"] = item.neighborhood.neighborhood_name
            update["neighborhood_assigned"] = item.neighborhood.assigned
        return payload.model_copy(update=update)

    def _city_id(self, item: ParsedItem) -> int | None:
        """Explicit id, else None when a city name lets the store resolve it."""
        if item.city_id is not None:
            return item.city_id
        if item.item_type is not ItemType.RESTAURANT or _city_name(item):
            return None
        return self._default_city_id


def _city_name(item: ParsedItem) -> str:
    if item.item_type is not ItemType.RESTAURANT:
        return ""
    if item.place is not None and item.place.city:
        return item.place.city
    return item.location_text.strip()
