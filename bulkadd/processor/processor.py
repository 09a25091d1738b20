import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from bulkadd.config.settings import Settings
from bulkadd.logging.logger import Log
from bulkadd.neighborhoods.enricher import NeighborhoodEnricher
from bulkadd.neighborhoods.http_client_adapter import HttpNeighborhoodClient
from bulkadd.parsing.line_parser import LineParser, find_local_duplicates
from bulkadd.parsing.models import ItemStatus, ParsedItem
from bulkadd.places.factory import build_place_resolver
from bulkadd.places.resolver import PlaceResolver
from bulkadd.processor.models import BulkAddReport
from bulkadd.processor.pipeline import ItemStep
from bulkadd.processor.steps import (
    EnrichNeighborhoodStep,
    MarkProcessedStep,
    MarkProcessingStep,
    RequireRestaurantNameStep,
    ResolvePlaceStep,
)
from bulkadd.submission.exceptions import DuplicateCheckError
from bulkadd.submission.factory import AdminClientFactory
from bulkadd.submission.models import DuplicateCheck
from bulkadd.submission.submitter import Submitter

_STOP_STATUSES = frozenset({ItemStatus.ERROR, ItemStatus.NEEDS_SELECTION})


class BulkAddProcessor:
    """Orchestrates a bulk-add run.

    Pipeline: parse -> per-item steps -> duplicate check -> gate -> one submit.
    Items are processed independently; the duplicate check and the submit call
    only start once every item has reached a terminal state.
    """

    def __init__(
        self,
        *,
        parser: LineParser,
        steps: list[ItemStep],
        resume_steps: list[ItemStep],
        resolver: PlaceResolver,
        submitter: Submitter,
        inter_item_delay_seconds: float = 0.0,
        max_concurrency: int = 1,
    ) -> None:
        self._parser = parser
        self._steps = steps
        self._resume_steps = resume_steps
        self._resolver = resolver
        self._submitter = submitter
        self._delay = max(0.0, inter_item_delay_seconds)
        self._max_concurrency = max(1, max_concurrency)

    def run(self, raw_input: str, cancel_event: threading.Event | None = None) -> BulkAddReport:
        parse_result = self._parser.parse(raw_input)
        items = find_local_duplicates(parse_result.items)
        Log.info(f"Processing {len(items)} items")

        processed = self.process_items(items, cancel_event)
        report = self.finalize(processed, cancel_event)
        return replace(report, parse_errors=list(parse_result.errors))

    def process_items(
        self,
        items: list[ParsedItem],
        cancel_event: threading.Event | None = None,
    ) -> list[ParsedItem]:
        """Run the per-item steps for every item; output order matches input order."""
        if self._max_concurrency > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self._max_concurrency) as executor:
                return list(
                    executor.map(
                        lambda item: self._process_unless_cancelled(item, cancel_event),
                        items,
                    )
                )

        results: list[ParsedItem] = []
        for index, item in enumerate(items):
            if index > 0 and self._delay and not _is_cancelled(cancel_event):
                time.sleep(self._delay)
            results.append(self._process_unless_cancelled(item, cancel_event))
        return results

    def process_item(self, item: ParsedItem) -> ParsedItem:
        return self._run_steps(item, self._steps)

    def select_place(self, item: ParsedItem, place_id: str) -> ParsedItem:
        """Continue an item awaiting place selection with the chosen candidate."""
        if item.status is not ItemStatus.NEEDS_SELECTION:
            raise ValueError(f"Line {item.line_number} is not awaiting place selection")

        resolution = self._resolver.resolve_selected(item, place_id, list(item.candidates))
        if not resolution.success:
            return replace(item, status=ItemStatus.ERROR, status_message=resolution.message)
        resolved = replace(
            item,
            status=ItemStatus.PROCESSING,
            place=resolution.place,
            status_message=resolution.message,
        )
        return self._run_steps(resolved, self._resume_steps)

    def finalize(
        self,
        items: list[ParsedItem],
        cancel_event: threading.Event | None = None,
    ) -> BulkAddReport:
        """Duplicate-check and submit processed items in a single batch call."""
        if _is_cancelled(cancel_event):
            Log.warning("Bulk add cancelled before submission; nothing was submitted")
            return BulkAddReport(items=items, cancelled=True)

        unfinished = [item.line_number for item in items if not item.is_terminal]
        if unfinished:
            raise ValueError(
                f"Cannot submit while lines {unfinished} are still being processed"
            )

        candidates = [item for item in items if item.status is ItemStatus.PROCESSED]
        duplicates: list[DuplicateCheck] = []
        duplicate_check_error: str | None = None
        if candidates:
            try:
                duplicates = self._submitter.check_existing(candidates)
                annotated = self._submitter.annotate_existing(candidates, duplicates)
                items = _merge(items, annotated)
            except DuplicateCheckError as exc:
                Log.error(f"Duplicate check failed, continuing without it: {exc}")
                duplicate_check_error = str(exc)

        if _is_cancelled(cancel_event):
            Log.warning("Bulk add cancelled before submission; nothing was submitted")
            return BulkAddReport(
                items=items,
                duplicates=duplicates,
                cancelled=True,
                duplicate_check_error=duplicate_check_error,
            )

        submission = self._submitter.submit(items)
        if submission.batch is not None:
            items = _merge(items, list(submission.batch.items))
        return BulkAddReport(
            items=items,
            duplicates=duplicates,
            submission=submission,
            duplicate_check_error=duplicate_check_error,
        )

    def close(self) -> None:
        """Release the clients held by the steps and the submitter."""
        closed: set[int] = set()
        for step in [*self._steps, *self._resume_steps]:
            if id(step) not in closed:
                closed.add(id(step))
                step.close()
        self._submitter.close()

    def _process_unless_cancelled(
        self, item: ParsedItem, cancel_event: threading.Event | None
    ) -> ParsedItem:
        if _is_cancelled(cancel_event):
            return item
        return self.process_item(item)

    @staticmethod
    def _run_steps(item: ParsedItem, steps: list[ItemStep]) -> ParsedItem:
        try:
            for step in steps:
                item = step.run(item)
                if item.status in _STOP_STATUSES:
                    break
        except Exception as exc:
            Log.error(f"Line {item.line_number}: unexpected error processing '{item.name}': {exc}")
            return replace(
                item,
                status=ItemStatus.ERROR,
                status_message=f"Processing error: {exc}",
            )
        return item


def _is_cancelled(cancel_event: threading.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _merge(items: list[ParsedItem], updates: list[ParsedItem]) -> list[ParsedItem]:
    by_line = {update.line_number: update for update in updates}
    return [by_line.get(item.line_number, item) for item in items]


def build_processor(settings: Settings) -> BulkAddProcessor:
    """Build a BulkAddProcessor with all required adapters."""
    resolver = build_place_resolver(settings)
    enricher = NeighborhoodEnricher(
        HttpNeighborhoodClient(
            base_url=settings.api_base_url,
            timeout_seconds=settings.neighborhood_timeout_seconds,
            api_token=settings.api_token,
        ),
        default_neighborhood_id=settings.default_neighborhood_id,
        default_neighborhood_name=settings.default_neighborhood_name,
    )
    submitter = Submitter(
        AdminClientFactory.create(settings),
        default_city_id=settings.default_city_id,
    )
    enrich_and_finish: list[ItemStep] = [
        EnrichNeighborhoodStep(enricher),
        MarkProcessedStep(),
    ]
    steps: list[ItemStep] = [
        MarkProcessingStep(),
        RequireRestaurantNameStep(),
        ResolvePlaceStep(resolver),
        *enrich_and_finish,
    ]
    return BulkAddProcessor(
        parser=LineParser(settings.input_delimiter or None),
        steps=steps,
        resume_steps=enrich_and_finish,
        resolver=resolver,
        submitter=submitter,
        inter_item_delay_seconds=settings.inter_item_delay_seconds,
        max_concurrency=settings.max_concurrency,
    )
