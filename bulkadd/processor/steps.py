from dataclasses import replace

from bulkadd.logging.logger import Log
from bulkadd.neighborhoods.enricher import NeighborhoodEnricher
from bulkadd.parsing.models import ItemStatus, ItemType, ParsedItem
from bulkadd.places.models import ResolutionStatus
from bulkadd.places.resolver import PlaceResolver
from bulkadd.processor.pipeline import ItemStep


class MarkProcessingStep(ItemStep):
    def run(self, item: ParsedItem) -> ParsedItem:
        return replace(item, status=ItemStatus.PROCESSING, status_message="Processing...")


class RequireRestaurantNameStep(ItemStep):
    def run(self, item: ParsedItem) -> ParsedItem:
        if item.item_type is not ItemType.DISH or item.restaurant_name.strip():
            return item
        Log.error(f"Line {item.line_number}: dish '{item.name}' has no restaurant name")
        return replace(
            item,
            status=ItemStatus.ERROR,
            status_message="Restaurant name is required for dishes",
        )


class ResolvePlaceStep(ItemStep):
    def __init__(self, resolver: PlaceResolver) -> None:
        self._resolver = resolver

    def close(self) -> None:
        self._resolver.close()

    def run(self, item: ParsedItem) -> ParsedItem:
        if item.item_type is not ItemType.RESTAURANT:
            return item
        resolution = self._resolver.resolve(item)
        candidates = tuple(resolution.candidates)
        if resolution.status is ResolutionStatus.NEEDS_SELECTION:
            return replace(
                item,
                status=ItemStatus.NEEDS_SELECTION,
                status_message=resolution.message,
                candidates=candidates,
            )
        if not resolution.success:
            return replace(
                item,
                status=ItemStatus.ERROR,
                status_message=resolution.message,
                candidates=candidates,
            )
        return replace(
            item,
            candidates=candidates,
            place=resolution.place,
            status_message=resolution.message,
        )


class EnrichNeighborhoodStep(ItemStep):
    def __init__(self, enricher: NeighborhoodEnricher) -> None:
        self._enricher = enricher

    def close(self) -> None:
        self._enricher.close()

    def run(self, item: ParsedItem) -> ParsedItem:
        if item.item_type is not ItemType.RESTAURANT or item.place is None:
            return item
        return replace(item, neighborhood=self._enricher.enrich(item, item.place))


class MarkProcessedStep(ItemStep):
    """Advance to ``processed``; restaurants must have an address and a neighborhood."""

    def run(self, item: ParsedItem) -> ParsedItem:
        if item.item_type is ItemType.DISH:
            return replace(
                item,
                status=ItemStatus.PROCESSED,
                status_message=f"Dish will be added to {item.restaurant_name}",
            )

        if item.place is None or not item.place.formatted_address.strip():
            return replace(
                item,
                status=ItemStatus.ERROR,
                status_message="Resolved place has no address",
            )
        if item.neighborhood is None:
            return replace(
                item,
                status=ItemStatus.ERROR,
                status_message="No neighborhood assigned",
            )

        Log.info(f"Line {item.line_number}: '{item.name}' processed")
        return replace(
            item,
            status=ItemStatus.PROCESSED,
            status_message=(
                f"Ready to add {item.name} in {item.neighborhood.neighborhood_name}"
            ),
        )
