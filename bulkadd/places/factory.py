from bulkadd.config.settings import Settings
from bulkadd.places.client_base import BasePlacesClient
from bulkadd.places.example_client_adapter import ExamplePlacesClient
from bulkadd.places.http_client_adapter import HttpPlacesClient
from bulkadd.places.resolver import PlaceResolver


class PlacesClientFactory:
    """Creates the configured place-search client."""

    @staticmethod
    def create(settings: Settings) -> BasePlacesClient:
        provider = settings.places_provider.lower()
        if provider == "example":
            return ExamplePlacesClient()
        if provider == "http":
            return HttpPlacesClient(
                base_url=settings.api_base_url,
                timeout_seconds=settings.places_timeout_seconds,
                api_token=settings.api_token,
            )
        raise ValueError(f"Unknown places provider '{provider}'. Choose from: ['example', 'http']")


def build_place_resolver(settings: Settings) -> PlaceResolver:
    return PlaceResolver(
        PlacesClientFactory.create(settings),
        selection_policy=settings.place_selection_policy.lower(),
    )
