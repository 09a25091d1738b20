from dataclasses import dataclass


@dataclass
class RestaurantRecord:
    """Represents a row from the restaurants table (columns used by bulk add)."""

    id: int
    name: str
    city_id: int
    neighborhood_id: int | None = None
    address: str | None = None
    google_place_id: str | None = None


@dataclass
class DishRecord:
    """Represents a row from the dishes table joined with its restaurant name."""

    id: int
    name: str
    restaurant_id: int
    restaurant_name: str | None = None
