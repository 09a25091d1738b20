from dataclasses import asdict
from typing import Any

import psycopg
from psycopg.rows import dict_row

from bulkadd.database.connection import get_connection
from bulkadd.database.models import DishRecord, RestaurantRecord
from bulkadd.submission.schemas import CheckExistingItem


class ExistingItemsRepository:
    """Case-insensitive lookups of restaurants and dishes that already exist."""

    def check_existing(self, items: list[CheckExistingItem]) -> list[dict[str, Any] | None]:
        """Return the existing record (as a dict) or None for every item, in order."""
        with get_connection() as conn:
            results: list[dict[str, Any] | None] = []
            for item in items:
                if item.type == "restaurant":
                    record: RestaurantRecord | DishRecord | None = self.find_restaurant(
                        conn,
                        item.name,
                        item.city_id,
                        google_place_id=item.google_place_id,
                        city_name=item.city,
                    )
                else:
                    record = self.find_dish(conn, item.name, item.restaurant_name, item.city_id)
                results.append(asdict(record) if record is not None else None)
        return results

    def find_restaurant(
        self,
        conn: psycopg.Connection[Any],
        name: str,
        city_id: int | None = None,
        *,
        google_place_id: str | None = None,
        city_name: str | None = None,
    ) -> RestaurantRecord | None:
        """Match on the place id when one is known, then on name within the city."""
        row = None
        if google_place_id:
            row = self._fetch_restaurant(conn, "google_place_id = %s", [google_place_id])
        if row is None:
            condition = "LOWER(name) = LOWER(%s)"
            params: list[Any] = [name]
            if city_id is not None:
                condition += " AND city_id = %s"
                params.append(city_id)
            elif city_name:
                condition += (
                    " AND city_id IN (SELECT id FROM cities WHERE LOWER(name) = LOWER(%s))"
                )
                params.append(city_name)
            row = self._fetch_restaurant(conn, condition, params)
        if row is None:
            return None
        return RestaurantRecord(
            id=row["id"],
            name=row["name"],
            city_id=row["city_id"],
            neighborhood_id=row["neighborhood_id"],
            address=row["address"],
            google_place_id=row["google_place_id"],
        )

    def _fetch_restaurant(
        self, conn: psycopg.Connection[Any], condition: str, params: list[Any]
    ) -> dict[str, Any] | None:
        query = f"""
            SELECT id, name, city_id, neighborhood_id, address, google_place_id
            FROM restaurants
            WHERE {condition}
            ORDER BY id LIMIT 1
        """
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchone()

    def find_dish(
        self,
        conn: psycopg.Connection[Any],
        name: str,
        restaurant_name: str | None = None,
        city_id: int | None = None,
    ) -> DishRecord | None:
        query = """
            SELECT d.id, d.name, d.restaurant_id, r.name AS restaurant_name
            FROM dishes d
            JOIN restaurants r ON r.id = d.restaurant_id
            WHERE LOWER(d.name) = LOWER(%s)
        """
        params: list[Any] = [name]
        if restaurant_name:
            query += " AND LOWER(r.name) = LOWER(%s)"
            params.append(restaurant_name)
        if city_id is not None:
            query += " AND r.city_id = %s"
            params.append(city_id)
        query += " ORDER BY d.id LIMIT 1"

        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        if row is None:
            return None
        return DishRecord(
            id=row["id"],
            name=row["name"],
            restaurant_id=row["restaurant_id"],
            restaurant_name=row["restaurant_name"],
        )
