from typing import Any

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row

from bulkadd.database.connection import get_connection
from bulkadd.logging.logger import Log
from bulkadd.submission.exceptions import TransactionFailureError
from bulkadd.submission.models import (
    OUTCOME_ADDED,
    OUTCOME_ERROR,
    OUTCOME_SKIPPED,
    BatchResult,
    ItemOutcome,
)
from bulkadd.submission.schemas import BulkAddItemPayload


class BulkAddRepository:
    """Inserts a batch of restaurants and dishes in a single transaction.

    Each row runs in its own savepoint: a uniqueness conflict skips the row,
    and a row-level exception rolls back only that row. The transaction
    commits once every row has been attempted.
    """

    def __init__(
        self,
        *,
        default_neighborhood_name: str = "Default Neighborhood",
        reason_max_length: int = 200,
        default_city_id: int | None = None,
    ) -> None:
        self._default_city_id = default_city_id
        self._default_neighborhood_name = default_neighborhood_name
        self._reason_max_length = reason_max_length

    def bulk_add_items(self, items: list[BulkAddItemPayload]) -> BatchResult:
        """Insert all items and return per-row outcomes.

        Raises:
            TransactionFailureError: if the transaction cannot begin or commit.
        """
        outcomes: list[ItemOutcome] = []
        try:
            with get_connection() as conn:
                with conn.transaction():
                    for item in items:
                        outcomes.append(self._add_item(conn, item))
        except psycopg.Error as exc:
            Log.error(f"Bulk add transaction failed: {exc}")
            raise TransactionFailureError(
                f"Bulk add operation failed during transaction: {exc}"
            ) from exc

        result = BatchResult.from_outcomes(outcomes)
        Log.info(
            f"Processed {result.processed_count} items. Added: {result.added_count}, "
            f"Skipped/Existed/Error: {result.skipped_count}."
        )
        return result

    def _add_item(self, conn: psycopg.Connection[Any], item: BulkAddItemPayload) -> ItemOutcome:
        try:
            with conn.transaction():
                if item.type == "restaurant":
                    return self._add_restaurant(conn, item)
                return self._add_dish(conn, item)
        except Exception as exc:
            reason = _describe_error(exc)[: self._reason_max_length]
            Log.warning(f"Bulk add item error on line {item.line_number} ({item.name}): {reason}")
            return ItemOutcome(
                input_name=item.name,
                input_type=item.type,
                status=OUTCOME_ERROR,
                reason=reason,
            )

    def _add_restaurant(
        self, conn: psycopg.Connection[Any], item: BulkAddItemPayload
    ) -> ItemOutcome:
        city_id = (
            item.city_id or self._find_city_id(conn, item.city) or self._default_city_id
        )
        if city_id is None:
            return _skipped(item, f"City '{item.city}' not found.")

        neighborhood_id = item.neighborhood_id
        if not item.neighborhood_assigned or neighborhood_id is None:
            neighborhood_id = self._default_neighborhood_id(conn, city_id, neighborhood_id)

        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                INSERT INTO restaurants (
                    name, city_id, neighborhood_id, city_name, neighborhood_name,
                    address, zip_code, phone, website, google_place_id,
                    latitude, longitude, adds
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 0)
                ON CONFLICT (name, city_id) DO NOTHING
                RETURNING id
                """,
                (
                    item.name,
                    city_id,
                    neighborhood_id,
                    item.city or None,
                    item.neighborhood_name or None,
                    item.address or None,
                    item.zipcode or None,
                    item.phone,
                    item.website,
                    item.place_id or None,
                    item.latitude,
                    item.longitude,
                ),
            )
            row = cur.fetchone()

        if row is None:
            return _skipped(
                item, "Restaurant likely already exists with this name in the specified city."
            )
        self._link_tags(conn, "restaurant", row["id"], item.tags)
        return _added(item, row["id"])

    def _add_dish(self, conn: psycopg.Connection[Any], item: BulkAddItemPayload) -> ItemOutcome:
        if not item.restaurant_name:
            return _skipped(item, "Restaurant name missing for dish.")

        restaurant_id = self._find_restaurant_id(conn, item.restaurant_name, item.city_id)
        if restaurant_id is None:
            scope = f" in City ID {item.city_id}" if item.city_id else ""
            return _skipped(
                item, f"Restaurant '{item.restaurant_name}'{scope} not found. Dish skipped."
            )

        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                INSERT INTO dishes (name, restaurant_id, adds)
                VALUES (%s, %s, 0)
                ON CONFLICT (name, restaurant_id) DO NOTHING
                RETURNING id
                """,
                (item.name, restaurant_id),
            )
            row = cur.fetchone()

        if row is None:
            return _skipped(item, "Dish likely already exists for this restaurant.")
        self._link_tags(conn, "dish", row["id"], item.tags)
        return _added(item, row["id"])

    def _find_city_id(self, conn: psycopg.Connection[Any], city_name: str) -> int | None:
        if not city_name:
            return None
        with conn.cursor() as cur:
            cur.execute(
                "SELECT id FROM cities WHERE LOWER(name) = LOWER(%s) ORDER BY id LIMIT 1",
                (city_name,),
            )
            row = cur.fetchone()
        return row[0] if row else None

    def _find_restaurant_id(
        self,
        conn: psycopg.Connection[Any],
        restaurant_name: str,
        city_id: int | None,
    ) -> int | None:
        query = "SELECT id FROM restaurants WHERE LOWER(name) = LOWER(%s)"
        params: list[Any] = [restaurant_name]
        if city_id:
            query += " AND city_id = %s"
            params.append(city_id)
        with conn.cursor() as cur:
            cur.execute(query + " ORDER BY id LIMIT 1", params)
            row = cur.fetchone()
        return row[0] if row else None

    def _default_neighborhood_id(
        self,
        conn: psycopg.Connection[Any],
        city_id: int,
        fallback_id: int | None,
    ) -> int | None:
        """Map the unassigned neighborhood to the city's default row, if one exists."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT id FROM neighborhoods
                WHERE LOWER(name) = LOWER(%s) AND city_id = %s
                ORDER BY id LIMIT 1
                """,
                (self._default_neighborhood_name, city_id),
            )
            row = cur.fetchone()
        return row[0] if row else fallback_id

    def _link_tags(
        self,
        conn: psycopg.Connection[Any],
        item_type: str,
        item_id: int,
        tags: list[str],
    ) -> None:
        if not tags:
            return
        junction, id_column = (
            ("restauranthashtags", "restaurant_id")
            if item_type == "restaurant"
            else ("dishhashtags", "dish_id")
        )
        with conn.cursor() as cur:
            cur.execute(
                "SELECT id, LOWER(name) FROM hashtags WHERE LOWER(name) = ANY(%s)",
                ([tag.lower() for tag in tags],),
            )
            found = {name: tag_id for tag_id, name in cur.fetchall()}
            for tag in tags:
                tag_id = found.get(tag.lower())
                if tag_id is None:
                    Log.warning(
                        f"Tag '{tag}' not found in hashtags; "
                        f"skipping link for {item_type} {item_id}"
                    )
                    continue
                cur.execute(
                    f"INSERT INTO {junction} ({id_column}, hashtag_id) VALUES (%s, %s) "
                    "ON CONFLICT DO NOTHING",
                    (item_id, tag_id),
                )


def _added(item: BulkAddItemPayload, inserted_id: int) -> ItemOutcome:
    return ItemOutcome(
        input_name=item.name,
        input_type=item.type,
        status=OUTCOME_ADDED,
        inserted_id=inserted_id,
    )


def _skipped(item: BulkAddItemPayload, reason: str) -> ItemOutcome:
    return ItemOutcome(
        input_name=item.name,
        input_type=item.type,
        status=OUTCOME_SKIPPED,
        reason=reason,
    )


def _describe_error(exc: Exception) -> str:
    if isinstance(exc, pg_errors.ForeignKeyViolation):
        detail = exc.diag.message_detail or str(exc)
        return (
            "Invalid reference detected (e.g., City ID, Neighborhood ID, Restaurant ID). "
            f"Details: {detail}"
        )
    return str(exc) or exc.__class__.__name__
