from unittest.mock import MagicMock, patch

from bulkadd.database.models import DishRecord, RestaurantRecord
from bulkadd.database.repositories.existing_items_repository import ExistingItemsRepository
from bulkadd.submission.schemas import CheckExistingItem

_PATCH_TARGET = "bulkadd.database.repositories.existing_items_repository.get_connection"


def _make_restaurant_row() -> dict:
    return {
        "id": 11,
        "name": "Thai Villa",
        "city_id": 1,
        "neighborhood_id": 7,
        "address": "5 E 19th St",
        "google_place_id": "p1",
    }


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestFindRestaurant:
    def test_returns_record_when_found(self) -> None:
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.fetchone.return_value = _make_restaurant_row()

        record = ExistingItemsRepository().find_restaurant(conn, "thai villa", city_id=1)

        assert isinstance(record, RestaurantRecord)
        assert record.id == 11
        assert record.google_place_id == "p1"
        sql, params = cursor.execute.call_args.args
        assert "LOWER(name) = LOWER(%s)" in sql
        assert "city_id = %s" in sql
        assert params == ["thai villa", 1]

    def test_without_city_filter(self) -> None:
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.fetchone.return_value = None

        record = ExistingItemsRepository().find_restaurant(conn, "Nowhere")

        assert record is None
        sql, params = cursor.execute.call_args.args
        assert "AND city_id" not in sql
        assert params == ["Nowhere"]

    def test_place_id_match_wins(self) -> None:
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.fetchone.return_value = _make_restaurant_row()

        record = ExistingItemsRepository().find_restaurant(
            conn, "Thai Villa Renamed", city_id=1, google_place_id="p1"
        )

        assert record is not None
        assert record.id == 11
        cursor.execute.assert_called_once()
        sql, params = cursor.execute.call_args.args
        assert "google_place_id = %s" in sql
        assert "LOWER(name)" not in sql
        assert params == ["p1"]

    def test_unknown_place_id_falls_back_to_name(self) -> None:
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.fetchone.side_effect = [None, _make_restaurant_row()]

        record = ExistingItemsRepository().find_restaurant(
            conn, "thai villa", city_id=1, google_place_id="p-new"
        )

        assert record is not None
        assert record.id == 11
        place_call, name_call = cursor.execute.call_args_list
        assert place_call.args[1] == ["p-new"]
        assert "LOWER(name) = LOWER(%s)" in name_call.args[0]
        assert name_call.args[1] == ["thai villa", 1]

    def test_city_name_scopes_match_when_id_is_unknown(self) -> None:
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.fetchone.return_value = None

        record = ExistingItemsRepository().find_restaurant(
            conn, "Thai Villa", city_name="Chicago"
        )

        assert record is None
        sql, params = cursor.execute.call_args.args
        assert "FROM cities" in sql
        assert params == ["Thai Villa", "Chicago"]


class TestFindDish:
    def test_filters_by_restaurant_and_city(self) -> None:
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.fetchone.return_value = {
            "id": 20,
            "name": "Pad Thai",
            "restaurant_id": 11,
            "restaurant_name": "Thai Villa",
        }

        record = ExistingItemsRepository().find_dish(conn, "pad thai", "Thai Villa", 1)

        assert record == DishRecord(
            id=20, name="Pad Thai", restaurant_id=11, restaurant_name="Thai Villa"
        )
        sql, params = cursor.execute.call_args.args
        assert "LOWER(r.name) = LOWER(%s)" in sql
        assert params == ["pad thai", "Thai Villa", 1]


class TestCheckExisting:
    @patch(_PATCH_TARGET)
    def test_returns_dict_or_none_in_order(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [_make_restaurant_row(), None]
        items = [
            CheckExistingItem(name="Thai Villa", type="restaurant", city_id=1, line_number=1),
            CheckExistingItem(
                name="Pad Thai", type="dish", restaurant_name="Thai Villa", line_number=2
            ),
        ]

        results = ExistingItemsRepository().check_existing(items)

        assert results[0] is not None
        assert results[0]["id"] == 11
        assert results[0]["name"] == "Thai Villa"
        assert results[1] is None
        mock_get_conn.assert_called_once()

    @patch(_PATCH_TARGET)
    def test_restaurant_check_passes_place_id(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_restaurant_row()
        items = [
            CheckExistingItem(
                name="Thai Villa (Gramercy)",
                type="restaurant",
                google_place_id="p1",
                line_number=1,
            )
        ]

        results = ExistingItemsRepository().check_existing(items)

        assert results[0] is not None
        assert results[0]["google_place_id"] == "p1"
        sql, params = mock_cursor.execute.call_args.args
        assert "google_place_id = %s" in sql
        assert params == ["p1"]
