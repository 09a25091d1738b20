import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from bulkadd.config.settings import Settings
from bulkadd.database.connection import close_pool, get_connection, init_pool

_CLEANUP_ORDER = ("dishes", "restaurants", "neighborhoods", "cities")


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "doof_test")
    return Settings()


def _insert_returning_id(db_conn: psycopg.Connection[Any], sql: str, params: tuple) -> int:
    with db_conn.cursor() as cur:
        cur.execute(sql, params)
        row = cur.fetchone()
    assert row is not None
    return int(row[0])


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 FROM restaurants LIMIT 1")
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to a doof schema")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, int]], None, None]:
    cleanup: list[tuple[str, int]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table in _CLEANUP_ORDER:
                for cleanup_table, row_id in cleanup:
                    if cleanup_table == table:
                        cur.execute(f"DELETE FROM {table} WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_city(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
) -> tuple[int, str]:
    name = f"Test City {uuid.uuid4().hex[:8]}"
    city_id = _insert_returning_id(
        db_conn, "INSERT INTO cities (name) VALUES (%s) RETURNING id", (name,)
    )
    db_conn.commit()
    integration_cleanup.append(("cities", city_id))
    return city_id, name


@pytest.fixture
def seed_neighborhoods(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
    seed_city: tuple[int, str],
) -> dict[str, int]:
    city_id, _ = seed_city
    ids: dict[str, int] = {}
    for name in ("Default Neighborhood", "Gramercy"):
        ids[name] = _insert_returning_id(
            db_conn,
            "INSERT INTO neighborhoods (name, city_id) VALUES (%s, %s) RETURNING id",
            (name, city_id),
        )
        integration_cleanup.append(("neighborhoods", ids[name]))
    db_conn.commit()
    return ids

