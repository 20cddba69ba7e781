import os
from collections.abc import Generator
from importlib import resources
from typing import Any

import psycopg
import pytest

from fieldreport.config.settings import Settings
from fieldreport.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "fieldreport_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(resources.files("fieldreport.database").joinpath("schema.sql").read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[tuple[str, int]], None, None]:
    cleanup: list[tuple[str, int]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "reports":
                    cur.execute("DELETE FROM report_images WHERE report_id = %s", (row_id,))
                    cur.execute("DELETE FROM reports WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "users":
                    cur.execute(
                        """
                        DELETE FROM report_images
                        WHERE report_id IN (SELECT id FROM reports WHERE user_id = %s)
                        """,
                        (row_id,),
                    )
                    cur.execute("DELETE FROM reports WHERE user_id = %s", (row_id,))
                    cur.execute("DELETE FROM users WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_user(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
) -> int:
    with db_conn.cursor() as cur:
        cur.execute("INSERT INTO users (name) VALUES (%s) RETURNING id", ("field officer",))
        row = cur.fetchone()
        assert row is not None
        user_id = row[0]
    db_conn.commit()
    integration_cleanup.append(("users", user_id))
    return user_id
