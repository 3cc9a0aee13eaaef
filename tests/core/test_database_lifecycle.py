# tests/core/test_database_lifecycle.py
from datetime import datetime, timedelta

import pytest
from sqlalchemy import inspect

from todo_app.core.database import Database
from todo_app.core.exceptions import InternalError
from todo_app.core.repository import next_timestamp, utcnow

pytestmark = pytest.mark.asyncio


async def test_context_manager_creates_schema_and_disposes(settings):
    database = Database(settings.DATABASE_URL)
    async with database:
        assert await database.ping() is True
        async with database.engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            columns = await conn.run_sync(
                lambda sync_conn: [c["name"] for c in inspect(sync_conn).get_columns("todos")]
            )
        assert "todos" in tables
        assert set(columns) == {
            "id", "title", "description", "completed", "priority",
            "due_date", "category", "tags", "created_at", "updated_at",
        }
    assert database.engine is None
    assert await database.ping() is False


async def test_session_requires_connection(settings):
    with pytest.raises(InternalError):
        Database(settings.DATABASE_URL).session()


async def test_app_lifespan_connects_and_disconnects(settings):
    from todo_app.main import create_app

    database = Database(settings.DATABASE_URL)
    app = create_app(settings, database)
    async with app.router.lifespan_context(app):
        assert database.engine is not None
    assert database.engine is None


async def test_next_timestamp_moves_past_previous():
    future = utcnow() + timedelta(seconds=5)
    assert next_timestamp(future) == future + timedelta(microseconds=1)
    assert next_timestamp(None) <= utcnow()
    past = datetime(2000, 1, 1)
    assert next_timestamp(past) > past
