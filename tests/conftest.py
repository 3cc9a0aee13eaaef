# tests/conftest.py
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from todo_app.core.config import Settings
from todo_app.core.database import Database
from todo_app.modules.todos.repository import TodoRepository
from todo_app.modules.todos.services import TodoService


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        PROJECT_NAME="Todo Tracker Test",
        LOG_LEVEL="DEBUG",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'todo_test.db'}",
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    db = Database(settings.DATABASE_URL)
    await db.connect()
    yield db
    await db.disconnect()


@pytest_asyncio.fixture
async def todo_repo(database: Database) -> AsyncGenerator[TodoRepository, None]:
    async with database.session() as session:
        yield TodoRepository(session)


@pytest.fixture
def todo_service() -> TodoService:
    return TodoService()


@pytest.fixture
def app(settings: Settings, database: Database):
    from todo_app.main import create_app
    return create_app(settings, database)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    # ASGITransport does not run the lifespan; the database fixture is already connected
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
