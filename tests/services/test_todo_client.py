# tests/services/test_todo_client.py
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport

from todo_app.models.todos import TodoCreateAPI, TodoUpdateAPI
from todo_app.services.todo_client import TodoClient, TodoClientError

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def todo_client(app):
    async with TodoClient("http://testserver/api", transport=ASGITransport(app=app)) as client:
        yield client


async def test_client_round_trip(todo_client: TodoClient):
    created = await todo_client.create_todo(
        TodoCreateAPI(title="Buy milk", priority="low", category="Shopping", due_date=date(2030, 1, 5))
    )
    assert created.completed is False
    assert created.due_date == date(2030, 1, 5)

    fetched = await todo_client.get_todo(created.id)
    assert fetched == created

    toggled = await todo_client.toggle_todo(created.id, True)
    assert toggled.completed is True
    assert toggled.title == "Buy milk"

    stats = await todo_client.get_stats()
    assert stats.total == 1
    assert stats.completed == 1
    assert stats.by_priority.low == 1
    assert stats.by_category == {"Shopping": 1}


async def test_client_list_skips_empty_filters(todo_client: TodoClient):
    await todo_client.create_todo(TodoCreateAPI(title="Alpha", priority="high"))
    await todo_client.create_todo(TodoCreateAPI(title="Beta"))

    everything = await todo_client.list_todos(search="", category=None)
    assert [t.title for t in everything] == ["Beta", "Alpha"]

    high = await todo_client.list_todos(priority="high", completed=False)
    assert [t.title for t in high] == ["Alpha"]


async def test_client_update_sends_only_set_fields(todo_client: TodoClient):
    created = await todo_client.create_todo(TodoCreateAPI(title="Gym", tags="health"))
    updated = await todo_client.update_todo(created.id, TodoUpdateAPI(description="Leg day"))
    assert updated.description == "Leg day"
    assert updated.tags == "health"


async def test_client_surfaces_errors(todo_client: TodoClient):
    with pytest.raises(TodoClientError) as exc_info:
        await todo_client.get_todo("missing")
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Todo not found"

    with pytest.raises(TodoClientError) as exc_info:
        await todo_client.create_todo(TodoCreateAPI(title="  "))
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Title is required"

    created = await todo_client.create_todo(TodoCreateAPI(title="Once"))
    await todo_client.delete_todo(created.id)
    with pytest.raises(TodoClientError) as exc_info:
        await todo_client.delete_todo(created.id)
    assert exc_info.value.status_code == 404
