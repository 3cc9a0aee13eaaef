# tests/modules/todos/test_todo_repository.py
from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.core.exceptions import InternalError, ValidationError
from todo_app.modules.todos.models import TodoCreateInternal, TodoFilters

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def seeded(todo_service, todo_repo):
    drafts = [
        TodoCreateInternal(title="Buy milk", priority="low", category="Shopping", due_date=date(2030, 1, 1)),
        TodoCreateInternal(title="Fix bike", description="Rear brake FOOBAR", priority="high", category="Home"),
        TodoCreateInternal(title="Food order", priority="high", category="Shopping", due_date=date(2030, 1, 1)),
        TodoCreateInternal(title="Read book", description="100% done soon", priority="medium"),
    ]
    todos = [await todo_service.create_todo(s, todo_repo) for s in drafts]
    await todo_service.toggle_completed(todos[2].id, True, todo_repo)
    return todos


def titles(todos):
    return [t.title for t in todos]


async def test_no_filters_lists_everything_newest_first(seeded, todo_repo):
    records = await todo_repo.list_todos(TodoFilters())
    assert titles(records) == ["Read book", "Food order", "Fix bike", "Buy milk"]


async def test_priority_filter_is_subset_of_full_list(seeded, todo_repo):
    everything = {r.id for r in await todo_repo.list_todos(TodoFilters())}
    high = await todo_repo.list_todos(TodoFilters(priority="high"))
    assert high
    assert all(r.priority == "high" for r in high)
    assert {r.id for r in high} <= everything


async def test_completed_filter(seeded, todo_repo):
    done = await todo_repo.list_todos(TodoFilters(completed=True))
    pending = await todo_repo.list_todos(TodoFilters(completed=False))
    assert titles(done) == ["Food order"]
    assert len(pending) == 3


async def test_filters_combine_with_and(seeded, todo_repo):
    records = await todo_repo.list_todos(
        TodoFilters(category="Shopping", due_date=date(2030, 1, 1), completed=False)
    )
    assert titles(records) == ["Buy milk"]


async def test_category_filter_is_exact(seeded, todo_repo):
    assert await todo_repo.list_todos(TodoFilters(category="shopping")) == []


async def test_search_matches_title_or_description_case_insensitively(seeded, todo_repo):
    records = await todo_repo.list_todos(TodoFilters(search="foo"))
    # "Food order" by title, "Fix bike" by description (upper case in storage)
    assert titles(records) == ["Food order", "Fix bike"]
    upper = await todo_repo.list_todos(TodoFilters(search="FOO"))
    assert titles(upper) == titles(records)


async def test_search_treats_wildcards_literally(seeded, todo_repo):
    assert titles(await todo_repo.list_todos(TodoFilters(search="100%"))) == ["Read book"]
    assert await todo_repo.list_todos(TodoFilters(search="%")) != []
    assert await todo_repo.list_todos(TodoFilters(search="_")) == []


async def test_search_and_priority_combine(seeded, todo_repo):
    records = await todo_repo.list_todos(TodoFilters(search="foo", priority="high", completed=False))
    assert titles(records) == ["Fix bike"]


def raising(exc: Exception):
    async def _raise(self, *args, **kwargs):
        raise exc
    return _raise


async def test_storage_failure_raises_internal_error(todo_repo, monkeypatch):
    failure = OperationalError("SELECT", {}, Exception("database is locked"))
    monkeypatch.setattr(AsyncSession, "execute", raising(failure))
    monkeypatch.setattr(AsyncSession, "scalars", raising(failure))

    with pytest.raises(InternalError) as exc_info:
        await todo_repo.list_todos(TodoFilters())
    assert exc_info.value.__cause__ is failure

    with pytest.raises(InternalError):
        await todo_repo.collect_statistics(date(2030, 1, 1))


async def test_failed_commit_rolls_back(todo_repo, monkeypatch):
    rollbacks = []
    real_rollback = AsyncSession.rollback

    async def tracking_rollback(self):
        rollbacks.append(self)
        await real_rollback(self)

    with monkeypatch.context() as patched:
        patched.setattr(AsyncSession, "commit", raising(OperationalError("INSERT", {}, Exception("disk full"))))
        patched.setattr(AsyncSession, "rollback", tracking_rollback)
        with pytest.raises(InternalError):
            await todo_repo.create({"title": "Lost"})

    assert rollbacks == [todo_repo.session]
    assert await todo_repo.list_todos(TodoFilters()) == []


async def test_integrity_violation_raises_validation_error(todo_repo, monkeypatch):
    violation = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: todos.id"))
    monkeypatch.setattr(AsyncSession, "commit", raising(violation))

    with pytest.raises(ValidationError) as exc_info:
        await todo_repo.create({"title": "Duplicate"})
    assert exc_info.value.status_code == 400
