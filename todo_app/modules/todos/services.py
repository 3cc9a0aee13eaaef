# todo_app/modules/todos/services.py

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from loguru import logger

from todo_app.core.exceptions import NotFoundError, ValidationError
from .models import (
    TodoCreateInternal,
    TodoFilters,
    TodoInDB,
    TodoStats,
    TodoUpdateInternal,
)
from .repository import TodoRepository

TODO_NOT_FOUND = "Todo not found"
OPTIONAL_TEXT_FIELDS = ("description", "category", "tags")
NON_NULLABLE_FIELDS = ("completed", "priority")


def utc_today() -> date:
    """The date used for overdue checks."""
    return datetime.now(timezone.utc).date()


def _clean_optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TodoService:
    async def list_todos(self, filters: TodoFilters, todo_repo: TodoRepository) -> List[TodoInDB]:
        log = logger.bind(service="TodoService", filters=filters.model_dump(exclude_none=True))
        log.debug("Listing todos...")
        records = await todo_repo.list_todos(filters)
        log.info(f"Found {len(records)} todos.")
        return [TodoInDB.model_validate(r) for r in records]

    async def get_todo(self, todo_id: str, todo_repo: TodoRepository) -> TodoInDB:
        record = await todo_repo.get_by_id(todo_id)
        if record is None:
            raise NotFoundError(TODO_NOT_FOUND)
        return TodoInDB.model_validate(record)

    async def create_todo(self, todo_in: TodoCreateInternal, todo_repo: TodoRepository) -> TodoInDB:
        title = (todo_in.title or "").strip()
        if not title:
            raise ValidationError("Title is required")

        values = todo_in.model_dump()
        values["title"] = title
        for field in OPTIONAL_TEXT_FIELDS:
            values[field] = _clean_optional_text(values[field])

        record = await todo_repo.create(values)
        logger.bind(service="TodoService", todo_id=record.id).info("Todo created.")
        return TodoInDB.model_validate(record)

    def _prepare_update(self, update_in: TodoUpdateInternal) -> Dict[str, Any]:
        changes = update_in.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValidationError("Title is required")
            changes["title"] = title
        for field in NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null")
        for field in OPTIONAL_TEXT_FIELDS:
            if field in changes:
                changes[field] = _clean_optional_text(changes[field])
        return changes

    async def update_todo(
        self, todo_id: str, update_in: TodoUpdateInternal, todo_repo: TodoRepository
    ) -> TodoInDB:
        log = logger.bind(service="TodoService", todo_id=todo_id)
        changes = self._prepare_update(update_in)
        record = await todo_repo.update(todo_id, changes)
        if record is None:
            raise NotFoundError(TODO_NOT_FOUND)
        log.info(f"Todo updated: {sorted(changes)}")
        return TodoInDB.model_validate(record)

    async def toggle_completed(self, todo_id: str, completed: bool, todo_repo: TodoRepository) -> TodoInDB:
        return await self.update_todo(todo_id, TodoUpdateInternal(completed=completed), todo_repo)

    async def delete_todo(self, todo_id: str, todo_repo: TodoRepository) -> None:
        if not await todo_repo.delete(todo_id):
            raise NotFoundError(TODO_NOT_FOUND)
        logger.bind(service="TodoService", todo_id=todo_id).info("Todo deleted.")

    async def get_statistics(self, todo_repo: TodoRepository, today: Optional[date] = None) -> TodoStats:
        """Global statistics; list filters never apply here."""
        today = today or utc_today()
        stats = await todo_repo.collect_statistics(today)
        logger.bind(service="TodoService").info(
            f"Statistics computed: total={stats.total} completed={stats.completed} overdue={stats.overdue}"
        )
        return stats


def get_todo_service() -> TodoService:
    return TodoService()
