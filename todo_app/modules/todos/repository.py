# todo_app/modules/todos/repository.py

from datetime import date
from typing import Any, List

from fastapi import Depends
from loguru import logger
from sqlalchemy import and_, case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.core.database import get_session
from todo_app.core.repository import BaseRepository
from .models import PRIORITY_VALUES, TodoFilters, TodoRecord, TodoStats


def build_filter_conditions(filters: TodoFilters) -> List[Any]:
    """Translates the supplied filters into WHERE clauses (AND-combined).

    Every value is bound as a parameter; nothing is spliced into SQL text.
    """
    conditions: List[Any] = []
    if filters.completed is not None:
        conditions.append(TodoRecord.completed.is_(filters.completed))
    if filters.priority:
        conditions.append(TodoRecord.priority == filters.priority)
    if filters.category:
        conditions.append(TodoRecord.category == filters.category)
    if filters.search:
        # Case-insensitive; '%' and '_' in the term match literally
        conditions.append(
            TodoRecord.title.icontains(filters.search, autoescape=True)
            | TodoRecord.description.icontains(filters.search, autoescape=True)
        )
    if filters.due_date is not None:
        conditions.append(TodoRecord.due_date == filters.due_date)
    return conditions


def overdue_condition(today: date):
    return and_(
        TodoRecord.due_date.is_not(None),
        TodoRecord.due_date < today,
        TodoRecord.completed.is_(False),
    )


class TodoRepository(BaseRepository[TodoRecord]):
    model = TodoRecord
    updatable_fields = frozenset(
        {"title", "description", "completed", "priority", "due_date", "category", "tags"}
    )

    async def list_todos(self, filters: TodoFilters) -> List[TodoRecord]:
        """Lists todos matching the filters, newest first."""
        return await self.list_by(
            conditions=build_filter_conditions(filters),
            order_by=(TodoRecord.created_at.desc(), TodoRecord.id.desc()),
        )

    async def collect_statistics(self, today: date) -> TodoStats:
        """Computes the global summary from one grouped query.

        Grouping by every dimension at once keeps all figures on the same
        snapshot; totals are folded from the groups.
        """
        overdue_flag = case((overdue_condition(today), 1), else_=0)
        stmt = select(
            TodoRecord.priority,
            TodoRecord.category,
            TodoRecord.completed,
            overdue_flag.label("overdue"),
            func.count().label("n"),
        ).group_by(
            TodoRecord.priority,
            TodoRecord.category,
            TodoRecord.completed,
            overdue_flag,
        )
        try:
            rows = (await self.session.execute(stmt)).all()
        except SQLAlchemyError as e:
            self._handle_db_exception(e, "collect_statistics")

        stats = TodoStats()
        for priority, category, completed, overdue, n in rows:
            stats.total += n
            if completed:
                stats.completed += n
            if overdue:
                stats.overdue += n
            if priority in PRIORITY_VALUES:
                setattr(stats.by_priority, priority, getattr(stats.by_priority, priority) + n)
            if category is not None:
                stats.by_category[category] = stats.by_category.get(category, 0) + n
        stats.pending = stats.total - stats.completed

        logger.debug(f"Statistics over {len(rows)} groups: total={stats.total} overdue={stats.overdue}")
        return stats


async def get_todo_repository(session: AsyncSession = Depends(get_session)) -> TodoRepository:
    """FastAPI dependency to get a TodoRepository bound to the request session."""
    return TodoRepository(session)
