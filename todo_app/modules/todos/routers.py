# todo_app/modules/todos/routers.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from loguru import logger

from todo_app.core.exceptions import InternalError, TodoAppError
from todo_app.models.api_common import ErrorResponse, MessageResponse
from todo_app.models.todos import TodoAPI, TodoCreateAPI, TodoStats, TodoUpdateAPI
from .models import TODO_PRIORITIES, TodoCreateInternal, TodoFilters, TodoUpdateInternal
from .repository import TodoRepository, get_todo_repository
from .services import TodoService, get_todo_service

todos_router = APIRouter()

NOT_FOUND_RESPONSE = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}
BAD_REQUEST_RESPONSE = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}


@todos_router.get(
    "/stats/overview",
    response_model=TodoStats,
    summary="Global todo statistics",
    tags=["Todos"],
)
async def get_todo_stats(
    todo_service: TodoService = Depends(get_todo_service),
    todo_repo: TodoRepository = Depends(get_todo_repository),
):
    """Totals, completion, overdue and per priority/category counts over every todo."""
    try:
        return await todo_service.get_statistics(todo_repo)
    except TodoAppError:
        raise
    except Exception as e:
        logger.exception("Unexpected error computing statistics.")
        raise InternalError("Failed to get statistics") from e


@todos_router.get(
    "",
    response_model=List[TodoAPI],
    summary="List todos",
    tags=["Todos"],
)
async def list_todos(
    completed: Optional[bool] = Query(None, description="Filter by completion state"),
    priority: Optional[TODO_PRIORITIES] = Query(None, description="Filter by priority"),
    category: Optional[str] = Query(None, description="Filter by exact category"),
    search: Optional[str] = Query(None, description="Case-insensitive text in title or description"),
    due_date: Optional[date] = Query(None, description="Filter by exact due date (YYYY-MM-DD)"),
    todo_service: TodoService = Depends(get_todo_service),
    todo_repo: TodoRepository = Depends(get_todo_repository),
):
    """Lists todos matching every supplied filter, newest first."""
    filters = TodoFilters(
        completed=completed,
        priority=priority,
        category=category or None,
        search=search or None,
        due_date=due_date,
    )
    try:
        todos = await todo_service.list_todos(filters, todo_repo)
    except TodoAppError:
        raise
    except Exception as e:
        logger.exception("Unexpected error listing todos.")
        raise InternalError("Failed to fetch todos") from e
    return [TodoAPI.model_validate(t) for t in todos]


@todos_router.get(
    "/{todo_id}",
    response_model=TodoAPI,
    responses=NOT_FOUND_RESPONSE,
    summary="Get a todo by ID",
    tags=["Todos"],
)
async def get_todo(
    todo_id: str = Path(..., description="Todo ID"),
    todo_service: TodoService = Depends(get_todo_service),
    todo_repo: TodoRepository = Depends(get_todo_repository),
):
    todo = await todo_service.get_todo(todo_id, todo_repo)
    return TodoAPI.model_validate(todo)


@todos_router.post(
    "",
    response_model=TodoAPI,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST_RESPONSE,
    summary="Create a todo",
    tags=["Todos"],
)
async def create_todo(
    todo_in: TodoCreateAPI,
    todo_service: TodoService = Depends(get_todo_service),
    todo_repo: TodoRepository = Depends(get_todo_repository),
):
    log = logger.bind(endpoint="POST /todos")
    try:
        created = await todo_service.create_todo(TodoCreateInternal(**todo_in.model_dump()), todo_repo)
    except TodoAppError:
        raise
    except Exception as e:
        log.exception("Unexpected error creating todo.")
        raise InternalError("Failed to create todo") from e
    return TodoAPI.model_validate(created)


@todos_router.put(
    "/{todo_id}",
    response_model=TodoAPI,
    responses={**NOT_FOUND_RESPONSE, **BAD_REQUEST_RESPONSE},
    summary="Partially update a todo",
    tags=["Todos"],
)
async def update_todo(
    payload: TodoUpdateAPI,
    todo_id: str = Path(..., description="Todo ID"),
    todo_service: TodoService = Depends(get_todo_service),
    todo_repo: TodoRepository = Depends(get_todo_repository),
):
    """Changes only the fields present in the body."""
    log = logger.bind(endpoint="PUT /todos/{id}", todo_id=todo_id)
    update_in = TodoUpdateInternal(**payload.model_dump(exclude_unset=True))
    try:
        updated = await todo_service.update_todo(todo_id, update_in, todo_repo)
    except TodoAppError:
        raise
    except Exception as e:
        log.exception("Unexpected error updating todo.")
        raise InternalError("Failed to update todo") from e
    return TodoAPI.model_validate(updated)


@todos_router.delete(
    "/{todo_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND_RESPONSE,
    summary="Delete a todo",
    tags=["Todos"],
)
async def delete_todo(
    todo_id: str = Path(..., description="Todo ID"),
    todo_service: TodoService = Depends(get_todo_service),
    todo_repo: TodoRepository = Depends(get_todo_repository),
):
    try:
        await todo_service.delete_todo(todo_id, todo_repo)
    except TodoAppError:
        raise
    except Exception as e:
        logger.bind(todo_id=todo_id).exception("Unexpected error deleting todo.")
        raise InternalError("Failed to delete todo") from e
    return MessageResponse(message="Todo deleted successfully")
