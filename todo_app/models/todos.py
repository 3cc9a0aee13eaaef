# todo_app/models/todos.py

from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from todo_app.modules.todos.models import (
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TODO_PRIORITIES,
    PriorityBreakdown,
    TodoStats,
)

__all__ = [
    "TodoAPI",
    "TodoCreateAPI",
    "TodoUpdateAPI",
    "PriorityBreakdown",
    "TodoStats",
]

# Length limits apply to the trimmed value
TitleText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=TITLE_MAX_LENGTH)]
DescriptionText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=DESCRIPTION_MAX_LENGTH)]
CategoryText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=CATEGORY_MAX_LENGTH)]
TagsText = Annotated[str, StringConstraints(strip_whitespace=True)]


class TodoAPI(BaseModel):
    """Todo as returned by the API."""

    id: str
    title: str
    description: Optional[str] = None
    completed: bool
    priority: TODO_PRIORITIES
    due_date: Optional[date] = None
    category: Optional[str] = None
    tags: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TodoCreateAPI(BaseModel):
    """Payload to create a todo."""

    title: Optional[TitleText] = None
    description: Optional[DescriptionText] = None
    priority: TODO_PRIORITIES = "medium"
    due_date: Optional[date] = Field(None, description="Due date (YYYY-MM-DD).")
    category: Optional[CategoryText] = None
    tags: Optional[TagsText] = Field(None, description="Comma separated tags.")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "title": "Buy milk",
            "description": "Semi-skimmed, two litres",
            "priority": "low",
            "due_date": "2025-05-15",
            "category": "Shopping",
            "tags": "errand,home",
        }
    })


class TodoUpdateAPI(BaseModel):
    """Partial update; only the fields sent are changed."""

    title: Optional[TitleText] = None
    description: Optional[DescriptionText] = None
    completed: Optional[bool] = None
    priority: Optional[TODO_PRIORITIES] = None
    due_date: Optional[date] = None
    category: Optional[CategoryText] = None
    tags: Optional[TagsText] = None


