# todo_app/modules/todos/models.py

import uuid
from datetime import date, datetime, timezone
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Boolean, Date, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from todo_app.core.database import Base

TODO_PRIORITIES = Literal["low", "medium", "high"]
PRIORITY_VALUES = ("low", "medium", "high")

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
CATEGORY_MAX_LENGTH = 50

TABLE_NAME = "todos"


def new_todo_id() -> str:
    return str(uuid.uuid4())


# --- Table ---

class TodoRecord(Base):
    __tablename__ = TABLE_NAME

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_todo_id)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(CATEGORY_MAX_LENGTH), nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_todos_created_at", "created_at"),
        Index("ix_todos_priority", "priority"),
        Index("ix_todos_category", "category"),
        Index("ix_todos_due_date_completed", "due_date", "completed"),
    )

    def __repr__(self) -> str:
        return f"<TodoRecord {self.id} {self.title!r}>"


# --- Internal models ---

class TodoInDB(BaseModel):
    """A persisted todo as the store hands it out."""

    id: str
    title: str
    description: Optional[str] = None
    completed: bool = False
    priority: TODO_PRIORITIES = "medium"
    due_date: Optional[date] = None
    category: Optional[str] = None
    tags: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def mark_utc(cls, v: datetime) -> datetime:
        # Stored naive; always UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class TodoCreateInternal(BaseModel):
    # Presence and emptiness are checked by the service
    title: Optional[str] = None
    description: Optional[str] = None
    completed: bool = False
    priority: TODO_PRIORITIES = "medium"
    due_date: Optional[date] = None
    category: Optional[str] = None
    tags: Optional[str] = None


class TodoUpdateInternal(BaseModel):
    """Partial update. Only fields explicitly set are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[TODO_PRIORITIES] = None
    due_date: Optional[date] = None
    category: Optional[str] = None
    tags: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class TodoFilters(BaseModel):
    """Optional constraints for listing; combined with AND."""

    completed: Optional[bool] = None
    priority: Optional[TODO_PRIORITIES] = None
    category: Optional[str] = None
    search: Optional[str] = None
    due_date: Optional[date] = None


class PriorityBreakdown(BaseModel):
    low: int = 0
    medium: int = 0
    high: int = 0


class TodoStats(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    by_priority: PriorityBreakdown = Field(default_factory=PriorityBreakdown, alias="byPriority")
    by_category: Dict[str, int] = Field(default_factory=dict, alias="byCategory")

    model_config = ConfigDict(populate_by_name=True)
