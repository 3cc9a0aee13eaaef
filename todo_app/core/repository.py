# todo_app/core/repository.py

from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.core.database import Base
from todo_app.core.exceptions import InternalError, ValidationError

RecordType = TypeVar("RecordType", bound=Base)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the form stored in the database)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Returns now, or one microsecond past `previous` if the clock has not moved."""
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class BaseRepository(Generic[RecordType]):
    """Base repository for one SQLAlchemy mapped table.

    Subclasses set `model` and `updatable_fields`; the latter is the static
    allowlist of columns `update` may touch.
    """

    model: ClassVar[Type[Base]]
    updatable_fields: ClassVar[frozenset] = frozenset()

    def __init__(self, session: AsyncSession):
        if not hasattr(self, "model"):
            raise AttributeError("Repository subclass must define a mapped 'model'")
        self.session = session
        self.table_name = self.model.__tablename__

    def _handle_db_exception(self, e: Exception, operation: str, record_id: Any = None):
        """Logs a storage failure and raises the matching store error."""
        context = f"op='{operation}' table='{self.table_name}'"
        if record_id is not None:
            context += f" id='{record_id}'"

        if isinstance(e, IntegrityError):
            logger.error(f"DB integrity error during {context}: {e.orig}")
            raise ValidationError("Integrity constraint violated") from e
        logger.opt(exception=e).error(f"DB error during {context}")
        raise InternalError(f"Database error during operation: {operation}") from e

    async def _rollback(self):
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")

    async def get_by_id(self, record_id: str) -> Optional[RecordType]:
        try:
            return await self.session.get(self.model, record_id)
        except SQLAlchemyError as e:
            self._handle_db_exception(e, "get_by_id", record_id)

    async def list_by(
        self,
        conditions: Iterable[Any] = (),
        order_by: Iterable[Any] = (),
    ) -> List[RecordType]:
        stmt = select(self.model).where(*conditions).order_by(*order_by)
        try:
            result = await self.session.scalars(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            self._handle_db_exception(e, "list_by")

    async def create(self, values: Dict[str, Any]) -> RecordType:
        """Inserts one row; timestamps are set here, the id by the column default."""
        data = dict(values)
        data.pop("id", None)
        now = utcnow()
        data.setdefault("created_at", now)
        data.setdefault("updated_at", now)

        record = self.model(**data)
        try:
            self.session.add(record)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            self._handle_db_exception(e, "create")
        logger.debug(f"Record created: ID {record.id}, Table: {self.table_name}")
        return record

    async def update(self, record_id: str, values: Dict[str, Any]) -> Optional[RecordType]:
        """Loads the full row, merges allowlisted fields and writes it back.

        Returns None when the row does not exist.
        """
        unknown = set(values) - self.updatable_fields
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        record = await self.get_by_id(record_id)
        if record is None:
            logger.warning(f"Record not found for update: ID {record_id}, Table: {self.table_name}")
            return None

        for field, value in values.items():
            setattr(record, field, value)
        record.updated_at = next_timestamp(record.updated_at)

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            self._handle_db_exception(e, "update", record_id)
        logger.debug(f"Record updated: ID {record_id}, Fields: {sorted(values)}")
        return record

    async def delete(self, record_id: str) -> bool:
        stmt = delete(self.model).where(self.model.id == record_id)
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            self._handle_db_exception(e, "delete", record_id)
        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Record deleted: ID {record_id}, Table: {self.table_name}")
        else:
            logger.warning(f"Record not found for deletion: ID {record_id}, Table: {self.table_name}")
        return deleted
