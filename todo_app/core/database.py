# todo_app/core/database.py

from contextlib import AbstractAsyncContextManager
from typing import AsyncIterator, Optional

from fastapi import Request
from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from todo_app.core.exceptions import InternalError


class Base(DeclarativeBase):
    """Declarative base for every table of the service."""


class Database(AbstractAsyncContextManager):
    """Owns the async engine and session factory for one database URL.

    Constructed explicitly and attached to the application; connected on
    startup and disposed on shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def connect(self):
        """Creates the engine and makes sure the schema exists."""
        if self.engine is not None:
            logger.info("Database connection already established.")
            return

        # Table definitions must be registered on Base.metadata before create_all
        import todo_app.modules.todos.models  # noqa: F401

        logger.info(f"Connecting to database (backend={make_url(self.url).get_backend_name()})...")
        engine = create_async_engine(self.url, echo=self.echo)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            await engine.dispose()
            logger.critical(f"FATAL: Failed to initialise database: {e}")
            raise ConnectionError(f"Database initialisation failed: {e}") from e

        self.engine = engine
        self.session_factory = async_sessionmaker(engine, expire_on_commit=False)
        logger.success("Database connection ready.")

    async def disconnect(self):
        if self.engine is None:
            return
        logger.info("Closing database engine...")
        try:
            await self.engine.dispose()
            logger.info("Database engine closed.")
        finally:
            self.engine = None
            self.session_factory = None

    async def ping(self) -> bool:
        if self.engine is None:
            return False
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    def session(self) -> AsyncSession:
        if self.session_factory is None:
            logger.critical("Attempted to open a session, but the database is not connected.")
            raise InternalError("Database is not connected")
        return self.session_factory()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the database attached to the app."""
    return request.app.state.database


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
