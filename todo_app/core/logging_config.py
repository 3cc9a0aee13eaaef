# todo_app/core/logging_config.py

import inspect
import logging
import sys
import time
import uuid

from fastapi import Request
from loguru import logger

from todo_app.core.config import Settings

REQUEST_ID_HEADER = "X-Request-ID"
TRACE_ID_HEADER = "X-Trace-ID"

STDLIB_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
QUIET_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "uvicorn.access")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}Z</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[trace_id]: <16}</magenta> | "
    "<cyan>{name}:{line}</cyan> - "
    "<level>{message}</level>"
)

# Records logged outside a request
logger.configure(extra={"trace_id": "-"})


class InterceptHandler(logging.Handler):
    """Forwards stdlib records (uvicorn, sqlalchemy, aiosqlite) to loguru.

    Request context bound with `logger.contextualize` applies to these
    records as well.
    """

    def emit(self, record: logging.LogRecord):
        level = record.levelname if record.levelname in STDLIB_LEVELS else record.levelno

        # Report the original caller, not the logging module
        frame, depth = inspect.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(settings: Settings):
    """Makes loguru the single sink for the application and its libraries."""
    level = settings.LOG_LEVEL.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        enqueue=True,
        backtrace=True,
        diagnose=level == "DEBUG",
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        if name == "sqlalchemy.engine" and settings.DATABASE_ECHO:
            continue
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging configured (level={level}, sql_echo={settings.DATABASE_ECHO})")


def new_trace_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


async def add_trace_id_middleware(request: Request, call_next):
    """Binds trace id, method and path to every log line of the request.

    The trace id comes from `X-Request-ID` when the caller sends one and is
    echoed back as `X-Trace-ID`.
    """
    trace_id = request.headers.get(REQUEST_ID_HEADER) or new_trace_id()
    started = time.perf_counter()

    with logger.contextualize(trace_id=trace_id, method=request.method, path=request.url.path):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Request crashed after {(time.perf_counter() - started) * 1000:.1f}ms")
            raise

        response.headers[TRACE_ID_HEADER] = trace_id
        elapsed_ms = (time.perf_counter() - started) * 1000
        log = logger.warning if response.status_code >= 500 else logger.info
        log(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.1f}ms")
        return response
