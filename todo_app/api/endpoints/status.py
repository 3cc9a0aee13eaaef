# todo_app/api/endpoints/status.py

import time as process_time
from datetime import datetime, timezone
from typing import Dict, Literal, Optional

from fastapi import APIRouter, Depends, Response, status as http_status
from loguru import logger
from pydantic import BaseModel, Field

from todo_app.core.database import Database, get_database


class ComponentStatus(BaseModel):
    status: Literal["ok", "error", "unavailable"] = "ok"
    message: Optional[str] = None


class HealthCheckResponse(BaseModel):
    overall_status: Literal["ok", "error"] = "ok"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    uptime_seconds: float = Field(..., description="Process uptime in seconds")
    components: Dict[str, ComponentStatus]


PROCESS_START_TIME = process_time.monotonic()

router = APIRouter()


@router.get(
    "/healthcheck",
    response_model=HealthCheckResponse,
    tags=["Status & Health"],
    summary="Application health and database status",
)
async def get_application_health(database: Database = Depends(get_database)):
    log = logger.bind(api_endpoint="/healthcheck GET")
    log.info("Performing application health check...")

    components: Dict[str, ComponentStatus] = {}
    try:
        if await database.ping():
            components["database"] = ComponentStatus(status="ok")
        else:
            components["database"] = ComponentStatus(status="unavailable", message="Database not connected")
    except Exception as e:
        log.error(f"Database check failed: {e}")
        components["database"] = ComponentStatus(status="error", message="Database check failed")

    healthy = components["database"].status == "ok"
    payload = HealthCheckResponse(
        overall_status="ok" if healthy else "error",
        uptime_seconds=process_time.monotonic() - PROCESS_START_TIME,
        components=components,
    )
    return Response(
        content=payload.model_dump_json(exclude_none=True),
        status_code=http_status.HTTP_200_OK if healthy else http_status.HTTP_503_SERVICE_UNAVAILABLE,
        media_type="application/json",
    )
