# todo_app/models/api_common.py

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every non-success response."""

    error: str = Field(..., description="Human readable error message.")


class MessageResponse(BaseModel):
    message: str
