"""Shared response schemas."""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Acknowledgement for operations without a resource body (e.g. delete)."""

    success: bool = Field(default=True)
    message: str
