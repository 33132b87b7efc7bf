"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ProcessRequest(BaseModel):
    """Request DTO for POST /process."""

    text: str = Field(..., description="The text to improve")
