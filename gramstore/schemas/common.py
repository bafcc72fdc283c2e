"""Common schemas used across multiple endpoints."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Response model for errors."""
    detail: str
    code: str


class SuccessResponse(BaseModel):
    """Response model for operations without a payload."""
    success: bool = True
