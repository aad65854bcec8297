"""Common response schemas."""

from typing import Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Envelope shared by every upload outcome and the error handlers."""

    success: bool
    message: str
    error: Optional[str] = None
