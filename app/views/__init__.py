"""Pydantic schemas used as views in the MVC architecture."""

from .common import ApiResponse
from .upload import UploadUsageResponse

__all__ = [
    "ApiResponse",
    "UploadUsageResponse",
]
