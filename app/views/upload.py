"""Pydantic schemas for the upload endpoint documentation."""

from typing import Dict, List

from pydantic import BaseModel, Field


class UploadUsageResponse(BaseModel):
    """Static usage information served on ``GET /api/{chat_id}/upload``."""

    endpoint: str
    method: str = "POST"
    description: str = "Upload logs to be sent to Telegram"
    contentTypes: List[str]
    parameters: Dict[str, str]
    limits: Dict[str, str] = Field(default_factory=dict)
    examples: Dict[str, str]
