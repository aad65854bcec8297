"""Upload pipeline package.

Modules follow the order in which ``POST /api/{chat_id}/upload`` runs:

1. ``gating`` – rate limit, IP block list and panic switch.
2. ``ingestion`` – content negotiation, validation, caption and sanitizing.
3. Relay and audit live in ``app.services`` (``telegram``, ``geolocation``,
   ``audit``) and are wired together by ``app.controllers.upload``.
"""

from .gating import IP_BLOCKED, PANIC_MODE, RATE_LIMITED, check_access
from .ingestion import (
    ALLOWED_EXTENSIONS,
    MAX_FILE_SIZE_BYTES,
    parse_upload,
    prepare_content,
    resolve_caption,
)
from .types import BodyFormat, GateRejection, UploadContent, UploadValidationError

__all__ = [
    "ALLOWED_EXTENSIONS",
    "BodyFormat",
    "GateRejection",
    "IP_BLOCKED",
    "MAX_FILE_SIZE_BYTES",
    "PANIC_MODE",
    "RATE_LIMITED",
    "UploadContent",
    "UploadValidationError",
    "check_access",
    "parse_upload",
    "prepare_content",
    "resolve_caption",
]
