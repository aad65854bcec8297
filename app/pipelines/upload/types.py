"""Typed containers shared across the upload pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.models.log import UploadContentType


class BodyFormat(str, Enum):
    """Request body encodings accepted by the upload endpoint."""

    MULTIPART = "multipart/form-data"
    JSON = "application/json"
    PLAIN_TEXT = "text/plain"


class UploadValidationError(Exception):
    """Client input rejected before anything is relayed.

    ``error`` is returned to the caller; ``reason`` is the short form used in
    logs.
    """

    def __init__(self, error: str, reason: str) -> None:
        super().__init__(error)
        self.error = error
        self.reason = reason


@dataclass(frozen=True)
class UploadContent:
    """Validated upload ready for caption handling and relay.

    ``content`` is ``bytes`` for file uploads and unsanitized ``str`` for
    text. ``size`` is the byte length of the content as received.
    """

    content: str | bytes
    filename: str
    kind: UploadContentType
    size: int
    caption: str | None = None


@dataclass(frozen=True)
class GateRejection:
    """Response returned when a request is stopped before parsing."""

    status_code: int
    message: str
    error: str
    reason: str
