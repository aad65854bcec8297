"""Request ingestion: content negotiation and validation (stage 2).

The declared ``Content-Type`` selects exactly one parser; bodies are never
sniffed. Each parser owns its validation rules and returns an
``UploadContent`` or raises ``UploadValidationError``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Final

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from app.models.log import UploadContentType
from app.services.sanitizer import sanitize_content
from app.services.telegram import DEFAULT_FILENAME

from .types import BodyFormat, UploadContent, UploadValidationError

MAX_FILE_SIZE_BYTES: Final[int] = 18 * 1024 * 1024
ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset({".log", ".txt", ".zip"})


def resolve_body_format(content_type_header: str | None) -> BodyFormat:
    """Map the ``Content-Type`` header onto a supported body format."""

    media_type = (content_type_header or "").split(";", 1)[0].strip().lower()
    try:
        return BodyFormat(media_type)
    except ValueError:
        raise UploadValidationError(
            "Content-Type must be multipart/form-data, application/json, or text/plain",
            "Invalid content type",
        ) from None


def file_extension(filename: str) -> str:
    """Return the lower-cased suffix from the last dot, or ``""`` without one."""

    _, dot, suffix = filename.rpartition(".")
    if not dot:
        return ""
    return f".{suffix.lower()}"


def validate_file(filename: str, size: int) -> None:
    """Enforce the size ceiling and the extension allow-list for file uploads."""

    if size > MAX_FILE_SIZE_BYTES:
        raise UploadValidationError("File size exceeds 18MB limit", "File too large")

    if file_extension(filename) not in ALLOWED_EXTENSIONS:
        raise UploadValidationError(
            "Only .log, .txt, and .zip files are allowed",
            "Unsupported file type",
        )


def _optional_text(value: Any) -> str | None:
    """Keep non-empty strings only; form files and other JSON types are dropped."""

    if isinstance(value, str) and value:
        return value
    return None


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


async def _read_upload(upload: UploadFile) -> tuple[bytes | None, int]:
    """Return ``(data, size)`` without reading files already known to be too big."""

    size = upload.size
    if size is not None and size > MAX_FILE_SIZE_BYTES:
        await upload.close()
        return None, size

    data = await upload.read()
    await upload.close()
    return data, len(data)


async def parse_multipart(request: Request) -> UploadContent:
    """``file`` wins over ``text``; ``filename`` overrides the uploaded name.

    Text fields may be as large as a file upload; the parser's own 400s for
    broken bodies surface as validation errors.
    """

    try:
        form = await request.form(max_part_size=MAX_FILE_SIZE_BYTES)
    except HTTPException as exc:
        raise UploadValidationError(
            str(exc.detail), "Malformed multipart body"
        ) from None
    except MultiPartException as exc:
        raise UploadValidationError(exc.message, "Malformed multipart body") from None

    upload = form.get("file")
    text = _optional_text(form.get("text"))
    caption = _optional_text(form.get("caption"))
    custom_filename = _optional_text(form.get("filename"))

    if isinstance(upload, UploadFile):
        data, size = await _read_upload(upload)
        if size > 0:
            filename = custom_filename or upload.filename or DEFAULT_FILENAME
            validate_file(filename, size)
            return UploadContent(
                content=data or b"",
                filename=filename,
                kind=UploadContentType.FILE,
                size=size,
                caption=caption,
            )

    if text and text.strip():
        return UploadContent(
            content=text,
            filename=custom_filename or DEFAULT_FILENAME,
            kind=UploadContentType.TEXT,
            size=_byte_length(text),
            caption=caption,
        )

    raise UploadValidationError(
        "Either 'file' or 'text' must be provided in the form data",
        "No content provided",
    )


async def parse_json(request: Request) -> UploadContent:
    """Expect ``{"text": ..., "caption"?: ..., "filename"?: ...}``."""

    try:
        body = await request.json()
    except ValueError:
        raise UploadValidationError(
            "Request body must be valid JSON", "Malformed JSON body"
        ) from None

    if not isinstance(body, dict):
        raise UploadValidationError(
            "JSON body must be an object", "Malformed JSON body"
        )

    text = body.get("text")
    if not isinstance(text, str) or not text.strip():
        raise UploadValidationError(
            "'text' field is required in JSON body", "No text provided"
        )

    return UploadContent(
        content=text,
        filename=_optional_text(body.get("filename")) or DEFAULT_FILENAME,
        kind=UploadContentType.TEXT,
        size=_byte_length(text),
        caption=_optional_text(body.get("caption")),
    )


async def parse_plain_text(request: Request) -> UploadContent:
    """Treat the whole body as UTF-8 log text."""

    raw = await request.body()
    text = raw.decode("utf-8", errors="replace")
    if not text.strip():
        raise UploadValidationError("Request body cannot be empty", "Empty request body")

    return UploadContent(
        content=text,
        filename=DEFAULT_FILENAME,
        kind=UploadContentType.TEXT,
        size=len(raw),
    )


_PARSERS: Final[dict[BodyFormat, Callable[[Request], Awaitable[UploadContent]]]] = {
    BodyFormat.MULTIPART: parse_multipart,
    BodyFormat.JSON: parse_json,
    BodyFormat.PLAIN_TEXT: parse_plain_text,
}


async def parse_upload(request: Request) -> UploadContent:
    """Resolve the body format once and delegate to its parser."""

    body_format = resolve_body_format(request.headers.get("content-type"))
    return await _PARSERS[body_format](request)


def default_caption(now: datetime | None = None) -> str:
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    timestamp = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"Log received at {timestamp}"


def resolve_caption(caption: str | None, now: datetime | None = None) -> str:
    """Synthesize a caption when none was given, then sanitize it."""

    return sanitize_content(caption or default_caption(now)) or ""


def prepare_content(content: str | bytes) -> str | bytes:
    """Sanitize text content; file bytes are forwarded untouched."""

    if isinstance(content, str):
        return sanitize_content(content) or ""
    return content


__all__ = [
    "ALLOWED_EXTENSIONS",
    "MAX_FILE_SIZE_BYTES",
    "default_caption",
    "file_extension",
    "parse_json",
    "parse_multipart",
    "parse_plain_text",
    "parse_upload",
    "prepare_content",
    "resolve_body_format",
    "resolve_caption",
    "validate_file",
]
