"""Log upload endpoints.

``POST /api/{chat_id}/upload`` runs the pipeline described in
``app.pipelines.upload``:

1. Rate limit, IP block list and panic switch (no audit record).
2. Geolocation lookup started in the background.
3. Content negotiation and validation (400s are answered, not audited).
4. Caption synthesis and sanitizing.
5. Relay to Telegram and respond; geolocation is awaited and the audit
   record written in a background task after the response is sent.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, BackgroundTasks, Request, status
from fastapi.responses import JSONResponse

from app.controllers.dependencies import (
    AccessPolicyDep,
    AuditRecorderDep,
    GeolocationDep,
    RateLimiterDep,
    RelayClientDep,
)
from app.models.log import UploadContentType, UploadStatus
from app.pipelines.upload import (
    ALLOWED_EXTENSIONS,
    MAX_FILE_SIZE_BYTES,
    BodyFormat,
    UploadContent,
    UploadValidationError,
    check_access,
    parse_upload,
    prepare_content,
    resolve_caption,
)
from app.services.audit import AuditRecord, AuditRecorder
from app.services.geolocation import GeoLocation
from app.telemetry import observe_upload
from app.utils import get_client_ip
from app.views import ApiResponse, UploadUsageResponse

router = APIRouter(prefix="/api", tags=["upload"])

logger = logging.getLogger(__name__)
upload_logger = logging.getLogger("app.logs.uploads")

_USER_AGENT_MAX_LENGTH = 512


def _respond(
    status_code: int,
    message: str,
    *,
    error: str | None = None,
    content_type: UploadContentType | None = None,
) -> JSONResponse:
    observe_upload(status_code, content_type.value if content_type else None)
    payload = ApiResponse(success=status_code < 400, message=message, error=error)
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(exclude_none=True),
    )


async def _await_location(task: asyncio.Task[GeoLocation], ip: str) -> GeoLocation:
    """Wait for the background lookup; a crashed lookup yields an empty location."""

    try:
        return await task
    except Exception:
        logger.warning("Geolocation task failed for %s", ip, exc_info=True)
        return GeoLocation(ip=ip)


async def _record(
    recorder: AuditRecorder,
    audit: AuditRecord,
    location_task: asyncio.Task[GeoLocation],
) -> None:
    audit.apply_location(await _await_location(location_task, audit.ip))
    await recorder.record(audit)
    upload_logger.info(
        "chat_id=%s | ip=%s | country=%s | type=%s | size=%s | status=%s | error=%s",
        audit.chat_id,
        audit.ip,
        audit.country or "-",
        audit.content_type.value if audit.content_type else "-",
        audit.content_size,
        audit.status.value,
        audit.error_message or "-",
    )


@router.post(
    "/{chat_id}/upload",
    response_model=ApiResponse,
    responses={
        400: {"model": ApiResponse},
        403: {"model": ApiResponse},
        429: {"model": ApiResponse},
        500: {"model": ApiResponse},
        502: {"model": ApiResponse},
        503: {"model": ApiResponse},
    },
)
async def upload_logs(
    chat_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    rate_limiter: RateLimiterDep,
    access_policy: AccessPolicyDep,
    relay_client: RelayClientDep,
    geolocation: GeolocationDep,
    audit_recorder: AuditRecorderDep,
) -> JSONResponse:
    """Validate an uploaded log, relay it to Telegram and audit the attempt."""

    ip = get_client_ip(request.headers, request.client.host if request.client else None)

    rejection = await check_access(ip, rate_limiter, access_policy)
    if rejection is not None:
        logger.info("Upload rejected ip=%s reason=%s", ip, rejection.reason)
        return _respond(rejection.status_code, rejection.message, error=rejection.error)

    user_agent = request.headers.get("user-agent")
    if user_agent:
        user_agent = user_agent[:_USER_AGENT_MAX_LENGTH]

    location_task = asyncio.create_task(geolocation.resolve(ip))
    chat_id = chat_id.strip()
    audit = AuditRecord(
        chat_id=chat_id,
        ip=ip,
        status=UploadStatus.FAILED,
        user_agent=user_agent,
    )

    try:
        if not chat_id:
            raise UploadValidationError(
                "chat_id is required in the URL path", "chat_id is required"
            )

        upload: UploadContent = await parse_upload(request)
        caption = resolve_caption(upload.caption)
        audit.filename = upload.filename
        audit.content_type = upload.kind
        audit.content_size = upload.size
        audit.caption = caption

        if not relay_client.is_configured:
            audit.error_message = "Telegram bot token is not configured"
            logger.error("Rejecting upload chat_id=%s: %s", chat_id, audit.error_message)
            background_tasks.add_task(_record, audit_recorder, audit, location_task)
            return _respond(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Server configuration error",
                error=audit.error_message,
                content_type=upload.kind,
            )

        result = await relay_client.send_logs(
            chat_id,
            prepare_content(upload.content),
            upload.filename,
            caption,
        )

        if not result.ok:
            audit.error_message = result.description or "Telegram API error"
            background_tasks.add_task(_record, audit_recorder, audit, location_task)
            return _respond(
                status.HTTP_502_BAD_GATEWAY,
                "Failed to send logs to Telegram",
                error=result.description or "Unknown Telegram API error",
                content_type=upload.kind,
            )

        audit.status = UploadStatus.SUCCESS
        background_tasks.add_task(_record, audit_recorder, audit, location_task)
        return _respond(
            status.HTTP_200_OK,
            "Logs sent successfully to Telegram",
            content_type=upload.kind,
        )

    except UploadValidationError as exc:
        location_task.cancel()
        logger.info(
            "Invalid upload chat_id=%s ip=%s reason=%s", chat_id, ip, exc.reason
        )
        return _respond(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request",
            error=exc.error,
            content_type=audit.content_type,
        )

    except Exception as exc:
        logger.exception("Upload failed chat_id=%s ip=%s", chat_id, ip)
        audit.status = UploadStatus.FAILED
        audit.error_message = str(exc) or type(exc).__name__
        background_tasks.add_task(_record, audit_recorder, audit, location_task)
        return _respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            error=audit.error_message,
            content_type=audit.content_type,
        )


@router.get("/{chat_id}/upload", response_model=UploadUsageResponse)
async def upload_usage(chat_id: str) -> UploadUsageResponse:
    """Describe how to call the upload endpoint for ``chat_id``."""

    endpoint = f"/api/{chat_id}/upload"
    extensions = ", ".join(sorted(ALLOWED_EXTENSIONS))
    return UploadUsageResponse(
        endpoint=endpoint,
        contentTypes=[body_format.value for body_format in BodyFormat],
        parameters={
            "file": f"Log file ({extensions}) - for multipart/form-data",
            "text": "Log text content - for multipart/form-data or JSON",
            "caption": "Optional caption for the log message",
            "filename": "Optional custom filename (default: logs.txt)",
        },
        limits={
            "maxFileSize": f"{MAX_FILE_SIZE_BYTES // (1024 * 1024)}MB",
            "allowedExtensions": extensions,
        },
        examples={
            "curl_file": f'curl -X POST -F "file=@logs.txt" https://your-domain.com{endpoint}',
            "curl_text": (
                'curl -X POST -H "Content-Type: application/json" '
                f"-d '{{\"text\":\"Your log content here\"}}' https://your-domain.com{endpoint}"
            ),
            "curl_plain": (
                'curl -X POST -H "Content-Type: text/plain" '
                f"-d 'Your log content here' https://your-domain.com{endpoint}"
            ),
        },
    )
