"""Telegram Bot API client used to relay uploaded logs."""

from __future__ import annotations

import html
import logging
import time
from dataclasses import dataclass
from typing import Any, Final

import httpx
from pydantic import SecretStr

from app.config.settings import settings
from app.telemetry import observe_relay

logger = logging.getLogger(__name__)

# Telegram rejects messages above 4096 characters; leave room for markup.
MAX_MESSAGE_LENGTH: Final[int] = 4000
DEFAULT_FILENAME: Final[str] = "logs.txt"


class TelegramRelayError(RuntimeError):
    """Raised when the relay client is used without a bot token."""


@dataclass(frozen=True)
class TelegramResponse:
    """Subset of the Bot API response envelope the pipeline relies on."""

    ok: bool
    description: str | None = None
    error_code: int | None = None
    result: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TelegramResponse":
        if not isinstance(payload, dict):
            return cls(ok=False, description="Unexpected response from Telegram API")
        return cls(
            ok=payload.get("ok") is True,
            description=payload.get("description"),
            error_code=payload.get("error_code"),
            result=payload.get("result"),
        )


def escape_html(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` for Telegram's HTML parse mode."""

    return html.escape(text, quote=False)


def format_log_message(content: str, caption: str | None = None) -> str:
    """Render log text as a ``<pre>`` block with an optional bold caption."""

    body = f"<pre>{escape_html(content)}</pre>"
    if caption:
        return f"<b>{escape_html(caption)}</b>\n\n{body}"
    return body


class TelegramRelayClient:
    """Send logs either inline or as a document depending on their size."""

    def __init__(
        self,
        *,
        bot_token: SecretStr | str | None = None,
        api_base: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config = settings.telegram
        token = bot_token if bot_token is not None else config.bot_token
        if isinstance(token, SecretStr):
            token = token.get_secret_value()
        self._token = (token or "").strip()
        self._api_base = (api_base or config.api_base).rstrip("/")
        self._timeout = timeout_seconds or config.timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    async def send_logs(
        self,
        chat_id: str,
        content: str | bytes,
        filename: str = DEFAULT_FILENAME,
        caption: str | None = None,
    ) -> TelegramResponse:
        """Relay ``content`` to ``chat_id``.

        Text of at most ``MAX_MESSAGE_LENGTH`` characters goes out as a
        formatted message. Longer text and raw bytes are sent as a document.
        """

        if isinstance(content, str):
            if len(content) <= MAX_MESSAGE_LENGTH:
                return await self.send_message(
                    chat_id, format_log_message(content, caption)
                )
            content = content.encode("utf-8")

        return await self.send_document(chat_id, content, filename, caption)

    async def send_message(
        self,
        chat_id: str,
        text: str,
        parse_mode: str = "HTML",
    ) -> TelegramResponse:
        return await self._call(
            "sendMessage",
            json={"chat_id": chat_id, "text": text, "parse_mode": parse_mode},
        )

    async def send_document(
        self,
        chat_id: str,
        document: bytes,
        filename: str = DEFAULT_FILENAME,
        caption: str | None = None,
    ) -> TelegramResponse:
        data = {"chat_id": chat_id}
        if caption:
            data["caption"] = caption
        return await self._call(
            "sendDocument",
            data=data,
            files={"document": (filename, document, "application/octet-stream")},
        )

    async def _call(self, method: str, **request_kwargs: Any) -> TelegramResponse:
        """POST to a Bot API method and normalise every failure into ``ok=False``."""

        if not self.is_configured:
            raise TelegramRelayError("Telegram bot token is not configured")

        url = f"{self._api_base}/bot{self._token}/{method}"
        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(url, **request_kwargs)
        except httpx.HTTPError as exc:
            # The exception text may embed the request URL and with it the token.
            logger.warning("Telegram %s request failed: %s", method, type(exc).__name__)
            observe_relay(method, "error", time.perf_counter() - start_time)
            return TelegramResponse(
                ok=False,
                description=f"Telegram API request failed: {type(exc).__name__}",
            )

        try:
            result = TelegramResponse.from_payload(response.json())
        except ValueError:
            result = TelegramResponse(
                ok=False,
                description=f"Telegram API returned HTTP {response.status_code}",
                error_code=response.status_code,
            )

        if result.ok and response.is_error:
            result = TelegramResponse(
                ok=False,
                description=f"Telegram API returned HTTP {response.status_code}",
                error_code=response.status_code,
            )

        outcome = "ok" if result.ok else "rejected"
        observe_relay(method, outcome, time.perf_counter() - start_time)
        if not result.ok:
            logger.warning(
                "Telegram %s rejected: status=%s code=%s description=%s",
                method,
                response.status_code,
                result.error_code,
                result.description,
            )
        return result


__all__ = [
    "DEFAULT_FILENAME",
    "MAX_MESSAGE_LENGTH",
    "TelegramRelayClient",
    "TelegramRelayError",
    "TelegramResponse",
    "escape_html",
    "format_log_message",
]
