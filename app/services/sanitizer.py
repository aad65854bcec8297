"""Strip links and @mentions from user supplied log text."""

from __future__ import annotations

import re
from typing import Final

LINK_PLACEHOLDER: Final[str] = "[LINK REMOVED]"
MENTION_PLACEHOLDER: Final[str] = "[MENTION REMOVED]"

# Scheme URLs, www hosts, Telegram invite links and bare domains on common
# TLDs. Bare domains must be followed by whitespace, a slash or end of text so
# file names such as ``server.log`` survive.
_URL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(https?://\S+)"
    r"|(www\.\S+)"
    r"|((?:t|telegram)\.me/\S+)"
    r"|([a-zA-Z0-9-]+\.(?:com|org|net|io|me|xyz|biz|info)(?=\s|\Z|/))",
    re.IGNORECASE,
)

_MENTION_PATTERN: Final[re.Pattern[str]] = re.compile(r"@\w{3,}", re.ASCII)


def sanitize_content(text: str | None) -> str | None:
    """Replace URLs and mentions with fixed placeholders.

    Every other character is kept in place. The transform is idempotent:
    neither placeholder matches either pattern.
    """

    if not text:
        return text

    sanitized = _URL_PATTERN.sub(LINK_PLACEHOLDER, text)
    return _MENTION_PATTERN.sub(MENTION_PLACEHOLDER, sanitized)


__all__ = ["sanitize_content", "LINK_PLACEHOLDER", "MENTION_PLACEHOLDER"]
