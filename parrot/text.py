"""Chat text helpers shared by the say commands."""
from __future__ import annotations

import re

TRUNCATION_LIMIT = 500
MAX_MESSAGE_LENGTH = 1900

WORD_JOINER = "\u2060"

_PING = re.compile(r"@(?=\w)")
_ESCAPE = re.compile(r"\\([\\nrt])")
_ESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "t": "\t"}


class TextFormatter:
    """Neutralises pings, expands escapes and keeps messages within limits."""

    def __init__(
        self,
        truncation_limit: int = TRUNCATION_LIMIT,
        max_message_length: int = MAX_MESSAGE_LENGTH,
    ) -> None:
        self._truncation_limit = truncation_limit
        self._max_message_length = max_message_length

    @property
    def truncation_limit(self) -> int:
        return self._truncation_limit

    @property
    def max_message_length(self) -> int:
        return self._max_message_length

    @staticmethod
    def strip_pings_from_text(text: str) -> str:
        """Break every ``@name`` so it renders unchanged but does not ping."""

        return _PING.sub("@" + WORD_JOINER, text)

    @staticmethod
    def interpolate_escape_sequences(text: str) -> str:
        return _ESCAPE.sub(lambda match: _ESCAPES[match.group(1)], text)

    def clamp(self, text: str) -> str:
        """Ensure the text fits in a single chat message."""

        if len(text) <= self._max_message_length:
            return text
        return text[: self._max_message_length - 1].rstrip() + "…"


__all__ = ["MAX_MESSAGE_LENGTH", "TRUNCATION_LIMIT", "TextFormatter", "WORD_JOINER"]
