"""Compile user templates with ``%p`` mention conversions into chat messages."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple

from .printf import RenderError, render
from .text import TextFormatter
from .tokenizer import SpecifierToken, tokenize

logger = logging.getLogger(__name__)

MENTION_TYPE = "p"
PING_SIGIL = "@"


class FormatError(Exception):
    """Raised when a template cannot be turned into a message."""


class LimitExceeded(FormatError):
    """Raised when a width or precision is larger than the truncation limit."""


class RenderFailed(FormatError):
    """Raised when the final printf pass rejects the template or its arguments."""


class NameResolver(Protocol):
    async def get_pingable_name(self, room: Any, candidate: str) -> Optional[str]:
        """Return a name that can follow ``@`` in ``room``, or ``None``."""


@dataclass(frozen=True)
class LimitViolation:
    """A specifier field that goes over the truncation limit."""

    token: SpecifierToken
    field: str
    value: int


def find_limit_violation(
    tokens: Iterable[SpecifierToken], limit: int
) -> Optional[LimitViolation]:
    """Return the first width or precision above ``limit``, if any."""

    for token in tokens:
        if token.width is not None and token.width > limit:
            return LimitViolation(token, "width", token.width)
        if token.precision is not None and token.precision > limit:
            return LimitViolation(token, "precision", token.precision)
    return None


class _TemplateBuffer:
    """Working copy of a template addressable by offsets into the original.

    Splices must be applied left to right; each one records how far it moved
    the text that follows it.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self._shifts: List[Tuple[int, int]] = []

    def locate(self, offset: int) -> int:
        return offset + sum(delta for origin, delta in self._shifts if origin <= offset)

    def splice(self, offset: int, length: int, replacement: str) -> None:
        start = self.locate(offset)
        self.text = self.text[:start] + replacement + self.text[start + length:]
        delta = len(replacement) - length
        if delta:
            self._shifts.append((offset + length, delta))


class MessageComposer:
    """Turns ``[template, *args]`` components into a finished message."""

    def __init__(self, resolver: NameResolver, formatter: Optional[TextFormatter] = None) -> None:
        self._resolver = resolver
        self._formatter = formatter or TextFormatter()

    @property
    def truncation_limit(self) -> int:
        return self._formatter.truncation_limit

    async def compose(self, room: Any, components: Sequence[str]) -> str:
        """Validate, resolve mentions and render ``components``.

        Raises :class:`LimitExceeded` before any lookup happens and
        :class:`RenderFailed` when the printf pass fails. Resolver errors are
        propagated unchanged.
        """

        template = components[0] if components else ""
        args = list(components[1:])
        tokens = tokenize(template)
        self._check_limits(tokens)

        template = await self._resolve_mentions(room, template, args, tokens)
        template = self._strip_literal_pings(template)
        template = self._formatter.interpolate_escape_sequences(template)
        # escape expansion can join text into new specifiers
        self._check_limits(tokenize(template))

        try:
            return render(template, args)
        except RenderError as exc:
            logger.debug("Rendering %r failed: %s", template, exc)
            raise RenderFailed(
                "printf failed, check your format string and arguments"
            ) from exc

    def _check_limits(self, tokens: Iterable[SpecifierToken]) -> None:
        violation = find_limit_violation(tokens, self.truncation_limit)
        if violation is not None:
            raise LimitExceeded(
                f"Only if you say it first: {violation.field} {violation.value} "
                f"is over the limit of {self.truncation_limit}"
            )

    def _strip_literal_pings(self, template: str) -> str:
        """Strip pings from the text between specifiers, leaving specifiers intact."""

        pieces: List[str] = []
        cursor = 0
        for token in tokenize(template):
            pieces.append(self._formatter.strip_pings_from_text(template[cursor:token.offset]))
            pieces.append(template[token.offset:token.end])
            cursor = token.end
        pieces.append(self._formatter.strip_pings_from_text(template[cursor:]))
        return "".join(pieces)

    async def _resolve_mentions(
        self,
        room: Any,
        template: str,
        args: List[str],
        tokens: Sequence[SpecifierToken],
    ) -> str:
        buffer = _TemplateBuffer(template)
        for index, token in enumerate(tokens):
            if token.type_char != MENTION_TYPE:
                continue
            buffer.splice(token.type_offset, 1, "s")
            arg_index = token.position - 1 if token.position is not None else index
            if not 0 <= arg_index < len(args):
                logger.debug("No argument %d for %%p at offset %d", arg_index + 1, token.offset)
                continue
            candidate = args[arg_index]
            if candidate.startswith(PING_SIGIL):
                args[arg_index] = self._formatter.strip_pings_from_text(candidate)
                continue
            name = await self._resolver.get_pingable_name(room, candidate)
            if name is not None:
                args[arg_index] = PING_SIGIL + name
        return buffer.text


__all__ = [
    "FormatError",
    "LimitExceeded",
    "LimitViolation",
    "MessageComposer",
    "NameResolver",
    "RenderFailed",
    "find_limit_violation",
]
