"""Transport-independent logic behind the say commands."""
from __future__ import annotations

from typing import Any, Iterable, List

from .composer import MessageComposer
from .text import TextFormatter

SEPARATOR = "/"
_ESCAPED_SEPARATOR = "\\/"


def split_components(parameters: Iterable[str]) -> List[str]:
    """Group command words into ``[template, *args]`` on standalone slashes.

    ``\\/`` inside a word is a literal slash. Empty segments are dropped.
    """

    components: List[str] = []
    current = ""
    for parameter in parameters:
        if parameter != SEPARATOR:
            current += parameter.replace(_ESCAPED_SEPARATOR, SEPARATOR) + " "
        elif current:
            components.append(current.strip())
            current = ""
    if current:
        components.append(current.strip())
    return components


class SayService:
    """Builds message bodies for ``say``, ``reply`` and their formatted variants."""

    def __init__(self, composer: MessageComposer, formatter: TextFormatter) -> None:
        self._composer = composer
        self._formatter = formatter

    @property
    def formatter(self) -> TextFormatter:
        return self._formatter

    def plain_message(self, parameters: Iterable[str]) -> str:
        return self._formatter.interpolate_escape_sequences(" ".join(parameters))

    async def formatted_message(self, room: Any, parameters: Iterable[str]) -> str:
        """Compose a formatted message; raises :class:`~parrot.composer.FormatError`."""

        return await self._composer.compose(room, split_components(parameters))


__all__ = ["SEPARATOR", "SayService", "split_components"]
