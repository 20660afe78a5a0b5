"""Resolve free text to guild members that can be mentioned."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import discord

logger = logging.getLogger(__name__)


def _normalise(text: Optional[str]) -> str:
    return "".join((text or "").split()).casefold()


class DiscordNameResolver:
    """Looks up the member a piece of text refers to in a channel's guild.

    The returned username is used as ``@username`` display text. Discord only
    notifies for ``<@id>`` markup, so the resulting message names the member
    without pinging them.
    """

    def __init__(self, query_limit: int = 5) -> None:
        self._query_limit = query_limit

    @staticmethod
    def _match(members: Iterable[discord.Member], needle: str) -> Optional[discord.Member]:
        for member in members:
            names = (member.name, member.display_name, getattr(member, "global_name", None))
            if any(_normalise(name) == needle for name in names):
                return member
        return None

    async def get_pingable_name(self, room: Any, candidate: str) -> Optional[str]:
        guild = getattr(room, "guild", None)
        needle = _normalise(candidate)
        if guild is None or not needle:
            return None

        member = self._match(guild.members, needle)
        if member is None:
            found = await guild.query_members(query=candidate.strip(), limit=self._query_limit)
            member = self._match(found, needle)
        if member is None:
            logger.debug("No member in guild %s matches %r", guild.id, candidate)
            return None
        return member.name


__all__ = ["DiscordNameResolver"]
