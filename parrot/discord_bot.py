"""Discord bot entry point for parrot."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from .composer import FormatError, MessageComposer
from .config import Settings, SettingsLoader
from .resolver import DiscordNameResolver
from .service import SayService
from .telemetry_decorator import track_command
from .text import TextFormatter

logger = logging.getLogger(__name__)

_PLAIN_MENTIONS = discord.AllowedMentions.none()
_FORMATTED_MENTIONS = discord.AllowedMentions(everyone=False, users=True, roles=False)


def build_service(settings: Settings) -> SayService:
    formatter = TextFormatter(
        truncation_limit=settings.truncation_limit,
        max_message_length=settings.max_message_length,
    )
    resolver = DiscordNameResolver(query_limit=settings.member_query_limit)
    return SayService(MessageComposer(resolver, formatter), formatter)


def build_bot(settings: Settings, intents: Optional[discord.Intents] = None) -> commands.Bot:
    if intents is None:
        intents = discord.Intents.default()
        intents.members = True
    app_id_raw = os.environ.get("DISCORD_APP_ID")
    application_id: Optional[int] = None
    if app_id_raw:
        try:
            application_id = int(app_id_raw)
        except ValueError:
            logger.warning("Invalid DISCORD_APP_ID: %s", app_id_raw)
    bot = commands.Bot(command_prefix="/", intents=intents, application_id=application_id)
    service = build_service(settings)
    formatter = service.formatter
    setattr(bot, "say_service", service)
    descriptions = settings.command_descriptions

    @bot.event
    async def on_ready() -> None:
        logger.info("Parrot bot connected as %s", bot.user)
        try:
            synced = await bot.tree.sync()
            logger.info("Synced %d commands", len(synced))
        except Exception as exc:  # pragma: no cover - logging only
            logger.exception("Failed to sync commands: %s", exc)

    @app_commands.command(name="say", description=descriptions["say"])
    @track_command
    @app_commands.describe(text="What to say")
    async def say(interaction: discord.Interaction, text: str) -> None:
        message = formatter.clamp(service.plain_message(text.split()))
        await interaction.response.send_message("Sent.", ephemeral=True)
        await interaction.channel.send(message, allowed_mentions=_PLAIN_MENTIONS)

    @app_commands.command(name="reply", description=descriptions["reply"])
    @track_command
    @app_commands.describe(text="What to say")
    async def reply(interaction: discord.Interaction, text: str) -> None:
        message = formatter.clamp(service.plain_message(text.split()))
        await interaction.response.send_message(message, allowed_mentions=_PLAIN_MENTIONS)

    @app_commands.command(name="sayf", description=descriptions["sayf"])
    @track_command
    @app_commands.describe(text="Format string and arguments separated by / slashes")
    async def sayf(interaction: discord.Interaction, text: str) -> None:
        await interaction.response.defer(ephemeral=True)
        try:
            message = await service.formatted_message(interaction.channel, text.split())
        except FormatError as exc:
            await interaction.followup.send(str(exc), ephemeral=True)
            return
        await interaction.channel.send(
            formatter.clamp(message), allowed_mentions=_FORMATTED_MENTIONS
        )
        await interaction.followup.send("Sent.", ephemeral=True)

    @app_commands.command(name="replyf", description=descriptions["replyf"])
    @track_command
    @app_commands.describe(text="Format string and arguments separated by / slashes")
    async def replyf(interaction: discord.Interaction, text: str) -> None:
        await interaction.response.defer()
        try:
            message = await service.formatted_message(interaction.channel, text.split())
        except FormatError as exc:
            await interaction.followup.send(str(exc), allowed_mentions=_PLAIN_MENTIONS)
            return
        await interaction.followup.send(
            formatter.clamp(message), allowed_mentions=_FORMATTED_MENTIONS
        )

    bot.tree.add_command(say)
    bot.tree.add_command(reply)
    bot.tree.add_command(sayf)
    bot.tree.add_command(replyf)
    return bot


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    token = os.environ.get("DISCORD_TOKEN")
    if not token:
        raise RuntimeError("DISCORD_TOKEN environment variable must be set")
    settings_path = os.environ.get("PARROT_SETTINGS")
    settings = SettingsLoader(Path(settings_path) if settings_path else None).load()
    bot = build_bot(settings)
    bot.run(token)


__all__ = ["build_bot", "build_service", "main"]
