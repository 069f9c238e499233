"""Discord bot implementation for the visit board."""

from __future__ import annotations

import logging
from typing import Any

import discord
from discord.ext import commands

from .commands.utils import ensure_board_channel


class VisitBot(commands.Bot):
    """Small ``discord.py`` based bot serving the visit board commands."""

    def __init__(self, **kwargs: Any) -> None:  # pragma: no cover - trivial
        """Initialize the bot with the minimal intents required."""
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        # Only slash commands and components are used.
        intents.message_content = False
        super().__init__(
            command_prefix=kwargs.pop("command_prefix", "!"),
            intents=intents,
        )
        self.log = logging.getLogger("visit_bot.bot")

    async def setup_hook(self) -> None:
        """Sync slash commands so newly added ones show up for users."""
        tree = getattr(self, "tree", None)
        if tree is not None:  # pragma: no cover - exercised in integration
            await tree.sync()
        await super().setup_hook()

    async def on_guild_join(self, guild: discord.Guild) -> None:
        try:
            await ensure_board_channel(guild)
        except discord.HTTPException:
            self.log.exception(
                "Failed to create the visit board channel for guild %s",
                getattr(guild, "id", "?"),
            )

    async def on_ready(self) -> None:  # pragma: no cover - requires discord
        """Log a short confirmation once the bot connected successfully."""
        await self.change_presence(activity=discord.Game(name="Who's in town?"))
        self.log.info(
            "Logged in as %s (%s)",
            self.user,
            self.user.id if self.user else "?",
        )


__all__ = ["VisitBot"]
