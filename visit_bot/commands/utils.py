from __future__ import annotations

import discord

BOARD_CHANNEL = "visit-board"
NO_PROFILE = "You don't have a profile yet. Use `/register` first."


async def ensure_board_channel(guild: discord.Guild) -> discord.TextChannel:
    """
    Ensure the announcement channel exists in ``guild`` and return it.
    """

    board = discord.utils.get(guild.text_channels, name=BOARD_CHANNEL)
    if board is None:
        board = await guild.create_text_channel(BOARD_CHANNEL)
    return board


async def announce_in_town(guild: discord.Guild, name: str) -> None:
    board = await ensure_board_channel(guild)
    await board.send(f"📍 {name} is in town! Use `/suggest` to plan something.")
