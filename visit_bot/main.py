from __future__ import annotations

import asyncio

from .bot import VisitBot
from .commands.register import register_commands
from .config import Settings, load_settings
from .core.storage import JSONStorage
from .data.store import VisitStore
from .logging_config import setup_logging


def build_store(settings: Settings) -> VisitStore:
    """Load the persisted collections for the configured variant."""
    return VisitStore(JSONStorage(settings.data_path), variant=settings.variant)


async def run_bot(settings: Settings, store: VisitStore) -> None:
    bot = VisitBot()
    register_commands(bot, store)
    async with bot:
        await bot.start(settings.token)


def main() -> int:
    settings = load_settings()
    log = setup_logging(settings.log_level)
    if not settings.token:
        log.error(
            "DISCORD_BOT_TOKEN is not set. "
            "Export it in your environment before running."
        )
        return 2
    store = build_store(settings)
    log.info(
        "Loaded %d users, %d visits and %d suggestions from %s (%s variant)",
        len(store.users),
        len(store.visits),
        len(store.suggestions),
        settings.data_path,
        settings.variant,
    )
    try:
        asyncio.run(run_bot(settings, store))
    except KeyboardInterrupt:
        log.info("Shutting down...")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
