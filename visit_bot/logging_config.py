import logging
import sys

NOISY_LOGGERS = ("discord", "discord.client", "discord.gateway", "discord.http")


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure the ``visit_bot`` logger once; later calls only adjust the level.

    ``level`` may be a number or a level name such as ``"debug"``.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger = logging.getLogger("visit_bot")
    logger.setLevel(level)
    # discord is chatty at INFO; only show its warnings unless debugging
    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
    return logger
