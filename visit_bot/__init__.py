"""Core package for the visit board.

This module exposes the domain models, the storage layer and the state
store so that consumers of the package can simply import them from
``visit_bot``. The Discord front end lives in :mod:`visit_bot.bot` and is
only imported when the bot is started.
"""

from .core.models import ActivitySuggestion, User, Visit, VisitStatus
from .core.storage import JSONStorage
from .data.store import VisitStore

__all__ = [
    "ActivitySuggestion",
    "JSONStorage",
    "User",
    "Visit",
    "VisitStatus",
    "VisitStore",
]
