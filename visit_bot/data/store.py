"""In-memory state for users, visits and suggestions, mirrored to storage."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import VARIANTS
from ..core.models import (
    ActivitySuggestion,
    User,
    Visit,
    VisitStatus,
    new_id,
    utcnow,
)
from ..core.storage import (
    CURRENT_USER_KEY,
    SUGGESTIONS_KEY,
    USERS_KEY,
    VISITS_KEY,
    JSONStorage,
)

log = logging.getLogger("visit_bot.store")

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

USER_DATE_FIELDS = ("joined_at",)
VISIT_DATE_FIELDS = ("start_date", "end_date")
SUGGESTION_DATE_FIELDS = ("created_at", "suggested_date")

IN_TOWN_NOTE = "Currently in town!"


# ----------------------------------------------------------------------
# Derived queries
# ----------------------------------------------------------------------
def group_by(items: Iterable[T], key: Callable[[T], str | None]) -> dict[str, list[T]]:
    """Partition ``items`` by ``key`` keeping first-seen and insertion order.

    Items whose key is ``None`` or blank are left out.
    """
    groups: dict[str, list[T]] = {}
    for item in items:
        k = key(item)
        if k is None or not k.strip():
            continue
        groups.setdefault(k, []).append(item)
    return groups


def group_by_city(users: Iterable[User]) -> dict[str, list[User]]:
    return group_by(users, lambda u: u.city)


def group_by_organization(users: Iterable[User]) -> dict[str, list[User]]:
    """Group users under every organisation they belong to."""
    groups: dict[str, list[User]] = {}
    for user in users:
        for org in user.organizations:
            groups.setdefault(org, []).append(user)
    return groups


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", exclude_none=True)


class VisitStore:
    """Owns every collection plus the current-user pointer.

    Mutation methods are the only write path and each one flushes the
    collections it touched back to ``storage``.
    """

    def __init__(self, storage: JSONStorage, variant: str = "visits") -> None:
        if variant not in VARIANTS:
            raise ValueError(f"Unknown variant {variant!r}")
        self.storage = storage
        self.variant = variant
        self.users: list[User] = []
        self.visits: list[Visit] = []
        self.suggestions: list[ActivitySuggestion] = []
        self.current_user: User | None = None
        self._load()

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def _parse(
        self, model: type[M], raw: Mapping[str, Any], date_fields: Iterable[str]
    ) -> M | None:
        try:
            return model.model_validate(
                self.storage.normalize_dates(raw, date_fields)
            )
        except ValidationError as exc:
            log.warning("Skipping malformed %s record: %s", model.__name__, exc)
            return None

    def _load_many(
        self, key: str, model: type[M], date_fields: Iterable[str]
    ) -> list[M]:
        records = (self._parse(model, raw, date_fields) for raw in self.storage.load(key))
        return [r for r in records if r is not None]

    def _load(self) -> None:
        self.users = self._load_many(USERS_KEY, User, USER_DATE_FIELDS)
        self.visits = self._load_many(VISITS_KEY, Visit, VISIT_DATE_FIELDS)
        self.suggestions = self._load_many(
            SUGGESTIONS_KEY, ActivitySuggestion, SUGGESTION_DATE_FIELDS
        )
        raw_current = self.storage.load_one(CURRENT_USER_KEY)
        self.current_user = (
            self._parse(User, raw_current, USER_DATE_FIELDS) if raw_current else None
        )
        log.debug(
            "Loaded %d users, %d visits, %d suggestions",
            len(self.users),
            len(self.visits),
            len(self.suggestions),
        )

    def _save_users(self) -> None:
        self.storage.save(USERS_KEY, [_dump(u) for u in self.users])
        if self.current_user is None:
            self.storage.remove(CURRENT_USER_KEY)
        else:
            self.storage.save_one(CURRENT_USER_KEY, _dump(self.current_user))

    def _save_visits(self) -> None:
        self.storage.save(VISITS_KEY, [_dump(v) for v in self.visits])

    def _save_suggestions(self) -> None:
        self.storage.save(SUGGESTIONS_KEY, [_dump(s) for s in self.suggestions])

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------
    def register(self, user: User) -> User:
        """Create ``user`` or, with someone signed in, update by ``id``."""
        if self.current_user is None:
            self.users.append(user)
            log.debug("Registered user %s", user.id)
        else:
            for idx, existing in enumerate(self.users):
                if existing.id == user.id:
                    self.users[idx] = user
                    break
            else:
                self.users.append(user)
            log.debug("Updated user %s", user.id)
        self.current_user = user
        self._save_users()
        return user

    def sign_in(self, user_id: str) -> User | None:
        user = self.get_user(user_id)
        if user is None:
            return None
        self.current_user = user
        self._save_users()
        return user

    def clear_session(self) -> User | None:
        """Forget the current user without touching the directory."""
        user = self.current_user
        self.current_user = None
        self.storage.remove(CURRENT_USER_KEY)
        return user

    def leave_directory(self) -> User | None:
        """Remove the current user from the directory and end the session."""
        user = self.current_user
        if user is None:
            return None
        self.users = [u for u in self.users if u.id != user.id]
        self.current_user = None
        self._save_users()
        log.debug("User %s left the directory", user.id)
        return user

    def session_for_discord(self, discord_id: int) -> User | None:
        """Make the profile linked to ``discord_id`` the current user.

        Clears the session when that account has not registered yet, so a
        following :meth:`register` creates a new profile.
        """
        user = self.user_for_discord(discord_id)
        if user is None:
            self.clear_session()
            return None
        if self.current_user is None or self.current_user.id != user.id:
            self.sign_in(user.id)
        return user

    def logout(self) -> User | None:
        if self.variant == "directory":
            return self.leave_directory()
        return self.clear_session()

    def get_user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def user_for_discord(self, discord_id: int) -> User | None:
        return next((u for u in self.users if u.discord_id == discord_id), None)

    def display_name(self, record: Visit | ActivitySuggestion) -> str:
        """Return the owner's current name, falling back to the snapshot."""
        user = self.get_user(record.user_id)
        return user.name if user else record.user_name

    # ------------------------------------------------------------------
    # Visit operations
    # ------------------------------------------------------------------
    def add_visit(self, data: Mapping[str, Any]) -> Visit:
        visit = Visit.model_validate({**data, "id": new_id()})
        self.visits.append(visit)
        self._save_visits()
        log.debug("Added %s visit %s for %s", visit.status.value, visit.id, visit.user_id)
        return visit

    def get_visit(self, visit_id: str) -> Visit | None:
        return next((v for v in self.visits if v.id == visit_id), None)

    def update_visit_status(self, visit_id: str, status: VisitStatus | str) -> str | None:
        try:
            status = VisitStatus(status)
        except ValueError:
            return "Invalid status."
        visit = self.get_visit(visit_id)
        if visit is None:
            return "Visit not found."
        visit.status = status
        self._save_visits()
        return None

    def mark_in_town(self, user: User) -> Visit:
        """Toggle ``user``'s in-town state.

        An existing current visit is demoted to planned; otherwise a new
        current visit starting now is created.
        """
        current = self.current_visit_for_user(user.id)
        if current is not None:
            self.update_visit_status(current.id, VisitStatus.PLANNED)
            return current
        return self.add_visit(
            {
                "user_id": user.id,
                "user_name": user.name,
                "start_date": utcnow(),
                "status": VisitStatus.CURRENT,
                "notes": IN_TOWN_NOTE,
            }
        )

    def plan_visit(
        self,
        user: User,
        start_date: Any,
        end_date: Any = None,
        notes: str | None = None,
    ) -> Visit:
        return self.add_visit(
            {
                "user_id": user.id,
                "user_name": user.name,
                "start_date": start_date,
                "end_date": end_date,
                "status": VisitStatus.PLANNED,
                "notes": notes,
            }
        )

    # ------------------------------------------------------------------
    # Suggestion operations
    # ------------------------------------------------------------------
    def add_suggestion(self, data: Mapping[str, Any]) -> ActivitySuggestion:
        suggestion = ActivitySuggestion.model_validate(
            {**data, "id": new_id(), "created_at": utcnow()}
        )
        self.suggestions.append(suggestion)
        self._save_suggestions()
        log.debug("Added suggestion %s to visit %s", suggestion.id, suggestion.visit_id)
        return suggestion

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def visits_for_user(self, user_id: str) -> list[Visit]:
        return [v for v in self.visits if v.user_id == user_id]

    def current_visit_for_user(self, user_id: str) -> Visit | None:
        return next(
            (v for v in self.visits_for_user(user_id) if v.status == VisitStatus.CURRENT),
            None,
        )

    def planned_visits_for_user(self, user_id: str) -> list[Visit]:
        return [
            v for v in self.visits_for_user(user_id) if v.status == VisitStatus.PLANNED
        ]

    def active_visits(self) -> list[Visit]:
        return [
            v
            for v in self.visits
            if v.status in (VisitStatus.CURRENT, VisitStatus.PLANNED)
        ]

    def suggestions_for_visit(self, visit_id: str) -> list[ActivitySuggestion]:
        return [s for s in self.suggestions if s.visit_id == visit_id]

    def directory(self) -> dict[str, list[User]]:
        """Group the directory the way this variant presents it."""
        if self.variant == "directory":
            return group_by_city(self.users)
        return group_by_organization(self.users)
