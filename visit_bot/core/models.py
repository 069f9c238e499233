"""Data models for the visit board's core entities.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from dictionaries.
Dates are always timezone-aware and expressed in UTC.
"""

from __future__ import annotations

import datetime
import uuid
from datetime import UTC
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def new_id() -> str:
    """Return a fresh, collision-resistant identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(tz=UTC)


def parse_day(text: str | None) -> datetime.datetime | None:
    """Parse a ``YYYY-MM-DD`` form value into midnight UTC on that day.

    Blank input yields ``None``; anything else unparseable raises
    :class:`ValueError`.
    """
    if text is None or not text.strip():
        return None
    day = datetime.date.fromisoformat(text.strip())
    return datetime.datetime(day.year, day.month, day.day, tzinfo=UTC)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class VisitStatus(str, Enum):
    """Lifecycle state of a :class:`Visit`."""

    CURRENT = "current"
    PLANNED = "planned"


class User(BaseModel):
    """A registered community member.

    Attributes
    ----------
    id:
        Internal unique identifier. Defaults to a random UUID4 string.
    name:
        Display name; required and stored trimmed.
    organizations:
        Ordered organisations the user belongs to. Exact duplicates are
        dropped, keeping the first occurrence.
    bio:
        Optional free-form description.
    city, occupation:
        Optional directory details.
    joined_at:
        When the profile was first created.
    discord_id:
        The Discord user that owns this profile, if any.

    """

    id: str = Field(default_factory=new_id)
    name: str
    organizations: list[str] = Field(default_factory=list)
    bio: str | None = None
    city: str | None = None
    occupation: str | None = None
    joined_at: datetime.datetime = Field(default_factory=utcnow)
    discord_id: int | None = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("organizations")
    @classmethod
    def _unique_organizations(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for org in value:
            org = org.strip()
            if org and org not in seen:
                seen.append(org)
        return seen

    @field_validator("bio", "city", "occupation")
    @classmethod
    def _optional_text(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class Visit(BaseModel):
    """A window of time a user is, or will be, in town.

    ``user_name`` is a snapshot of the owner's name when the visit was
    created; use :meth:`VisitStore.display_name` for the live name.
    """

    id: str = Field(default_factory=new_id)
    user_id: str
    user_name: str
    start_date: datetime.datetime
    end_date: datetime.datetime | None = None
    status: VisitStatus
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def _optional_notes(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class ActivitySuggestion(BaseModel):
    """Something to do together during a visit."""

    id: str = Field(default_factory=new_id)
    user_id: str
    user_name: str
    visit_id: str
    title: str
    description: str
    suggested_date: datetime.datetime | None = None
    created_at: datetime.datetime = Field(default_factory=utcnow)

    @field_validator("title", "description")
    @classmethod
    def _text_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value
