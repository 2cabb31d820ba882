"""Event model and wire schemas for the local event store.

This module defines the Event table, which is the only entity the store
keeps, plus the schemas used at the edges: ``EventCreate`` and
``EventUpdate`` for input, ``EventRead`` for output and ``BatchResult`` for
multi-item imports.

Attribute names are snake_case in Python. Every wire schema uses camelCase
aliases (``startDate``, ``allDay``, ``publishedDate``...), which are the
field names the dashboard and API consumers read and write. Input schemas
accept either spelling.
"""
import re
from datetime import date
from typing import Literal

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel

EventStatus = Literal["scheduled", "published"]

WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


class EventBase(SQLModel):
    """Fields shared by the table and the read schema."""
    title: str
    description: str = ""
    location: str = ""
    start_date: str
    end_date: str
    start_time: str = ""
    end_time: str = ""
    all_day: bool = False
    content: str = ""
    tags: str = ""
    status: str = "scheduled"
    published_date: str | None = None


class Event(EventBase, table=True):
    """A calendar event.

    Attributes:
        id: Store-assigned integer key. AUTOINCREMENT keeps ids from being
            reused after a delete.
        uid: Stable identity carried in the event's .ics document. Calendar
            applications match updates and cancellations on it.
        title: Event summary, never empty.
        description: Free text shown in calendar applications.
        location: Free text location.
        start_date: ``YYYY-MM-DD``.
        end_date: ``YYYY-MM-DD``, defaults to start_date.
        start_time: ``HH:MM`` or empty for a date-only event.
        end_time: ``HH:MM`` or empty, defaults to start_time.
        all_day: If True the event has no time component at all.
        content: Long-form article/post body, unrelated to scheduling.
        tags: Comma-joined labels.
        status: "scheduled" or "published".
        published_date: Set by the publish transition only.
        created_at: Server timestamp at creation.
        updated_at: Server timestamp, refreshed on every mutation.
    """
    __tablename__ = "events"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    uid: str = Field(index=True, unique=True)
    created_at: str
    updated_at: str


class EventRead(EventBase):
    """Event as serialized to API consumers."""
    model_config = WIRE_CONFIG

    id: int
    uid: str
    created_at: str
    updated_at: str

    @classmethod
    def from_event(cls, event: Event) -> "EventRead":
        return cls.model_validate(event.model_dump())


class _EventInput(SQLModel):
    """Field checks shared by create and update payloads."""
    model_config = WIRE_CONFIG

    @field_validator(
        "description", "location", "start_time", "content", "tags",
        mode="before", check_fields=False,
    )
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("start_date", "end_date", check_fields=False)
    @classmethod
    def _check_date(cls, value: str | None) -> str | None:
        if not value:
            return value
        if not _DATE_RE.fullmatch(value):
            raise ValueError("must be a date in YYYY-MM-DD format")
        try:
            date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"is not a valid date: {exc}") from exc
        return value

    @field_validator("start_time", "end_time", check_fields=False)
    @classmethod
    def _check_time(cls, value: str | None) -> str | None:
        if value and not _TIME_RE.fullmatch(value):
            raise ValueError("must be a time in HH:MM (24-hour) format")
        return value


class EventCreate(_EventInput):
    """Payload for creating an event.

    ``title`` and ``start_date`` are optional here so that a missing value
    reaches the store, which reports it as an ``EventValidationError``.
    """
    title: str | None = None
    description: str = ""
    location: str = ""
    start_date: str | None = None
    start_time: str = ""
    end_date: str | None = None
    end_time: str | None = None
    all_day: bool = False
    content: str = ""
    tags: str = ""
    status: EventStatus = "scheduled"
    published_date: str | None = None

    @field_validator("all_day", mode="before")
    @classmethod
    def _none_as_false(cls, value):
        return False if value is None else value


class EventUpdate(_EventInput):
    """Partial update payload.

    Only fields that were explicitly supplied are applied; pydantic tracks
    them in ``model_fields_set``, so "not supplied" and "supplied as empty"
    stay distinct.
    """
    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_date: str | None = None
    start_time: str | None = None
    end_date: str | None = None
    end_time: str | None = None
    all_day: bool | None = None
    content: str | None = None
    tags: str | None = None
    status: EventStatus | None = None
    published_date: str | None = None


class BatchResult(SQLModel):
    """Outcome of a multi-item import: counts plus one message per failure."""
    model_config = WIRE_CONFIG

    success_count: int = 0
    failure_count: int = 0
    errors: list[str] = Field(default_factory=list)
    created: list[EventRead] = Field(default_factory=list, exclude=True)
