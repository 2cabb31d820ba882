"""Persistent event store backed by SQLite.

The store is the only place that assigns ``id``, ``uid`` and timestamps.
Every mutating call commits before it returns, so a caller always observes
durable state. Writes go through a lock so that request handlers sharing
one store never interleave mutations.
"""
import logging
import secrets
import string
import threading
import time
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from eventdesk.calendar.errors import EventValidationError
from eventdesk.core.database import create_db_and_tables, create_db_engine
from eventdesk.models import BatchResult, Event, EventCreate, EventRead, EventUpdate

logger = logging.getLogger(__name__)

DEFAULT_UID_DOMAIN = "mgc-calendar"

_UID_ALPHABET = string.ascii_lowercase + string.digits

# Fields an update may change but never clear
_NON_EMPTY_ON_UPDATE = ("title", "start_date", "end_date", "all_day", "status")


def _timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


def generate_uid(domain: str = DEFAULT_UID_DOMAIN) -> str:
    """Build a globally unique event uid from the clock plus randomness."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_UID_ALPHABET) for _ in range(13))
    return f"mgc-event-{millis}-{suffix}@{domain}"


def _describe(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return ", ".join(messages)


def _label(item: Any) -> str:
    """Best-effort title of an import item, empty when it has none."""
    if isinstance(item, EventCreate):
        return item.title or ""
    if isinstance(item, Mapping):
        return str(item.get("title") or "")
    return ""


class EventStore:
    """CRUD, publish and batch import over the ``events`` table."""

    def __init__(self, engine: Engine, uid_domain: str = DEFAULT_UID_DOMAIN):
        self.engine = engine
        self.uid_domain = uid_domain
        self._lock = threading.RLock()

    @classmethod
    def open(
        cls,
        database_url: str,
        echo: bool = False,
        uid_domain: str = DEFAULT_UID_DOMAIN,
    ) -> "EventStore":
        """Create the engine and schema, then hand back a ready store."""
        engine = create_db_engine(database_url, echo=echo)
        create_db_and_tables(engine)
        logger.info("Event store ready at %s", engine.url)
        return cls(engine, uid_domain=uid_domain)

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    @staticmethod
    def _validate(model, data):
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise EventValidationError(_describe(exc)) from exc

    def create(self, data: EventCreate | Mapping[str, Any]) -> Event:
        """Validate and persist a new event.

        Raises:
            EventValidationError: title or startDate is missing, or a field
                is malformed.
        """
        payload = self._validate(EventCreate, data)
        if not payload.title:
            raise EventValidationError("title is required")
        if not payload.start_date:
            raise EventValidationError("startDate is required")

        now = _timestamp()
        event = Event(
            uid=generate_uid(self.uid_domain),
            title=payload.title,
            description=payload.description,
            location=payload.location,
            start_date=payload.start_date,
            end_date=payload.end_date or payload.start_date,
            start_time=payload.start_time,
            end_time=payload.end_time or payload.start_time or "",
            all_day=payload.all_day,
            content=payload.content,
            tags=payload.tags,
            status=payload.status,
            published_date=payload.published_date,
            created_at=now,
            updated_at=now,
        )
        with self._lock, self._session() as session:
            session.add(event)
            session.commit()
            session.refresh(event)

        logger.info("Created event %s (%s)", event.id, event.uid)
        return event

    def get(self, event_id: int) -> Event | None:
        with self._session() as session:
            return session.get(Event, event_id)

    def list_events(self) -> list[Event]:
        """All events, latest start first."""
        statement = select(Event).order_by(
            Event.start_date.desc(),
            Event.start_time.desc(),
            Event.id,
        )
        with self._session() as session:
            return list(session.exec(statement).all())

    def update(self, event_id: int, changes: EventUpdate | Mapping[str, Any]) -> Event | None:
        """Overwrite only the supplied fields of an event.

        Returns None when the id is unknown.

        Raises:
            EventValidationError: a supplied field is malformed, or a
                required field is supplied as null or empty.
        """
        payload = self._validate(EventUpdate, changes)
        data = payload.model_dump(exclude_unset=True)
        for name in _NON_EMPTY_ON_UPDATE:
            if name in data and (data[name] is None or data[name] == ""):
                raise EventValidationError(f"{to_camel(name)} cannot be empty")

        with self._lock, self._session() as session:
            event = session.get(Event, event_id)
            if event is None:
                logger.warning("Event not found for update: %s", event_id)
                return None
            event.sqlmodel_update(data)
            event.updated_at = _timestamp()
            session.add(event)
            session.commit()
            session.refresh(event)

        logger.info("Updated event %s fields %s", event_id, sorted(data))
        return event

    def delete(self, event_id: int) -> Event | None:
        """Remove an event and return the row as it was before removal."""
        with self._lock, self._session() as session:
            event = session.get(Event, event_id)
            if event is None:
                logger.warning("Event not found for deletion: %s", event_id)
                return None
            session.delete(event)
            session.commit()

        logger.info("Deleted event %s (%s)", event_id, event.uid)
        return event

    def mark_published(self, event_id: int) -> Event | None:
        """Move an event to ``published``.

        Publishing an already published event refreshes publishedDate and
        updatedAt.
        """
        with self._lock, self._session() as session:
            event = session.get(Event, event_id)
            if event is None:
                logger.warning("Event not found for publish: %s", event_id)
                return None
            now = _timestamp()
            event.status = "published"
            event.published_date = now
            event.updated_at = now
            session.add(event)
            session.commit()
            session.refresh(event)

        logger.info("Published event %s", event_id)
        return event

    def import_batch(self, items: Iterable[EventCreate | Mapping[str, Any]]) -> BatchResult:
        """Create every item independently.

        A failing item is counted and described in ``errors``; it never stops
        the rest of the batch, and items created before it stay created.
        """
        result = BatchResult()
        for item in items:
            try:
                event = self.create(item)
            except (EventValidationError, SQLAlchemyError) as exc:
                message = f'Failed to import "{_label(item)}": {exc}'
                logger.warning(message)
                result.failure_count += 1
                result.errors.append(message)
            else:
                result.success_count += 1
                result.created.append(EventRead.from_event(event))

        logger.info(
            "Batch import finished: %d created, %d failed",
            result.success_count,
            result.failure_count,
        )
        return result

    def export_all(self) -> list[Event]:
        """Every event, in listing order, for serialization at a boundary."""
        return self.list_events()
