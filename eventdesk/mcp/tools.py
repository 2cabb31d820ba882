"""Calendar tools exposed to an AI assistant over MCP.

Every tool returns plain text meant to be read back to the user. Unknown
ids are reported in the text; invalid arguments raise
``EventValidationError`` so the protocol layer returns a tool error.
"""
import logging
from typing import Annotated

from pydantic import Field

from eventdesk.calendar.documents import DocumentResult, IcsDirectory
from eventdesk.calendar.ics import CANCELLED
from eventdesk.calendar.store import EventStore
from eventdesk.models import Event

logger = logging.getLogger(__name__)

EventId = Annotated[int, Field(description="Event ID")]
Title = Annotated[str, Field(description="Event title")]
Description = Annotated[str | None, Field(description="Event description")]
Location = Annotated[str | None, Field(description="Event location")]
StartDate = Annotated[str, Field(description="Start date in YYYY-MM-DD format")]
StartTime = Annotated[str | None, Field(description="Start time in HH:MM format (24-hour)")]
EndDate = Annotated[
    str | None, Field(description="End date in YYYY-MM-DD format (defaults to start date)")
]
EndTime = Annotated[str | None, Field(description="End time in HH:MM format (24-hour)")]
AllDay = Annotated[bool | None, Field(description="Whether this is an all-day event")]


def _when(event: Event, separator: str = " at ") -> str:
    return f"{event.start_date}{separator}{event.start_time}" if event.start_time else event.start_date


def _document_line(result: DocumentResult, label: str) -> str:
    if result.ok:
        return f"{label} saved to: {result.path}"
    return f"{label} could not be written: {result.error}"


def _supplied(**fields) -> dict:
    return {name: value for name, value in fields.items() if value is not None}


class CalendarTools:
    """The create/list/get/update/delete tools, bound to one store."""

    def __init__(self, store: EventStore, documents: IcsDirectory):
        self.store = store
        self.documents = documents

    def create_event(
        self,
        title: Title,
        start_date: StartDate,
        description: Description = None,
        location: Location = None,
        start_time: StartTime = None,
        end_date: EndDate = None,
        end_time: EndTime = None,
        all_day: AllDay = None,
    ) -> str:
        logger.debug("Creating event %r on %s", title, start_date)
        event = self.store.create(
            _supplied(
                title=title,
                start_date=start_date,
                description=description,
                location=location,
                start_time=start_time,
                end_date=end_date,
                end_time=end_time,
                all_day=all_day,
            )
        )
        result = self.documents.save(event)
        return (
            "Event created successfully!\n\n"
            f"Event ID: {event.id}\n"
            f"Title: {event.title}\n"
            f"Date: {_when(event)}\n\n"
            f"{_document_line(result, 'ICS file')}\n\n"
            "To add this event to your calendar:\n"
            "1. Open the ICS file in your file manager\n"
            "2. Double-click to import it into your default calendar app\n"
            "3. Or manually import it in Google Calendar, Outlook, Apple Calendar, etc."
        )

    def list_events(self) -> str:
        events = self.store.list_events()
        logger.info("Found %d events", len(events))
        if not events:
            return "No events found."

        lines = "\n".join(
            f"ID: {event.id} | {event.title} | {_when(event, ' ')}" for event in events
        )
        return (
            f"Found {len(events)} event(s):\n\n{lines}\n\n"
            f"ICS files location: {self.documents.directory}"
        )

    def get_event(self, id: EventId) -> str:
        event = self.store.get(id)
        if not event:
            logger.warning("Event not found: %s", id)
            return f"Event with ID {id} not found."

        end = f"{event.end_date} {event.end_time}" if event.end_time else event.end_date
        return (
            "Event Details:\n\n"
            f"ID: {event.id}\n"
            f"Title: {event.title}\n"
            f"Description: {event.description or 'N/A'}\n"
            f"Location: {event.location or 'N/A'}\n"
            f"Start: {_when(event, ' ')}\n"
            f"End: {end}\n"
            f"All Day: {'Yes' if event.all_day else 'No'}\n"
            f"Status: {event.status}\n"
            f"Created: {event.created_at}\n"
            f"Updated: {event.updated_at}"
        )

    def update_event(
        self,
        id: EventId,
        title: Annotated[str | None, Field(description="Event title")] = None,
        description: Description = None,
        location: Location = None,
        start_date: Annotated[str | None, Field(description="Start date in YYYY-MM-DD format")] = None,
        start_time: StartTime = None,
        end_date: Annotated[str | None, Field(description="End date in YYYY-MM-DD format")] = None,
        end_time: EndTime = None,
        all_day: AllDay = None,
    ) -> str:
        changes = _supplied(
            title=title,
            description=description,
            location=location,
            start_date=start_date,
            start_time=start_time,
            end_date=end_date,
            end_time=end_time,
            all_day=all_day,
        )
        event = self.store.update(id, changes)
        if not event:
            return f"Event with ID {id} not found."

        result = self.documents.save(event)
        return (
            "Event updated successfully!\n\n"
            f"Event ID: {event.id}\n"
            f"Title: {event.title}\n"
            f"Date: {_when(event)}\n\n"
            f"{_document_line(result, 'Updated ICS file')}\n\n"
            "To update this event in your calendar:\n"
            "1. Open the updated ICS file\n"
            "2. Import it - most calendar apps will recognize the UID and update the existing event"
        )

    def delete_event(self, id: EventId) -> str:
        event = self.store.delete(id)
        if not event:
            return f"Event with ID {id} not found."

        result = self.documents.save(event, CANCELLED)
        return (
            "Event deleted successfully!\n\n"
            f"Event ID: {event.id}\n"
            f"Title: {event.title}\n\n"
            f"{_document_line(result, 'Cancellation ICS file')}\n\n"
            "To remove this event from your calendar:\n"
            "1. Open the cancellation ICS file\n"
            "2. Import it - most calendar apps will recognize the UID and remove the event"
        )
