"""Bulk import and export of events.

Import format detection is an ordered heuristic on the decoded text:

1. trimmed text starting with ``{`` or ``[`` is JSON (one event object or
   a list of them);
2. otherwise text containing ``BEGIN:VCALENDAR`` is an iCalendar document;
3. anything else is rejected before any event is created.
"""
import json
import logging
from typing import Literal

from eventdesk.calendar.documents import IcsDirectory
from eventdesk.calendar.errors import UnsupportedFormatError
from eventdesk.calendar.ics import CALENDAR_BEGIN, parse_document
from eventdesk.calendar.store import EventStore
from eventdesk.models import BatchResult, EventRead

logger = logging.getLogger(__name__)

ExportFormat = Literal["json", "ics"]

EXPORT_FORMATS = ("json", "ics")


def _decode_json(text: str) -> list:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UnsupportedFormatError(f"Invalid JSON: {exc}") from exc
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise UnsupportedFormatError("JSON import must be an event object or a list of events")


def import_from_bytes(store: EventStore, raw: bytes) -> BatchResult:
    """Detect the format of ``raw`` and create every event it describes.

    Raises:
        UnsupportedFormatError: the payload is neither JSON nor iCalendar.
            No event is created in that case.
    """
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UnsupportedFormatError(f"Import must be UTF-8 text: {exc}") from exc

    stripped = text.strip()
    if stripped.startswith(("{", "[")):
        items = _decode_json(stripped)
        logger.info("Importing %d event(s) from JSON", len(items))
    elif CALENDAR_BEGIN in text:
        items = parse_document(text)
        logger.info("Importing %d event(s) from iCalendar", len(items))
    else:
        raise UnsupportedFormatError("Unsupported format. Provide JSON or an .ics calendar file.")

    return store.import_batch(items)


def export_all(store: EventStore, documents: IcsDirectory, fmt: ExportFormat = "json") -> bytes:
    """Serialize every event as pretty-printed JSON or one merged .ics document.

    The ``ics`` export folds in the documents already on disk; events whose
    document is missing are left out.
    """
    events = store.export_all()
    if fmt == "json":
        payload = [
            EventRead.from_event(event).model_dump(mode="json", by_alias=True)
            for event in events
        ]
        return json.dumps(payload, indent=2).encode("utf-8")
    if fmt == "ics":
        return documents.merged(events).encode("utf-8")
    raise UnsupportedFormatError(f"Unknown export format: {fmt}")
