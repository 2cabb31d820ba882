"""Convert events to and from iCalendar (.ics) text.

Documents are written with the ``icalendar`` library. Reading is done with
a deliberately forgiving line scanner instead: imports come from arbitrary
calendar exports, and a block with an odd property should cost that one
field, not the whole file.
"""
import logging
import re
from collections.abc import Iterable
from datetime import UTC, date, datetime, time
from typing import Literal, NamedTuple

from icalendar import Calendar
from icalendar import Event as ICalEvent

from eventdesk.models import Event, EventRead

logger = logging.getLogger(__name__)

DocumentStatus = Literal["CONFIRMED", "CANCELLED"]

CONFIRMED: DocumentStatus = "CONFIRMED"
CANCELLED: DocumentStatus = "CANCELLED"

DEFAULT_PRODUCT_ID = "-//MGC Calendar//EN"
DEFAULT_CALENDAR_NAME = "MGC Calendar"

CALENDAR_BEGIN = "BEGIN:VCALENDAR"
EVENT_BEGIN = "BEGIN:VEVENT"
EVENT_END = "END:VEVENT"

_FOLD_RE = re.compile(r"\r?\n[ \t]")
_ESCAPE_RE = re.compile(r"\\([nN,;\\])")


class Instant(NamedTuple):
    """A decoded DTSTART/DTEND value."""
    date: str
    time: str
    all_day: bool


def _new_calendar(product_id: str, calendar_name: str) -> Calendar:
    calendar = Calendar()
    calendar.add("prodid", product_id)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")
    calendar.add("x-wr-calname", calendar_name)
    return calendar


def _instant(day: str, clock: str, date_only: bool) -> date | datetime:
    value = date.fromisoformat(day)
    if date_only:
        return value
    # Floating local time: times are stored without a zone
    return datetime.combine(value, time.fromisoformat(clock))


def render_document(
    event: Event | EventRead,
    status: DocumentStatus = CONFIRMED,
    *,
    product_id: str = DEFAULT_PRODUCT_ID,
    calendar_name: str = DEFAULT_CALENDAR_NAME,
) -> str:
    """Render one event as a complete VCALENDAR document.

    The event is date-only when it is flagged all-day or has no start time.
    Its UID is the event uid, which lets calendar applications treat a
    re-imported document as an update (or, with ``CANCELLED``, a removal)
    of the same event.
    """
    date_only = event.all_day or not event.start_time
    start = _instant(event.start_date, event.start_time, date_only)
    end = _instant(
        event.end_date or event.start_date,
        event.end_time or event.start_time,
        date_only,
    )

    vevent = ICalEvent()
    vevent.add("uid", event.uid)
    vevent.add("dtstamp", datetime.now(UTC))
    vevent.add("dtstart", start)
    vevent.add("dtend", end)
    vevent.add("summary", event.title)
    if event.description:
        vevent.add("description", event.description)
    if event.location:
        vevent.add("location", event.location)
    vevent.add("status", status)
    if date_only:
        vevent.add("x-microsoft-cdo-alldayevent", "TRUE")

    calendar = _new_calendar(product_id, calendar_name)
    calendar.add_component(vevent)
    return calendar.to_ical().decode("utf-8")


def decode_instant(value: str) -> Instant:
    """Decode a DTSTART/DTEND value by its length.

    A trailing UTC ``Z`` (and any ``T...Z`` run left behind) is dropped
    first. Eight characters is a ``YYYYMMDD`` date and marks the event
    all-day; fifteen or more is ``YYYYMMDDTHHMMSS``. Anything else decodes
    to empty strings.
    """
    cleaned = re.sub(r"Z$", "", value)
    cleaned = re.sub(r"T.*Z", "", cleaned)

    if len(cleaned) == 8:
        return Instant(f"{cleaned[0:4]}-{cleaned[4:6]}-{cleaned[6:8]}", "", True)
    if len(cleaned) >= 15:
        return Instant(
            f"{cleaned[0:4]}-{cleaned[4:6]}-{cleaned[6:8]}",
            f"{cleaned[9:11]}:{cleaned[11:13]}",
            False,
        )
    return Instant("", "", False)


def _unescape(value: str) -> str:
    return _ESCAPE_RE.sub(
        lambda match: "\n" if match.group(1) in "nN" else match.group(1),
        value,
    )


def _parse_block(block: str) -> dict:
    fields = {
        "title": "",
        "description": "",
        "location": "",
        "start_date": "",
        "start_time": "",
        "end_date": "",
        "end_time": "",
        "all_day": False,
    }
    depth = 0  # nested components such as VALARM
    for line in block.splitlines():
        if not line.strip():
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.split(";")[0]
        value = value.strip()

        if key == "BEGIN":
            depth += 1
            continue
        if key == "END":
            depth -= 1
            continue
        if depth > 0:
            continue

        if key == "SUMMARY":
            fields["title"] = _unescape(value)
        elif key == "DESCRIPTION":
            fields["description"] = _unescape(value)
        elif key == "LOCATION":
            fields["location"] = _unescape(value)
        elif key == "DTSTART":
            start = decode_instant(value)
            fields["start_date"] = start.date
            fields["start_time"] = start.time
            if start.all_day:
                fields["all_day"] = True
        elif key == "DTEND":
            end = decode_instant(value)
            fields["end_date"] = end.date
            fields["end_time"] = end.time
    return fields


def parse_document(text: str) -> list[dict]:
    """Extract create payloads from every VEVENT block in ``text``.

    Blocks without a title or a start date are skipped. A missing end date
    defaults to the start date. A document with no usable block yields an
    empty list.
    """
    unfolded = _FOLD_RE.sub("", text)
    events = []
    for chunk in unfolded.split(EVENT_BEGIN)[1:]:
        end = chunk.find(EVENT_END)
        if end == -1:
            continue
        fields = _parse_block(chunk[:end])
        if fields["title"] and fields["start_date"]:
            if not fields["end_date"]:
                fields["end_date"] = fields["start_date"]
            events.append(fields)
    return events


def merge_documents(
    contents: Iterable[str],
    *,
    product_id: str = DEFAULT_PRODUCT_ID,
    calendar_name: str = DEFAULT_CALENDAR_NAME,
) -> str:
    """Combine the VEVENT blocks of several documents into one calendar.

    A document that does not parse is logged and left out.
    """
    merged = _new_calendar(product_id, calendar_name)
    for text in contents:
        try:
            calendar = Calendar.from_ical(text)
        except ValueError as exc:
            logger.warning("Skipping unreadable document: %s", exc)
            continue
        for component in calendar.walk("VEVENT"):
            merged.add_component(component)
    return merged.to_ical().decode("utf-8")
