"""REST API used by the dashboard for managing events."""
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response

from eventdesk.calendar.documents import DocumentResult, IcsDirectory
from eventdesk.calendar.errors import EventValidationError, UnsupportedFormatError
from eventdesk.calendar.ics import CANCELLED
from eventdesk.calendar.store import EventStore
from eventdesk.calendar.transfer import export_all, import_from_bytes
from eventdesk.models import BatchResult, EventRead
from eventdesk.routes.dependencies import get_documents, get_store

router = APIRouter(prefix="/api/events", tags=["events"])

CALENDAR_MEDIA_TYPE = "text/calendar"
DOCUMENT_ERROR_HEADER = "X-Document-Error"


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def _report(response: Response, *results: DocumentResult) -> None:
    """Surface failed document writes without failing the request.

    Header values must be latin-1, so the messages are percent-encoded.
    """
    errors = [result.error for result in results if not result.ok]
    if errors:
        response.headers[DOCUMENT_ERROR_HEADER] = quote("; ".join(errors), safe=" :/'\"()[]")


@router.get("", response_model=list[EventRead])
async def list_events(store: EventStore = Depends(get_store)):
    """List all events, latest start date first."""
    return [EventRead.from_event(event) for event in store.list_events()]


@router.post("", response_model=EventRead, status_code=201)
async def create_event(
    response: Response,
    payload: dict[str, Any] = Body(...),
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """
    Create an event and write its .ics document.

    Returns 400 if the title or start date is missing or a field is malformed.
    """
    try:
        event = store.create(payload)
    except EventValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _report(response, documents.save(event))
    return EventRead.from_event(event)


@router.get("/all/ics")
async def download_all_documents(
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """
    Download every event as one combined .ics file.

    Built from the documents already on disk. Returns 404 when the store
    holds no events.
    """
    events = store.list_events()
    if not events:
        raise HTTPException(status_code=404, detail="No events found")

    return Response(
        content=documents.merged(events),
        media_type=CALENDAR_MEDIA_TYPE,
        headers=_attachment("mgc-calendar-all-events.ics"),
    )


@router.get("/export")
async def export_events(
    fmt: str = Query("json", alias="format"),
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """Export all events as a JSON or .ics attachment."""
    try:
        content = export_all(store, documents, fmt)
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    media_type = "application/json" if fmt == "json" else CALENDAR_MEDIA_TYPE
    return Response(
        content=content,
        media_type=media_type,
        headers=_attachment(f"mgc-calendar-export.{fmt}"),
    )


@router.post("/import", response_model=BatchResult)
async def import_events(
    request: Request,
    response: Response,
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """
    Import events from a raw JSON or .ics request body.

    Items are created one by one; failures are counted and described in the
    response instead of aborting the batch. Failed document writes for the
    created events are reported in the X-Document-Error header. Returns 400
    if the body is neither JSON nor iCalendar.
    """
    raw = await request.body()
    try:
        result = import_from_bytes(store, raw)
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _report(response, *(documents.save(event) for event in result.created))
    return result


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: int, store: EventStore = Depends(get_store)):
    """Get a single event."""
    event = store.get(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventRead.from_event(event)


@router.put("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """
    Update the supplied fields of an event and rewrite its .ics document.

    Fields missing from the body keep their current value.
    """
    try:
        event = store.update(event_id, payload)
    except EventValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    _report(response, documents.save(event))
    return EventRead.from_event(event)


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    response: Response,
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """
    Delete an event.

    The event's .ics document is kept and rewritten as a cancellation, so
    importing it removes the event from a calendar application.
    """
    event = store.delete(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    _report(response, documents.save(event, CANCELLED))
    return {"success": True}


@router.post("/{event_id}/publish", response_model=EventRead)
async def publish_event(
    event_id: int,
    response: Response,
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """Mark an event as published, stamping publishedDate."""
    event = store.mark_published(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    _report(response, documents.save(event))
    return EventRead.from_event(event)


@router.get("/{event_id}/ics")
async def download_document(
    event_id: int,
    store: EventStore = Depends(get_store),
    documents: IcsDirectory = Depends(get_documents),
):
    """Download the stored .ics document of one event."""
    event = store.get(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    content = documents.read(event.uid)
    if content is None:
        raise HTTPException(status_code=404, detail="ICS file not found")

    return Response(
        content=content,
        media_type=CALENDAR_MEDIA_TYPE,
        headers=_attachment(f"event-{event_id}.ics"),
    )
