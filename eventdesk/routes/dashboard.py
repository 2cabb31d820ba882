"""Dashboard page."""
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from eventdesk.calendar.store import EventStore
from eventdesk.core.config import settings
from eventdesk.models import EventRead
from eventdesk.routes.dependencies import get_store

router = APIRouter(tags=["dashboard"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


@router.get("/", response_class=HTMLResponse)
async def dashboard(request: Request, store: EventStore = Depends(get_store)):
    """
    Display the event dashboard.

    Lists every event (latest first) with its schedule, tags and status,
    plus links to each event's .ics document and to the combined download.
    Create, publish and delete actions call the REST API.
    """
    events = [EventRead.from_event(event) for event in store.list_events()]
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "events": events,
            "app_name": settings.app_name,
            "scheduled_count": sum(1 for e in events if e.status == "scheduled"),
            "published_count": sum(1 for e in events if e.status == "published"),
        },
    )
