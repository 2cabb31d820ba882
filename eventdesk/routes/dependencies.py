"""Request dependencies resolving the objects built at startup."""
from fastapi import Request

from eventdesk.calendar.documents import IcsDirectory
from eventdesk.calendar.store import EventStore


def get_store(request: Request) -> EventStore:
    """The event store opened in the application lifespan."""
    return request.app.state.store


def get_documents(request: Request) -> IcsDirectory:
    """The .ics document directory configured in the application lifespan."""
    return request.app.state.documents
