"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel.pool import StaticPool

from eventdesk.calendar.documents import IcsDirectory
from eventdesk.calendar.store import EventStore
from eventdesk.core.database import create_db_and_tables, create_db_engine
from eventdesk.main import app
from eventdesk.models import Event
from eventdesk.routes.dependencies import get_documents, get_store


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="store")
def store_fixture(engine) -> EventStore:
    """An event store over the in-memory database."""
    return EventStore(engine)


@pytest.fixture(name="documents")
def documents_fixture(tmp_path) -> IcsDirectory:
    """A document directory under the test's temporary path."""
    return IcsDirectory(tmp_path / "ics-files")


@pytest.fixture(name="client")
def client_fixture(store: EventStore, documents: IcsDirectory):
    """Create a test client wired to the test store and document directory."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_documents] = lambda: documents
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="sample_event")
def sample_event_fixture(store: EventStore) -> Event:
    """Create a timed sample event."""
    return store.create(
        {
            "title": "Team Sync",
            "description": "Weekly sync\nBring notes",
            "location": "Room 4",
            "startDate": "2025-03-01",
            "startTime": "09:30",
            "endTime": "10:30",
            "tags": "work,weekly",
        }
    )


@pytest.fixture(name="all_day_event")
def all_day_event_fixture(store: EventStore) -> Event:
    """Create an all-day sample event."""
    return store.create(
        {
            "title": "Conference",
            "startDate": "2025-01-01",
            "endDate": "2025-01-02",
            "allDay": True,
        }
    )
