"""Tests for API routes."""

import json
from urllib.parse import unquote

from fastapi.testclient import TestClient

from eventdesk.calendar.documents import IcsDirectory
from eventdesk.calendar.store import EventStore
from eventdesk.main import app
from eventdesk.models import Event
from eventdesk.routes.dependencies import get_documents


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestDashboard:
    """Tests for the dashboard page."""

    def test_empty_dashboard(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]

    def test_lists_events(self, client: TestClient, sample_event: Event, all_day_event: Event):
        response = client.get("/")
        assert "Team Sync" in response.text
        assert "Conference" in response.text
        assert f"/api/events/{sample_event.id}/ics" in response.text
        assert "2 scheduled, 0 published" in response.text

    def test_import_and_edit_forms(self, client: TestClient, sample_event: Event):
        response = client.get("/")
        assert 'id="import-form"' in response.text
        assert f'class="edit-form grid grid-cols-3 gap-2 mt-2" data-event-id="{sample_event.id}"' in response.text
        assert "work,weekly" in response.text


class TestCreateEvent:
    """Tests for POST /api/events."""

    def test_create(self, client: TestClient, documents: IcsDirectory):
        response = client.post(
            "/api/events",
            json={"title": "Demo", "startDate": "2025-05-05", "startTime": "15:00"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Demo"
        assert data["endDate"] == "2025-05-05"
        assert data["endTime"] == "15:00"
        assert data["allDay"] is False
        assert data["status"] == "scheduled"
        assert data["publishedDate"] is None
        assert documents.read(data["uid"]) is not None
        assert "X-Document-Error" not in response.headers

    def test_missing_title(self, client: TestClient, store: EventStore):
        response = client.post("/api/events", json={"startDate": "2025-05-05"})
        assert response.status_code == 400
        assert "title" in response.json()["detail"]
        assert store.list_events() == []

    def test_malformed_date(self, client: TestClient):
        response = client.post("/api/events", json={"title": "T", "startDate": "May 5"})
        assert response.status_code == 400

    def test_document_failure_is_reported(self, client: TestClient, store: EventStore, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("occupied")
        app.dependency_overrides[get_documents] = lambda: IcsDirectory(blocker)

        response = client.post("/api/events", json={"title": "T", "startDate": "2025-05-05"})

        assert response.status_code == 201
        assert response.headers["X-Document-Error"]
        assert len(store.list_events()) == 1

    def test_non_ascii_document_path(self, client: TestClient, store: EventStore, tmp_path):
        blocker = tmp_path / "zo\u00eb" / "blocked"
        blocker.parent.mkdir()
        blocker.write_text("occupied")
        app.dependency_overrides[get_documents] = lambda: IcsDirectory(blocker)

        response = client.post("/api/events", json={"title": "T", "startDate": "2025-01-01"})

        assert response.status_code == 201
        assert response.json()["title"] == "T"
        assert "zo\u00eb" in unquote(response.headers["X-Document-Error"])
        assert len(store.list_events()) == 1


class TestReadEvents:
    """Tests for listing and fetching events."""

    def test_list(self, client: TestClient, sample_event: Event, all_day_event: Event):
        response = client.get("/api/events")
        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [sample_event.id, all_day_event.id]

    def test_get(self, client: TestClient, sample_event: Event):
        response = client.get(f"/api/events/{sample_event.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["uid"] == sample_event.uid
        assert data["startTime"] == "09:30"
        assert data["createdAt"] == sample_event.created_at

    def test_get_not_found(self, client: TestClient):
        response = client.get("/api/events/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Event not found"


class TestUpdateEvent:
    """Tests for PUT /api/events/{id}."""

    def test_partial_update(self, client: TestClient, sample_event: Event, documents: IcsDirectory):
        response = client.put(f"/api/events/{sample_event.id}", json={"location": "Room 9"})

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "Room 9"
        assert data["title"] == "Team Sync"
        assert "LOCATION:Room 9" in documents.read(sample_event.uid)

    def test_empty_title(self, client: TestClient, sample_event: Event):
        response = client.put(f"/api/events/{sample_event.id}", json={"title": ""})
        assert response.status_code == 400

    def test_not_found(self, client: TestClient):
        response = client.put("/api/events/999", json={"title": "X"})
        assert response.status_code == 404


class TestDeleteEvent:
    """Tests for DELETE /api/events/{id}."""

    def test_delete_writes_cancellation(
        self, client: TestClient, store: EventStore, sample_event: Event, documents: IcsDirectory
    ):
        response = client.delete(f"/api/events/{sample_event.id}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert store.get(sample_event.id) is None
        assert "STATUS:CANCELLED" in documents.read(sample_event.uid)

    def test_not_found(self, client: TestClient):
        assert client.delete("/api/events/999").status_code == 404


class TestPublishEvent:
    """Tests for POST /api/events/{id}/publish."""

    def test_publish(self, client: TestClient, sample_event: Event):
        response = client.post(f"/api/events/{sample_event.id}/publish")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "published"
        assert data["publishedDate"] is not None

    def test_not_found(self, client: TestClient):
        assert client.post("/api/events/999/publish").status_code == 404


class TestDocumentDownloads:
    """Tests for the .ics download routes."""

    def test_single_document(self, client: TestClient, sample_event: Event, documents: IcsDirectory):
        documents.generate(sample_event)

        response = client.get(f"/api/events/{sample_event.id}/ics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/calendar")
        assert f'filename="event-{sample_event.id}.ics"' in response.headers["content-disposition"]
        assert "SUMMARY:Team Sync" in response.text

    def test_single_document_missing_file(self, client: TestClient, sample_event: Event):
        response = client.get(f"/api/events/{sample_event.id}/ics")
        assert response.status_code == 404
        assert response.json()["detail"] == "ICS file not found"

    def test_single_document_unknown_event(self, client: TestClient):
        response = client.get("/api/events/999/ics")
        assert response.status_code == 404
        assert response.json()["detail"] == "Event not found"

    def test_all_documents(
        self, client: TestClient, sample_event: Event, all_day_event: Event, documents: IcsDirectory
    ):
        documents.generate(sample_event)
        documents.generate(all_day_event)

        response = client.get("/api/events/all/ics")

        assert response.status_code == 200
        assert "mgc-calendar-all-events.ics" in response.headers["content-disposition"]
        assert response.text.count("BEGIN:VEVENT") == 2

    def test_all_documents_empty_store(self, client: TestClient):
        response = client.get("/api/events/all/ics")
        assert response.status_code == 404
        assert response.json()["detail"] == "No events found"


class TestImportExport:
    """Tests for bulk import and export."""

    def test_import_json(self, client: TestClient, documents: IcsDirectory):
        body = json.dumps(
            [
                {"title": "A", "startDate": "2025-01-01"},
                {"startDate": "2025-01-02"},
            ]
        )

        response = client.post("/api/events/import", content=body)

        assert response.status_code == 200
        data = response.json()
        assert data["successCount"] == 1
        assert data["failureCount"] == 1
        assert len(data["errors"]) == 1
        assert "created" not in data
        assert len(list(documents.directory.glob("*.ics"))) == 1

    def test_import_reports_document_failures(self, client: TestClient, store: EventStore, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("occupied")
        app.dependency_overrides[get_documents] = lambda: IcsDirectory(blocker)
        body = json.dumps([{"title": "A", "startDate": "2025-01-01"}])

        response = client.post("/api/events/import", content=body)

        assert response.status_code == 200
        assert response.json()["successCount"] == 1
        assert response.headers["X-Document-Error"]
        assert len(store.list_events()) == 1

    def test_import_without_failures_has_no_error_header(self, client: TestClient):
        body = json.dumps([{"title": "A", "startDate": "2025-01-01"}])
        response = client.post("/api/events/import", content=body)
        assert "X-Document-Error" not in response.headers

    def test_import_unsupported(self, client: TestClient):
        response = client.post("/api/events/import", content=b"plain text")
        assert response.status_code == 400

    def test_export_json(self, client: TestClient, sample_event: Event):
        response = client.get("/api/events/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert [e["uid"] for e in response.json()] == [sample_event.uid]

    def test_export_ics(self, client: TestClient, sample_event: Event, documents: IcsDirectory):
        documents.generate(sample_event)

        response = client.get("/api/events/export", params={"format": "ics"})

        assert response.status_code == 200
        assert "BEGIN:VCALENDAR" in response.text

    def test_export_unknown_format(self, client: TestClient):
        response = client.get("/api/events/export", params={"format": "xml"})
        assert response.status_code == 400
