"""The directory of per-event .ics documents.

Each event owns exactly one file, ``<uid>.ics``. Creating or updating an
event overwrites it; deleting an event overwrites it with a cancellation.
Files are never renamed or removed.
"""
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from eventdesk.calendar.ics import (
    CONFIRMED,
    DEFAULT_CALENDAR_NAME,
    DEFAULT_PRODUCT_ID,
    DocumentStatus,
    merge_documents,
    render_document,
)
from eventdesk.core.config import Settings
from eventdesk.models import Event, EventRead

logger = logging.getLogger(__name__)

EXTENSION = ".ics"


@dataclass
class DocumentResult:
    """Outcome of a best-effort document write."""
    path: Path | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IcsDirectory:
    """Reads and writes the .ics document of each event by uid."""

    def __init__(
        self,
        directory: Path,
        product_id: str = DEFAULT_PRODUCT_ID,
        calendar_name: str = DEFAULT_CALENDAR_NAME,
    ):
        self.directory = Path(directory).expanduser().absolute()
        self.product_id = product_id
        self.calendar_name = calendar_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "IcsDirectory":
        return cls(
            settings.ics_dir,
            product_id=settings.product_id,
            calendar_name=settings.calendar_name,
        )

    def path_for(self, uid: str) -> Path:
        return self.directory / f"{uid}{EXTENSION}"

    def generate(self, event: Event | EventRead, status: DocumentStatus = CONFIRMED) -> Path:
        """Write the event's document, replacing any previous one.

        Returns the absolute path written. I/O errors propagate.
        """
        text = render_document(
            event,
            status,
            product_id=self.product_id,
            calendar_name=self.calendar_name,
        )
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(event.uid)
        # Bytes keep the CRLF line endings intact on every platform
        path.write_bytes(text.encode("utf-8"))
        return path

    def save(self, event: Event | EventRead, status: DocumentStatus = CONFIRMED) -> DocumentResult:
        """Like :meth:`generate`, but a failed write is logged and reported.

        The store mutation that preceded the write has already been
        committed, so callers still return it.
        """
        try:
            path = self.generate(event, status)
        except OSError as exc:
            logger.exception("Failed to write %s document for event %s", status, event.uid)
            return DocumentResult(path=None, error=str(exc))
        logger.info("Wrote %s document %s", status, path)
        return DocumentResult(path=path)

    def read(self, uid: str) -> str | None:
        """Return the stored document for ``uid``, or None if there is none."""
        path = self.path_for(uid)
        if not path.is_file():
            return None
        return path.read_bytes().decode("utf-8")

    def merged(self, events: Iterable[Event | EventRead]) -> str:
        """One calendar holding the stored documents of ``events``.

        Events without a document on disk are left out.
        """
        contents = []
        for event in events:
            text = self.read(event.uid)
            if text is None:
                logger.debug("No document for %s, skipping", event.uid)
                continue
            contents.append(text)
        return merge_documents(
            contents,
            product_id=self.product_id,
            calendar_name=self.calendar_name,
        )
