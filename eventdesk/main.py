"""Event Desk dashboard web application."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventdesk.calendar.documents import IcsDirectory
from eventdesk.calendar.store import EventStore
from eventdesk.core.config import settings
from eventdesk.core.logging_setup import configure_logging
from eventdesk.routes import dashboard, events

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    configure_logging(debug=settings.debug, log_dir=settings.log_dir)
    logger.info("Starting %s", settings.app_name)
    store = EventStore.open(
        settings.resolved_database_url,
        echo=settings.debug,
        uid_domain=settings.uid_domain,
    )
    app.state.store = store
    app.state.documents = IcsDirectory.from_settings(settings)
    logger.info("Writing .ics documents to %s", app.state.documents.directory)
    yield
    # Shutdown
    store.engine.dispose()
    logger.info("%s shut down", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Local calendar event manager with per-event .ics documents",
    version="0.1.0",
    lifespan=lifespan,
)

# Local-only server; any origin may call the API
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(events.router)
app.include_router(dashboard.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


def run() -> None:
    """Serve the dashboard at http://<host>:<port>."""
    uvicorn.run(app, host=settings.host, port=settings.port)
