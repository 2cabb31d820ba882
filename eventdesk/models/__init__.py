from eventdesk.models.event import (
    BatchResult,
    Event,
    EventCreate,
    EventRead,
    EventStatus,
    EventUpdate,
)

__all__ = ["Event", "EventCreate", "EventUpdate", "EventRead", "EventStatus", "BatchResult"]
