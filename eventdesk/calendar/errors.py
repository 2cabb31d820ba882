"""Errors raised by the event store and the import/export layer."""


class EventValidationError(ValueError):
    """A create or update payload is missing a required field or is malformed."""


class UnsupportedFormatError(ValueError):
    """An import payload is neither JSON nor an iCalendar document."""
