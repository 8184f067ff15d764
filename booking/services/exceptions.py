"""
exceptions.py
-------------
Errors raised by the availability/hold engine.

Malformed dates and times are reported with django.core.exceptions.ValidationError
by the parsers in slot_utils, before they reach the engine.
"""


class BookingEngineError(Exception):
    """Base class for engine errors surfaced to callers."""


class NotFoundError(BookingEngineError):
    """Referenced service, staff, client or hold does not exist for the tenant."""


class ExpiredError(BookingEngineError):
    """The hold's expires_at has passed; the client has to pick a slot again."""


class SlotUnavailableError(BookingEngineError):
    """The slot is already taken by a booking or another session's hold."""
