"""Exceptions raised by the event system.

Only configuration mistakes raise. A non-event state reaching a notify entry
point is an expected outcome of the general publisher/observer contract and is
reported by returning False, never by raising.
"""

from phabstractic.patterns.observer import InvalidObserverError


class EventError(Exception):
    """Base exception for event system errors."""

    pass


class HandlerBindingError(EventError, ValueError):
    """Handler bound to a method that does not exist on its object or class."""

    pass


class EmptyQueueError(EventError, IndexError):
    """Top/bottom/pop access on an empty handler queue in strict mode."""

    pass


__all__ = [
    "EventError",
    "HandlerBindingError",
    "EmptyQueueError",
    "InvalidObserverError",
]
