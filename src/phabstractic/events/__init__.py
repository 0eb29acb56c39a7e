"""
Event routing.

Exports:
    - GenericEvent: Universal event with provenance, payload, tags and stop flags
    - Filter: Loose, strict or predicate matching against an event pattern
    - Handler: Observer binding events to callables, methods or functions
    - HandlerPriorityQueue: Ascending-priority observer chain
    - Actor: Filter + handler as one observer
    - Conduit: Filter-keyed router over handler queues
    - Aggregator: Filtered fan-in publisher
"""

from phabstractic.events.actor import Actor
from phabstractic.events.aggregator import Aggregator
from phabstractic.events.conduit import Conduit
from phabstractic.events.errors import EmptyQueueError, EventError, HandlerBindingError, InvalidObserverError
from phabstractic.events.event import GenericEvent, is_event
from phabstractic.events.filter import Filter, FilterPattern, IFilter
from phabstractic.events.handler import (
    UNHANDLED,
    BoundMethodTarget,
    CallableTarget,
    FunctionTarget,
    Handled,
    Handler,
    HandlerResult,
    StaticMethodTarget,
    Unhandled,
)
from phabstractic.events.priority_queue import HandlerPriorityQueue, Priority, PriorityOrder

__all__ = [
    # Events
    "GenericEvent",
    "is_event",
    # Filtering
    "Filter",
    "FilterPattern",
    "IFilter",
    # Handlers
    "Handler",
    "Handled",
    "Unhandled",
    "UNHANDLED",
    "HandlerResult",
    "CallableTarget",
    "BoundMethodTarget",
    "StaticMethodTarget",
    "FunctionTarget",
    # Routing
    "HandlerPriorityQueue",
    "Priority",
    "PriorityOrder",
    "Actor",
    "Conduit",
    "Aggregator",
    # Errors
    "EventError",
    "HandlerBindingError",
    "EmptyQueueError",
    "InvalidObserverError",
]
