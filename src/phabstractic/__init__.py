"""
Phabstractic - Event routing for publisher/observer systems

Public API for building event pipelines: events, filters, handlers,
priority-ordered handler queues, conduits and aggregators.
"""

from importlib.metadata import version

from phabstractic.events import (
    Actor,
    Aggregator,
    Conduit,
    Filter,
    GenericEvent,
    Handler,
    HandlerPriorityQueue,
)
from phabstractic.patterns import Publisher

try:
    __version__ = version("phabstractic")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
    "Actor",
    "Aggregator",
    "Conduit",
    "Filter",
    "GenericEvent",
    "Handler",
    "HandlerPriorityQueue",
    "Publisher",
]
