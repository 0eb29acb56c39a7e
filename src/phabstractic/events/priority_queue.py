"""
Handler priority queue.

An ordered collection of observers keyed by priority. Propagation walks the
queue in ascending priority (lower value runs first; equal priorities run in
insertion order) and checks the event's propagation state before every
observer, so a handler calling event.stop() prevents all later handlers from
running unless the event is unstoppable.

The queue is itself an observer: attached to a publisher (or registered in a
Conduit) it propagates every event it is notified of.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

from phabstractic.events.errors import EmptyQueueError
from phabstractic.events.event import GenericEvent, is_event
from phabstractic.events.handler import Handler
from phabstractic.features import Options, OptionsLike, resolve_options
from phabstractic.patterns import InvalidObserverError, IObserver, Observer
from phabstractic.system import LoggerFactory

logger = LoggerFactory.get_logger()


@dataclass(frozen=True)
class Priority:
    """Queue entry: an observer and its priority."""

    data: IObserver
    priority: Union[int, float] = 0
    sequence: int = field(default=0, compare=False, repr=False)

    def get_data(self) -> IObserver:
        return self.data

    def get_priority(self) -> Union[int, float]:
        return self.priority


class PriorityOrder(Enum):
    """Comparison used by HandlerPriorityQueue.index()."""

    EQUAL = "equal"
    HIGHER = "higher"  # priority >= given
    LOWER = "lower"  # priority <= given


QueueItem = Union[Priority, Tuple[Any, Union[int, float]]]


class HandlerPriorityQueue(Observer):
    """
    Priority-ordered observer chain.

    Example:
        >>> queue = HandlerPriorityQueue()
        >>> queue.insert(Handler(function=validate), priority=1)
        >>> queue.insert(Handler(function=persist), priority=5)
        >>> queue.propagate(publisher, GenericEvent())  # validate, then persist
        2

    Options:
        strict: top/bottom/pop/pull on an empty queue raise EmptyQueueError
                instead of returning None
        isolate_errors: handler exceptions are logged and propagation
                continues; otherwise they propagate to the caller
    """

    def __init__(self, items: Optional[Iterable[QueueItem]] = None, options: OptionsLike = None):
        super().__init__()
        self.options: Options = resolve_options(options)
        self._entries: List[Priority] = []
        self._sorted_cache: Optional[List[Priority]] = None
        self._sequence = itertools.count()

        for item in items or ():
            if isinstance(item, Priority):
                self.push(item)
            elif isinstance(item, tuple) and len(item) == 2:
                self.insert(item[0], item[1])
            else:
                raise InvalidObserverError(f"Cannot queue {type(item).__name__}; expected Priority or (observer, priority)")

    # ------------------------------------------------------------------
    # Insertion & removal
    # ------------------------------------------------------------------

    def insert(self, observer: Any, priority: Union[int, float] = 0) -> Priority:
        """
        Queue observer at priority.

        Plain callables are wrapped in a Handler.

        Raises:
            InvalidObserverError: observer is neither an observer nor callable
        """
        if not isinstance(observer, IObserver):
            if not callable(observer):
                raise InvalidObserverError(f"{type(observer).__name__} is not an observer or callable")
            observer = Handler.build_from_callable(observer)
        return self.push(Priority(observer, priority))

    def push(self, entry: Priority) -> Priority:
        if not isinstance(entry.data, IObserver):
            raise InvalidObserverError(f"{type(entry.data).__name__} does not implement notify_observer()")
        queued = Priority(entry.data, entry.priority, next(self._sequence))
        self._entries.append(queued)
        self._sorted_cache = None
        logger.debug(
            "handler_queue.inserted",
            observer=type(queued.data).__name__,
            priority=queued.priority,
            total_entries=len(self._entries),
        )
        return queued

    def remove(self, entry: Priority) -> bool:
        """Remove a specific entry (as returned by insert/push or iteration)."""
        for index, existing in enumerate(self._entries):
            if existing is entry:
                del self._entries[index]
                self._sorted_cache = None
                return True
        return False

    def delete(self, observer: IObserver) -> bool:
        """Remove the first entry (in queue order) holding observer."""
        entry = self.retrieve_priority(observer)
        if entry is None:
            return False
        return self.remove(entry)

    def delete_priority(self, priority: Union[int, float]) -> bool:
        """Remove every entry at priority; True if any were removed."""
        remaining = [entry for entry in self._entries if entry.priority != priority]
        removed = len(remaining) != len(self._entries)
        if removed:
            self._entries = remaining
            self._sorted_cache = None
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self._sorted_cache = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def get_list(self) -> List[Priority]:
        """Entries in propagation order."""
        if self._sorted_cache is None:
            self._sorted_cache = sorted(self._entries, key=lambda entry: (entry.priority, entry.sequence))
        return list(self._sorted_cache)

    def __iter__(self) -> Iterator[Priority]:
        return iter(self.get_list())

    def __len__(self) -> int:
        return len(self._entries)

    def count(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def retrieve_priority(self, observer: IObserver) -> Optional[Priority]:
        for entry in self.get_list():
            if entry.data is observer:
                return entry
        return None

    def index(self, priority: Union[int, float], order: PriorityOrder = PriorityOrder.EQUAL) -> List[IObserver]:
        """Observers whose priority is equal to, at least, or at most priority."""
        if order is PriorityOrder.HIGHER:
            selected = [entry for entry in self.get_list() if entry.priority >= priority]
        elif order is PriorityOrder.LOWER:
            selected = [entry for entry in self.get_list() if entry.priority <= priority]
        else:
            selected = [entry for entry in self.get_list() if entry.priority == priority]
        return [entry.data for entry in selected]

    def _empty(self, operation: str) -> None:
        if self.options.strict:
            raise EmptyQueueError(f"{operation}() on empty handler queue")
        return None

    def top(self) -> Optional[Priority]:
        """First entry to run."""
        if not self._entries:
            return self._empty("top")
        return self.get_list()[0]

    peek = top

    def bottom(self) -> Optional[Priority]:
        """Last entry to run."""
        if not self._entries:
            return self._empty("bottom")
        return self.get_list()[-1]

    def pop(self) -> Optional[IObserver]:
        """Remove and return the first observer to run."""
        entry = self.top()
        if entry is None:
            return None
        self.remove(entry)
        return entry.data

    def pull(self) -> Optional[IObserver]:
        """Remove and return the last observer to run."""
        entry = self.bottom()
        if entry is None:
            return None
        self.remove(entry)
        return entry.data

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def propagate(self, publisher: Any, event: GenericEvent) -> int:
        """
        Deliver event to each observer in order until it stops propagating.

        Returns:
            Number of observers invoked
        """
        if not is_event(event):
            return 0
        entries = self.get_list()
        invoked = 0
        errors = 0
        for entry in entries:
            if not event.is_propagating():
                logger.debug(
                    "handler_queue.propagation_stopped",
                    event_id=event.identifier,
                    invoked=invoked,
                    skipped=len(entries) - invoked,
                )
                break
            invoked += 1
            try:
                entry.data.notify_observer(publisher, event)
            except Exception as exc:
                if not self.options.isolate_errors:
                    raise
                errors += 1
                logger.error(
                    "handler_queue.handler_error",
                    event_id=event.identifier,
                    handler=repr(entry.data),
                    priority=entry.priority,
                    error=str(exc),
                )
        logger.debug(
            "handler_queue.propagated",
            event_id=event.identifier,
            handler_count=len(entries),
            invoked=invoked,
            errors=errors,
        )
        return invoked

    def notify_observer(self, publisher: Any, state: Any) -> bool:
        if not is_event(state):
            return False
        self.propagate(publisher, state)
        return True

    def __repr__(self) -> str:
        return f"HandlerPriorityQueue(entries={len(self._entries)}, strict={self.options.strict})"
