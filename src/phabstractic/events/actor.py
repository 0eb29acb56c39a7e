"""Actor: a filter and a handler acting as a single observer."""

from typing import Any, Optional

from phabstractic.events.event import is_event
from phabstractic.events.filter import IFilter
from phabstractic.patterns import InvalidObserverError, IObserver, Observer
from phabstractic.system import LoggerFactory

logger = LoggerFactory.get_logger()


class Actor(Observer):
    """
    Runs its handler for every event its filter accepts.

    notify_observer() returns False when the filter or handler is missing,
    when the state is not an event, or when the filter rejects it. Otherwise
    the handler is notified and True is returned, whatever the handler reports.

    Example:
        >>> actor = Actor(Filter(function="save"), Handler(function=audit))
        >>> publisher.attach_observer(actor)
    """

    def __init__(self, event_filter: Optional[IFilter] = None, handler: Optional[IObserver] = None):
        super().__init__()
        self._filter: Optional[IFilter] = None
        self._handler: Optional[IObserver] = None
        if event_filter is not None:
            self.set_filter(event_filter)
        if handler is not None:
            self.set_handler(handler)

    def get_filter(self) -> Optional[IFilter]:
        return self._filter

    def set_filter(self, event_filter: Optional[IFilter]) -> "Actor":
        if event_filter is not None and not isinstance(event_filter, IFilter):
            raise TypeError(f"{type(event_filter).__name__} does not implement is_event_applicable()")
        self._filter = event_filter
        return self

    def get_handler(self) -> Optional[IObserver]:
        return self._handler

    def set_handler(self, handler: Optional[IObserver]) -> "Actor":
        if handler is not None and not isinstance(handler, IObserver):
            raise InvalidObserverError(f"{type(handler).__name__} does not implement notify_observer()")
        self._handler = handler
        return self

    def notify_observer(self, publisher: Any, state: Any) -> bool:
        if self._filter is None or self._handler is None:
            return False
        if not is_event(state) or not self._filter.is_event_applicable(state):
            return False
        logger.debug("actor.triggered", event_id=state.identifier, handler=repr(self._handler))
        self._handler.notify_observer(publisher, state)
        return True
