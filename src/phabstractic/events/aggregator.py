"""
Aggregator: merges several publishers into one filtered stream.

An aggregator observes any number of publishers and is itself a publisher.
Every event it receives is checked against its head filter; accepted events
become its state and are re-announced to its own observers. With no head
filter every event is accepted.
"""

from typing import Any, Iterable, List, Optional

from phabstractic.events.event import GenericEvent, is_event
from phabstractic.events.filter import IFilter
from phabstractic.patterns import IObserver, IPublisher, Observer, PublisherLinks
from phabstractic.system import LoggerFactory

logger = LoggerFactory.get_logger()


class Aggregator(Observer):
    """
    Filtered fan-in publisher.

    Example:
        >>> hub = Aggregator(Filter(categories={"storage"}), publishers=[disk, cache])
        >>> hub.attach_observer(conduit)
        >>> disk.set_state(GenericEvent(categories={"storage"}))  # reaches conduit

    notify_observer() and set_state_object() return True for any event,
    whether or not the head filter accepted it, and False for non-events.
    """

    def __init__(self, event_filter: Optional[IFilter] = None, publishers: Iterable[IPublisher] = ()):
        super().__init__()
        self._observer_links = PublisherLinks(self)
        self._filter: Optional[IFilter] = event_filter
        self._state: Optional[GenericEvent] = None
        for publisher in publishers:
            self.attach_publisher(publisher)

    # ------------------------------------------------------------------
    # Head filter
    # ------------------------------------------------------------------

    def get_filter(self) -> Optional[IFilter]:
        return self._filter

    def set_filter(self, event_filter: IFilter) -> None:
        self._filter = event_filter

    def remove_filter(self) -> None:
        self._filter = None

    # ------------------------------------------------------------------
    # Publisher side
    # ------------------------------------------------------------------

    def attach_observer(self, observer: IObserver) -> None:
        self._observer_links.attach(observer)

    def detach_observer(self, observer: IObserver) -> None:
        self._observer_links.detach(observer)

    def unlink_from_observers(self) -> None:
        self._observer_links.unlink_all()

    def get_observers(self) -> List[IObserver]:
        return self._observer_links.observers()

    def get_state(self) -> Optional[GenericEvent]:
        return self._state

    def get_state_object(self) -> Optional[GenericEvent]:
        return self._state

    def set_state(self, state: Any) -> bool:
        return self.set_state_object(state)

    def set_state_object(self, state: Any) -> bool:
        if not is_event(state):
            return False
        if self._filter is not None and not self._filter.is_event_applicable(state):
            logger.debug("aggregator.event_rejected", event_id=state.identifier)
            return True
        self._state = state
        self.announce()
        return True

    def announce(self) -> int:
        handled = self._observer_links.announce(self._state)
        logger.debug(
            "aggregator.announced",
            event_id=getattr(self._state, "identifier", None),
            observer_count=len(self.get_observers()),
            handled=handled,
        )
        return handled

    # ------------------------------------------------------------------
    # Observer side
    # ------------------------------------------------------------------

    def notify_observer(self, publisher: Any, state: Any) -> bool:
        return self.set_state_object(state)

    def __repr__(self) -> str:
        return f"Aggregator(filter={self._filter!r}, publishers={len(self.get_publishers())}, observers={len(self.get_observers())})"
