"""
Conduit: routes events to handler queues by filter.

A conduit owns a routing table of filter -> HandlerPriorityQueue. For every
event it is notified of, each filter is tested independently and every queue
whose filter matches propagates the event, in table insertion order. Several
queues may fire for one event; a stop issued inside one queue is seen by the
queues that run after it because they share the event.
"""

from typing import Any, Iterable, List, Optional, Tuple, Union

from phabstractic.events.event import is_event
from phabstractic.events.filter import IFilter
from phabstractic.events.priority_queue import HandlerPriorityQueue
from phabstractic.features import Options, OptionsLike, resolve_options
from phabstractic.patterns import Observer
from phabstractic.system import LoggerFactory

logger = LoggerFactory.get_logger()

Route = Union[IFilter, Tuple[IFilter, HandlerPriorityQueue]]


class Conduit(Observer):
    """
    Filter-keyed dispatcher.

    Example:
        >>> conduit = Conduit()
        >>> conduit.add_filter(Filter(tags={"io"})).insert(Handler(function=log_io))
        >>> conduit.add_filter(Filter(function="save")).insert(Handler(function=audit), 1)
        >>> publisher.attach_observer(conduit)

    Filters are keyed by identity; registering the same filter again replaces
    its queue.
    """

    def __init__(self, routes: Iterable[Route] = (), options: OptionsLike = None):
        super().__init__()
        self.options: Options = resolve_options(options)
        self._routes: dict[IFilter, HandlerPriorityQueue] = {}
        for route in routes:
            if isinstance(route, tuple):
                self.set_filter(*route)
            else:
                self.add_filter(route)

    def add_filter(self, event_filter: IFilter) -> HandlerPriorityQueue:
        """Register event_filter with a fresh, empty queue and return the queue."""
        queue = HandlerPriorityQueue(options=self.options.model_copy())
        self.set_filter(event_filter, queue)
        return queue

    def set_filter(self, event_filter: IFilter, queue: HandlerPriorityQueue) -> None:
        if not isinstance(event_filter, IFilter):
            raise TypeError(f"{type(event_filter).__name__} does not implement is_event_applicable()")
        self._routes[event_filter] = queue
        logger.debug("conduit.filter_registered", event_filter=repr(event_filter), total_filters=len(self._routes))

    def remove_filter(self, event_filter: IFilter) -> bool:
        if self._routes.pop(event_filter, None) is None:
            return False
        logger.debug("conduit.filter_removed", event_filter=repr(event_filter), total_filters=len(self._routes))
        return True

    def get_filters(self) -> List[IFilter]:
        return list(self._routes)

    def get_handler_priority_queue(self, event_filter: IFilter) -> Optional[HandlerPriorityQueue]:
        return self._routes.get(event_filter)

    def notify_observer(self, publisher: Any, state: Any) -> bool:
        """Propagate state through every queue whose filter accepts it."""
        if not is_event(state):
            return False
        matched = 0
        for event_filter, queue in list(self._routes.items()):
            if event_filter.is_event_applicable(state):
                matched += 1
                queue.notify_observer(publisher, state)
        logger.debug(
            "conduit.routed",
            event_id=state.identifier,
            filter_count=len(self._routes),
            matched=matched,
        )
        return True

    def __len__(self) -> int:
        return len(self._routes)
