"""
Publisher/observer pattern.

Publishers hold a set of observers and announce their state to them;
observers hold the set of publishers they listen to. Links are always kept
symmetric: attaching an observer to a publisher also records the publisher on
the observer, and detaching undoes both sides. Both operations are idempotent.

Instead of mixing behaviour into every class, link bookkeeping lives in two
small owned helpers (PublisherLinks, ObserverLinks). Observer and Publisher are
thin classes forwarding to them; a class that plays both roles (Aggregator)
inherits Observer and owns a PublisherLinks.

The notify contract is uniform across the event system:

    observer.notify_observer(publisher, state) -> bool

where the return value says whether the state was recognised and handled.
"""

from typing import Any, Iterator, List, Optional, Protocol, runtime_checkable

from phabstractic.system import LoggerFactory

logger = LoggerFactory.get_logger()


class InvalidObserverError(TypeError):
    """Object cannot take part in a publisher/observer link."""

    pass


@runtime_checkable
class IObserver(Protocol):
    """Anything that can be notified of a publisher's state."""

    def notify_observer(self, publisher: Any, state: Any) -> bool:
        """
        Receive a state announced by publisher.

        Returns:
            True if the state was recognised and handled, False otherwise.
            Unrecognised states are never an error.
        """
        ...


@runtime_checkable
class IPublisher(Protocol):
    """Anything observers can subscribe to."""

    def attach_observer(self, observer: IObserver) -> None: ...

    def detach_observer(self, observer: IObserver) -> None: ...


class _IdentitySet:
    """Insertion-ordered set comparing members by identity."""

    def __init__(self) -> None:
        self._items: List[Any] = []

    def __contains__(self, item: Any) -> bool:
        return any(existing is item for existing in self._items)

    def __iter__(self) -> Iterator[Any]:
        # Snapshot so members may detach themselves while being iterated
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: Any) -> bool:
        if item in self:
            return False
        self._items.append(item)
        return True

    def remove(self, item: Any) -> bool:
        for index, existing in enumerate(self._items):
            if existing is item:
                del self._items[index]
                return True
        return False

    def clear(self) -> None:
        self._items.clear()

    def as_list(self) -> List[Any]:
        return list(self._items)


class PublisherLinks:
    """Observer set owned by a publisher."""

    def __init__(self, owner: Any):
        self._owner = owner
        self._observers = _IdentitySet()

    def attach(self, observer: IObserver) -> None:
        if not isinstance(observer, IObserver):
            raise InvalidObserverError(f"{type(observer).__name__} does not implement notify_observer()")
        if self._observers.add(observer):
            logger.debug(
                "publisher.observer_attached",
                publisher=type(self._owner).__name__,
                observer=type(observer).__name__,
                total_observers=len(self._observers),
            )
            attach_publisher = getattr(observer, "attach_publisher", None)
            if attach_publisher is not None:
                attach_publisher(self._owner)

    def detach(self, observer: IObserver) -> None:
        if self._observers.remove(observer):
            logger.debug(
                "publisher.observer_detached",
                publisher=type(self._owner).__name__,
                observer=type(observer).__name__,
                total_observers=len(self._observers),
            )
            detach_publisher = getattr(observer, "detach_publisher", None)
            if detach_publisher is not None:
                detach_publisher(self._owner)

    def unlink_all(self) -> None:
        for observer in self._observers:
            self.detach(observer)

    def observers(self) -> List[IObserver]:
        return self._observers.as_list()

    def announce(self, state: Any) -> int:
        """Notify every observer of state; returns how many reported it handled."""
        handled = 0
        for observer in self._observers:
            if observer.notify_observer(self._owner, state):
                handled += 1
        return handled


class ObserverLinks:
    """Publisher set owned by an observer."""

    def __init__(self, owner: Any):
        self._owner = owner
        self._publishers = _IdentitySet()

    def attach(self, publisher: IPublisher) -> None:
        if not isinstance(publisher, IPublisher):
            raise InvalidObserverError(f"{type(publisher).__name__} does not implement attach_observer()")
        if self._publishers.add(publisher):
            publisher.attach_observer(self._owner)

    def detach(self, publisher: IPublisher) -> None:
        if self._publishers.remove(publisher):
            publisher.detach_observer(self._owner)

    def unlink_all(self) -> None:
        for publisher in self._publishers:
            self.detach(publisher)

    def publishers(self) -> List[IPublisher]:
        return self._publishers.as_list()


class Observer:
    """
    Base for event-system observers.

    Subclasses override notify_observer(); the base implementation recognises
    nothing and returns False.
    """

    def __init__(self) -> None:
        self._publisher_links = ObserverLinks(self)

    def attach_publisher(self, publisher: IPublisher) -> None:
        self._publisher_links.attach(publisher)

    def detach_publisher(self, publisher: IPublisher) -> None:
        self._publisher_links.detach(publisher)

    def unlink_from_publishers(self) -> None:
        self._publisher_links.unlink_all()

    def get_publishers(self) -> List[IPublisher]:
        return self._publisher_links.publishers()

    def notify_observer(self, publisher: Any, state: Any) -> bool:
        return False


class Publisher:
    """
    Basic state publisher.

    Setting a state stores it and announces it to every attached observer
    synchronously, in attachment order.

    Example:
        >>> source = Publisher()
        >>> source.attach_observer(conduit)
        >>> source.set_state(GenericEvent(function="save"))  # conduit notified
    """

    def __init__(self, state: Optional[Any] = None):
        self._observer_links = PublisherLinks(self)
        self._state = state

    def attach_observer(self, observer: IObserver) -> None:
        self._observer_links.attach(observer)

    def detach_observer(self, observer: IObserver) -> None:
        self._observer_links.detach(observer)

    def unlink_from_observers(self) -> None:
        self._observer_links.unlink_all()

    def get_observers(self) -> List[IObserver]:
        return self._observer_links.observers()

    def set_state(self, state: Any) -> None:
        self.set_state_object(state)

    def set_state_object(self, state: Any) -> bool:
        self._state = state
        self.announce()
        return True

    def get_state(self) -> Any:
        return self._state

    def get_state_object(self) -> Any:
        return self._state

    def announce(self) -> int:
        return self._observer_links.announce(self._state)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self._state!r}, observers={len(self.get_observers())})"
