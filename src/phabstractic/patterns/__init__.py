"""Design-pattern scaffolding shared by the event system."""

from phabstractic.patterns.observer import (
    InvalidObserverError,
    IObserver,
    IPublisher,
    Observer,
    ObserverLinks,
    Publisher,
    PublisherLinks,
)

__all__ = [
    "IObserver",
    "IPublisher",
    "Observer",
    "Publisher",
    "ObserverLinks",
    "PublisherLinks",
    "InvalidObserverError",
]
