"""Unit tests for Actor."""

from unittest.mock import Mock

import pytest

from phabstractic.events.actor import Actor
from phabstractic.events.event import GenericEvent
from phabstractic.events.filter import Filter
from phabstractic.events.handler import Handler
from phabstractic.patterns import InvalidObserverError, Publisher


@pytest.fixture
def callback():
    return Mock(return_value="done")


@pytest.fixture
def actor(callback):
    return Actor(Filter(function="save"), Handler(function=callback))


class TestActor:
    """Test filter-gated handler invocation."""

    def test_matching_event_runs_handler(self, actor, callback):
        event = GenericEvent(function="save")

        assert actor.notify_observer(None, event) is True
        callback.assert_called_once_with(event)

    def test_rejected_event_returns_false(self, actor, callback):
        assert actor.notify_observer(None, GenericEvent(function="load")) is False
        callback.assert_not_called()

    def test_non_event_returns_false(self, actor, callback):
        assert actor.notify_observer(None, {"function": "save"}) is False
        callback.assert_not_called()

    def test_missing_filter_returns_false(self, callback):
        actor = Actor(handler=Handler(function=callback))

        assert actor.notify_observer(None, GenericEvent()) is False
        callback.assert_not_called()

    def test_missing_handler_returns_false(self):
        actor = Actor(Filter())

        assert actor.notify_observer(None, GenericEvent()) is False

    def test_returns_true_whatever_handler_reports(self):
        handler = Mock()
        handler.notify_observer.return_value = False
        actor = Actor(Filter(), handler)

        assert actor.notify_observer(None, GenericEvent()) is True
        handler.notify_observer.assert_called_once()

    def test_setters_chain(self, callback):
        event_filter = Filter()
        handler = Handler(function=callback)

        actor = Actor().set_filter(event_filter).set_handler(handler)

        assert actor.get_filter() is event_filter
        assert actor.get_handler() is handler

    def test_set_handler_rejects_non_observer(self):
        with pytest.raises(InvalidObserverError):
            Actor().set_handler("not an observer")

    def test_set_filter_rejects_non_filter(self):
        with pytest.raises(TypeError):
            Actor().set_filter(object())

    def test_publisher_integration(self, actor, callback):
        publisher = Publisher()
        publisher.attach_observer(actor)

        publisher.set_state(GenericEvent(function="save"))
        publisher.set_state(GenericEvent(function="load"))

        assert callback.call_count == 1
        assert actor.get_publishers() == [publisher]
