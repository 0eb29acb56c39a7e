"""
Integration test: Publisher → Aggregator → Conduit → Handler queues.

Tests the complete routing path of a state change:
1. Several publishers emit GenericEvents
2. An Aggregator merges them behind a head filter
3. A Conduit routes accepted events into per-filter priority queues
4. Handlers run in ascending priority and may stop propagation
"""

import pytest

from phabstractic import Actor, Aggregator, Conduit, Filter, GenericEvent, Handler, HandlerPriorityQueue, Publisher


class AuditLog:
    """Handler target recording what it saw."""

    def __init__(self):
        self.entries = []

    def record(self, event):
        self.entries.append((event.get_function(), event.get_tags()))


class TestEventPipeline:
    """Test end-to-end routing."""

    @pytest.fixture
    def disk(self):
        return Publisher()

    @pytest.fixture
    def network(self):
        return Publisher()

    @pytest.fixture
    def audit(self):
        return AuditLog()

    @pytest.fixture
    def calls(self):
        return []

    @pytest.fixture
    def pipeline(self, disk, network, audit, calls):
        """Aggregator accepting storage events, feeding a two-route conduit."""
        aggregator = Aggregator(Filter(categories={"storage"}), publishers=[disk, network])
        conduit = Conduit()

        writes = conduit.add_filter(Filter(tags={"write"}))
        writes.insert(lambda event: calls.append("validate"), 1)
        writes.insert(Handler(audit, "record"), 5)
        writes.insert(lambda event: calls.append("persist"), 10)

        saves = conduit.add_filter(Filter(function="save", options={"strict": True}))
        saves.insert(lambda event: calls.append("save-hook"))

        aggregator.attach_observer(conduit)
        return aggregator

    def test_accepted_event_runs_every_route(self, pipeline, disk, audit, calls):
        disk.set_state(GenericEvent(function="save", tags={"write"}, categories={"storage"}))

        assert calls == ["validate", "persist", "save-hook"]
        assert audit.entries == [("save", ["write"])]

    def test_head_filter_blocks_other_categories(self, pipeline, network, audit, calls):
        network.set_state(GenericEvent(function="save", tags={"write"}, categories={"socket"}))

        assert calls == []
        assert audit.entries == []
        assert pipeline.get_state() is None

    def test_stop_in_first_route_blocks_later_route(self, pipeline, disk, calls):
        conduit = pipeline.get_observers()[0]
        first_queue = conduit.get_handler_priority_queue(conduit.get_filters()[0])
        first_queue.insert(lambda event: event.stop(), 2)

        event = GenericEvent(function="save", tags={"write"}, categories={"storage"})
        disk.set_state(event)

        assert calls == ["validate"]
        assert event.is_stopped()

    def test_forced_event_ignores_stop(self, pipeline, disk, calls):
        conduit = pipeline.get_observers()[0]
        first_queue = conduit.get_handler_priority_queue(conduit.get_filters()[0])
        first_queue.insert(lambda event: event.stop(), 2)

        event = GenericEvent(function="save", tags={"write"}, categories={"storage"})
        event.force()
        disk.set_state(event)

        assert calls == ["validate", "persist", "save-hook"]

    def test_handlers_can_annotate_shared_event(self, disk):
        queue = HandlerPriorityQueue()
        queue.insert(lambda event: event.add_tag("seen"), 1)
        queue.insert(lambda event: event.set_data_reference({"by": sorted(event.get_tags())}), 2)
        disk.attach_observer(queue)
        event = GenericEvent()

        disk.set_state(event)

        assert event.get_data() == {"by": ["seen"]}

    def test_actor_beside_conduit(self, disk, audit):
        actor = Actor(Filter(tags={"write"}), Handler(audit, "record"))
        disk.attach_observer(actor)

        disk.set_state(GenericEvent(function="append", tags={"write"}))
        disk.set_state(GenericEvent(function="read", tags={"read"}))

        assert audit.entries == [("append", ["write"])]
