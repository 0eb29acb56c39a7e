"""Unit tests for IdentityGenerator."""

import pytest

from phabstractic.features import IdentityGenerator


@pytest.fixture
def identity():
    return IdentityGenerator()


class TestIdentityGenerator:
    """Test prefixed monotonic identifiers."""

    def test_counts_from_one(self, identity):
        assert identity.next_identity("GenericEvent") == "GenericEvent1"
        assert identity.next_identity("GenericEvent") == "GenericEvent2"

    def test_prefixes_count_independently(self, identity):
        identity.next_identity("GenericEvent")
        identity.next_identity("GenericEvent")

        assert identity.next_identity("EventFilter") == "EventFilter1"

    def test_custom_start(self):
        assert IdentityGenerator(start=100).next_identity("X") == "X100"

    def test_empty_prefix(self, identity):
        assert identity.next_identity() == "1"

    def test_reset_single_prefix(self, identity):
        identity.next_identity("A")
        identity.next_identity("B")

        identity.reset("A")

        assert identity.next_identity("A") == "A1"
        assert identity.next_identity("B") == "B2"

    def test_reset_all(self, identity):
        identity.next_identity("A")
        identity.next_identity("B")

        identity.reset()

        assert identity.next_identity("A") == "A1"
        assert identity.next_identity("B") == "B1"

    def test_default_is_shared(self):
        assert IdentityGenerator.default() is IdentityGenerator.default()

    def test_generators_are_independent(self):
        first = IdentityGenerator()
        second = IdentityGenerator()
        first.next_identity("A")

        assert second.next_identity("A") == "A1"
