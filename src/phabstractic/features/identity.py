"""
Identity generation for events and filters.

Identifiers are a prefix followed by a monotonic counter, e.g. "GenericEvent1",
"EventFilter7". Each prefix owns an independent counter. Components take the
generator as a constructor argument; when none is given they share the
process-wide default instance.
"""

import itertools
from typing import ClassVar, Iterator, Optional


class IdentityGenerator:
    """
    Counter service handing out prefixed unique identifiers.

    Example:
        >>> ids = IdentityGenerator()
        >>> ids.next_identity("GenericEvent")
        'GenericEvent1'
        >>> ids.next_identity("GenericEvent")
        'GenericEvent2'
        >>> ids.next_identity("EventFilter")
        'EventFilter1'

    Thread Safety: NOT thread-safe (dispatch is single-threaded)
    """

    _default: ClassVar[Optional["IdentityGenerator"]] = None

    def __init__(self, start: int = 1):
        self._start = start
        self._counters: dict[str, Iterator[int]] = {}

    def next_identity(self, prefix: str = "") -> str:
        """Return the next identifier for prefix."""
        counter = self._counters.get(prefix)
        if counter is None:
            counter = itertools.count(self._start)
            self._counters[prefix] = counter
        return f"{prefix}{next(counter)}"

    def reset(self, prefix: Optional[str] = None) -> None:
        """Restart one prefix's counter, or all of them."""
        if prefix is None:
            self._counters.clear()
        else:
            self._counters.pop(prefix, None)

    @classmethod
    def default(cls) -> "IdentityGenerator":
        """Process-wide shared generator."""
        if cls._default is None:
            cls._default = cls()
        return cls._default
