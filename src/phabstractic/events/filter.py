"""
Event filters.

A filter holds an event-shaped pattern and decides whether an incoming event
matches it. Three matching modes:

Loose (default):
    Match if ANY of: identifiers equal; the pattern is empty (wildcard); a
    set provenance field (target, function, class, namespace) equals the
    event's; pattern and event share a tag; they share a category.

Strict (options.strict=True):
    Every provenance field must equal the event's (None and "" compare
    equal) AND every pattern tag and category must be present on the event.
    The event may carry more tags/categories than the pattern.

Predicate (enable_function):
    A callable replaces both modes: matches iff predicate(event) is truthy.

Filters compare and hash by identity so they can key a Conduit's routing
table even though their pattern is mutable.
"""

from typing import Any, Callable, ClassVar, Iterable, Mapping, Optional, Protocol, runtime_checkable

from phabstractic.events.event import PROVENANCE_FIELDS, GenericEvent, is_event
from phabstractic.features import IdentityGenerator, Options, OptionsLike, resolve_options

Predicate = Callable[[GenericEvent], Any]


@runtime_checkable
class IFilter(Protocol):
    """Anything that can decide whether an event applies."""

    def is_event_applicable(self, event: Any) -> bool: ...


class FilterPattern(GenericEvent):
    """Event-shaped pattern carried by a Filter."""

    IDENTITY_PREFIX: ClassVar[str] = "EventFilter"


def _normalize(value: Any) -> Any:
    if isinstance(value, str) and value == "":
        return None
    return value


def _is_set(value: Any) -> bool:
    return _normalize(value) is not None


class Filter:
    """
    Event filter.

    Example:
        >>> saves = Filter(function="save", tags={"io"})
        >>> saves.is_event_applicable(GenericEvent(function="save"))
        True
        >>> strict = Filter(function="save", tags={"io"}, options={"strict": True})
        >>> strict.is_event_applicable(GenericEvent(function="save"))
        False
    """

    def __init__(
        self,
        target: Any = None,
        function: Optional[str] = None,
        class_name: Optional[str] = None,
        namespace: Optional[str] = None,
        tags: Iterable[str] = (),
        categories: Iterable[str] = (),
        *,
        predicate: Optional[Predicate] = None,
        options: OptionsLike = None,
        identity: Optional[IdentityGenerator] = None,
        identifier: str = "",
    ):
        self.options: Options = resolve_options(options)
        self._pattern = FilterPattern(
            identifier=identifier,
            target=target,
            function=function,
            class_name=class_name,
            namespace=namespace,
            tags=set(tags),
            categories=set(categories),
            identity=identity,
        )
        self._predicate: Optional[Predicate] = None
        if predicate is not None:
            self.enable_function(predicate)

    @classmethod
    def from_event(
        cls,
        event: GenericEvent,
        *,
        predicate: Optional[Predicate] = None,
        options: OptionsLike = None,
    ) -> "Filter":
        """
        Build a filter whose pattern is a copy of event, identifier included.

        A strict filter built this way with include_identifier=True matches
        only that very event.
        """
        return cls(
            event.target,
            event.function,
            event.class_name,
            event.namespace,
            event.tags,
            event.categories,
            predicate=predicate,
            options=options,
            identifier=event.identifier,
        )

    @property
    def pattern(self) -> FilterPattern:
        return self._pattern

    # ------------------------------------------------------------------
    # Pattern accessors
    # ------------------------------------------------------------------

    def get_identifier(self) -> str:
        return self._pattern.identifier

    def get_target(self) -> Any:
        return self._pattern.target

    def set_target(self, target: Any) -> None:
        self._pattern.target = target

    def get_function(self) -> Optional[str]:
        return self._pattern.function

    def set_function(self, function: Optional[str]) -> None:
        self._pattern.function = function

    def get_class(self) -> Optional[str]:
        return self._pattern.class_name

    def set_class(self, class_name: Optional[str]) -> None:
        self._pattern.class_name = class_name

    def get_namespace(self) -> Optional[str]:
        return self._pattern.namespace

    def set_namespace(self, namespace: Optional[str]) -> None:
        self._pattern.namespace = namespace

    def get_tags(self) -> list[str]:
        return self._pattern.get_tags()

    def add_tag(self, tag: str) -> None:
        self._pattern.add_tag(tag)

    def set_tags(self, tags: Iterable[str]) -> None:
        self._pattern.set_tags(tags)

    def remove_tag(self, tag: str) -> None:
        self._pattern.remove_tag(tag)

    def is_tag(self, tag: str) -> bool:
        return self._pattern.is_tag(tag)

    def get_categories(self) -> list[str]:
        return self._pattern.get_categories()

    def add_category(self, category: str) -> None:
        self._pattern.add_category(category)

    def set_categories(self, categories: Iterable[str]) -> None:
        self._pattern.set_categories(categories)

    def remove_category(self, category: str) -> None:
        self._pattern.remove_category(category)

    def is_category(self, category: str) -> bool:
        return self._pattern.is_category(category)

    # ------------------------------------------------------------------
    # Pattern state
    # ------------------------------------------------------------------

    def get_state(self) -> dict[str, Any]:
        """Pattern snapshot; like an event's state without stop/force."""
        state = self._pattern.get_state()
        del state["fields"]["stop"]
        del state["fields"]["force"]
        return state

    def set_state_with_event(self, event: GenericEvent, morph: bool = True) -> None:
        """Copy an event's provenance fields, tags and categories into the pattern."""
        self._pattern.set_state_with_event(event, morph=morph)
        # Pattern never carries propagation flags
        self._pattern.stopped = False
        self._pattern.unstoppable = False

    def set_state_with_filter(self, other: "Filter", morph: bool = True) -> None:
        self.set_state_with_event(other.pattern, morph=morph)

    def set_state_with_array(self, state: Mapping[str, Any], morph: bool = True) -> None:
        self._pattern.set_state_with_array(state, morph=morph)
        self._pattern.stopped = False
        self._pattern.unstoppable = False

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    def make_strict(self) -> None:
        self.options.strict = True

    def loosen_up(self) -> None:
        self.options.strict = False

    def is_strict(self) -> bool:
        return self.options.strict

    def enable_function(self, predicate: Predicate) -> None:
        """Replace strict/loose matching with a predicate over the event."""
        if not callable(predicate):
            raise TypeError(f"Filter predicate must be callable, got {type(predicate).__name__}")
        self._predicate = predicate

    def disable_function(self) -> None:
        self._predicate = None

    def get_function_predicate(self) -> Optional[Predicate]:
        return self._predicate

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def is_wildcard(self) -> bool:
        """True when the pattern has no provenance fields, tags or categories."""
        pattern = self._pattern
        if any(_is_set(getattr(pattern, name)) for name in PROVENANCE_FIELDS):
            return False
        return not pattern.tags and not pattern.categories

    def is_event_applicable(self, event: Any) -> bool:
        """
        Whether event matches this filter under the current mode.

        Non-events never match.
        """
        if not is_event(event):
            return False
        if self._predicate is not None:
            return bool(self._predicate(event))
        if self.options.strict:
            return self.is_strictly_applicable(event)
        return self.is_loosely_applicable(event)

    def is_strictly_applicable(self, event: GenericEvent, include_identifier: bool = False) -> bool:
        pattern = self._pattern
        if include_identifier and pattern.identifier != event.identifier:
            return False
        for name in PROVENANCE_FIELDS:
            if _normalize(getattr(pattern, name)) != _normalize(getattr(event, name)):
                return False
        return pattern.tags <= event.tags and pattern.categories <= event.categories

    def is_loosely_applicable(self, event: GenericEvent) -> bool:
        pattern = self._pattern
        if pattern.identifier == event.identifier:
            return True
        if self.is_wildcard():
            return True
        for name in PROVENANCE_FIELDS:
            expected = getattr(pattern, name)
            if _is_set(expected) and expected == getattr(event, name):
                return True
        if pattern.tags & event.tags:
            return True
        return bool(pattern.categories & event.categories)

    def __repr__(self) -> str:
        mode = "predicate" if self._predicate is not None else ("strict" if self.is_strict() else "loose")
        return f"Filter(identifier={self.get_identifier()!r}, mode={mode})"
