"""
Generic event - the state object flowing through filters, queues and handlers.

An event records where a state change came from (target object, function,
class, namespace), what it carries (data), how it is classified (tags and
categories) and whether it should keep propagating (stopped/unstoppable).

Shared ownership:
    Every component receiving an event receives the same object. Handlers
    mutate it in place (stop(), add_tag(), set_data()) and those changes are
    visible to every later handler in the chain and to the publisher once
    dispatch returns. Events are therefore deliberately NOT frozen, unlike
    value-style models; only the identifier is immutable.

Propagation flags:
    stop() marks the event stopped. force() makes it unstoppable: an
    unstoppable event may still report is_stopped() == True, but propagation
    code checks is_propagating(), which ignores the stop flag for unstoppable
    events.
"""

import copy
from typing import Any, ClassVar, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from phabstractic.features.identity import IdentityGenerator

# Provenance fields compared by filters, in state-dictionary order
PROVENANCE_FIELDS = ("target", "function", "class_name", "namespace")

# Wire/state dictionary keys -> model attribute names
_STATE_KEY_ALIASES = {
    "class": "class_name",
    "stop": "stopped",
    "force": "unstoppable",
}

_SETTABLE_FIELDS = ("target", "data", "class_name", "function", "namespace", "stopped", "unstoppable")

_FIELD_DEFAULTS: dict[str, Any] = {
    "target": None,
    "data": None,
    "class_name": None,
    "function": None,
    "namespace": None,
    "stopped": False,
    "unstoppable": False,
}


def is_event(state: Any) -> bool:
    """True if state is an event the event system recognises."""
    return isinstance(state, GenericEvent)


class GenericEvent(BaseModel):
    """
    Universal event.

    Identifiers are generated at construction from an IdentityGenerator using
    IDENTITY_PREFIX ("GenericEvent1", "GenericEvent2", ...). Pass
    ``identity=`` to use a specific generator, or ``identifier=`` to adopt an
    existing identifier.

    Example:
        >>> event = GenericEvent(
        ...     target=document,
        ...     function="save",
        ...     class_name="Document",
        ...     namespace="app.documents",
        ...     data={"path": "/tmp/a.txt"},
        ...     tags={"io", "write"},
        ... )
        >>> event.add_tag("audit")
        >>> event.stop()
        >>> event.is_propagating()
        False
    """

    IDENTITY_PREFIX: ClassVar[str] = "GenericEvent"

    identifier: str = Field(default="", frozen=True, description="Unique, immutable identifier")
    target: Any = Field(default=None, description="Originating object")
    function: Optional[str] = Field(default=None, description="Originating function")
    class_name: Optional[str] = Field(default=None, alias="class", description="Originating class")
    namespace: Optional[str] = Field(default=None, description="Originating namespace/module")
    data: Any = Field(default=None, description="Opaque payload")
    tags: set[str] = Field(default_factory=set)
    categories: set[str] = Field(default_factory=set)
    stopped: bool = False
    unstoppable: bool = False

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def _assign_identifier(cls, data: Any) -> Any:
        """Generate an identifier unless one was supplied."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        identity = data.pop("identity", None)
        if not data.get("identifier"):
            generator = identity if identity is not None else IdentityGenerator.default()
            data["identifier"] = generator.next_identity(cls.IDENTITY_PREFIX)
        return data

    # ------------------------------------------------------------------
    # Identity & provenance
    # ------------------------------------------------------------------

    def get_identifier(self) -> str:
        return self.identifier

    def get_target(self) -> Any:
        return self.target

    def set_target(self, target: Any) -> None:
        self.target = target

    def get_function(self) -> Optional[str]:
        return self.function

    def set_function(self, function: Optional[str]) -> None:
        self.function = function

    def get_class(self) -> Optional[str]:
        return self.class_name

    def set_class(self, class_name: Optional[str]) -> None:
        self.class_name = class_name

    def get_namespace(self) -> Optional[str]:
        return self.namespace

    def set_namespace(self, namespace: Optional[str]) -> None:
        self.namespace = namespace

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    def get_data(self) -> Any:
        """Stored payload (the stored object itself, not a copy)."""
        return self.data

    def set_data(self, data: Any) -> None:
        """Store a shallow copy of data; later changes to the caller's object are not seen."""
        self.data = copy.copy(data)

    def set_data_reference(self, data: Any) -> None:
        """Store data itself; the source's in-place mutations stay visible through the event."""
        self.data = data

    # ------------------------------------------------------------------
    # Tags & categories
    # ------------------------------------------------------------------

    def get_tags(self) -> list[str]:
        return sorted(self.tags)

    def get_tags_set(self) -> frozenset[str]:
        return frozenset(self.tags)

    def add_tag(self, tag: str) -> None:
        self.tags.add(tag)

    def set_tags(self, tags: Iterable[str]) -> None:
        self.tags = set(tags)

    def remove_tag(self, tag: str) -> None:
        self.tags.discard(tag)

    def is_tag(self, tag: str) -> bool:
        return tag in self.tags

    def get_categories(self) -> list[str]:
        return sorted(self.categories)

    def get_categories_set(self) -> frozenset[str]:
        return frozenset(self.categories)

    def add_category(self, category: str) -> None:
        self.categories.add(category)

    def set_categories(self, categories: Iterable[str]) -> None:
        self.categories = set(categories)

    def remove_category(self, category: str) -> None:
        self.categories.discard(category)

    def is_category(self, category: str) -> bool:
        return category in self.categories

    # ------------------------------------------------------------------
    # Propagation control
    # ------------------------------------------------------------------

    def stop(self) -> None:
        self.stopped = True

    def proceed(self) -> None:
        self.stopped = False

    def is_stopped(self) -> bool:
        return self.stopped

    def force(self) -> None:
        self.unstoppable = True

    def subdue(self) -> None:
        self.unstoppable = False

    def is_unstoppable(self) -> bool:
        return self.unstoppable

    def is_propagating(self) -> bool:
        """Whether handler chains should keep delivering this event."""
        return self.unstoppable or not self.stopped

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def get_state(self) -> dict[str, Any]:
        """
        Snapshot of the event as a plain dictionary.

        Returns:
            {"tags": [...], "categories": [...], "fields": {identifier, target,
            data, class, function, namespace, stop, force}}
        """
        return {
            "tags": self.get_tags(),
            "categories": self.get_categories(),
            "fields": {
                "identifier": self.identifier,
                "target": self.target,
                "data": self.data,
                "class": self.class_name,
                "function": self.function,
                "namespace": self.namespace,
                "stop": self.stopped,
                "force": self.unstoppable,
            },
        }

    def set_state(self, state: Any) -> None:
        """Morph this event from another event or a state dictionary."""
        if isinstance(state, GenericEvent):
            self.set_state_with_event(state)
        elif isinstance(state, Mapping):
            self.set_state_with_array(state)
        else:
            raise TypeError(f"Cannot set event state from {type(state).__name__}")

    def set_state_with_event(self, other: "GenericEvent", morph: bool = True) -> None:
        """
        Copy another event's fields onto this one.

        Args:
            other: Source event
            morph: True overwrites only the fields other has set (non-None)
                   and merges tags/categories; False replaces every field,
                   clearing what other lacks.

        The identifier is never copied.
        """
        if morph:
            for name in ("target", "data", "class_name", "function", "namespace"):
                value = getattr(other, name)
                if value is not None:
                    setattr(self, name, value)
            self.tags |= other.tags
            self.categories |= other.categories
        else:
            for name in ("target", "data", "class_name", "function", "namespace"):
                setattr(self, name, getattr(other, name))
            self.tags = set(other.tags)
            self.categories = set(other.categories)
        self.stopped = other.stopped
        self.unstoppable = other.unstoppable

    def set_state_with_array(self, state: Mapping[str, Any], morph: bool = True) -> None:
        """
        Copy fields from a state dictionary.

        Accepts the nested form produced by get_state() or a flat form with
        the same keys at top level. "stop"/"force" and "stopped"/"unstoppable",
        and "class"/"class_name", are interchangeable. The identifier key is
        ignored.

        Raises:
            ValueError: On keys that are not event fields
        """
        fields = self._normalize_state_fields(state)
        tags = state.get("tags")
        categories = state.get("categories")

        if morph:
            for name, value in fields.items():
                if value is not None:
                    setattr(self, name, value)
            if tags:
                self.tags |= set(tags)
            if categories:
                self.categories |= set(categories)
        else:
            for name in _SETTABLE_FIELDS:
                setattr(self, name, fields.get(name, _FIELD_DEFAULTS[name]))
            self.tags = set(tags or ())
            self.categories = set(categories or ())

    @staticmethod
    def _normalize_state_fields(state: Mapping[str, Any]) -> dict[str, Any]:
        raw: dict[str, Any] = {k: v for k, v in state.items() if k not in ("tags", "categories", "fields")}
        nested = state.get("fields")
        if nested:
            raw.update(nested)

        fields: dict[str, Any] = {}
        for key, value in raw.items():
            if key == "identifier":
                continue
            name = _STATE_KEY_ALIASES.get(key, key)
            if name not in _SETTABLE_FIELDS:
                raise ValueError(f"Unknown event state field: {key!r}")
            fields[name] = value
        return fields
