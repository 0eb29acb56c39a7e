"""
Event handlers.

A Handler binds an event to a piece of code. The binding is resolved once,
when the handler is configured, into one of four invocation targets:

    CallableTarget      any callable, invoked directly
    BoundMethodTarget   method name on an object instance
    StaticMethodTarget  method name on a class (given as a type, or a class
                        name looked up in the namespace module)
    FunctionTarget      free function name looked up in a namespace module
                        at call time ("builtins" when no namespace)

Object-based bindings are validated eagerly: binding to a method that does not
exist raises HandlerBindingError. Free functions resolve lazily so a handler
can name a function that is defined after the handler.

handle(event) reports its outcome as Handled(value) or Unhandled(); a handler
whose target returned None is still Handled.
"""

import importlib
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

from phabstractic.events.errors import HandlerBindingError
from phabstractic.events.event import GenericEvent, is_event
from phabstractic.patterns import Observer
from phabstractic.system import LoggerFactory

logger = LoggerFactory.get_logger()

DEFAULT_NAMESPACE = "builtins"


@dataclass(frozen=True)
class Handled:
    """Handler ran; value is whatever the target returned."""

    value: Any = None


@dataclass(frozen=True)
class Unhandled:
    """Nothing was bound, or the bound function could not be found."""


UNHANDLED = Unhandled()

HandlerResult = Union[Handled, Unhandled]


@dataclass(frozen=True)
class CallableTarget:
    function: Callable[[GenericEvent], Any]

    def invoke(self, event: GenericEvent) -> HandlerResult:
        return Handled(self.function(event))

    def describe(self) -> Any:
        return self.function


@dataclass(frozen=True)
class BoundMethodTarget:
    instance: Any
    method: str

    def invoke(self, event: GenericEvent) -> HandlerResult:
        return Handled(getattr(self.instance, self.method)(event))

    def describe(self) -> Any:
        return (self.instance, self.method)


@dataclass(frozen=True)
class StaticMethodTarget:
    owner: type
    method: str

    def invoke(self, event: GenericEvent) -> HandlerResult:
        return Handled(getattr(self.owner, self.method)(event))

    def describe(self) -> Any:
        return f"{self.owner.__module__}.{self.owner.__qualname__}.{self.method}"


@dataclass(frozen=True)
class FunctionTarget:
    namespace: Optional[str]
    name: str

    def invoke(self, event: GenericEvent) -> HandlerResult:
        function = _lookup_function(self.namespace, self.name)
        if function is None:
            logger.warning("handler.function_not_found", function=self.describe())
            return UNHANDLED
        return Handled(function(event))

    def describe(self) -> Any:
        return f"{self.namespace or DEFAULT_NAMESPACE}.{self.name}"


HandlerTarget = Union[CallableTarget, BoundMethodTarget, StaticMethodTarget, FunctionTarget]


def _lookup_function(namespace: Optional[str], name: str) -> Optional[Callable[..., Any]]:
    try:
        module = importlib.import_module(namespace or DEFAULT_NAMESPACE)
    except ImportError:
        return None
    function = getattr(module, name, None)
    return function if callable(function) else None


def _lookup_class(class_name: str, namespace: Optional[str]) -> type:
    if namespace:
        module_name, attribute = namespace, class_name
    elif "." in class_name:
        module_name, attribute = class_name.rsplit(".", 1)
    else:
        module_name, attribute = DEFAULT_NAMESPACE, class_name

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise HandlerBindingError(f"Cannot import namespace {module_name!r} for class {class_name!r}") from exc

    owner = module
    for part in attribute.split("."):
        owner = getattr(owner, part, None)
        if owner is None:
            raise HandlerBindingError(f"Class {attribute!r} not found in {module_name!r}")
    if not isinstance(owner, type):
        raise HandlerBindingError(f"{module_name}.{attribute} is not a class")
    return owner


def resolve_target(obj: Any, function: Any, namespace: Optional[str] = None) -> Optional[HandlerTarget]:
    """
    Resolve an (object, function, namespace) binding into an invocation target.

    Returns:
        The target, or None when no function is bound yet

    Raises:
        HandlerBindingError: Method missing on the object/class, class name
            not resolvable, or function neither a name nor a callable
    """
    if function is None:
        return None
    if callable(function):
        return CallableTarget(function)
    if not isinstance(function, str) or not function:
        raise HandlerBindingError(f"Handler function must be a name or a callable, got {function!r}")

    if obj is None or (isinstance(obj, str) and not obj):
        return FunctionTarget(namespace or None, function)

    if isinstance(obj, str):
        owner = _lookup_class(obj, namespace)
        if not callable(getattr(owner, function, None)):
            raise HandlerBindingError(f"Class {owner.__qualname__} has no method {function!r}")
        return StaticMethodTarget(owner, function)

    if isinstance(obj, type):
        if not callable(getattr(obj, function, None)):
            raise HandlerBindingError(f"Class {obj.__qualname__} has no method {function!r}")
        return StaticMethodTarget(obj, function)

    if not callable(getattr(obj, function, None)):
        raise HandlerBindingError(f"{type(obj).__name__} object has no method {function!r}")
    return BoundMethodTarget(obj, function)


class Handler(Observer):
    """
    Observer invoking bound code with each event it is notified of.

    Example:
        >>> class Audit:
        ...     def record(self, event):
        ...         return event.get_identifier()
        >>> handler = Handler(Audit(), "record")
        >>> handler.handle(GenericEvent())
        Handled(value='GenericEvent1')
        >>> Handler(function=lambda event: event.stop()).notify_observer(None, GenericEvent())
        True
    """

    def __init__(self, obj: Any = None, function: Any = None, namespace: Optional[str] = None):
        super().__init__()
        self._target = resolve_target(obj, function, namespace)
        self._object = obj
        self._function = function
        self._namespace = namespace

    @classmethod
    def build_from_callable(cls, function: Callable[[GenericEvent], Any]) -> "Handler":
        return cls(function=function)

    @classmethod
    def build_from_pair(cls, pair: Sequence[Any]) -> "Handler":
        """Build from an (object_or_class, method_name) pair."""
        obj, function = pair
        return cls(obj, function)

    def _rebind(self, obj: Any, function: Any, namespace: Optional[str]) -> None:
        self._target = resolve_target(obj, function, namespace)
        self._object = obj
        self._function = function
        self._namespace = namespace
        logger.debug("handler.bound", destination=self.get_destination())

    def get_object(self) -> Any:
        return self._object

    def set_object(self, obj: Any) -> None:
        self._rebind(obj, self._function, self._namespace)

    def get_function(self) -> Any:
        return self._function

    def set_function(self, function: Any) -> None:
        self._rebind(self._object, function, self._namespace)

    def get_namespace(self) -> Optional[str]:
        return self._namespace

    def set_namespace(self, namespace: Optional[str]) -> None:
        self._rebind(self._object, self._function, namespace)

    def get_target(self) -> Optional[HandlerTarget]:
        return self._target

    def get_destination(self) -> Any:
        """Readable description of what this handler calls, None if unbound."""
        if self._target is None:
            return None
        return self._target.describe()

    def handle(self, event: GenericEvent) -> HandlerResult:
        """
        Invoke the bound target with event.

        Exceptions raised by the target propagate to the caller.
        """
        if self._target is None:
            return UNHANDLED
        return self._target.invoke(event)

    def notify_observer(self, publisher: Any, state: Any) -> bool:
        if not is_event(state):
            return False
        return isinstance(self.handle(state), Handled)

    def __call__(self, event: GenericEvent) -> HandlerResult:
        return self.handle(event)

    def __repr__(self) -> str:
        return f"Handler({self.get_destination()!r})"
