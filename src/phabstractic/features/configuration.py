"""Per-component options with system-wide defaults."""

from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

from phabstractic.system.config import get_system_config


class Options(BaseModel):
    """
    Options shared by configurable event components.

    Unknown keys are kept (``extra="allow"``) so callers can stash
    component-specific settings; read them back with ``get()``.
    """

    model_config = ConfigDict(extra="allow")

    strict: bool = Field(default=False, description="Strict filter matching / raise on empty queue access")
    isolate_errors: bool = Field(default=False, description="Log and skip handler exceptions during propagation")

    def get(self, name: str, default: Any = None) -> Any:
        """Named option lookup, case-insensitive, default when absent."""
        key = name.lower()
        if key in type(self).model_fields:
            return getattr(self, key)
        extra = self.model_extra or {}
        return extra.get(key, default)


OptionsLike = Union[Options, Mapping[str, Any], None]


def resolve_options(options: OptionsLike = None) -> Options:
    """
    Build an Options instance, filling anything missing from system defaults.

    Args:
        options: None, an Options instance, or a mapping (keys case-insensitive)

    Returns:
        A fresh Options instance owned by the caller
    """
    events = get_system_config().events
    values: dict[str, Any] = {"strict": events.strict, "isolate_errors": events.isolate_errors}

    if isinstance(options, Options):
        values.update(options.model_dump())
    elif options is not None:
        values.update({str(key).lower(): value for key, value in options.items()})

    return Options(**values)
