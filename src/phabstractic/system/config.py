"""
System configuration for Phabstractic.

One configuration for the whole process: event-system defaults (strict
matching, handler error isolation) and logging. Loaded from YAML with
environment variable substitution and merged over built-in defaults.

Search order:
1. Explicit path passed to SystemConfig.load()
2. PHABSTRACTIC_CONFIG environment variable
3. config/phabstractic.yaml relative to the working directory
4. Built-in defaults (missing files never fail)

Example YAML:

    events:
      strict: false
      isolate_errors: true
    logging:
      level: DEBUG
      format: json
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from phabstractic.system.log_system import LoggingConfig

CONFIG_ENV_VAR = "PHABSTRACTIC_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/phabstractic.yaml")

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


@dataclass
class EventsConfig:
    """Defaults applied to filters, conduits and handler queues."""

    strict: bool = False
    isolate_errors: bool = False

    def __post_init__(self) -> None:
        for name in ("strict", "isolate_errors"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"events.{name} must be a boolean, got {type(value).__name__}: {value!r}")


@dataclass
class SystemConfig:
    """Complete system configuration."""

    events: EventsConfig = field(default_factory=EventsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: Path | None = None

    @classmethod
    def load(cls, path: str | Path | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, falling back to defaults.

        Args:
            path: Explicit config file. An explicit path that does not exist
                  raises FileNotFoundError; implicit locations are optional.

        Returns:
            SystemConfig merged over defaults
        """
        if path is not None:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            env_path = os.environ.get(CONFIG_ENV_VAR)
            config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
            if not config_path.exists():
                return cls()

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping at top level")

        config = cls._from_dict(_substitute_env_vars(data))
        config.source = config_path
        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (partial) dictionary merged over defaults."""
        merged = _deep_merge(cls._defaults(), data)
        return cls(
            events=EventsConfig(**merged["events"]),
            logging=LoggingConfig(**merged["logging"]),
        )

    @staticmethod
    def _defaults() -> dict[str, Any]:
        return {
            "events": {"strict": False, "isolate_errors": False},
            "logging": LoggingConfig().model_dump(exclude_none=True),
        }

    def to_dict(self) -> dict[str, Any]:
        """Flatten to plain data (for display and round-tripping to YAML)."""
        return {
            "events": {"strict": self.events.strict, "isolate_errors": self.events.isolate_errors},
            "logging": self.logging.model_dump(mode="json"),
        }


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} and ${VAR:-default} in every string of a nested structure."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            name, default = match.group(1), match.group(2)
            return os.environ.get(name, default if default is not None else "")

        substituted = _ENV_PATTERN.sub(replace, value)
        # A whole-value substitution of a YAML scalar keeps its YAML type
        if substituted != value and _ENV_PATTERN.fullmatch(value):
            return yaml.safe_load(substituted) if substituted else None
        return substituted
    return value


_system_config: SystemConfig | None = None


def get_system_config() -> SystemConfig:
    """Get the process-wide system config, loading it on first use."""
    global _system_config
    if _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: str | Path | None = None) -> SystemConfig:
    """Force reload of the process-wide system config."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
