"""
System configuration package.

Provides process-wide configuration for the event system.

Exports:
    - SystemConfig: Complete system configuration dataclass
    - EventsConfig: Event-system defaults (strict matching, error isolation)
    - get_system_config: Get system config singleton
    - reload_system_config: Force reload system config
    - LoggerFactory: Factory for creating configured loggers
    - LoggingConfig: Logging configuration model
"""

from phabstractic.system.config import EventsConfig, SystemConfig, get_system_config, reload_system_config
from phabstractic.system.log_system import LoggerFactory, LoggingConfig

__all__ = [
    "SystemConfig",
    "EventsConfig",
    "get_system_config",
    "reload_system_config",
    "LoggerFactory",
    "LoggingConfig",
]
