"""Commands __init__ - exports all command groups."""

from phabstractic.cli.commands.config import config_group

__all__ = ["config_group"]
