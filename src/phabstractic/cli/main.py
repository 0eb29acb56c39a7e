"""Phabstractic CLI main entry point."""

import click

from phabstractic import __version__
from phabstractic.cli.commands import config_group
from phabstractic.system import LoggerFactory, get_system_config


@click.group()
@click.version_option(version=__version__)
def main():
    """Phabstractic - Event routing toolkit"""
    LoggerFactory.configure(get_system_config().logging)


# Register commands
main.add_command(config_group)


if __name__ == "__main__":
    main()
