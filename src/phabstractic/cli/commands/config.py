"""Configuration commands - inspect and validate system configuration files."""

import sys
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from phabstractic.system import SystemConfig


def _create_config_table(config: SystemConfig) -> Table:
    """
    Create a Rich table listing every effective setting.

    Args:
        config: Loaded system configuration

    Returns:
        Table with one row per setting, grouped by section
    """
    table = Table(title="Phabstractic Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Section", style="green", no_wrap=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    for section, values in config.to_dict().items():
        for name, value in values.items():
            table.add_row(section, name, _format_value(value))
    return table


def _format_value(value: Any) -> str:
    if value is None:
        return "[dim]-[/dim]"
    if isinstance(value, bool):
        return "[green]true[/green]" if value else "[red]false[/red]"
    return str(value)


@click.group("config")
def config_group():
    """Configuration commands - show and validate phabstractic.yaml"""
    pass


@config_group.command("show")
@click.option(
    "--path",
    "-p",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file to load (default: $PHABSTRACTIC_CONFIG or config/phabstractic.yaml)",
)
def show_config(path: Path | None):
    """
    Show the effective system configuration.

    Settings missing from the file are filled from built-in defaults.

    Example:
        phabstractic config show
        phabstractic config show --path config/phabstractic.yaml
    """
    console = Console()

    try:
        config = SystemConfig.load(path)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except (TypeError, ValueError, ValidationError, yaml.YAMLError) as e:
        console.print("[red]Invalid configuration:[/red]")
        console.print(str(e), markup=False)
        sys.exit(1)

    source = config.source if config.source is not None else "built-in defaults"
    console.print(f"[dim]Configuration source: {source}[/dim]\n")
    console.print(_create_config_table(config))


@config_group.command("validate")
@click.argument("file", type=click.Path(path_type=Path))
def validate_config(file: Path):
    """
    Validate a configuration file.

    Exits with status 1 and prints the problem if the file is missing,
    is not valid YAML, or holds settings of the wrong type.

    Example:
        phabstractic config validate config/phabstractic.yaml
    """
    console = Console()

    try:
        SystemConfig.load(file)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except (TypeError, ValueError, ValidationError, yaml.YAMLError) as e:
        console.print("[red]✗ Invalid configuration[/red]")
        console.print(f"[dim]{file}[/dim]")
        console.print(str(e), markup=False)
        sys.exit(1)

    console.print("[green]✓ Configuration valid[/green]")
    console.print(f"[dim]{file}[/dim]")
