"""Console output helpers for the CLI."""

from typing import Any

from rich.console import Console

console = Console()
err_console = Console(stderr=True)


def print_error(message: str, hint: str | None = None) -> None:
    """Print an error message (to stderr) with an optional hint."""
    err_console.print(f"[bold red]Error:[/] {message}")
    if hint:
        err_console.print(f"[dim]{hint}[/]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/]")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[dim]{message}[/]")


def print_config(config: dict[str, Any]) -> None:
    """Print configuration sections as key/value lines."""
    for section, values in config.items():
        console.print(f"[bold]{section}[/]")
        if isinstance(values, dict):
            for key, value in values.items():
                console.print(f"  {key}: {value}")
        else:
            console.print(f"  {values}")
