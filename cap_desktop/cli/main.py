"""cap-desktop CLI - Main entry point.

Runs the process bootstrap and hands control to the application's entry task:

    cap-desktop run --entry cap_app.main:run
"""

from typing import Annotated

import typer
from dotenv import load_dotenv

from cap_desktop.bootstrap import bootstrap
from cap_desktop.cli import output
from cap_desktop.cli.output import console
from cap_desktop.config import (
    BuildMode,
    get_config_paths,
    get_effective_config,
    resolve_build_mode,
    update_config,
)
from cap_desktop.errors import BootstrapError
from cap_desktop.log import configure_logging
from cap_desktop.runtime import load_entry
from cap_desktop.telemetry import SENTRY_URL_ENV, resolve_endpoint
from cap_desktop.version import __version__

# Main app
app = typer.Typer(
    name="cap-desktop",
    help="Bootstrap the Cap desktop process.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Config subcommand group
config_app = typer.Typer(
    name="config",
    help="Manage bootstrap configuration.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

EntryOption = Annotated[
    str | None,
    typer.Option(
        "--entry",
        "-e",
        help="Application entry task as 'package.module:function' (or CAP_DESKTOP_ENTRY)",
    ),
]

DebugOption = Annotated[
    bool | None,
    typer.Option(
        "--debug/--release",
        help="Force debug or release behavior (default: detect)",
    ),
]

WorkersOption = Annotated[
    int | None,
    typer.Option(
        "--workers",
        "-w",
        min=1,
        help="Worker threads for the async runtime (default: CPU count)",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"cap-desktop version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """cap-desktop - start the desktop application with crash reporting.

    Set CAP_DESKTOP_SENTRY_URL to enable remote error reporting.
    """
    pass


@app.command()
def run(
    entry: EntryOption = None,
    debug: DebugOption = None,
    workers: WorkersOption = None,
) -> None:
    """Bootstrap the process and run the application until it exits.

    Examples:
        cap-desktop run --entry cap_app.main:run
        cap-desktop run --release --workers 4
    """
    load_dotenv()

    mode = None if debug is None else ("debug" if debug else "release")
    try:
        config = get_effective_config(mode=mode, worker_threads=workers, entry=entry)
    except ValueError as e:
        output.print_error(str(e))
        raise typer.Exit(1) from None

    configure_logging(debug=resolve_build_mode(config) is BuildMode.DEBUG)

    if not config.runtime.entry:
        output.print_error(
            "No entry task configured",
            hint="Pass --entry package.module:function or set CAP_DESKTOP_ENTRY",
        )
        raise typer.Exit(1)

    try:
        entry_task = load_entry(config.runtime.entry)
        code = bootstrap(entry_task, config)
    except BootstrapError as e:
        output.print_error(str(e), hint=e.detail)
        raise typer.Exit(1) from None

    raise typer.Exit(code)


# Config subcommands


@config_app.command("show")
def config_show() -> None:
    """Show effective bootstrap configuration."""
    try:
        config = get_effective_config()
    except ValueError as e:
        output.print_error(str(e))
        raise typer.Exit(1) from None

    config_dict = config.model_dump(mode="json")
    config_dict["build"]["resolved_mode"] = resolve_build_mode(config).value
    config_dict["telemetry"]["endpoint"] = "set" if resolve_endpoint() else "not set"

    output.print_config(config_dict)
    output.print_info(f"\nEndpoint variable: {SENTRY_URL_ENV}")
    output.print_info(f"Config file: {get_config_paths()['config_file']}")


@config_app.command("set")
def config_set(
    key: Annotated[
        str,
        typer.Argument(help="Config key (e.g., runtime.worker_threads, build.mode)"),
    ],
    value: Annotated[
        str,
        typer.Argument(help="New value ('none' to unset)"),
    ],
) -> None:
    """Set a configuration value.

    Examples:
        cap-desktop config set build.mode release
        cap-desktop config set telemetry.on_transport_error degrade
        cap-desktop config set runtime.entry cap_app.main:run
    """
    try:
        update_config(key, value)
        output.print_success(f"Set {key} = {value}")
    except ValueError as e:
        output.print_error(str(e))
        raise typer.Exit(1) from None


@config_app.command("path")
def config_path() -> None:
    """Show configuration file paths."""
    paths = get_config_paths()
    console.print(f"Config directory: {paths['config_dir']}")
    console.print(f"Config file: {paths['config_file']}")


def cli() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    cli()
