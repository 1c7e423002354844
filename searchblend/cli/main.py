"""searchblend CLI - Main application entry point.

Registers the commands and the global options shared by all of them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from searchblend.cli.commands import blend_command, layout_command
from searchblend.core.logging import configure_logging

app = typer.Typer(
    name="searchblend",
    help="Blend the results of two search backends into one result list",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from searchblend import __version__

        typer.echo(f"searchblend version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="DEBUG, INFO, WARNING or ERROR (default: from the config file)",
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write log output to this file"
    ),
) -> None:
    """searchblend - blended search over two backends."""
    ctx.obj = {"log_level": log_level, "log_file": log_file}
    configure_logging(level=log_level or "WARNING", log_file=log_file)


app.command("blend")(blend_command)
app.command("layout")(layout_command)


def cli_main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    cli_main()
