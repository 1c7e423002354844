"""Console output helpers.

Provides consistent formatting for CLI output messages and the error
handling wrapper shared by all commands.
"""

from __future__ import annotations

import logging
from functools import wraps
from pathlib import Path
from typing import Any, Callable, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from searchblend.core.config import Config
from searchblend.core.config_loaders import load_config
from searchblend.core.exceptions import SearchBlendError, get_root_cause
from searchblend.core.logging import configure_logging

_console: Console | None = None
_error_console: Console | None = None


def get_console() -> Console:
    """Get shared console instance (lazy-loaded)."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_error_console() -> Console:
    """Get shared stderr console instance (lazy-loaded)."""
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True)
    return _error_console


def warn(message: str) -> None:
    """Display a warning line."""
    get_console().print(f"[yellow]! {message}[/yellow]")


def load_command_config(ctx: typer.Context, config_file: Optional[Path]) -> Config:
    """Load the configuration for a command.

    The file's logging section applies unless --log-level was given.
    """
    config = load_config(config_file)
    options = ctx.obj or {}
    if options.get("log_level") is None:
        configure_logging(
            level=config.logging.level,
            log_file=options.get("log_file") or config.log_path,
        )
    return config


class ErrorRenderer:
    """Renders searchblend errors with "Why" and "How to fix" sections."""

    @staticmethod
    def render(exc: SearchBlendError, context: str = "") -> None:
        """Render an exception as an error panel on stderr."""
        root_cause = get_root_cause(exc)
        root_message = str(root_cause) if root_cause is not exc else None

        content = ErrorRenderer._build_error_content(
            message=str(exc),
            context=context,
            why=exc.why_it_happened,
            how_to_fix=exc.how_to_fix,
            root_message=root_message,
        )
        panel = Panel(
            content,
            title=f"[bold red]Error: {exc.error_code}[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
        get_error_console().print(panel)

    @staticmethod
    def _build_error_content(
        message: str,
        context: str,
        why: str,
        how_to_fix: List[str],
        root_message: Optional[str],
    ) -> Text:
        text = Text()
        if context:
            text.append(f"{context}\n\n", style="dim")
        text.append(message, style="bold")
        if root_message:
            text.append(f"\nCaused by: {root_message}", style="dim")
        text.append("\n\nWhy it happened:\n", style="bold yellow")
        text.append(why)
        text.append("\n\nHow to fix:\n", style="bold green")
        for suggestion in how_to_fix:
            text.append(f"  - {suggestion}\n")
        return text


def safe_cli_command(
    operation_name: str,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to wrap CLI commands with user-friendly error handling.

    searchblend errors are rendered as a panel, anything else as a single
    line; both exit with code 1. typer.Exit passes through untouched.

    Args:
        operation_name: Human-readable operation name for error context
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except SearchBlendError as e:
                ErrorRenderer.render(e, context=f"While running {operation_name}")
                typer.echo(f"✗ Error during {operation_name}: {e}", err=True)
                raise typer.Exit(code=1)
            except (OSError, ValueError) as e:
                typer.echo(
                    f"✗ Error during {operation_name}: {type(e).__name__}: {e}",
                    err=True,
                )
                logging.getLogger(__name__).debug(
                    f"[{operation_name}] {type(e).__name__}: {e}", exc_info=True
                )
                raise typer.Exit(code=1)

        return wrapper

    return decorator
