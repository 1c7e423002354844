"""Layout command - Show which backend fills each result position."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from searchblend.blending import ResultInterleaver
from searchblend.cli.console import get_console, load_command_config, safe_cli_command


@safe_cli_command("layout")
def layout_command(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (searchblend.yaml)"
    ),
    block_size: Optional[int] = typer.Option(None, "--block-size", "-b"),
    boost_position: Optional[int] = typer.Option(None, "--boost-position"),
    boost_count: Optional[int] = typer.Option(None, "--boost-count"),
    positions: int = typer.Option(30, "--positions", min=1, help="Positions to show"),
) -> None:
    """Print the preferred source of each output position.

    Examples:
        searchblend layout --block-size 10 --boost-position 5 --boost-count 2
    """
    config = load_command_config(ctx, config_file)
    overrides = {
        name: value
        for name, value in (
            ("block_size", block_size),
            ("boost_position", boost_position),
            ("boost_count", boost_count),
        )
        if value is not None
    }
    blending = dataclasses.replace(config.blending, **overrides)
    layout = ResultInterleaver(blending).source_layout(positions)

    table = Table(
        title=(
            f"block_size={blending.block_size} "
            f"boost_position={blending.effective_boost_position} "
            f"boost_count={blending.boost_count}"
        )
    )
    table.add_column("Position", justify="right")
    table.add_column("Source")
    for position, source in enumerate(layout):
        table.add_row(str(position), source.value)
    get_console().print(table)

    typer.echo("".join("P" if source.value == "primary" else "S" for source in layout))
