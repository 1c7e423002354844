"""Blend command - Blend two saved backend responses into one page.

Each response file holds one executed backend search:

    {"total": 1234, "records": [...], "facets": {"format": {"Book": 10}}}

Leaving out --primary or --secondary simulates a failed backend.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.table import Table

from searchblend.blending import BackendResponse, Blender, BlendResult, StaticBackend
from searchblend.blending.backend import SearchBackend
from searchblend.cli.console import (
    get_console,
    load_command_config,
    safe_cli_command,
    warn,
)
from searchblend.core.exceptions import BackendError, ValidationError


class MissingBackend(SearchBackend):
    """Stands in for a backend whose response file was not given."""

    def __init__(self, identifier: str) -> None:
        self._identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    def search(self, query: Any, offset: int, limit: int) -> BackendResponse:
        raise BackendError("no response file given", backend_id=self._identifier)


def read_response(path: Path) -> BackendResponse:
    """Read a backend response JSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"{path} must contain a JSON object")
    return BackendResponse.from_dict(data)


def _backend(identifier: str, path: Optional[Path]) -> SearchBackend:
    if path is None:
        return MissingBackend(identifier)
    return StaticBackend(identifier, read_response(path))


def _record_label(record: Any) -> str:
    if isinstance(record, dict):
        for key in ("id", "title"):
            if key in record:
                return str(record[key])
    return str(record)


def _display(result: BlendResult, offset: int) -> None:
    console = get_console()
    for error in result.errors:
        sources = result.error_sources.get(error)
        warn(f"{error} ({', '.join(sources)})" if sources else error)

    table = Table(title=f"Blended results ({result.total} total)")
    table.add_column("#", justify="right")
    table.add_column("Source")
    table.add_column("Record")
    for position, item in enumerate(result.records, offset + 1):
        table.add_row(str(position), item.source.value, _record_label(item.record))
    console.print(table)

    for field_name, pairs in result.facets.items():
        values = ", ".join(f"{value} ({count})" for value, count in pairs[:10])
        console.print(f"[bold]{field_name}[/bold]: {values or '-'}")


@safe_cli_command("blend")
def blend_command(
    ctx: typer.Context,
    primary: Optional[Path] = typer.Option(
        None, "--primary", "-p", help="Primary backend response (JSON)", exists=True
    ),
    secondary: Optional[Path] = typer.Option(
        None, "--secondary", "-s", help="Secondary backend response (JSON)", exists=True
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (searchblend.yaml)"
    ),
    offset: int = typer.Option(0, "--offset", min=0, help="First record to show"),
    limit: int = typer.Option(20, "--limit", "-n", min=0, help="Page size"),
    filters: Optional[List[str]] = typer.Option(
        None, "--filter", "-f", help="Filter query, e.g. blender_backend:Solr"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Blend two backend responses into one paginated, faceted page.

    Examples:
        searchblend blend -p solr.json -s primo.json --limit 10
        searchblend blend -p solr.json --json
    """
    config = load_command_config(ctx, config_file)
    blender = Blender(
        _backend(config.backends.primary.id, primary),
        _backend(config.backends.secondary.id, secondary),
        config,
    )
    result = blender.search(None, offset=offset, limit=limit, filters=filters)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), ensure_ascii=False, default=str))
        return
    _display(result, offset)
