"""CLI de ClearlyDefined (Typer + Rich).

Cada comando es una capa fina: parsea coordenadas, llama a una operación del
cliente dentro de `asyncio.run` y presenta el resultado.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.clearly_defined_client import ClearlyDefinedClient
from adapters.json_exporter import export_by_coordinates_json
from cli import doctor
from cli.ui_components import build_contribution_panel, build_definitions_table
from core.config import AppSettings
from core.domain.coordinates import Coordinates
from core.domain.models import ContributionPatch, HarvestRequest
from core.domain.server import Server
from core.errors import ClearlyDefinedError
from core.services.harvest_planner import fetch_definitions, request_missing_harvests

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Query definitions, curations and harvests on ClearlyDefined.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@dataclass
class CliOptions:
    settings: AppSettings
    server: Server | None = None
    url: str | None = None


def build_client(options: CliOptions) -> ClearlyDefinedClient:
    return ClearlyDefinedClient(options.server, options.url, settings=options.settings)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def _parse_coordinates(values: list[str]) -> list[Coordinates]:
    try:
        return [Coordinates.from_string(value) for value in values]
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _run(awaitable: Awaitable[T]) -> T:
    try:
        return asyncio.run(awaitable)  # type: ignore[arg-type]
    except ClearlyDefinedError as exc:
        _err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    server: str | None = typer.Option(
        None, "--server", "-s", help="production, development or local (default: from config)."
    ),
    url: str | None = typer.Option(None, "--url", help="Raw base URL; overrides --server."),
) -> None:
    settings = AppSettings()
    _configure_logging(settings.log_level)

    selected: Server | None = None
    if server:
        try:
            selected = Server.parse(server)
        except ValueError as exc:
            raise typer.BadParameter(f"unknown server {server!r}", param_hint="--server") from exc
    ctx.obj = CliOptions(settings=settings, server=selected, url=url)


@app.command()
def definitions(
    ctx: typer.Context,
    coordinates: list[str] = typer.Argument(..., help="Coordinates, e.g. npm/npmjs/-/lodash/4.17.21."),
    json_path: Path | None = typer.Option(None, "--json", help="Also export the definitions to this file."),
) -> None:
    """Show definitions and their harvest status."""

    options: CliOptions = ctx.obj
    items = _parse_coordinates(coordinates)

    async def _fetch():
        async with build_client(options) as client:
            return await fetch_definitions(client, items, settings=options.settings)

    result = _run(_fetch())
    _console.print(build_definitions_table(result))
    if json_path is not None:
        export_by_coordinates_json(items=result, output_path=json_path)
        _console.print(f"[green]Saved definitions to:[/green] {json_path}")


@app.command()
def search(ctx: typer.Context, pattern: str = typer.Argument(..., help="Search pattern, e.g. lodash.")) -> None:
    """List the definition URIs matching a pattern."""

    options: CliOptions = ctx.obj

    async def _search():
        async with build_client(options) as client:
            return await client.search_definitions(pattern)

    for uri in _run(_search()):
        _console.print(uri, highlight=False)


@app.command()
def curation(ctx: typer.Context, coordinates: str = typer.Argument(..., help="Coordinates with revision.")) -> None:
    """Print the curation of one component as JSON."""

    options: CliOptions = ctx.obj
    item = _parse_coordinates([coordinates])[0]
    if item.revision is None:
        raise typer.BadParameter("a revision is required", param_hint="COORDINATES")

    async def _get():
        async with build_client(options) as client:
            return await client.get_curation(item)

    result = _run(_get())
    _console.print_json(data=result.model_dump(mode="json", by_alias=True, exclude_none=True))


@app.command()
def curate(
    ctx: typer.Context,
    patch_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="ContributionPatch JSON file."),
) -> None:
    """Submit a curation patch (opens a pull request on the curated-data repository)."""

    options: CliOptions = ctx.obj
    try:
        patch = ContributionPatch.model_validate(json.loads(patch_file.read_text(encoding="utf-8")))
    except ValueError as exc:
        raise typer.BadParameter(f"invalid patch file: {exc}", param_hint="PATCH_FILE") from exc

    async def _submit():
        async with build_client(options) as client:
            return await client.submit_curation(patch)

    _console.print(build_contribution_panel(_run(_submit())))


@app.command(name="harvest-tools")
def harvest_tools(
    ctx: typer.Context, coordinates: str = typer.Argument(..., help="Coordinates with revision.")
) -> None:
    """List the tools that already produced harvest data for a component."""

    options: CliOptions = ctx.obj
    item = _parse_coordinates([coordinates])[0]
    if item.revision is None:
        raise typer.BadParameter("a revision is required", param_hint="COORDINATES")

    async def _list():
        async with build_client(options) as client:
            return await client.list_harvest_tools(item)

    for tool in _run(_list()):
        _console.print(tool, highlight=False)


@app.command()
def harvest(
    ctx: typer.Context,
    coordinates: list[str] = typer.Argument(..., help="Coordinates to harvest."),
    tool: str | None = typer.Option(None, "--tool", help="Run a single tool, e.g. scancode."),
    policy: str | None = typer.Option(None, "--policy", help="Harvest policy, e.g. always."),
    missing_only: bool = typer.Option(
        False, "--missing-only", help="Skip coordinates whose definitions are already fully harvested."
    ),
) -> None:
    """Queue harvest requests."""

    options: CliOptions = ctx.obj
    items = _parse_coordinates(coordinates)

    if missing_only:

        async def _request_missing():
            async with build_client(options) as client:
                return await request_missing_harvests(
                    client, items, tool=tool, policy=policy, settings=options.settings
                )

        requested = _run(_request_missing())
        if not requested:
            _console.print("[green]All components are already harvested.[/green]")
        for item in requested:
            _console.print(f"queued {item}", highlight=False)
        return

    requests = [HarvestRequest(tool=tool, coordinates=str(item), policy=policy) for item in items]

    async def _request():
        async with build_client(options) as client:
            return await client.request_harvest(requests)

    _console.print(_run(_request()), highlight=False)


@app.command(name="harvest-data")
def harvest_data(
    ctx: typer.Context,
    coordinates: str = typer.Argument(..., help="Coordinates with revision."),
    tool: str = typer.Argument(..., help="Tool name, e.g. scancode."),
    tool_version: str = typer.Argument(..., help="Tool version, e.g. 32.0.8."),
    out: Path = typer.Option(..., "--out", "-o", dir_okay=False, help="Destination file."),
) -> None:
    """Download the raw data a harvest tool produced for a component."""

    options: CliOptions = ctx.obj
    item = _parse_coordinates([coordinates])[0]
    if item.revision is None:
        raise typer.BadParameter("a revision is required", param_hint="COORDINATES")

    async def _download() -> int:
        out.parent.mkdir(parents=True, exist_ok=True)
        partial = out.with_name(out.name + ".part")
        written = 0
        try:
            async with build_client(options) as client:
                with partial.open("wb") as handle:
                    async for chunk in client.get_harvest_tool_data(item, tool, tool_version):
                        handle.write(chunk)
                        written += len(chunk)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
        partial.replace(out)
        return written

    written = _run(_download())
    _console.print(f"[green]Saved {written} bytes to:[/green] {out}")


def run() -> None:
    app()
