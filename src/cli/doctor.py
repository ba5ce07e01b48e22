"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars
from core.domain.server import Server, resolve_base_url

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url, params={"pattern": "lodash"})
        return response.is_success, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run(
    ctx: typer.Context,
    check_connectivity: bool = typer.Option(
        True, "--check/--no-check", help="Query the selected server once."
    ),
) -> None:
    """Show the effective configuration and check the selected server."""

    # Global --server/--url (CliOptions) win over the stored configuration.
    options = ctx.obj
    settings: AppSettings = getattr(options, "settings", None) or AppSettings()
    server = getattr(options, "server", None)
    url = getattr(options, "url", None)
    if server is None and url is None:
        server, url = settings.server, settings.base_url
    base_url = resolve_base_url(server=server, url=url)

    table = Table(title="ClearlyDefined Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Server", "OK", (server or Server.default()).name)
    if url:
        table.add_row("Base URL", "OVERRIDE", base_url)
    else:
        table.add_row("Base URL", "OK", base_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("User-Agent", "OK", settings.user_agent)
    table.add_row("Fan-out", "OK", f"batch={settings.batch_size} concurrency={settings.max_concurrency}")

    if check_connectivity:
        ok_http, detail_http = asyncio.run(_check_http(f"{base_url.rstrip('/')}/definitions", settings))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)


@app.command(name="set-server")
def set_server(
    server: str = typer.Argument(..., help="production, development, local or a base URL."),
) -> None:
    """Store the default server in the user config .env."""

    try:
        selected = Server.parse(server)
        values = {"CLEARLYDEFINED_SERVER": selected.name.lower(), "CLEARLYDEFINED_BASE_URL": ""}
    except ValueError:
        if not server.startswith(("http://", "https://")):
            raise typer.BadParameter("expected production, development, local or an http(s) URL")
        values = {"CLEARLYDEFINED_BASE_URL": server}

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved server config to:[/green] {env_path}")
