"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Mapping

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.coordinates import Coordinates
from core.domain.harvest_status import HarvestStatus
from core.domain.models import ContributionSummary, Defined

_STATUS_STYLES = {
    HarvestStatus.HARVESTED: "green",
    HarvestStatus.PARTIALLY_HARVESTED: "yellow",
    HarvestStatus.NOT_HARVESTED: "red",
}


def build_definitions_table(definitions: Mapping[Coordinates, Defined]) -> Table:
    table = Table(title="Definitions")
    table.add_column("Coordinates", style="cyan", no_wrap=True)
    table.add_column("Declared license", style="white")
    table.add_column("Score", style="magenta", justify="right")
    table.add_column("Tools", style="dim")
    table.add_column("Harvest", no_wrap=True)

    for coordinates in sorted(definitions, key=str):
        defined = definitions[coordinates]
        status = defined.harvest_status()
        tools = defined.described.tools if defined.described is not None else None
        table.add_row(
            str(coordinates),
            defined.licensed.declared or "-",
            str(defined.scores.effective),
            ", ".join(tools or []) or "-",
            Text(status.value, style=_STATUS_STYLES[status]),
        )
    return table


def build_contribution_panel(summary: ContributionSummary) -> Panel:
    """Panel con el PR creado por `PATCH /curations`."""

    body = Text()
    body.append(f"PR #{summary.pr_number}\n", style="bold")
    body.append(summary.url, style="underline cyan")
    return Panel(body, title="Curation submitted", border_style="green")
