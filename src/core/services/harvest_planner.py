"""Fan-out sobre `ClearlyDefinedService`.

Por qué en `core/services`:
- Quien tiene muchas coordenadas (p.ej. un árbol de dependencias) las parte en
  batches, los lanza en paralelo con un límite y mezcla los resultados por clave.
- Depende del Protocol, no de httpx: se puede usar con cualquier implementación.

Nota: si un batch falla, falla la llamada completa.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence, TypeVar

from core.config import AppSettings
from core.domain.coordinates import Coordinates
from core.domain.harvest_status import HarvestStatus
from core.domain.models import Defined, HarvestRequest
from core.interfaces.clearly_defined import ClearlyDefinedService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    if size < 1:
        raise ValueError("size must be >= 1")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


async def fetch_definitions(
    client: ClearlyDefinedService,
    coordinates: Iterable[Coordinates],
    *,
    settings: AppSettings | None = None,
    batch_size: int | None = None,
    max_concurrency: int | None = None,
) -> dict[Coordinates, Defined]:
    settings = settings or AppSettings()
    unique = list(dict.fromkeys(coordinates))
    batches = chunked(unique, batch_size or settings.batch_size)
    semaphore = asyncio.Semaphore(max_concurrency or settings.max_concurrency)

    async def run(batch: list[Coordinates]) -> dict[Coordinates, Defined]:
        async with semaphore:
            return await client.batch_get_definitions(batch)

    logger.debug("Fetching %d definitions in %d batches", len(unique), len(batches))
    results = await asyncio.gather(*(run(batch) for batch in batches))

    merged: dict[Coordinates, Defined] = {}
    for result in results:
        merged.update(result)
    return merged


async def harvest_statuses(
    client: ClearlyDefinedService,
    coordinates: Iterable[Coordinates],
    *,
    settings: AppSettings | None = None,
) -> dict[Coordinates, HarvestStatus]:
    """Harvest status per coordinate; unknown to the service means NOT_HARVESTED."""

    unique = list(dict.fromkeys(coordinates))
    definitions = await fetch_definitions(client, unique, settings=settings)
    return {
        item: definitions[item].harvest_status() if item in definitions else HarvestStatus.NOT_HARVESTED
        for item in unique
    }


async def request_missing_harvests(
    client: ClearlyDefinedService,
    coordinates: Iterable[Coordinates],
    *,
    tool: str | None = None,
    policy: str | None = None,
    settings: AppSettings | None = None,
) -> list[Coordinates]:
    """Queue a harvest for every coordinate that is not fully harvested yet.

    Returns the coordinates a harvest was requested for. Nothing is sent when
    all of them are already harvested.
    """

    statuses = await harvest_statuses(client, coordinates, settings=settings)
    missing = [item for item, status in statuses.items() if status is not HarvestStatus.HARVESTED]
    if not missing:
        return []

    requests = [HarvestRequest(tool=tool, coordinates=str(item), policy=policy) for item in missing]
    reply = await client.request_harvest(requests)
    logger.info("Requested %d harvests: %s", len(requests), reply)
    return missing
