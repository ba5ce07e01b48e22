"""Contrato del servicio ClearlyDefined.

Por qué Protocol:
- La CLI y los servicios del Core dependen de este contrato, no de httpx.
- Permite sustituir el cliente HTTP por un fake en tests.
"""

from __future__ import annotations

from typing import AsyncIterator, Iterable, Protocol, runtime_checkable

from core.domain.coordinates import Coordinates
from core.domain.models import (
    ContributedCurations,
    ContributionPatch,
    ContributionSummary,
    Curation,
    Defined,
    HarvestRequest,
)


@runtime_checkable
class ClearlyDefinedService(Protocol):
    """Remote operations of the ClearlyDefined REST API.

    Every operation does exactly one HTTP round trip and never retries.
    Batch operations either return a complete mapping or raise.
    """

    async def batch_get_definitions(self, coordinates: Iterable[Coordinates]) -> dict[Coordinates, Defined]:
        """`POST /definitions`: definitions keyed by coordinates."""

        ...

    async def search_definitions(self, pattern: str) -> list[str]:
        """`GET /definitions?pattern=`: URIs of the definitions matching `pattern`."""

        ...

    async def get_curation(self, coordinates: Coordinates) -> Curation:
        """`GET /curations/{type}/{provider}/{namespace}/{name}/{revision}`."""

        ...

    async def batch_get_curations(
        self, coordinates: Iterable[Coordinates]
    ) -> dict[Coordinates, ContributedCurations]:
        """`POST /curations`: curations and contributions keyed by coordinates."""

        ...

    async def submit_curation(self, patch: ContributionPatch) -> ContributionSummary:
        """`PATCH /curations`: opens a PR. Not idempotent."""

        ...

    async def request_harvest(self, requests: Iterable[HarvestRequest]) -> str:
        """`POST /harvest`: queue harvests, returns the service's reply text."""

        ...

    async def list_harvest_tools(self, coordinates: Coordinates) -> list[str]:
        """`GET /harvest/...?form=list`: tools that already produced data."""

        ...

    def get_harvest_tool_data(
        self, coordinates: Coordinates, tool: str, tool_version: str
    ) -> AsyncIterator[bytes]:
        """`GET /harvest/.../{tool}/{toolVersion}?form=streamed`, chunk by chunk."""

        ...
