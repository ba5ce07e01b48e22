"""Cliente HTTP (httpx) de la API REST de ClearlyDefined.

Responsabilidad:
- Construir paths a partir de `Coordinates` (segmentos posicionales, `-` si no
  hay namespace).
- Serializar requests y validar respuestas contra el modelo del dominio.
- Traducir fallos a la taxonomía de `core.errors`; nunca reintenta.

Cada operación es una corrutina y hace un único round trip. Las llamadas
concurrentes solo comparten la URL base y el pool de conexiones de httpx.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Iterable, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.coordinates import Coordinates
from core.domain.models import (
    ContributedCurations,
    ContributionPatch,
    ContributionSummary,
    Curation,
    Defined,
    HarvestRequest,
)
from core.domain.server import Server, resolve_base_url
from core.errors import RemoteServiceError, SchemaViolation, TransportError
from core.interfaces.clearly_defined import ClearlyDefinedService

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DEFINITIONS = TypeAdapter(dict[Coordinates, Defined])
_CONTRIBUTED_CURATIONS = TypeAdapter(dict[Coordinates, ContributedCurations])
_CURATION = TypeAdapter(Curation)
_CONTRIBUTION_SUMMARY = TypeAdapter(ContributionSummary)
_STRINGS = TypeAdapter(list[str])


class ClearlyDefinedClient(ClearlyDefinedService):
    """httpx implementation of `ClearlyDefinedService`.

    Base address: explicit `url` > explicit `server` > `settings.base_url` >
    `settings.server` (PRODUCTION by default). A caller-supplied `http_client`
    is used as-is and left open by `aclose()`.
    """

    def __init__(
        self,
        server: Server | None = None,
        url: str | None = None,
        *,
        settings: AppSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        if server is None and url is None:
            server = self._settings.server
            url = self._settings.base_url
        self.base_url = resolve_base_url(server=server, url=url)

        self._owns_http = http_client is None
        self._http = http_client or build_async_client(self._settings)

    async def __aenter__(self) -> "ClearlyDefinedClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # --- definitions ---------------------------------------------------------

    async def batch_get_definitions(self, coordinates: Iterable[Coordinates]) -> dict[Coordinates, Defined]:
        body = _coordinate_strings(coordinates)
        response = await self._send("POST", "definitions", json=body)
        return _decode(response, _DEFINITIONS, what="definitions response")

    async def search_definitions(self, pattern: str) -> list[str]:
        response = await self._send("GET", "definitions", params={"pattern": pattern})
        return _decode(response, _STRINGS, what="definitions search response")

    # --- curations -----------------------------------------------------------

    async def get_curation(self, coordinates: Coordinates) -> Curation:
        path = "/".join(("curations", *_require_revision(coordinates).path_segments()))
        response = await self._send("GET", path)
        return _decode(response, _CURATION, what="curation")

    async def batch_get_curations(
        self, coordinates: Iterable[Coordinates]
    ) -> dict[Coordinates, ContributedCurations]:
        body = _coordinate_strings(coordinates)
        response = await self._send("POST", "curations", json=body)
        return _decode(response, _CONTRIBUTED_CURATIONS, what="curations response")

    async def submit_curation(self, patch: ContributionPatch) -> ContributionSummary:
        response = await self._send("PATCH", "curations", json=patch.to_wire())
        return _decode(response, _CONTRIBUTION_SUMMARY, what="contribution summary")

    # --- harvest -------------------------------------------------------------

    async def request_harvest(self, requests: Iterable[HarvestRequest]) -> str:
        body = [request.to_wire() for request in requests]
        response = await self._send("POST", "harvest", json=body)
        return response.text

    async def list_harvest_tools(self, coordinates: Coordinates) -> list[str]:
        path = "/".join(("harvest", *_require_revision(coordinates).path_segments()))
        response = await self._send("GET", path, params={"form": "list"})
        return _decode(response, _STRINGS, what="harvest tool list")

    async def get_harvest_tool_data(
        self, coordinates: Coordinates, tool: str, tool_version: str
    ) -> AsyncIterator[bytes]:
        segments = _require_revision(coordinates).path_segments()
        path = "/".join(("harvest", *segments, quote(tool, safe=""), quote(tool_version, safe="")))
        url = self._url(path)
        logger.debug("GET %s (streamed)", url)

        try:
            async with self._http.stream("GET", url, params={"form": "streamed"}) as response:
                if not response.is_success:
                    await response.aread()
                    _raise_for_status(response, "GET", url)
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.TransportError as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

    # --- plumbing ------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path}"

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = self._url(path)
        if isinstance(json, list):
            logger.debug("%s %s (%d items)", method, url, len(json))
        else:
            logger.debug("%s %s", method, url)

        try:
            response = await self._http.request(method, url, json=json, params=params)
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        _raise_for_status(response, method, url)
        return response


def _coordinate_strings(coordinates: Iterable[Coordinates]) -> list[str]:
    # A set is expected; duplicates would only repeat keys in the response.
    return list(dict.fromkeys(str(item) for item in coordinates))


def _require_revision(coordinates: Coordinates) -> Coordinates:
    if coordinates.revision is None:
        raise ValueError(f"Coordinates {coordinates} have no revision.")
    return coordinates


def _raise_for_status(response: httpx.Response, method: str, url: str) -> None:
    if response.is_success:
        return
    logger.warning("%s %s returned HTTP %d", method, url, response.status_code)
    raise RemoteServiceError(response.status_code, response.text, method=method, url=url)


def _decode(response: httpx.Response, adapter: TypeAdapter[T], *, what: str) -> T:
    try:
        payload = response.json()
    except ValueError as exc:
        raise SchemaViolation(f"Invalid {what}: body is not JSON ({exc}).") from exc

    try:
        return adapter.validate_python(payload)
    except ValidationError as exc:
        raise SchemaViolation.from_validation_error(exc, what=what) from exc
