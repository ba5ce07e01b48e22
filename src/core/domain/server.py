"""Despliegues conocidos de ClearlyDefined.

Por qué un Enum:
- El conjunto es fijo y cerrado; es el único estado global del proceso.
- La selección ocurre una vez, al construir el cliente.
"""

from __future__ import annotations

from enum import Enum


class Server(Enum):
    """Fixed set of deployments, each bound to its base URL.

    Curations submitted to PRODUCTION open PRs against
    `clearlydefined/curated-data`, DEVELOPMENT against `curated-data-dev`.
    """

    PRODUCTION = "https://api.clearlydefined.io"
    DEVELOPMENT = "https://dev-api.clearlydefined.io"
    LOCAL = "http://localhost:4000"

    @property
    def url(self) -> str:
        return self.value

    @classmethod
    def default(cls) -> "Server":
        return cls.PRODUCTION

    @classmethod
    def parse(cls, value: "str | Server") -> "Server":
        """Accept a member, a member name (any case) or one of the base URLs."""

        if isinstance(value, Server):
            return value

        text = value.strip()
        by_name = cls.__members__.get(text.upper())
        if by_name is not None:
            return by_name
        return cls(text.rstrip("/"))


def resolve_base_url(*, server: Server | None = None, url: str | None = None) -> str:
    """Base address for a client.

    A URL override wins over any server and is used verbatim (no scheme or
    reachability checks); without either, PRODUCTION is used.
    """

    if url:
        return url
    return (server or Server.default()).url
