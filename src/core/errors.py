"""Errores del cliente de ClearlyDefined.

Por qué una taxonomía propia:
- El llamador decide si reintenta, avisa o aborta; el cliente no recupera nada.
- Cada error lleva el detalle necesario (status, body, campo ofensivo) sin
  exponer tipos de httpx ni de pydantic.
"""

from __future__ import annotations

from pydantic import ValidationError


class ClearlyDefinedError(Exception):
    """Base class of every client error."""


class TransportError(ClearlyDefinedError):
    """Connection, TLS or timeout failure before a response was received."""


class RemoteServiceError(ClearlyDefinedError):
    """The service answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str, *, method: str = "", url: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url
        super().__init__(f"{method} {url} returned HTTP {status_code}: {_shorten(body)}".strip())


class SchemaViolation(ClearlyDefinedError):
    """The response body does not match the expected structure."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)

    @classmethod
    def from_validation_error(cls, exc: ValidationError, *, what: str) -> "SchemaViolation":
        errors = exc.errors()
        field = None
        detail = str(exc)
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            detail = first.get("msg", detail)
        location = f" at '{field}'" if field else ""
        return cls(f"Invalid {what}{location}: {detail}", field=field)


def _shorten(text: str, limit: int = 200) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
