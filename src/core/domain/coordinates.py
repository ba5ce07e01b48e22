"""Coordenadas: la clave que identifica una revisión de un paquete en ClearlyDefined.

Por qué un value object:
- Los mismos cinco campos viajan como string canónico (`npm/npmjs/-/lodash/4.17.21`)
  en los batch, como objeto dentro de definiciones y patches, y como
  segmentos posicionales del path en los endpoints por item.
- Es la clave de los mapas de respuesta: igualdad y hash cubren los cinco campos.

Nota: aquí no se valida el contenido de ningún campo; eso lo hace el servicio.
"""

from __future__ import annotations

from enum import Enum
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

NAMESPACE_PLACEHOLDER = "-"


class ComponentType(str, Enum):
    """Well-known component types. Any string is accepted by `Coordinates`."""

    COMPOSER = "composer"
    CONDA = "conda"
    CRATE = "crate"
    DEB = "deb"
    DEBSRC = "debsrc"
    GEM = "gem"
    GIT = "git"
    GO = "go"
    MAVEN = "maven"
    NPM = "npm"
    NUGET = "nuget"
    POD = "pod"
    PYPI = "pypi"
    SOURCE_ARCHIVE = "sourcearchive"


class Provider(str, Enum):
    """Well-known providers (registries / hosts)."""

    ANACONDA_MAIN = "anaconda-main"
    CONDA_FORGE = "conda-forge"
    COCOAPODS = "cocoapods"
    CRATES_IO = "cratesio"
    DEBIAN = "debian"
    GITHUB = "github"
    GITLAB = "gitlab"
    GOLANG = "golang"
    GRADLE_PLUGIN = "gradleplugin"
    MAVEN_CENTRAL = "mavencentral"
    MAVEN_GOOGLE = "mavengoogle"
    NPMJS = "npmjs"
    NUGET = "nuget"
    PACKAGIST = "packagist"
    PYPI = "pypi"
    RUBYGEMS = "rubygems"


class Coordinates(BaseModel):
    """Immutable, hashable coordinates of a component.

    Equality covers all five fields, exactly as supplied (no case folding).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    provider: str
    namespace: str | None = None
    name: str
    revision: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_string_form(cls, data: Any) -> Any:
        if isinstance(data, str):
            return _split(data)
        return data

    @field_validator("type", "provider", mode="before")
    @classmethod
    def _enum_to_value(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value

    @field_validator("namespace", mode="before")
    @classmethod
    def _placeholder_to_none(cls, value: Any) -> Any:
        # "" and "-" render the same path segment, so they must be the same key.
        if value in ("", NAMESPACE_PLACEHOLDER):
            return None
        return value

    @classmethod
    def from_string(cls, value: str) -> "Coordinates":
        """Parse `type/provider/namespace/name[/revision]` (`-` = no namespace)."""

        return cls(**_split(value))

    def path_segments(self) -> tuple[str, ...]:
        """Ordered, percent-encoded URL path segments.

        The namespace position is always present; an absent namespace becomes
        `-` because the path is positional.
        """

        parts = [self.type, self.provider, self.namespace or NAMESPACE_PLACEHOLDER, self.name]
        if self.revision is not None:
            parts.append(self.revision)
        return tuple(quote(part, safe="") for part in parts)

    def __str__(self) -> str:
        parts = [self.type, self.provider, self.namespace or NAMESPACE_PLACEHOLDER, self.name]
        if self.revision is not None:
            parts.append(self.revision)
        return "/".join(parts)


def _split(value: str) -> dict[str, str | None]:
    parts = value.strip().split("/", 4)
    if len(parts) < 4:
        raise ValueError(f"Invalid coordinates {value!r}: expected type/provider/namespace/name[/revision].")

    namespace = parts[2]
    return {
        "type": parts[0],
        "provider": parts[1],
        "namespace": None if namespace in ("", NAMESPACE_PLACEHOLDER) else namespace,
        "name": parts[3],
        "revision": parts[4] if len(parts) == 5 else None,
    }
