"""Modelo de datos de la API REST de ClearlyDefined (Pydantic v2).

Por qué Pydantic en el dominio:
- Valida en el borde: una clave requerida ausente falla (el cliente la
  reporta como `SchemaViolation`), las opcionales quedan en `None`.
- El mapeo de nombres del wire (camelCase, `_id`, `_meta`) es declarativo y
  bidireccional para los tipos que se envían.

Nota:
- `to_wire()` omite todo campo igual a su default en vez de enviar `null`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_serializer
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from core.domain.coordinates import Coordinates
from core.domain.harvest_status import HarvestStatus, classify


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with wire names, default-valued fields omitted."""

        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)


# --- shared building blocks -------------------------------------------------


class SourceLocation(WireModel):
    type: str | None = None
    provider: str | None = None
    namespace: str | None = None
    name: str | None = None
    revision: str | None = None
    path: str | None = None
    url: str | None = None


class Urls(WireModel):
    registry: str | None = None
    version: str | None = None
    download: str | None = None


class Hashes(WireModel):
    md5: str | None = None
    sha1: str | None = None
    sha256: str | None = None
    git_sha: str | None = None


class Attribution(WireModel):
    parties: list[str] | None = None
    unknown: int | None = None


class Discovered(WireModel):
    expressions: list[str] | None = None
    unknown: int | None = None


class Facet(WireModel):
    attribution: Attribution | None = None
    discovered: Discovered | None = None
    files: int | None = None


class Facets(WireModel):
    core: Facet | None = None
    data: Facet | None = None
    dev: Facet | None = None
    doc: Facet | None = None
    examples: Facet | None = None
    tests: Facet | None = None


# --- definitions ------------------------------------------------------------


class DescribedScore(WireModel):
    date: int | None = None
    source: int | None = None
    total: int | None = None


class LicensedScore(WireModel):
    declared: int | None = None
    discovered: int | None = None
    consistency: int | None = None
    spdx: int | None = None
    texts: int | None = None
    total: int | None = None


class FinalScore(WireModel):
    effective: int
    tool: int


class Described(WireModel):
    """Provenance part of a definition."""

    release_date: str | None = None
    source_location: SourceLocation | None = None
    urls: Urls | None = None
    project_website: str | None = None
    issue_tracker: str | None = None
    hashes: Hashes | None = None
    files: int | None = None
    tools: list[str] | None = Field(
        default=None,
        description="Harvest tools (`name/version`) that produced data for the component.",
    )
    tool_score: DescribedScore | None = None
    score: DescribedScore | None = None


class Licensed(WireModel):
    declared: str | None = None
    tool_score: LicensedScore | None = None
    facets: Facets | None = None
    score: LicensedScore | None = None


class FileEntry(WireModel):
    path: str
    license: str | None = None
    attributions: list[str] | None = None
    facets: list[str] | None = None
    hashes: Hashes | None = None
    token: str | None = None
    natures: list[str] | None = None


class Meta(WireModel):
    schema_version: str
    updated: str | None = None


class Defined(WireModel):
    """Aggregated definition of one component, as returned by `POST /definitions`."""

    coordinates: Coordinates
    described: Described | None
    licensed: Licensed
    files: list[FileEntry] | None = None
    scores: FinalScore
    id: str | None = Field(default=None, alias="_id")
    meta: Meta = Field(..., alias="_meta")

    def harvest_status(self) -> HarvestStatus:
        return classify(self)


# --- curations --------------------------------------------------------------


class CurationDescribed(WireModel):
    facets: dict[str, list[str]] | None = None
    source_location: SourceLocation | None = None
    project_website: str | None = None
    issue_tracker: str | None = None
    release_date: str | None = None


class CurationLicensed(WireModel):
    declared: str | None = None


class CurationFileEntry(WireModel):
    path: str
    license: str | None = None
    attributions: list[str] | None = None


class Curation(WireModel):
    described: CurationDescribed | None = None
    licensed: CurationLicensed | None = None
    files: list[CurationFileEntry] | None = None


class ContributedCurations(WireModel):
    """Curations of one coordinate plus the contributions (PRs) touching it."""

    curations: dict[Coordinates, Curation] = Field(default_factory=dict)
    contributions: list[dict[str, Any]] = Field(default_factory=list)

    @field_serializer("curations")
    def _serialize_curations(self, curations: dict[Coordinates, Curation]) -> dict[str, Curation]:
        return {str(coordinates): curation for coordinates, curation in curations.items()}


# --- submissions ------------------------------------------------------------


class ContributionType(str, Enum):
    MISSING = "Missing"
    INCORRECT = "Incorrect"
    INCOMPLETE = "Incomplete"
    AMBIGUOUS = "Ambiguous"
    OTHER = "Other"


class ContributionInfo(WireModel):
    type: ContributionType
    summary: str = Field(..., description="Short single-line description, also used as the PR title.")
    details: str = Field(..., description="The problem(s) being addressed.")
    resolution: str = Field(..., description="What the patch does and where the new data was found.")
    removed_definitions: bool = Field(..., description="Remove the listed definitions instead of amending them.")


class Patch(WireModel):
    coordinates: Coordinates
    revisions: dict[str, Curation]


class ContributionPatch(WireModel):
    contribution_info: ContributionInfo
    patches: list[Patch]


class ContributionSummary(WireModel):
    pr_number: int
    url: str


class HarvestRequest(WireModel):
    """One entry of `POST /harvest`.

    `coordinates` is the flat coordinate string, not a `Coordinates` object:
    that is the shape the harvest schema expects.
    """

    tool: str | None = None
    coordinates: str
    policy: str | None = None
