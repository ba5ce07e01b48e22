"""Estado de harvest de una definición.

Por qué un clasificador puro:
- El servicio guarda un artefacto de harvest por herramienta y las lista en
  `described.tools`; el estado se deriva, no se almacena.
- El umbral (más de dos herramientas = completo) es el mismo que usa la web de
  ClearlyDefined y no es configurable.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import Defined

HARVESTED_TOOL_THRESHOLD = 2


class HarvestStatus(str, Enum):
    """Completitud del harvest de un componente (derivada, nunca almacenada)."""

    NOT_HARVESTED = "not_harvested"
    PARTIALLY_HARVESTED = "partially_harvested"
    HARVESTED = "harvested"


def classify(defined: "Defined") -> HarvestStatus:
    """Clasifica una definición por el número de herramientas en `described.tools`.

    - sin lista de herramientas (o sin `described`): NOT_HARVESTED
    - más de dos herramientas: HARVESTED
    - entre cero y dos: PARTIALLY_HARVESTED
    """

    described = defined.described
    tools = described.tools if described is not None else None

    if tools is None:
        return HarvestStatus.NOT_HARVESTED
    if len(tools) > HARVESTED_TOOL_THRESHOLD:
        return HarvestStatus.HARVESTED
    return HarvestStatus.PARTIALLY_HARVESTED
