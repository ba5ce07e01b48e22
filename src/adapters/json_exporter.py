"""Exportación JSON de definiciones y curaciones.

Por qué JSON:
- Interoperabilidad con otras herramientas de compliance y pipelines.
- Las claves son las coordenadas canónicas, igual que en la API.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel

from core.domain.coordinates import Coordinates


def export_by_coordinates_json(*, items: Mapping[Coordinates, BaseModel], output_path: Path) -> Path:
    """Exporta un mapping `Coordinates -> modelo` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        str(coordinates): model.model_dump(mode="json", by_alias=True, exclude_none=True)
        for coordinates, model in items.items()
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
