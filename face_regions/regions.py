from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

from .errors import RegionDefinitionError
from .types import Color, RegionDefinition


def _rgba(r: int, g: int, b: int, a: float) -> Color:
    return (r, g, b, int(round(a * 255)))


MESH_LANDMARK_COUNT = 468

# Landmark indices address the 468-point face mesh
FACE_REGIONS: Tuple[RegionDefinition, ...] = (
    RegionDefinition(
        id="forehead",
        label="Forehead",
        color=_rgba(16, 185, 129, 0.28),
        polygons=((10, 338, 297, 332, 284, 251, 389, 356, 9, 107, 66, 105),),
    ),
    RegionDefinition(
        id="left-cheek",
        label="Left cheek",
        color=_rgba(59, 130, 246, 0.25),
        polygons=((234, 93, 132, 58, 172, 136, 150, 149, 170, 169),),
    ),
    RegionDefinition(
        id="right-cheek",
        label="Right cheek",
        color=_rgba(236, 72, 153, 0.25),
        polygons=((454, 323, 361, 288, 397, 365, 379, 378, 400, 401),),
    ),
    RegionDefinition(
        id="nose",
        label="Nose",
        color=_rgba(250, 204, 21, 0.3),
        polygons=((1, 2, 98, 327, 168, 197, 5, 4),),
    ),
    RegionDefinition(
        id="chin",
        label="Chin",
        color=_rgba(148, 163, 184, 0.28),
        polygons=((
            152, 377, 400, 378, 379, 365, 397, 288, 361, 323, 454, 356, 389,
            251, 284, 332, 297, 338, 10, 109, 67, 103, 54, 21, 162, 127, 234, 93,
            132, 58, 172, 136, 150, 149, 176, 148,
        ),),
    ),
    RegionDefinition(
        id="peri-ocular",
        label="Peri-ocular",
        color=_rgba(45, 212, 191, 0.25),
        polygons=(
            (33, 7, 163, 144, 145, 153, 154, 155, 133, 173, 157, 158, 159, 160, 161, 246),
            (263, 249, 390, 373, 374, 380, 381, 382, 362, 398, 384, 385, 386, 387, 388, 466),
        ),
    ),
)


def _parse_color(raw: Any, region_id: str) -> Color:
    if not isinstance(raw, (list, tuple)) or len(raw) not in (3, 4):
        raise RegionDefinitionError(f"region {region_id!r}: color must be [r, g, b] or [r, g, b, a]")
    try:
        vals = [int(v) for v in raw]
    except (TypeError, ValueError) as e:
        raise RegionDefinitionError(f"region {region_id!r}: invalid color {raw!r}") from e
    if len(vals) == 3:
        vals.append(255)
    if any(v < 0 or v > 255 for v in vals):
        raise RegionDefinitionError(f"region {region_id!r}: color channel out of range {raw!r}")
    return (vals[0], vals[1], vals[2], vals[3])


def region_from_dict(data: Dict[str, Any]) -> RegionDefinition:
    """Build and validate one region from its JSON form."""
    region_id = data.get('id')
    if not region_id or not isinstance(region_id, str):
        raise RegionDefinitionError(f"region without id: {data!r}")
    raw_polygons = data.get('polygons')
    if not isinstance(raw_polygons, list) or not raw_polygons:
        raise RegionDefinitionError(f"region {region_id!r}: polygons must be a non-empty list")

    polygons = []
    for poly in raw_polygons:
        if not isinstance(poly, list) or len(poly) < 3:
            raise RegionDefinitionError(f"region {region_id!r}: each polygon needs at least 3 indices")
        if any(not isinstance(i, int) or isinstance(i, bool) or i < 0 for i in poly):
            raise RegionDefinitionError(f"region {region_id!r}: indices must be non-negative integers")
        polygons.append(tuple(poly))

    return RegionDefinition(
        id=region_id,
        label=str(data.get('label') or region_id),
        color=_parse_color(data.get('color', [255, 255, 255, 64]), region_id),
        polygons=tuple(polygons),
    )


def load_regions(path: Union[str, Path]) -> Tuple[RegionDefinition, ...]:
    """Load a region table from a JSON list shaped like `FACE_REGIONS`."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as e:
        raise RegionDefinitionError(f"invalid region file {path}: {e}") from e
    if not isinstance(data, list):
        raise RegionDefinitionError(f"region file {path} must contain a list")

    regions: List[RegionDefinition] = [region_from_dict(item) for item in data]
    ids = [r.id for r in regions]
    if len(set(ids)) != len(ids):
        raise RegionDefinitionError(f"duplicate region ids in {path}")
    highest = max_landmark_index(regions)
    if highest >= MESH_LANDMARK_COUNT:
        raise RegionDefinitionError(f"region file {path} uses landmark index {highest}, mesh has {MESH_LANDMARK_COUNT}")
    return tuple(regions)


def max_landmark_index(regions: Sequence[RegionDefinition]) -> int:
    return max((i for r in regions for poly in r.polygons for i in poly), default=-1)
