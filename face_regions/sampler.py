from __future__ import annotations
import logging
import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .coordinates import CoordinateMapper
from .types import FrameSnapshot, NormalizedLandmark, Point, RegionDefinition, RegionSample

logger = logging.getLogger(__name__)

CHANNELS = 4


def point_in_polygon(x: float, y: float, polygon: Sequence[Point]) -> bool:
    """Even-odd ray cast to +x. Edge y-extremes are half-open so shared vertices count once."""
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def points_in_polygon(xs: np.ndarray, ys: np.ndarray, polygon: Sequence[Point]) -> np.ndarray:
    """Vectorised `point_in_polygon` over arrays of query points."""
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    inside = np.zeros(np.broadcast(xs, ys).shape, dtype=bool)
    n = len(polygon)
    for i in range(n):
        j = i - 1 if i > 0 else n - 1
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        if yi == yj:
            # Horizontal edges never satisfy the straddle test
            continue
        straddles = (yi > ys) != (yj > ys)
        x_cross = (xj - xi) * (ys - yi) / (yj - yi) + xi
        inside ^= straddles & (xs < x_cross)
    return inside


def sample_polygon_pixels(frame: FrameSnapshot, polygon: Sequence[Point], step: int = 6) -> np.ndarray:
    """Collect RGBA values on a `step` grid over the polygon's bounding box.

    Only grid points inside the polygon contribute; values come out row by row,
    4 channels per point, as a flat uint8 array.
    """
    step = max(1, int(step))
    if len(polygon) < 3 or frame.width <= 0 or frame.height <= 0:
        return np.empty(0, dtype=np.uint8)

    min_x = min(p.x for p in polygon)
    min_y = min(p.y for p in polygon)
    max_x = max(p.x for p in polygon)
    max_y = max(p.y for p in polygon)
    min_x = int(np.clip(math.floor(min_x), 0, frame.width - 1))
    min_y = int(np.clip(math.floor(min_y), 0, frame.height - 1))
    max_x = int(np.clip(math.ceil(max_x), 0, frame.width - 1))
    max_y = int(np.clip(math.ceil(max_y), 0, frame.height - 1))

    xs = np.arange(min_x, max_x + 1, step)
    ys = np.arange(min_y, max_y + 1, step)
    grid_x, grid_y = np.meshgrid(xs, ys)  # rows follow y, so ravel() is scan order
    mask = points_in_polygon(grid_x, grid_y, polygon)
    if not mask.any():
        return np.empty(0, dtype=np.uint8)
    picked = frame.pixels[grid_y[mask], grid_x[mask], :CHANNELS]
    return np.ascontiguousarray(picked, dtype=np.uint8).reshape(-1)


class PolygonSampler:
    """Turns region definitions plus frame-global landmarks into flat pixel samples."""

    def __init__(self, step: int = 6, mapper: Optional[CoordinateMapper] = None):
        self.step = max(1, int(step))
        self.mapper = mapper or CoordinateMapper()

    def sample_region(self, region: RegionDefinition, landmarks: Sequence[NormalizedLandmark],
                      frame: FrameSnapshot, timestamp: float = 0.0) -> RegionSample:
        chunks: List[np.ndarray] = []
        for indices in region.polygons:
            points = self.mapper.polygon_points(indices, landmarks, frame.width, frame.height)
            if len(points) < 3:
                logger.debug("region=%s skipping degenerate polygon (%d points)", region.id, len(points))
                continue
            chunks.append(sample_polygon_pixels(frame, points, self.step))
        merged = np.concatenate(chunks) if chunks else np.empty(0, dtype=np.uint8)
        return RegionSample(region_id=region.id, channel_samples=merged, timestamp=timestamp)

    def sample_regions(self, regions: Iterable[RegionDefinition], landmarks: Sequence[NormalizedLandmark],
                       frame: FrameSnapshot, timestamp: float = 0.0) -> List[RegionSample]:
        out = []
        for region in regions:
            sample = self.sample_region(region, landmarks, frame, timestamp)
            logger.debug("region=%s samples=%d", region.id, sample.point_count)
            out.append(sample)
        return out
