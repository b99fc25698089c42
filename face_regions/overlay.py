from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from .coordinates import resolve_polygon
from .types import Color, OverlayInstruction, RegionDefinition, RegionPolygon, TrackingSnapshot


@dataclass
class OverlayOptions:
    show_bounding_box: bool = True
    show_face_mesh: bool = True
    show_regions: bool = True
    box_color: Color = (56, 189, 248, 255)
    box_fill_alpha: float = 0.08
    landmark_color: Color = (15, 23, 42, 255)
    landmark_radius: int = 1

    @classmethod
    def from_config(cls, config) -> "OverlayOptions":
        sec = config.get('overlay') or {}
        opts = cls()
        for key in ('show_bounding_box', 'show_face_mesh', 'show_regions'):
            if sec.get(key) is not None:
                setattr(opts, key, bool(sec.get(key)))
        if sec.get('box_color') is not None:
            opts.box_color = tuple(int(v) for v in sec.get('box_color'))
        if sec.get('landmark_color') is not None:
            opts.landmark_color = tuple(int(v) for v in sec.get('landmark_color'))
        if sec.get('landmark_radius') is not None:
            opts.landmark_radius = max(1, int(sec.get('landmark_radius')))
        return opts


def build_overlay(snapshot: TrackingSnapshot, regions: Sequence[RegionDefinition],
                  options: Optional[OverlayOptions] = None) -> OverlayInstruction:
    """Describe what to draw for the published frame state, honouring the toggles."""
    options = options or OverlayOptions()
    frame = snapshot.frame
    if frame is None:
        return OverlayInstruction()

    box = snapshot.rect if options.show_bounding_box else None
    landmarks = snapshot.landmarks if options.show_face_mesh else None

    polygons = None
    if options.show_regions and snapshot.landmarks is not None:
        items = []
        for region in regions:
            for indices in region.polygons:
                points = resolve_polygon(indices, snapshot.landmarks, frame.width, frame.height)
                if len(points) < 3:
                    continue
                items.append(RegionPolygon(points=tuple(points), color=region.color))
        polygons = tuple(items)

    return OverlayInstruction(
        frame_size=(frame.width, frame.height),
        bounding_box=box,
        landmarks=landmarks,
        region_polygons=polygons,
    )


def _bgr(color: Color) -> Tuple[int, int, int]:
    return (int(color[2]), int(color[1]), int(color[0]))


def _blend(frame: np.ndarray, layer: np.ndarray, alpha: float) -> None:
    cv2.addWeighted(layer, alpha, frame, 1.0 - alpha, 0, dst=frame)


class OverlayRenderer:
    """Draws an `OverlayInstruction` onto a BGR frame in place."""

    def __init__(self, options: Optional[OverlayOptions] = None):
        self.options = options or OverlayOptions()

    def draw(self, frame: np.ndarray, overlay: OverlayInstruction) -> np.ndarray:
        if overlay.frame_size is None:
            return frame
        h, w = frame.shape[:2]

        if overlay.region_polygons:
            for poly in overlay.region_polygons:
                pts = np.array([[int(round(p.x)), int(round(p.y))] for p in poly.points], dtype=np.int32)
                layer = frame.copy()
                cv2.fillPoly(layer, [pts], _bgr(poly.color))
                _blend(frame, layer, poly.color[3] / 255.0)

        if overlay.bounding_box is not None:
            rect = overlay.bounding_box
            x1 = int((rect.x_center - rect.width / 2.0) * w)
            y1 = int((rect.y_center - rect.height / 2.0) * h)
            x2 = int((rect.x_center + rect.width / 2.0) * w)
            y2 = int((rect.y_center + rect.height / 2.0) * h)
            color = _bgr(self.options.box_color)
            layer = frame.copy()
            cv2.rectangle(layer, (x1, y1), (x2, y2), color, -1)
            _blend(frame, layer, self.options.box_fill_alpha)
            cv2.rectangle(frame, (x1, y1), (x2, y2), color, 2)

        if overlay.landmarks:
            color = _bgr(self.options.landmark_color)
            for lm in overlay.landmarks:
                cv2.circle(frame, (int(lm.x * w), int(lm.y * h)), self.options.landmark_radius, color, -1)

        return frame
