from __future__ import annotations
import math
from typing import Any, Optional

import numpy as np

from .types import NormalizedRect, PixelRect


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def _box_field(box: Any, *names: str) -> float:
    for name in names:
        val = box.get(name) if isinstance(box, dict) else getattr(box, name, None)
        if val is not None:
            return float(val)
    return 0.0


def relative_box_to_rect(box: Any) -> Optional[NormalizedRect]:
    """Convert a top-left relative box (xmin, ymin, width, height) to center form.

    Accepts MediaPipe ``RelativeBoundingBox`` messages as well as plain dicts.
    A missing box, or one with zero width/height, means no detection.
    """
    if box is None:
        return None
    x_min = _box_field(box, 'xmin', 'x_min', 'xMin')
    y_min = _box_field(box, 'ymin', 'y_min', 'yMin')
    width = _box_field(box, 'width')
    height = _box_field(box, 'height')
    if not width or not height:
        return None
    return NormalizedRect(
        x_center=x_min + width / 2.0,
        y_center=y_min + height / 2.0,
        width=width,
        height=height,
        rotation=0.0,
    )


def to_pixel_rect(rect: Optional[NormalizedRect], frame_width: int, frame_height: int,
                  padding: float = 0.0) -> Optional[PixelRect]:
    """Scale a normalized face box to a padded pixel crop.

    Each edge is clamped to the frame on its own, so a box near a border gives
    an asymmetric crop rather than a shifted one. Width and height are >= 1.
    """
    if rect is None or not rect.width or not rect.height:
        return None
    if frame_width <= 0 or frame_height <= 0:
        return None
    padding = max(0.0, float(padding))

    center_x = rect.x_center * frame_width
    center_y = rect.y_center * frame_height
    padded_w = rect.width * frame_width * (1.0 + padding)
    padded_h = rect.height * frame_height * (1.0 + padding)

    x = _clamp(center_x - padded_w / 2.0, 0.0, float(frame_width))
    y = _clamp(center_y - padded_h / 2.0, 0.0, float(frame_height))
    right = _clamp(center_x + padded_w / 2.0, 0.0, float(frame_width))
    bottom = _clamp(center_y + padded_h / 2.0, 0.0, float(frame_height))

    # A box lying wholly past the far edge still needs a 1px crop inside the frame
    x_px = min(math.floor(x), frame_width - 1)
    y_px = min(math.floor(y), frame_height - 1)
    w_px = min(max(1, math.floor(right - x)), frame_width - x_px)
    h_px = min(max(1, math.floor(bottom - y)), frame_height - y_px)
    return PixelRect(x=int(x_px), y=int(y_px), width=int(w_px), height=int(h_px))


def crop_frame(frame: np.ndarray, roi: PixelRect) -> np.ndarray:
    """Contiguous copy of the ROI pixels, ready to hand to the landmark model."""
    return frame[roi.y:roi.bottom, roi.x:roi.right].copy()
