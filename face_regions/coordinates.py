from __future__ import annotations
from typing import List, Sequence, Tuple

from .types import NormalizedLandmark, PixelRect, Point


def to_global_landmarks(landmarks: Sequence[NormalizedLandmark], roi: PixelRect,
                        frame_width: int, frame_height: int) -> Tuple[NormalizedLandmark, ...]:
    """Map crop-local normalized landmarks into frame-global normalized space.

    No clamping: the landmark model may place out-of-crop features outside
    [0,1], and consumers that address pixels clamp for themselves.
    """
    return tuple(
        NormalizedLandmark(
            x=(roi.x + lm.x * roi.width) / frame_width,
            y=(roi.y + lm.y * roi.height) / frame_height,
            z=lm.z,
            visibility=lm.visibility,
            presence=lm.presence,
        )
        for lm in landmarks
    )


def to_pixel_point(landmark: NormalizedLandmark, frame_width: int, frame_height: int) -> Point:
    return Point(x=landmark.x * frame_width, y=landmark.y * frame_height)


def resolve_polygon(indices: Sequence[int], landmarks: Sequence[NormalizedLandmark],
                    frame_width: int, frame_height: int) -> List[Point]:
    """Look up a polygon's landmark indices and return its pixel-space vertices.

    Indices that do not address a landmark are dropped.
    """
    n = len(landmarks)
    return [
        to_pixel_point(landmarks[i], frame_width, frame_height)
        for i in indices
        if 0 <= i < n
    ]


class CoordinateMapper:
    """Remaps stage-2 output into frame space and resolves region polygons.

    Responsibilities:
    - crop-local -> frame-global landmark transform
    - landmark-index polygons -> pixel-space vertices
    """

    def to_global(self, landmarks: Sequence[NormalizedLandmark], roi: PixelRect,
                  frame_width: int, frame_height: int) -> Tuple[NormalizedLandmark, ...]:
        return to_global_landmarks(landmarks, roi, frame_width, frame_height)

    def polygon_points(self, indices: Sequence[int], landmarks: Sequence[NormalizedLandmark],
                       frame_width: int, frame_height: int) -> List[Point]:
        return resolve_polygon(indices, landmarks, frame_width, frame_height)
