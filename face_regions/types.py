from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, List, Dict

import cv2
import numpy as np


@dataclass(frozen=True)
class NormalizedRect:
    """Face box in center form, all fields relative to frame size."""
    x_center: float
    y_center: float
    width: float
    height: float
    rotation: float = 0.0


@dataclass(frozen=True)
class PixelRect:
    """Integer crop rectangle inside the frame."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass(frozen=True)
class NormalizedLandmark:
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None
    presence: Optional[float] = None


@dataclass(frozen=True)
class Point:
    x: float
    y: float


Color = Tuple[int, int, int, int]  # RGBA, alpha in [0,255]


@dataclass(frozen=True)
class RegionDefinition:
    """Named facial area made of one or more landmark-index polygons."""
    id: str
    label: str
    color: Color
    polygons: Tuple[Tuple[int, ...], ...]


@dataclass(frozen=True, eq=False)
class FrameSnapshot:
    """RGBA copy of the frame the current landmarks were computed on."""
    width: int
    height: int
    pixels: np.ndarray  # (height, width, 4) uint8

    @classmethod
    def from_bgr(cls, frame: np.ndarray) -> "FrameSnapshot":
        """Copy an OpenCV frame (BGR, BGRA or grey) into a read-only RGBA buffer."""
        if frame.ndim == 3 and frame.shape[2] == 4:
            rgba = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGBA)
        elif frame.ndim == 2:
            rgba = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGBA)
        else:
            rgba = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
        rgba.setflags(write=False)
        h, w = rgba.shape[:2]
        return cls(width=int(w), height=int(h), pixels=rgba)


@dataclass(frozen=True)
class DetectionResult:
    """Stage-1 output: the first detected face, already in center form."""
    rect: NormalizedRect
    score: float = 0.0


@dataclass(frozen=True, eq=False)
class LandmarkRequest:
    """Stage-2 work item handed out by the coordinator.

    Carries the stage-1 results for its frame so they can be published
    together with the landmarks.
    """
    generation: int
    frame_index: int
    frame: FrameSnapshot
    rect: NormalizedRect
    roi: PixelRect
    crop: np.ndarray


@dataclass(frozen=True, eq=False)
class RegionSample:
    """Flat RGBA samples collected for one region in one sampling pass."""
    region_id: str
    channel_samples: np.ndarray  # 1-D uint8, 4 values per sampled point
    timestamp: float = 0.0

    @property
    def point_count(self) -> int:
        return int(self.channel_samples.size // 4)


@dataclass(frozen=True)
class RegionPolygon:
    points: Tuple[Point, ...]
    color: Color


@dataclass(frozen=True)
class OverlayInstruction:
    """What a display surface should draw over the current frame."""
    frame_size: Optional[Tuple[int, int]] = None
    bounding_box: Optional[NormalizedRect] = None
    landmarks: Optional[Tuple[NormalizedLandmark, ...]] = None
    region_polygons: Optional[Tuple[RegionPolygon, ...]] = None


class PipelineStatus(Enum):
    IDLE = "Click Start Camera to begin."
    SEARCHING = "Camera active. Looking for a face..."
    NO_FACE = "No face detected"
    FACE_LOST = "Face detected, landmarks lost"
    TRACKING = "Tracking face"
    MODEL_UNAVAILABLE = "Face models unavailable"

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class TrackingSnapshot:
    """One frame's worth of published state.

    ROI, landmarks and frame always belong to the same frame; landmarks are
    only set when both ROI and frame are.
    """
    frame_index: int = -1
    frame: Optional[FrameSnapshot] = None
    rect: Optional[NormalizedRect] = None
    roi: Optional[PixelRect] = None
    landmarks: Optional[Tuple[NormalizedLandmark, ...]] = None


@dataclass
class PerformanceStats:
    """Timing metrics for each stage of the pipeline."""
    t_detect_ms: float = 0.0
    t_landmark_ms: float = 0.0
    t_remap_ms: float = 0.0
    t_sample_ms: float = 0.0
    t_total_ms: float = 0.0


@dataclass
class FrameOutput:
    """Aggregated output from one `process_frame` call."""
    status: PipelineStatus
    overlay: OverlayInstruction
    samples: List[RegionSample] = field(default_factory=list)
    perf: PerformanceStats = field(default_factory=PerformanceStats)
    debug: Dict[str, float] = field(default_factory=dict)
