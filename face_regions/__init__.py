"""
face_regions package
Two-stage face tracking (detector -> ROI crop -> face mesh) with per-region pixel sampling.
"""

from .types import (
    NormalizedRect,
    PixelRect,
    NormalizedLandmark,
    Point,
    RegionDefinition,
    FrameSnapshot,
    DetectionResult,
    LandmarkRequest,
    RegionSample,
    RegionPolygon,
    OverlayInstruction,
    PipelineStatus,
    TrackingSnapshot,
    PerformanceStats,
    FrameOutput,
)
from .errors import ModelUnavailableError, FaceDetectionError, LandmarkError, RegionDefinitionError
from .logger import EventLogger
from .roi import relative_box_to_rect, to_pixel_rect, crop_frame
from .coordinates import CoordinateMapper, to_global_landmarks, to_pixel_point, resolve_polygon
from .sampler import PolygonSampler, point_in_polygon, points_in_polygon, sample_polygon_pixels
from .regions import FACE_REGIONS, load_regions
from .throttle import RateLimiter, StatusTracker
from .detection import IFaceDetector, IFaceLandmarker, MediaPipeFaceDetectorAdapter, MediaPipeFaceMeshAdapter
from .analyzers import IRegionAnalyzer, PigmentationAnalyzer, WrinkleAnalyzer
from .overlay import OverlayOptions, OverlayRenderer, build_overlay
from .monitor import PerformanceMonitor
from .pipeline import FaceRegionPipeline, PipelineState

__all__ = [
    "NormalizedRect",
    "PixelRect",
    "NormalizedLandmark",
    "Point",
    "RegionDefinition",
    "FrameSnapshot",
    "DetectionResult",
    "LandmarkRequest",
    "RegionSample",
    "RegionPolygon",
    "OverlayInstruction",
    "PipelineStatus",
    "TrackingSnapshot",
    "PerformanceStats",
    "FrameOutput",
    "ModelUnavailableError",
    "FaceDetectionError",
    "LandmarkError",
    "RegionDefinitionError",
    "EventLogger",
    "relative_box_to_rect",
    "to_pixel_rect",
    "crop_frame",
    "CoordinateMapper",
    "to_global_landmarks",
    "to_pixel_point",
    "resolve_polygon",
    "PolygonSampler",
    "point_in_polygon",
    "points_in_polygon",
    "sample_polygon_pixels",
    "FACE_REGIONS",
    "load_regions",
    "RateLimiter",
    "StatusTracker",
    "IFaceDetector",
    "IFaceLandmarker",
    "MediaPipeFaceDetectorAdapter",
    "MediaPipeFaceMeshAdapter",
    "IRegionAnalyzer",
    "PigmentationAnalyzer",
    "WrinkleAnalyzer",
    "OverlayOptions",
    "OverlayRenderer",
    "build_overlay",
    "PerformanceMonitor",
    "FaceRegionPipeline",
    "PipelineState",
]
