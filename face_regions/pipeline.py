from __future__ import annotations
import threading
import time
from typing import Callable, List, Optional, Sequence

import numpy as np

from .analyzers import IRegionAnalyzer
from .coordinates import CoordinateMapper
from .errors import FaceDetectionError, LandmarkError, ModelUnavailableError
from .logger import EventLogger
from .monitor import PerformanceMonitor
from .overlay import OverlayOptions, build_overlay
from .regions import FACE_REGIONS
from .roi import crop_frame, to_pixel_rect
from .sampler import PolygonSampler
from .throttle import RateLimiter, StatusTracker
from .types import (
    DetectionResult,
    FrameOutput,
    FrameSnapshot,
    LandmarkRequest,
    NormalizedLandmark,
    OverlayInstruction,
    PerformanceStats,
    PipelineStatus,
    RegionDefinition,
    RegionSample,
    TrackingSnapshot,
)


class PipelineState:
    """Per-frame state of one pipeline. Only the owning pipeline writes it.

    Readers call `snapshot()` and get an immutable `TrackingSnapshot`; a frame's
    ROI, landmarks and pixels are swapped in together under the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._published = TrackingSnapshot()
        self.generation = 0
        self.frame_index = 0
        self.pending: Optional[LandmarkRequest] = None

    def snapshot(self) -> TrackingSnapshot:
        with self._lock:
            return self._published

    def publish(self, snapshot: TrackingSnapshot) -> None:
        with self._lock:
            self._published = snapshot

    def reset(self) -> None:
        self.generation += 1
        self.pending = None
        self.publish(TrackingSnapshot())


class FaceRegionPipeline:
    """Two-stage face pipeline: detect -> ROI crop -> landmarks -> remap -> sample.

    `process_frame` drives both stages serially. An asynchronous driver can call
    `on_detection` / `on_landmarks` itself; stage-2 results are matched against
    the generation they were issued in, so results arriving after `stop()` or a
    restart are dropped.
    """

    def __init__(self, detector, landmarker, config=None,
                 regions: Sequence[RegionDefinition] = FACE_REGIONS,
                 analyzers: Sequence[IRegionAnalyzer] = (),
                 logger: Optional[EventLogger] = None,
                 perf_monitor: Optional[PerformanceMonitor] = None,
                 on_status: Optional[Callable[[str], None]] = None,
                 on_samples: Optional[Callable[[List[RegionSample]], None]] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.detector = detector
        self.landmarker = landmarker
        self.config = config
        self.regions = tuple(regions)
        self.analyzers = list(analyzers)
        self.log = logger or EventLogger()
        self.perf = perf_monitor or PerformanceMonitor()
        self.on_samples = on_samples
        self.clock = clock

        self.state = PipelineState()
        self.status_tracker = StatusTracker(on_change=on_status)
        self.mapper = CoordinateMapper()
        self.roi_padding = max(0.0, self._get_float('pipeline', 'roi_padding', 0.18))
        self.sampler = PolygonSampler(step=self._get_int('pipeline', 'sample_stride_px', 6), mapper=self.mapper)
        self.sample_limiter = RateLimiter(self._get_float('pipeline', 'sample_interval_ms', 1000.0))
        self.overlay_options = OverlayOptions.from_config(config) if config is not None else OverlayOptions()
        self._running = False

    # --- Config helpers ---
    def _get_float(self, section: str, key: str, default: float) -> float:
        if self.config is None:
            return default
        try:
            val = self.config.get(section, key)
            return default if val is None else float(val)
        except (TypeError, ValueError):
            return default

    def _get_int(self, section: str, key: str, default: int) -> int:
        return int(self._get_float(section, key, float(default)))

    # --- Lifecycle ---
    @property
    def running(self) -> bool:
        return self._running

    @property
    def status(self) -> PipelineStatus:
        return self.status_tracker.status

    def start(self) -> None:
        self.state.reset()
        self.sample_limiter.reset()
        self._running = True
        if self.detector is None or self.landmarker is None:
            self._model_unavailable("face models not initialised")
            return
        self.status_tracker.update(PipelineStatus.SEARCHING)
        self.log.info("pipeline started")

    def stop(self) -> None:
        """Stop accepting frames and drop published state. In-flight stage-2 results are ignored."""
        self._running = False
        self.state.reset()
        self.status_tracker.update(PipelineStatus.IDLE)
        self.log.info(f"pipeline stopped: {self.perf.summary()}")

    def close(self) -> None:
        """Stop and release model resources."""
        self.stop()
        for model in (self.detector, self.landmarker):
            if model is not None:
                model.close()
        self.detector = None
        self.landmarker = None

    # --- Read side ---
    def snapshot(self) -> TrackingSnapshot:
        return self.state.snapshot()

    def overlay(self) -> OverlayInstruction:
        return build_overlay(self.state.snapshot(), self.regions, self.overlay_options)

    # --- Stage handlers ---
    def on_detection(self, frame: Optional[np.ndarray],
                     detection: Optional[DetectionResult]) -> Optional[LandmarkRequest]:
        """Stage-1 completion. Returns the stage-2 request to run, if any."""
        if not self._running:
            return None
        if frame is None or frame.size == 0:
            self.log.debug("no frame buffer, skipping cycle")
            return None
        if self.state.pending is not None:
            self.perf.record_drop()
            self.log.debug(f"stage-2 busy with frame {self.state.pending.frame_index}, dropping frame")
            return None

        self.state.frame_index += 1
        snapshot = FrameSnapshot.from_bgr(frame)
        rect = detection.rect if detection is not None else None
        roi = to_pixel_rect(rect, snapshot.width, snapshot.height, self.roi_padding)
        if roi is None:
            self.state.publish(TrackingSnapshot(frame_index=self.state.frame_index, frame=snapshot))
            self.status_tracker.update(PipelineStatus.NO_FACE)
            return None

        request = LandmarkRequest(
            generation=self.state.generation,
            frame_index=self.state.frame_index,
            frame=snapshot,
            rect=rect,
            roi=roi,
            crop=crop_frame(frame, roi),
        )
        self.state.pending = request
        return request

    def on_landmarks(self, request: LandmarkRequest,
                     landmarks: Optional[Sequence[NormalizedLandmark]],
                     stats: Optional[PerformanceStats] = None) -> List[RegionSample]:
        """Stage-2 completion. Publishes the frame and runs a sampling pass when due."""
        if not self._running or request.generation != self.state.generation or self.state.pending is not request:
            self.log.debug(f"discarding stale landmarks for frame {request.frame_index}")
            return []
        self.state.pending = None
        frame = request.frame

        if not landmarks:
            self.state.publish(TrackingSnapshot(frame_index=request.frame_index, frame=frame, rect=request.rect))
            self.status_tracker.update(PipelineStatus.FACE_LOST)
            return []

        t0 = time.perf_counter()
        global_landmarks = self.mapper.to_global(landmarks, request.roi, frame.width, frame.height)
        if stats is not None:
            stats.t_remap_ms = (time.perf_counter() - t0) * 1000.0

        published = TrackingSnapshot(
            frame_index=request.frame_index,
            frame=frame,
            rect=request.rect,
            roi=request.roi,
            landmarks=global_landmarks,
        )
        self.state.publish(published)
        self.status_tracker.update(PipelineStatus.TRACKING)

        t0 = time.perf_counter()
        samples = self._maybe_sample(published)
        if stats is not None and samples:
            stats.t_sample_ms = (time.perf_counter() - t0) * 1000.0
        return samples

    def _maybe_sample(self, published: TrackingSnapshot) -> List[RegionSample]:
        now = self.clock()
        if not self.sample_limiter.try_fire(now * 1000.0):
            return []
        samples = self.sampler.sample_regions(self.regions, published.landmarks, published.frame, timestamp=now)
        for sample in samples:
            for analyzer in self.analyzers:
                try:
                    analyzer.analyze(sample)
                except Exception as e:
                    self.log.error(f"analyzer {getattr(analyzer, 'name', analyzer)} failed on {sample.region_id}: {e}")
        if self.on_samples:
            self.on_samples(samples)
        return samples

    def _model_unavailable(self, reason: str) -> None:
        self.state.pending = None
        self.state.publish(TrackingSnapshot())
        if self.status_tracker.update(PipelineStatus.MODEL_UNAVAILABLE):
            self.log.error(f"model unavailable: {reason}")

    # --- Serial driver ---
    def process_frame(self, frame: Optional[np.ndarray]) -> FrameOutput:
        """Run stage-1 and, when a face is found, stage-2 on one frame."""
        t_total0 = time.perf_counter()
        stats = PerformanceStats()
        samples: List[RegionSample] = []

        if self._running and (self.detector is None or self.landmarker is None):
            self._model_unavailable("face models not initialised")
        elif self._running:
            detection = None
            t0 = time.perf_counter()
            try:
                detection = self.detector.detect(frame) if frame is not None else None
            except ModelUnavailableError as e:
                self._model_unavailable(str(e))
                frame = None
            except FaceDetectionError as e:
                self.log.error(f"detection error: {e}")
            finally:
                stats.t_detect_ms = (time.perf_counter() - t0) * 1000.0

            request = self.on_detection(frame, detection)
            if request is not None:
                landmarks = None
                t0 = time.perf_counter()
                try:
                    landmarks = self.landmarker.locate(request.crop)
                except ModelUnavailableError as e:
                    self.state.pending = None
                    self._model_unavailable(str(e))
                    request = None
                except LandmarkError as e:
                    self.log.error(f"landmark error: {e}")
                except Exception:
                    self.state.pending = None
                    raise
                finally:
                    stats.t_landmark_ms = (time.perf_counter() - t0) * 1000.0
                if request is not None:
                    samples = self.on_landmarks(request, landmarks, stats)

        stats.t_total_ms = (time.perf_counter() - t_total0) * 1000.0
        if self._running:
            self.perf.record(stats, sampled=bool(samples))

        published = self.state.snapshot()
        debug = {
            "frame_index": float(published.frame_index),
            "landmarks": float(len(published.landmarks) if published.landmarks else 0),
            "sampled": float(bool(samples)),
        }
        return FrameOutput(
            status=self.status,
            overlay=build_overlay(published, self.regions, self.overlay_options),
            samples=samples,
            perf=stats,
            debug=debug,
        )
