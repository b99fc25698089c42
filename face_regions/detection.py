from __future__ import annotations
from typing import Any, Optional, Tuple

import cv2
import numpy as np

from .errors import FaceDetectionError, LandmarkError, ModelUnavailableError
from .roi import relative_box_to_rect
from .types import DetectionResult, NormalizedLandmark


class IFaceDetector:
    """Stage-1 interface: whole frame in, first face box (or None) out."""

    def detect(self, frame: np.ndarray) -> Optional[DetectionResult]:
        raise NotImplementedError

    def close(self) -> None:
        pass


class IFaceLandmarker:
    """Stage-2 interface: ROI crop in, one face's crop-local landmarks (or None) out."""

    def locate(self, crop: np.ndarray) -> Optional[Tuple[NormalizedLandmark, ...]]:
        raise NotImplementedError

    def close(self) -> None:
        pass


def _to_rgb(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2RGB)
    if frame.shape[2] == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2RGB)
    return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)


def _optional_field(msg: Any, name: str) -> Optional[float]:
    has_field = getattr(msg, 'HasField', None)
    if has_field is not None:
        try:
            if not has_field(name):
                return None
        except ValueError:
            # Field not declared on this message type
            return None
    val = getattr(msg, name, None)
    return None if val is None else float(val)


class MediaPipeFaceDetectorAdapter(IFaceDetector):
    """Adapter around a MediaPipe ``FaceDetection`` solution.

    - Feeds RGB frames to the model
    - Keeps only the first detection, converted to center form
    - Zero-size boxes come back as None, same as no detection
    """

    def __init__(self, model):
        self.model = model

    def detect(self, frame: np.ndarray) -> Optional[DetectionResult]:
        try:
            results = self.model.process(_to_rgb(frame))
        except Exception as e:
            raise FaceDetectionError(f"face detection failed: {e}") from e

        detections = getattr(results, 'detections', None)
        if not detections:
            return None
        first = detections[0]
        location = getattr(first, 'location_data', None)
        rect = relative_box_to_rect(getattr(location, 'relative_bounding_box', None))
        if rect is None:
            return None
        scores = list(getattr(first, 'score', []) or [])
        return DetectionResult(rect=rect, score=float(scores[0]) if scores else 0.0)

    def close(self) -> None:
        self.model.close()


class MediaPipeFaceMeshAdapter(IFaceLandmarker):
    """Adapter around a MediaPipe ``FaceMesh`` solution run on ROI crops."""

    def __init__(self, model):
        self.model = model

    def locate(self, crop: np.ndarray) -> Optional[Tuple[NormalizedLandmark, ...]]:
        try:
            results = self.model.process(_to_rgb(crop))
        except Exception as e:
            raise LandmarkError(f"face mesh failed: {e}") from e

        faces = getattr(results, 'multi_face_landmarks', None)
        if not faces:
            return None
        return tuple(
            NormalizedLandmark(
                x=float(lm.x),
                y=float(lm.y),
                z=_optional_field(lm, 'z'),
                visibility=_optional_field(lm, 'visibility'),
                presence=_optional_field(lm, 'presence'),
            )
            for lm in faces[0].landmark
        )

    def close(self) -> None:
        self.model.close()


def create_mediapipe_models(config) -> Tuple[MediaPipeFaceDetectorAdapter, MediaPipeFaceMeshAdapter]:
    """Build both MediaPipe solutions from the `face_detection`/`face_mesh` config sections."""
    try:
        import mediapipe as mp

        det_cfg = config.get('face_detection')
        mesh_cfg = config.get('face_mesh')
        detector = mp.solutions.face_detection.FaceDetection(
            model_selection=int(det_cfg.get('model_selection', 0)),
            min_detection_confidence=float(det_cfg.get('min_detection_confidence', 0.6)),
        )
        mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=bool(mesh_cfg.get('static_image_mode', True)),
            max_num_faces=int(mesh_cfg.get('max_num_faces', 1)),
            refine_landmarks=bool(mesh_cfg.get('refine_landmarks', True)),
            min_detection_confidence=float(mesh_cfg.get('min_detection_confidence', 0.6)),
            min_tracking_confidence=float(mesh_cfg.get('min_tracking_confidence', 0.6)),
        )
    except Exception as e:
        raise ModelUnavailableError(f"could not create MediaPipe face models: {e}") from e
    return MediaPipeFaceDetectorAdapter(detector), MediaPipeFaceMeshAdapter(mesh)
