from typing import Any, Dict


class Config:
    """Minimal config shim providing nested dict access via get/set.

    Defaults chosen to run out-of-the-box with a laptop webcam.
    """

    def __init__(self):
        self._cfg: Dict[str, Dict[str, Any]] = {
            'video': {
                'capture_index': 0,
                'width': 720,
                'height': 540,
                'fps': 30,
                'buffersize': 2,
                # Hold last frame for short dropouts to reduce visible blinking
                'dropout_hold_ms': 200,
            },
            'face_detection': {
                'model_selection': 0,  # 0: short range (<2m), 1: full range
                'min_detection_confidence': 0.6,
            },
            'face_mesh': {
                # Each ROI crop is an independent image for the mesh model
                'static_image_mode': True,
                'max_num_faces': 1,
                'refine_landmarks': True,
                'min_detection_confidence': 0.6,
                'min_tracking_confidence': 0.6,
            },
            'pipeline': {
                'roi_padding': 0.18,
                'sample_interval_ms': 1000,
                'sample_stride_px': 6,
                'regions_file': None,  # JSON region table; None uses the built-in regions
            },
            'overlay': {
                'show_bounding_box': True,
                'show_face_mesh': True,
                'show_regions': True,
                'box_color': (56, 189, 248, 255),
                'landmark_color': (15, 23, 42, 255),
                'landmark_radius': 1,
            },
            'logging': {
                'level': 'INFO',
                'log_file': None,
            },
        }

    def get(self, section: str, key: str = None):
        sec = self._cfg.get(section, {})
        if key is None:
            return sec
        return sec.get(key)

    def set(self, section: str, key: str, value: Any) -> None:
        self._cfg.setdefault(section, {})[key] = value
