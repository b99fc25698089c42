class ModelUnavailableError(Exception):
    """Raised when a detection or landmark model cannot be created or used."""


class FaceDetectionError(Exception):
    """Raised when stage-1 face detection fails or yields invalid data."""


class LandmarkError(Exception):
    """Raised when stage-2 landmark location fails on a cropped frame."""


class RegionDefinitionError(Exception):
    """Raised when a region table is malformed."""
