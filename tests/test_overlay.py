import numpy as np

from config import Config
from face_regions.overlay import OverlayOptions, OverlayRenderer, build_overlay
from face_regions.types import (
    FrameSnapshot,
    NormalizedLandmark,
    NormalizedRect,
    PixelRect,
    RegionDefinition,
    TrackingSnapshot,
)

REGIONS = (
    RegionDefinition(id="box", label="Box", color=(255, 0, 0, 128), polygons=((0, 1, 2, 3), (0, 1))),
)
LANDMARKS = (
    NormalizedLandmark(0.25, 0.25),
    NormalizedLandmark(0.75, 0.25),
    NormalizedLandmark(0.75, 0.75),
    NormalizedLandmark(0.25, 0.75),
)


def tracked_snapshot(width=100, height=80):
    frame = FrameSnapshot(width=width, height=height, pixels=np.zeros((height, width, 4), dtype=np.uint8))
    return TrackingSnapshot(
        frame_index=1,
        frame=frame,
        rect=NormalizedRect(0.5, 0.5, 0.6, 0.6),
        roi=PixelRect(20, 16, 60, 48),
        landmarks=LANDMARKS,
    )


def test_overlay_contains_everything_by_default():
    overlay = build_overlay(tracked_snapshot(), REGIONS)
    assert overlay.frame_size == (100, 80)
    assert overlay.bounding_box.width == 0.6
    assert len(overlay.landmarks) == 4
    # the two-point polygon is skipped
    assert len(overlay.region_polygons) == 1
    pts = overlay.region_polygons[0].points
    assert (pts[0].x, pts[0].y) == (25.0, 20.0)
    assert overlay.region_polygons[0].color == (255, 0, 0, 128)


def test_overlay_toggles():
    opts = OverlayOptions(show_bounding_box=False, show_face_mesh=False, show_regions=False)
    overlay = build_overlay(tracked_snapshot(), REGIONS, opts)
    assert overlay.frame_size == (100, 80)
    assert overlay.bounding_box is None
    assert overlay.landmarks is None
    assert overlay.region_polygons is None


def test_overlay_without_frame_is_empty():
    overlay = build_overlay(TrackingSnapshot(), REGIONS)
    assert overlay.frame_size is None and overlay.landmarks is None


def test_options_from_config():
    cfg = Config()
    cfg.set('overlay', 'show_face_mesh', False)
    cfg.set('overlay', 'landmark_radius', 3)
    opts = OverlayOptions.from_config(cfg)
    assert opts.show_face_mesh is False
    assert opts.show_regions is True
    assert opts.landmark_radius == 3


def test_renderer_draws_on_frame():
    frame = np.zeros((80, 100, 3), dtype=np.uint8)
    overlay = build_overlay(tracked_snapshot(), REGIONS)
    out = OverlayRenderer().draw(frame, overlay)
    assert out is frame
    # red region fill lands in the BGR red channel at the polygon center
    assert frame[40, 50, 2] > 0
    # outside everything stays black
    assert frame[2, 2].tolist() == [0, 0, 0]


def test_renderer_ignores_empty_overlay():
    frame = np.zeros((10, 10, 3), dtype=np.uint8)
    OverlayRenderer().draw(frame, build_overlay(TrackingSnapshot(), REGIONS))
    assert not frame.any()
