import itertools

import numpy as np
import pytest

from face_regions.roi import crop_frame, relative_box_to_rect, to_pixel_rect
from face_regions.types import NormalizedRect, PixelRect


def test_unpadded_box_matches_detection():
    rect = NormalizedRect(x_center=0.5, y_center=0.5, width=0.2, height=0.3)
    roi = to_pixel_rect(rect, 640, 480, padding=0.0)
    # 0.2*640 = 128 wide around x=320, 0.3*480 = 144 tall around y=240
    assert roi == PixelRect(x=256, y=168, width=128, height=144)


def test_padding_inflates_both_axes():
    rect = NormalizedRect(x_center=0.5, y_center=0.5, width=0.25, height=0.25)
    roi = to_pixel_rect(rect, 400, 400, padding=0.2)
    assert roi == PixelRect(x=140, y=140, width=120, height=120)


def test_edges_clamp_independently_near_border():
    rect = NormalizedRect(x_center=0.05, y_center=0.5, width=0.2, height=0.2)
    roi = to_pixel_rect(rect, 640, 480, padding=0.0)
    # left edge clamps to 0, right edge stays at 0.15*640 = 96: crop is asymmetric
    assert roi.x == 0
    assert roi.width == 96
    assert roi.y == 192 and roi.height == 96


@pytest.mark.parametrize("rect", [
    None,
    NormalizedRect(x_center=0.5, y_center=0.5, width=0.0, height=0.3),
    NormalizedRect(x_center=0.5, y_center=0.5, width=0.3, height=0.0),
])
def test_missing_or_empty_box_is_no_detection(rect):
    assert to_pixel_rect(rect, 640, 480, padding=0.18) is None


def test_box_outside_frame_still_yields_inside_crop():
    rect = NormalizedRect(x_center=1.5, y_center=-0.8, width=0.2, height=0.2)
    roi = to_pixel_rect(rect, 640, 480, padding=0.18)
    assert roi.width >= 1 and roi.height >= 1
    assert roi.x + roi.width <= 640
    assert roi.y + roi.height <= 480


def test_roi_always_contained_in_frame():
    centers = [-0.2, 0.0, 0.13, 0.5, 0.77, 1.0, 1.3]
    sizes = [0.01, 0.2, 0.55, 1.0, 1.7]
    paddings = [0.0, 0.18, 0.5, 2.0]
    for cx, cy, w, h, p in itertools.product(centers, centers, sizes, sizes, paddings):
        roi = to_pixel_rect(NormalizedRect(cx, cy, w, h), 721, 541, padding=p)
        assert roi is not None
        assert roi.x >= 0 and roi.y >= 0
        assert roi.width >= 1 and roi.height >= 1
        assert roi.x + roi.width <= 721
        assert roi.y + roi.height <= 541


def test_negative_padding_treated_as_zero():
    rect = NormalizedRect(x_center=0.5, y_center=0.5, width=0.2, height=0.3)
    assert to_pixel_rect(rect, 640, 480, padding=-0.5) == to_pixel_rect(rect, 640, 480, padding=0.0)


def test_relative_box_to_center_form():
    rect = relative_box_to_rect({'xmin': 0.4, 'ymin': 0.3, 'width': 0.2, 'height': 0.4})
    assert rect.x_center == pytest.approx(0.5)
    assert rect.y_center == pytest.approx(0.5)
    assert rect.rotation == 0.0


def test_relative_box_zero_size_is_none():
    assert relative_box_to_rect({'xmin': 0.4, 'ymin': 0.3, 'width': 0.0, 'height': 0.4}) is None
    assert relative_box_to_rect(None) is None


def test_crop_frame_copies_roi_pixels():
    frame = np.arange(10 * 8 * 3, dtype=np.uint8).reshape(8, 10, 3)
    roi = PixelRect(x=2, y=1, width=4, height=3)
    crop = crop_frame(frame, roi)
    assert crop.shape == (3, 4, 3)
    assert np.array_equal(crop, frame[1:4, 2:6])
    crop[0, 0, 0] = 255
    assert frame[1, 2, 0] == 36
