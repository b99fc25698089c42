import numpy as np

from face_regions.sampler import PolygonSampler, point_in_polygon, points_in_polygon, sample_polygon_pixels
from face_regions.types import FrameSnapshot, NormalizedLandmark, Point, RegionDefinition


def make_frame(width, height, blue=7):
    """RGBA frame whose red/green channels hold the pixel's x/y."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    xs, ys = np.meshgrid(np.arange(width), np.arange(height))
    pixels[..., 0] = xs
    pixels[..., 1] = ys
    pixels[..., 2] = blue
    pixels[..., 3] = 255
    return FrameSnapshot(width=width, height=height, pixels=pixels)


def square(x0, y0, x1, y1):
    return [Point(x0, y0), Point(x1, y0), Point(x1, y1), Point(x0, y1)]


def test_point_in_square():
    poly = square(0, 0, 10, 10)
    assert point_in_polygon(5, 5, poly) is True
    assert point_in_polygon(15, 5, poly) is False
    assert point_in_polygon(5, -1, poly) is False


def test_point_in_concave_polygon():
    # U shape: the notch between the arms is outside
    poly = [Point(0, 0), Point(3, 0), Point(3, 6), Point(6, 6), Point(6, 0), Point(9, 0),
            Point(9, 9), Point(0, 9)]
    assert point_in_polygon(1.5, 3, poly)
    assert not point_in_polygon(4.5, 3, poly)
    assert point_in_polygon(4.5, 7.5, poly)


def test_vectorised_test_agrees_with_scalar():
    rng = np.random.default_rng(0)
    poly = [Point(1.5, 2.0), Point(17.0, 4.5), Point(11.0, 16.0), Point(8.0, 9.0), Point(3.0, 14.0)]
    xs = rng.uniform(0, 20, 300)
    ys = rng.uniform(0, 20, 300)
    mask = points_in_polygon(xs, ys, poly)
    expected = [point_in_polygon(x, y, poly) for x, y in zip(xs, ys)]
    assert mask.tolist() == expected


def test_samples_come_out_in_scan_order():
    frame = make_frame(20, 20)
    out = sample_polygon_pixels(frame, square(2, 2, 10, 10), step=4)
    # grid 2,6,10 on both axes; the x=10 column and y=10 row sit on the open edges
    assert out.dtype == np.uint8
    assert out.tolist() == [
        2, 2, 7, 255,
        6, 2, 7, 255,
        2, 6, 7, 255,
        6, 6, 7, 255,
    ]


def test_never_samples_outside_polygon():
    frame = make_frame(40, 40)
    tri = [Point(5, 5), Point(35, 5), Point(5, 35)]
    out = sample_polygon_pixels(frame, tri, step=1).reshape(-1, 4)
    assert len(out) > 0
    for r, g, _, _ in out:
        assert point_in_polygon(int(r), int(g), tri)


def test_polygon_beyond_frame_is_clamped():
    frame = make_frame(8, 8)
    out = sample_polygon_pixels(frame, square(-20, -20, 50, 50), step=2)
    # every grid point of the 8x8 frame is inside
    assert len(out) == 4 * 4 * 4


def test_degenerate_polygon_gives_no_samples():
    frame = make_frame(8, 8)
    assert sample_polygon_pixels(frame, [Point(1, 1), Point(5, 5)], step=1).size == 0
    assert sample_polygon_pixels(frame, [Point(3, 3)] * 5, step=1).size == 0


def test_region_polygons_are_merged():
    # 32x8 frame keeps the normalized coordinates exact
    w, h = 32, 8
    corners = [(0, 0), (7, 0), (7, 1), (0, 1), (20, 0), (25, 0), (25, 1), (20, 1)]
    landmarks = [NormalizedLandmark(x / w, y / h) for x, y in corners]
    region = RegionDefinition(
        id="strip",
        label="Strip",
        color=(255, 0, 0, 64),
        polygons=((0, 1, 2, 3), (4, 5, 6, 7), (0, 1, 999)),
    )
    sample = PolygonSampler(step=1).sample_region(region, landmarks, make_frame(w, h), timestamp=3.0)
    # 7 points in the first strip, 5 in the second, the third polygon resolves to 2 points
    assert sample.channel_samples.size == (7 + 5) * 4
    assert sample.point_count == 12
    assert sample.region_id == "strip"
    reds = sample.channel_samples.reshape(-1, 4)[:, 0].tolist()
    assert reds == [0, 1, 2, 3, 4, 5, 6, 20, 21, 22, 23, 24]


def test_sample_regions_one_result_per_region():
    landmarks = [NormalizedLandmark(x, y) for x, y in [(0.1, 0.1), (0.9, 0.1), (0.9, 0.9), (0.1, 0.9)]]
    regions = [
        RegionDefinition(id="a", label="A", color=(0, 0, 0, 0), polygons=((0, 1, 2, 3),)),
        RegionDefinition(id="b", label="B", color=(0, 0, 0, 0), polygons=((0, 1),)),
    ]
    samples = PolygonSampler(step=6).sample_regions(regions, landmarks, make_frame(64, 64))
    assert [s.region_id for s in samples] == ["a", "b"]
    assert samples[0].point_count > 0
    assert samples[1].channel_samples.size == 0


def test_stride_below_one_is_raised_to_one():
    assert PolygonSampler(step=0).step == 1
