from face_regions.throttle import RateLimiter, StatusTracker
from face_regions.types import PipelineStatus


def test_rate_limiter_fires_once_per_interval():
    limiter = RateLimiter(interval_ms=1000)
    fired = [t for t in (0, 200, 999) if limiter.try_fire(t)]
    assert fired == [0]
    assert limiter.try_fire(1001) is True
    assert limiter.try_fire(2001) is False


def test_rate_limiter_needs_strictly_more_than_interval():
    limiter = RateLimiter(interval_ms=1000)
    assert limiter.try_fire(5000)
    assert not limiter.try_fire(6000)
    assert limiter.try_fire(6000.5)


def test_rate_limiter_reset_fires_again():
    limiter = RateLimiter(interval_ms=1000)
    assert limiter.try_fire(10)
    limiter.reset()
    assert limiter.try_fire(20)


def test_status_tracker_is_edge_triggered():
    seen = []
    tracker = StatusTracker(on_change=seen.append)
    assert tracker.status is PipelineStatus.IDLE
    assert tracker.update(PipelineStatus.NO_FACE) is True
    assert tracker.update(PipelineStatus.NO_FACE) is False
    tracker.update(PipelineStatus.TRACKING)
    tracker.update(PipelineStatus.TRACKING)
    tracker.update(PipelineStatus.NO_FACE)
    assert seen == ["No face detected", "Tracking face", "No face detected"]


def test_status_tracker_without_listener():
    tracker = StatusTracker()
    tracker.update(PipelineStatus.SEARCHING)
    assert tracker.status is PipelineStatus.SEARCHING
