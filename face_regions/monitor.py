from __future__ import annotations
from collections import deque
from .types import PerformanceStats


class PerformanceMonitor:
    """Tracks per-stage timings and frame drops for debugging and tuning."""

    def __init__(self, history_len: int = 200):
        self.detect_ms = deque(maxlen=history_len)
        self.landmark_ms = deque(maxlen=history_len)
        self.remap_ms = deque(maxlen=history_len)
        self.sample_ms = deque(maxlen=history_len)
        self.total_ms = deque(maxlen=history_len)
        self.frames = 0
        self.dropped_frames = 0
        self.sampling_passes = 0

    def record(self, stats: PerformanceStats, sampled: bool = False):
        self.frames += 1
        self.detect_ms.append(stats.t_detect_ms)
        self.landmark_ms.append(stats.t_landmark_ms)
        self.remap_ms.append(stats.t_remap_ms)
        if sampled:
            self.sampling_passes += 1
            self.sample_ms.append(stats.t_sample_ms)
        self.total_ms.append(stats.t_total_ms)

    def record_drop(self):
        self.dropped_frames += 1

    def summary(self) -> dict:
        def avg(q):
            return float(sum(q) / len(q)) if q else 0.0
        return {
            "frames": self.frames,
            "dropped_frames": self.dropped_frames,
            "sampling_passes": self.sampling_passes,
            "avg_detect_ms": avg(self.detect_ms),
            "avg_landmark_ms": avg(self.landmark_ms),
            "avg_remap_ms": avg(self.remap_ms),
            "avg_sample_ms": avg(self.sample_ms),
            "avg_total_ms": avg(self.total_ms),
        }
