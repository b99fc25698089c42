import csv
import time
import tracemalloc
from datetime import datetime, timezone

import numpy as np

from config import Config
from face_regions import FACE_REGIONS, FrameSnapshot, NormalizedLandmark, PolygonSampler


def synthetic_landmarks(rng: np.random.Generator, count: int = 468):
    # Scatter the mesh over a face-sized box in the middle of the frame
    xs = rng.uniform(0.35, 0.65, count)
    ys = rng.uniform(0.25, 0.75, count)
    return [NormalizedLandmark(float(x), float(y)) for x, y in zip(xs, ys)]


def run_benchmark(passes: int = 200, csv_path: str = "sampling_metrics.csv"):
    cfg = Config()
    vid_cfg = cfg.get('video')
    width, height = int(vid_cfg.get('width')), int(vid_cfg.get('height'))
    rng = np.random.default_rng(0)
    frame = FrameSnapshot(
        width=width,
        height=height,
        pixels=rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8),
    )
    sampler = PolygonSampler(step=int(cfg.get('pipeline', 'sample_stride_px')))

    tracemalloc.start()
    with open(csv_path, mode='w', newline='') as f:
        w = csv.writer(f)
        w.writerow(['timestamp', 'pass', 'sample_ms', 'points', 'mem_mb'])
        timings = []
        for i in range(passes):
            landmarks = synthetic_landmarks(rng)
            t0 = time.perf_counter()
            samples = sampler.sample_regions(FACE_REGIONS, landmarks, frame)
            dt_ms = (time.perf_counter() - t0) * 1000.0
            timings.append(dt_ms)
            current, _ = tracemalloc.get_traced_memory()
            w.writerow([
                datetime.now(timezone.utc).isoformat(), i, f"{dt_ms:.3f}",
                sum(s.point_count for s in samples), f"{current / (1024.0 * 1024.0):.2f}",
            ])
    tracemalloc.stop()

    print(f"Sampling passes: {passes} on {width}x{height}, stride {sampler.step}px")
    print(f"avg {np.mean(timings):.2f}ms | p95 {np.percentile(timings, 95):.2f}ms | max {np.max(timings):.2f}ms")
    print(f"CSV written: {csv_path}")


if __name__ == "__main__":
    run_benchmark()
