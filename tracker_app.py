"""
Face Region Tracker - entry point
Runs the two-stage face pipeline in the GUI, or headless in an OpenCV window.
"""

import argparse
import logging

import cv2

from config import Config
from video_capture import VideoCapture
from face_regions import (
    EventLogger,
    FaceRegionPipeline,
    ModelUnavailableError,
    OverlayRenderer,
    PigmentationAnalyzer,
    WrinkleAnalyzer,
)
from face_regions.detection import create_mediapipe_models
from face_regions.regions import FACE_REGIONS, load_regions


def build_config(args: argparse.Namespace) -> Config:
    cfg = Config()
    if args.source is not None:
        cfg.set('video', 'capture_index', int(args.source) if args.source.isdigit() else args.source)
    if args.regions:
        cfg.set('pipeline', 'regions_file', args.regions)
    if args.padding is not None:
        cfg.set('pipeline', 'roi_padding', args.padding)
    if args.interval_ms is not None:
        cfg.set('pipeline', 'sample_interval_ms', args.interval_ms)
    if args.stride is not None:
        cfg.set('pipeline', 'sample_stride_px', args.stride)
    if args.min_confidence is not None:
        cfg.set('face_detection', 'min_detection_confidence', args.min_confidence)
        cfg.set('face_mesh', 'min_detection_confidence', args.min_confidence)
        cfg.set('face_mesh', 'min_tracking_confidence', args.min_confidence)
    cfg.set('logging', 'level', args.log_level)
    cfg.set('logging', 'log_file', args.log_file)
    return cfg


def configure_logging(cfg: Config) -> None:
    kwargs = {
        'level': getattr(logging, str(cfg.get('logging', 'level')).upper(), logging.INFO),
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    }
    if cfg.get('logging', 'log_file'):
        kwargs['filename'] = cfg.get('logging', 'log_file')
        kwargs['filemode'] = 'a'
    logging.basicConfig(**kwargs)


def run_headless(cfg: Config) -> int:
    log = logging.getLogger("tracker_app")
    try:
        detector, landmarker = create_mediapipe_models(cfg)
    except ModelUnavailableError as e:
        log.error(str(e))
        detector, landmarker = None, None

    regions_file = cfg.get('pipeline', 'regions_file')
    pipeline = FaceRegionPipeline(
        detector,
        landmarker,
        config=cfg,
        regions=load_regions(regions_file) if regions_file else FACE_REGIONS,
        analyzers=[PigmentationAnalyzer(), WrinkleAnalyzer()],
        logger=EventLogger(name="face_regions.pipeline"),
        on_status=lambda msg: log.info("status: %s", msg),
    )
    renderer = OverlayRenderer(pipeline.overlay_options)
    video = VideoCapture(cfg.get('video'))
    try:
        if not video.start():
            log.error("Camera access failed.")
            return 1
        pipeline.start()
        while True:
            ok, frame = video.get_frame(timeout=0.1)
            if ok and frame is not None:
                out = pipeline.process_frame(frame)
                cv2.imshow("Face Region Tracker", renderer.draw(frame.copy(), out.overlay))
            if cv2.waitKey(1) & 0xFF in (ord('q'), 27):
                break
    finally:
        pipeline.close()
        video.release()
        cv2.destroyAllWindows()
        log.info("session summary: %s", pipeline.perf.summary())
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Face Region Tracker")
    parser.add_argument("--headless", action="store_true", help="OpenCV window instead of the GUI")
    parser.add_argument("--source", default=None, help="camera index or video file path")
    parser.add_argument("--regions", default=None, help="JSON file with region definitions")
    parser.add_argument("--padding", type=float, default=None, help="ROI padding fraction")
    parser.add_argument("--interval-ms", type=float, default=None, help="region sampling interval")
    parser.add_argument("--stride", type=int, default=None, help="sampling stride in pixels")
    parser.add_argument("--min-confidence", type=float, default=None, help="detector/mesh confidence threshold")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    args = parser.parse_args(argv)

    cfg = build_config(args)
    configure_logging(cfg)
    if args.headless:
        return run_headless(cfg)

    from gui.tracker_ui import run_app
    run_app(cfg)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
