from typing import Optional, Tuple, Dict, Any
import logging
import queue
import threading
import time

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class VideoCapture:
    """Threaded OpenCV frame source with a small drop-oldest queue.

    Expects cfg keys: capture_index, width, height, fps, buffersize, dropout_hold_ms.
    A capture index may also be a video file path. Frames are delivered
    serially through `get_frame()`; nothing is guaranteed about cadence.
    """

    def __init__(self, cfg: Dict[str, Any]):
        self.source = cfg.get('capture_index', 0)
        self.width = int(cfg.get('width', 720))
        self.height = int(cfg.get('height', 540))
        self.target_fps = float(cfg.get('fps', 30))
        self.buffersize = int(cfg.get('buffersize', 2))
        self.dropout_hold_ms = int(cfg.get('dropout_hold_ms', 200))

        self.cap: Optional[cv2.VideoCapture] = None
        self._queue: queue.Queue = queue.Queue(maxsize=max(1, self.buffersize))
        self._running = False
        self._capture_thread: Optional[threading.Thread] = None
        self._last_frame: Optional[np.ndarray] = None
        self._last_frame_ts = 0.0
        self._fps_count = 0
        self._fps_start = time.time()
        self._fail_count = 0

    def start(self) -> bool:
        """Open the device and start the capture thread; returns False if the device is unavailable."""
        if self._running:
            return True
        cap = cv2.VideoCapture(self.source)
        if not cap or not cap.isOpened():
            logger.error("could not open video source %r", self.source)
            return False
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, int(self.width))
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, int(self.height))
        cap.set(cv2.CAP_PROP_FPS, float(self.target_fps))
        cap.set(cv2.CAP_PROP_BUFFERSIZE, int(self.buffersize))
        self.cap = cap
        self._running = True
        self._capture_thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._capture_thread.start()
        logger.info("video source %r opened", self.source)
        return True

    @property
    def running(self) -> bool:
        return self._running

    def _put(self, frame: np.ndarray) -> None:
        if self._queue.full():
            try:
                self._queue.get_nowait()
            except queue.Empty:
                pass
        self._queue.put_nowait(frame)

    def _capture_loop(self):
        while self._running:
            ok, frame = self.cap.read()
            now = time.time()
            if ok and frame is not None:
                self._fps_count += 1
                self._fail_count = 0
                self._last_frame = frame
                self._last_frame_ts = now
                self._put(frame)
                continue

            self._fail_count += 1
            # Hold the last frame briefly so short dropouts do not blank the view
            hold_ok = self._last_frame is not None and (now - self._last_frame_ts) * 1000.0 < self.dropout_hold_ms
            if hold_ok:
                self._put(self._last_frame)
            time.sleep(0.01)

    def get_frame(self, timeout: float = 0.05) -> Tuple[bool, Optional[np.ndarray]]:
        if not self._running:
            return False, None
        try:
            return True, self._queue.get(timeout=timeout)
        except queue.Empty:
            return False, None

    def get_status(self) -> Dict[str, Any]:
        now = time.time()
        elapsed = max(1e-3, now - self._fps_start)
        fps = float(self._fps_count) / elapsed
        if elapsed >= 1.0:
            self._fps_start = now
            self._fps_count = 0
        return {
            'connected': bool(self.cap is not None and self.cap.isOpened()),
            'resolution': (self.width, self.height),
            'fps_target': self.target_fps,
            'fps_measured': fps,
            'fail_count': self._fail_count,
        }

    def release(self) -> None:
        self._running = False
        if self._capture_thread:
            self._capture_thread.join(timeout=0.5)
            self._capture_thread = None
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        while not self._queue.empty():
            self._queue.get_nowait()
