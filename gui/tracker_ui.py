from __future__ import annotations
import time
import threading
import queue
import logging
from typing import Optional

import cv2
from PIL import Image
import customtkinter as ctk
from customtkinter import CTkImage

from config import Config
from video_capture import VideoCapture
from face_regions import (
    EventLogger,
    FaceRegionPipeline,
    ModelUnavailableError,
    OverlayRenderer,
    PigmentationAnalyzer,
    PipelineStatus,
    WrinkleAnalyzer,
)
from face_regions.detection import create_mediapipe_models
from face_regions.regions import FACE_REGIONS, load_regions


class FaceTrackerApp(ctk.CTk):
    """Start button, overlay toggles, live view with overlay and a status line."""

    def __init__(self, cfg: Optional[Config] = None):
        super().__init__()
        self.title("Face Region Tracker")
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        self.app_logger = logging.getLogger(__name__)
        self.app_logger.info("Application started.")

        self.cfg = cfg or Config()
        self.video_capture = VideoCapture(self.cfg.get('video'))

        try:
            detector, landmarker = create_mediapipe_models(self.cfg)
        except ModelUnavailableError as e:
            self.app_logger.error(str(e))
            detector, landmarker = None, None

        regions_file = self.cfg.get('pipeline', 'regions_file')
        regions = load_regions(regions_file) if regions_file else FACE_REGIONS

        self._status_queue: queue.Queue = queue.Queue()
        self._ui_queue: queue.Queue = queue.Queue(maxsize=2)
        self.pipeline = FaceRegionPipeline(
            detector,
            landmarker,
            config=self.cfg,
            regions=regions,
            analyzers=[PigmentationAnalyzer(), WrinkleAnalyzer()],
            logger=EventLogger(name="face_regions.pipeline"),
            on_status=self._status_queue.put,
        )
        self.renderer = OverlayRenderer(self.pipeline.overlay_options)

        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)
        self.grid_columnconfigure(2, weight=1)
        self.grid_columnconfigure(3, weight=1)

        self.btn_start = ctk.CTkButton(self, text="Start Camera", command=self._on_start)
        self.btn_start.grid(row=0, column=0, padx=10, pady=8, sticky="w")

        opts = self.pipeline.overlay_options
        self.var_mesh = ctk.BooleanVar(value=opts.show_face_mesh)
        self.var_box = ctk.BooleanVar(value=opts.show_bounding_box)
        self.var_regions = ctk.BooleanVar(value=opts.show_regions)
        ctk.CTkSwitch(self, text="Face mesh", variable=self.var_mesh, command=self._on_toggle).grid(row=0, column=1, padx=6)
        ctk.CTkSwitch(self, text="Bounding box", variable=self.var_box, command=self._on_toggle).grid(row=0, column=2, padx=6)
        ctk.CTkSwitch(self, text="Regions", variable=self.var_regions, command=self._on_toggle).grid(row=0, column=3, padx=6)

        self.lbl_status = ctk.CTkLabel(self, text=PipelineStatus.IDLE.message, font=("Arial", 14))
        self.lbl_status.grid(row=1, column=0, columnspan=4, sticky="w", padx=10, pady=6)

        self.lbl_canvas = ctk.CTkLabel(self, text="Camera preview appears here")
        self.lbl_canvas.grid(row=2, column=0, columnspan=4, padx=10, pady=10)

        self.lbl_video = ctk.CTkLabel(self, text="Video: idle", font=("Arial", 12))
        self.lbl_video.grid(row=3, column=0, columnspan=4, sticky="w", padx=10, pady=6)

        self._running = True
        self._worker: Optional[threading.Thread] = None
        self.after(16, self._ui_pump)

    def _on_toggle(self):
        opts = self.pipeline.overlay_options
        opts.show_face_mesh = bool(self.var_mesh.get())
        opts.show_bounding_box = bool(self.var_box.get())
        opts.show_regions = bool(self.var_regions.get())

    def _on_start(self):
        if self.pipeline.running:
            return
        self.btn_start.configure(state="disabled", text="Starting...")
        if not self.video_capture.start():
            self.lbl_status.configure(text="Camera access failed. Check the device and try again.")
            self.btn_start.configure(state="normal", text="Start Camera")
            return
        self.pipeline.start()
        self.btn_start.configure(text="Camera Active")
        self._worker = threading.Thread(target=self._loop, daemon=True)
        self._worker.start()

    def _loop(self):
        while self._running and self.pipeline.running:
            ok, frame = self.video_capture.get_frame(timeout=0.05)
            if not ok or frame is None:
                continue
            try:
                out = self.pipeline.process_frame(frame)
            except Exception as e:
                self.app_logger.error(f"Error in pipeline loop: {e}")
                continue
            view = self.renderer.draw(frame.copy(), out.overlay)
            if self._ui_queue.full():
                try:
                    self._ui_queue.get_nowait()
                except queue.Empty:
                    pass
            self._ui_queue.put_nowait(view)
            time.sleep(0.001)

    def _ui_pump(self):
        # Apply worker results on the UI thread
        while not self._status_queue.empty():
            self.lbl_status.configure(text=self._status_queue.get_nowait())

        try:
            frame = self._ui_queue.get_nowait()
        except queue.Empty:
            frame = None
        if frame is not None:
            img_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            im = Image.fromarray(img_rgb)
            im_ctk = CTkImage(light_image=im, dark_image=im, size=(img_rgb.shape[1], img_rgb.shape[0]))
            self.lbl_canvas.configure(image=im_ctk, text="")
            self.lbl_canvas.image = im_ctk
            status = self.video_capture.get_status()
            w, h = img_rgb.shape[1], img_rgb.shape[0]
            self.lbl_video.configure(text=f"Video: {w}x{h} @ {status['fps_measured']:.1f}fps | fails:{status['fail_count']}")

        if self._running:
            self.after(16, self._ui_pump)

    def on_close(self):
        # Models are released only after the worker's in-flight call returns
        self._running = False
        self.pipeline.stop()
        if self._worker:
            self._worker.join()
            self._worker = None
        self.pipeline.close()
        self.video_capture.release()
        self.app_logger.info(f"Application closed. {self.pipeline.perf.summary()}")
        self.destroy()


def run_app(cfg: Optional[Config] = None):
    app = FaceTrackerApp(cfg)
    app.protocol("WM_DELETE_WINDOW", app.on_close)
    app.mainloop()
