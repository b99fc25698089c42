import logging
import threading
import time
from types import SimpleNamespace

import pytest

tracker_ui = pytest.importorskip("gui.tracker_ui")


class DummyPipeline:
    def __init__(self, events):
        self.events = events
        self.running = True
        self.worker = None
        self.perf = SimpleNamespace(summary=lambda: "frames=0")

    def stop(self):
        self.running = False
        self.events.append("stop")

    def close(self):
        assert not self.worker.is_alive(), "models released while the worker is still inside a call"
        self.events.append("close")


def test_close_waits_for_in_flight_model_call():
    events = []
    pipeline = DummyPipeline(events)
    call_started = threading.Event()

    def worker():
        while pipeline.running:
            call_started.set()
            time.sleep(0.01)
        # model call still running past a short join timeout
        time.sleep(0.7)
        events.append("worker-exit")

    thread = threading.Thread(target=worker, daemon=True)
    pipeline.worker = thread
    app = SimpleNamespace(
        _running=True,
        _worker=thread,
        pipeline=pipeline,
        video_capture=SimpleNamespace(release=lambda: events.append("release")),
        app_logger=logging.getLogger("tracker_ui_test"),
        destroy=lambda: events.append("destroy"),
    )
    thread.start()
    assert call_started.wait(1.0)

    tracker_ui.FaceTrackerApp.on_close(app)

    assert events == ["stop", "worker-exit", "close", "release", "destroy"]
    assert app._running is False
