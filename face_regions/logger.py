from __future__ import annotations
import logging
import time
from typing import Callable, Optional


class EventLogger:
    """Pipeline logger that writes to stdlib logging and can also feed a UI log.

    Keeps the pipeline unaware of the GUI while still surfacing its events there.
    """

    def __init__(self, name: str = "face_regions", ui_logger: Optional[Callable[[str], None]] = None):
        self.name = name
        self.ui_logger = ui_logger
        self._log = logging.getLogger(name)

    def _emit(self, level: int, msg: str):
        self._log.log(level, msg)
        if self.ui_logger and self._log.isEnabledFor(level):
            ts = time.strftime("%H:%M:%S")
            self.ui_logger(f"[{ts}] {logging.getLevelName(level)}: {msg}")

    def info(self, msg: str):
        self._emit(logging.INFO, msg)

    def debug(self, msg: str):
        self._emit(logging.DEBUG, msg)

    def warning(self, msg: str):
        self._emit(logging.WARNING, msg)

    def error(self, msg: str):
        self._emit(logging.ERROR, msg)
