from __future__ import annotations
import logging
from collections import deque

from .types import RegionSample

logger = logging.getLogger(__name__)

PREVIEW_VALUES = 12


class IRegionAnalyzer:
    """Consumer of per-region pixel samples produced by each sampling pass."""

    name = "analyzer"

    def analyze(self, sample: RegionSample) -> None:
        raise NotImplementedError


class _PreviewAnalyzer(IRegionAnalyzer):
    """Placeholder scorer: logs a short preview of the samples it receives."""

    def __init__(self, history_len: int = 32):
        self.received = deque(maxlen=history_len)

    def analyze(self, sample: RegionSample) -> None:
        self.received.append(sample)
        preview = sample.channel_samples[:PREVIEW_VALUES].tolist()
        logger.info("[%s] %s samples=%s count=%d", self.name, sample.region_id, preview,
                    int(sample.channel_samples.size))


class PigmentationAnalyzer(_PreviewAnalyzer):
    name = "Pigmentation"


class WrinkleAnalyzer(_PreviewAnalyzer):
    name = "Wrinkles"
