"""
HandField Tracking Session.
==========================

Glue between the tracker callback and everything that reacts to the hand.
One session owns one metrics extractor; every tracking tick produces one
immutable snapshot which is handed to each subscribed consumer in order.

The tracker runs at its own cadence (decoupled from the render rate), so
consumers such as the particle field only keep the latest snapshot.
"""

import logging
import time
from typing import Any, List, Optional

from handfield.core.interfaces import IMetricsConsumer
from handfield.core.metrics import HandMetricsExtractor
from handfield.core.types import ContinuousHandMetrics

logger = logging.getLogger(__name__)


class HandTrackingSession:
    """
    Attributes:
        extractor (HandMetricsExtractor): The per-session signal chain.
        latest (ContinuousHandMetrics): Last published snapshot.
    """

    def __init__(self, extractor: Optional[HandMetricsExtractor] = None, config=None):
        self.extractor = extractor or HandMetricsExtractor(config=config)
        self.latest = ContinuousHandMetrics.empty()
        self._consumers: List[IMetricsConsumer] = []
        self._last_timestamp: Optional[float] = None
        self.running = True

    def subscribe(self, consumer: IMetricsConsumer) -> None:
        if consumer not in self._consumers:
            self._consumers.append(consumer)

    def unsubscribe(self, consumer: IMetricsConsumer) -> None:
        if consumer in self._consumers:
            self._consumers.remove(consumer)

    def process(self, landmarks: Any, timestamp: Optional[float] = None,
                confidence: Optional[float] = None) -> ContinuousHandMetrics:
        """
        Tracker callback: one frame (or None) in, one published snapshot out.

        Args:
            landmarks: 21-joint frame, or None when no hand was detected.
            timestamp: Capture time in seconds; the monotonic clock when omitted.
            confidence: Optional tracker score for the hand.
        """
        now = time.monotonic() if timestamp is None else float(timestamp)
        # First tick (or after a restart) has no interval: the extractor uses its nominal tick
        dt = None if self._last_timestamp is None else now - self._last_timestamp
        if dt is None or dt <= 0:
            dt = self.extractor.cfg["NOMINAL_DT"]
        self._last_timestamp = now

        metrics = self.extractor.extract(landmarks, dt=dt, confidence=confidence)
        self.publish(metrics)
        return metrics

    def publish(self, metrics: ContinuousHandMetrics) -> None:
        self.latest = metrics
        for consumer in list(self._consumers):
            consumer.on_metrics(metrics)

    def restart(self) -> None:
        """Tracking source restarted: never smooth across the discontinuity."""
        self.extractor.reset()
        self._last_timestamp = None
        self.latest = ContinuousHandMetrics.empty()
        self.running = True
        logger.info("Tracking session restarted")

    def stop(self) -> None:
        self.extractor.reset()
        self._last_timestamp = None
        self.running = False
        logger.info("Tracking session stopped")
