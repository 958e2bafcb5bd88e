"""
HandField Core Interfaces.
Defines the abstract contracts between the tracking side and its consumers.
"""

from abc import ABC, abstractmethod

from handfield.core.types import ContinuousHandMetrics


class IMetricsConsumer(ABC):
    """
    Anything that reacts to the per-tick metrics snapshot (simulator, HUDs, overlays).
    Consumers must treat the snapshot as read-only.
    """

    @abstractmethod
    def on_metrics(self, metrics: ContinuousHandMetrics) -> None: pass
