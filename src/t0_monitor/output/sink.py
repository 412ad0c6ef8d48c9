"""Aggregation sink interface."""

from abc import ABC, abstractmethod

from ..interfaces.monitor_result import ClusterResult, TimeframeResult


class AggregationSink(ABC):
    """
    Append-only consumer of pipeline results.

    `append` receives each cluster as soon as it is processed;
    `end_timeframe` receives the completed timeframe.
    """

    @abstractmethod
    def append(self, result: ClusterResult) -> None:
        pass

    def end_timeframe(self, result: TimeframeResult) -> None:
        """Called once per timeframe after its last cluster."""
        pass
