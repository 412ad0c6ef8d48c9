"""Result contracts published to aggregation sinks."""

from .monitor_result import RecordResidual, ReferenceMatch, ClusterResult, TimeframeResult

__all__ = ['RecordResidual', 'ReferenceMatch', 'ClusterResult', 'TimeframeResult']
