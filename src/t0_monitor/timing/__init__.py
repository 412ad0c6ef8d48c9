"""
Event-time processing for t0-monitor.

Core algorithms: clock conversion, record clustering, consensus estimation
and reference-detector matching.
"""

from .time_axis import TimeAxis
from .window_clusterer import WindowClusterer
from .consensus_estimator import RobustConsensusEstimator, momentum_filter
from .reference_matcher import ReferenceMatcher
from .selection import RecordSelector

__all__ = [
    'TimeAxis', 'WindowClusterer', 'RobustConsensusEstimator', 'momentum_filter',
    'ReferenceMatcher', 'RecordSelector',
]
