"""
t0-monitor: Event-Time Clustering and Reference Correlation

This package monitors the timing performance of a time-of-flight detector.
Within each timeframe it groups time-tagged tracks into interaction
candidates, computes a consensus event time (t0) per candidate and compares
it with an independently time-tagged reference detector on the shared
bunch-crossing clock.

Architecture:
    tracks + reference events → TimeframeProcessor → sinks (histograms, JSON)

Outputs per interaction candidate:
    1. Consensus t0, uncertainty and multiplicity
    2. Per-track leave-one-out residuals (Δt per hypothesis, β, mass)
    3. Matched reference events with same-BC flags and time differences

Version: 1.0.0
"""

__version__ = "1.0.0"

from .interfaces.monitor_result import (
    RecordResidual,
    ReferenceMatch,
    ClusterResult,
    TimeframeResult,
)
from .config import MonitorConfig, load_config
from .exceptions import ConfigurationError, UnsortedReferenceError

__all__ = [
    "RecordResidual",
    "ReferenceMatch",
    "ClusterResult",
    "TimeframeResult",
    "MonitorConfig",
    "load_config",
    "ConfigurationError",
    "UnsortedReferenceError",
    "__version__",
]
