"""Interface definitions for event-time components."""

from .data_models import Record, Cluster, ReferenceEvent, Timeframe, ConsensusEstimate
from .consensus import ConsensusEstimator, RecordFilter

__all__ = [
    'Record', 'Cluster', 'ReferenceEvent', 'Timeframe', 'ConsensusEstimate',
    'ConsensusEstimator', 'RecordFilter',
]
