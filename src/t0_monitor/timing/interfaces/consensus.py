"""
Consensus Estimator Interface

Defines the contract between the pipeline and the event-time estimator.
The pipeline never looks inside the estimator: it asks for one consensus
time per cluster and for a leave-one-out time per record.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

from .data_models import Cluster, ConsensusEstimate, Record


RecordFilter = Callable[[Record], bool]


class ConsensusEstimator(ABC):
    """
    Interface for cluster event-time estimation.

    Implementations must be deterministic for a given cluster content and
    record order, and must not keep state between calls: `unbiased` is
    called once per record of a cluster and each call stands alone.

    Eligibility:
        A record filter decides which records may contribute. When no record
        of a cluster is eligible the pipeline does not call `estimate` at all
        and reports the cluster without consensus.
    """

    def __init__(self, record_filter: Optional[RecordFilter] = None):
        self.record_filter = record_filter

    def is_eligible(self, record: Record) -> bool:
        """True if the record may contribute to a consensus time."""
        if self.record_filter is None:
            return True
        return bool(self.record_filter(record))

    def has_eligible(self, cluster: Cluster) -> bool:
        return any(self.is_eligible(r) for r in cluster)

    @abstractmethod
    def estimate(self, cluster: Cluster) -> ConsensusEstimate:
        """
        Compute the consensus time of a cluster.

        Args:
            cluster: Cluster with at least one eligible record

        Returns:
            ConsensusEstimate(time_ps, uncertainty_ps, multiplicity)
        """
        pass

    @abstractmethod
    def unbiased(self, cluster: Cluster, index: int) -> Tuple[float, float]:
        """
        Recompute the consensus time without `cluster[index]`.

        Used so a record is never compared with an estimate partly derived
        from itself.

        Args:
            cluster: Cluster previously passed to `estimate`
            index: Position of the record to leave out

        Returns:
            (time_ps, uncertainty_ps) of the leave-one-out estimate
        """
        pass
