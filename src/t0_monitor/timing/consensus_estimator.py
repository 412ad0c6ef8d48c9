"""
Robust Consensus Estimator

================================================================================
METHOD
================================================================================
Each record measures the interaction time once its time of flight is
subtracted:

    t0_i(h) = t_i - t_exp_i(h)

for every particle hypothesis h the record carries. The hypothesis is not
known, so:

    1. SEED: median of the reference-hypothesis (pion) candidates
    2. ASSIGN: each record takes the hypothesis whose t0 is closest to the seed
    3. REJECT: from MIN_RECORDS_FOR_OUTLIER_CUT records up, drop candidates
       further than OUTLIER_SIGMA x MAD from the median
       (MAD scaled to a gaussian sigma, floored at MIN_MAD_PS)
    4. COMBINE: mean of the kept t0 values; every record has the same
       resolution, so the uncertainty is resolution / sqrt(n)

Leave-one-out ("unbiased") estimates rerun the whole procedure without the
record, so seed, assignment and outlier cut are all free of its influence.

When nothing usable remains the estimate is 0 ps with the no-estimate
uncertainty and multiplicity 0, which downstream code treats as unreliable.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import median_abs_deviation

from ..exceptions import ConfigurationError
from .constants import (
    HYPOTHESES,
    MAX_ESTIMATOR_MOMENTUM,
    MIN_MAD_PS,
    MIN_RECORDS_FOR_OUTLIER_CUT,
    NO_ESTIMATE_UNCERTAINTY_PS,
    OUTLIER_SIGMA,
    RECORD_RESOLUTION_PS,
    REFERENCE_HYPOTHESIS,
)
from .interfaces.consensus import ConsensusEstimator, RecordFilter
from .interfaces.data_models import Cluster, ConsensusEstimate, Record

logger = logging.getLogger(__name__)


def momentum_filter(max_momentum: float = MAX_ESTIMATOR_MOMENTUM) -> RecordFilter:
    """
    Record filter accepting tracks below `max_momentum`.

    Above ~2 GeV/c the hypotheses can no longer be told apart by time of
    flight. Records without momentum are accepted.
    """
    def accept(record: Record) -> bool:
        return record.p is None or record.p < max_momentum
    return accept


class RobustConsensusEstimator(ConsensusEstimator):
    """Median-seeded, MAD-cleaned mean of per-record t0 candidates."""

    def __init__(
        self,
        record_filter: Optional[RecordFilter] = None,
        hypotheses: Sequence[str] = HYPOTHESES,
        reference_hypothesis: str = REFERENCE_HYPOTHESIS,
        record_resolution_ps: float = RECORD_RESOLUTION_PS,
        outlier_sigma: float = OUTLIER_SIGMA,
        min_mad_ps: float = MIN_MAD_PS,
        no_estimate_uncertainty_ps: float = NO_ESTIMATE_UNCERTAINTY_PS
    ):
        """
        Args:
            record_filter: Eligibility predicate (default: momentum_filter())
            hypotheses: Hypotheses considered when assigning a record
            reference_hypothesis: Hypothesis used to seed the assignment
            record_resolution_ps: Time resolution of one record
            outlier_sigma: Outlier cut in units of the MAD sigma
            min_mad_ps: Floor on the MAD sigma
            no_estimate_uncertainty_ps: Uncertainty reported without any record
        """
        super().__init__(record_filter if record_filter is not None else momentum_filter())
        if record_resolution_ps <= 0:
            raise ConfigurationError(
                f"record_resolution_ps must be positive, got {record_resolution_ps}"
            )
        if outlier_sigma <= 0:
            raise ConfigurationError(f"outlier_sigma must be positive, got {outlier_sigma}")
        if not hypotheses:
            raise ConfigurationError("at least one particle hypothesis is required")

        self.hypotheses = tuple(hypotheses)
        self.reference_hypothesis = reference_hypothesis
        self.record_resolution_ps = float(record_resolution_ps)
        self.outlier_sigma = float(outlier_sigma)
        self.min_mad_ps = float(min_mad_ps)
        self.no_estimate_uncertainty_ps = float(no_estimate_uncertainty_ps)

    def estimate(self, cluster: Cluster) -> ConsensusEstimate:
        return self._solve(cluster.records)

    def unbiased(self, cluster: Cluster, index: int) -> Tuple[float, float]:
        if not self.is_eligible(cluster[index]):
            # Record never contributed: full estimate is already unbiased
            result = self._solve(cluster.records)
        else:
            result = self._solve(cluster.without(index))
        return result.time_ps, result.uncertainty_ps

    def _candidates(self, record: Record) -> Dict[str, float]:
        """t0 candidate per hypothesis the record carries."""
        return {
            h: record.time_ps - record.expected_times[h]
            for h in self.hypotheses
            if h in record.expected_times
        }

    def _solve(self, records: Sequence[Record]) -> ConsensusEstimate:
        candidates: List[Dict[str, float]] = []
        for record in records:
            if not self.is_eligible(record):
                continue
            cands = self._candidates(record)
            if cands:
                candidates.append(cands)

        if not candidates:
            return ConsensusEstimate(0.0, self.no_estimate_uncertainty_ps, 0)

        seed_values = [c[self.reference_hypothesis] for c in candidates if self.reference_hypothesis in c]
        if not seed_values:
            seed_values = [next(iter(c.values())) for c in candidates]
        seed = float(np.median(seed_values))

        t0 = np.array([
            min(c.values(), key=lambda v: (abs(v - seed), v))
            for c in candidates
        ])

        if len(t0) >= MIN_RECORDS_FOR_OUTLIER_CUT:
            center = np.median(t0)
            sigma = max(float(median_abs_deviation(t0, scale='normal')), self.min_mad_ps)
            keep = np.abs(t0 - center) <= self.outlier_sigma * sigma
            n_rejected = int(len(t0) - np.count_nonzero(keep))
            if n_rejected:
                logger.debug(f"Rejected {n_rejected}/{len(t0)} t0 candidates (sigma={sigma:.1f}ps)")
            t0 = t0[keep]

        n = len(t0)
        return ConsensusEstimate(
            time_ps=float(np.mean(t0)),
            uncertainty_ps=float(self.record_resolution_ps / np.sqrt(n)),
            multiplicity=n,
        )
