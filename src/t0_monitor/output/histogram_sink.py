"""
Histogram Sink

Accumulates the monitored timing quantities into fixed-binning histograms:

    EvTimeWrtBC                consensus time w.r.t. its BC
    Deltat_<hypothesis>        t - t0_unbiased - t_exp(h)
    HadronMass, Beta           from track length and flight time
    DeltaBC                    consensus BC - reference BC (signed, across orbits)
    DeltaEvTime_<slot>         consensus (w.r.t. BC) - reference sub-time
    DeltaEvTime_<slot>_SameBC  same, only when both land in the same BC

Reference comparisons are filled only for reliable consensus times.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Sequence

import numpy as np

from ..interfaces.monitor_result import ClusterResult, TimeframeResult
from ..timing.constants import HYPOTHESES
from .sink import AggregationSink

logger = logging.getLogger(__name__)

COMPARED_SLOTS = ("AC", "A", "C")


@dataclass
class Histogram1D:
    """Fixed-binning histogram with under/overflow counters."""
    name: str
    n_bins: int
    low: float
    high: float
    counts: np.ndarray = field(default=None, repr=False)
    underflow: int = 0
    overflow: int = 0

    def __post_init__(self):
        if self.counts is None:
            self.counts = np.zeros(self.n_bins, dtype=np.int64)

    @property
    def edges(self) -> np.ndarray:
        return np.linspace(self.low, self.high, self.n_bins + 1)

    @property
    def entries(self) -> int:
        return int(self.counts.sum()) + self.underflow + self.overflow

    def fill(self, values: Iterable[float]) -> None:
        values = np.asarray(list(values), dtype=np.float64)
        if values.size == 0:
            return
        self.underflow += int(np.count_nonzero(values < self.low))
        self.overflow += int(np.count_nonzero(values >= self.high))
        inside = values[(values >= self.low) & (values < self.high)]
        counts, _ = np.histogram(inside, bins=self.edges)
        self.counts += counts

    def mean(self) -> float:
        """Mean of the in-range content (bin centres), nan when empty."""
        total = self.counts.sum()
        if total == 0:
            return float('nan')
        centres = 0.5 * (self.edges[:-1] + self.edges[1:])
        return float(np.sum(centres * self.counts) / total)

    def reset(self) -> None:
        self.counts[:] = 0
        self.underflow = 0
        self.overflow = 0

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'n_bins': self.n_bins,
            'low': self.low,
            'high': self.high,
            'counts': self.counts.tolist(),
            'underflow': self.underflow,
            'overflow': self.overflow,
        }


class HistogramSink(AggregationSink):
    """In-memory histograms of per-cluster results."""

    def __init__(self, hypotheses: Sequence[str] = HYPOTHESES):
        self.hypotheses = tuple(hypotheses)
        self.histograms: Dict[str, Histogram1D] = {}
        self.n_clusters = 0
        self.n_skipped = 0
        self.n_timeframes = 0

        self._book(Histogram1D("EvTimeWrtBC", 1000, -5000.0, 5000.0))
        for h in self.hypotheses:
            self._book(Histogram1D(f"Deltat_{h}", 500, -5000.0, 5000.0))
        self._book(Histogram1D("HadronMass", 1000, 0.0, 3.0))
        self._book(Histogram1D("Beta", 1000, 0.0, 1.5))
        self._book(Histogram1D("DeltaBC", 16, -8.0, 8.0))
        for slot in COMPARED_SLOTS:
            self._book(Histogram1D(f"DeltaEvTime_{slot}", 200, -2000.0, 2000.0))
            self._book(Histogram1D(f"DeltaEvTime_{slot}_SameBC", 200, -2000.0, 2000.0))

    def _book(self, histogram: Histogram1D) -> None:
        self.histograms[histogram.name] = histogram

    def __getitem__(self, name: str) -> Histogram1D:
        return self.histograms[name]

    def append(self, result: ClusterResult) -> None:
        self.n_clusters += 1
        if not result.has_consensus:
            self.n_skipped += 1
            return

        for residual in result.residuals:
            self["EvTimeWrtBC"].fill([result.consensus_time_wrt_bc_ps])
            for h, delta in residual.delta_t_ps.items():
                if h in self.hypotheses:
                    self[f"Deltat_{h}"].fill([delta])
            if residual.beta is not None:
                self["Beta"].fill([residual.beta])
            if residual.mass is not None:
                self["HadronMass"].fill([residual.mass])

        if not result.is_reliable:
            return

        for match in result.matches:
            self["DeltaBC"].fill([match.delta_bc])
            for slot in COMPARED_SLOTS:
                delta = match.time_deltas_ps.get(slot)
                if delta is None:
                    continue
                self[f"DeltaEvTime_{slot}"].fill([delta])
                if match.same_bc:
                    self[f"DeltaEvTime_{slot}_SameBC"].fill([delta])

    def end_timeframe(self, result: TimeframeResult) -> None:
        self.n_timeframes += 1
        logger.debug(
            f"Histograms after TF {result.timeframe}: "
            f"{self['EvTimeWrtBC'].entries} event-time entries, "
            f"{self['DeltaBC'].entries} reference comparisons"
        )

    def reset(self) -> None:
        """Clear all histograms and counters."""
        for histogram in self.histograms.values():
            histogram.reset()
        self.n_clusters = 0
        self.n_skipped = 0
        self.n_timeframes = 0

    def to_dict(self) -> dict:
        return {
            'n_timeframes': self.n_timeframes,
            'n_clusters': self.n_clusters,
            'n_skipped': self.n_skipped,
            'histograms': {name: h.to_dict() for name, h in self.histograms.items()},
        }
