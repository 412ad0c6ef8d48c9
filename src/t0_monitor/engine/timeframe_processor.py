#!/usr/bin/env python3
"""
Timeframe Processor - orchestrates the event-time pipeline

One timeframe is processed in a single pass:

    records ──▶ selection ──▶ clustering ──▶ consensus t0 ──▶ residuals
                                                  │
    reference events ──▶ sort ──▶ cursor matching ◀┘
                                                  │
                                                  ▼
                                         aggregation sinks

Every stage consumes its whole input before the next one starts. The
reference matcher (and with it the cursor) is created per timeframe and
dropped at its end; only the sinks and the counters survive between
timeframes.
"""

import logging
import math
from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional

from ..config import MonitorConfig
from ..interfaces.monitor_result import (
    ClusterResult,
    RecordResidual,
    ReferenceMatch,
    TimeframeResult,
)
from ..output.sink import AggregationSink
from ..timing.constants import C_INV_PS_PER_CM, REFERENCE_TIME_SLOTS
from ..timing.consensus_estimator import RobustConsensusEstimator, momentum_filter
from ..timing.interfaces.consensus import ConsensusEstimator
from ..timing.interfaces.data_models import Cluster, Record, Timeframe
from ..timing.reference_matcher import ReferenceMatcher
from ..timing.selection import RecordSelector
from ..timing.time_axis import TimeAxis
from ..timing.window_clusterer import WindowClusterer

logger = logging.getLogger(__name__)


@dataclass
class ProcessorStats:
    """Counters accumulated across timeframes."""
    timeframes: int = 0
    records: int = 0
    clusters: int = 0
    skipped_clusters: int = 0
    matches: int = 0
    same_bc_matches: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class TimeframeProcessor:
    """
    Runs selection, clustering, estimation and matching for each timeframe
    and hands the per-cluster results to the registered sinks.
    """

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        estimator: Optional[ConsensusEstimator] = None,
        selector: Optional[RecordSelector] = None,
        sinks: Optional[Iterable[AggregationSink]] = None
    ):
        """
        Args:
            config: Monitor configuration (validated here)
            estimator: Consensus estimator (default built from config)
            selector: Record selection (default built from config)
            sinks: Consumers of cluster and timeframe results
        """
        self.config = (config or MonitorConfig()).validate()
        cfg = self.config

        self.time_axis = TimeAxis(cfg.bc_duration_ps, cfg.max_bunches_per_orbit)
        self.clusterer = WindowClusterer(cfg.gap_threshold_ps)
        self.estimator = estimator or RobustConsensusEstimator(
            record_filter=momentum_filter(cfg.max_momentum),
            hypotheses=cfg.hypotheses,
            record_resolution_ps=cfg.record_resolution_ps,
            outlier_sigma=cfg.outlier_sigma,
        )
        self.selector = selector or RecordSelector(
            min_pt=cfg.min_pt,
            max_abs_eta=cfg.max_abs_eta,
            min_n_clusters=cfg.min_n_clusters,
        )
        self.sinks: List[AggregationSink] = list(sinks or [])
        self.stats = ProcessorStats()

    def add_sink(self, sink: AggregationSink) -> None:
        self.sinks.append(sink)

    def process(self, timeframe: Timeframe) -> TimeframeResult:
        """
        Process one timeframe.

        Raises:
            ValueError: a reference event's bc lies outside the orbit
        """
        logger.info(
            f"Processing TF {timeframe.index}: {len(timeframe.records)} records, "
            f"{len(timeframe.reference_events)} reference events"
        )

        selected = self.selector.select(timeframe.records)
        clusters = self.clusterer.cluster(selected)

        matcher = ReferenceMatcher(
            ReferenceMatcher.sort_events(timeframe.reference_events),
            first_orbit=timeframe.first_orbit,
            time_axis=self.time_axis,
            match_window_bc=self.config.match_window_bc,
        )

        result = TimeframeResult(
            timeframe=timeframe.index,
            first_orbit=timeframe.first_orbit,
            n_records=len(timeframe.records),
            n_selected=len(selected),
            n_reference_events=len(timeframe.reference_events),
        )

        if not clusters:
            logger.debug(f"TF {timeframe.index}: no clusters")

        for index, cluster in enumerate(clusters):
            cluster_result = self._process_cluster(timeframe.index, index, cluster, matcher)
            result.clusters.append(cluster_result)
            if not cluster_result.has_consensus:
                result.n_skipped_clusters += 1
            for sink in self.sinks:
                sink.append(cluster_result)

        result.cursor_advances = matcher.cursor_advances

        for sink in self.sinks:
            sink.end_timeframe(result)

        self.stats.timeframes += 1
        self.stats.records += result.n_records
        self.stats.clusters += result.n_clusters
        self.stats.skipped_clusters += result.n_skipped_clusters
        self.stats.matches += result.n_matches
        self.stats.same_bc_matches += sum(c.n_same_bc for c in result.clusters)

        logger.info(
            f"TF {timeframe.index}: {result.n_clusters} clusters "
            f"({result.n_skipped_clusters} without consensus), {result.n_matches} reference matches"
        )
        return result

    def _process_cluster(
        self,
        timeframe_index: int,
        index: int,
        cluster: Cluster,
        matcher: ReferenceMatcher
    ) -> ClusterResult:
        """Consensus, residuals and reference matches of one cluster."""
        result = ClusterResult(
            timeframe=timeframe_index,
            cluster_index=index,
            n_records=len(cluster),
            first_time_ps=cluster.first_time_ps,
            last_time_ps=cluster.last_time_ps,
        )

        if not self.estimator.has_eligible(cluster):
            logger.debug(f"TF {timeframe_index} cluster {index}: no eligible records, skipped")
            return result

        estimate = self.estimator.estimate(cluster)
        if estimate.multiplicity == 0:
            logger.debug(f"TF {timeframe_index} cluster {index}: no usable t0 candidates, skipped")
            return result

        n_bc = self.time_axis.bc_number(estimate.time_ps, self.config.half_bc_offset_ps)
        time_wrt_bc = self.time_axis.time_wrt_bc(estimate.time_ps, n_bc)

        result.has_consensus = True
        result.consensus_time_ps = estimate.time_ps
        result.consensus_uncertainty_ps = estimate.uncertainty_ps
        result.multiplicity = estimate.multiplicity
        result.consensus_bc = n_bc
        result.consensus_time_wrt_bc_ps = time_wrt_bc
        result.is_reliable = estimate.uncertainty_ps < self.config.max_consensus_uncertainty_ps

        result.residuals = [self._residual(cluster, i) for i in range(len(cluster))]

        for event in matcher.match(cluster):
            deltas = {}
            for slot in REFERENCE_TIME_SLOTS:
                sub_time = event.time_of(slot)
                if sub_time is not None:
                    deltas[slot] = time_wrt_bc - sub_time
            result.matches.append(ReferenceMatch(
                bc=event.bc,
                orbit=matcher.relative_orbit(event),
                time_ps=self.time_axis.bc_time(matcher.relative_orbit(event), event.bc),
                same_bc=matcher.same_bc(n_bc, event),
                delta_bc=matcher.delta_bc(n_bc, event),
                time_deltas_ps=deltas,
            ))

        logger.debug(
            f"TF {timeframe_index} cluster {index}: t0={estimate.time_ps:.1f}"
            f"±{estimate.uncertainty_ps:.1f}ps (n={estimate.multiplicity}), BC={n_bc}, "
            f"{len(result.matches)} matches"
        )
        return result

    def _residual(self, cluster: Cluster, index: int) -> RecordResidual:
        record: Record = cluster[index]
        t0, t0_err = self.estimator.unbiased(cluster, index)
        flight_ps = record.time_ps - t0

        beta = None
        mass = None
        if record.length_cm is not None and flight_ps > 0:
            beta = record.length_cm / flight_ps * C_INV_PS_PER_CM
            if record.p is not None and beta > 0:
                mass = record.p / beta * math.sqrt(abs(1.0 - beta * beta))

        return RecordResidual(
            record_id=record.record_id,
            time_ps=record.time_ps,
            t0_unbiased_ps=t0,
            t0_unbiased_uncertainty_ps=t0_err,
            delta_t_ps={h: flight_ps - t for h, t in record.expected_times.items()},
            beta=beta,
            mass=mass,
            p=record.p,
            pt=record.pt,
        )

    def reset(self) -> None:
        """Clear counters and any sink that supports resetting."""
        self.stats = ProcessorStats()
        for sink in self.sinks:
            reset = getattr(sink, 'reset', None)
            if callable(reset):
                reset()
        logger.info("Processor reset")
