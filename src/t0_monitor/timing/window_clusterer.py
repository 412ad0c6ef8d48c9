"""
Window Clusterer

Groups time-tagged records into interaction candidates. Records are sorted
by time (stable, so equal times keep input order) and scanned once; a record
joins the open cluster while it lies within `gap_threshold_ps` of the
cluster's FIRST record. The anchor is not moved per record, so a dense train
of records is still cut once its total span exceeds the threshold.
"""

import logging
from typing import Iterable, List

from ..exceptions import ConfigurationError
from .constants import GAP_THRESHOLD_PS
from .interfaces.data_models import Cluster, Record

logger = logging.getLogger(__name__)


class WindowClusterer:
    """Anchor-based proximity clustering of records."""

    def __init__(self, gap_threshold_ps: float = GAP_THRESHOLD_PS):
        if gap_threshold_ps < 0:
            raise ConfigurationError(f"gap_threshold_ps must be >= 0, got {gap_threshold_ps}")
        self.gap_threshold_ps = float(gap_threshold_ps)

    def cluster(self, records: Iterable[Record]) -> List[Cluster]:
        """
        Partition records into time-ordered clusters.

        Args:
            records: Records of one timeframe, any order

        Returns:
            Clusters in time order; every record appears in exactly one.
            Empty input gives an empty list.
        """
        ordered = sorted(records, key=lambda r: r.time_ps)
        if not ordered:
            return []

        clusters: List[Cluster] = []
        current: List[Record] = [ordered[0]]
        anchor_ps = ordered[0].time_ps

        for record in ordered[1:]:
            if record.time_ps - anchor_ps <= self.gap_threshold_ps:
                current.append(record)
                continue
            clusters.append(Cluster(tuple(current)))
            current = [record]
            anchor_ps = record.time_ps

        clusters.append(Cluster(tuple(current)))

        logger.debug(f"Clustered {len(ordered)} records into {len(clusters)} clusters")
        return clusters
