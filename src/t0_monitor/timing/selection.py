"""Threshold selection of records before clustering."""

import logging
from typing import Iterable, List, Optional

from .constants import MAX_ABS_ETA, MIN_N_CLUSTERS, MIN_PT
from .interfaces.data_models import Record

logger = logging.getLogger(__name__)


class RecordSelector:
    """
    Kinematic cuts on records.

    A cut is skipped for records that do not carry the quantity. Pass None to
    disable a cut entirely.
    """

    def __init__(
        self,
        min_pt: Optional[float] = MIN_PT,
        max_abs_eta: Optional[float] = MAX_ABS_ETA,
        min_n_clusters: Optional[int] = MIN_N_CLUSTERS
    ):
        self.min_pt = min_pt
        self.max_abs_eta = max_abs_eta
        self.min_n_clusters = min_n_clusters

    def accept(self, record: Record) -> bool:
        if self.min_pt is not None and record.pt is not None and record.pt < self.min_pt:
            return False
        if self.max_abs_eta is not None and record.eta is not None and abs(record.eta) > self.max_abs_eta:
            return False
        if (self.min_n_clusters is not None and record.n_clusters is not None
                and record.n_clusters < self.min_n_clusters):
            return False
        return True

    def select(self, records: Iterable[Record]) -> List[Record]:
        """Accepted records, input order preserved."""
        records = list(records)
        kept = [r for r in records if self.accept(r)]
        if len(kept) != len(records):
            logger.debug(f"Selection kept {len(kept)}/{len(records)} records")
        return kept
