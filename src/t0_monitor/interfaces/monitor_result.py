"""
Monitor Result Data Models

These dataclasses define the contract between t0-monitor and its sinks.
One ClusterResult is emitted per cluster; a TimeframeResult collects all
clusters of a timeframe and is serialized to JSON by the result writer.

Contract Version: 1.0.0
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, List
import json
import time


@dataclass
class RecordResidual:
    """
    Per-record timing residuals w.r.t. the leave-one-out consensus time.

    delta_t[h] = t_record - t0_unbiased - t_exp(h)
    """
    record_id: int
    time_ps: float
    t0_unbiased_ps: float
    t0_unbiased_uncertainty_ps: float
    delta_t_ps: Dict[str, float] = field(default_factory=dict)
    beta: Optional[float] = None         # v/c from track length and flight time
    mass: Optional[float] = None         # GeV/c^2
    p: Optional[float] = None
    pt: Optional[float] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ReferenceMatch:
    """
    One reference-detector event inside a cluster's match window.

    time_deltas_ps holds consensus_time_wrt_bc - sub_time for every valid
    sub-timestamp slot ('AC', 'A', 'C', 'vertex').
    """
    bc: int
    orbit: int                           # relative to the timeframe's first orbit
    time_ps: float                       # continuous time of the event's BC
    same_bc: bool
    delta_bc: int
    time_deltas_ps: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ClusterResult:
    """Everything the pipeline derives from one cluster."""
    timeframe: int
    cluster_index: int
    n_records: int
    first_time_ps: float
    last_time_ps: float

    # Consensus (absent when no record was eligible)
    has_consensus: bool = False
    consensus_time_ps: Optional[float] = None
    consensus_uncertainty_ps: Optional[float] = None
    multiplicity: int = 0
    consensus_bc: Optional[int] = None
    consensus_time_wrt_bc_ps: Optional[float] = None
    is_reliable: bool = False            # uncertainty below comparison threshold

    residuals: List[RecordResidual] = field(default_factory=list)
    matches: List[ReferenceMatch] = field(default_factory=list)

    @property
    def n_same_bc(self) -> int:
        return sum(1 for m in self.matches if m.same_bc)

    def to_dict(self) -> dict:
        data = {
            k: v for k, v in asdict(self).items()
            if v is not None and k not in ('residuals', 'matches')
        }
        data['residuals'] = [r.to_dict() for r in self.residuals]
        data['matches'] = [m.to_dict() for m in self.matches]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ClusterResult":
        data = dict(data)
        residuals = [RecordResidual(**r) for r in data.pop('residuals', [])]
        matches = [ReferenceMatch(**m) for m in data.pop('matches', [])]
        return cls(residuals=residuals, matches=matches, **data)


@dataclass
class TimeframeResult:
    """
    Complete result of one timeframe.

    This is the top-level structure written by the result writer.
    """
    version: str = "1.0.0"
    timeframe: int = 0
    first_orbit: int = 0
    generated_at: float = field(default_factory=time.time)

    n_records: int = 0
    n_selected: int = 0
    n_reference_events: int = 0
    n_skipped_clusters: int = 0
    cursor_advances: int = 0

    clusters: List[ClusterResult] = field(default_factory=list)

    @property
    def n_clusters(self) -> int:
        return len(self.clusters)

    @property
    def n_matches(self) -> int:
        return sum(len(c.matches) for c in self.clusters)

    def to_json(self) -> str:
        """Serialize to JSON."""
        data = {
            "version": self.version,
            "timeframe": self.timeframe,
            "first_orbit": self.first_orbit,
            "generated_at": self.generated_at,
            "n_records": self.n_records,
            "n_selected": self.n_selected,
            "n_reference_events": self.n_reference_events,
            "n_skipped_clusters": self.n_skipped_clusters,
            "cursor_advances": self.cursor_advances,
            "clusters": [c.to_dict() for c in self.clusters],
        }
        return json.dumps(data, indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "TimeframeResult":
        """Deserialize from JSON."""
        data = json.loads(json_str)

        return cls(
            version=data.get("version", "1.0.0"),
            timeframe=data.get("timeframe", 0),
            first_orbit=data.get("first_orbit", 0),
            generated_at=data.get("generated_at", time.time()),
            n_records=data.get("n_records", 0),
            n_selected=data.get("n_selected", 0),
            n_reference_events=data.get("n_reference_events", 0),
            n_skipped_clusters=data.get("n_skipped_clusters", 0),
            cursor_advances=data.get("cursor_advances", 0),
            clusters=[ClusterResult.from_dict(c) for c in data.get("clusters", [])],
        )
