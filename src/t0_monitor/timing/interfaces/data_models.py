"""
Data Models for the Event-Time Pipeline

These data structures define the contracts between the pipeline stages:
selection, clustering, consensus estimation and reference matching.

Design principles:
- Immutable (frozen dataclasses)
- Type hints for clarity
- Times in picoseconds on the continuous per-timeframe axis
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Dict, Any, Tuple, Sequence, Iterator, Mapping

from ..constants import REFERENCE_TIME_SLOTS


# ============================================================================
# RECORDS (selection / clustering input)
# ============================================================================

@dataclass(frozen=True)
class Record:
    """
    One time-tagged detection record (a TOF-matched track).

    Attributes:
        record_id: Identity within the timeframe
        time_ps: Measured arrival time on the continuous timeframe axis
        expected_times: Expected time of flight per particle hypothesis (ps)
        p: Total momentum (GeV/c), if known
        pt: Transverse momentum (GeV/c), if known
        eta: Pseudorapidity, if known
        length_cm: Integrated track length to the detector (cm), if known
        n_clusters: Number of tracking clusters, if known
    """
    record_id: int
    time_ps: float
    expected_times: Mapping[str, float] = field(default_factory=dict, hash=False)
    p: Optional[float] = None
    pt: Optional[float] = None
    eta: Optional[float] = None
    length_cm: Optional[float] = None
    n_clusters: Optional[int] = None

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, 'expected_times', MappingProxyType(dict(self.expected_times)))

    def expected_time(self, hypothesis: str) -> Optional[float]:
        """Expected time of flight for a hypothesis, or None if not provided."""
        return self.expected_times.get(hypothesis)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        return cls(
            record_id=int(data['record_id']),
            time_ps=float(data['time_ps']),
            expected_times={k: float(v) for k, v in data.get('expected_times', {}).items()},
            p=data.get('p'),
            pt=data.get('pt'),
            eta=data.get('eta'),
            length_cm=data.get('length_cm'),
            n_clusters=data.get('n_clusters'),
        )


@dataclass(frozen=True)
class Cluster:
    """
    Time-ordered, non-empty run of records from one interaction candidate.

    Every record lies within the clustering threshold of the first record
    (the anchor).
    """
    records: Tuple[Record, ...]

    def __post_init__(self):
        if not self.records:
            raise ValueError("Cluster must contain at least one record")

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    @property
    def first_time_ps(self) -> float:
        return self.records[0].time_ps

    @property
    def last_time_ps(self) -> float:
        return self.records[-1].time_ps

    @property
    def span_ps(self) -> float:
        return self.last_time_ps - self.first_time_ps

    def without(self, index: int) -> Tuple[Record, ...]:
        """Records of the cluster with `index` left out."""
        return self.records[:index] + self.records[index + 1:]


# ============================================================================
# REFERENCE DETECTOR
# ============================================================================

@dataclass(frozen=True)
class ReferenceEvent:
    """
    Reference-detector interaction tagged on the bunch-crossing clock.

    Attributes:
        bc: Bunch slot inside the orbit
        orbit: Absolute orbit number
        sub_times: Four sub-timestamps w.r.t. the BC (ps), in
                   REFERENCE_TIME_SLOTS order (AC, A, C, vertex)
        valid: Validity flag per sub-timestamp
    """
    bc: int
    orbit: int
    sub_times: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    valid: Tuple[bool, bool, bool, bool] = (False, False, False, False)

    def __post_init__(self):
        if self.bc < 0:
            raise ValueError(f"bc must be non-negative, got {self.bc}")
        if len(self.sub_times) != len(REFERENCE_TIME_SLOTS):
            raise ValueError(
                f"expected {len(REFERENCE_TIME_SLOTS)} sub-timestamps, got {len(self.sub_times)}"
            )
        if len(self.valid) != len(REFERENCE_TIME_SLOTS):
            raise ValueError(
                f"expected {len(REFERENCE_TIME_SLOTS)} validity flags, got {len(self.valid)}"
            )

    def is_valid(self, slot: str) -> bool:
        return bool(self.valid[REFERENCE_TIME_SLOTS.index(slot)])

    def time_of(self, slot: str) -> Optional[float]:
        """Sub-timestamp for a slot, or None when flagged invalid."""
        idx = REFERENCE_TIME_SLOTS.index(slot)
        return float(self.sub_times[idx]) if self.valid[idx] else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bc': self.bc,
            'orbit': self.orbit,
            'sub_times': list(self.sub_times),
            'valid': list(self.valid),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReferenceEvent":
        return cls(
            bc=int(data['bc']),
            orbit=int(data['orbit']),
            sub_times=tuple(float(t) for t in data.get('sub_times', (0.0, 0.0, 0.0, 0.0))),
            valid=tuple(bool(v) for v in data.get('valid', (False, False, False, False))),
        )


# ============================================================================
# UNIT OF WORK
# ============================================================================

@dataclass(frozen=True)
class Timeframe:
    """All records and reference events of one timeframe."""
    index: int
    first_orbit: int
    records: Sequence[Record] = ()
    reference_events: Sequence[ReferenceEvent] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Timeframe":
        return cls(
            index=int(data.get('index', 0)),
            first_orbit=int(data.get('first_orbit', 0)),
            records=tuple(Record.from_dict(r) for r in data.get('records', [])),
            reference_events=tuple(
                ReferenceEvent.from_dict(e) for e in data.get('reference_events', [])
            ),
        )


# ============================================================================
# CONSENSUS ESTIMATE
# ============================================================================

@dataclass(frozen=True)
class ConsensusEstimate:
    """Consensus interaction time of a cluster."""
    time_ps: float
    uncertainty_ps: float
    multiplicity: int
