"""
Reference Matcher

Selects, for each cluster, the reference-detector events that fall inside

    [cluster.first - W, cluster.last + W]      (W = match_window_bc BCs)

both ends inclusive.

Clusters arrive in time order, so their window starts never decrease. The
matcher keeps one cursor into the time-sorted reference stream:

    event < window start  -> cursor moves past it (no later cluster can use it)
    event > window end    -> stop; cursor stays (a later window may reach it)
    otherwise             -> match; cursor stays (an overlapping window may
                             match it again)

The cursor only moves forward, so one timeframe costs O(records + events).
A matcher instance belongs to exactly one timeframe.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import ConfigurationError, UnsortedReferenceError
from .constants import MATCH_WINDOW_BC
from .interfaces.data_models import Cluster, ReferenceEvent
from .time_axis import TimeAxis

logger = logging.getLogger(__name__)


class ReferenceMatcher:
    """Cursor-based window matching against one timeframe's reference stream."""

    def __init__(
        self,
        events: Sequence[ReferenceEvent],
        first_orbit: int,
        time_axis: Optional[TimeAxis] = None,
        match_window_bc: int = MATCH_WINDOW_BC
    ):
        """
        Args:
            events: Reference events sorted by (orbit, bc)
            first_orbit: First orbit of the timeframe
            time_axis: Clock conversions (default LHC clock)
            match_window_bc: Half-width of the match window in BCs

        Raises:
            UnsortedReferenceError: events are not in time order
            ValueError: an event's bc is outside the orbit
        """
        if match_window_bc < 0:
            raise ConfigurationError(f"match_window_bc must be >= 0, got {match_window_bc}")

        self.time_axis = time_axis or TimeAxis()
        self.first_orbit = int(first_orbit)
        self.match_window_bc = int(match_window_bc)
        self.window_ps = self.match_window_bc * self.time_axis.bc_duration_ps
        self.events = tuple(events)

        for event in self.events:
            if event.bc >= self.time_axis.max_bunches_per_orbit:
                raise ValueError(
                    f"bc {event.bc} outside orbit of {self.time_axis.max_bunches_per_orbit} bunches"
                )

        self.event_times = self.time_axis.bc_times(
            np.array([e.orbit - self.first_orbit for e in self.events], dtype=np.int64),
            np.array([e.bc for e in self.events], dtype=np.int64),
        )

        if len(self.event_times) > 1:
            backwards = np.flatnonzero(np.diff(self.event_times) < 0)
            if len(backwards):
                i = int(backwards[0])
                raise UnsortedReferenceError(
                    f"reference event {i + 1} (orbit={self.events[i + 1].orbit}, "
                    f"bc={self.events[i + 1].bc}) precedes event {i} "
                    f"(orbit={self.events[i].orbit}, bc={self.events[i].bc})"
                )

        # Per-timeframe scan state
        self.cursor = 0
        self.cursor_advances = 0
        self.events_scanned = 0
        self._last_window_start: Optional[float] = None

    @staticmethod
    def sort_events(events: Iterable[ReferenceEvent]) -> List[ReferenceEvent]:
        """Reference events in time order (stable for equal (orbit, bc))."""
        return sorted(events, key=lambda e: (e.orbit, e.bc))

    def window(self, cluster: Cluster) -> Tuple[float, float]:
        """Inclusive match window of a cluster (ps)."""
        return cluster.first_time_ps - self.window_ps, cluster.last_time_ps + self.window_ps

    def event_time(self, index: int) -> float:
        """Continuous time of the reference event at `index` (ps)."""
        return float(self.event_times[index])

    def match(self, cluster: Cluster) -> List[ReferenceEvent]:
        """
        Reference events inside the cluster's window.

        Must be called for clusters in time order.

        Raises:
            UnsortedReferenceError: window starts before the previous one
        """
        start, end = self.window(cluster)
        if self._last_window_start is not None and start < self._last_window_start:
            raise UnsortedReferenceError(
                f"cluster window start {start:.0f}ps precedes previous start "
                f"{self._last_window_start:.0f}ps"
            )
        self._last_window_start = start

        matches: List[ReferenceEvent] = []
        j = self.cursor
        n = len(self.events)
        while j < n:
            t = float(self.event_times[j])
            self.events_scanned += 1
            if t < start:
                j += 1
                self.cursor = j
                self.cursor_advances += 1
                continue
            if t > end:
                break
            matches.append(self.events[j])
            j += 1

        if matches:
            logger.debug(
                f"Window [{start:.0f}, {end:.0f}]ps: {len(matches)} reference matches "
                f"(cursor={self.cursor})"
            )
        return matches

    def same_bc(self, consensus_bc: int, event: ReferenceEvent) -> bool:
        """True if the consensus BC falls in the event's bunch slot."""
        return self.time_axis.bc_in_orbit(consensus_bc) == event.bc

    def delta_bc(self, consensus_bc: int, event: ReferenceEvent) -> int:
        """
        Signed BC distance consensus - reference on the timeframe's BC count.

        Compares global BC numbers rather than bunch slots, so an event in the
        last slot of the previous orbit is one BC before slot 0.
        """
        event_bc = self.relative_orbit(event) * self.time_axis.max_bunches_per_orbit + event.bc
        return int(consensus_bc) - event_bc

    def relative_orbit(self, event: ReferenceEvent) -> int:
        return event.orbit - self.first_orbit
