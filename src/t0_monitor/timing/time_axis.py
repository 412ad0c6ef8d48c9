"""
Time Axis - bunch-crossing / picosecond conversion

Both detectors share the bunch-crossing clock. Reference events carry a
discrete (orbit, bc) tag; records carry a continuous time in picoseconds
from the start of the timeframe's first orbit. This module maps between the
two coordinates. It holds no state beyond the two clock constants.
"""

import math
from typing import Union

import numpy as np

from ..exceptions import ConfigurationError
from .constants import BC_DURATION_PS, MAX_BUNCHES_PER_ORBIT


class TimeAxis:
    """Conversions on the bunch-crossing clock."""

    def __init__(
        self,
        bc_duration_ps: float = BC_DURATION_PS,
        max_bunches_per_orbit: int = MAX_BUNCHES_PER_ORBIT
    ):
        if bc_duration_ps <= 0:
            raise ConfigurationError(f"bc_duration_ps must be positive, got {bc_duration_ps}")
        if max_bunches_per_orbit <= 0:
            raise ConfigurationError(
                f"max_bunches_per_orbit must be positive, got {max_bunches_per_orbit}"
            )
        self.bc_duration_ps = float(bc_duration_ps)
        self.max_bunches_per_orbit = int(max_bunches_per_orbit)

    def bc_time(self, orbit: int, bc: int) -> float:
        """
        Continuous time (ps) of a bunch crossing.

        Args:
            orbit: Orbit number relative to the timeframe's first orbit
            bc: Bunch slot inside the orbit
        """
        return (orbit * self.max_bunches_per_orbit + bc) * self.bc_duration_ps

    def bc_times(self, orbits: np.ndarray, bcs: np.ndarray) -> np.ndarray:
        """Vectorised bc_time."""
        orbits = np.asarray(orbits, dtype=np.int64)
        bcs = np.asarray(bcs, dtype=np.int64)
        return (orbits * self.max_bunches_per_orbit + bcs) * self.bc_duration_ps

    def bc_number(self, time_ps: float, half_bc_offset_ps: float) -> int:
        """
        Global BC number of a continuous time.

        The offset shifts the time before flooring so a time that falls just
        ahead of a BC boundary resolves to that BC. It must be half of the
        caller's rounding window.
        """
        return int(math.floor((time_ps + half_bc_offset_ps) / self.bc_duration_ps))

    def bc_in_orbit(self, n_bc: Union[int, np.integer]) -> int:
        """
        Bunch slot of a global BC number.

        Floor modulo: the result is in [0, max_bunches_per_orbit) also for
        negative BC numbers near the start of a timeframe.
        """
        return int(n_bc) % self.max_bunches_per_orbit

    def time_wrt_bc(self, time_ps: float, n_bc: int) -> float:
        """Time relative to the start of BC `n_bc` (ps)."""
        return time_ps - n_bc * self.bc_duration_ps

    def __repr__(self) -> str:
        return (
            f"TimeAxis(bc_duration_ps={self.bc_duration_ps}, "
            f"max_bunches_per_orbit={self.max_bunches_per_orbit})"
        )
