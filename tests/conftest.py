"""
Pytest configuration and fixtures for t0-monitor tests.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture
def time_axis():
    """LHC clock."""
    from t0_monitor.timing.time_axis import TimeAxis
    return TimeAxis()


@pytest.fixture
def simple_axis():
    """Round-number clock: 25 ns BCs, 100 BCs per orbit."""
    from t0_monitor.timing.time_axis import TimeAxis
    return TimeAxis(bc_duration_ps=25000.0, max_bunches_per_orbit=100)


@pytest.fixture
def make_record():
    """Factory for records with pion/kaon/proton expected times."""
    from t0_monitor.timing.interfaces.data_models import Record

    def factory(record_id, time_ps, t0_ps=None, tof_ps=10000.0, **kwargs):
        # Default: record is a pion emitted at t0 (or at time - tof)
        if t0_ps is not None:
            time_ps = t0_ps + tof_ps
        expected = kwargs.pop('expected_times', {
            'pion': tof_ps,
            'kaon': tof_ps + 800.0,
            'proton': tof_ps + 2500.0,
        })
        return Record(record_id=record_id, time_ps=time_ps, expected_times=expected, **kwargs)

    return factory


@pytest.fixture
def make_event():
    """Factory for reference events with all sub-timestamps valid."""
    from t0_monitor.timing.interfaces.data_models import ReferenceEvent

    def factory(orbit, bc, sub_times=(0.0, 0.0, 0.0, 0.0), valid=(True, True, True, True)):
        return ReferenceEvent(bc=bc, orbit=orbit, sub_times=tuple(sub_times), valid=tuple(valid))

    return factory
