import pytest

from mlq_sim.models import ProcessDef, Settings


@pytest.fixture
def three_processes():
    return [
        ProcessDef("P1", arrival_time=1, burst_time=20, priority=3),
        ProcessDef("P2", arrival_time=3, burst_time=10, priority=2),
        ProcessDef("P3", arrival_time=5, burst_time=2, priority=1),
    ]


@pytest.fixture
def default_settings():
    return Settings(quantum=(2, 2, 2), aging_interval=6, starvation_interval=5)
