"""
MLQ simulator package.

A step-driven multi-level queue CPU scheduling engine (three priority
levels, per-level round robin, aging and starvation) with a small
command-line front end for running and inspecting workloads.
"""

from .engine import Simulation
from .errors import InvalidStateError, InvariantViolation, SimulationError, ValidationError
from .models import GanttBlock, ProcessDef, ProcessState, Settings, Snapshot

__all__ = [
    "GanttBlock",
    "InvalidStateError",
    "InvariantViolation",
    "ProcessDef",
    "ProcessState",
    "Settings",
    "Simulation",
    "SimulationError",
    "Snapshot",
    "ValidationError",
    "cli",
]
