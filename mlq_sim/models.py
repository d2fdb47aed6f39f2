from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

IDLE = "Idle"
LEVELS = (1, 2, 3)


class ProcessState(str, Enum):
    NOT_ARRIVED = "NotArrived"
    READY = "Ready"
    RUNNING = "Running"
    COMPLETED = "Completed"


@dataclass(frozen=True)
class ProcessDef:
    name: str
    arrival_time: int
    burst_time: int
    priority: int


@dataclass(frozen=True)
class Settings:
    quantum: Tuple[int, ...] = (2, 2, 2)
    aging_interval: int = 6
    starvation_interval: int = 5

    @classmethod
    def default(cls) -> "Settings":
        return cls()

    def quantum_for(self, level: int) -> int:
        return self.quantum[level - 1]


@dataclass
class Process:
    """
    Runtime record of one process: its immutable definition plus the fields
    mutated by the scheduler on every tick.
    """

    definition: ProcessDef
    remaining_time: int
    priority: int
    processing_time: int = 0
    waiting_time: int = 0
    state: ProcessState = ProcessState.NOT_ARRIVED
    start_time: Optional[int] = None
    completion_time: Optional[int] = None
    promotions: int = 0
    demotions: int = 0

    @classmethod
    def from_def(cls, definition: ProcessDef) -> "Process":
        return cls(
            definition=definition,
            remaining_time=definition.burst_time,
            priority=definition.priority,
        )

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def arrival_time(self) -> int:
        return self.definition.arrival_time

    @property
    def burst_time(self) -> int:
        return self.definition.burst_time

    def view(self) -> "ProcessView":
        return ProcessView(
            name=self.name,
            arrival_time=self.arrival_time,
            burst_time=self.burst_time,
            remaining_time=self.remaining_time,
            priority=self.priority,
            processing_time=self.processing_time,
            waiting_time=self.waiting_time,
            state=self.state,
            start_time=self.start_time,
            completion_time=self.completion_time,
            promotions=self.promotions,
            demotions=self.demotions,
        )


@dataclass(frozen=True)
class ProcessView:
    """
    Read-only copy of a process handed out in snapshots.
    """

    name: str
    arrival_time: int
    burst_time: int
    remaining_time: int
    priority: int
    processing_time: int
    waiting_time: int
    state: ProcessState
    start_time: Optional[int] = None
    completion_time: Optional[int] = None
    promotions: int = 0
    demotions: int = 0


@dataclass(frozen=True)
class GanttBlock:
    """
    One contiguous interval [start, end) of CPU ownership by a process or by Idle.
    """

    name: str
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def is_idle(self) -> bool:
        return self.name == IDLE


@dataclass(frozen=True)
class Snapshot:
    current_time: int
    queues: Tuple[Tuple[ProcessView, ...], ...]
    running: Optional[ProcessView]
    timeline: Tuple[GanttBlock, ...]
    processes: Tuple[ProcessView, ...] = ()
    complete: bool = False

    def queue(self, level: int) -> Tuple[ProcessView, ...]:
        return self.queues[level - 1]

    def queue_names(self) -> Tuple[Tuple[str, ...], ...]:
        return tuple(tuple(p.name for p in q) for q in self.queues)

    def process(self, name: str) -> ProcessView:
        for p in self.processes:
            if p.name == name:
                return p
        raise KeyError(name)


@dataclass
class ProcessMetrics:
    name: str
    arrival_time: int
    burst_time: int
    start_time: Optional[int]
    completion_time: Optional[int]
    waiting_time: Optional[int]
    turnaround_time: Optional[int]
    response_time: Optional[int]
    priority: int
    promotions: int = 0
    demotions: int = 0


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0
    aging_count: int = 0


@dataclass
class RunReport:
    snapshot: Snapshot
    processes: List[ProcessMetrics] = field(default_factory=list)
    system: Optional[SystemMetrics] = None
