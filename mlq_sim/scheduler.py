from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import InvalidStateError, InvariantViolation
from .models import LEVELS, Process, ProcessState, Settings
from .queues import ReadyQueueSet
from .registry import ProcessRegistry
from .timeline import TimelineRecorder

logger = logging.getLogger(__name__)

HIGHEST_LEVEL = LEVELS[0]
LOWEST_LEVEL = LEVELS[-1]


@dataclass
class SimulationState:
    """
    Everything one MLQ run owns. Mutated in place by ``run_tick``.
    """

    settings: Settings
    registry: ProcessRegistry
    queues: ReadyQueueSet = field(default_factory=ReadyQueueSet)
    timeline: TimelineRecorder = field(default_factory=TimelineRecorder)
    current_time: int = 0
    running: Optional[Process] = None
    quantum_counters: List[int] = field(default_factory=lambda: [0] * len(LEVELS))
    complete: bool = False

    def quantum_left(self, level: int) -> int:
        return self.quantum_counters[level - 1]


def advance_clock(state: SimulationState) -> None:
    state.current_time += 1


def admit_arrivals(state: SimulationState) -> List[Process]:
    """
    Enqueue every process due by the current time that has not arrived yet.

    Arrived processes leave NOT_ARRIVED, so repeated calls never enqueue
    a process twice.
    """
    arrived = state.registry.arriving(state.current_time)
    for p in arrived:
        p.state = ProcessState.READY
        state.queues.push(p)
        logger.debug("t=%d: %s arrived into level %d", state.current_time, p.name, p.priority)
    return arrived


def execute_running(state: SimulationState) -> Optional[Process]:
    """
    Run the current process for one time unit and return it (None when idle).
    """
    p = state.running
    if p is None:
        return None

    p.remaining_time -= 1
    p.processing_time += 1
    state.quantum_counters[p.priority - 1] -= 1
    logger.debug(
        "t=%d: executed %s, remaining %d, quantum left %d",
        state.current_time,
        p.name,
        p.remaining_time,
        state.quantum_left(p.priority),
    )
    return p


def accrue_waiting(state: SimulationState) -> None:
    for p in state.queues:
        p.waiting_time += 1


def complete_running(state: SimulationState) -> bool:
    p = state.running
    if p is None or p.remaining_time > 0:
        return False

    p.state = ProcessState.COMPLETED
    p.completion_time = state.current_time
    state.running = None
    logger.debug("t=%d: %s completed", state.current_time, p.name)
    return True


def expire_quantum(state: SimulationState) -> bool:
    p = state.running
    if p is None or state.quantum_left(p.priority) > 0:
        return False

    p.state = ProcessState.READY
    state.queues.push(p)
    state.running = None
    logger.debug("t=%d: quantum expired for %s, back to level %d", state.current_time, p.name, p.priority)
    return True


def _move(state: SimulationState, p: Process, new_priority: int) -> None:
    state.queues.remove(p, p.priority)
    p.priority = new_priority
    state.queues.push(p)


def rebalance_ready(state: SimulationState) -> None:
    """
    Starvation promotion and aging demotion for queued processes.

    Each process queued when the pass starts is looked at exactly once, so a
    process moved by this pass is not reconsidered in its new queue.
    Starvation is checked first; a promoted process skips the aging check.
    """
    settings = state.settings
    for p in state.queues.waiting():
        if p.waiting_time >= settings.starvation_interval and p.priority > HIGHEST_LEVEL:
            old = p.priority
            p.waiting_time = 0
            p.promotions += 1
            _move(state, p, old - 1)
            logger.debug("t=%d: starvation, %s promoted %d -> %d", state.current_time, p.name, old, p.priority)
        elif p.processing_time >= settings.aging_interval and p.priority < LOWEST_LEVEL:
            old = p.priority
            p.processing_time = 0
            p.demotions += 1
            _move(state, p, old + 1)
            logger.debug("t=%d: aging, %s demoted %d -> %d", state.current_time, p.name, old, p.priority)


def age_running(state: SimulationState) -> bool:
    """
    Demote the running process once it has used up the aging interval.

    The demoted process goes to the tail of its new level and gives up the
    CPU at once, even with quantum left. Running processes accrue no
    waiting time and so are never promoted here.
    """
    p = state.running
    if p is None:
        return False
    if p.processing_time < state.settings.aging_interval or p.priority >= LOWEST_LEVEL:
        return False

    old = p.priority
    p.priority += 1
    p.processing_time = 0
    p.demotions += 1
    p.state = ProcessState.READY
    state.queues.push(p)
    state.running = None
    logger.debug("t=%d: aging, running %s demoted %d -> %d and preempted", state.current_time, p.name, old, p.priority)
    return True


def dispatch(state: SimulationState) -> Optional[Process]:
    """
    Hand a free CPU to the head of the highest non-empty ready queue.
    """
    if state.running is not None:
        return None

    picked = state.queues.pop_highest()
    if picked is None:
        return None

    level, p = picked
    p.state = ProcessState.RUNNING
    if p.start_time is None:
        p.start_time = state.current_time
    state.running = p
    state.quantum_counters[level - 1] = state.settings.quantum_for(level)
    logger.debug("t=%d: dispatched %s from level %d, quantum %d", state.current_time, p.name, level, state.quantum_left(level))
    return p


def record_timeline(state: SimulationState, executed: Optional[Process]) -> None:
    state.timeline.record(executed.name if executed is not None else None, state.current_time - 1)


def check_complete(state: SimulationState) -> bool:
    state.complete = (
        state.queues.is_empty()
        and state.running is None
        and state.registry.all_finished()
    )
    return state.complete


def check_invariants(state: SimulationState) -> None:
    running = state.registry.in_state(ProcessState.RUNNING)
    if len(running) > 1:
        raise InvariantViolation(f"More than one running process: {[p.name for p in running]}")
    if running and running[0] is not state.running:
        raise InvariantViolation(f"{running[0].name} is marked running but does not own the CPU")
    if state.running is not None and state.running.state is not ProcessState.RUNNING:
        raise InvariantViolation(f"{state.running.name} owns the CPU but is {state.running.state.value}")

    for level, p in state.queues.items():
        if p.state is not ProcessState.READY:
            raise InvariantViolation(f"{p.name} is queued but is {p.state.value}")
        if p.priority != level:
            raise InvariantViolation(f"{p.name} has priority {p.priority} but sits in level {level}")

    for p in state.registry:
        if p.priority not in LEVELS:
            raise InvariantViolation(f"{p.name} has priority {p.priority} outside {LEVELS}")
        if p.remaining_time < 0:
            raise InvariantViolation(f"{p.name} has negative remaining time {p.remaining_time}")
        if (p.remaining_time == 0) != (p.state is ProcessState.COMPLETED):
            raise InvariantViolation(f"{p.name} is {p.state.value} with remaining time {p.remaining_time}")

    if state.timeline.end != state.current_time:
        raise InvariantViolation(f"Timeline ends at {state.timeline.end} but the clock is at {state.current_time}")


def run_tick(state: SimulationState) -> None:
    """
    Advance the simulation by one time unit.

    The steps run in a fixed order; the order is part of the scheduling
    contract, e.g. arrivals are queued before waiting time accrues, and a
    process released this tick is queued before the aging pass sees it.
    """
    if state.complete:
        raise InvalidStateError(f"Simulation already completed at t={state.current_time}")

    advance_clock(state)
    admit_arrivals(state)
    executed = execute_running(state)
    accrue_waiting(state)

    if not complete_running(state):
        expire_quantum(state)

    rebalance_ready(state)
    age_running(state)
    dispatch(state)
    record_timeline(state, executed)

    check_invariants(state)
    if check_complete(state):
        logger.info("Simulation complete at t=%d", state.current_time)
