import pytest

from mlq_sim import scheduler
from mlq_sim.engine import Simulation
from mlq_sim.errors import InvalidStateError, InvariantViolation, ValidationError
from mlq_sim.models import GanttBlock, ProcessDef, ProcessState, Settings
from mlq_sim.workload_io import DEFAULT_PROCESSES


def _check_timeline(snap):
    blocks = snap.timeline
    assert blocks[0].start == 0
    assert blocks[-1].end == snap.current_time
    for prev, nxt in zip(blocks, blocks[1:]):
        assert prev.end == nxt.start
        assert prev.name != nxt.name
    assert all(b.duration > 0 for b in blocks)
    assert sum(b.duration for b in blocks) == snap.current_time


def test_init_starts_empty_run(three_processes, default_settings):
    sim = Simulation().init(three_processes, default_settings)
    snap = sim.snapshot()

    assert snap.current_time == 0
    assert snap.running is None
    assert snap.timeline == ()
    assert snap.queue_names() == ((), (), ())
    assert all(p.state is ProcessState.NOT_ARRIVED for p in snap.processes)
    assert [p.remaining_time for p in snap.processes] == [20, 10, 2]
    assert not sim.is_complete()


def test_init_defaults_settings():
    sim = Simulation().init(DEFAULT_PROCESSES)
    assert sim.state.settings == Settings(quantum=(2, 2, 2), aging_interval=6, starvation_interval=5)


def test_tick_before_init_rejected():
    sim = Simulation()
    with pytest.raises(InvalidStateError):
        sim.tick()
    with pytest.raises(InvalidStateError):
        sim.snapshot()
    assert not sim.initialized
    assert not sim.is_complete()


def test_validation_reports_every_bad_field():
    defs = [
        ProcessDef("", arrival_time=-1, burst_time=0, priority=4),
        ProcessDef("A", arrival_time=0, burst_time=1, priority=1),
        ProcessDef("A", arrival_time=0, burst_time=1, priority=1),
    ]
    settings = Settings(quantum=(0, 2), aging_interval=0, starvation_interval=-1)

    with pytest.raises(ValidationError) as excinfo:
        Simulation().init(defs, settings)

    assert set(excinfo.value.fields) == {
        "processes[0].name",
        "processes[0].arrival_time",
        "processes[0].burst_time",
        "processes[0].priority",
        "processes[2].name",
        "settings.quantum",
        "settings.aging_interval",
        "settings.starvation_interval",
    }


def test_validation_rejects_wrong_input_types(three_processes):
    with pytest.raises(ValidationError) as excinfo:
        Simulation().init(
            [{"name": "P1", "arrivalTime": 1, "burstTime": 2, "priority": 1}, three_processes[0]],
            {"quantum": [2, 2, 2], "agingInterval": 6, "starvationInterval": 5},
        )
    assert excinfo.value.fields == ["processes[0]", "settings"]


def test_validation_names_bad_quantum_slot(three_processes):
    with pytest.raises(ValidationError) as excinfo:
        Simulation().init(three_processes, Settings(quantum=(1, 0, 3)))
    assert excinfo.value.fields == ["settings.quantum[1]"]


def test_validation_rejects_empty_and_non_integer_input():
    with pytest.raises(ValidationError) as excinfo:
        Simulation().init([], Settings())
    assert excinfo.value.fields == ["processes"]

    with pytest.raises(ValidationError) as excinfo:
        Simulation().init([ProcessDef("A", arrival_time=0, burst_time=2.5, priority=True)])
    assert excinfo.value.fields == ["processes[0].burst_time", "processes[0].priority"]


def test_failed_init_keeps_previous_run(three_processes, default_settings):
    sim = Simulation().init(three_processes, default_settings)
    sim.tick()
    sim.tick()
    before = sim.snapshot()

    with pytest.raises(ValidationError):
        sim.init(three_processes, Settings(aging_interval=0))

    assert sim.snapshot() == before


def test_reinit_starts_fresh_run(three_processes, default_settings):
    sim = Simulation().init(three_processes, default_settings)
    sim.tick()
    sim.init(three_processes, default_settings)
    assert sim.snapshot().current_time == 0


def test_run_to_completion_then_tick_rejected(three_processes, default_settings):
    sim = Simulation().init(three_processes, default_settings)
    final = sim.run()

    assert sim.is_complete()
    assert final.complete
    assert final.running is None
    assert final.queue_names() == ((), (), ())
    assert all(p.state is ProcessState.COMPLETED for p in final.processes)
    assert all(p.remaining_time == 0 for p in final.processes)
    # idle only before P1 arrives, then 32 units of work
    assert final.current_time == 33
    assert final.timeline[0] == GanttBlock("Idle", 0, 1)
    assert [b for b in final.timeline if b.is_idle] == [GanttBlock("Idle", 0, 1)]
    _check_timeline(final)

    with pytest.raises(InvalidStateError):
        sim.tick()
    assert sim.snapshot() == final


def test_process_arriving_at_zero_is_admitted_on_first_tick():
    sim = Simulation().init([ProcessDef("A", arrival_time=0, burst_time=2, priority=1)])
    final = sim.run()
    assert final.timeline == (GanttBlock("Idle", 0, 1), GanttBlock("A", 1, 3))
    assert final.process("A").completion_time == 3


def test_idle_gap_between_arrivals():
    sim = Simulation().init(
        [
            ProcessDef("A", arrival_time=1, burst_time=1, priority=1),
            ProcessDef("B", arrival_time=5, burst_time=1, priority=2),
        ]
    )
    final = sim.run()
    assert final.timeline == (
        GanttBlock("Idle", 0, 1),
        GanttBlock("A", 1, 2),
        GanttBlock("Idle", 2, 5),
        GanttBlock("B", 5, 6),
    )


def test_snapshots_are_not_affected_by_later_ticks(three_processes, default_settings):
    sim = Simulation().init(three_processes, default_settings)
    first = sim.tick()
    sim.tick()
    sim.tick()
    assert first.current_time == 1
    assert first.running.remaining_time == 20
    assert first.timeline == (GanttBlock("Idle", 0, 1),)


@pytest.mark.parametrize(
    "settings",
    [
        Settings(quantum=(2, 2, 2), aging_interval=6, starvation_interval=5),
        Settings(quantum=(1, 3, 5), aging_interval=2, starvation_interval=3),
        Settings(quantum=(4, 4, 4), aging_interval=20, starvation_interval=1),
    ],
)
def test_per_tick_properties(settings):
    sim = Simulation().init(DEFAULT_PROCESSES, settings)
    prev = sim.snapshot()

    while not sim.is_complete():
        snap = sim.tick()
        assert snap.current_time == prev.current_time + 1
        _check_timeline(snap)

        for before, after in zip(prev.processes, snap.processes):
            assert after.priority in (1, 2, 3)
            assert after.remaining_time >= 0
            assert (after.remaining_time == 0) == (after.state is ProcessState.COMPLETED)
            if prev.running is not None and before.name == prev.running.name:
                assert after.remaining_time == before.remaining_time - 1
                # no waiting accrues while running; only a starvation reset after requeue changes it
                assert after.waiting_time == before.waiting_time or (
                    after.waiting_time == 0 and after.promotions == before.promotions + 1
                )
            else:
                assert after.remaining_time == before.remaining_time

        running = [p for p in snap.processes if p.state is ProcessState.RUNNING]
        assert len(running) <= 1
        if snap.running is not None:
            before = prev.process(snap.running.name)
            was_queued = any(p.name == before.name for q in prev.queues for p in q)
            assert (
                before.state is ProcessState.RUNNING
                or was_queued
                or before.state is ProcessState.NOT_ARRIVED
            )
            assert all(p.name != snap.running.name for q in snap.queues for p in q)

        prev = snap

    total_burst = sum(p.burst_time for p in DEFAULT_PROCESSES)
    busy = sum(b.duration for b in prev.timeline if not b.is_idle)
    assert busy == total_burst


def test_runs_are_deterministic():
    first = Simulation().init(DEFAULT_PROCESSES).run()
    second = Simulation().init(list(DEFAULT_PROCESSES)).run()
    assert first == second


def test_independent_simulations_do_not_share_state(three_processes, default_settings):
    a = Simulation().init(three_processes, default_settings)
    b = Simulation().init(three_processes, default_settings)
    a.tick()
    a.tick()
    assert b.snapshot().current_time == 0
    assert b.snapshot().process("P1").state is ProcessState.NOT_ARRIVED


def test_two_running_processes_is_an_invariant_violation(three_processes, default_settings):
    sim = Simulation().init(three_processes, default_settings)
    for _ in range(3):
        sim.tick()
    assert sim.snapshot().running.name == "P2"

    sim.state.registry["P1"].state = ProcessState.RUNNING
    with pytest.raises(InvariantViolation):
        scheduler.check_invariants(sim.state)


def test_running_process_accrues_no_waiting_time():
    sim = Simulation().init(
        [
            ProcessDef("A", arrival_time=1, burst_time=5, priority=1),
            ProcessDef("B", arrival_time=1, burst_time=5, priority=2),
        ],
        Settings(quantum=(5, 2, 2), aging_interval=100, starvation_interval=100),
    )
    snap = sim.tick()
    assert snap.process("A").waiting_time == 1

    for _ in range(4):
        snap = sim.tick()
        assert snap.running.name == "A"
        assert snap.process("A").waiting_time == 1

    assert snap.process("B").waiting_time == 5
