from __future__ import annotations

from typing import List

from .models import ProcessMetrics, RunReport, Snapshot, SystemMetrics


def compute_process_metrics(snapshot: Snapshot) -> List[ProcessMetrics]:
    """
    Per-process timing derived from a snapshot. Times stay None for
    processes that have not started or finished yet.
    """
    metrics: List[ProcessMetrics] = []
    for p in snapshot.processes:
        turnaround_time = None
        waiting_time = None
        if p.completion_time is not None:
            turnaround_time = p.completion_time - p.arrival_time
            waiting_time = turnaround_time - p.burst_time

        response_time = None
        if p.start_time is not None:
            response_time = p.start_time - p.arrival_time

        metrics.append(
            ProcessMetrics(
                name=p.name,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                start_time=p.start_time,
                completion_time=p.completion_time,
                waiting_time=waiting_time,
                turnaround_time=turnaround_time,
                response_time=response_time,
                priority=p.priority,
                promotions=p.promotions,
                demotions=p.demotions,
            )
        )
    return metrics


def compute_system_metrics(snapshot: Snapshot) -> SystemMetrics:
    """
    Compute throughput and CPU utilization from the recorded timeline.
    """
    makespan = snapshot.current_time
    cpu_busy_time = sum(b.duration for b in snapshot.timeline if not b.is_idle)
    idle_time = sum(b.duration for b in snapshot.timeline if b.is_idle)
    finished = sum(1 for p in snapshot.processes if p.completion_time is not None)

    throughput = finished / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=sum(p.promotions for p in snapshot.processes),
        aging_count=sum(p.demotions for p in snapshot.processes),
    )


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    Unfinished processes are left out.
    """
    done = [p for p in processes if p.turnaround_time is not None]
    if not done:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(done)
    return {
        "avg_waiting": sum(p.waiting_time for p in done) / n,
        "avg_turnaround": sum(p.turnaround_time for p in done) / n,
        "avg_response": sum(p.response_time for p in done) / n,
    }


def build_report(snapshot: Snapshot) -> RunReport:
    return RunReport(
        snapshot=snapshot,
        processes=compute_process_metrics(snapshot),
        system=compute_system_metrics(snapshot),
    )
