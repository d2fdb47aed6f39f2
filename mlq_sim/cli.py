from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .engine import Simulation
from .errors import SimulationError, ValidationError
from .gantt import build_rich_gantt, render_gantt
from .metrics import build_report, summarize_process_metrics
from .models import LEVELS, Settings, Snapshot
from .workload_io import DEFAULT_PROCESSES, Workload, load_workload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mlq-sim",
        description="Multi-level queue CPU scheduling simulator (per-level round robin, aging, starvation).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a workload to completion and print the results.")
    _add_common_arguments(run_parser)
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print a plain-text Gantt chart instead of the colored one.",
    )

    step_parser = subparsers.add_parser(
        "step",
        help="Step through a workload one time unit at a time.",
    )
    _add_common_arguments(step_parser)

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in P1..P7 demo workload).",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        nargs=len(LEVELS),
        metavar=("Q1", "Q2", "Q3"),
        default=None,
        help="Time quantum of each priority level (default: 2 2 2).",
    )
    parser.add_argument(
        "--aging",
        type=int,
        default=None,
        help="Running ticks after which a process is demoted one level (default: 6).",
    )
    parser.add_argument(
        "--starvation",
        type=int,
        default=None,
        help="Waiting ticks after which a process is promoted one level (default: 5).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision.",
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def resolve_workload(args: argparse.Namespace) -> Workload:
    """
    Workload file settings override the defaults; command-line flags override both.
    """
    if args.workload:
        workload = load_workload(args.workload)
    else:
        workload = Workload(processes=list(DEFAULT_PROCESSES))

    base = workload.settings or Settings.default()
    workload.settings = Settings(
        quantum=tuple(args.quantum) if args.quantum else base.quantum,
        aging_interval=args.aging if args.aging is not None else base.aging_interval,
        starvation_interval=args.starvation if args.starvation is not None else base.starvation_interval,
    )
    return workload


def _print_queues(snapshot: Snapshot, console: Console) -> None:
    table = Table(title=f"t = {snapshot.current_time}", box=box.SIMPLE_HEAVY)
    table.add_column("Level", justify="center")
    table.add_column("Process")
    table.add_column("Remaining", justify="right")
    table.add_column("Processing", justify="right")
    table.add_column("Waiting", justify="right")
    table.add_column("Arrival", justify="right")

    for level in LEVELS:
        rows = []
        if snapshot.running is not None and snapshot.running.priority == level:
            rows.append((f"[bold green]{escape(snapshot.running.name)} {escape('[RUNNING]')}[/bold green]", snapshot.running))
        rows.extend((escape(p.name), p) for p in snapshot.queue(level))

        if not rows:
            table.add_row(str(level), "[dim]empty[/dim]", "", "", "", "")
            continue
        for label, p in rows:
            table.add_row(
                str(level),
                label,
                str(p.remaining_time),
                str(p.processing_time),
                str(p.waiting_time),
                str(p.arrival_time),
            )

    console.print(table)


def _print_gantt(snapshot: Snapshot, console: Console, plain: bool = False) -> None:
    if plain:
        console.print(render_gantt(snapshot.timeline), markup=False, highlight=False)
        return

    panel, time_marks = build_rich_gantt(snapshot.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks, highlight=False)


def _print_result(snapshot: Snapshot, settings: Settings, console: Console, plain: bool = False) -> None:
    report = build_report(snapshot)

    console.print(f"[bold]Quantum:[/bold] {' / '.join(str(q) for q in settings.quantum)}")
    console.print(f"[bold]Aging interval:[/bold] {settings.aging_interval}")
    console.print(f"[bold]Starvation interval:[/bold] {settings.starvation_interval}")
    console.print()

    _print_gantt(snapshot, console, plain=plain)
    console.print()

    headers = [
        "Name",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
        "Priority",
        "Promoted",
        "Demoted",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Name", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    def fmt(value: Optional[int]) -> str:
        return "" if value is None else str(value)

    for p in report.processes:
        proc_table.add_row(
            p.name,
            str(p.arrival_time),
            str(p.burst_time),
            fmt(p.start_time),
            fmt(p.completion_time),
            fmt(p.waiting_time),
            fmt(p.turnaround_time),
            fmt(p.response_time),
            str(p.priority),
            str(p.promotions),
            str(p.demotions),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(report.processes)
    sys = report.system
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
    sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
    sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
    sys_table.add_row("Makespan", str(sys.makespan))
    sys_table.add_row("Idle time", str(sys.idle_time))
    sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
    sys_table.add_row("Starvation promotions", str(sys.starvation_count))
    sys_table.add_row("Aging demotions", str(sys.aging_count))

    console.print(sys_table)


def _interactive_step(sim: Simulation, settings: Settings, console: Console) -> None:
    console.print("[dim]Enter = next tick, r = run to the end, q = quit[/dim]")
    _print_queues(sim.snapshot(), console)

    while not sim.is_complete():
        choice = input("> ").strip().lower()
        if choice in {"q", "quit", "exit"}:
            return
        if choice == "r":
            sim.run()
            break

        snapshot = sim.tick()
        _print_queues(snapshot, console)
        _print_gantt(snapshot, console)

    console.print("[bold green]All processes completed.[/bold green]")
    _print_result(sim.snapshot(), settings, console)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        workload = resolve_workload(args)
        sim = Simulation().init(workload.processes, workload.settings)
    except ValidationError as exc:
        console.print("[red]Invalid workload:[/red]")
        for err in exc.errors:
            console.print(f"  [red]-[/red] {escape(str(err))}", highlight=False)
        return 2
    except (OSError, ValueError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    try:
        if args.command == "run":
            snapshot = sim.run()
            _print_result(snapshot, workload.settings, console, plain=args.plain)
            return 0

        if args.command == "step":
            try:
                _interactive_step(sim, workload.settings, console)
            except (KeyboardInterrupt, EOFError):
                console.print("[yellow]Stepping stopped.[/yellow]")
            return 0
    except SimulationError as exc:
        console.print(f"[red]Simulation error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
