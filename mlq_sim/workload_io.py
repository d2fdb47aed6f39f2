from __future__ import annotations

import csv
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .models import ProcessDef, Settings

DEFAULT_PROCESSES: List[ProcessDef] = [
    ProcessDef("P1", arrival_time=1, burst_time=20, priority=3),
    ProcessDef("P2", arrival_time=3, burst_time=10, priority=2),
    ProcessDef("P3", arrival_time=5, burst_time=2, priority=1),
    ProcessDef("P4", arrival_time=8, burst_time=7, priority=2),
    ProcessDef("P5", arrival_time=11, burst_time=15, priority=3),
    ProcessDef("P6", arrival_time=15, burst_time=8, priority=2),
    ProcessDef("P7", arrival_time=20, burst_time=4, priority=1),
]


@dataclass
class Workload:
    processes: List[ProcessDef]
    settings: Optional[Settings] = None


def load_workload(path: str | Path) -> Workload:
    """
    Load process definitions (and, for JSON, optional settings) from a file.

    Values are passed on as written (CSV cells holding plain integers are
    converted); their types and ranges are checked when the simulation is
    initialized.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> Workload:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    settings = None
    if isinstance(raw, dict):
        if "settings" in raw:
            settings = _settings_from_mapping(raw["settings"])
        raw = raw.get("processes")

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects or an object with a 'processes' list")

    return Workload(processes=[_process_from_mapping(entry) for entry in raw], settings=settings)


def _load_csv(path: Path) -> Workload:
    processes: List[ProcessDef] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row, convert=_csv_int))
    return Workload(processes=processes)


_INT_CELL = re.compile(r"-?\d+")


def _csv_int(cell: Any) -> Any:
    """
    Convert a CSV cell holding a plain integer; anything else is passed on
    unchanged so that init reports it.
    """
    if isinstance(cell, str) and _INT_CELL.fullmatch(cell.strip()):
        return int(cell)
    return cell


def _process_from_mapping(mapping, convert=lambda value: value) -> ProcessDef:
    if not isinstance(mapping, Mapping):
        raise ValueError(f"Invalid process entry: {mapping!r}")
    try:
        name = mapping["name"] if "name" in mapping else mapping["pid"]
        return ProcessDef(
            name=name.strip() if isinstance(name, str) else name,
            arrival_time=convert(mapping["arrival_time"]),
            burst_time=convert(mapping["burst_time"]),
            priority=convert(mapping["priority"]),
        )
    except KeyError as exc:
        raise ValueError(f"Invalid process entry: {mapping!r} (missing {exc})") from exc


def _settings_from_mapping(mapping: Any) -> Settings:
    if not isinstance(mapping, Mapping):
        raise ValueError(f"Invalid settings entry: {mapping!r}")

    defaults = Settings.default()
    quantum = mapping.get("quantum", defaults.quantum)
    return Settings(
        quantum=tuple(quantum) if isinstance(quantum, list) else quantum,
        aging_interval=mapping.get("aging_interval", defaults.aging_interval),
        starvation_interval=mapping.get("starvation_interval", defaults.starvation_interval),
    )
