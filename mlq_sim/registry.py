from __future__ import annotations

from typing import Dict, Iterator, List, Sequence

from .models import Process, ProcessDef, ProcessState


class ProcessRegistry:
    """
    All processes of one run, in definition order, keyed by name.

    Completed processes stay registered for reporting.
    """

    def __init__(self, process_defs: Sequence[ProcessDef]):
        self._by_name: Dict[str, Process] = {}
        for d in process_defs:
            self._by_name[d.name] = Process.from_def(d)

    def __iter__(self) -> Iterator[Process]:
        return iter(self._by_name.values())

    def __getitem__(self, name: str) -> Process:
        return self._by_name[name]

    def in_state(self, state: ProcessState) -> List[Process]:
        return [p for p in self._by_name.values() if p.state is state]

    def arriving(self, current_time: int) -> List[Process]:
        """
        Processes due to arrive by ``current_time`` that have not arrived yet.
        """
        return [
            p
            for p in self._by_name.values()
            if p.state is ProcessState.NOT_ARRIVED and p.arrival_time <= current_time
        ]

    def all_finished(self) -> bool:
        return all(p.remaining_time <= 0 for p in self._by_name.values())
