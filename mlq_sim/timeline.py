from __future__ import annotations

from typing import List, Optional, Tuple

from .models import IDLE, GanttBlock


class TimelineRecorder:
    """
    Accumulates unit intervals of CPU ownership into merged Gantt blocks.

    Consecutive blocks never share a name and the blocks cover [0, end)
    without gaps.
    """

    def __init__(self) -> None:
        self._blocks: List[GanttBlock] = []

    @property
    def end(self) -> int:
        return self._blocks[-1].end if self._blocks else 0

    def record(self, name: Optional[str], start: int) -> None:
        """
        Attribute [start, start + 1) to ``name`` (Idle when None).
        """
        name = IDLE if name is None else name
        end = start + 1

        # An unrecorded stretch before ``start`` belongs to nobody.
        if start > self.end:
            self._append(IDLE, self.end, start)
        elif start < self.end:
            raise ValueError(f"Interval starting at {start} overlaps recorded history ending at {self.end}")

        self._append(name, start, end)

    def _append(self, name: str, start: int, end: int) -> None:
        last = self._blocks[-1] if self._blocks else None
        if last is not None and last.name == name and last.end == start:
            self._blocks[-1] = GanttBlock(name=name, start=last.start, end=end)
        else:
            self._blocks.append(GanttBlock(name=name, start=start, end=end))

    def blocks(self) -> Tuple[GanttBlock, ...]:
        return tuple(self._blocks)

