from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, List, Optional, Tuple

from .models import LEVELS, Process, ProcessView


class ReadyQueueSet:
    """
    Three FIFO ready queues; level 1 is the highest priority, level 3 the lowest.
    """

    def __init__(self) -> None:
        self._queues: Tuple[Deque[Process], ...] = tuple(deque() for _ in LEVELS)

    def _queue(self, level: int) -> Deque[Process]:
        if level not in LEVELS:
            raise ValueError(f"Unknown queue level {level}")
        return self._queues[level - 1]

    def push(self, process: Process) -> None:
        """
        Append a process to the tail of the queue for its current priority.
        """
        self._queue(process.priority).append(process)

    def remove(self, process: Process, level: int) -> None:
        self._queue(level).remove(process)

    def pop_highest(self) -> Optional[Tuple[int, Process]]:
        """
        Dequeue the head of the first non-empty queue, scanning levels 1 -> 3.
        """
        for level in LEVELS:
            queue = self._queue(level)
            if queue:
                return level, queue.popleft()
        return None

    def waiting(self) -> List[Process]:
        """
        Every queued process, levels 1 -> 3, head -> tail.
        """
        return [p for level in LEVELS for p in self._queue(level)]

    def items(self) -> List[Tuple[int, Process]]:
        return [(level, p) for level in LEVELS for p in self._queue(level)]

    def names(self, level: int) -> List[str]:
        return [p.name for p in self._queue(level)]

    def is_empty(self) -> bool:
        return not any(self._queues)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.waiting())

    def views(self) -> Tuple[Tuple[ProcessView, ...], ...]:
        return tuple(tuple(p.view() for p in q) for q in self._queues)
