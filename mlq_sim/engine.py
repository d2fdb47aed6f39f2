from __future__ import annotations

import logging
from typing import Optional, Sequence

from .errors import InvalidStateError
from .models import ProcessDef, Settings, Snapshot
from .registry import ProcessRegistry
from .scheduler import SimulationState, run_tick
from .validation import validate

logger = logging.getLogger(__name__)


class Simulation:
    """
    Owner of one MLQ run.

    The caller drives it: ``init`` starts a run, each ``tick`` advances it by
    one time unit, and ``snapshot`` returns an immutable view for display.
    Separate instances share no state.
    """

    def __init__(self) -> None:
        self._state: Optional[SimulationState] = None

    @property
    def initialized(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> SimulationState:
        if self._state is None:
            raise InvalidStateError("Simulation has not been initialized; call init() first")
        return self._state

    def init(self, process_defs: Sequence[ProcessDef], settings: Optional[Settings] = None) -> "Simulation":
        """
        Validate the input and start a fresh run at t=0.

        Raises ValidationError listing every bad field; the previous run, if
        any, is left as it was.
        """
        settings = settings if settings is not None else Settings.default()
        process_defs = list(process_defs)
        validate(process_defs, settings)

        frozen = Settings(
            quantum=tuple(settings.quantum),
            aging_interval=settings.aging_interval,
            starvation_interval=settings.starvation_interval,
        )
        self._state = SimulationState(settings=frozen, registry=ProcessRegistry(process_defs))
        logger.info(
            "Simulation initialized with %d processes (quantum=%s, aging=%d, starvation=%d)",
            len(process_defs),
            list(frozen.quantum),
            frozen.aging_interval,
            frozen.starvation_interval,
        )
        return self

    def tick(self) -> Snapshot:
        run_tick(self.state)
        return self.snapshot()

    def is_complete(self) -> bool:
        return self._state is not None and self._state.complete

    def run(self) -> Snapshot:
        """
        Tick until every process has completed and return the final snapshot.
        """
        while not self.is_complete():
            self.tick()
        return self.snapshot()

    def snapshot(self) -> Snapshot:
        state = self.state
        return Snapshot(
            current_time=state.current_time,
            queues=state.queues.views(),
            running=state.running.view() if state.running is not None else None,
            timeline=state.timeline.blocks(),
            processes=tuple(p.view() for p in state.registry),
            complete=state.complete,
        )
