from __future__ import annotations

from dataclasses import dataclass
from typing import List


class SimulationError(Exception):
    """Base class for every error raised by the simulation engine."""


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationError(SimulationError, ValueError):
    """
    Raised by ``init`` when process definitions or settings are malformed.

    Carries every offending field, not just the first one found.
    """

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        lines = "; ".join(str(e) for e in self.errors)
        super().__init__(f"Invalid simulation input ({len(self.errors)} error(s)): {lines}")

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


class InvalidStateError(SimulationError):
    """Raised when ``tick`` is called before ``init`` or after the run completed."""


class InvariantViolation(SimulationError):
    """Internal consistency fault; never corrected silently."""
