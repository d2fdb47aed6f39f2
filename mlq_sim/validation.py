from __future__ import annotations

from typing import List, Sequence

from .errors import FieldError, ValidationError
from .models import LEVELS, ProcessDef, Settings


def _is_int(value) -> bool:
    # bool is an int subclass but never a meaningful time or priority
    return isinstance(value, int) and not isinstance(value, bool)


def _check_positive(errors: List[FieldError], field: str, value) -> None:
    if not _is_int(value):
        errors.append(FieldError(field, f"must be an integer, got {value!r}"))
    elif value <= 0:
        errors.append(FieldError(field, f"must be > 0, got {value}"))


def validate_processes(process_defs: Sequence[ProcessDef]) -> List[FieldError]:
    errors: List[FieldError] = []

    if not process_defs:
        errors.append(FieldError("processes", "at least one process is required"))
        return errors

    seen: set[str] = set()
    for idx, p in enumerate(process_defs):
        prefix = f"processes[{idx}]"
        if not isinstance(p, ProcessDef):
            errors.append(FieldError(prefix, f"must be a ProcessDef, got {type(p).__name__}"))
            continue

        if not isinstance(p.name, str) or not p.name.strip():
            errors.append(FieldError(f"{prefix}.name", "must be a non-empty string"))
        elif p.name in seen:
            errors.append(FieldError(f"{prefix}.name", f"duplicate process name {p.name!r}"))
        else:
            seen.add(p.name)

        if not _is_int(p.arrival_time):
            errors.append(FieldError(f"{prefix}.arrival_time", f"must be an integer, got {p.arrival_time!r}"))
        elif p.arrival_time < 0:
            errors.append(FieldError(f"{prefix}.arrival_time", f"must be >= 0, got {p.arrival_time}"))

        _check_positive(errors, f"{prefix}.burst_time", p.burst_time)

        if not _is_int(p.priority) or p.priority not in LEVELS:
            errors.append(FieldError(f"{prefix}.priority", f"must be one of 1, 2, 3, got {p.priority!r}"))

    return errors


def validate_settings(settings: Settings) -> List[FieldError]:
    if not isinstance(settings, Settings):
        return [FieldError("settings", f"must be a Settings, got {type(settings).__name__}")]

    errors: List[FieldError] = []
    quantum = settings.quantum
    if not isinstance(quantum, (list, tuple)) or len(quantum) != len(LEVELS):
        errors.append(FieldError("settings.quantum", f"must hold exactly {len(LEVELS)} values, got {quantum!r}"))
    else:
        for idx, q in enumerate(quantum):
            _check_positive(errors, f"settings.quantum[{idx}]", q)

    _check_positive(errors, "settings.aging_interval", settings.aging_interval)
    _check_positive(errors, "settings.starvation_interval", settings.starvation_interval)
    return errors


def validate(process_defs: Sequence[ProcessDef], settings: Settings) -> None:
    """
    Check every process definition and setting, raising a single
    ValidationError that lists all offending fields.
    """
    errors = validate_processes(process_defs) + validate_settings(settings)
    if errors:
        raise ValidationError(errors)
