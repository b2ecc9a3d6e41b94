# demoday/phases.py
"""
Phase calendar for Demoday.

Phases are stored as whole dates. A phase is open for every instant whose
local calendar date (settings.TIME_ZONE) falls between its start and end
dates, inclusive. Every function takes ``now`` explicitly so callers and
tests control the clock; ``now()`` below is the single source of the real
one.
"""
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Tuple

from django.utils import timezone

from core.exceptions import NotFound, ValidationError

from .models import Demoday, DemodayPhase


def now() -> datetime:
    """Current local wall-clock time."""
    return to_local(timezone.now())


def to_local(value: datetime) -> datetime:
    """Normalize ``value`` to a naive datetime in the local timezone."""
    if timezone.is_aware(value):
        return timezone.make_naive(value)
    return value


def phase_window(phase) -> Tuple[datetime, datetime]:
    """Return the inclusive (start, end) datetimes of a phase."""
    start = datetime.combine(phase.start_date, time.min)
    end = datetime.combine(phase.end_date, time.max)
    return start, end


def window_contains(phase, moment: datetime) -> bool:
    return phase.start_date <= to_local(moment).date() <= phase.end_date


def current_phase(phases: Iterable, moment: Optional[datetime] = None):
    """
    First phase, in phase-number order, whose window contains ``moment``.

    Returns None when no window is open.
    """
    moment = to_local(moment or now())
    for phase in sorted(phases, key=lambda p: p.phase_number):
        if window_contains(phase, moment):
            return phase
    return None


def is_in_phase(demoday: Demoday, phase_number: int, moment: Optional[datetime] = None) -> bool:
    phase = demoday.phases.filter(phase_number=phase_number).first()
    if phase is None:
        return False
    return window_contains(phase, moment or now())


def is_event_finished(demoday: Demoday, moment: Optional[datetime] = None) -> bool:
    """True once ``moment`` is past the end of the highest-numbered phase."""
    last = demoday.phases.order_by("-phase_number").first()
    if last is None:
        return False
    return to_local(moment or now()).date() > last.end_date


def get_demoday(demoday_id) -> Demoday:
    try:
        return Demoday.objects.get(pk=demoday_id)
    except (Demoday.DoesNotExist, ValueError, TypeError):
        raise NotFound("Demoday não encontrado.", code="demoday_not_found")


def get_active_demoday() -> Optional[Demoday]:
    return Demoday.objects.filter(active=True).first()


def get_current_phase_info(moment: Optional[datetime] = None) -> dict:
    """
    Snapshot of the active demoday's calendar.

    Keys: demoday, phases, current_phase, is_voting_phase,
    is_final_voting_phase. All empty/False when no demoday is active.
    """
    moment = moment or now()
    demoday = get_active_demoday()
    if demoday is None:
        return {
            "demoday": None,
            "phases": [],
            "current_phase": None,
            "is_voting_phase": False,
            "is_final_voting_phase": False,
        }

    phases = demoday.ordered_phases()
    phase = current_phase(phases, moment)
    number = phase.phase_number if phase else None
    return {
        "demoday": demoday,
        "phases": phases,
        "current_phase": phase,
        "is_voting_phase": number == DemodayPhase.POPULAR_VOTING,
        "is_final_voting_phase": number == DemodayPhase.FINAL_VOTING,
    }


def validate_phase_schedule(phases: List[dict]) -> None:
    """
    Reject a phase list with duplicate numbers, inverted dates or
    overlapping windows.

    ``phases`` is a list of mappings with at least ``phase_number``,
    ``start_date`` and ``end_date``.
    """
    if not phases:
        raise ValidationError(
            "Informe ao menos uma fase.",
            code="invalid_phase_schedule",
            fields={"phases": ["Lista de fases vazia."]},
        )

    numbers = [p["phase_number"] for p in phases]
    if len(numbers) != len(set(numbers)):
        raise ValidationError(
            "Números de fase repetidos.",
            code="invalid_phase_schedule",
            fields={"phases": ["Cada fase deve ter um número único."]},
        )

    for p in phases:
        if not isinstance(p["start_date"], date) or not isinstance(p["end_date"], date):
            raise ValidationError(
                "Datas de fase inválidas.",
                code="invalid_phase_schedule",
                fields={"phases": [f"Fase {p['phase_number']}: datas inválidas."]},
            )
        if p["end_date"] < p["start_date"]:
            raise ValidationError(
                "A data final da fase deve ser igual ou posterior à data inicial.",
                code="invalid_phase_schedule",
                fields={"phases": [f"Fase {p['phase_number']}: término antes do início."]},
            )

    ordered = sorted(phases, key=lambda p: (p["start_date"], p["end_date"]))
    for previous, following in zip(ordered, ordered[1:]):
        # Whole-day windows: sharing a date is an overlap
        if following["start_date"] <= previous["end_date"]:
            raise ValidationError(
                "As fases não podem se sobrepor.",
                code="invalid_phase_schedule",
                fields={
                    "phases": [
                        f"Fases {previous['phase_number']} e {following['phase_number']} se sobrepõem."
                    ]
                },
            )
