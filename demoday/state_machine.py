# demoday/state_machine.py
"""
Demoday lifecycle.

    active ──→ finished
      │  ↖       │
      └──→ canceled

Any transition not in VALID_TRANSITIONS is rejected. At most one demoday is
``active`` at a time: activating or creating one finishes the previous one
in the same transaction, and a partial unique constraint backs this up in
storage. Canceling keeps the row (status=canceled, active=False).
"""
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from django.db import IntegrityError, transaction

from core.exceptions import Conflict, ValidationError
from core.policies import require

from .models import (
    Demoday,
    DemodayPhase,
    EvaluationCriterion,
    ProjectCategory,
    RegistrationCriterion,
)
from .phases import is_event_finished, now as local_now, validate_phase_schedule
from .sanitizers import sanitize_html, sanitize_title

logger = logging.getLogger("demoday.lifecycle")


# Valid state transitions: from_status -> list of allowed to_statuses
VALID_TRANSITIONS = {
    Demoday.STATUS_ACTIVE: [Demoday.STATUS_FINISHED, Demoday.STATUS_CANCELED],
    Demoday.STATUS_FINISHED: [Demoday.STATUS_ACTIVE],  # Reopen
    Demoday.STATUS_CANCELED: [Demoday.STATUS_ACTIVE],
}


def can_transition(demoday: Demoday, new_status: str) -> Tuple[bool, str]:
    """
    Check if a demoday can move to ``new_status``.

    Returns (can_transition: bool, reason: str)
    """
    current_status = demoday.status

    if new_status == current_status:
        return True, "Same status"

    if new_status not in dict(Demoday.STATUS_CHOICES):
        return False, f"Status inválido: {new_status}"

    if new_status not in VALID_TRANSITIONS.get(current_status, []):
        return False, f"Não é possível mudar de '{current_status}' para '{new_status}'"

    return True, ""


def get_allowed_transitions(demoday: Demoday) -> list:
    return VALID_TRANSITIONS.get(demoday.status, [])


def _deactivate_others(exclude_pk=None) -> int:
    qs = Demoday.objects.select_for_update().filter(active=True)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.update(active=False, status=Demoday.STATUS_FINISHED)


def _create_phases(demoday: Demoday, phases: List[dict]) -> None:
    DemodayPhase.objects.bulk_create([
        DemodayPhase(
            demoday=demoday,
            phase_number=p["phase_number"],
            name=sanitize_title(p.get("name") or f"Fase {p['phase_number']}"),
            description=sanitize_html(p.get("description", "")),
            start_date=p["start_date"],
            end_date=p["end_date"],
        )
        for p in phases
    ])


def _create_criteria(model, demoday: Demoday, criteria: Optional[List[dict]]) -> None:
    model.objects.bulk_create([
        model(
            demoday=demoday,
            name=sanitize_title(c["name"]),
            description=sanitize_html(c.get("description", "")),
        )
        for c in criteria or []
    ])


def _clean_name(name) -> str:
    name = sanitize_title(name)
    if not name:
        raise ValidationError(
            "Nome do Demoday é obrigatório.",
            fields={"name": ["Este campo é obrigatório."]},
        )
    return name


def create_demoday(
    actor,
    name: str,
    phases: List[dict],
    categories: Optional[List[dict]] = None,
    registration_criteria: Optional[List[dict]] = None,
    evaluation_criteria: Optional[List[dict]] = None,
    max_finalists: Optional[int] = None,
) -> Demoday:
    """
    Create a new demoday and make it the active one.

    Any currently active demoday is finished in the same transaction.
    """
    require(actor, "demoday.manage")
    name = _clean_name(name)
    validate_phase_schedule(phases)

    extra = {}
    if max_finalists is not None:
        extra["max_finalists"] = max_finalists

    try:
        with transaction.atomic():
            finished = _deactivate_others()
            demoday = Demoday.objects.create(
                name=name,
                created_by=actor,
                active=True,
                status=Demoday.STATUS_ACTIVE,
                **extra,
            )
            _create_phases(demoday, phases)

            ProjectCategory.objects.bulk_create([
                ProjectCategory(
                    demoday=demoday,
                    name=sanitize_title(c["name"]),
                    description=sanitize_html(c.get("description", "")),
                    **({"max_finalists": c["max_finalists"]} if c.get("max_finalists") is not None else {}),
                )
                for c in categories or []
            ])
            _create_criteria(RegistrationCriterion, demoday, registration_criteria)
            _create_criteria(EvaluationCriterion, demoday, evaluation_criteria)
    except IntegrityError:
        logger.warning(f"Demoday creation conflicted with another active demoday: actor={actor.id}")
        raise Conflict("Já existe um Demoday ativo.", code="active_demoday_exists")

    logger.info(
        f"Demoday created: demoday={demoday.id}, actor={actor.id}, "
        f"phases={len(phases)}, previously_active_finished={finished}"
    )
    return demoday


def update_demoday(
    actor,
    demoday: Demoday,
    name: Optional[str] = None,
    phases: Optional[List[dict]] = None,
    max_finalists: Optional[int] = None,
) -> Demoday:
    """Update basic data; a given phase list replaces the stored one."""
    require(actor, "demoday.manage")
    if phases is not None:
        validate_phase_schedule(phases)

    with transaction.atomic():
        update_fields = ["updated_at"]
        if name is not None:
            demoday.name = _clean_name(name)
            update_fields.append("name")
        if max_finalists is not None:
            demoday.max_finalists = max_finalists
            update_fields.append("max_finalists")
        demoday.save(update_fields=update_fields)

        if phases is not None:
            demoday.phases.all().delete()
            _create_phases(demoday, phases)

    logger.info(f"Demoday updated: demoday={demoday.id}, actor={actor.id}, phases_replaced={phases is not None}")
    return demoday


def replace_criteria(
    actor,
    demoday: Demoday,
    registration: Optional[List[dict]] = None,
    evaluation: Optional[List[dict]] = None,
) -> Demoday:
    """Delete and recreate both criteria sets of ``demoday``."""
    require(actor, "demoday.manage")

    with transaction.atomic():
        demoday.registration_criteria.all().delete()
        demoday.evaluation_criteria.all().delete()
        _create_criteria(RegistrationCriterion, demoday, registration)
        _create_criteria(EvaluationCriterion, demoday, evaluation)

    logger.info(
        f"Criteria replaced: demoday={demoday.id}, actor={actor.id}, "
        f"registration={len(registration or [])}, evaluation={len(evaluation or [])}"
    )
    return demoday


def change_status(actor, demoday: Demoday, new_status: str) -> Demoday:
    """
    Move ``demoday`` to ``new_status``.

    Reactivating finishes whichever demoday is currently active.
    """
    require(actor, "demoday.manage")

    can, reason = can_transition(demoday, new_status)
    if not can:
        logger.warning(
            f"Invalid state transition attempted: demoday={demoday.id}, "
            f"from={demoday.status}, to={new_status}, actor={actor.id}. Reason: {reason}"
        )
        raise ValidationError(reason, code="invalid_transition")

    if new_status == demoday.status:
        return demoday

    old_status = demoday.status
    try:
        with transaction.atomic():
            if new_status == Demoday.STATUS_ACTIVE:
                _deactivate_others(exclude_pk=demoday.pk)
            demoday.status = new_status
            demoday.active = new_status == Demoday.STATUS_ACTIVE
            demoday.save(update_fields=["status", "active", "updated_at"])
    except IntegrityError:
        raise Conflict("Já existe um Demoday ativo.", code="active_demoday_exists")

    logger.info(
        f"Demoday state transition: demoday={demoday.id}, "
        f"from={old_status}, to={new_status}, actor={actor.id}"
    )
    return demoday


def delete_demoday(actor, demoday: Demoday) -> None:
    require(actor, "demoday.manage")
    demoday_id = demoday.id
    demoday.delete()
    logger.info(f"Demoday deleted: demoday={demoday_id}, actor={actor.id}")


def check_finished(demoday: Demoday, moment: Optional[datetime] = None) -> bool:
    """
    Finish ``demoday`` if its last phase is over.

    Returns True when the demoday is (now) finished.
    """
    if demoday.status == Demoday.STATUS_FINISHED:
        return True
    if not demoday.active or not is_event_finished(demoday, moment or local_now()):
        return False

    demoday.status = Demoday.STATUS_FINISHED
    demoday.active = False
    demoday.save(update_fields=["status", "active", "updated_at"])
    logger.info(f"Demoday finished after last phase ended: demoday={demoday.id}")
    return True


def finish_expired_demodays(moment: Optional[datetime] = None) -> List[Demoday]:
    """Sweep: finish every active demoday whose last phase has ended."""
    moment = moment or local_now()
    finished = [
        demoday
        for demoday in Demoday.objects.filter(active=True)
        if check_finished(demoday, moment)
    ]
    logger.info(f"Finished-demoday sweep: finished={[d.id for d in finished]}")
    return finished
