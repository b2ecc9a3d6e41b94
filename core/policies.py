# core/policies.py
"""
Centralized Demoday policy layer.

Every gate and view asks ``authorize(user, action)`` instead of inspecting
roles inline. The answer is a ``Decision``: ``ALLOWED``, or a denial that
carries the reason and whether the caller is anonymous (401) or merely
lacks the role (403).
"""
from dataclasses import dataclass
import logging

from .exceptions import Forbidden, Unauthorized

logger = logging.getLogger("demoday.policies")


ROLE_ADMIN = "admin"
ROLE_PROFESSOR = "professor"

ANY_AUTHENTICATED = None

# action -> roles allowed (None means any authenticated user)
ACTION_ROLES = {
    "demoday.manage": {ROLE_ADMIN},
    "submission.create": ANY_AUTHENTICATED,
    "submission.review": {ROLE_ADMIN},
    "submission.view_all": {ROLE_ADMIN, ROLE_PROFESSOR},
    "vote.cast": ANY_AUTHENTICATED,
    "evaluation.record": {ROLE_ADMIN, ROLE_PROFESSOR},
    "evaluation.view": {ROLE_ADMIN, ROLE_PROFESSOR},
    "ranking.view": {ROLE_ADMIN},
    "finalists.select": {ROLE_ADMIN},
}

DENIAL_MESSAGES = {
    "demoday.manage": "Apenas administradores podem gerenciar demodays.",
    "submission.review": "Apenas administradores podem atualizar status de projetos.",
    "submission.view_all": "Apenas professores e administradores podem ver todas as submissões.",
    "evaluation.record": "Apenas professores e administradores podem avaliar projetos.",
    "evaluation.view": "Apenas professores e administradores podem ver avaliações.",
    "ranking.view": "Apenas administradores podem ver o ranking.",
    "finalists.select": "Apenas administradores podem selecionar finalistas.",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    authenticated: bool = True

    def __bool__(self):
        return self.allowed


ALLOWED = Decision(True)


def forbidden(reason: str) -> Decision:
    return Decision(False, reason)


def unauthorized(reason: str = "Não autorizado.") -> Decision:
    return Decision(False, reason, authenticated=False)


def is_authenticated(user) -> bool:
    return bool(user) and getattr(user, "is_authenticated", False)


def is_admin(user) -> bool:
    if not is_authenticated(user):
        return False
    return user.is_superuser or user.role == ROLE_ADMIN


def effective_role(user):
    """Superusers act as admins regardless of their stored role."""
    if getattr(user, "is_superuser", False):
        return ROLE_ADMIN
    return getattr(user, "role", None)


def authorize(user, action: str) -> Decision:
    if action not in ACTION_ROLES:
        raise KeyError(f"Unknown action: {action}")

    if not is_authenticated(user):
        return unauthorized()

    roles = ACTION_ROLES[action]
    if roles is ANY_AUTHENTICATED or effective_role(user) in roles:
        return ALLOWED

    return forbidden(DENIAL_MESSAGES.get(action, "Acesso negado."))


def require(user, action: str) -> None:
    """Raise Unauthorized/Forbidden unless ``user`` may perform ``action``."""
    decision = authorize(user, action)
    if decision:
        return

    logger.warning(
        "Denied action=%s user=%s reason=%s",
        action, getattr(user, "id", None), decision.reason,
    )
    if not decision.authenticated:
        raise Unauthorized(decision.reason)
    raise Forbidden(decision.reason)
