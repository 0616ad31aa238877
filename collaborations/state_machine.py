# collaborations/state_machine.py
"""
Collaboration lifecycle.

    active --complete--> completed
    active --cancel----> cancelled

Only the creator moves a collaboration, and only out of active. Staffing
levels never drive a transition.
"""
from typing import Tuple
import logging

from .exceptions import InvalidTransitionError
from .models import Collaboration

logger = logging.getLogger('cocreate.collaborations')


VALID_TRANSITIONS = {
    Collaboration.STATUS_ACTIVE: (Collaboration.STATUS_COMPLETED, Collaboration.STATUS_CANCELLED),
    Collaboration.STATUS_COMPLETED: (),
    Collaboration.STATUS_CANCELLED: (),
}


def get_allowed_transitions(collaboration: Collaboration) -> list:
    return list(VALID_TRANSITIONS.get(collaboration.status, ()))


def is_terminal_status(status: str) -> bool:
    return not VALID_TRANSITIONS.get(status)


def can_transition(collaboration: Collaboration, new_status: str) -> Tuple[bool, str]:
    if new_status not in VALID_TRANSITIONS:
        return False, f"Unknown collaboration status '{new_status}'."
    if new_status not in get_allowed_transitions(collaboration):
        return False, f"A {collaboration.status} collaboration cannot become {new_status}."
    return True, ""


def transition(collaboration: Collaboration, new_status: str, actor=None) -> Collaboration:
    """
    Move the collaboration to new_status and save it.
    Raises InvalidTransitionError when the move is not allowed.
    """
    actor_id = getattr(actor, "pk", None)
    allowed, reason = can_transition(collaboration, new_status)
    if not allowed:
        logger.warning(
            f"Collaboration transition refused: collaboration={collaboration.pk}, "
            f"{collaboration.status} -> {new_status}, actor={actor_id}"
        )
        raise InvalidTransitionError(reason)

    previous = collaboration.status
    collaboration.status = new_status
    collaboration.save(update_fields=["status", "updated_at"])

    logger.info(
        f"Collaboration {collaboration.pk} moved {previous} -> {new_status} by actor={actor_id}"
    )
    return collaboration
