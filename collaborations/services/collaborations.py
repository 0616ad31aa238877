# collaborations/services/collaborations.py
"""
Collaboration aggregate: project creation, creator edits, explicit status
transitions and the derived (read-only) staffing figures.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q

from .. import state_machine
from ..exceptions import (
    CollaborationValidationError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from ..models import Collaboration, Requirement
from ..policies import MatchingPolicy
from . import requirements as requirement_store

logger = logging.getLogger('cocreate.collaborations')

EDITABLE_FIELDS = ("title", "description")


def derive_progress(requirement: Requirement) -> int:
    """Filled share of a requirement as a whole percentage, halves rounded up."""
    needed = requirement.quantity_needed
    if needed <= 0:
        return 0
    return (200 * requirement.quantity_filled + needed) // (2 * needed)


def is_fully_staffed(collaboration: Collaboration) -> bool:
    """
    True when every requirement is closed. Informational only: it never moves
    the collaboration to completed.
    """
    return all(
        requirement.status == Requirement.STATUS_CLOSED
        for requirement in collaboration.requirements.all()
    )


def get_collaboration(collaboration_id) -> Collaboration:
    collaboration = (
        Collaboration.objects
        .with_requirements()
        .filter(pk=collaboration_id)
        .first()
    )
    if collaboration is None:
        raise NotFoundError("Collaboration not found.")
    return collaboration


def _get_for_creator(collaboration_id, acting_user, lock=False) -> Collaboration:
    qs = Collaboration.objects.all()
    if lock:
        qs = qs.select_for_update()
    collaboration = qs.filter(pk=collaboration_id).first()
    if collaboration is None:
        raise NotFoundError("Collaboration not found.")
    if not MatchingPolicy.is_creator(acting_user, collaboration):
        logger.warning(
            f"Unauthorized collaboration change: collaboration={collaboration_id}, "
            f"actor={getattr(acting_user, 'pk', None)}"
        )
        raise UnauthorizedError()
    return collaboration


def create_collaboration(creator, title, description="", requirements=None) -> Collaboration:
    """
    Create an active collaboration together with its requirements.
    Either everything is stored or nothing is.
    """
    title = (title or "").strip()
    if not title:
        raise CollaborationValidationError("Title is required.")

    requirements = list(requirements or [])
    if not requirements:
        raise CollaborationValidationError("At least one requirement is required.")
    if len(requirements) > settings.COLLAB_MAX_REQUIREMENTS:
        raise CollaborationValidationError(
            f"A collaboration can have at most {settings.COLLAB_MAX_REQUIREMENTS} requirements."
        )

    with transaction.atomic():
        collaboration = Collaboration.objects.create(
            creator=creator,
            title=title,
            description=(description or "").strip(),
            status=Collaboration.STATUS_ACTIVE,
        )
        for position, data in enumerate(requirements):
            requirement_store.create_requirement(collaboration, data, position=position)

    logger.info(
        f"Collaboration created: collaboration={collaboration.id}, creator={creator.pk}, "
        f"requirements={len(requirements)}"
    )
    return get_collaboration(collaboration.pk)


def update_collaboration(collaboration_id, acting_user, changes: dict) -> Collaboration:
    """Creator edits of title/description. Other keys are ignored."""
    with transaction.atomic():
        collaboration = _get_for_creator(collaboration_id, acting_user, lock=True)

        update_fields = []
        for field in EDITABLE_FIELDS:
            if field not in changes:
                continue
            value = (changes[field] or "").strip()
            if field == "title" and not value:
                raise CollaborationValidationError("Title is required.")
            setattr(collaboration, field, value)
            update_fields.append(field)

        if update_fields:
            collaboration.save(update_fields=update_fields + ["updated_at"])

    return get_collaboration(collaboration_id)


def add_requirement(collaboration_id, acting_user, data: dict) -> Requirement:
    """Creator adds a new role slot to an active collaboration."""
    with transaction.atomic():
        collaboration = _get_for_creator(collaboration_id, acting_user, lock=True)

        if state_machine.is_terminal_status(collaboration.status):
            raise InvalidTransitionError("Requirements can only be added to active collaborations.")

        count = collaboration.requirements.count()
        if count >= settings.COLLAB_MAX_REQUIREMENTS:
            raise CollaborationValidationError(
                f"A collaboration can have at most {settings.COLLAB_MAX_REQUIREMENTS} requirements."
            )

        return requirement_store.create_requirement(collaboration, data, position=count)


def force_close_requirement(requirement_id, acting_user) -> Requirement:
    """Creator force-closes one requirement (see requirement store)."""
    requirement = (
        Requirement.objects
        .select_related("collaboration")
        .filter(pk=requirement_id)
        .first()
    )
    if requirement is None:
        raise NotFoundError("Requirement not found.")
    if not MatchingPolicy.is_creator(acting_user, requirement.collaboration):
        raise UnauthorizedError()
    return requirement_store.close_requirement(requirement_id)


def _finish(collaboration_id, acting_user, new_status) -> Collaboration:
    from .applications import auto_reject_pending

    with transaction.atomic():
        collaboration = _get_for_creator(collaboration_id, acting_user, lock=True)

        state_machine.transition(collaboration, new_status, actor=acting_user)

        requirement_ids = list(collaboration.requirements.values_list("id", flat=True))
        Requirement.objects.filter(
            id__in=requirement_ids,
            status=Requirement.STATUS_OPEN,
        ).update(status=Requirement.STATUS_CLOSED)
        auto_reject_pending(requirement_ids)

    return get_collaboration(collaboration_id)


def cancel_collaboration(collaboration_id, acting_user) -> Collaboration:
    return _finish(collaboration_id, acting_user, Collaboration.STATUS_CANCELLED)


def complete_collaboration(collaboration_id, acting_user) -> Collaboration:
    return _finish(collaboration_id, acting_user, Collaboration.STATUS_COMPLETED)


def list_collaborations(filters=None):
    """
    Browse query. Defaults to active collaborations, newest first.

    filters: status ("all" disables the status filter), q, role, skill, creator.
    """
    filters = filters or {}
    qs = Collaboration.objects.with_requirements()

    status = filters.get("status") or Collaboration.STATUS_ACTIVE
    if status != "all":
        if status not in dict(Collaboration.STATUS_CHOICES):
            raise CollaborationValidationError(f"Unknown status filter: {status}")
        qs = qs.filter(status=status)

    q = (filters.get("q") or "").strip()
    if q:
        qs = qs.filter(Q(title__icontains=q) | Q(description__icontains=q))

    role = (filters.get("role") or "").strip()
    if role:
        qs = qs.filter(requirements__role__icontains=role)

    skill = (filters.get("skill") or "").strip()
    if skill:
        # JSON containment is not portable across backends; match the raw list text
        qs = qs.filter(requirements__skills__icontains=skill)

    creator = filters.get("creator")
    if creator:
        try:
            creator_id = int(creator)
        except (TypeError, ValueError):
            raise CollaborationValidationError(f"Unknown creator filter: {creator}")
        qs = qs.created_by(creator_id)

    return qs.distinct().order_by("-created_at", "-id")


def list_user_collaborations(creator_id):
    """Every collaboration the user created, whatever its status."""
    return (
        Collaboration.objects
        .with_requirements()
        .created_by(creator_id)
        .order_by("-created_at", "-id")
    )
