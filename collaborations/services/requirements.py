# collaborations/services/requirements.py
"""
Requirement store: creation, capacity counting and force-closing of role slots.

quantity_filled and status are the only mutable fields shared between
concurrent requests; both are written here through conditional UPDATEs so
the database arbitrates races instead of Python-side read-modify-write.
"""
import logging

from django.db import transaction
from django.db.models import Case, F, Value, When

from ..exceptions import (
    CapacityExceededError,
    CollaborationValidationError,
    NotFoundError,
    RequirementClosedError,
)
from ..models import Collaboration, Requirement

logger = logging.getLogger('cocreate.collaborations')

OPTIONAL_TEXT_FIELDS = ("budget", "timing", "location", "description")


def _clean_skills(skills):
    if skills is None:
        return []
    if isinstance(skills, str):
        skills = skills.split(",")
    return [str(s).strip() for s in skills if str(s).strip()]


def create_requirement(collaboration: Collaboration, data: dict, position: int = 0) -> Requirement:
    """
    Create an open Requirement with nothing filled.

    data keys: role, quantity_needed, and optionally budget, timing, location,
    skills, description.
    """
    role = (data.get("role") or "").strip()
    if not role:
        raise CollaborationValidationError("Role is required.")

    quantity_needed = data.get("quantity_needed")
    if isinstance(quantity_needed, bool) or not isinstance(quantity_needed, int):
        raise CollaborationValidationError("Quantity needed must be a whole number.")
    if quantity_needed < 1:
        raise CollaborationValidationError("Quantity needed must be at least 1.")

    requirement = Requirement.objects.create(
        collaboration=collaboration,
        role=role,
        quantity_needed=quantity_needed,
        quantity_filled=0,
        status=Requirement.STATUS_OPEN,
        skills=_clean_skills(data.get("skills")),
        position=position,
        **{field: (data.get(field) or "") for field in OPTIONAL_TEXT_FIELDS},
    )

    logger.info(
        f"Requirement created: requirement={requirement.id}, collaboration={collaboration.id}, "
        f"role={role!r}, needed={quantity_needed}"
    )
    return requirement


def increment_filled(requirement_id) -> Requirement:
    """
    Fill one slot of an open requirement; closes it when the last slot fills.

    Single compare-and-increment statement: of two callers racing for the last
    slot exactly one matches the WHERE clause. The status flip
    to closed happens in the same statement.
    """
    # status is assigned before quantity_filled and compares against the old
    # value, so backends that evaluate SET left to right (MySQL) agree with
    # those that read the pre-update row (PostgreSQL, SQLite)
    updated = (
        Requirement.objects
        .filter(pk=requirement_id)
        .open()
        .with_capacity()
        .update(
            status=Case(
                When(
                    quantity_filled=F("quantity_needed") - 1,
                    then=Value(Requirement.STATUS_CLOSED),
                ),
                default=Value(Requirement.STATUS_OPEN),
            ),
            quantity_filled=F("quantity_filled") + 1,
        )
    )

    requirement = Requirement.objects.filter(pk=requirement_id).first()
    if requirement is None:
        raise NotFoundError("Requirement not found.")

    if not updated:
        if requirement.quantity_filled >= requirement.quantity_needed:
            logger.warning(
                f"Increment rejected: requirement={requirement_id} at capacity "
                f"({requirement.quantity_filled}/{requirement.quantity_needed})"
            )
            raise CapacityExceededError()
        logger.warning(f"Increment rejected: requirement={requirement_id} is closed")
        raise RequirementClosedError()

    if requirement.status == Requirement.STATUS_CLOSED:
        logger.info(f"Requirement filled and closed: requirement={requirement_id}")

    return requirement


def close_requirement(requirement_id) -> Requirement:
    """
    Force-close a requirement regardless of its fill level. Idempotent.

    Pending applications on it are auto-rejected in the same transaction.
    """
    from .applications import auto_reject_pending

    with transaction.atomic():
        requirement = Requirement.objects.select_for_update().filter(pk=requirement_id).first()
        if requirement is None:
            raise NotFoundError("Requirement not found.")

        if requirement.status != Requirement.STATUS_CLOSED:
            requirement.status = Requirement.STATUS_CLOSED
            requirement.save(update_fields=["status", "updated_at"])
            logger.info(
                f"Requirement force-closed: requirement={requirement_id}, "
                f"filled={requirement.quantity_filled}/{requirement.quantity_needed}"
            )

        auto_reject_pending([requirement.pk])

    return requirement
