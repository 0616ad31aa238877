# collaborations/policies.py
"""
Matching rules for collaborations.

Every caller (views, services, the eligibility endpoint) goes through these
checks so rule enforcement cannot drift between layers. All methods are pure:
they read only the objects handed to them and never query the database.
"""
from typing import Iterable, Optional, Tuple

from .exceptions import (
    CapacityExceededError,
    DuplicateApplicationError,
    RequirementClosedError,
)
from .models import Application, Collaboration, Requirement


REASON_UNAUTHENTICATED = "unauthenticated"
REASON_REQUIREMENT_CLOSED = RequirementClosedError.default_code
REASON_CAPACITY_EXCEEDED = CapacityExceededError.default_code
REASON_DUPLICATE_APPLICATION = DuplicateApplicationError.default_code

REASON_MESSAGES = {
    REASON_UNAUTHENTICATED: "Authentication required",
    REASON_REQUIREMENT_CLOSED: RequirementClosedError.default_detail,
    REASON_CAPACITY_EXCEEDED: CapacityExceededError.default_detail,
    REASON_DUPLICATE_APPLICATION: DuplicateApplicationError.default_detail,
}


def _is_authenticated(user) -> bool:
    return bool(user) and getattr(user, "is_authenticated", False)


class MatchingPolicy:
    """
    Eligibility checks for applying to and deciding on requirements.
    check_* methods return (bool, reason_code); can_* return bool.
    """

    @staticmethod
    def is_creator(user, collaboration: Optional[Collaboration]) -> bool:
        """Check if user created (and therefore manages) the collaboration."""
        if not _is_authenticated(user) or collaboration is None:
            return False
        return collaboration.creator_id == user.pk

    @staticmethod
    def has_active_application(
        requirement: Requirement,
        user,
        existing_applications: Iterable[Application],
    ) -> bool:
        """True if user holds a pending or accepted application for requirement."""
        for application in existing_applications:
            if (
                application.requirement_id == requirement.pk
                and application.applicant_id == user.pk
                and application.status in Application.ACTIVE_STATUSES
            ):
                return True
        return False

    @staticmethod
    def check_apply(
        requirement: Requirement,
        user,
        existing_applications: Iterable[Application],
    ) -> Tuple[bool, str]:
        """Check if user can apply to the requirement given what is already on file."""
        if not _is_authenticated(user):
            return False, REASON_UNAUTHENTICATED

        if requirement.status != Requirement.STATUS_OPEN:
            return False, REASON_REQUIREMENT_CLOSED

        if requirement.quantity_filled >= requirement.quantity_needed:
            return False, REASON_CAPACITY_EXCEEDED

        if MatchingPolicy.has_active_application(requirement, user, existing_applications):
            return False, REASON_DUPLICATE_APPLICATION

        return True, ""

    @staticmethod
    def can_apply(
        requirement: Requirement,
        user,
        existing_applications: Iterable[Application],
    ) -> bool:
        allowed, _ = MatchingPolicy.check_apply(requirement, user, existing_applications)
        return allowed

    @staticmethod
    def can_decide(application: Application, acting_user, collaboration: Collaboration) -> bool:
        """Only the creator may decide, and only while the application is pending."""
        return (
            MatchingPolicy.is_creator(acting_user, collaboration)
            and application.is_pending
        )
