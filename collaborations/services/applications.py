# collaborations/services/applications.py
"""
Application ledger: submissions and creator decisions.

Every write runs inside transaction.atomic so a failed precondition never
leaves a partial record behind. Applicant/creator notifications are queued
with transaction.on_commit and can never roll a decision back.
"""
from functools import partial
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from notifications.models import Notification
from notifications.services import dispatch_application_notification

from ..exceptions import (
    AlreadyDecidedError,
    CapacityExceededError,
    CollaborationValidationError,
    DuplicateApplicationError,
    EmptyMessageError,
    NotFoundError,
    RequirementClosedError,
    UnauthorizedError,
)
from ..models import Application, Collaboration, Requirement
from ..policies import (
    REASON_CAPACITY_EXCEEDED,
    REASON_DUPLICATE_APPLICATION,
    REASON_REQUIREMENT_CLOSED,
    MatchingPolicy,
)
from . import requirements as requirement_store

logger = logging.getLogger('cocreate.collaborations')

DECISION_ACCEPT = "accept"
DECISION_REJECT = "reject"
DECISIONS = (DECISION_ACCEPT, DECISION_REJECT)


def _notify_on_commit(application_id, notification_type):
    transaction.on_commit(
        partial(dispatch_application_notification, application_id, notification_type)
    )


def submit_application(requirement_id, applicant, message) -> Application:
    """
    Record a pending application from applicant to the requirement.

    Raises, in this order: NotFoundError, RequirementClosedError,
    CapacityExceededError, EmptyMessageError, DuplicateApplicationError.
    """
    if not applicant or not getattr(applicant, "is_authenticated", False):
        raise UnauthorizedError("Authentication required.")

    with transaction.atomic():
        requirement = (
            Requirement.objects
            .select_for_update(of=("self",))
            .select_related("collaboration")
            .filter(pk=requirement_id)
            .first()
        )
        if requirement is None:
            raise NotFoundError("Requirement not found.")

        existing = list(
            Application.objects.active().filter(requirement=requirement, applicant_id=applicant.pk)
        )
        allowed, reason = MatchingPolicy.check_apply(requirement, applicant, existing)

        if reason == REASON_REQUIREMENT_CLOSED:
            raise RequirementClosedError()
        if reason == REASON_CAPACITY_EXCEEDED:
            raise CapacityExceededError()

        text = (message or "").strip()
        if not text:
            raise EmptyMessageError()
        if len(text) > settings.COLLAB_MAX_MESSAGE_LENGTH:
            raise CollaborationValidationError(
                f"Message must be at most {settings.COLLAB_MAX_MESSAGE_LENGTH} characters."
            )

        if reason == REASON_DUPLICATE_APPLICATION or not allowed:
            logger.warning(
                f"Duplicate application blocked: user={applicant.pk}, requirement={requirement_id}"
            )
            raise DuplicateApplicationError()

        try:
            # Savepoint: a concurrent duplicate trips the partial unique index
            with transaction.atomic():
                application = Application.objects.create(
                    requirement=requirement,
                    applicant=applicant,
                    applicant_name=applicant.display_name,
                    applicant_avatar=getattr(applicant, "profile_picture", None) or "",
                    message=text,
                    status=Application.STATUS_PENDING,
                )
        except IntegrityError:
            logger.warning(
                f"Concurrent duplicate application: user={applicant.pk}, requirement={requirement_id}"
            )
            raise DuplicateApplicationError()

        _notify_on_commit(application.pk, Notification.TYPE_APPLICATION_SUBMITTED)

    logger.info(
        f"Application submitted: application={application.id}, user={applicant.pk}, "
        f"requirement={requirement_id}"
    )
    return application


def decide(application_id, decision, acting_user) -> Application:
    """
    Accept or reject a pending application on behalf of the collaboration creator.

    Accepting fills one slot of the requirement in the same transaction; if the
    slot was lost to a concurrent accept the whole decision rolls back and the
    application stays pending.
    """
    if decision not in DECISIONS:
        raise CollaborationValidationError("Decision must be 'accept' or 'reject'.")

    with transaction.atomic():
        application = (
            Application.objects
            .select_related("requirement__collaboration")
            .filter(pk=application_id)
            .first()
        )
        if application is None:
            raise NotFoundError("Application not found.")

        collaboration = application.requirement.collaboration

        if not MatchingPolicy.is_creator(acting_user, collaboration):
            logger.warning(
                f"Unauthorized decision attempt: application={application_id}, "
                f"actor={getattr(acting_user, 'pk', None)}, creator={collaboration.creator_id}"
            )
            raise UnauthorizedError()

        # Lock order shared with cancel/complete and force close:
        # collaboration, then requirement, then application
        collaboration = Collaboration.objects.select_for_update().get(pk=collaboration.pk)
        Requirement.objects.select_for_update().get(pk=application.requirement_id)
        application = (
            Application.objects
            .select_for_update(of=("self",))
            .select_related("requirement__collaboration")
            .get(pk=application.pk)
        )

        if not MatchingPolicy.can_decide(application, acting_user, collaboration):
            raise AlreadyDecidedError()

        new_status = (
            Application.STATUS_ACCEPTED if decision == DECISION_ACCEPT else Application.STATUS_REJECTED
        )
        decided_at = timezone.now()

        # Claim the pending row; a concurrent decision on the same application loses here
        claimed = Application.objects.filter(
            pk=application.pk,
            status=Application.STATUS_PENDING,
        ).update(status=new_status, decided_at=decided_at)
        if not claimed:
            raise AlreadyDecidedError()

        if decision == DECISION_ACCEPT:
            try:
                requirement = requirement_store.increment_filled(application.requirement_id)
            except (CapacityExceededError, RequirementClosedError):
                logger.warning(
                    f"Accept rolled back: application={application_id}, "
                    f"requirement={application.requirement_id} has no open slot"
                )
                raise
            application.requirement = requirement

        application.status = new_status
        application.decided_at = decided_at

        notification_type = (
            Notification.TYPE_APPLICATION_ACCEPTED
            if decision == DECISION_ACCEPT
            else Notification.TYPE_APPLICATION_REJECTED
        )
        _notify_on_commit(application.pk, notification_type)

    logger.info(
        f"Application decided: application={application_id}, decision={decision}, "
        f"actor={acting_user.pk}"
    )
    return application


def auto_reject_pending(requirement_ids) -> int:
    """
    Reject every pending application on the given requirements.

    Used when the creator closes a requirement or ends the collaboration;
    each rejected applicant is notified after commit.
    """
    pending_ids = list(
        Application.objects
        .pending()
        .filter(requirement_id__in=requirement_ids)
        .values_list("id", flat=True)
    )
    if not pending_ids:
        return 0

    rejected = Application.objects.filter(
        id__in=pending_ids,
        status=Application.STATUS_PENDING,
    ).update(status=Application.STATUS_REJECTED, decided_at=timezone.now())

    for application_id in pending_ids:
        _notify_on_commit(application_id, Notification.TYPE_APPLICATION_REJECTED)

    logger.info(f"Auto-rejected {rejected} pending application(s) on requirements={list(requirement_ids)}")
    return rejected


def list_applications_for_requirement(requirement_id, acting_user):
    """Applicants for a requirement, visible to the collaboration creator only."""
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

    return (
        Application.objects
        .filter(requirement=requirement)
        .select_related("applicant")
        .order_by("-applied_at", "-id")
    )


def list_applications_for_applicant(user):
    """The user's own applications, with requirement and collaboration joined in."""
    return (
        Application.objects
        .for_applicant(user.pk)
        .select_related("requirement__collaboration__creator")
        .order_by("-applied_at", "-id")
    )
