# notifications/services.py
"""
Applicant/creator notices for collaboration applications.

Delivery is fire-and-forget: callers queue it after their own transaction
commits, and any failure here is logged, never raised back to them.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.urls import reverse

from collaborations.models import Application
from .models import Notification

logger = logging.getLogger('cocreate.notifications')


def build_collaboration_url(collaboration):
    try:
        return reverse("collaboration-detail", args=[collaboration.id])
    except Exception:
        return f"/api/collaborations/{collaboration.id}/"


def _compose(application, notification_type):
    """Return (recipient, title, body) for one application notice."""
    requirement = application.requirement
    collaboration = requirement.collaboration

    if notification_type == Notification.TYPE_APPLICATION_SUBMITTED:
        recipient = collaboration.creator
        title = f"New applicant for {requirement.role}"
        body = (
            f"{application.applicant_name} applied to the {requirement.role} role "
            f"in \"{collaboration.title}\".\n\n{application.message}"
        )
    elif notification_type == Notification.TYPE_APPLICATION_ACCEPTED:
        recipient = application.applicant
        title = f"You're in: {requirement.role} on {collaboration.title}"
        body = (
            f"Your application for the {requirement.role} role in "
            f"\"{collaboration.title}\" was accepted."
        )
    elif notification_type == Notification.TYPE_APPLICATION_REJECTED:
        recipient = application.applicant
        title = f"Update on your {requirement.role} application"
        body = (
            f"Your application for the {requirement.role} role in "
            f"\"{collaboration.title}\" was not selected."
        )
    else:
        raise ValueError(f"Unsupported application notification: {notification_type}")

    return recipient, title, body


def notify_application(application, notification_type):
    """Store the in-app notice and email it when the recipient has an address."""
    recipient, title, body = _compose(application, notification_type)
    collaboration = application.requirement.collaboration

    notification = Notification.objects.create(
        user=recipient,
        type=notification_type,
        title=title,
        body=body,
        collaboration=collaboration,
    )

    if getattr(recipient, "email", None):
        send_mail(
            title,
            f"Hi {recipient.username},\n\n{body}\n\n"
            f"View the collaboration here:\n{build_collaboration_url(collaboration)}\n\n"
            f"Thank you,\nCoCreate",
            settings.DEFAULT_FROM_EMAIL,
            [recipient.email],
            fail_silently=False,
        )

    return notification


def deliver_application_notification(application_id, notification_type):
    application = (
        Application.objects
        .select_related("applicant", "requirement__collaboration__creator")
        .filter(pk=application_id)
        .first()
    )
    if application is None:
        logger.warning(f"Notification skipped: application {application_id} no longer exists")
        return None

    with transaction.atomic():
        return notify_application(application, notification_type)


def dispatch_application_notification(application_id, notification_type):
    """
    Deliver inline, or through Celery when NOTIFICATIONS_ASYNC is on.
    Never raises.
    """
    try:
        if settings.NOTIFICATIONS_ASYNC:
            from .tasks import deliver_application_notification_task
            deliver_application_notification_task.delay(application_id, notification_type)
        else:
            deliver_application_notification(application_id, notification_type)
    except Exception as e:
        logger.warning(
            f"Failed to deliver {notification_type} notification for application {application_id}: {e}"
        )
