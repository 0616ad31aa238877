# notifications/tasks.py

from celery import shared_task

from .services import deliver_application_notification


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def deliver_application_notification_task(self, application_id: int, notification_type: str):
    """
    Async wrapper for application notices; retried on transient failures.
    """
    try:
        notification = deliver_application_notification(application_id, notification_type)
    except Exception as exc:
        raise self.retry(exc=exc)
    return notification.id if notification else None
