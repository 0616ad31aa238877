from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q


class CollaborationQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=Collaboration.STATUS_ACTIVE)

    def created_by(self, user_id):
        return self.filter(creator_id=user_id)

    def with_requirements(self):
        return self.select_related("creator").prefetch_related("requirements")


class Collaboration(models.Model):
    """
    A creative project that staffs one or more role slots (Requirements).
    Never deleted through the API; only status-transitioned by its creator.
    """
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="collaborations"
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CollaborationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "-created_at"], name="collab_status_created_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"


class RequirementQuerySet(models.QuerySet):
    def open(self):
        return self.filter(status=Requirement.STATUS_OPEN)

    def with_capacity(self):
        return self.filter(quantity_filled__lt=F("quantity_needed"))


class Requirement(models.Model):
    """
    One role slot of a collaboration, e.g. "2 wedding photographers".
    quantity_filled only moves through services.requirements.increment_filled.
    """
    STATUS_OPEN = "open"
    STATUS_CLOSED = "closed"

    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_CLOSED, "Closed"),
    ]

    collaboration = models.ForeignKey(
        Collaboration,
        on_delete=models.CASCADE,
        related_name="requirements"
    )
    role = models.CharField(max_length=120)
    quantity_needed = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    quantity_filled = models.PositiveIntegerField(default=0)

    budget = models.CharField(max_length=120, blank=True)
    timing = models.CharField(max_length=120, blank=True)
    location = models.CharField(max_length=255, blank=True)
    skills = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True)

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_OPEN
    )
    # Display order inside the collaboration
    position = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RequirementQuerySet.as_manager()

    class Meta:
        ordering = ["collaboration_id", "position", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_needed__gte=1),
                name="requirement_quantity_needed_positive",
            ),
            models.CheckConstraint(
                condition=Q(quantity_filled__gte=0) & Q(quantity_filled__lte=F("quantity_needed")),
                name="requirement_quantity_filled_in_range",
            ),
        ]

    @property
    def is_open(self) -> bool:
        return self.status == self.STATUS_OPEN

    @property
    def remaining(self) -> int:
        return max(0, self.quantity_needed - self.quantity_filled)

    def __str__(self):
        return f"{self.role} {self.quantity_filled}/{self.quantity_needed} ({self.collaboration_id})"


class ApplicationQuerySet(models.QuerySet):
    def active(self):
        """Pending or accepted: the applications that block a re-apply."""
        return self.filter(status__in=Application.ACTIVE_STATUSES)

    def pending(self):
        return self.filter(status=Application.STATUS_PENDING)

    def for_applicant(self, user_id):
        return self.filter(applicant_id=user_id)


class Application(models.Model):
    """
    A user's bid for one Requirement. Immutable except for status, which moves
    once from pending to accepted or rejected.
    """
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
    ]

    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED)

    requirement = models.ForeignKey(
        Requirement,
        on_delete=models.CASCADE,
        related_name="applications"
    )
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="collaboration_applications"
    )
    applicant_name = models.CharField(max_length=255)
    applicant_avatar = models.CharField(max_length=1024, blank=True)
    message = models.TextField()

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    applied_at = models.DateTimeField(auto_now_add=True)
    decided_at = models.DateTimeField(null=True, blank=True)

    objects = ApplicationQuerySet.as_manager()

    class Meta:
        ordering = ["-applied_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["requirement", "applicant"],
                condition=Q(status__in=["pending", "accepted"]),
                name="application_one_active_per_applicant",
            ),
        ]
        indexes = [
            models.Index(fields=["requirement", "status"], name="application_req_status_idx"),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == self.STATUS_PENDING

    def __str__(self):
        return f"{self.applicant_name} -> {self.requirement_id} ({self.status})"
