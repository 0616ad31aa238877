"""
Collaboration domain errors.

Each error carries a stable ``default_code`` that the dashboard maps to its
own user-facing text, plus the HTTP status used at the API boundary.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class CollaborationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Collaboration request failed."
    default_code = "collaboration_error"


class CollaborationValidationError(CollaborationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "validation_error"


class InvalidTransitionError(CollaborationValidationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This collaboration can no longer change status."
    default_code = "invalid_transition"


class RequirementClosedError(CollaborationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This role is no longer accepting applications."
    default_code = "requirement_closed"


class CapacityExceededError(CollaborationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This role is already fully staffed."
    default_code = "capacity_exceeded"


class DuplicateApplicationError(CollaborationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "You have already applied to this role."
    default_code = "duplicate_application"


class EmptyMessageError(CollaborationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Application message cannot be empty."
    default_code = "empty_message"


class UnauthorizedError(CollaborationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Only the collaboration creator can do this."
    default_code = "unauthorized"


class AlreadyDecidedError(CollaborationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This application has already been decided."
    default_code = "already_decided"


class NotFoundError(CollaborationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"
