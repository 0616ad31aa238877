from .requirements import create_requirement, increment_filled, close_requirement
from .applications import (
    DECISION_ACCEPT,
    DECISION_REJECT,
    submit_application,
    decide,
    auto_reject_pending,
    list_applications_for_requirement,
    list_applications_for_applicant,
)
from .collaborations import (
    derive_progress,
    is_fully_staffed,
    get_collaboration,
    create_collaboration,
    update_collaboration,
    add_requirement,
    force_close_requirement,
    cancel_collaboration,
    complete_collaboration,
    list_collaborations,
    list_user_collaborations,
)
