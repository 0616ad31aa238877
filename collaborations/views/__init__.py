from .collaborations import (
    CollaborationListCreateView,
    UserCollaborationsView,
    MyCollaborationsView,
    CollaborationDetailView,
    CollaborationCancelView,
    CollaborationCompleteView,
    RequirementCreateView,
)
from .requirements import (
    RequirementCloseView,
    RequirementEligibilityView,
    ApplyToRequirementView,
    RequirementApplicationsView,
)
from .applications import DecideApplicationView, MyApplicationsView
