from django.urls import path
from .views import (
    CollaborationListCreateView,
    UserCollaborationsView,
    MyCollaborationsView,
    CollaborationDetailView,
    CollaborationCancelView,
    CollaborationCompleteView,
    RequirementCreateView,
    RequirementCloseView,
    RequirementEligibilityView,
    ApplyToRequirementView,
    RequirementApplicationsView,
    DecideApplicationView,
    MyApplicationsView,
)

urlpatterns = [
    path("", CollaborationListCreateView.as_view(), name="collaboration-list"),
    path("mine/", MyCollaborationsView.as_view(), name="my-collaborations"),
    path("user/<int:creator_id>/", UserCollaborationsView.as_view(), name="user-collaborations"),
    path("<int:collaboration_id>/", CollaborationDetailView.as_view(), name="collaboration-detail"),
    path("<int:collaboration_id>/cancel/", CollaborationCancelView.as_view(), name="collaboration-cancel"),
    path("<int:collaboration_id>/complete/", CollaborationCompleteView.as_view(), name="collaboration-complete"),
    path("<int:collaboration_id>/requirements/", RequirementCreateView.as_view(), name="requirement-create"),

    path("requirements/<int:requirement_id>/close/", RequirementCloseView.as_view(), name="requirement-close"),
    path(
        "requirements/<int:requirement_id>/eligibility/",
        RequirementEligibilityView.as_view(),
        name="requirement-eligibility",
    ),
    path("requirements/<int:requirement_id>/apply/", ApplyToRequirementView.as_view(), name="requirement-apply"),
    path(
        "requirements/<int:requirement_id>/applications/",
        RequirementApplicationsView.as_view(),
        name="requirement-applications",
    ),

    path("applications/mine/", MyApplicationsView.as_view(), name="my-applications"),
    path(
        "applications/<int:application_id>/decide/",
        DecideApplicationView.as_view(),
        name="application-decide",
    ),
]
