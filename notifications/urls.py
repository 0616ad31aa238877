from django.urls import path
from .views import MarkNotificationsReadView, MyNotificationsView

urlpatterns = [
    path("me/", MyNotificationsView.as_view(), name="my-notifications"),
    path("me/read/", MarkNotificationsReadView.as_view(), name="notifications-mark-read"),
]
