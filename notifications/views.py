from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from collaborations.views.pagination import CollaborationPagination
from .models import Notification
from .serializers import MarkReadSerializer, NotificationSerializer

TRUTHY = ("1", "true", "yes")


class MyNotificationsView(generics.ListAPIView):
    """
    GET /api/notifications/me/
    GET /api/notifications/me/?unread=true&type=application_accepted
    """
    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer
    pagination_class = CollaborationPagination

    def get_queryset(self):
        qs = Notification.objects.filter(user=self.request.user).select_related("collaboration")

        unread = self.request.query_params.get("unread")
        if unread and unread.lower() in TRUTHY:
            qs = qs.filter(is_read=False)

        notification_type = self.request.query_params.get("type")
        if notification_type:
            qs = qs.filter(type=notification_type)

        return qs


class MarkNotificationsReadView(APIView):
    """
    POST /api/notifications/me/read/

    Body: {"ids": [1, 2, 3]}; omit or send [] to mark everything read.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data["ids"]

        qs = Notification.objects.filter(user=request.user, is_read=False)
        if ids:
            qs = qs.filter(id__in=ids)

        updated = qs.update(is_read=True)
        unread = Notification.objects.filter(user=request.user, is_read=False).count()
        return Response({"marked_read": updated, "unread": unread}, status=status.HTTP_200_OK)
