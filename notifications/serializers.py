from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    collaboration_title = serializers.CharField(source="collaboration.title", read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            "id",
            "type",
            "title",
            "body",
            "is_read",
            "created_at",
            "collaboration",
            "collaboration_title",
        ]
        read_only_fields = fields


class MarkReadSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False, default=list)
