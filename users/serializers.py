from rest_framework import serializers
from .models import User


class PublicUserSerializer(serializers.ModelSerializer):
    """Read-only view of a user as other marketplace members see them."""
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'display_name',
            'role',
            'profile_picture',
            'skills',
        ]
        read_only_fields = fields
