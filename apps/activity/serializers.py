from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from .models import ActivityEntry


class ActivityEntrySerializer(serializers.ModelSerializer):
    """Read-only view of an activity entry."""

    author = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ActivityEntry
        fields = ['id', 'group', 'type', 'author', 'content', 'date']
        read_only_fields = fields
