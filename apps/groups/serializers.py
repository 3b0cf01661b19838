from rest_framework import serializers
from .models import Group, GroupMembership
from apps.accounts.serializers import UserMinimalSerializer


class GroupMemberSerializer(serializers.ModelSerializer):
    """Member of a group, in joining order."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GroupMembership
        fields = ['id', 'user', 'joined_at', 'last_notification_date']
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    owner = UserMinimalSerializer(read_only=True)
    members = GroupMemberSerializer(source='memberships', many=True, read_only=True)
    is_owner = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'join_code',
            'image',
            'owner',
            'is_owner',
            'members',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_is_owner(self, obj):
        """Whether the current user owns the group."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.is_owner(request.user)
        return False


class GroupListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    owner = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'image',
            'owner',
            'member_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return len(obj.memberships.all())


class GroupCreateSerializer(serializers.Serializer):
    """Serializer for creating groups."""

    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class GroupUpdateSerializer(serializers.Serializer):
    """Rename a group and/or change its description; both are optional."""

    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)


class JoinGroupSerializer(serializers.Serializer):
    """Serializer for joining a group with its join code."""

    join_code = serializers.CharField(max_length=16, required=True)


class LeaveGroupSerializer(serializers.Serializer):
    message = serializers.CharField(read_only=True)
    group_deleted = serializers.BooleanField(read_only=True)
    new_owner = UserMinimalSerializer(read_only=True, allow_null=True)
