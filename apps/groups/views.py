from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupUpdateSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    JoinGroupSerializer,
    LeaveGroupSerializer,
)
from .permissions import IsGroupMember

from apps.activity.serializers import ActivityEntrySerializer
from apps.activity.services import get_group_activity
from apps.accounts.serializers import UserMinimalSerializer
from apps.groups.services import (
    create_group,
    update_group,
    get_group_by_id,
    list_user_groups,
    join_group,
    leave_group,
    get_group_members,
    # Exceptions
    ValidationError,
    NotFoundError,
    NotMemberError,
    AlreadyMemberError,
    ConflictError,
)
from apps.notifications.exceptions import NotificationDeliveryError
from apps.reminders.serializers import ReminderRequestSerializer, ReminderResultSerializer
from apps.reminders.services import try_send_reminder, CooldownError, NoDeviceError


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class GroupViewSet(viewsets.GenericViewSet):
    """
    ViewSet for groups and their membership.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups the user is a member of
    create: Create a new group
    retrieve: Get a specific group (members only)
    partial_update: Rename a group or change its description (members only)

    Groups are never deleted directly; a group disappears when its last
    member leaves.
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Return only groups where user is a member."""
        return list_user_groups(user=self.request.user)

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return GroupListSerializer
        elif self.action == 'create':
            return GroupCreateSerializer
        elif self.action == 'partial_update':
            return GroupUpdateSerializer
        return GroupSerializer

    @extend_schema(responses={200: GroupListSerializer(many=True)}, tags=['groups'])
    def list(self, request):
        """Get all groups where user is a member."""
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = GroupListSerializer(page, many=True, context={'request': request})
            return self.get_paginated_response(serializer.data)

        serializer = GroupListSerializer(queryset, many=True, context={'request': request})
        return Response(serializer.data)

    @extend_schema(request=GroupCreateSerializer, responses={201: GroupSerializer}, tags=['groups'])
    def create(self, request):
        """Create a new group owned by the current user."""
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = create_group(
                name=serializer.validated_data['name'],
                owner=request.user,
                description=serializer.validated_data.get('description', ''),
            )
        except ValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except ConflictError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        group = get_group_by_id(group_id=group.id)
        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: GroupSerializer}, tags=['groups'])
    def retrieve(self, request, pk=None):
        """Get a group with its members."""
        try:
            group = get_group_by_id(group_id=pk)
        except NotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        # 403 rather than 404 for non-members
        self.check_object_permissions(request, group)

        serializer = GroupSerializer(group, context={'request': request})
        return Response(serializer.data)

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action == 'retrieve':
            return [IsAuthenticated(), IsGroupMember()]
        return [IsAuthenticated()]

    @extend_schema(request=GroupUpdateSerializer, responses={200: GroupSerializer}, tags=['groups'])
    def partial_update(self, request, pk=None):
        """Rename a group and/or change its description."""
        serializer = GroupUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            update_group(
                group_id=pk,
                user=request.user,
                name=serializer.validated_data.get('name'),
                description=serializer.validated_data.get('description'),
            )
        except NotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        group = get_group_by_id(group_id=pk)
        return Response(GroupSerializer(group, context={'request': request}).data)

    @extend_schema(request=JoinGroupSerializer, responses={201: GroupSerializer}, tags=['groups'])
    @action(detail=False, methods=['post'])
    def join(self, request):
        """Join a group using its join code."""
        serializer = JoinGroupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership = join_group(
                join_code=serializer.validated_data['join_code'].strip().lower(),
                user=request.user
            )
        except NotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except AlreadyMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        group = get_group_by_id(group_id=membership.group_id)
        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: LeaveGroupSerializer}, tags=['groups'])
    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave a group; ownership moves on or the group is deleted."""
        try:
            result = leave_group(group_id=pk, user=request.user)
        except NotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        new_owner = UserMinimalSerializer(result.new_owner).data if result.new_owner else None
        return Response({
            'message': 'Successfully left the group',
            'group_deleted': result.group_deleted,
            'new_owner': new_owner,
        })

    @extend_schema(responses={200: GroupMemberSerializer(many=True)}, tags=['groups'])
    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get all members of the group."""
        try:
            memberships = get_group_members(group_id=pk)
        except NotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        if not memberships.filter(user=request.user).exists():
            return Response(
                {'error': 'You must be a member of this group.'},
                status=status.HTTP_403_FORBIDDEN
            )

        serializer = GroupMemberSerializer(memberships, many=True)
        return Response(serializer.data)

    @extend_schema(
        parameters=[OpenApiParameter('limit', int, description='Maximum number of entries')],
        responses={200: ActivityEntrySerializer(many=True)},
        tags=['groups'],
    )
    @action(detail=True, methods=['get'])
    def activity(self, request, pk=None):
        """Get the group's activity feed, newest first."""
        limit = request.query_params.get('limit')
        if limit is not None:
            if not limit.isdigit() or int(limit) < 1:
                return Response(
                    {'error': 'limit must be a positive integer'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            limit = int(limit)

        try:
            entries = get_group_activity(group_id=pk, user=request.user, limit=limit)
        except NotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        serializer = ActivityEntrySerializer(entries, many=True)
        return Response(serializer.data)

    @extend_schema(
        request=ReminderRequestSerializer,
        responses={200: ReminderResultSerializer},
        tags=['groups'],
    )
    @action(detail=True, methods=['post'])
    def remind(self, request, pk=None):
        """Send a debt reminder to a member (at most once per cooldown)."""
        serializer = ReminderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = try_send_reminder(
                group_id=pk,
                sender=request.user,
                debtor_id=serializer.validated_data['debtor_id'],
                amounts_owed=serializer.validated_data['amounts_owed'],
            )
        except NotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except CooldownError as e:
            headers = {}
            if e.retry_after is not None:
                headers['Retry-After'] = str(int(e.retry_after.total_seconds()) + 1)
            return Response(
                {'error': str(e)},
                status=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=headers
            )
        except (ValidationError, NoDeviceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except NotificationDeliveryError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        return Response(ReminderResultSerializer(result).data)
