from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    ExpenseSerializer,
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
)

from apps.expenses.services import (
    add_expense,
    list_expenses,
    get_expense,
    update_expense,
    delete_expense,
    InvalidSplitError,
)
from apps.groups.exceptions import NotFoundError, NotMemberError, ValidationError


def _error_response(e):
    """Map a service error to its HTTP response."""
    if isinstance(e, NotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(e, NotMemberError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class ExpenseViewSet(viewsets.GenericViewSet):
    """
    Expenses of one group, nested under /api/groups/{group_id}/expenses/.

    Every action requires the user to be a member of the group.

    list: All expenses in insertion order
    create: Record an expense and its split
    retrieve: Get one expense
    partial_update: Update supplied fields; participant_ids replaces the split
    destroy: Delete an expense and its split
    """

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    @extend_schema(responses={200: ExpenseSerializer(many=True)}, tags=['expenses'])
    def list(self, request, group_id=None):
        try:
            expenses = list_expenses(group_id=group_id, user=request.user)
        except (NotFoundError, NotMemberError) as e:
            return _error_response(e)

        return Response(ExpenseSerializer(expenses, many=True).data)

    @extend_schema(request=ExpenseCreateSerializer, responses={201: ExpenseSerializer}, tags=['expenses'])
    def create(self, request, group_id=None):
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = add_expense(
                group_id=group_id,
                user=request.user,
                **serializer.validated_data
            )
        except (NotFoundError, NotMemberError, ValidationError, InvalidSplitError) as e:
            return _error_response(e)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ExpenseSerializer}, tags=['expenses'])
    def retrieve(self, request, group_id=None, pk=None):
        try:
            expense = get_expense(group_id=group_id, expense_id=pk, user=request.user)
        except (NotFoundError, NotMemberError) as e:
            return _error_response(e)

        return Response(ExpenseSerializer(expense).data)

    @extend_schema(request=ExpenseUpdateSerializer, responses={200: ExpenseSerializer}, tags=['expenses'])
    def partial_update(self, request, group_id=None, pk=None):
        serializer = ExpenseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = update_expense(
                group_id=group_id,
                expense_id=pk,
                user=request.user,
                **serializer.validated_data
            )
        except (NotFoundError, NotMemberError, ValidationError, InvalidSplitError) as e:
            return _error_response(e)

        return Response(ExpenseSerializer(expense).data)

    @extend_schema(responses={204: None}, tags=['expenses'])
    def destroy(self, request, group_id=None, pk=None):
        try:
            delete_expense(group_id=group_id, expense_id=pk, user=request.user)
        except (NotFoundError, NotMemberError) as e:
            return _error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)
