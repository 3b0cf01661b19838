from rest_framework import serializers
from .models import Expense, SplitType
from apps.accounts.serializers import UserMinimalSerializer


class ParticipantSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    username = serializers.CharField(read_only=True)


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Expense with its resolved split.

    Expects an expense enriched by the expense services (split_values and
    participants attached).
    """

    payer = UserMinimalSerializer(read_only=True)
    split_values = serializers.SerializerMethodField()
    participants = ParticipantSerializer(many=True, read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'group',
            'payer',
            'amount',
            'currency',
            'label',
            'type',
            'split_type',
            'date',
            'image',
            'split_values',
            'participants',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_split_values(self, obj) -> dict:
        return {str(user_id): str(value) for user_id, value in obj.split_values.items()}


class ExpenseCreateSerializer(serializers.Serializer):
    """Input of POST /api/groups/{group_id}/expenses/."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(max_length=3)
    label = serializers.CharField(max_length=200)
    type = serializers.CharField(max_length=50, required=False, default='expense')
    split_type = serializers.ChoiceField(choices=SplitType.choices)
    date = serializers.DateTimeField()
    participant_ids = serializers.ListField(child=serializers.UUIDField())
    provided_values = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=4),
        required=False
    )
    payer_id = serializers.UUIDField(required=False)


class ExpenseUpdateSerializer(serializers.Serializer):
    """Input of PATCH; every field is optional."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    currency = serializers.CharField(max_length=3, required=False)
    label = serializers.CharField(max_length=200, required=False)
    type = serializers.CharField(max_length=50, required=False)
    split_type = serializers.ChoiceField(choices=SplitType.choices, required=False)
    date = serializers.DateTimeField(required=False)
    participant_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    provided_values = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=4),
        required=False
    )
