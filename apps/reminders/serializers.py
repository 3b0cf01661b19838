from rest_framework import serializers


class AmountOwedSerializer(serializers.Serializer):
    creditor = serializers.CharField(max_length=150)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class ReminderRequestSerializer(serializers.Serializer):
    """Input of POST /api/groups/{id}/remind/."""

    debtor_id = serializers.UUIDField()
    amounts_owed = AmountOwedSerializer(many=True, allow_empty=False)


class ReminderResultSerializer(serializers.Serializer):
    title = serializers.CharField(read_only=True)
    body = serializers.CharField(read_only=True)
    sent_at = serializers.DateTimeField(read_only=True)
