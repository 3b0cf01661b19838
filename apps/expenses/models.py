from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class SplitType(models.TextChoices):
    EQUAL = 'equal', 'Equal'
    SHARES = 'shares', 'Shares'
    AMOUNTS = 'amounts', 'Amounts'


class Expense(models.Model):
    """Expense paid by one member and split among participants of a group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    payer = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='paid_expenses'
    )

    # Financial details
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3)

    label = models.CharField(max_length=200)
    type = models.CharField(max_length=50, default='expense')
    split_type = models.CharField(
        max_length=10,
        choices=SplitType.choices,
        default=SplitType.EQUAL
    )
    date = models.DateTimeField()
    image = models.CharField(max_length=255, blank=True, null=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['group', 'created_at'], name='expenses_group_i_7a4c21_idx'),
            models.Index(fields=['payer', 'date'], name='expenses_payer_i_c93b5e_idx'),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.label} - {self.amount} {self.currency}"


class ExpenseSplit(models.Model):
    """
    Participation of one user in an expense.

    split_value is NULL for equal splits, whose share is derived from the
    expense amount and the participant count.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='splits'
    )
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expense_splits'
    )
    split_value = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        null=True,
        blank=True
    )

    class Meta:
        db_table = 'expense_splits'
        constraints = [
            models.UniqueConstraint(fields=['expense', 'user'], name='unique_expense_split'),
        ]

    def __str__(self):
        return f"{self.user.username} in {self.expense.label}"
