from django.db import models
import uuid


class ActivityType(models.TextChoices):
    CREATE_GROUP = 'createGroup', 'Group created'
    JOIN_GROUP = 'joinGroup', 'Member joined'
    LEAVE_GROUP = 'leaveGroup', 'Member left'
    CHANGE_OWNER = 'changeOwner', 'Ownership changed'
    CHANGE_GROUP_NAME = 'changeGroupName', 'Group renamed'
    CHANGE_GROUP_IMAGE = 'changeGroupImage', 'Group image changed'
    CHANGE_GROUP_DESCRIPTION = 'changeGroupDescription', 'Group description changed'
    ADD_EXPENSE = 'addExpense', 'Expense added'
    EDIT_EXPENSE = 'editExpense', 'Expense edited'
    DELETE_EXPENSE = 'deleteExpense', 'Expense deleted'
    REMINDER = 'reminder', 'Debt reminder'


class ActivityEntry(models.Model):
    """Immutable, human-readable record of a state-changing group event."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='activity')
    type = models.CharField(max_length=32, choices=ActivityType.choices)
    author = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='activity_entries')
    content = models.TextField()
    date = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity_entries'
        indexes = [
            models.Index(fields=['group', '-date'], name='activity_en_group_i_5d0b7c_idx'),
        ]
        ordering = ['-date']
        verbose_name_plural = 'activity entries'

    def __str__(self):
        return f"[{self.type}] {self.content}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Activity entries are append-only")
        super().save(*args, **kwargs)
