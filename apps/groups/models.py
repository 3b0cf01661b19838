# ==========================================
# apps/groups/models.py
# ==========================================

from django.conf import settings
from django.db import models
import uuid
import secrets
import string

JOIN_CODE_ALPHABET = string.ascii_lowercase + string.digits


def generate_join_code(length=None):
    """Random base-36 code members share to join a group."""
    length = length or settings.JOIN_CODE_LENGTH
    return ''.join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


class Group(models.Model):
    """Named collection of members sharing expenses, with exactly one owner."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    join_code = models.CharField(max_length=16, unique=True, db_index=True, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='owned_groups')
    image = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='groups_owner_i_8c1f0e_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def has_member(self, user):
        return self.memberships.filter(user=user).exists()

    def is_owner(self, user):
        return self.owner_id == user.id


class GroupMembership(models.Model):
    """
    User membership in a group.

    Carries the debt reminder throttle state of the member.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='group_memberships')
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='memberships')
    joined_at = models.DateTimeField(auto_now_add=True)
    last_notification_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'group_memberships'
        constraints = [
            models.UniqueConstraint(fields=['group', 'user'], name='unique_group_membership'),
        ]
        indexes = [
            models.Index(fields=['user', 'joined_at'], name='group_membe_user_id_3e2d7a_idx'),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.username} in {self.group.name}"
