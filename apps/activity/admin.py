from django.contrib import admin
from .models import ActivityEntry


@admin.register(ActivityEntry)
class ActivityEntryAdmin(admin.ModelAdmin):
    """Read-only admin: activity entries are append-only."""

    list_display = ['group', 'type', 'author', 'content', 'date']
    list_filter = ['type', 'date']
    search_fields = ['content', 'group__name', 'author__username']
    date_hierarchy = 'date'
    ordering = ['-date']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
