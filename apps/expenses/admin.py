from django.contrib import admin
from apps.expenses.models import Expense, ExpenseSplit


class ExpenseSplitInline(admin.TabularInline):
    """Inline admin for expense splits."""
    model = ExpenseSplit
    extra = 0
    fields = ['user', 'split_value']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Admin interface for Expenses."""

    list_display = ['label', 'group', 'payer', 'amount', 'currency', 'split_type', 'date']
    list_filter = ['split_type', 'currency', 'date']
    search_fields = ['label', 'group__name', 'payer__email', 'payer__username']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ExpenseSplitInline]
    date_hierarchy = 'date'
    ordering = ['-date']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('group', 'payer')
