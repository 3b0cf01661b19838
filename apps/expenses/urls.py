from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'expenses'

# Mounted under /api/groups/<uuid:group_id>/expenses/
router = SimpleRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/groups/{group_id}/expenses/        - List expenses
    # POST   /api/groups/{group_id}/expenses/        - Add expense
    # GET    /api/groups/{group_id}/expenses/{id}/   - Get expense
    # PATCH  /api/groups/{group_id}/expenses/{id}/   - Update expense
    # DELETE /api/groups/{group_id}/expenses/{id}/   - Delete expense
    path('', include(router.urls)),
]
