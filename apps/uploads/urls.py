from django.urls import path
from . import views

app_name = 'uploads'

urlpatterns = [
    # POST /api/uploads/profile/                                  - Profile image
    # POST /api/uploads/groups/{group_id}/                        - Group image
    # POST /api/uploads/groups/{group_id}/expenses/{expense_id}/  - Expense image
    path('profile/', views.profile_image, name='profile-image'),
    path('groups/<uuid:group_id>/', views.group_image, name='group-image'),
    path(
        'groups/<uuid:group_id>/expenses/<uuid:expense_id>/',
        views.expense_image,
        name='expense-image'
    ),
]
