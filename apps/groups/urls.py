from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = SimpleRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/              - List user's groups
    # POST   /api/groups/              - Create group
    # GET    /api/groups/{id}/         - Get group details (member)
    # PATCH  /api/groups/{id}/         - Rename / describe group (member)

    # Custom group actions
    # POST   /api/groups/join/                 - Join with join code
    # POST   /api/groups/{id}/leave/           - Leave group
    # GET    /api/groups/{id}/members/         - List members
    # GET    /api/groups/{id}/activity/        - Activity feed, newest first
    # POST   /api/groups/{id}/remind/          - Send a debt reminder

    path('', include(router.urls)),
]
