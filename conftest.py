import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.groups.services import create_group, join_group
from apps.notifications import backends


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def make_user(db):
    """Factory creating users named after their username."""
    def _make_user(username, **extra_fields):
        return User.objects.create_user(
            email=f'{username}@example.com',
            username=username,
            password='TestPass123!',
            **extra_fields
        )
    return _make_user


@pytest.fixture
def client_for():
    """Factory returning an API client authenticated as the given user."""
    def _client_for(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client_for


@pytest.fixture
def alice(make_user):
    return make_user('alice', notification_token='device-alice')


@pytest.fixture
def bob(make_user):
    return make_user('bob', notification_token='device-bob')


@pytest.fixture
def carol(make_user):
    return make_user('carol')


@pytest.fixture
def outsider(make_user):
    """User who is not in any group."""
    return make_user('outsider')


@pytest.fixture(autouse=True)
def outbox():
    """Notifications accepted by the locmem backend during the test."""
    backends.outbox.clear()
    yield backends.outbox
    backends.outbox.clear()


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    return settings.MEDIA_ROOT


@pytest.fixture
def trip(alice):
    """Group 'Trip' owned by alice, created through the service layer."""
    return create_group(name='Trip', owner=alice, description='Summer trip')


@pytest.fixture
def trip_with_bob(trip, bob):
    """Trip joined by bob after alice created it."""
    join_group(join_code=trip.join_code, user=bob)
    return trip
