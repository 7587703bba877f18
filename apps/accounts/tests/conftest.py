import pytest

from apps.accounts.models import User


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        name='Test User',
        phone='0201234567',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return a deactivated user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(client_for, user):
    """Return an API client authenticated as ``user`` with JWT."""
    return client_for(user)
