import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.items.models import Item, ItemStatus, ItemType
from apps.points.models import LedgerReason
from apps.points.services import create_entry


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def make_client():
    """Return a factory building an API client authenticated as a user."""
    def _make(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _make


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        display_name='Alice',
    )


@pytest.fixture
def other_user(db):
    """Create and return another test user."""
    return User.objects.create_user(
        email='bob@example.com',
        password='OtherPass123!',
        display_name='Bob',
    )


@pytest.fixture
def third_user(db):
    """A user who is not party to anything by default."""
    return User.objects.create_user(
        email='carol@example.com',
        password='ThirdPass123!',
        display_name='Carol',
    )


@pytest.fixture
def admin_user(db):
    """Create and return a user with the admin role."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def authenticated_client(make_client, user):
    """Return an API client authenticated as ``user``."""
    return make_client(user)


@pytest.fixture
def other_client(make_client, other_user):
    """Return an API client authenticated as ``other_user``."""
    return make_client(other_user)


@pytest.fixture
def admin_client(make_client, admin_user):
    """Return an API client authenticated as ``admin_user``."""
    return make_client(admin_user)


@pytest.fixture
def make_item(db):
    """
    Return a factory for items.

    Items default to ``listed`` so they can be requested straight away;
    pass ``status=ItemStatus.PENDING`` for moderation tests.
    """
    def _make(uploader, *, type=ItemType.SWAP, point_cost=None,
              status=ItemStatus.LISTED, title='Denim jacket', **extra):
        fields = {
            'description': 'Barely worn, fits true to size.',
            'category': 'outerwear',
            'size': 'M',
            'condition': 'like-new',
        }
        fields.update(extra)
        return Item.objects.create(
            uploader=uploader,
            title=title,
            type=type,
            point_cost=point_cost,
            status=status,
            **fields,
        )
    return _make


@pytest.fixture
def give_points(db):
    """Return a helper that credits points through the ledger."""
    def _give(user, amount):
        create_entry(user_id=user.pk, delta=amount, reason=LedgerReason.MANUAL)
        user.refresh_from_db()
        return user
    return _give
