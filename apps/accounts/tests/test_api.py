import uuid

import pytest
from django.urls import reverse
from rest_framework import status

from apps.accounts.actors import SYSTEM_ADMIN, actor_for
from apps.accounts.models import User, UserRole
from apps.accounts.services import update_user, UserNotFoundError
from apps.common.exceptions import ForbiddenError


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new member."""
        url = reverse('users:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'display_name': 'New User',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['points'] == 0
        assert response.data['user']['role'] == UserRole.USER
        assert User.objects.filter(email='newuser@example.com').exists()

    def test_register_without_display_name(self, api_client):
        """Display name is optional."""
        url = reverse('users:register')
        data = {
            'email': 'minimal@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED

    def test_register_duplicate_email(self, api_client, user):
        """Cannot register with an existing email, whatever its case."""
        url = reverse('users:register')
        data = {
            'email': user.email.upper(),
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'registration_failed'
        assert response.data['field'] == 'email'

    def test_register_password_mismatch(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_register_weak_password(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'weak@example.com',
            'password': '123',
            'password_confirm': '123',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        url = reverse('users:login')
        data = {'email': user.email, 'password': 'TestPass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == user.email

    def test_login_wrong_password(self, api_client, user):
        url = reverse('users:login')
        data = {'email': user.email, 'password': 'WrongPassword123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'invalid_credentials'

    def test_login_nonexistent_user(self, api_client):
        url = reverse('users:login')
        data = {'email': 'nobody@example.com', 'password': 'SomePass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, user_inactive):
        """Deactivated accounts are refused."""
        url = reverse('users:login')
        data = {'email': user_inactive.email, 'password': 'TestPass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_updates_last_login(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.last_login is not None


# =============================================================================
# Profile Tests
# =============================================================================

@pytest.mark.django_db
class TestProfile:
    """Tests for GET /api/auth/user/ and PATCH /api/auth/user/update/"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['points'] == 0

    def test_get_current_user_unauthenticated(self, api_client):
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_display_name(self, authenticated_client, user):
        url = reverse('users:update-profile')
        response = authenticated_client.patch(url, {'display_name': 'Updated Name'})

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.display_name == 'Updated Name'

    def test_cannot_set_points_or_role(self, authenticated_client, user):
        """Points and role are read-only on the profile."""
        url = reverse('users:update-profile')
        authenticated_client.patch(url, {'points': 9999, 'role': 'admin'})

        user.refresh_from_db()
        assert user.points == 0
        assert user.role == UserRole.USER

    def test_get_user_by_id(self, authenticated_client, other_user):
        url = reverse('users:user-detail', args=[other_user.id])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['display_name'] == other_user.display_name
        assert 'email' not in response.data

    def test_get_user_by_id_not_found(self, authenticated_client):
        url = reverse('users:user-detail', args=[uuid.uuid4()])
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# User Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestUpdateUser:
    """Tests for the admin-only update_user service."""

    def test_admin_can_deactivate(self, admin_user, user):
        updated = update_user(user_id=user.pk, actor=actor_for(admin_user), is_active=False)

        assert updated.is_active is False

    def test_system_admin_can_promote(self, user):
        updated = update_user(user_id=user.pk, actor=SYSTEM_ADMIN, role=UserRole.ADMIN)

        assert updated.role == UserRole.ADMIN
        assert updated.is_admin is True

    def test_regular_user_forbidden(self, user, other_user):
        with pytest.raises(ForbiddenError):
            update_user(user_id=other_user.pk, actor=actor_for(user), is_active=False)

    def test_unknown_user(self, admin_user):
        with pytest.raises(UserNotFoundError):
            update_user(user_id=uuid.uuid4(), actor=actor_for(admin_user), is_active=False)


# =============================================================================
# User Model Tests
# =============================================================================

@pytest.mark.django_db
class TestUserModel:
    """Tests for User model methods."""

    def test_create_user_lowercases_email(self, db):
        user = User.objects.create_user(email='Model@Example.COM', password='TestPass123!')

        assert user.email == 'model@example.com'
        assert user.check_password('TestPass123!')
        assert user.points == 0

    def test_create_superuser_is_admin(self, db):
        user = User.objects.create_superuser(email='root@example.com', password='AdminPass123!')

        assert user.is_staff is True
        assert user.is_superuser is True
        assert user.is_admin is True

    def test_get_display_name(self, user):
        assert user.get_display_name() == 'Alice'

        user.display_name = ''
        assert user.get_display_name() == 'alice'

    def test_actor_variants(self, user, admin_user):
        """Actors expose the acting user, or nothing for the platform."""
        assert actor_for(user).is_admin is False
        assert actor_for(admin_user).record == admin_user
        assert SYSTEM_ADMIN.is_admin is True
        assert SYSTEM_ADMIN.record is None
        assert SYSTEM_ADMIN.user_id is None
