import uuid

import pytest
from django.urls import reverse
from rest_framework import status

from apps.items.models import ItemStatus, ItemType
from apps.points.models import LedgerReason, PointsLedgerEntry
from apps.points.services import create_entry


@pytest.mark.django_db
class TestBalance:
    """Tests for GET /api/points/balance/"""

    def test_balance_with_stats(self, authenticated_client, user, give_points):
        give_points(user, 120)
        create_entry(user_id=user.pk, delta=-20, reason=LedgerReason.MANUAL)

        response = authenticated_client.get(reverse('points:balance'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == 100
        assert response.data['total_earned'] == 120
        assert response.data['total_spent'] == 20
        assert response.data['total_transactions'] == 2

    def test_balance_requires_auth(self, api_client):
        response = api_client.get(reverse('points:balance'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestHistory:
    """Tests for GET /api/points/history/"""

    def test_history_newest_first(self, authenticated_client, user, give_points):
        give_points(user, 50)
        create_entry(
            user_id=user.pk, delta=-15, reason=LedgerReason.MANUAL,
            description='Correction',
        )

        response = authenticated_client.get(reverse('points:history'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        latest = response.data['results'][0]
        assert latest['delta'] == -15
        assert latest['previous_balance'] == 50
        assert latest['new_balance'] == 35
        assert latest['description'] == 'Correction'

    def test_history_excludes_other_users(self, authenticated_client, other_user, give_points):
        give_points(other_user, 50)

        response = authenticated_client.get(reverse('points:history'))

        assert response.data['count'] == 0


@pytest.mark.django_db
class TestRedeem:
    """Tests for POST /api/points/redeem/<item_id>/"""

    def test_redeem_success(self, authenticated_client, user, other_user, make_item, give_points):
        give_points(user, 100)
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)

        url = reverse('points:redeem', args=[item.id])
        response = authenticated_client.post(url, {'points_used': 40})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == 60
        assert response.data['item']['status'] == ItemStatus.REDEEMED

        item.refresh_from_db()
        assert item.status == ItemStatus.REDEEMED
        assert item.redeemed_by == user

        entry = PointsLedgerEntry.objects.get(user=user, reason=LedgerReason.REDEEM)
        assert entry.delta == -40
        assert entry.item == item

    def test_redeem_insufficient_points(self, authenticated_client, user, other_user, make_item):
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)

        url = reverse('points:redeem', args=[item.id])
        response = authenticated_client.post(url, {'points_used': 40})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_funds'
        item.refresh_from_db()
        assert item.status == ItemStatus.LISTED

    def test_redeem_wrong_amount(self, authenticated_client, user, other_user, make_item, give_points):
        give_points(user, 100)
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)

        url = reverse('points:redeem', args=[item.id])
        response = authenticated_client.post(url, {'points_used': 30})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['field'] == 'points_used'

    def test_redeem_own_item(self, authenticated_client, user, make_item, give_points):
        give_points(user, 100)
        item = make_item(user, type=ItemType.POINTS, point_cost=40)

        url = reverse('points:redeem', args=[item.id])
        response = authenticated_client.post(url, {'points_used': 40})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_redeem_missing_item(self, authenticated_client):
        url = reverse('points:redeem', args=[uuid.uuid4()])
        response = authenticated_client.post(url, {'points_used': 40})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_redeem_requires_points_used(self, authenticated_client, other_user, make_item):
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)

        url = reverse('points:redeem', args=[item.id])
        response = authenticated_client.post(url, {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
