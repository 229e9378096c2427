import uuid

import pytest
from django.urls import reverse
from rest_framework import status

from apps.items.models import ItemStatus, ItemType
from apps.points.models import PointsLedgerEntry
from apps.swaps.models import Swap, SwapStatus, SwapType
from apps.swaps.services import request_swap


@pytest.fixture
def pending_swap(user, other_user, make_item):
    """Bob (other_user) offers his sweater for Alice's jacket."""
    wanted = make_item(user, title='Alice jacket')
    offered = make_item(other_user, title='Bob sweater')
    return request_swap(
        requester=other_user,
        request_item_id=wanted.pk,
        type=SwapType.SWAP,
        offered_item_id=offered.pk,
    )


# =============================================================================
# Request Tests
# =============================================================================

@pytest.mark.django_db
class TestSwapCreate:
    """Tests for POST /api/swaps/"""

    def test_request_item_swap(self, other_client, user, other_user, make_item):
        wanted = make_item(user)
        offered = make_item(other_user, title='Bob sweater')

        response = other_client.post(reverse('swaps:swap-list'), {
            'request_item_id': str(wanted.id),
            'type': 'swap',
            'offered_item_id': str(offered.id),
            'notes': 'Happy to meet downtown',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == SwapStatus.PENDING
        assert response.data['request_item']['id'] == str(wanted.id)
        assert response.data['offered_item']['id'] == str(offered.id)
        assert response.data['request_item_owner']['display_name'] == 'Alice'

    def test_request_points_swap(self, authenticated_client, user, other_user, make_item, give_points):
        give_points(user, 100)
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)

        response = authenticated_client.post(reverse('swaps:swap-list'), {
            'request_item_id': str(item.id),
            'type': 'points',
            'points_used': 40,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['points_used'] == 40
        assert response.data['offered_item'] is None

    def test_payload_must_match_type(self, authenticated_client, other_user, make_item):
        item = make_item(other_user)

        response = authenticated_client.post(reverse('swaps:swap-list'), {
            'request_item_id': str(item.id),
            'type': 'swap',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'offered_item_id' in response.data

    def test_request_own_item_forbidden(self, authenticated_client, user, make_item):
        wanted = make_item(user)
        offered = make_item(user, title='Also mine')

        response = authenticated_client.post(reverse('swaps:swap-list'), {
            'request_item_id': str(wanted.id),
            'type': 'swap',
            'offered_item_id': str(offered.id),
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_insufficient_points(self, authenticated_client, other_user, make_item):
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)

        response = authenticated_client.post(reverse('swaps:swap-list'), {
            'request_item_id': str(item.id),
            'type': 'points',
            'points_used': 40,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_funds'

    def test_unavailable_item_conflict(self, authenticated_client, other_user, make_item, give_points, user):
        give_points(user, 100)
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40,
                         status=ItemStatus.RESERVED)

        response = authenticated_client.post(reverse('swaps:swap-list'), {
            'request_item_id': str(item.id),
            'type': 'points',
            'points_used': 40,
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'item_unavailable'

    def test_requires_auth(self, api_client):
        response = api_client.post(reverse('swaps:swap-list'), {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Listing / Detail Tests
# =============================================================================

@pytest.mark.django_db
class TestSwapRead:
    """Tests for GET /api/swaps/ and GET /api/swaps/{id}/"""

    def test_list_own_swaps(self, authenticated_client, pending_swap):
        response = authenticated_client.get(reverse('swaps:swap-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(pending_swap.id)

    def test_list_status_filter(self, authenticated_client, pending_swap):
        response = authenticated_client.get(reverse('swaps:swap-list'), {'status': 'completed'})

        assert response.data['count'] == 0

    def test_detail_for_party(self, other_client, pending_swap):
        response = other_client.get(reverse('swaps:swap-detail', args=[pending_swap.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['type'] == SwapType.SWAP

    def test_detail_hidden_from_strangers(self, make_client, third_user, pending_swap):
        client = make_client(third_user)

        response = client.get(reverse('swaps:swap-detail', args=[pending_swap.id]))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_detail_visible_to_admin(self, admin_client, pending_swap):
        response = admin_client.get(reverse('swaps:swap-detail', args=[pending_swap.id]))

        assert response.status_code == status.HTTP_200_OK

    def test_detail_missing(self, authenticated_client):
        response = authenticated_client.get(reverse('swaps:swap-detail', args=[uuid.uuid4()]))

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Transition Tests
# =============================================================================

@pytest.mark.django_db
class TestSwapTransitions:
    """Tests for accept, reject and complete."""

    def test_accept(self, authenticated_client, pending_swap):
        response = authenticated_client.post(
            reverse('swaps:swap-accept', args=[pending_swap.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == SwapStatus.ACCEPTED
        assert response.data['request_item']['status'] == ItemStatus.RESERVED
        assert response.data['offered_item']['status'] == ItemStatus.RESERVED

    def test_accept_by_stranger(self, make_client, third_user, pending_swap):
        client = make_client(third_user)

        response = client.post(reverse('swaps:swap-accept', args=[pending_swap.id]))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reject(self, authenticated_client, pending_swap):
        response = authenticated_client.post(
            reverse('swaps:swap-reject', args=[pending_swap.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == SwapStatus.REJECTED
        assert response.data['request_item']['status'] == ItemStatus.LISTED

    def test_complete_after_accept(self, authenticated_client, other_client, pending_swap):
        authenticated_client.post(reverse('swaps:swap-accept', args=[pending_swap.id]))

        response = other_client.post(
            reverse('swaps:swap-complete', args=[pending_swap.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == SwapStatus.COMPLETED
        assert response.data['completed_at'] is not None

    def test_complete_pending_conflict(self, authenticated_client, pending_swap):
        response = authenticated_client.post(
            reverse('swaps:swap-complete', args=[pending_swap.id])
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'invalid_transition'

    def test_points_swap_round_trip(self, authenticated_client, other_client, user,
                                    other_user, make_item, give_points):
        give_points(user, 100)
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)
        created = authenticated_client.post(reverse('swaps:swap-list'), {
            'request_item_id': str(item.id),
            'type': 'points',
            'points_used': 40,
        }, format='json')
        swap_id = created.data['id']

        other_client.post(reverse('swaps:swap-accept', args=[swap_id]))
        authenticated_client.post(reverse('swaps:swap-complete', args=[swap_id]))

        user.refresh_from_db()
        other_user.refresh_from_db()
        assert Swap.objects.get(id=swap_id).status == SwapStatus.COMPLETED
        assert user.points == 60
        assert other_user.points == 40
        assert PointsLedgerEntry.objects.filter(swap_id=swap_id).count() == 2

    def test_accept_insufficient_funds(self, authenticated_client, other_client, user,
                                       other_user, make_item, give_points):
        give_points(user, 40)
        item = make_item(other_user, type=ItemType.POINTS, point_cost=40)
        swap = request_swap(
            requester=user, request_item_id=item.pk, type=SwapType.POINTS, points_used=40,
        )
        # Spend everything before the owner accepts
        other_item = make_item(other_user, title='Other boots', type=ItemType.POINTS,
                               point_cost=40)
        authenticated_client.post(reverse('points:redeem', args=[other_item.id]),
                                  {'points_used': 40})

        response = other_client.post(reverse('swaps:swap-accept', args=[swap.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_funds'
        swap.refresh_from_db()
        assert swap.status == SwapStatus.PENDING
