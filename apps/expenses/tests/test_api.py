import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.expenses.models import Expense, ExpenseSplit
from apps.groups.services import join_group


def list_url(group):
    return reverse('expenses:expense-list', kwargs={'group_id': group.id})


def detail_url(group, expense_id):
    return reverse('expenses:expense-detail', kwargs={'group_id': group.id, 'pk': expense_id})


def hotel_payload(alice, bob):
    return {
        'amount': '100.00',
        'currency': 'EUR',
        'label': 'Hotel',
        'split_type': 'shares',
        'date': '2024-07-14T12:30:00Z',
        'participant_ids': [str(alice.id), str(bob.id)],
        'provided_values': {str(alice.id): '60', str(bob.id): '40'},
    }


@pytest.mark.django_db
class TestExpenseCreate:
    """Tests for POST /api/groups/{group_id}/expenses/"""

    def test_create_expense(self, client_for, alice, bob, trip_with_bob):
        response = client_for(alice).post(list_url(trip_with_bob), hotel_payload(alice, bob), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['label'] == 'Hotel'
        assert response.data['type'] == 'expense'
        assert response.data['payer']['username'] == 'alice'
        assert response.data['split_values'] == {str(alice.id): '60.0000', str(bob.id): '40.0000'}
        assert {p['username'] for p in response.data['participants']} == {'alice', 'bob'}

    def test_create_equal_expense(self, client_for, alice, bob, trip_with_bob):
        data = hotel_payload(alice, bob)
        data['split_type'] = 'equal'
        del data['provided_values']

        response = client_for(bob).post(list_url(trip_with_bob), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert set(response.data['split_values'].values()) == {'50.00'}

    def test_create_shares_not_summing(self, client_for, alice, bob, trip_with_bob):
        data = hotel_payload(alice, bob)
        data['provided_values'][str(bob.id)] = '10'

        response = client_for(alice).post(list_url(trip_with_bob), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data
        assert not Expense.objects.exists()

    def test_create_non_positive_amount(self, client_for, alice, bob, trip_with_bob):
        data = hotel_payload(alice, bob)
        data['amount'] = '0'

        response = client_for(alice).post(list_url(trip_with_bob), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_participant_not_member(self, client_for, alice, outsider, trip):
        data = hotel_payload(alice, outsider)

        response = client_for(alice).post(list_url(trip), data, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_non_member(self, client_for, alice, outsider, trip):
        response = client_for(outsider).post(list_url(trip), hotel_payload(alice, outsider), format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_missing_group(self, client_for, alice, bob):
        url = reverse('expenses:expense-list', kwargs={'group_id': uuid4()})
        response = client_for(alice).post(url, hotel_payload(alice, bob), format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestExpenseReadUpdateDelete:

    @pytest.fixture
    def hotel_id(self, client_for, alice, bob, trip_with_bob):
        response = client_for(alice).post(list_url(trip_with_bob), hotel_payload(alice, bob), format='json')
        return response.data['id']

    def test_list(self, client_for, bob, trip_with_bob, hotel_id):
        response = client_for(bob).get(list_url(trip_with_bob))

        assert response.status_code == status.HTTP_200_OK
        assert [e['id'] for e in response.data] == [hotel_id]

    def test_retrieve(self, client_for, bob, trip_with_bob, hotel_id):
        response = client_for(bob).get(detail_url(trip_with_bob, hotel_id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '100.00'
        assert response.data['date'] == '2024-07-14T12:30:00Z'

    def test_retrieve_missing(self, client_for, bob, trip_with_bob):
        response = client_for(bob).get(detail_url(trip_with_bob, uuid4()))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_retrieve_non_member(self, client_for, outsider, trip_with_bob, hotel_id):
        response = client_for(outsider).get(detail_url(trip_with_bob, hotel_id))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_patch_replaces_split(self, client_for, alice, bob, carol, trip_with_bob, hotel_id):
        join_group(join_code=trip_with_bob.join_code, user=carol)

        data = {
            'participant_ids': [str(alice.id), str(bob.id), str(carol.id)],
            'provided_values': {str(alice.id): '50', str(bob.id): '25', str(carol.id): '25'},
        }
        response = client_for(bob).patch(detail_url(trip_with_bob, hotel_id), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert set(response.data['split_values']) == {str(alice.id), str(bob.id), str(carol.id)}
        assert ExpenseSplit.objects.filter(expense_id=hotel_id).count() == 3

    def test_patch_empty(self, client_for, alice, trip_with_bob, hotel_id):
        response = client_for(alice).patch(detail_url(trip_with_bob, hotel_id), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_delete(self, client_for, bob, trip_with_bob, hotel_id):
        response = client_for(bob).delete(detail_url(trip_with_bob, hotel_id))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Expense.objects.filter(id=hotel_id).exists()

    def test_delete_non_member(self, client_for, outsider, trip_with_bob, hotel_id):
        response = client_for(outsider).delete(detail_url(trip_with_bob, hotel_id))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Expense.objects.filter(id=hotel_id).exists()
