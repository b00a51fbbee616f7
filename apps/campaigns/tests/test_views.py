from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.campaigns.models import Campaign


class CampaignApiTest(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username='marketer', password='testpass123')
        self.client.force_authenticate(user=self.user)
        self.parent = Campaign.objects.create(
            name='Summer Launch', platform='multi', campaign_type='campaign', tracking_code='SUMMER',
        )

    def create(self, **overrides):
        data = {
            'name': 'Reel #1',
            'platform': 'instagram',
            'campaign_type': 'reel',
            'cost': '250.00',
        }
        data.update(overrides)
        return self.client.post(reverse('campaign-list'), data, format='json')

    def test_create_generates_tracking_code(self):
        response = self.create(parent_id=self.parent.id)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        code = response.data['tracking_code']
        self.assertTrue(code.startswith('INS_REEL__1_'))
        self.assertEqual(response.data['tracking_url'], f'https://shop.example.com?utm_campaign={code}')
        self.assertEqual(response.data['parent_id'], self.parent.id)
        self.assertEqual(Decimal(response.data['cost']), Decimal('250.00'))

    def test_create_with_duplicate_code_conflicts(self):
        response = self.create(tracking_code='SUMMER')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('error', response.data)

    def test_create_with_unknown_parent(self):
        response = self.create(parent_id=99999)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_rejects_bad_platform(self):
        response = self.create(platform='myspace')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        self.create(parent_id=self.parent.id, tracking_code='REEL1')
        self.create(platform='tiktok', campaign_type='video', tracking_code='TT1', is_active=False)

        response = self.client.get(reverse('campaign-list'), {'platform': 'tiktok'})
        self.assertEqual([c['tracking_code'] for c in response.data], ['TT1'])

        response = self.client.get(reverse('campaign-list'), {'top_level': 'true', 'is_active': 'true'})
        self.assertEqual([c['tracking_code'] for c in response.data], ['SUMMER'])

    def test_retrieve_unknown(self):
        response = self.client.get(reverse('campaign-detail', args=[99999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_rejects_cycle(self):
        child = self.create(parent_id=self.parent.id, tracking_code='CHILD').data
        url = reverse('campaign-detail', args=[self.parent.id])

        response = self.client.patch(url, {'parent_id': child['id']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {'parent_id': self.parent.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.parent.refresh_from_db()
        self.assertIsNone(self.parent.parent_id)

    def test_update_cost(self):
        url = reverse('campaign-detail', args=[self.parent.id])
        response = self.client.patch(url, {'cost': '99.50', 'name': 'Summer Launch 2'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.parent.refresh_from_db()
        self.assertEqual(self.parent.cost, Decimal('99.50'))
        self.assertEqual(self.parent.name, 'Summer Launch 2')

    def test_activate_and_deactivate(self):
        response = self.client.post(reverse('campaign-deactivate', args=[self.parent.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

        response = self.client.post(reverse('campaign-activate', args=[self.parent.id]))
        self.assertTrue(response.data['is_active'])

    def test_children(self):
        self.create(parent_id=self.parent.id, tracking_code='B')
        self.create(parent_id=self.parent.id, tracking_code='A')

        response = self.client.get(reverse('campaign-children', args=[self.parent.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(c['tracking_code'] for c in response.data), ['A', 'B'])

    def test_delete(self):
        url = reverse('campaign-detail', args=[self.parent.id])
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('campaign-list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class TokenAuthTest(APITestCase):
    def setUp(self):
        get_user_model().objects.create_user(username='marketer', password='testpass123')

    def test_obtain_token_and_call_api(self):
        response = self.client.post(
            reverse('token_obtain_pair'),
            {'username': 'marketer', 'password': 'testpass123'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        self.assertEqual(self.client.get(reverse('campaign-list')).status_code, status.HTTP_200_OK)

    def test_wrong_password(self):
        response = self.client.post(
            reverse('token_obtain_pair'),
            {'username': 'marketer', 'password': 'nope'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
