"""
Tests for the smart link endpoints.
"""
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from catalog.models import Song
from smartlinks.models import SmartLink, SmartLinkClick, SmartLinkDestination

User = get_user_model()

LIST_URL = '/api/v1/smart-links/'


class SmartLinkAPITestCase(APITestCase):

    def setUp(self):
        self.admin_user = User.objects.create_user(username='admin', email='admin@test.com', password='test123')
        self.admin_user.profile.role = 'admin'
        self.admin_user.profile.save()
        self.other_user = User.objects.create_user(username='guest', email='guest@test.com', password='test123')

        self.song = Song.objects.create(title='Low Tide', catalog_number='00001')
        self.other_song = Song.objects.create(title='High Water', catalog_number='00002')

        self.smart_link = SmartLink.objects.create(song=self.song, slug='low-tide', title='Low Tide')
        self.spotify = SmartLinkDestination.objects.create(
            smart_link=self.smart_link, service_key='spotify', label='Spotify',
            url='https://open.spotify.com/track/abc', sort_order=1
        )
        SmartLinkDestination.objects.create(
            smart_link=self.smart_link, service_key='apple_music', label='Apple Music',
            url='https://music.apple.com/track/abc', sort_order=0
        )

        self.client = APIClient()
        self.client.force_authenticate(user=self.admin_user)


class SmartLinkAdminTest(SmartLinkAPITestCase):

    def test_create_with_destinations(self):
        response = self.client.post(LIST_URL, {
            'song': self.other_song.id,
            'slug': 'high-water',
            'title': 'High Water',
            'destinations': [
                {'service_key': 'spotify', 'label': 'Spotify', 'url': 'https://open.spotify.com/track/xyz'},
                {'service_key': 'youtube', 'label': 'YouTube', 'url': 'https://youtube.com/watch?v=1', 'sort_order': 1},
            ],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        smart_link = SmartLink.objects.get(slug='high-water')
        self.assertTrue(smart_link.is_active)
        self.assertEqual(list(smart_link.destinations.values_list('service_key', flat=True)), ['spotify', 'youtube'])

    def test_duplicate_slug_rejected(self):
        response = self.client.post(LIST_URL, {
            'song': self.other_song.id, 'slug': 'low-tide', 'title': 'Again',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('slug', response.data)

    def test_duplicate_service_rejected(self):
        response = self.client.post(LIST_URL, {
            'song': self.other_song.id,
            'slug': 'high-water',
            'title': 'High Water',
            'destinations': [
                {'service_key': 'spotify', 'label': 'Spotify', 'url': 'https://open.spotify.com/track/1'},
                {'service_key': 'spotify', 'label': 'Spotify 2', 'url': 'https://open.spotify.com/track/2'},
            ],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(SmartLink.objects.filter(slug='high-water').exists())

    def test_update_replaces_destinations(self):
        response = self.client.patch(f'{LIST_URL}{self.smart_link.id}/', {
            'title': 'Low Tide (Remix)',
            'destinations': [
                {'service_key': 'tidal', 'label': 'Tidal', 'url': 'https://tidal.com/track/1'},
            ],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.smart_link.refresh_from_db()
        self.assertEqual(self.smart_link.title, 'Low Tide (Remix)')
        self.assertEqual(list(self.smart_link.destinations.values_list('service_key', flat=True)), ['tidal'])

    def test_update_without_destinations_keeps_them(self):
        response = self.client.patch(f'{LIST_URL}{self.smart_link.id}/', {'is_active': False}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.smart_link.destinations.count(), 2)

    def test_filter_by_song(self):
        SmartLink.objects.create(song=self.other_song, slug='high-water', title='High Water')

        response = self.client.get(LIST_URL, {'song': self.song.id})

        self.assertEqual(response.data['count'], 1)
        result = response.data['results'][0]
        self.assertEqual(result['slug'], 'low-tide')
        self.assertEqual([d['service_key'] for d in result['destinations']], ['apple_music', 'spotify'])

    def test_analytics(self):
        SmartLinkClick.objects.create(smart_link=self.smart_link, service_key='spotify', user_agent='A')
        SmartLinkClick.objects.create(smart_link=self.smart_link, service_key='spotify', user_agent='B')

        response = self.client.get(f'{LIST_URL}{self.smart_link.id}/analytics/', {'range': '7d'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalClicks'], 2)
        self.assertEqual(response.data['clicksByService'], {'spotify': 2})

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=self.other_user)
        response = self.client.get(LIST_URL)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete(self):
        response = self.client.delete(f'{LIST_URL}{self.smart_link.id}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(SmartLinkDestination.objects.exists())


class PublicSmartLinkTest(SmartLinkAPITestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_lookup_by_slug(self):
        response = self.client.get('/api/v1/public/smart-links/low-tide/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Low Tide')
        destinations = response.data['destinations']
        self.assertEqual([d['service_key'] for d in destinations], ['apple_music', 'spotify'])
        self.assertEqual(destinations[1]['redirect_url'], f'/r/{self.smart_link.id}/spotify/')
        self.assertNotIn('url', destinations[0])

    def test_inactive_link_not_found(self):
        SmartLink.objects.filter(pk=self.smart_link.pk).update(is_active=False)

        response = self.client.get('/api/v1/public/smart-links/low-tide/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_slug(self):
        response = self.client.get('/api/v1/public/smart-links/nope/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_redirect_records_click(self):
        response = self.client.get(
            f'/r/{self.smart_link.id}/spotify/',
            HTTP_USER_AGENT='Mozilla/5.0',
            HTTP_REFERER='https://instagram.com/',
        )

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response['Location'], 'https://open.spotify.com/track/abc')
        click = SmartLinkClick.objects.get()
        self.assertEqual(click.smart_link, self.smart_link)
        self.assertEqual(click.service_key, 'spotify')
        self.assertEqual(click.user_agent, 'Mozilla/5.0')
        self.assertEqual(click.referrer, 'https://instagram.com/')

    def test_redirect_unknown_service(self):
        response = self.client.get(f'/r/{self.smart_link.id}/deezer/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(SmartLinkClick.objects.exists())

    def test_redirect_inactive_link(self):
        SmartLink.objects.filter(pk=self.smart_link.pk).update(is_active=False)

        response = self.client.get(f'/r/{self.smart_link.id}/spotify/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
