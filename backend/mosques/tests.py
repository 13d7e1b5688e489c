from unittest.mock import MagicMock, patch

import requests
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import GeocodingError
from core.testing import make_user
from user.models import Role
from .models import Mosque
from .services import GeoService, GeocodingService


def make_mosque(imam, **fields):
    defaults = {
        'name': 'Masjid Al-Noor',
        'street': '100 Main Street',
        'city': 'Chicago',
        'state': 'IL',
        'zip_code': '60601',
        'status': Mosque.Status.APPROVED,
    }
    defaults.update(fields)
    return Mosque.objects.create(imam=imam, **defaults)


class MosqueModelTests(TestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM)

    def test_geohash_follows_coordinates(self):
        mosque = make_mosque(self.imam, latitude=41.8781, longitude=-87.6298)
        self.assertEqual(mosque.geohash, GeoService.encode_geohash(41.8781, -87.6298, 9))

        mosque.latitude = mosque.longitude = None
        mosque.save()
        self.assertEqual(mosque.geohash, '')

    def test_invalid_coordinates(self):
        """Out of range or half-specified coordinates raise a ValueError during save."""
        with self.assertRaises(ValueError):
            make_mosque(self.imam, latitude=100.0, longitude=10.0)
        with self.assertRaises(ValueError):
            make_mosque(self.imam, latitude=10.0)

    def test_full_address(self):
        mosque = make_mosque(self.imam)
        self.assertEqual(mosque.full_address, '100 Main Street, Chicago, IL 60601')


class GeoServiceTests(TestCase):
    def setUp(self):
        imam = make_user('imam@example.com', Role.IMAM)
        self.center = make_mosque(imam, name='Center', latitude=0.0, longitude=0.0)
        # ~1km east
        self.nearby = make_mosque(imam, name='Nearby', latitude=0.0, longitude=0.009)
        # ~111km east
        self.far = make_mosque(imam, name='Far', latitude=0.0, longitude=1.0)

    def test_haversine(self):
        distance = GeoService.haversine_m(20.0, 10.0, 20.01, 10.0)
        self.assertGreater(distance, 1000)
        self.assertLess(distance, 1200)

    def test_find_nearby_sorted_by_distance(self):
        results = GeoService.find_nearby(Mosque.objects.all(), 0.0, 0.0, 2000)
        self.assertEqual([m.name for m in results], ['Center', 'Nearby'])
        self.assertEqual(results[0].distance_meters, 0.0)

    def test_find_in_viewport(self):
        results = GeoService.find_in_viewport(Mosque.objects.all(), 0.5, -0.1, 0.5, -0.1)
        self.assertIn(self.center, results)
        self.assertIn(self.nearby, results)
        self.assertNotIn(self.far, results)

    def test_viewport_across_antimeridian(self):
        imam = make_user('pacific@example.com', Role.IMAM)
        fiji = make_mosque(imam, name='Suva', latitude=-18.1, longitude=178.4)
        results = GeoService.find_in_viewport(Mosque.objects.all(), -10, -25, -170, 170)
        self.assertEqual(list(results), [fiji])

    def test_clusters_merge_at_low_zoom(self):
        bbox = (1.0, -1.0, 2.0, -1.0)
        low = GeoService.get_cluster_aggregates(Mosque.objects.all(), bbox, zoom=2)
        self.assertEqual(sum(c['count'] for c in low), 3)
        self.assertLess(len(low), 3)

        high = GeoService.get_cluster_aggregates(Mosque.objects.all(), bbox, zoom=18)
        self.assertEqual(len(high), 3)


@override_settings(GOOGLE_MAPS_API_KEY='test-key')
class GeocodingServiceTests(TestCase):
    def _response(self, payload):
        response = MagicMock()
        response.json.return_value = payload
        response.raise_for_status.return_value = None
        return response

    @patch('mosques.services.requests.get')
    def test_returns_first_result_verbatim(self, mock_get):
        mock_get.return_value = self._response({
            'status': 'OK',
            'results': [{'geometry': {'location': {'lat': 41.87811, 'lng': -87.62979}}}],
        })
        self.assertEqual(GeocodingService().geocode('Chicago'), (41.87811, -87.62979))
        self.assertEqual(mock_get.call_args.kwargs['params']['key'], 'test-key')

    @patch('mosques.services.requests.get')
    def test_zero_results(self, mock_get):
        mock_get.return_value = self._response({'status': 'ZERO_RESULTS', 'results': []})
        self.assertIsNone(GeocodingService().geocode('nowhere'))

    @patch('mosques.services.requests.get')
    def test_provider_error_raises(self, mock_get):
        mock_get.return_value = self._response({'status': 'REQUEST_DENIED'})
        with self.assertRaises(GeocodingError):
            GeocodingService().geocode('Chicago')

    @patch('mosques.services.requests.get', side_effect=requests.ConnectionError)
    def test_transport_error_raises(self, mock_get):
        with self.assertRaises(GeocodingError):
            GeocodingService().geocode('Chicago')

    @override_settings(GOOGLE_MAPS_API_KEY='')
    @patch('mosques.services.requests.get')
    def test_skipped_without_key(self, mock_get):
        self.assertIsNone(GeocodingService().geocode('Chicago'))
        mock_get.assert_not_called()


class MosqueAPITests(APITestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.other_imam = make_user('other@example.com', Role.IMAM)
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.member = make_user('member@example.com', Role.USER)
        self.approved = make_mosque(
            self.imam, name='Approved Masjid', latitude=40.0, longitude=30.0,
            services=['Daily Prayers', 'Library'],
        )
        self.pending = make_mosque(self.imam, name='Pending Masjid', status=Mosque.Status.PENDING)
        self.list_url = reverse('mosques:mosque-list')

    def test_public_list_only_approved(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual([m['name'] for m in response.data['data']], ['Approved Masjid'])
        self.assertEqual(response.data['pagination'], {'total': 1, 'page': 1, 'limit': 10, 'pages': 1})

    def test_admin_list_sees_all_and_filters_status(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.list_url)
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.get(self.list_url, {'status': 'pending'})
        self.assertEqual([m['name'] for m in response.data['data']], ['Pending Masjid'])

        # unknown status values are ignored
        response = self.client.get(self.list_url, {'status': 'bogus'})
        self.assertEqual(response.data['pagination']['total'], 2)

    def test_list_filters(self):
        response = self.client.get(self.list_url, {'services': 'Library,Food Bank'})
        self.assertEqual(len(response.data['data']), 1)
        response = self.client.get(self.list_url, {'services': 'Food Bank'})
        self.assertEqual(len(response.data['data']), 0)
        response = self.client.get(self.list_url, {'city': 'chic', 'name': 'approved'})
        self.assertEqual(len(response.data['data']), 1)

    def test_pending_detail_hidden_from_public(self):
        url = reverse('mosques:mosque-detail', kwargs={'pk': self.pending.id})
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.imam)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

    def test_create_requires_imam(self):
        payload = {
            'name': 'New Masjid',
            'street': '12 Oak Avenue',
            'city': 'Austin',
            'state': 'TX',
            'zip_code': '73301',
        }
        self.assertEqual(self.client.post(self.list_url, payload).status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.client.post(self.list_url, payload).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.imam)
        response = self.client.post(self.list_url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['status'], 'pending')
        self.assertFalse(response.data['data']['verified'])

    def test_create_validation(self):
        self.client.force_authenticate(user=self.imam)
        response = self.client.post(self.list_url, {
            'name': 'X',
            'street': '1 A',
            'city': 'Austin',
            'state': 'TX',
            'zip_code': '123',
            'email': 'not-an-email',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        for field in ('name', 'street', 'zip_code', 'email'):
            self.assertIn(field, response.data['details'])

    @override_settings(GOOGLE_MAPS_API_KEY='test-key')
    @patch('mosques.views.GeocodingService.geocode', return_value=(30.26715, -97.74306))
    def test_create_geocodes_address(self, mock_geocode):
        self.client.force_authenticate(user=self.imam)
        response = self.client.post(self.list_url, {
            'name': 'Geo Masjid',
            'street': '12 Oak Avenue',
            'city': 'Austin',
            'state': 'TX',
            'zip_code': '73301',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        mock_geocode.assert_called_once_with('12 Oak Avenue, Austin, TX 73301')
        self.assertEqual(response.data['data']['latitude'], 30.26715)
        self.assertEqual(response.data['data']['longitude'], -97.74306)

    def test_update_and_delete_restricted_to_owner(self):
        url = reverse('mosques:mosque-detail', kwargs={'pk': self.approved.id})
        self.client.force_authenticate(user=self.other_imam)
        self.assertEqual(self.client.patch(url, {'description': 'x'}).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.imam)
        response = self.client.patch(url, {'description': 'Updated', 'status': 'rejected'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.approved.refresh_from_db()
        self.assertEqual(self.approved.description, 'Updated')
        # status is only changed through moderation
        self.assertEqual(self.approved.status, Mosque.Status.APPROVED)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_200_OK)
        self.assertFalse(Mosque.objects.filter(id=self.approved.id).exists())

    def test_nearby_endpoint(self):
        response = self.client.get(reverse('mosques:mosque-nearby'), {
            'latitude': 40.0, 'longitude': 30.0, 'radius': 1000,
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['id'], str(self.approved.id))
        self.assertIn('distance_meters', response.data['results'][0])

    def test_nearby_invalid_parameters(self):
        response = self.client.get(reverse('mosques:mosque-nearby'), {'latitude': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_viewport_and_clusters(self):
        params = {'north': 41.0, 'south': 39.0, 'east': 31.0, 'west': 29.0}
        response = self.client.get(reverse('mosques:mosque-viewport'), params)
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(reverse('mosques:mosque-clusters'), {**params, 'zoom': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['results'][0]['count'], 1)

    def test_imam_mosques(self):
        url = reverse('mosques:imam-mosques')
        self.client.force_authenticate(user=self.imam)
        response = self.client.get(url)
        self.assertEqual(len(response.data['data']), 2)

        self.client.force_authenticate(user=self.other_imam)
        self.assertEqual(len(self.client.get(url).data['data']), 0)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(len(self.client.get(url).data['data']), 2)


class PrayerTimesAPITests(APITestCase):
    @patch('mosques.services.requests.get')
    def test_forwards_to_calendar_api(self, mock_get):
        mock_get.return_value.json.return_value = {'code': 200, 'data': []}
        mock_get.return_value.raise_for_status.return_value = None
        response = self.client.get(reverse('mosques:prayer-times'), {'month': 3, 'year': 2025})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True, 'data': {'code': 200, 'data': []}})
        self.assertTrue(mock_get.call_args.args[0].endswith('/2025/3'))
        self.assertEqual(mock_get.call_args.kwargs['params']['method'], '2')

    @patch('mosques.services.requests.get', side_effect=requests.Timeout)
    def test_upstream_failure(self, mock_get):
        response = self.client.get(reverse('mosques:prayer-times'))
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertFalse(response.data['success'])
