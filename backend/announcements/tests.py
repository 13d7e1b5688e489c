from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from businesses.models import Business
from core.testing import make_user
from moderation.documents import ActivityLog
from user.models import Role
from .models import Announcement


def make_business(owner):
    return Business.objects.create(
        owner=owner,
        name='Noor Books',
        category=Business.Category.BOOKS,
        street='9 Library Lane',
        city='Paterson',
        state='NJ',
        zip_code='07501',
        verification_status=Business.VerificationStatus.VERIFIED,
    )


def make_announcement(created_by, **fields):
    defaults = {
        'title': 'Eid hours',
        'content': 'Closed on the first day of Eid',
        'type': Announcement.Type.GENERAL,
    }
    defaults.update(fields)
    return Announcement.objects.create(created_by=created_by, **defaults)


class AnnouncementQuerySetTests(TestCase):
    def setUp(self):
        self.user = make_user('owner@example.com', Role.BUSINESS)

    def test_live_respects_window_and_flag(self):
        now = timezone.now()
        current = make_announcement(self.user)
        make_announcement(self.user, title='Future', start_date=now + timedelta(days=2))
        make_announcement(self.user, title='Ended', start_date=now - timedelta(days=5), end_date=now - timedelta(days=1))
        make_announcement(self.user, title='Hidden', is_active=False)
        bounded = make_announcement(self.user, title='Bounded', end_date=now + timedelta(days=1))

        self.assertEqual(set(Announcement.objects.live()), {current, bounded})


class PublicAnnouncementAPITests(APITestCase):
    def setUp(self):
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.owner = make_user('owner@example.com', Role.BUSINESS)
        self.business = make_business(self.owner)

    def test_admin_announcements_listed_first(self):
        make_announcement(self.owner, business=self.business, title='Book sale', type=Announcement.Type.SALE)
        make_announcement(self.admin, title='Maintenance tonight', type=Announcement.Type.MAINTENANCE, is_admin_announcement=True)

        response = self.client.get(reverse('announcements:public-announcements'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a['title'] for a in response.data['results']], ['Maintenance tonight', 'Book sale'])
        self.assertEqual(response.data['results'][1]['business_name'], 'Noor Books')
        self.assertEqual(response.data['pagination']['total'], 2)

    def test_audience_and_business_filters(self):
        make_announcement(self.admin, title='For everyone', is_admin_announcement=True)
        make_announcement(self.admin, title='Members only', target_audience=Announcement.Audience.MEMBERS)
        make_announcement(self.admin, title='Visitors only', target_audience=Announcement.Audience.VISITORS)
        make_announcement(self.owner, business=self.business, title='Shop news')

        url = reverse('announcements:public-announcements')
        titles = {a['title'] for a in self.client.get(url, {'audience': 'members'}).data['results']}
        self.assertEqual(titles, {'For everyone', 'Members only', 'Shop news'})

        response = self.client.get(url, {'business': str(self.business.id)})
        self.assertEqual([a['title'] for a in response.data['results']], ['Shop news'])

    def test_detail_counts_views(self):
        announcement = make_announcement(self.admin, is_admin_announcement=True)
        url = reverse('announcements:public-announcement-detail', kwargs={'pk': announcement.id})
        self.client.get(url)
        response = self.client.get(url)
        self.assertEqual(response.data['view_count'], 2)

        hidden = make_announcement(self.admin, is_active=False)
        url = reverse('announcements:public-announcement-detail', kwargs={'pk': hidden.id})
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)


class BusinessAnnouncementAPITests(APITestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com', Role.BUSINESS)
        self.business = make_business(self.owner)
        self.list_url = reverse('announcements:business-announcement-list')

    def test_create_attaches_business(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(self.list_url, {
            'title': 'New arrivals',
            'content': 'Fresh stock of Quran translations',
            'type': 'news',
            'is_admin_announcement': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['business'], self.business.id)
        self.assertFalse(response.data['is_admin_announcement'])

    def test_end_must_follow_start(self):
        self.client.force_authenticate(user=self.owner)
        now = timezone.now()
        response = self.client.post(self.list_url, {
            'title': 'Backwards',
            'content': 'Bad dates',
            'type': 'event',
            'start_date': now.isoformat(),
            'end_date': (now - timedelta(hours=1)).isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_date', response.data['details'])

    def test_owner_sees_only_own_announcements(self):
        other_owner = make_user('other@example.com', Role.BUSINESS)
        other_business = Business.objects.create(
            owner=other_owner, name='Other', category=Business.Category.OTHER, street='1 Road'
        )
        make_announcement(other_owner, business=other_business, title='Not mine')
        mine = make_announcement(self.owner, business=self.business, title='Mine')

        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.list_url)
        self.assertEqual([a['title'] for a in response.data['results']], ['Mine'])

        self.client.force_authenticate(user=other_owner)
        url = reverse('announcements:business-announcement-detail', kwargs={'pk': mine.id})
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_business_owner_role(self):
        self.client.force_authenticate(user=make_user('member@example.com'))
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_403_FORBIDDEN)


class AdminAnnouncementAPITests(APITestCase):
    def setUp(self):
        ActivityLog.objects.delete()
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.list_url = reverse('announcements:admin-announcement-list')
        self.client.force_authenticate(user=self.admin)

    def test_writes_are_logged(self):
        response = self.client.post(self.list_url, {
            'title': 'Scheduled maintenance',
            'content': 'The site will be down Sunday night',
            'type': 'maintenance',
            'priority': 'high',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_admin_announcement'])

        url = reverse('announcements:admin-announcement-detail', kwargs={'pk': response.data['id']})
        self.assertEqual(self.client.patch(url, {'is_active': False}, format='json').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)

        actions = sorted(log.action for log in ActivityLog.objects(module='announcements'))
        self.assertEqual(actions, ['CREATE_ANNOUNCEMENT', 'DELETE_ANNOUNCEMENT', 'UPDATE_ANNOUNCEMENT'])

    def test_status_filter(self):
        make_announcement(self.admin, title='On', is_admin_announcement=True)
        make_announcement(self.admin, title='Off', is_admin_announcement=True, is_active=False)

        response = self.client.get(self.list_url, {'status': 'inactive'})
        self.assertEqual([a['title'] for a in response.data['results']], ['Off'])

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=make_user('imam@example.com', Role.IMAM))
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_403_FORBIDDEN)
