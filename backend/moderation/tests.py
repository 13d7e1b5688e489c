from unittest.mock import patch

from django.test import RequestFactory, TestCase
from django.urls import reverse
from mongoengine.errors import ValidationError as DocumentValidationError
from pymongo.errors import PyMongoError
from rest_framework import status
from rest_framework.test import APITestCase

from businesses.models import Business, HalalCertification
from core.exceptions import InvalidStatusTransition
from core.testing import make_user
from mosques.models import Mosque
from notifications.models import Notification, NotificationVerb
from user.models import Role, UserProfile
from volunteers.models import Volunteer, VolunteerApplication
from .activity import ActivityLogger, client_ip
from .analytics import AnalyticsService, growth_rate, mosque_statistics
from .documents import MAX_DETAILS_LENGTH, ActivityLog
from .services import ModerationService


def make_mosque(imam, **fields):
    defaults = {
        'name': 'Masjid Bilal',
        'street': '12 Oak Avenue',
        'city': 'Detroit',
        'state': 'MI',
        'zip_code': '48201',
    }
    defaults.update(fields)
    return Mosque.objects.create(imam=imam, **defaults)


def make_business(owner, **fields):
    defaults = {
        'name': 'Crescent Cafe',
        'category': Business.Category.RESTAURANT,
        'street': '3 River Road',
        'city': 'Detroit',
        'state': 'MI',
    }
    defaults.update(fields)
    return Business.objects.create(owner=owner, **defaults)


def make_certification(business):
    return HalalCertification.objects.create(
        business=business,
        business_name=business.name,
        business_type='Restaurant',
        address=business.street,
        city=business.city,
        postcode='48201',
        contact_name='Yusuf',
        contact_email='yusuf@example.com',
    )


class ModerationServiceTests(TestCase):
    def setUp(self):
        ActivityLog.objects.delete()
        self.admin = make_user('admin@example.com', Role.ADMIN, name='Site Admin')
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.owner = make_user('owner@example.com', Role.BUSINESS)

    def test_approving_mosque(self):
        mosque = make_mosque(self.imam)
        ModerationService.set_status(mosque, 'approved', self.admin, note='Documents checked')

        mosque.refresh_from_db()
        self.assertEqual(mosque.status, Mosque.Status.APPROVED)
        self.assertTrue(mosque.verified)
        self.assertEqual(mosque.verified_by, self.admin)
        self.assertIsNotNone(mosque.verified_at)
        self.assertEqual(mosque.verification_notes, 'Documents checked')

        log = ActivityLog.objects.get(target_id=str(mosque.pk))
        self.assertEqual(log.action, 'APPROVE_MOSQUE')
        self.assertEqual(log.module, 'mosques')
        self.assertEqual(log.admin_name, 'Site Admin')
        self.assertTrue(Notification.objects.filter(
            recipient__user=self.imam, verb=NotificationVerb.MODERATION
        ).exists())

    def test_rejecting_mosque_clears_verified(self):
        mosque = make_mosque(self.imam, status=Mosque.Status.APPROVED, verified=True)
        ModerationService.set_status(mosque, 'rejected', self.admin)
        self.assertFalse(mosque.verified)
        self.assertEqual(ActivityLog.objects.get().action, 'REJECT_MOSQUE')

    def test_business_accepts_approved_alias(self):
        business = make_business(self.owner)
        ModerationService.set_status(business, 'approved', self.admin)
        business.refresh_from_db()
        self.assertEqual(business.verification_status, Business.VerificationStatus.VERIFIED)
        self.assertEqual(ActivityLog.objects.get().action, 'APPROVE_BUSINESS')

    def test_invalid_status_rejected(self):
        business = make_business(self.owner)
        with self.assertRaises(InvalidStatusTransition):
            ModerationService.set_status(business, 'archived', self.admin)
        business.refresh_from_db()
        self.assertEqual(business.verification_status, Business.VerificationStatus.PENDING)
        self.assertEqual(ActivityLog.objects.count(), 0)

    def test_under_review_halal_status_logs_update(self):
        certification = make_certification(make_business(self.owner))
        ModerationService.set_status(certification, 'under_review', self.admin)
        self.assertEqual(certification.reviewer, self.admin)
        self.assertEqual(ActivityLog.objects.get().action, 'UPDATE_HALAL_CERTIFICATION_STATUS')

    def test_halal_rejection_revokes_flag(self):
        business = make_business(self.owner, is_halal_certified=True)
        certification = make_certification(business)
        ModerationService.set_status(certification, 'rejected', self.admin, note='Supplier unverified')

        business.refresh_from_db()
        self.assertFalse(business.is_halal_certified)
        self.assertEqual(certification.review_notes, 'Supplier unverified')
        self.assertTrue(Notification.objects.filter(
            recipient__user=self.owner, verb=NotificationVerb.CERTIFICATION
        ).exists())

    def test_long_note_is_truncated_in_audit_trail(self):
        mosque = make_mosque(self.imam)
        ModerationService.set_status(mosque, 'approved', self.admin, note='x' * 2100)

        mosque.refresh_from_db()
        self.assertEqual(mosque.status, Mosque.Status.APPROVED)
        log = ActivityLog.objects.get(target_id=str(mosque.pk))
        self.assertLessEqual(len(log.details), MAX_DETAILS_LENGTH)

    def test_audit_outage_does_not_block_moderation(self):
        mosque = make_mosque(self.imam)
        with patch('moderation.activity.ActivityLog.save', side_effect=PyMongoError('connection refused')):
            with self.assertLogs('moderation.activity', level='ERROR'):
                ModerationService.set_status(mosque, 'approved', self.admin)

        mosque.refresh_from_db()
        self.assertEqual(mosque.status, Mosque.Status.APPROVED)
        self.assertTrue(Notification.objects.filter(recipient__user=self.imam).exists())

    def test_unmoderated_record_type(self):
        with self.assertRaises(TypeError):
            ModerationService.set_status(UserProfile.for_user(self.owner), 'approved', self.admin)


class ActivityLoggerTests(TestCase):
    def setUp(self):
        ActivityLog.objects.delete()
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.factory = RequestFactory()

    def test_client_ip_prefers_forwarded_header(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1', REMOTE_ADDR='10.0.0.1')
        self.assertEqual(client_ip(request), '203.0.113.7')
        request = self.factory.get('/', HTTP_X_REAL_IP='198.51.100.4', REMOTE_ADDR='10.0.0.1')
        self.assertEqual(client_ip(request), '198.51.100.4')
        self.assertEqual(client_ip(self.factory.get('/', REMOTE_ADDR='10.0.0.2')), '10.0.0.2')

    def test_record_from_request(self):
        request = self.factory.post('/', HTTP_USER_AGENT='dashboard/1.0', REMOTE_ADDR='192.0.2.1')
        request.user = self.admin
        entry = ActivityLogger.record(request, 'EXPORT_REPORT', 'analytics', 'Exported monthly report')

        self.assertEqual(entry.admin_id, str(self.admin.pk))
        self.assertEqual(entry.ip_address, '192.0.2.1')
        self.assertEqual(entry.user_agent, 'dashboard/1.0')
        self.assertIsNone(entry.target_id)
        self.assertEqual(ActivityLog.objects.count(), 1)

    def test_record_truncates_long_details(self):
        entry = ActivityLogger.record(self.admin, 'EXPORT_REPORT', 'analytics', 'y' * 5000)
        self.assertEqual(len(entry.details), MAX_DETAILS_LENGTH)
        self.assertEqual(ActivityLog.objects.count(), 1)

    def test_record_returns_none_when_store_rejects_entry(self):
        with patch('moderation.activity.ActivityLog.save', side_effect=DocumentValidationError('bad entry')):
            with self.assertLogs('moderation.activity', level='ERROR'):
                entry = ActivityLogger.record(self.admin, 'EXPORT_REPORT', 'analytics', 'Exported')
        self.assertIsNone(entry)

        with patch('moderation.activity.ActivityLog.save', side_effect=PyMongoError('timed out')):
            with self.assertLogs('moderation.activity', level='ERROR'):
                self.assertIsNone(ActivityLogger.record(self.admin, 'EXPORT_REPORT', 'analytics', 'Exported'))

    def test_record_from_actor(self):
        entry = ActivityLogger.record(self.admin, 'APPROVE_MOSQUE', 'mosques', 'Approved', 42)
        self.assertEqual(entry.target_id, '42')
        self.assertEqual(entry.ip_address, '')


class AnalyticsTests(TestCase):
    def setUp(self):
        self.imam = make_user('imam@example.com', Role.IMAM, city='Detroit')
        make_mosque(self.imam, capacity=80, services=['Jumma', 'Quran classes'])
        make_mosque(self.imam, name='Big Masjid', capacity=1200, services=['Jumma'], status=Mosque.Status.APPROVED)
        make_mosque(self.imam, name='Unknown size', city='Flint')

    def test_growth_rate(self):
        self.assertEqual(growth_rate(5, 0), 0)
        self.assertEqual(growth_rate(15, 10), 50)
        self.assertEqual(growth_rate(5, 10), -50)

    def test_unknown_time_range_falls_back(self):
        self.assertEqual(AnalyticsService('5y').time_range, '30d')

    def test_mosque_statistics(self):
        stats = mosque_statistics()
        self.assertEqual(stats['total'], 3)
        self.assertEqual(stats['by_status'], {'pending': 2, 'approved': 1})
        self.assertEqual(stats['capacity']['small'], 1)
        self.assertEqual(stats['capacity']['very_large'], 1)
        self.assertEqual(stats['capacity']['unknown'], 1)
        self.assertEqual(stats['services'][0], {'service': 'Jumma', 'count': 2})
        self.assertEqual(stats['by_city'][0], {'city': 'Detroit', 'count': 2})

    def test_report_sections(self):
        report = AnalyticsService('7d').report()
        self.assertEqual(report['time_range'], '7d')
        self.assertEqual(report['overview']['total_mosques'], 3)
        self.assertEqual(report['overview']['pending_approvals'], 2)
        self.assertIn({'status': 'pending', 'count': 2}, report['mosques']['status_distribution'])


class AdminUserAPITests(APITestCase):
    def setUp(self):
        ActivityLog.objects.delete()
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.superadmin = make_user('root@example.com', Role.SUPERADMIN)
        self.member = make_user('member@example.com', name='Khadija')

    def role_url(self, user):
        return reverse('moderation:user-role', kwargs={'pk': UserProfile.for_user(user).pk})

    def test_requires_admin(self):
        self.assertEqual(self.client.get(reverse('moderation:users')).status_code, status.HTTP_401_UNAUTHORIZED)
        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.client.get(reverse('moderation:users')).status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('moderation:users'), {'search': 'khadija'})
        self.assertEqual([u['email'] for u in response.data['results']], ['member@example.com'])

        response = self.client.get(reverse('moderation:users'), {'role': 'superadmin'})
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_change_role(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(self.role_url(self.member), {'role': 'imam'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['role'], 'imam')
        self.assertEqual(ActivityLog.objects.get().action, 'UPDATE_USER_ROLE')

        response = self.client.patch(self.role_url(self.member), {'role': 'caliph'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_superadmin_touches_superadmins(self):
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(
            self.client.patch(self.role_url(self.member), {'role': 'superadmin'}, format='json').status_code,
            status.HTTP_403_FORBIDDEN
        )
        self.assertEqual(
            self.client.patch(self.role_url(self.superadmin), {'role': 'user'}, format='json').status_code,
            status.HTTP_403_FORBIDDEN
        )

        self.client.force_authenticate(user=self.superadmin)
        response = self.client.patch(self.role_url(self.member), {'role': 'superadmin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_user_stats(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('moderation:user-stats'))
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['by_role']['admin'], 1)
        self.assertEqual(response.data['by_role']['business'], 0)


class AdminModerationAPITests(APITestCase):
    def setUp(self):
        ActivityLog.objects.delete()
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.owner = make_user('owner@example.com', Role.BUSINESS)
        self.client.force_authenticate(user=self.admin)

    def test_mosque_listing_and_approval(self):
        mosque = make_mosque(self.imam)
        make_mosque(self.imam, name='Already approved', status=Mosque.Status.APPROVED)

        response = self.client.get(reverse('moderation:mosques'), {'status': 'pending'})
        self.assertEqual([m['name'] for m in response.data['results']], ['Masjid Bilal'])

        url = reverse('moderation:mosque-detail', kwargs={'pk': mosque.id})
        response = self.client.patch(url, {'status': 'approved', 'verificationNotes': 'Visited'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Mosque approved successfully')
        mosque.refresh_from_db()
        self.assertEqual(mosque.verification_notes, 'Visited')

        response = self.client.patch(url, {'status': 'archived'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_overlong_note_is_rejected(self):
        mosque = make_mosque(self.imam)
        url = reverse('moderation:mosque-detail', kwargs={'pk': mosque.id})
        response = self.client.patch(url, {'status': 'approved', 'verificationNotes': 'x' * 2100}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('verificationNotes', response.data['details'])

        mosque.refresh_from_db()
        self.assertEqual(mosque.status, Mosque.Status.PENDING)
        self.assertEqual(ActivityLog.objects.count(), 0)

    def test_business_verification(self):
        business = make_business(self.owner)
        url = reverse('moderation:business-detail', kwargs={'pk': business.id})
        response = self.client.patch(url, {'status': 'verified'}, format='json')
        self.assertEqual(response.data['message'], 'Business verified successfully')
        self.assertEqual(response.data['business']['verification_status'], 'verified')

    def test_halal_approval(self):
        certification = make_certification(make_business(self.owner))
        url = reverse('moderation:halal-certification-detail', kwargs={'pk': certification.id})
        response = self.client.patch(url, {'status': 'approved', 'review_notes': 'Audit passed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Halal certification approved successfully')

        certification.refresh_from_db()
        self.assertEqual(certification.review_notes, 'Audit passed')
        self.assertIsNotNone(certification.expiry_date)
        self.assertTrue(certification.business.is_halal_certified)

    def test_volunteer_review_and_assignment(self):
        volunteer = Volunteer.objects.create(user=make_user('v@example.com'), name='Hamza', email='v@example.com')
        url = reverse('moderation:volunteer-detail', kwargs={'pk': volunteer.id})

        response = self.client.patch(url, {'currentAssignment': 'Parking'}, format='json')
        self.assertEqual(response.data['volunteer']['current_assignment'], 'Parking')
        self.assertEqual(response.data['volunteer']['status'], 'pending')

        response = self.client.patch(url, {'status': 'approved', 'clearAssignment': True}, format='json')
        self.assertEqual(response.data['message'], 'Volunteer approved successfully')
        self.assertEqual(response.data['volunteer']['current_assignment'], '')

    def test_dashboard_stats(self):
        make_mosque(self.imam)
        make_business(self.owner, verification_status=Business.VerificationStatus.VERIFIED)
        VolunteerApplication.objects.create(
            user=self.owner, mosque=Mosque.objects.get(), title='Help', description='d', motivation='m',
            category='events', availability='any', time_commitment='1h', contact_email='owner@example.com',
        )

        response = self.client.get(reverse('moderation:stats'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imams'], 1)
        self.assertEqual(response.data['businesses']['verified'], 1)
        self.assertEqual(response.data['businesses']['categories'], {'restaurant': 1})
        self.assertEqual(response.data['top_cities'][0], {'city': 'Detroit', 'count': 2})

        response = self.client.get(reverse('moderation:analytics'), {'timeRange': '90d'})
        self.assertEqual(response.data['time_range'], '90d')
        self.assertEqual(response.data['volunteers']['top_mosques'], [{'mosque__name': 'Masjid Bilal', 'count': 1}])


class ActivityLogAPITests(APITestCase):
    def setUp(self):
        ActivityLog.objects.delete()
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.url = reverse('moderation:activity-logs')
        self.client.force_authenticate(user=self.admin)

    def test_post_and_list(self):
        response = self.client.post(self.url, {
            'action': 'EXPORT_REPORT', 'module': 'analytics', 'details': 'Exported users', 'targetId': 'report-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['log']['target_id'], 'report-1')

        ActivityLogger.record(self.admin, 'APPROVE_MOSQUE', 'mosques', 'Approved a mosque')

        response = self.client.get(self.url)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['count'], 2)

        response = self.client.get(self.url, {'module': 'mosques'})
        self.assertEqual([log['action'] for log in response.data['logs']], ['APPROVE_MOSQUE'])

        response = self.client.get(self.url, {'limit': 1})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['total'], 2)

    def test_post_requires_fields(self):
        response = self.client.post(self.url, {'action': 'EXPORT_REPORT'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'action, module and details are required')

    def test_invalid_date_filter(self):
        response = self.client.get(self.url, {'startDate': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_reports_unavailable_store(self):
        with patch('moderation.views.ActivityLog.objects', side_effect=PyMongoError('connection refused')):
            with self.assertLogs('moderation.views', level='ERROR'):
                response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_post_reports_unavailable_store(self):
        with patch('moderation.activity.ActivityLog.save', side_effect=PyMongoError('connection refused')):
            with self.assertLogs('moderation.activity', level='ERROR'):
                response = self.client.post(self.url, {
                    'action': 'EXPORT_REPORT', 'module': 'analytics', 'details': 'Exported users',
                }, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data, {'error': 'Activity log unavailable'})


class AdminAccountAPITests(APITestCase):
    def setUp(self):
        ActivityLog.objects.delete()
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.other_admin = make_user('deputy@example.com', Role.ADMIN, name='Deputy')
        self.superadmin = make_user('root@example.com', Role.SUPERADMIN)
        self.member = make_user('member@example.com')
        self.url = reverse('moderation:admin-accounts')

    def detail_url(self, user):
        return reverse('moderation:admin-account-detail', kwargs={'pk': UserProfile.for_user(user).pk})

    def test_listing_hides_superadmins_from_admins(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertNotIn('root@example.com', [a['email'] for a in response.data['admins']])

        self.client.force_authenticate(user=self.superadmin)
        self.assertEqual(self.client.get(self.url).data['count'], 3)

        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)

    def test_create_admin(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.url, {
            'name': 'New Admin', 'email': 'New@Example.com', 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Admin user created successfully')
        self.assertEqual(response.data['admin']['email'], 'new@example.com')
        self.assertEqual(response.data['admin']['role'], 'admin')

        log = ActivityLog.objects.get()
        self.assertEqual((log.action, log.module), ('CREATE_ADMIN', 'user_management'))

        response = self.client.post(self.url, {
            'name': 'Copy', 'email': 'member@example.com', 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(self.url, {'name': 'No password', 'email': 'x@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_superadmin_creates_superadmin(self):
        payload = {'name': 'Root Two', 'email': 'root2@example.com', 'password': 'secret123', 'role': 'superadmin'}
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.post(self.url, payload, format='json').status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.superadmin)
        self.assertEqual(self.client.post(self.url, payload, format='json').status_code, status.HTTP_201_CREATED)

    def test_detail_is_limited_to_admin_accounts(self):
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(self.detail_url(self.other_admin)).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(self.detail_url(self.member)).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get(self.detail_url(self.superadmin)).status_code, status.HTTP_403_FORBIDDEN)

    def test_update_admin(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(self.detail_url(self.other_admin), {
            'name': 'Deputy Director', 'isActive': False, 'password': 'changed123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Admin user updated successfully')
        self.assertEqual(response.data['admin']['name'], 'Deputy Director')
        self.assertFalse(response.data['admin']['is_active'])
        self.other_admin.refresh_from_db()
        self.assertTrue(self.other_admin.check_password('changed123'))
        self.assertEqual(ActivityLog.objects.get().action, 'UPDATE_ADMIN')

        response = self.client.patch(self.detail_url(self.other_admin), {'email': 'member@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(self.detail_url(self.other_admin), {'email': 'deputy@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_update_role_rules(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(self.detail_url(self.admin), {'role': 'superadmin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(self.detail_url(self.superadmin), {'name': 'Root'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.superadmin)
        response = self.client.patch(self.detail_url(self.superadmin), {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot change your own role')

        response = self.client.patch(self.detail_url(self.other_admin), {'role': 'superadmin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(UserProfile.for_user(self.other_admin).role, Role.SUPERADMIN)

    def test_delete_admin(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(self.detail_url(self.admin))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete your own account')
        self.assertEqual(self.client.delete(self.detail_url(self.superadmin)).status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.delete(self.detail_url(self.other_admin))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(UserProfile.objects.filter(display_name='Deputy').exists())
        self.assertEqual(ActivityLog.objects.get().action, 'DELETE_ADMIN')


class AdminDashboardAPITests(APITestCase):
    def setUp(self):
        self.admin = make_user('admin@example.com', Role.ADMIN)
        self.imam = make_user('imam@example.com', Role.IMAM)
        self.owner = make_user('owner@example.com', Role.BUSINESS)
        self.client.force_authenticate(user=self.admin)

    def test_dashboard(self):
        make_business(self.owner)
        make_business(self.owner, name='Verified Grocer', verification_status=Business.VerificationStatus.VERIFIED)
        Volunteer.objects.create(user=make_user('v@example.com'), name='Hamza', email='v@example.com')

        response = self.client.get(reverse('moderation:dashboard'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats'], {
            'total_users': 4,
            'total_businesses': 2,
            'total_volunteers': 1,
            'pending_businesses': 1,
            'pending_volunteers': 1,
        })
        self.assertEqual(len(response.data['recent_users']), 4)
        self.assertEqual(len(response.data['recent_businesses']), 2)

        approvals = response.data['pending_approvals']
        self.assertEqual([item['type'] for item in approvals], ['volunteer', 'business'])
        self.assertEqual(approvals[1]['email'], 'owner@example.com')

    def test_recent_activity(self):
        make_mosque(self.imam, status=Mosque.Status.APPROVED)
        make_business(self.owner)

        response = self.client.get(reverse('moderation:recent-activity'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        types = [event['type'] for event in response.data]
        self.assertEqual(types[:2], ['business_registered', 'mosque_approved'])
        self.assertEqual(types.count('user_registered'), 3)
        timestamps = [event['timestamp'] for event in response.data]
        self.assertEqual(timestamps, sorted(timestamps, reverse=True))

    def test_requires_admin(self):
        self.client.force_authenticate(user=self.owner)
        self.assertEqual(self.client.get(reverse('moderation:dashboard')).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            self.client.get(reverse('moderation:recent-activity')).status_code, status.HTTP_403_FORBIDDEN
        )
