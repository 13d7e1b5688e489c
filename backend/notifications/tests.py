import uuid
from unittest.mock import MagicMock, patch

from django.contrib.auth.models import User
from django.urls import reverse
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification, DeviceToken, NotificationVerb, DevicePlatform
from notifications.services import PushService, notify
from user.models import UserProfile


class NotificationModelTest(TestCase):
    """Test cases for Notification model"""

    def setUp(self):
        self.user = User.objects.create_user(username='imam', email='imam@example.com', password='testpass123')
        self.recipient_profile = UserProfile.for_user(self.user)
        self.admin = User.objects.create_user(username='admin', email='admin@example.com', password='testpass123')
        self.actor_profile = UserProfile.for_user(self.admin)

    def test_notification_creation(self):
        notification = Notification.objects.create(
            recipient=self.recipient_profile,
            actor=self.actor_profile,
            verb=NotificationVerb.MODERATION,
            title='Mosque approved',
            body='Your mosque listing is now public',
            target_object_id=uuid.uuid4(),
            data={'kind': 'mosque', 'status': 'approved'}
        )
        self.assertFalse(notification.is_read)
        self.assertEqual(notification.data['status'], 'approved')

    def test_mark_as_read(self):
        notification = Notification.objects.create(
            recipient=self.recipient_profile,
            verb=NotificationVerb.SYSTEM_ALERT,
            title='Maintenance',
            body='Scheduled maintenance tonight',
        )
        notification.mark_as_read()
        notification.refresh_from_db()
        self.assertTrue(notification.is_read)

    def test_set_null_on_actor_delete(self):
        notification = Notification.objects.create(
            recipient=self.recipient_profile,
            actor=self.actor_profile,
            verb=NotificationVerb.MODERATION,
            title='Update',
            body='Status changed',
        )
        self.admin.delete()
        notification.refresh_from_db()
        self.assertIsNone(notification.actor)

    def test_get_deep_link(self):
        target = uuid.uuid4()
        mosque = Notification(
            recipient=self.recipient_profile,
            verb=NotificationVerb.MODERATION,
            target_object_id=target,
            data={'kind': 'mosque'},
        )
        self.assertEqual(mosque.get_deep_link(), f'/mosques/{target}')

        certification = Notification(recipient=self.recipient_profile, verb=NotificationVerb.CERTIFICATION)
        self.assertEqual(certification.get_deep_link(), '/dashboard/business')

        alert = Notification(recipient=self.recipient_profile, verb=NotificationVerb.SYSTEM_ALERT)
        self.assertIsNone(alert.get_deep_link())


class PushServiceTest(TestCase):
    """Test cases for PushService"""

    def setUp(self):
        self.push_service = PushService(credentials_path='')
        self.user = User.objects.create_user(username='pushuser', email='push@example.com', password='testpass123')

    def test_disabled_without_credentials(self):
        self.assertFalse(self.push_service.enabled)
        DeviceToken.objects.create(user=self.user, token='t1')
        self.assertEqual(self.push_service.send_to_user(self.user.pk, 'Hi', 'There'), 0)

    def test_register_device_new(self):
        device_token = self.push_service.register_device(
            user=self.user,
            token='test_fcm_token_123',
            platform=DevicePlatform.ANDROID
        )
        self.assertEqual(device_token.user, self.user)
        self.assertEqual(DeviceToken.objects.get(token='test_fcm_token_123').platform, DevicePlatform.ANDROID)

    def test_register_device_existing_update(self):
        """Registering a known token reactivates it"""
        DeviceToken.objects.create(user=self.user, token='existing_token', is_active=False)
        self.push_service.register_device(user=self.user, token='existing_token', platform=DevicePlatform.WEB)
        token = DeviceToken.objects.get(token='existing_token')
        self.assertTrue(token.is_active)
        self.assertEqual(DeviceToken.objects.count(), 1)

    def test_cleanup_invalid_tokens(self):
        DeviceToken.objects.create(user=self.user, token='invalid_token_1')
        DeviceToken.objects.create(user=self.user, token='invalid_token_2', platform=DevicePlatform.iOS)
        deleted = self.push_service.cleanup_invalid_tokens(['invalid_token_1', 'invalid_token_2'])
        self.assertEqual(deleted, 2)
        self.assertEqual(DeviceToken.objects.filter(user=self.user).count(), 0)

    @patch('notifications.services.messaging.send_each_for_multicast')
    def test_send_to_user_removes_failed_tokens(self, mock_send):
        DeviceToken.objects.create(user=self.user, token='good')
        DeviceToken.objects.create(user=self.user, token='bad')
        mock_send.return_value = MagicMock(
            success_count=1,
            failure_count=1,
            responses=[MagicMock(success=True), MagicMock(success=False)],
        )
        self.push_service.fcm_client = MagicMock()

        delivered = self.push_service.send_to_user(self.user.pk, 'Hi', 'There', data={'count': 1})

        self.assertEqual(delivered, 1)
        sent_message = mock_send.call_args.args[0]
        self.assertEqual(sent_message.data, {'count': '1'})
        remaining = set(DeviceToken.objects.values_list('token', flat=True))
        self.assertEqual(len(remaining), 1)


@override_settings(FIREBASE_CREDENTIALS='')
class NotifyTest(TestCase):
    def test_notify_persists_notification(self):
        recipient = User.objects.create_user(username='owner', password='testpass123')
        actor = User.objects.create_user(username='reviewer', password='testpass123')
        notification = notify(
            recipient,
            NotificationVerb.CERTIFICATION,
            'Certification approved',
            'Your halal certification was approved',
            actor=actor,
            data={'kind': 'halal_certification'},
        )
        self.assertEqual(notification.recipient, UserProfile.for_user(recipient))
        self.assertEqual(notification.actor, UserProfile.for_user(actor))
        self.assertEqual(Notification.objects.count(), 1)


class NotificationAPITest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='reader', password='testpass123')
        self.other = User.objects.create_user(username='other', password='testpass123')
        profile = UserProfile.for_user(self.user)
        self.unread = Notification.objects.create(
            recipient=profile, verb=NotificationVerb.MODERATION, title='One', body='First'
        )
        Notification.objects.create(
            recipient=profile, verb=NotificationVerb.APPLICATION, title='Two', body='Second'
        )
        Notification.objects.create(
            recipient=UserProfile.for_user(self.other), verb=NotificationVerb.MODERATION, title='X', body='Y'
        )
        self.client.force_authenticate(user=self.user)

    def test_list_only_own(self):
        response = self.client.get(reverse('notifications:notification-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.get(reverse('notifications:notification-list'), {'verb': 'APPLICATION'})
        self.assertEqual([n['title'] for n in response.data['results']], ['Two'])

    def test_mark_as_read_and_unread_count(self):
        url = reverse('notifications:notification-unread-count')
        self.assertEqual(self.client.get(url).data['unread_count'], 2)

        response = self.client.patch(reverse('notifications:notification-mark-as-read', kwargs={'pk': self.unread.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        self.assertEqual(self.client.get(url).data['unread_count'], 1)

        response = self.client.post(reverse('notifications:notification-mark-all-as-read'))
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(self.client.get(url).data['unread_count'], 0)

    def test_cannot_read_others_notifications(self):
        foreign = Notification.objects.get(title='X')
        response = self.client.patch(reverse('notifications:notification-mark-as-read', kwargs={'pk': foreign.id}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_register_device_token(self):
        response = self.client.post(
            reverse('notifications:device-token-register'),
            {'token': 'fcm-token', 'platform': 'WEB'},
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(DeviceToken.objects.filter(token='fcm-token', user=self.user).exists())

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('notifications:notification-list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
