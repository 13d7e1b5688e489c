"""
Notification delivery: persisted in-app notifications plus push messages
through Firebase Cloud Messaging (FCM).
"""
import logging
from typing import List, Optional

import firebase_admin
from django.conf import settings
from django.db import transaction
from firebase_admin import credentials, exceptions as firebase_exceptions, messaging

from user.models import UserProfile
from .models import DeviceToken, Notification

logger = logging.getLogger(__name__)


class PushService:
    """
    Wrapper around the Firebase Admin SDK. Finds a user's active device
    tokens and dispatches multicast messages. Without configured
    credentials the service stays disabled and sends report zero deliveries.
    """

    def __init__(self, credentials_path: Optional[str] = None):
        self.fcm_client = None
        credentials_path = credentials_path if credentials_path is not None else settings.FIREBASE_CREDENTIALS

        if not credentials_path:
            logger.info("FIREBASE_CREDENTIALS not set, push notifications disabled")
            return

        try:
            if firebase_admin._apps:
                self.fcm_client = firebase_admin.get_app()
            else:
                self.fcm_client = firebase_admin.initialize_app(credentials.Certificate(credentials_path))
            logger.info("Firebase Admin SDK initialized successfully")
        except (ValueError, OSError) as e:
            logger.error("Failed to initialize Firebase Admin SDK: %s", e)
            self.fcm_client = None

    @property
    def enabled(self) -> bool:
        return self.fcm_client is not None

    def register_device(self, user, token: str, platform: str) -> DeviceToken:
        """
        Saves or reassigns a device token to the user who just signed in on it.
        """
        with transaction.atomic():
            device_token, created = DeviceToken.objects.update_or_create(
                token=token,
                defaults={
                    'user': user,
                    'platform': platform,
                    'is_active': True
                }
            )
        logger.info("Device token %s for user %s", "created" if created else "updated", user.pk)
        return device_token

    def send_to_user(self, user_id, title: str, body: str, data: dict = None) -> int:
        """
        Sends a push notification to every active device of a user.

        Returns:
            int: Number of successfully delivered messages
        """
        if not self.enabled:
            logger.debug("Push disabled, skipping notification for user %s", user_id)
            return 0

        token_list = list(
            DeviceToken.objects.filter(user_id=user_id, is_active=True).values_list('token', flat=True)
        )
        if not token_list:
            logger.debug("No active device tokens found for user %s", user_id)
            return 0

        message = messaging.MulticastMessage(
            notification=messaging.Notification(title=title, body=body),
            # FCM data payloads only carry strings
            data={key: str(value) for key, value in (data or {}).items()},
            tokens=token_list
        )

        try:
            response = messaging.send_each_for_multicast(message, app=self.fcm_client)
        except firebase_exceptions.FirebaseError as e:
            logger.error("Error sending notification to user %s: %s", user_id, e)
            return 0

        if response.failure_count > 0:
            failed_tokens = [
                token_list[idx] for idx, resp in enumerate(response.responses) if not resp.success
            ]
            self.cleanup_invalid_tokens(failed_tokens)

        logger.info(
            "Sent notification to user %s: %s succeeded, %s failed",
            user_id, response.success_count, response.failure_count
        )
        return response.success_count

    def cleanup_invalid_tokens(self, failures: List[str]) -> int:
        """
        Removes device tokens FCM refused to deliver to.
        """
        if not failures:
            return 0
        deleted_count, _ = DeviceToken.objects.filter(token__in=failures).delete()
        logger.info("Cleaned up %s invalid device tokens", deleted_count)
        return deleted_count


_push_service = None


def get_push_service() -> PushService:
    global _push_service
    if _push_service is None:
        _push_service = PushService()
    return _push_service


def notify(recipient_user, verb, title, body, target_object_id=None, actor=None, data=None) -> Notification:
    """
    Stores an in-app notification for recipient_user and attempts a push
    to their devices.
    """
    data = data or {}
    notification = Notification.objects.create(
        recipient=UserProfile.for_user(recipient_user),
        actor=UserProfile.for_user(actor) if actor is not None and actor.is_authenticated else None,
        verb=verb,
        title=title,
        body=body,
        target_object_id=target_object_id,
        data=data,
    )
    get_push_service().send_to_user(
        recipient_user.pk,
        title,
        body,
        data={**data, 'notification_id': notification.id},
    )
    return notification
