import uuid
from django.conf import settings
from django.db import models
from user.models import UserProfile


class NotificationVerb(models.TextChoices):
    """Kinds of events a user is notified about"""
    MODERATION = 'MODERATION', 'Moderation'
    APPLICATION = 'APPLICATION', 'Application'
    ANNOUNCEMENT = 'ANNOUNCEMENT', 'Announcement'
    CERTIFICATION = 'CERTIFICATION', 'Certification'
    SYSTEM_ALERT = 'SYSTEM_ALERT', 'System Alert'


class DevicePlatform(models.TextChoices):
    iOS = 'iOS', 'iOS'
    ANDROID = 'ANDROID', 'Android'
    WEB = 'WEB', 'Web'


class Notification(models.Model):
    """
    In-app record of an event that concerns a user: a moderation decision on
    one of their listings, a reply to a volunteer application, a halal
    certification review. Push delivery is attempted separately and the
    record survives whether or not it succeeds.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    recipient = models.ForeignKey(
        UserProfile,
        on_delete=models.CASCADE,
        related_name='received_notifications'
    )

    # Nullable for system messages
    actor = models.ForeignKey(
        UserProfile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='triggered_notifications'
    )

    verb = models.CharField(
        max_length=20,
        choices=NotificationVerb.choices,
        help_text="MODERATION, APPLICATION, ANNOUNCEMENT, CERTIFICATION, SYSTEM_ALERT"
    )
    title = models.CharField(max_length=200)
    body = models.TextField()

    # Mosque, business, volunteer record or application the event is about
    target_object_id = models.UUIDField(null=True, blank=True)

    is_read = models.BooleanField(default=False)

    # Extra payload for frontend navigation, e.g. {"kind": "mosque", "status": "approved"}
    data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notifications_notification'
        indexes = [
            models.Index(fields=['recipient', 'created_at'], name='notif_recipient_created_idx'),
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.verb} notification for {self.recipient.user.username}"

    def mark_as_read(self):
        self.is_read = True
        self.save(update_fields=['is_read', 'updated_at'])

    def get_deep_link(self):
        """
        Dashboard path the frontend opens when the notification is clicked.
        """
        kind = self.data.get('kind')
        if self.verb == NotificationVerb.MODERATION and kind == 'mosque' and self.target_object_id:
            return f'/mosques/{self.target_object_id}'
        if self.verb == NotificationVerb.MODERATION and kind == 'business':
            return '/dashboard/business'
        if self.verb == NotificationVerb.MODERATION and kind == 'volunteer':
            return '/dashboard/volunteer'
        if self.verb == NotificationVerb.CERTIFICATION:
            return '/dashboard/business'
        if self.verb == NotificationVerb.APPLICATION:
            return '/dashboard/volunteer'
        if self.verb == NotificationVerb.ANNOUNCEMENT:
            return '/announcements'
        return None


class DeviceToken(models.Model):
    """
    Firebase Cloud Messaging token of one device. A user may have several.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='device_tokens'
    )
    token = models.CharField(max_length=500, unique=True)
    platform = models.CharField(
        max_length=20,
        choices=DevicePlatform.choices,
        default=DevicePlatform.WEB
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notifications_device_token'
        indexes = [
            models.Index(fields=['user', 'is_active'], name='device_user_active_idx'),
        ]

    def __str__(self):
        return f"Device token for {self.user.username} ({self.platform})"
