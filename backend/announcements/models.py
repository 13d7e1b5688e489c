import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from businesses.models import Business


class AnnouncementQuerySet(models.QuerySet):

    def live(self, at=None):
        """Active announcements whose window contains the given moment."""
        now = at or timezone.now()
        return self.filter(is_active=True, start_date__lte=now).filter(
            Q(end_date__isnull=True) | Q(end_date__gte=now)
        )


class Announcement(models.Model):
    """
    A notice shown on a business's shop page, or site wide when posted by
    an administrator.
    """

    class Type(models.TextChoices):
        EVENT = 'event', 'Event'
        GENERAL = 'general', 'General'
        URGENT = 'urgent', 'Urgent'
        PROMOTION = 'promotion', 'Promotion'
        SALE = 'sale', 'Sale'
        NEWS = 'news', 'News'
        SERVICE = 'service', 'Service'
        SYSTEM = 'system', 'System'
        MAINTENANCE = 'maintenance', 'Maintenance'
        UPDATE = 'update', 'Update'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    class Audience(models.TextChoices):
        ALL = 'all', 'All'
        MEMBERS = 'members', 'Members'
        VISITORS = 'visitors', 'Visitors'
        BUSINESSES = 'businesses', 'Businesses'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    content = models.TextField(max_length=2000)
    type = models.CharField(max_length=20, choices=Type.choices)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)

    # Empty for administrator announcements
    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='announcements'
    )
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='announcements')

    is_active = models.BooleanField(default=True)
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(null=True, blank=True)
    target_audience = models.CharField(max_length=20, choices=Audience.choices, default=Audience.ALL)
    view_count = models.PositiveIntegerField(default=0)
    is_admin_announcement = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AnnouncementQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['business', 'created_at'], name='announce_business_idx'),
            models.Index(fields=['type', 'is_active'], name='announce_type_idx'),
            models.Index(fields=['is_admin_announcement', 'is_active'], name='announce_admin_idx'),
        ]

    def __str__(self):
        return self.title
