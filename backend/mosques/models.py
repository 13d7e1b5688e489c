import uuid

import geohash2
from django.conf import settings
from django.db import models

from user.models import is_admin_user


SERVICE_CHOICES = [
    'Daily Prayers',
    'Friday Prayers',
    'Islamic Education',
    'Quran Classes',
    'Youth Programs',
    'Women Programs',
    'Community Events',
    'Marriage Services',
    'Funeral Services',
    'Counseling',
    'Food Bank',
    'Library',
]

GEOHASH_PRECISION = 9


def coordinates_valid(lat, lon):
    return lat is not None and lon is not None and -90 <= lat <= 90 and -180 <= lon <= 180


class Mosque(models.Model):
    """
    A mosque listed in the directory. New listings start pending and only
    become publicly visible once an administrator approves them.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    imam = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='mosques',
        help_text="Account that registered and manages the listing"
    )

    # Contact
    phone = models.CharField(max_length=30, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    website = models.URLField(blank=True, default='')

    # Address
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100, blank=True, default='')
    state = models.CharField(max_length=100, blank=True, default='')
    zip_code = models.CharField(max_length=20, blank=True, default='')
    country = models.CharField(max_length=100, default='United States')

    # Geospatial Data
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    geohash = models.CharField(
        max_length=12,
        blank=True,
        default='',
        db_index=True,
        help_text="Recomputed from latitude/longitude on save, used for map clustering"
    )

    capacity = models.PositiveIntegerField(null=True, blank=True)
    services = models.JSONField(default=list, blank=True, help_text="Subset of SERVICE_CHOICES")
    facilities = models.JSONField(default=list, blank=True)

    # Prayer times, free text such as "05:30"
    fajr = models.CharField(max_length=20, blank=True, default='')
    dhuhr = models.CharField(max_length=20, blank=True, default='')
    asr = models.CharField(max_length=20, blank=True, default='')
    maghrib = models.CharField(max_length=20, blank=True, default='')
    isha = models.CharField(max_length=20, blank=True, default='')
    jumma = models.CharField(max_length=20, blank=True, default='')

    # Moderation
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    verified = models.BooleanField(default=False)
    verification_notes = models.TextField(blank=True, default='')
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_mosques'
    )
    verified_at = models.DateTimeField(null=True, blank=True)

    # Stats
    total_members = models.PositiveIntegerField(default=0)
    total_events = models.PositiveIntegerField(default=0)
    total_volunteers = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='mosque_status_idx'),
            models.Index(fields=['city'], name='mosque_city_idx'),
            models.Index(fields=['state'], name='mosque_state_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        """
        Coordinates must come as a valid pair or not at all. The geohash is
        kept in sync with them.
        """
        if self.latitude is None and self.longitude is None:
            self.geohash = ''
        elif not coordinates_valid(self.latitude, self.longitude):
            raise ValueError("Invalid coordinates: latitude must be -90 to 90, longitude must be -180 to 180")
        else:
            self.geohash = geohash2.encode(self.latitude, self.longitude, GEOHASH_PRECISION)

        super().save(*args, **kwargs)

    @property
    def full_address(self):
        return f"{self.street}, {self.city}, {self.state} {self.zip_code}".strip()

    @property
    def is_public(self):
        return self.status == self.Status.APPROVED

    def get_lat_lon(self):
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    def is_managed_by(self, user):
        return user.is_authenticated and (self.imam_id == user.id or is_admin_user(user))
