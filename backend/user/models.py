import uuid

from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    USER = 'user', 'User'
    VOLUNTEER = 'volunteer', 'Volunteer'
    BUSINESS = 'business', 'Business'
    IMAM = 'imam', 'Imam'
    ADMIN = 'admin', 'Admin'
    SUPERADMIN = 'superadmin', 'Super Admin'


ADMIN_ROLES = (Role.ADMIN, Role.SUPERADMIN)
SELF_ASSIGNABLE_ROLES = (Role.USER, Role.VOLUNTEER, Role.BUSINESS, Role.IMAM)

ROLE_REDIRECTS = {
    Role.ADMIN: '/admin/dashboard',
    Role.SUPERADMIN: '/admin/dashboard',
    Role.IMAM: '/dashboard/imam',
    Role.BUSINESS: '/dashboard/business',
    Role.VOLUNTEER: '/dashboard/volunteer',
}


class UserProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile"
    )
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    display_name = models.CharField(max_length=50, blank=True, default="")
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)
    phone = models.CharField(max_length=30, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    profile_picture = models.URLField(max_length=500, blank=True, null=True)
    is_verified = models.BooleanField(null=False, default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['role'], name='profile_role_idx'),
            models.Index(fields=['city'], name='profile_city_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.role})"

    @property
    def name(self):
        return self.display_name or self.user.get_username()

    @property
    def is_admin(self):
        return self.role in ADMIN_ROLES

    @property
    def is_imam(self):
        return self.role == Role.IMAM or self.is_admin

    @property
    def is_business(self):
        return self.role == Role.BUSINESS or self.is_admin

    @property
    def is_volunteer(self):
        return self.role == Role.VOLUNTEER or self.is_admin

    def has_role(self, *roles):
        return self.role in roles

    def get_redirect_url(self):
        return ROLE_REDIRECTS.get(self.role, '/profile')

    @classmethod
    def for_user(cls, user):
        """
        Returns the profile of an authenticated user, creating it on first use.
        Django superusers created from the command line start as superadmins.
        """
        profile, _ = cls.objects.get_or_create(
            user=user,
            defaults={'role': Role.SUPERADMIN if user.is_superuser else Role.USER}
        )
        return profile


def role_of(user):
    if user is None or not user.is_authenticated:
        return None
    return UserProfile.for_user(user).role


def is_admin_user(user):
    return role_of(user) in ADMIN_ROLES
