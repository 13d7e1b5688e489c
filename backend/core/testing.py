"""
Fixtures shared by the app test suites.
"""
from django.contrib.auth import get_user_model

from user.models import Role, UserProfile

User = get_user_model()


def make_user(email, role=Role.USER, name='', **profile_fields):
    user = User.objects.create_user(username=email, email=email, password='password123')
    UserProfile.objects.create(user=user, role=role, display_name=name or email.split('@')[0], **profile_fields)
    return user
