# Generated migration for initial user app setup

import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('display_name', models.CharField(blank=True, default='', max_length=50)),
                ('role', models.CharField(
                    choices=[
                        ('user', 'User'),
                        ('volunteer', 'Volunteer'),
                        ('business', 'Business'),
                        ('imam', 'Imam'),
                        ('admin', 'Admin'),
                        ('superadmin', 'Super Admin'),
                    ],
                    default='user',
                    max_length=20,
                )),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('city', models.CharField(blank=True, default='', max_length=100)),
                ('state', models.CharField(blank=True, default='', max_length=100)),
                ('profile_picture', models.URLField(blank=True, max_length=500, null=True)),
                ('is_verified', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['role'], name='profile_role_idx'),
                    models.Index(fields=['city'], name='profile_city_idx'),
                ],
            },
        ),
    ]
