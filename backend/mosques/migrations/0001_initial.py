# Generated migration for initial mosques app setup

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
            name='Mosque',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('website', models.URLField(blank=True, default='')),
                ('street', models.CharField(max_length=255)),
                ('city', models.CharField(blank=True, default='', max_length=100)),
                ('state', models.CharField(blank=True, default='', max_length=100)),
                ('zip_code', models.CharField(blank=True, default='', max_length=20)),
                ('country', models.CharField(default='United States', max_length=100)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('geohash', models.CharField(blank=True, db_index=True, default='', help_text='Recomputed from latitude/longitude on save, used for map clustering', max_length=12)),
                ('capacity', models.PositiveIntegerField(blank=True, null=True)),
                ('services', models.JSONField(blank=True, default=list, help_text='Subset of SERVICE_CHOICES')),
                ('facilities', models.JSONField(blank=True, default=list)),
                ('fajr', models.CharField(blank=True, default='', max_length=20)),
                ('dhuhr', models.CharField(blank=True, default='', max_length=20)),
                ('asr', models.CharField(blank=True, default='', max_length=20)),
                ('maghrib', models.CharField(blank=True, default='', max_length=20)),
                ('isha', models.CharField(blank=True, default='', max_length=20)),
                ('jumma', models.CharField(blank=True, default='', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('verified', models.BooleanField(default=False)),
                ('verification_notes', models.TextField(blank=True, default='')),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('total_members', models.PositiveIntegerField(default=0)),
                ('total_events', models.PositiveIntegerField(default=0)),
                ('total_volunteers', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('imam', models.ForeignKey(help_text='Account that registered and manages the listing', on_delete=django.db.models.deletion.CASCADE, related_name='mosques', to=settings.AUTH_USER_MODEL)),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_mosques', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='mosque_status_idx'),
                    models.Index(fields=['city'], name='mosque_city_idx'),
                    models.Index(fields=['state'], name='mosque_state_idx'),
                ],
            },
        ),
    ]
