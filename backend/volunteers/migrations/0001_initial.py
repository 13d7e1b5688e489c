# Generated migration for initial volunteers app setup

import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


CATEGORY_CHOICES = [
    ('cleaning', 'Cleaning'),
    ('education', 'Education'),
    ('events', 'Events'),
    ('technical', 'Technical'),
    ('administration', 'Administration'),
    ('outreach', 'Outreach'),
    ('other', 'Other'),
]
LEVEL_CHOICES = [('low', 'Low'), ('medium', 'Medium'), ('high', 'High')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('mosques', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Volunteer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('skills', models.JSONField(blank=True, default=list)),
                ('availability', models.CharField(blank=True, default='', max_length=255)),
                ('experience', models.TextField(blank=True, default='')),
                ('interests', models.JSONField(blank=True, default=list)),
                ('languages', models.JSONField(blank=True, default=list)),
                ('emergency_contact', models.JSONField(blank=True, default=dict, help_text='{name, relation, phone}')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('notes', models.TextField(blank=True, default='')),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('current_assignment', models.CharField(blank=True, default='', max_length=255)),
                ('assignment_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_volunteers', to=settings.AUTH_USER_MODEL)),
                ('mosque', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='volunteers', to='mosques.mosque')),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_volunteers', to=settings.AUTH_USER_MODEL)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='volunteer', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='volunteer_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='VolunteerNeed',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(choices=CATEGORY_CHOICES, max_length=20)),
                ('skills_required', models.JSONField(blank=True, default=list)),
                ('time_commitment', models.CharField(max_length=100)),
                ('urgency', models.CharField(choices=LEVEL_CHOICES, default='medium', max_length=10)),
                ('start_date', models.DateTimeField(blank=True, null=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('volunteers_needed', models.PositiveIntegerField(default=1)),
                ('status', models.CharField(choices=[('active', 'Active'), ('filled', 'Filled'), ('expired', 'Expired'), ('cancelled', 'Cancelled')], default='active', max_length=20)),
                ('contact_email', models.EmailField(blank=True, default='', max_length=254)),
                ('contact_phone', models.CharField(blank=True, default='', max_length=30)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('mosque', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='volunteer_needs', to='mosques.mosque')),
                ('posted_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='volunteer_needs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'category'], name='need_status_category_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='NeedApplicant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('message', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('applied_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('need', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applicants', to='volunteers.volunteerneed')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='need_applications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['applied_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('need', 'user'), name='unique_need_applicant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='VolunteerOffer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(choices=CATEGORY_CHOICES, max_length=20)),
                ('skills_offered', models.JSONField(blank=True, default=list)),
                ('availability', models.CharField(max_length=255)),
                ('time_commitment', models.CharField(max_length=100)),
                ('preferred_locations', models.JSONField(blank=True, default=list)),
                ('experience', models.TextField(blank=True, default='')),
                ('languages', models.JSONField(blank=True, default=list)),
                ('contact_email', models.EmailField(blank=True, default='', max_length=254)),
                ('contact_phone', models.CharField(blank=True, default='', max_length=30)),
                ('status', models.CharField(choices=[('active', 'Active'), ('matched', 'Matched'), ('inactive', 'Inactive')], default='active', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('target_mosque', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='volunteer_offers', to='mosques.mosque')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='volunteer_offers', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='VolunteerApplication',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('motivation', models.TextField()),
                ('category', models.CharField(choices=CATEGORY_CHOICES, max_length=20)),
                ('skills_offered', models.JSONField(blank=True, default=list)),
                ('availability', models.CharField(max_length=255)),
                ('time_commitment', models.CharField(max_length=100)),
                ('experience', models.TextField(blank=True, default='')),
                ('languages', models.JSONField(blank=True, default=list)),
                ('contact_email', models.EmailField(max_length=254)),
                ('contact_phone', models.CharField(blank=True, default='', max_length=30)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('reviewed', 'Reviewed'), ('accepted', 'Accepted'), ('rejected', 'Rejected'), ('withdrawn', 'Withdrawn')], default='pending', max_length=20)),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('response_message', models.TextField(blank=True, default='')),
                ('admin_notes', models.TextField(blank=True, default='')),
                ('priority', models.CharField(choices=LEVEL_CHOICES, default='medium', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('mosque', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='volunteer_applications', to='mosques.mosque')),
                ('responded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='volunteer_application_responses', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='volunteer_applications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['mosque', 'status'], name='application_mosque_idx'),
                ],
            },
        ),
    ]
