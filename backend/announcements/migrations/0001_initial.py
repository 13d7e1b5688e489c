# Generated migration for initial announcements app setup

import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('businesses', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Announcement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('content', models.TextField(max_length=2000)),
                ('type', models.CharField(choices=[('event', 'Event'), ('general', 'General'), ('urgent', 'Urgent'), ('promotion', 'Promotion'), ('sale', 'Sale'), ('news', 'News'), ('service', 'Service'), ('system', 'System'), ('maintenance', 'Maintenance'), ('update', 'Update')], max_length=20)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], default='medium', max_length=10)),
                ('is_active', models.BooleanField(default=True)),
                ('start_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('target_audience', models.CharField(choices=[('all', 'All'), ('members', 'Members'), ('visitors', 'Visitors'), ('businesses', 'Businesses')], default='all', max_length=20)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('is_admin_announcement', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='announcements', to='businesses.business')),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='announcements', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['business', 'created_at'], name='announce_business_idx'),
                    models.Index(fields=['type', 'is_active'], name='announce_type_idx'),
                    models.Index(fields=['is_admin_announcement', 'is_active'], name='announce_admin_idx'),
                ],
            },
        ),
    ]
