# Generated migration for initial businesses app setup

import businesses.models
import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Business',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, default='', max_length=1000)),
                ('category', models.CharField(choices=[('restaurant', 'Restaurant'), ('grocery', 'Grocery'), ('clothing', 'Clothing'), ('electronics', 'Electronics'), ('services', 'Services'), ('healthcare', 'Healthcare'), ('education', 'Education'), ('automotive', 'Automotive'), ('beauty', 'Beauty'), ('home_garden', 'Home & Garden'), ('sports', 'Sports'), ('books', 'Books'), ('jewelry', 'Jewelry'), ('other', 'Other')], max_length=20)),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('website', models.URLField(blank=True, default='')),
                ('street', models.CharField(max_length=255)),
                ('city', models.CharField(max_length=100)),
                ('state', models.CharField(max_length=100)),
                ('zip_code', models.CharField(blank=True, default='', max_length=20)),
                ('country', models.CharField(default='United States', max_length=100)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('geohash', models.CharField(blank=True, db_index=True, default='', max_length=12)),
                ('hours', models.JSONField(default=businesses.models.default_hours, help_text='Per weekday {open, close, closed}, times as HH:MM')),
                ('logo', models.URLField(blank=True, default='', max_length=500)),
                ('banner', models.URLField(blank=True, default='', max_length=500)),
                ('gallery', models.JSONField(blank=True, default=list)),
                ('social_media', models.JSONField(blank=True, default=dict, help_text='facebook, instagram, twitter, linkedin')),
                ('shop_settings', models.JSONField(blank=True, default=businesses.models.default_settings)),
                ('verification_status', models.CharField(choices=[('pending', 'Pending'), ('verified', 'Verified'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('verification_notes', models.TextField(blank=True, default='')),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('suspended', 'Suspended')], default='active', max_length=20)),
                ('featured', models.BooleanField(default=False)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('is_halal_certified', models.BooleanField(default=False)),
                ('total_products', models.PositiveIntegerField(default=0)),
                ('total_orders', models.PositiveIntegerField(default=0)),
                ('views', models.PositiveIntegerField(default=0)),
                ('average_rating', models.FloatField(default=0.0, validators=[django.core.validators.MinValueValidator(0.0), django.core.validators.MaxValueValidator(5.0)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='businesses', to=settings.AUTH_USER_MODEL)),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_businesses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'businesses',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['category'], name='business_category_idx'),
                    models.Index(fields=['status'], name='business_status_idx'),
                    models.Index(fields=['verification_status'], name='business_verif_idx'),
                    models.Index(fields=['city'], name='business_city_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, default='', max_length=2000)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('compare_at_price', models.DecimalField(blank=True, decimal_places=2, help_text='Original price shown struck through; dropped when not above price', max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('category', models.CharField(max_length=100)),
                ('subcategory', models.CharField(blank=True, default='', max_length=100)),
                ('images', models.JSONField(blank=True, default=list, help_text='List of {url, alt, primary}')),
                ('stock', models.PositiveIntegerField(default=0)),
                ('unlimited', models.BooleanField(default=False)),
                ('track_inventory', models.BooleanField(default=True)),
                ('low_stock_threshold', models.PositiveIntegerField(default=10)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('out_of_stock', 'Out of stock'), ('discontinued', 'Discontinued')], default='active', max_length=20)),
                ('featured', models.BooleanField(default=False)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('slug', models.SlugField(blank=True, max_length=140, unique=True)),
                ('views', models.PositiveIntegerField(default=0)),
                ('orders', models.PositiveIntegerField(default=0)),
                ('revenue', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to='businesses.business')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['business', 'status'], name='product_business_idx'),
                    models.Index(fields=['category'], name='product_category_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Offer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, default='', max_length=500)),
                ('discount_type', models.CharField(choices=[('percentage', 'Percentage'), ('fixed_amount', 'Fixed amount'), ('buy_one_get_one', 'Buy one get one'), ('free_shipping', 'Free shipping')], max_length=20)),
                ('discount_value', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('applicable_categories', models.JSONField(blank=True, default=list)),
                ('minimum_purchase', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('valid_from', models.DateTimeField()),
                ('valid_to', models.DateTimeField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('expired', 'Expired'), ('draft', 'Draft')], default='draft', max_length=20)),
                ('featured', models.BooleanField(default=False)),
                ('terms', models.TextField(blank=True, default='', max_length=1000)),
                ('usage_limit', models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('used_count', models.PositiveIntegerField(default=0)),
                ('customer_limit', models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('code', models.CharField(blank=True, max_length=20, null=True, unique=True)),
                ('auto_apply', models.BooleanField(default=False)),
                ('priority', models.IntegerField(default=0)),
                ('image', models.URLField(blank=True, default='', max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='offers', to='businesses.business')),
                ('applicable_products', models.ManyToManyField(blank=True, related_name='offers', to='businesses.product')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['business', 'status'], name='offer_business_idx'),
                    models.Index(fields=['valid_from', 'valid_to'], name='offer_window_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HalalCertification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('business_name', models.CharField(max_length=100)),
                ('business_type', models.CharField(max_length=100)),
                ('address', models.CharField(max_length=255)),
                ('city', models.CharField(max_length=100)),
                ('postcode', models.CharField(max_length=20)),
                ('contact_name', models.CharField(max_length=100)),
                ('contact_email', models.EmailField(max_length=254)),
                ('details', models.TextField(blank=True, default='')),
                ('supplier_info', models.TextField(blank=True, default='')),
                ('submitted_documents', models.JSONField(blank=True, default=list, help_text='Document URLs')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('under_review', 'Under review'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('review_notes', models.TextField(blank=True, default='')),
                ('certificate_url', models.CharField(blank=True, default='', max_length=500)),
                ('expiry_date', models.DateTimeField(blank=True, null=True)),
                ('requested_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='halal_certifications', to='businesses.business')),
                ('reviewer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_certifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-requested_at'],
                'indexes': [
                    models.Index(fields=['status'], name='halal_status_idx'),
                ],
            },
        ),
    ]
