import secrets
import string
import uuid
from datetime import timedelta
from decimal import Decimal

import geohash2
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.text import slugify

from core.exceptions import OfferNotRedeemable
from mosques.models import GEOHASH_PRECISION, coordinates_valid

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']


def default_hours():
    return {
        day: {'open': '09:00', 'close': '17:00', 'closed': day == 'sunday'}
        for day in WEEKDAYS
    }


def default_settings():
    return {
        'accepts_orders': True,
        'delivery_available': False,
        'pickup_available': True,
        'online_payments': False,
    }


def clean_tags(tags):
    return [tag.strip().lower() for tag in tags or [] if tag and tag.strip()]


class Business(models.Model):
    """
    A Muslim-owned business listed in the directory. Businesses only show
    up in the public shop once verified and active.
    """

    class Category(models.TextChoices):
        RESTAURANT = 'restaurant', 'Restaurant'
        GROCERY = 'grocery', 'Grocery'
        CLOTHING = 'clothing', 'Clothing'
        ELECTRONICS = 'electronics', 'Electronics'
        SERVICES = 'services', 'Services'
        HEALTHCARE = 'healthcare', 'Healthcare'
        EDUCATION = 'education', 'Education'
        AUTOMOTIVE = 'automotive', 'Automotive'
        BEAUTY = 'beauty', 'Beauty'
        HOME_GARDEN = 'home_garden', 'Home & Garden'
        SPORTS = 'sports', 'Sports'
        BOOKS = 'books', 'Books'
        JEWELRY = 'jewelry', 'Jewelry'
        OTHER = 'other', 'Other'

    class VerificationStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        VERIFIED = 'verified', 'Verified'
        REJECTED = 'rejected', 'Rejected'

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'
        SUSPENDED = 'suspended', 'Suspended'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='businesses')
    name = models.CharField(max_length=100)
    description = models.TextField(max_length=1000, blank=True, default='')
    category = models.CharField(max_length=20, choices=Category.choices)

    # Contact
    phone = models.CharField(max_length=30, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    website = models.URLField(blank=True, default='')

    # Address
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20, blank=True, default='')
    country = models.CharField(max_length=100, default='United States')
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    geohash = models.CharField(max_length=12, blank=True, default='', db_index=True)

    hours = models.JSONField(default=default_hours, help_text="Per weekday {open, close, closed}, times as HH:MM")
    logo = models.URLField(max_length=500, blank=True, default='')
    banner = models.URLField(max_length=500, blank=True, default='')
    gallery = models.JSONField(default=list, blank=True)
    social_media = models.JSONField(default=dict, blank=True, help_text="facebook, instagram, twitter, linkedin")
    shop_settings = models.JSONField(default=default_settings, blank=True)

    # Moderation
    verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING
    )
    verification_notes = models.TextField(blank=True, default='')
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_businesses'
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    featured = models.BooleanField(default=False)
    tags = models.JSONField(default=list, blank=True)
    is_halal_certified = models.BooleanField(default=False)

    # Stats
    total_products = models.PositiveIntegerField(default=0)
    total_orders = models.PositiveIntegerField(default=0)
    views = models.PositiveIntegerField(default=0)
    average_rating = models.FloatField(
        default=0.0,
        validators=[MinValueValidator(0.0), MaxValueValidator(5.0)]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'businesses'
        indexes = [
            models.Index(fields=['category'], name='business_category_idx'),
            models.Index(fields=['status'], name='business_status_idx'),
            models.Index(fields=['verification_status'], name='business_verif_idx'),
            models.Index(fields=['city'], name='business_city_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # Out of range coordinates are dropped rather than rejected
        if not coordinates_valid(self.latitude, self.longitude):
            self.latitude = self.longitude = None
            self.geohash = ''
        else:
            self.geohash = geohash2.encode(self.latitude, self.longitude, GEOHASH_PRECISION)
        self.tags = clean_tags(self.tags)
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def full_address(self):
        return f"{self.street}, {self.city}, {self.state} {self.zip_code}".strip()

    @property
    def is_public(self):
        return self.verification_status == self.VerificationStatus.VERIFIED and self.status == self.Status.ACTIVE

    def is_currently_open(self, at=None):
        now = timezone.localtime(at or timezone.now())
        today = (self.hours or {}).get(WEEKDAYS[now.weekday()])
        if not today or today.get('closed'):
            return False
        current = now.strftime('%H:%M')
        return today.get('open', '') <= current <= today.get('close', '')

    def update_product_count(self):
        self.total_products = self.products.filter(status=Product.Status.ACTIVE).count()
        Business.objects.filter(pk=self.pk).update(total_products=self.total_products)
        return self.total_products


class Product(models.Model):

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'
        OUT_OF_STOCK = 'out_of_stock', 'Out of stock'
        DISCONTINUED = 'discontinued', 'Discontinued'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=100)
    description = models.TextField(max_length=2000, blank=True, default='')
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    compare_at_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Original price shown struck through; dropped when not above price"
    )
    category = models.CharField(max_length=100)
    subcategory = models.CharField(max_length=100, blank=True, default='')
    images = models.JSONField(default=list, blank=True, help_text="List of {url, alt, primary}")

    # Inventory
    stock = models.PositiveIntegerField(default=0)
    unlimited = models.BooleanField(default=False)
    track_inventory = models.BooleanField(default=True)
    low_stock_threshold = models.PositiveIntegerField(default=10)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    featured = models.BooleanField(default=False)
    tags = models.JSONField(default=list, blank=True)
    slug = models.SlugField(max_length=140, unique=True, blank=True)

    # Stats
    views = models.PositiveIntegerField(default=0)
    orders = models.PositiveIntegerField(default=0)
    revenue = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['business', 'status'], name='product_business_idx'),
            models.Index(fields=['category'], name='product_category_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self._unique_slug()
        if self.compare_at_price is not None and self.compare_at_price <= self.price:
            self.compare_at_price = None
        if self.images and not any(image.get('primary') for image in self.images):
            self.images[0]['primary'] = True
        self.tags = clean_tags(self.tags)
        if self.status == self.Status.ACTIVE and self.track_inventory and not self.unlimited and self.stock <= 0:
            self.status = self.Status.OUT_OF_STOCK
        super().save(*args, **kwargs)

    def _unique_slug(self):
        base = f"{slugify(self.name) or 'product'}-{str(self.business_id)[-6:]}"
        slug = base
        suffix = 2
        while Product.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def is_in_stock(self, quantity=1):
        if self.status != self.Status.ACTIVE:
            return False
        if self.unlimited or not self.track_inventory:
            return True
        return self.stock >= quantity

    @property
    def is_low_stock(self):
        if self.unlimited or not self.track_inventory:
            return False
        return 0 < self.stock <= self.low_stock_threshold

    @property
    def discount_percentage(self):
        if not self.compare_at_price or self.compare_at_price <= self.price:
            return 0
        return round((self.compare_at_price - self.price) / self.compare_at_price * 100)


class OfferQuerySet(models.QuerySet):

    def valid(self, at=None):
        now = at or timezone.now()
        return self.filter(
            status=Offer.Status.ACTIVE,
            valid_from__lte=now,
            valid_to__gte=now,
        ).filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F('usage_limit')))

    def active_for(self, business, featured=None):
        now = timezone.now()
        queryset = self.filter(
            business=business,
            status=Offer.Status.ACTIVE,
            valid_from__lte=now,
            valid_to__gte=now,
        )
        if featured:
            queryset = queryset.filter(featured=True)
        return queryset.order_by('-priority', '-created_at')


class Offer(models.Model):
    """
    A time-boxed promotion. Status follows the validity window on every
    save and redemption is guarded by a conditional update on used_count.
    """

    class DiscountType(models.TextChoices):
        PERCENTAGE = 'percentage', 'Percentage'
        FIXED_AMOUNT = 'fixed_amount', 'Fixed amount'
        BUY_ONE_GET_ONE = 'buy_one_get_one', 'Buy one get one'
        FREE_SHIPPING = 'free_shipping', 'Free shipping'

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'
        EXPIRED = 'expired', 'Expired'
        DRAFT = 'draft', 'Draft'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='offers')
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=500, blank=True, default='')
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    applicable_products = models.ManyToManyField(Product, blank=True, related_name='offers')
    applicable_categories = models.JSONField(default=list, blank=True)
    minimum_purchase = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    valid_from = models.DateTimeField()
    valid_to = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    featured = models.BooleanField(default=False)
    terms = models.TextField(max_length=1000, blank=True, default='')
    usage_limit = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    used_count = models.PositiveIntegerField(default=0)
    customer_limit = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    code = models.CharField(max_length=20, unique=True, null=True, blank=True)
    auto_apply = models.BooleanField(default=False)
    priority = models.IntegerField(default=0)
    image = models.URLField(max_length=500, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OfferQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['business', 'status'], name='offer_business_idx'),
            models.Index(fields=['valid_from', 'valid_to'], name='offer_window_idx'),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        now = timezone.now()
        if self.status == self.Status.ACTIVE and now > self.valid_to:
            self.status = self.Status.EXPIRED
        if self.status == self.Status.DRAFT and self.valid_from <= now <= self.valid_to:
            self.status = self.Status.ACTIVE
        if self.discount_type == self.DiscountType.PERCENTAGE and self.discount_value > 100:
            self.discount_value = Decimal('100')
        self.code = (self.code or '').strip().upper() or None
        if not self.code and self.discount_type != self.DiscountType.FREE_SHIPPING:
            self.code = self.generate_code()
        super().save(*args, **kwargs)

    def generate_code(self):
        prefix = str(self.business_id).replace('-', '')[-3:].upper()
        alphabet = string.ascii_uppercase + string.digits
        while True:
            code = prefix + ''.join(secrets.choice(alphabet) for _ in range(6))
            if not Offer.objects.filter(code=code).exists():
                return code

    @property
    def is_valid(self):
        now = timezone.now()
        return (
            self.status == self.Status.ACTIVE
            and self.valid_from <= now <= self.valid_to
            and (self.usage_limit is None or self.used_count < self.usage_limit)
        )

    @property
    def days_remaining(self):
        remaining = self.valid_to - timezone.now()
        return -((-remaining) // timedelta(days=1))

    @property
    def usage_percentage(self):
        if not self.usage_limit:
            return 0
        return round(self.used_count / self.usage_limit * 100)

    def is_applicable_to_product(self, product):
        product_ids = set(self.applicable_products.values_list('id', flat=True))
        if not product_ids and not self.applicable_categories:
            return True
        if product_ids:
            return product.id in product_ids
        return product.category in self.applicable_categories

    def calculate_discount(self, amount):
        amount = Decimal(amount)
        if not self.is_valid:
            return Decimal('0')
        if self.discount_type == self.DiscountType.PERCENTAGE:
            return min(amount * self.discount_value / 100, amount)
        if self.discount_type == self.DiscountType.FIXED_AMOUNT:
            return min(self.discount_value, amount)
        return Decimal('0')

    def redeem(self):
        """
        Increments used_count only while the offer is valid and under its
        usage limit. The check and the increment run as one UPDATE.
        """
        updated = Offer.objects.valid().filter(pk=self.pk).update(used_count=F('used_count') + 1)
        if not updated:
            if self.usage_limit is not None and self.used_count >= self.usage_limit:
                raise OfferNotRedeemable('Offer usage limit exceeded')
            raise OfferNotRedeemable('Offer is not valid')
        self.refresh_from_db(fields=['used_count'])
        return self.used_count


class HalalCertification(models.Model):

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        UNDER_REVIEW = 'under_review', 'Under review'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    CERTIFICATE_VALIDITY = timedelta(days=365)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='halal_certifications')
    business_name = models.CharField(max_length=100)
    business_type = models.CharField(max_length=100)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postcode = models.CharField(max_length=20)
    contact_name = models.CharField(max_length=100)
    contact_email = models.EmailField()
    details = models.TextField(blank=True, default='')
    supplier_info = models.TextField(blank=True, default='')
    submitted_documents = models.JSONField(default=list, blank=True, help_text="Document URLs")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_certifications'
    )
    review_notes = models.TextField(blank=True, default='')
    certificate_url = models.CharField(max_length=500, blank=True, default='')
    expiry_date = models.DateTimeField(null=True, blank=True)
    requested_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-requested_at']
        indexes = [
            models.Index(fields=['status'], name='halal_status_idx'),
        ]

    def __str__(self):
        return f"{self.business_name} ({self.status})"

    def save(self, *args, **kwargs):
        self.contact_email = self.contact_email.strip().lower()
        super().save(*args, **kwargs)

    def certificate_path(self):
        return f"/certificates/halal/{self.id}.pdf"
