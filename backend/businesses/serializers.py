"""
DRF Serializers for businesses, products, offers and halal certification requests.
"""
import re

from rest_framework import serializers

from mosques.models import coordinates_valid
from .models import WEEKDAYS, Business, HalalCertification, Offer, Product

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class BusinessSerializer(serializers.ModelSerializer):
    """Owner-facing representation of a business"""

    tags = serializers.ListField(child=serializers.CharField(max_length=50, allow_blank=True), required=False)
    full_address = serializers.CharField(read_only=True)
    is_currently_open = serializers.SerializerMethodField()

    class Meta:
        model = Business
        fields = [
            'id',
            'owner',
            'name',
            'description',
            'category',
            'phone',
            'email',
            'website',
            'street',
            'city',
            'state',
            'zip_code',
            'country',
            'full_address',
            'latitude',
            'longitude',
            'hours',
            'logo',
            'banner',
            'gallery',
            'social_media',
            'shop_settings',
            'verification_status',
            'verification_notes',
            'verified_at',
            'status',
            'featured',
            'tags',
            'is_halal_certified',
            'is_currently_open',
            'total_products',
            'views',
            'average_rating',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'owner',
            'verification_status',
            'verification_notes',
            'verified_at',
            'status',
            'featured',
            'is_halal_certified',
            'total_products',
            'views',
            'average_rating',
            'created_at',
            'updated_at',
        ]

    def get_is_currently_open(self, obj):
        return obj.is_currently_open()

    def validate_hours(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Hours must be an object keyed by weekday')
        for day, hours in value.items():
            if day not in WEEKDAYS or not isinstance(hours, dict):
                raise serializers.ValidationError(f'Invalid hours entry: {day}')
            if hours.get('closed'):
                continue
            for key in ('open', 'close'):
                if not TIME_PATTERN.match(str(hours.get(key, ''))):
                    raise serializers.ValidationError(f'{day}.{key} must be HH:MM')
        return value

    def validate(self, attrs):
        lat = attrs.get('latitude', getattr(self.instance, 'latitude', None))
        lon = attrs.get('longitude', getattr(self.instance, 'longitude', None))
        if (lat is not None or lon is not None) and not coordinates_valid(lat, lon):
            raise serializers.ValidationError({'latitude': 'Invalid coordinates'})
        return attrs


class BusinessPublicSerializer(serializers.ModelSerializer):
    """Shop-front representation, without moderation details"""

    full_address = serializers.CharField(read_only=True)
    is_currently_open = serializers.SerializerMethodField()
    distance_meters = serializers.FloatField(read_only=True)

    class Meta:
        model = Business
        fields = [
            'id',
            'name',
            'description',
            'category',
            'phone',
            'email',
            'website',
            'full_address',
            'city',
            'state',
            'latitude',
            'longitude',
            'hours',
            'logo',
            'banner',
            'gallery',
            'social_media',
            'featured',
            'tags',
            'is_halal_certified',
            'is_currently_open',
            'average_rating',
            'distance_meters',
        ]

    def get_is_currently_open(self, obj):
        return obj.is_currently_open()


class ProductSerializer(serializers.ModelSerializer):
    tags = serializers.ListField(child=serializers.CharField(max_length=50, allow_blank=True), required=False)
    is_in_stock = serializers.SerializerMethodField()
    is_low_stock = serializers.BooleanField(read_only=True)
    discount_percentage = serializers.IntegerField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id',
            'business',
            'name',
            'description',
            'price',
            'compare_at_price',
            'category',
            'subcategory',
            'images',
            'stock',
            'unlimited',
            'track_inventory',
            'low_stock_threshold',
            'status',
            'featured',
            'tags',
            'slug',
            'is_in_stock',
            'is_low_stock',
            'discount_percentage',
            'views',
            'orders',
            'revenue',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'business', 'slug', 'views', 'orders', 'revenue', 'created_at', 'updated_at']

    def get_is_in_stock(self, obj):
        return obj.is_in_stock()


class OfferSerializer(serializers.ModelSerializer):
    code = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    applicable_products = serializers.PrimaryKeyRelatedField(
        many=True,
        required=False,
        queryset=Product.objects.none()
    )
    is_valid = serializers.BooleanField(read_only=True)
    days_remaining = serializers.IntegerField(read_only=True)
    usage_percentage = serializers.IntegerField(read_only=True)

    class Meta:
        model = Offer
        fields = [
            'id',
            'business',
            'title',
            'description',
            'discount_type',
            'discount_value',
            'applicable_products',
            'applicable_categories',
            'minimum_purchase',
            'valid_from',
            'valid_to',
            'status',
            'featured',
            'terms',
            'usage_limit',
            'used_count',
            'customer_limit',
            'code',
            'auto_apply',
            'priority',
            'image',
            'is_valid',
            'days_remaining',
            'usage_percentage',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'business', 'used_count', 'created_at', 'updated_at']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        business = self.context.get('business')
        if business is not None:
            self.fields['applicable_products'].child_relation.queryset = business.products.all()

    def validate_discount_value(self, value):
        if value <= 0:
            raise serializers.ValidationError('Discount value must be greater than 0')
        return value

    def validate_code(self, value):
        code = (value or '').strip().upper()
        if not code:
            return None
        clash = Offer.objects.filter(code=code)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError('Offer code already exists')
        return code

    def validate(self, attrs):
        def current(field):
            return attrs.get(field, getattr(self.instance, field, None))

        if current('discount_type') == Offer.DiscountType.PERCENTAGE and current('discount_value') > 100:
            raise serializers.ValidationError({'discount_value': 'Percentage discount cannot exceed 100%'})
        if current('valid_from') >= current('valid_to'):
            raise serializers.ValidationError({'valid_to': 'Valid to date must be after valid from date'})
        return attrs


class HalalCertificationSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(max_length=100, required=False)
    business_type = serializers.CharField(max_length=100, required=False)
    address = serializers.CharField(max_length=255, required=False)
    city = serializers.CharField(max_length=100, required=False)
    postcode = serializers.CharField(max_length=20, required=False)
    submitted_documents = serializers.ListField(child=serializers.URLField(), required=False)

    class Meta:
        model = HalalCertification
        fields = [
            'id',
            'business',
            'business_name',
            'business_type',
            'address',
            'city',
            'postcode',
            'contact_name',
            'contact_email',
            'details',
            'supplier_info',
            'submitted_documents',
            'status',
            'reviewer',
            'review_notes',
            'certificate_url',
            'expiry_date',
            'requested_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'business',
            'status',
            'reviewer',
            'review_notes',
            'certificate_url',
            'expiry_date',
            'requested_at',
            'updated_at',
        ]


class HalalReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=HalalCertification.Status.choices)
    review_notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)
