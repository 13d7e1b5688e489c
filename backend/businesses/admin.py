from django.contrib import admin

from .models import Business, HalalCertification, Offer, Product


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'city', 'owner', 'verification_status', 'status', 'featured']
    list_filter = ['category', 'verification_status', 'status', 'is_halal_certified']
    search_fields = ['name', 'city', 'owner__email']
    readonly_fields = ['id', 'geohash', 'verified_by', 'verified_at', 'views', 'created_at', 'updated_at']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'price', 'stock', 'status']
    list_filter = ['status', 'featured']
    search_fields = ['name', 'slug', 'business__name']
    readonly_fields = ['id', 'slug', 'views', 'orders', 'revenue', 'created_at', 'updated_at']


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = ['title', 'business', 'discount_type', 'discount_value', 'status', 'used_count', 'valid_to']
    list_filter = ['discount_type', 'status', 'featured']
    search_fields = ['title', 'code', 'business__name']
    readonly_fields = ['id', 'used_count', 'created_at', 'updated_at']


@admin.register(HalalCertification)
class HalalCertificationAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'city', 'status', 'reviewer', 'expiry_date', 'requested_at']
    list_filter = ['status']
    search_fields = ['business_name', 'contact_email']
    readonly_fields = ['id', 'requested_at', 'updated_at']
