from django.contrib import admin

from .models import Mosque


@admin.register(Mosque)
class MosqueAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'state', 'imam', 'status', 'verified', 'created_at']
    list_filter = ['status', 'verified', 'state']
    search_fields = ['name', 'city', 'street', 'imam__email']
    readonly_fields = ['id', 'geohash', 'verified_by', 'verified_at', 'created_at', 'updated_at']
