from django.contrib import admin

from .models import Announcement


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'priority', 'business', 'is_admin_announcement', 'is_active', 'start_date']
    list_filter = ['type', 'priority', 'is_active', 'is_admin_announcement', 'target_audience']
    search_fields = ['title', 'content', 'business__name']
    readonly_fields = ['id', 'view_count', 'created_at', 'updated_at']
