from django.contrib import admin

from .models import NeedApplicant, Volunteer, VolunteerApplication, VolunteerNeed, VolunteerOffer


@admin.register(Volunteer)
class VolunteerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'mosque', 'status', 'current_assignment', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'email']
    readonly_fields = ['id', 'reviewed_by', 'reviewed_at', 'assigned_by', 'assignment_date', 'created_at']


class NeedApplicantInline(admin.TabularInline):
    model = NeedApplicant
    extra = 0
    readonly_fields = ['user', 'message', 'applied_at']


@admin.register(VolunteerNeed)
class VolunteerNeedAdmin(admin.ModelAdmin):
    list_display = ['title', 'mosque', 'category', 'urgency', 'volunteers_needed', 'status']
    list_filter = ['category', 'urgency', 'status']
    search_fields = ['title', 'mosque__name']
    inlines = [NeedApplicantInline]


@admin.register(VolunteerOffer)
class VolunteerOfferAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'category', 'target_mosque', 'status']
    list_filter = ['category', 'status']


@admin.register(VolunteerApplication)
class VolunteerApplicationAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'mosque', 'category', 'status', 'priority', 'created_at']
    list_filter = ['category', 'status', 'priority']
    search_fields = ['title', 'contact_email', 'mosque__name']
    readonly_fields = ['id', 'responded_by', 'responded_at', 'created_at', 'updated_at']
