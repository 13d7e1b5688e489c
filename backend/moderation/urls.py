"""
URL routing for the administrator endpoints, mounted under /api/admin/.
"""
from django.urls import path
from .views import (
    ActivityLogView,
    AdminAccountDetailView,
    AdminAccountListView,
    AdminBusinessDetailView,
    AdminBusinessListView,
    AdminDashboardView,
    AdminHalalDetailView,
    AdminHalalListView,
    AdminMosqueDetailView,
    AdminMosqueListView,
    AdminUserListView,
    AdminUserRoleView,
    AdminUserStatsView,
    AdminVolunteerDetailView,
    AdminVolunteerListView,
    AnalyticsView,
    MosqueStatisticsView,
    RecentActivityView,
    StatsView,
)

app_name = 'moderation'

urlpatterns = [
    path('users/', AdminUserListView.as_view(), name='users'),
    path('users/stats/', AdminUserStatsView.as_view(), name='user-stats'),
    path('users/<uuid:pk>/role/', AdminUserRoleView.as_view(), name='user-role'),
    path('user-management/', AdminAccountListView.as_view(), name='admin-accounts'),
    path('user-management/<uuid:pk>/', AdminAccountDetailView.as_view(), name='admin-account-detail'),
    path('mosques/', AdminMosqueListView.as_view(), name='mosques'),
    path('mosques/<uuid:pk>/', AdminMosqueDetailView.as_view(), name='mosque-detail'),
    path('businesses/', AdminBusinessListView.as_view(), name='businesses'),
    path('businesses/<uuid:pk>/', AdminBusinessDetailView.as_view(), name='business-detail'),
    path('volunteers/', AdminVolunteerListView.as_view(), name='volunteers'),
    path('volunteers/<uuid:pk>/', AdminVolunteerDetailView.as_view(), name='volunteer-detail'),
    path('halal-certifications/', AdminHalalListView.as_view(), name='halal-certifications'),
    path('halal-certifications/<uuid:pk>/', AdminHalalDetailView.as_view(), name='halal-certification-detail'),
    path('analytics/', AnalyticsView.as_view(), name='analytics'),
    path('dashboard/', AdminDashboardView.as_view(), name='dashboard'),
    path('stats/', StatsView.as_view(), name='stats'),
    path('mosque-statistics/', MosqueStatisticsView.as_view(), name='mosque-statistics'),
    path('activity/', RecentActivityView.as_view(), name='recent-activity'),
    path('activity-logs/', ActivityLogView.as_view(), name='activity-logs'),
]
