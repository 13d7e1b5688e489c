"""
URL routing for announcements app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    AdminAnnouncementViewSet,
    BusinessAnnouncementViewSet,
    PublicAnnouncementDetailView,
    PublicAnnouncementsView,
)

router = DefaultRouter()
router.include_root_view = False
router.register(r'business/announcements', BusinessAnnouncementViewSet, basename='business-announcement')
router.register(r'admin/announcements', AdminAnnouncementViewSet, basename='admin-announcement')

app_name = 'announcements'

urlpatterns = [
    path('announcements/public/', PublicAnnouncementsView.as_view(), name='public-announcements'),
    path('announcements/public/<uuid:pk>/', PublicAnnouncementDetailView.as_view(), name='public-announcement-detail'),
    path('', include(router.urls)),
]
