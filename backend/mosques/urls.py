"""
URL routing for mosques app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ImamMosquesView, MosqueViewSet, PrayerTimesView

router = DefaultRouter()
router.include_root_view = False
router.register(r'mosques', MosqueViewSet, basename='mosque')

app_name = 'mosques'

urlpatterns = [
    path('imam/mosques/', ImamMosquesView.as_view(), name='imam-mosques'),
    path('prayer-times/', PrayerTimesView.as_view(), name='prayer-times'),
    path('', include(router.urls)),
]
