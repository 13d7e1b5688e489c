from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import DeviceTokenRegisterView, NotificationViewSet

router = DefaultRouter()
router.include_root_view = False
router.register(r'', NotificationViewSet, basename='notification')

app_name = 'notifications'

urlpatterns = [
    path('device-tokens/register/', DeviceTokenRegisterView.as_view(), name='device-token-register'),
    path('', include(router.urls)),
]
