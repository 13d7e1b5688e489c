from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('core.urls')),
    path('api/user/', include('user.urls')),
    path('api/', include('mosques.urls')),
    path('api/', include('businesses.urls')),
    path('api/', include('volunteers.urls')),
    path('api/', include('announcements.urls')),
    path('api/admin/', include('moderation.urls')),
    path('api/notifications/', include('notifications.urls')),
]
