"""
URL configuration for the project management backend.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs
    path('notifications/', include('apps.notifications.urls', namespace='notifications')),
    path('daily-updates/', include('apps.daily_updates.urls', namespace='daily_updates')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

    # Debug toolbar
    if 'debug_toolbar' in settings.INSTALLED_APPS:
        import debug_toolbar
        urlpatterns = [
            path('__debug__/', include(debug_toolbar.urls)),
        ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Masar PM Administration'
admin.site.site_title = 'Masar PM Admin'
admin.site.index_title = 'Welcome to Masar PM Admin'
