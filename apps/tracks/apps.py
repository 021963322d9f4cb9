from django.apps import AppConfig


class TracksConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.tracks'
    verbose_name = 'Tracks'
