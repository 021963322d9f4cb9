from django.apps import AppConfig


class DailyUpdatesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.daily_updates'
    verbose_name = 'Daily Updates'
