from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class WebhooksConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.webhooks"

    def ready(self):
        if not getattr(settings, "META_APP_SECRET", ""):
            raise ImproperlyConfigured("META_APP_SECRET must be set to verify lead webhooks")
