from django.apps import AppConfig
from django.utils.module_loading import autodiscover_modules


class LiveComponentConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "live_component"
    verbose_name = "Live components"

    def ready(self):
        # Every installed app may declare its components in ``components.py``.
        autodiscover_modules("components")
