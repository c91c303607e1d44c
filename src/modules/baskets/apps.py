from django.apps import AppConfig


class BasketsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.baskets"
    label = "baskets"
