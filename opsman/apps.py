"""Django app configuration for Opsman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class OpsmanConfig(AppConfig):
    """Configuration for Opsman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "opsman"
    verbose_name = _("Operations")
