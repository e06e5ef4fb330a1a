"""
Django Padaria app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class PadariaConfig(AppConfig):
    """Padaria application configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "padaria"
    verbose_name = _("Padaria")
