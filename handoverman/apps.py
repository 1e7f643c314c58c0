"""Django app configuration for Handoverman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class HandovermanConfig(AppConfig):
    """Configuration for Handoverman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "handoverman"
    verbose_name = _("Inventory & Handovers")
