"""
Handoverman configuration.

Usage in settings.py:
    HANDOVERMAN = {
        "PRODUCT_SEQUENCE": "product",
        "ALLOW_FALLBACK_IDENTIFIER": False,
        "RETRY_ON_CONFLICT": True,
        "DEFAULT_ROLE": "employee",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class HandovermanSettings:
    """Handoverman configuration settings."""

    # Name of the identifier sequence used for product IDs
    PRODUCT_SEQUENCE: str = "product"

    # Hand out a timestamp-based ID when the allocator storage fails
    # instead of failing product creation
    ALLOW_FALLBACK_IDENTIFIER: bool = False

    # Retry a transition once after losing a conditional update
    RETRY_ON_CONFLICT: bool = True

    # Role assumed for users without an EmployeeProfile
    DEFAULT_ROLE: str = "employee"


def get_handoverman_settings() -> HandovermanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "HANDOVERMAN", {})
    return HandovermanSettings(**{
        k: v for k, v in user_settings.items()
        if k in HandovermanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_handoverman_settings(), name)


handoverman_settings = _LazySettings()
