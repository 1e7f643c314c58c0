"""
EmployeeProfile model — role of a staff member.
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from handoverman.models.enums import Role


class EmployeeProfile(models.Model):
    """
    Inventory role attached to an auth user.

    Only the role is stored. Capability flags are derived from it by
    handoverman.permissions so a role change takes effect immediately.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='inventory_profile',
        verbose_name=_('User'),
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.EMPLOYEE,
        db_index=True,
        verbose_name=_('Role'),
    )
    phone = models.CharField(max_length=30, blank=True, default='', verbose_name=_('Phone'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Employee profile')
        verbose_name_plural = _('Employee profiles')

    def __str__(self) -> str:
        return f"{self.user} ({self.get_role_display()})"
