"""
Enums for Handoverman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class HandoverStatus(models.TextChoices):
    """
    Handover lifecycle status.

    PENDING:     Requested by an employee, awaiting a manager's decision.
    HANDED_OVER: Units left the stock and are held by the employee.
    RETURNED:    Units came back to stock. Terminal.
    REJECTED:    Request declined, stock never touched. Terminal.
    """
    PENDING = 'pending', _('Pending')              # Awaiting decision
    HANDED_OVER = 'handed_over', _('Handed over')  # Stock debited
    RETURNED = 'returned', _('Returned')           # Stock credited back
    REJECTED = 'rejected', _('Rejected')           # Never debited

    @classmethod
    def terminal(cls) -> set:
        return {cls.RETURNED, cls.REJECTED}

    @classmethod
    def holding_stock(cls) -> set:
        """Statuses whose quantity is missing from product stock."""
        return {cls.HANDED_OVER}


class ProductStatus(models.TextChoices):
    """Catalog status of a product."""
    ACTIVE = 'active', _('Active')
    INACTIVE = 'inactive', _('Inactive')
    DISCONTINUED = 'discontinued', _('Discontinued')


class StockUnit(models.TextChoices):
    """Unit the stock quantity is counted in."""
    PCS = 'pcs', _('Pieces')
    KG = 'kg', _('Kilograms')
    LBS = 'lbs', _('Pounds')
    LITERS = 'liters', _('Liters')
    METERS = 'meters', _('Meters')
    BOXES = 'boxes', _('Boxes')


class Role(models.TextChoices):
    """Staff role. Capabilities are derived from it."""
    ADMIN = 'admin', _('Admin')
    MANAGER = 'manager', _('Manager')
    EMPLOYEE = 'employee', _('Employee')
