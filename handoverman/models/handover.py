"""
Handover model — units of a product held by an employee.
"""

from django.conf import settings
from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from handoverman.models.enums import HandoverStatus


class HandoverQuerySet(models.QuerySet):
    """Helper filters for handover queries."""

    def pending(self):
        return self.filter(status=HandoverStatus.PENDING)

    def outstanding(self):
        """Handovers whose units are currently out of stock."""
        return self.filter(status__in=HandoverStatus.holding_stock())

    def for_employee(self, employee):
        return self.filter(employee=employee)

    def for_product(self, product):
        return self.filter(product=product)

    def outstanding_quantity(self) -> int:
        return self.outstanding().aggregate(t=Coalesce(Sum('quantity'), 0))['t']


class Handover(models.Model):
    """
    N units of a product handed to an employee.

    LIFECYCLE:

    ┌──────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │  request()                                                       │
    │ ──────────► ┌─────────┐  approve()  ┌─────────────┐  return()    │
    │             │ PENDING │ ──────────► │ HANDED_OVER │ ───────────► │
    │             └─────────┘             └─────────────┘   RETURNED   │
    │                  │                        ▲                      │
    │                  │ reject()               │ direct_handover()    │
    │                  ▼                        │                      │
    │              REJECTED               ──────┘                      │
    │                                                                  │
    │  delete(): any status; restores stock iff HANDED_OVER            │
    └──────────────────────────────────────────────────────────────────┘

    STOCK:
    - approve() / direct_handover() debit product stock by quantity
    - return() / delete() while HANDED_OVER credit it back, once

    Status only changes through Handovers (services.handovers) using a
    conditional update on the expected current status.
    """

    product = models.ForeignKey(
        'handoverman.Product',
        on_delete=models.CASCADE,
        related_name='handovers',
        verbose_name=_('Product'),
    )
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='handovers',
        verbose_name=_('Employee'),
    )
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))

    status = models.CharField(
        max_length=20,
        choices=HandoverStatus.choices,
        default=HandoverStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )

    reason = models.CharField(max_length=500, blank=True, default='', verbose_name=_('Reason'))
    expected_return_date = models.DateField(null=True, blank=True, verbose_name=_('Expected return date'))

    # Lifecycle timestamps, each set once by the transition producing it
    requested_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Requested at'))
    decision_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Decided at'))
    handed_over_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Handed over at'))
    returned_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Returned at'))

    # Actors
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Requested by'),
    )
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Decided by'),
    )
    handed_over_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Handed over by'),
    )
    returned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Return recorded by'),
    )

    approval_notes = models.TextField(blank=True, default='', verbose_name=_('Approval notes'))
    rejection_reason = models.TextField(blank=True, default='', verbose_name=_('Rejection reason'))
    return_notes = models.TextField(blank=True, default='', verbose_name=_('Return notes'))
    returned_quantity = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Returned quantity'))

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = HandoverQuerySet.as_manager()

    class Meta:
        verbose_name = _('Handover')
        verbose_name_plural = _('Handovers')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'product'], name='hm_handover_status_prod_idx'),
            models.Index(fields=['employee', 'status'], name='hm_handover_emp_status_idx'),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == HandoverStatus.PENDING

    @property
    def is_outstanding(self) -> bool:
        """Are the units currently with the employee?"""
        return self.status in HandoverStatus.holding_stock()

    @property
    def is_terminal(self) -> bool:
        return self.status in HandoverStatus.terminal()

    @property
    def handover_id(self) -> str:
        """Return handover identifier in standard format."""
        return f"handover:{self.pk}"

    def __str__(self) -> str:
        status_emoji = {
            HandoverStatus.PENDING: '⏳',
            HandoverStatus.HANDED_OVER: '📦',
            HandoverStatus.RETURNED: '↩',
            HandoverStatus.REJECTED: '✗',
        }
        emoji = status_emoji.get(self.status, '?')
        return f"{emoji} {self.quantity}x {self.product} → {self.employee}"
