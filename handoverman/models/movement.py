"""
StockMovement model — Immutable ledger of stock changes.
"""

from django.conf import settings
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class StockMovement(models.Model):
    """
    Immutable record of a stock change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new movements with inverse delta
    - Updates Product.stock_quantity atomically on save()

    This is the ONLY model that changes stock_quantity.
    """

    product = models.ForeignKey(
        'handoverman.Product',
        on_delete=models.CASCADE,
        related_name='movements',
        verbose_name=_('Product'),
    )
    delta = models.IntegerField(
        verbose_name=_('Delta'),
        help_text=_('Positive = stock in, negative = stock out'),
    )
    reason = models.CharField(
        max_length=255,
        verbose_name=_('Reason'),
        help_text=_('Required. E.g. "Restock", "Handover #12"'),
    )
    handover = models.ForeignKey(
        'handoverman.Handover',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Handover'),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('User'),
    )

    class Meta:
        verbose_name = _('Stock movement')
        verbose_name_plural = _('Stock movements')
        ordering = ['timestamp']
        indexes = [
            models.Index(fields=['product', 'timestamp'], name='hm_movement_product_ts_idx'),
        ]

    def save(self, *args, **kwargs):
        """
        Save movement and apply its delta to the product atomically.

        Raises:
            InsufficientStock: If a negative delta would drive stock below 0
            NotFound: If the product no longer exists
        """
        if self.pk:
            raise ValueError(
                "Stock movements are immutable. "
                "To correct one, create a new movement with the inverse delta."
            )

        if not self.reason:
            raise ValueError("Reason is required")
        if not self.delta:
            raise ValueError("Delta must be non-zero")

        from handoverman.exceptions import InsufficientStock, NotFound
        from handoverman.models.product import Product

        with transaction.atomic():
            now = timezone.now()
            target = Product.objects.filter(pk=self.product_id)
            changes = {
                'stock_quantity': F('stock_quantity') + self.delta,
                'updated_at': now,
            }
            if self.delta < 0:
                # Guard and decrement in a single statement
                target = target.filter(stock_quantity__gte=-self.delta)
            else:
                changes['last_restocked_at'] = now

            if not target.update(**changes):
                current = (
                    Product.objects.filter(pk=self.product_id)
                    .values_list('stock_quantity', flat=True)
                    .first()
                )
                if current is None:
                    raise NotFound('PRODUCT_NOT_FOUND', product_id=self.product_id)
                raise InsufficientStock(
                    'INSUFFICIENT_STOCK',
                    available=current,
                    requested=-self.delta,
                )

            super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — movements are immutable."""
        raise ValueError(
            "Stock movements are immutable. "
            "To reverse one, create a new movement with the inverse delta."
        )

    def __str__(self) -> str:
        signal = '+' if self.delta > 0 else ''
        return f"{signal}{self.delta} | {self.reason}"
