"""
Product model — catalog item with a human-facing sequential ID and stock.
"""

import logging

from django.conf import settings
from django.db import models
from django.db.models import F, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from handoverman.models.enums import ProductStatus, StockUnit

logger = logging.getLogger('handoverman')


class ProductQuerySet(models.QuerySet):
    """Helper filters for product queries."""

    def active(self):
        return self.filter(status=ProductStatus.ACTIVE)

    def out_of_stock(self):
        return self.filter(stock_quantity=0)

    def low_stock(self):
        """Products whose stock dropped below their min_stock."""
        return self.filter(stock_quantity__lt=F('min_stock'))

    def search(self, term: str):
        """Match name, description or sequential ID (numeric terms)."""
        query = models.Q(name__icontains=term) | models.Q(description__icontains=term)
        if term.strip().isdigit():
            query |= models.Q(sequential_id=int(term))
        return self.filter(query)


class Product(models.Model):
    """
    Product in the inventory.

    Two identifiers:
    - pk: opaque storage key, never reused
    - sequential_id: small, dense number shown to people ("#12"),
      handed out by IdentifierAllocator and recycled after deletion

    stock_quantity is a cache kept by StockMovement.save(). Never assign
    it directly; go through ProductCatalog or Handovers.
    """

    sequential_id = models.PositiveIntegerField(
        unique=True,
        null=True,
        blank=True,
        verbose_name=_('Product ID'),
        help_text=_('Sequential, human-facing identifier'),
    )
    sequential_id_fallback = models.BooleanField(
        default=False,
        verbose_name=_('Fallback ID'),
        help_text=_('ID was generated while the allocator was unavailable'),
    )

    name = models.CharField(max_length=100, verbose_name=_('Name'))
    description = models.CharField(
        max_length=500,
        blank=True,
        default='',
        verbose_name=_('Description'),
    )
    unit = models.CharField(
        max_length=10,
        choices=StockUnit.choices,
        default=StockUnit.PCS,
        verbose_name=_('Unit'),
    )
    location = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Location'))
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
        db_index=True,
        verbose_name=_('Status'),
    )

    # Stock cache (updated atomically by StockMovement)
    stock_quantity = models.PositiveIntegerField(
        default=0,
        db_index=True,
        verbose_name=_('Stock quantity'),
    )
    min_stock = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Minimum stock'),
        help_text=_('Low stock alert threshold'),
    )
    last_restocked_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Last restocked'))

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Created by'),
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Updated by'),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['sequential_id']
        indexes = [
            models.Index(fields=['name', 'status'], name='hm_product_name_status_idx'),
            models.Index(fields=['stock_quantity', 'status'], name='hm_product_stock_status_idx'),
        ]

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock_quantity == 0

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity < self.min_stock

    def recalculate(self) -> int:
        """
        Recalculate stock_quantity from the movement ledger.

        Use for integrity audits or after a detected inconsistency.

        Returns:
            New calculated quantity
        """
        total = self.movements.aggregate(t=Coalesce(Sum('delta'), 0))['t']

        if total != self.stock_quantity:
            old = self.stock_quantity
            Product.objects.filter(pk=self.pk).update(stock_quantity=total)
            self.stock_quantity = total
            logger.warning(
                "product.stock.recalculated",
                extra={"product_id": self.pk, "old": old, "new": total, "diff": total - old},
            )

        return total

    def __str__(self) -> str:
        if self.sequential_id is None:
            return self.name
        return f"#{self.sequential_id} {self.name}"
