"""
Low stock alerts.

Usage:
    from handoverman.services.alerts import check_low_stock

    # Run periodically (celery beat, cron) or after stock changes
    triggered = check_low_stock()
    # Returns list of (Product, shortfall) tuples
"""

import logging

from handoverman.models.product import Product
from handoverman.services.lookups import product_pk

logger = logging.getLogger('handoverman')


def check_low_stock(product=None) -> list[tuple[Product, int]]:
    """
    Return active products whose stock is below their min_stock.

    Args:
        product: Optional product to check (None = all).

    Returns:
        List of (product, shortfall) tuples, most urgent first.
    """
    qs = Product.objects.active().low_stock()
    if product is not None:
        qs = qs.filter(pk=product_pk(product))

    triggered = []
    for item in qs.order_by('sequential_id'):
        shortfall = item.min_stock - item.stock_quantity
        triggered.append((item, shortfall))
        logger.warning(
            "product.low_stock",
            extra={
                "product_id": item.pk,
                "sequential_id": item.sequential_id,
                "stock": item.stock_quantity,
                "min_stock": item.min_stock,
            },
        )

    triggered.sort(key=lambda pair: pair[1], reverse=True)
    return triggered
