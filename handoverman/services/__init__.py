"""
Handover services — modular organization of inventory operations.

    from handoverman.services import HandoverLifecycle, HandoverQueries, ProductCatalog
"""

from handoverman.services.catalog import ProductCatalog
from handoverman.services.handovers import HandoverLifecycle
from handoverman.services.queries import HandoverQueries

__all__ = [
    'ProductCatalog',
    'HandoverLifecycle',
    'HandoverQueries',
]
