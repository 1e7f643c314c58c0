"""
Django Handoverman — inventory handovers with dense product IDs.

Usage:
    from handoverman import handovers, ProductCatalog, Actor, InventoryError

    catalog = ProductCatalog()
    drill = catalog.create(Actor.for_user(manager), 'Drill', stock_quantity=10)

    handover = handovers.request(Actor.for_user(employee), drill, 2, reason='Site visit')
    handovers.approve(Actor.for_user(manager), handover.pk)   # stock 8
    handovers.return_items(Actor.for_user(employee), handover.pk)  # stock 10
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name in ('handovers', 'Handovers'):
        from handoverman.service import Handovers
        return Handovers
    elif name == 'ProductCatalog':
        from handoverman.services.catalog import ProductCatalog
        return ProductCatalog
    elif name == 'IdentifierAllocator':
        from handoverman.allocator import IdentifierAllocator
        return IdentifierAllocator
    elif name in ('Actor', 'Capabilities'):
        from handoverman import permissions
        return getattr(permissions, name)
    elif name in (
        'InventoryError', 'ValidationFailed', 'InvalidState', 'InsufficientStock',
        'NotFound', 'ConcurrencyConflict', 'PermissionDenied', 'AllocatorError',
    ):
        from handoverman import exceptions
        return getattr(exceptions, name)
    elif name in (
        'Product', 'Handover', 'StockMovement', 'EmployeeProfile',
        'HandoverStatus', 'Role',
    ):
        from handoverman import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'handovers',
    'Handovers',
    'ProductCatalog',
    'IdentifierAllocator',
    'Actor',
    'Capabilities',
    'InventoryError',
    'ValidationFailed',
    'InvalidState',
    'InsufficientStock',
    'NotFound',
    'ConcurrencyConflict',
    'PermissionDenied',
    'AllocatorError',
    'Product',
    'Handover',
    'StockMovement',
    'EmployeeProfile',
    'HandoverStatus',
    'Role',
]

__version__ = '0.1.0'
