"""
Handoverman Models.

Core models for inventory handovers:
- Product: Catalog item with sequential ID and stock cache
- IdentifierSequence / RecycledIdentifier: Allocator state
- StockMovement: Immutable ledger of stock changes
- Handover: Units held by an employee
- EmployeeProfile: Staff role
"""

from handoverman.models.enums import HandoverStatus, ProductStatus, Role, StockUnit
from handoverman.models.handover import Handover
from handoverman.models.movement import StockMovement
from handoverman.models.product import Product
from handoverman.models.profile import EmployeeProfile
from handoverman.models.sequence import IdentifierSequence, RecycledIdentifier

__all__ = [
    'HandoverStatus',
    'ProductStatus',
    'Role',
    'StockUnit',
    'Product',
    'IdentifierSequence',
    'RecycledIdentifier',
    'StockMovement',
    'Handover',
    'EmployeeProfile',
]
