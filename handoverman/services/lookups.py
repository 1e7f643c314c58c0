"""
Argument resolution shared by the services.

Services accept either model instances or primary keys; these helpers
turn both into fresh rows and raise NotFound otherwise.
"""

from django.contrib.auth import get_user_model

from handoverman.exceptions import NotFound, ValidationFailed
from handoverman.models.handover import Handover
from handoverman.models.product import Product


def check_quantity(quantity, allow_zero: bool = False) -> int:
    """
    Raises:
        ValidationFailed('INVALID_QUANTITY'): If quantity is not a
            positive integer (or non-negative with allow_zero)
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationFailed('INVALID_QUANTITY', requested=quantity)
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise ValidationFailed('INVALID_QUANTITY', requested=quantity)
    return quantity


def require_text(value, code: str = 'REASON_REQUIRED', **data) -> str:
    """Strip value and refuse it when empty."""
    text = (value or '').strip()
    if not text:
        raise ValidationFailed(code, **data)
    return text


def product_pk(product) -> int:
    return product.pk if isinstance(product, Product) else product


def resolve_product(product) -> Product:
    """Re-read a product from the database."""
    pk = product_pk(product)
    try:
        return Product.objects.get(pk=pk)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise NotFound('PRODUCT_NOT_FOUND', product_id=pk) from None


def resolve_employee(employee):
    """Re-read an active auth user."""
    User = get_user_model()
    pk = employee.pk if isinstance(employee, User) else employee
    try:
        return User.objects.get(pk=pk, is_active=True)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound('EMPLOYEE_NOT_FOUND', employee_id=pk) from None


def parse_handover_id(handover_id) -> int:
    """Accept a Handover, its pk, or the "handover:{pk}" form."""
    if isinstance(handover_id, Handover):
        return handover_id.pk
    if isinstance(handover_id, int) and not isinstance(handover_id, bool):
        return handover_id
    if isinstance(handover_id, str):
        raw = handover_id.split(':', 1)[1] if handover_id.startswith('handover:') else handover_id
        if raw.isdigit():
            return int(raw)
    raise NotFound('HANDOVER_NOT_FOUND', handover_id=handover_id)


def get_handover(pk: int) -> Handover:
    try:
        return Handover.objects.select_related('product').get(pk=pk)
    except Handover.DoesNotExist:
        raise NotFound('HANDOVER_NOT_FOUND', handover_id=pk) from None
