"""
Product catalog — create, update, delete and stock entries.

The catalog is the only caller of the identifier allocator: it acquires
an ID before a product is persisted and releases it once the row is
gone, both inside the same transaction as the product write.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from handoverman.allocator import IdentifierAllocator
from handoverman.exceptions import InvalidState, NotFound, ValidationFailed
from handoverman.models.handover import Handover
from handoverman.models.movement import StockMovement
from handoverman.models.product import Product
from handoverman.services.lookups import (
    check_quantity,
    product_pk,
    require_text,
    resolve_product,
)

logger = logging.getLogger('handoverman')

EDITABLE_FIELDS = frozenset({
    'name',
    'description',
    'unit',
    'location',
    'status',
    'min_stock',
})


def _check_fields(fields: dict, allowed=EDITABLE_FIELDS) -> None:
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise ValidationFailed('INVALID_FIELD', fields=unknown)


def _validate(product: Product, only=None) -> None:
    """
    Run model validation (choices, lengths, bounds) on product.

    Args:
        only: Field names to validate (None = every field)

    Raises:
        ValidationFailed('INVALID_FIELD'): Listing the offending fields
    """
    exclude = None
    if only is not None:
        exclude = [f.name for f in Product._meta.fields if f.name not in only]
    try:
        product.full_clean(exclude=exclude, validate_unique=False)
    except DjangoValidationError as exc:
        raise ValidationFailed('INVALID_FIELD', fields=sorted(exc.message_dict)) from None


class ProductCatalog:
    """
    Product CRUD and stock entries.

    Usage:
        catalog = ProductCatalog(IdentifierAllocator('product'))
        product = catalog.create(actor, 'Drill', stock_quantity=10)
        catalog.restock(actor, product, 5)
    """

    def __init__(self, allocator: IdentifierAllocator | None = None):
        self.allocator = allocator or IdentifierAllocator()

    # ══════════════════════════════════════════════════════════════
    # CRUD
    # ══════════════════════════════════════════════════════════════

    def create(self, actor, name, stock_quantity=0, sequential_id=None, **fields):
        """
        Create a product with a sequential ID.

        An explicit sequential_id is claimed from the allocator (taken
        out of the recycled pool, counter raised to cover it) so it can
        be recycled like any other.
        Initial stock is recorded as the first ledger movement.

        Raises:
            PermissionDenied: Without can_add_products
            ValidationFailed: Empty name, bad quantity, unknown field or
                invalid field value
            InvalidState('IDENTIFIER_IN_USE'): Explicit ID already taken
            AllocatorError: If no ID could be allocated
        """
        actor.require('can_add_products')
        _check_fields(fields)
        name = require_text(name, 'INVALID_FIELD', fields=['name'])
        check_quantity(stock_quantity, allow_zero=True)

        product = Product(
            name=name,
            created_by=actor.user,
            updated_by=actor.user,
            **fields,
        )
        _validate(product)

        with transaction.atomic():
            if sequential_id is None:
                self.allocator.assign(product)
                product.save()
            else:
                self._save_with_claimed_id(product, sequential_id)

            if stock_quantity:
                StockMovement.objects.create(
                    product=product,
                    delta=stock_quantity,
                    reason='Initial stock',
                    user=actor.user,
                )
                product.refresh_from_db()

        logger.info(
            "product.created",
            extra={
                "product_id": product.pk,
                "sequential_id": product.sequential_id,
                "fallback_id": product.sequential_id_fallback,
                "stock": product.stock_quantity,
            },
        )
        return product

    def _save_with_claimed_id(self, product: Product, value) -> None:
        # Runs inside create()'s transaction: a refusal below undoes the claim
        self.allocator.claim(value)
        if Product.objects.filter(sequential_id=value).exists():
            raise InvalidState('IDENTIFIER_IN_USE', sequential_id=value)

        product.sequential_id = value
        try:
            with transaction.atomic():
                product.save()
        except IntegrityError:
            # Lost the unique sequential_id to a concurrent create
            raise InvalidState('IDENTIFIER_IN_USE', sequential_id=value) from None

    def update(self, actor, product, **fields):
        """
        Update descriptive fields.

        Stock and sequential ID are not editable here: stock changes go
        through restock/record_usage/adjust.
        """
        actor.require('can_edit_products')
        _check_fields(fields)
        if 'name' in fields:
            fields['name'] = require_text(fields['name'], 'INVALID_FIELD', fields=['name'])

        product = resolve_product(product)
        for field, value in fields.items():
            setattr(product, field, value)
        _validate(product, only=fields)
        product.updated_by = actor.user
        product.save(update_fields=[*fields, 'updated_by', 'updated_at'])

        logger.info(
            "product.updated",
            extra={"product_id": product.pk, "fields": sorted(fields)},
        )
        return product

    def delete(self, actor, product) -> int | None:
        """
        Delete a product and recycle its sequential ID.

        Refused while units are handed over: the outstanding stock would
        otherwise be lost. Handover history and ledger go with it.

        Returns:
            The released sequential ID (None for fallback IDs)

        Raises:
            InvalidState('PRODUCT_IN_USE'): If handovers are outstanding
            NotFound: Unknown product
        """
        actor.require('can_delete_products')
        pk = product_pk(product)

        with transaction.atomic():
            product = resolve_product(pk)
            outstanding = Handover.objects.filter(product_id=pk).outstanding_quantity()
            if outstanding:
                raise InvalidState('PRODUCT_IN_USE', product_id=pk, outstanding=outstanding)

            _, per_model = Product.objects.filter(pk=pk).delete()
            if not per_model.get(Product._meta.label, 0):
                raise NotFound('PRODUCT_NOT_FOUND', product_id=pk)

            released = None
            if product.sequential_id and not product.sequential_id_fallback:
                self.allocator.release(product.sequential_id)
                released = product.sequential_id

        logger.info(
            "product.deleted",
            extra={"product_id": pk, "sequential_id": product.sequential_id},
        )
        return released

    # ══════════════════════════════════════════════════════════════
    # STOCK ENTRIES
    # ══════════════════════════════════════════════════════════════

    def restock(self, actor, product, quantity, reason='Restock'):
        """Stock entry. Returns the movement."""
        actor.require('can_manage_products')
        check_quantity(quantity)
        reason = require_text(reason)

        move = StockMovement.objects.create(
            product_id=product_pk(product),
            delta=quantity,
            reason=reason,
            user=actor.user,
        )
        logger.info(
            "product.restock",
            extra={"product_id": move.product_id, "qty": quantity, "reason": reason},
        )
        return move

    def record_usage(self, actor, product, quantity, reason):
        """
        Stock consumed internally.

        Raises:
            InsufficientStock: If quantity > stock
        """
        actor.require('can_manage_products')
        check_quantity(quantity)
        reason = require_text(reason)

        move = StockMovement.objects.create(
            product_id=product_pk(product),
            delta=-quantity,
            reason=f"Usage: {reason}",
            user=actor.user,
        )
        logger.info(
            "product.usage",
            extra={"product_id": move.product_id, "qty": quantity, "reason": reason},
        )
        return move

    def adjust(self, actor, product, new_quantity, reason):
        """
        Inventory count adjustment.

        Calculates delta automatically: new_quantity - current stock,
        with the product row locked while doing so.

        Returns:
            The movement, or None when stock already matches
        """
        actor.require('can_manage_products')
        check_quantity(new_quantity, allow_zero=True)
        reason = require_text(reason)
        pk = product_pk(product)

        with transaction.atomic():
            try:
                locked = Product.objects.select_for_update().get(pk=pk)
            except Product.DoesNotExist:
                raise NotFound('PRODUCT_NOT_FOUND', product_id=pk) from None

            delta = new_quantity - locked.stock_quantity
            if delta == 0:
                return None

            move = StockMovement.objects.create(
                product=locked,
                delta=delta,
                reason=f"Adjustment: {reason}",
                user=actor.user,
                metadata={'counted': new_quantity, 'counted_at': timezone.now().isoformat()},
            )

        logger.info(
            "product.adjust",
            extra={"product_id": pk, "delta": delta, "reason": reason},
        )
        return move
