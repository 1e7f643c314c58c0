"""
Handover lifecycle — request, direct handover, approve, reject, return, delete.

Every transition runs under transaction.atomic() and changes status with
a conditional UPDATE on the expected current status. The stock delta is
a StockMovement in the same transaction, so a lost race or a failed
stock guard leaves nothing behind.
"""

import functools
import logging

from django.db import transaction
from django.utils import timezone

from handoverman.conf import handoverman_settings
from handoverman.exceptions import (
    ConcurrencyConflict,
    InvalidState,
    PermissionDenied,
    ValidationFailed,
)
from handoverman.models.enums import HandoverStatus
from handoverman.models.handover import Handover
from handoverman.models.movement import StockMovement
from handoverman.services.lookups import (
    check_quantity,
    get_handover,
    parse_handover_id,
    require_text,
    resolve_employee,
    resolve_product,
)

logger = logging.getLogger('handoverman')


def retry_on_conflict(func):
    """Run a transition again, once, after a ConcurrencyConflict."""

    @functools.wraps(func)
    def wrapper(cls, *args, **kwargs):
        try:
            return func(cls, *args, **kwargs)
        except ConcurrencyConflict as exc:
            if not handoverman_settings.RETRY_ON_CONFLICT:
                raise
            logger.info(
                "handover.conflict.retry",
                extra={"operation": func.__name__, **exc.data},
            )
            return func(cls, *args, **kwargs)

    return wrapper


def _expect(handover: Handover, status: str) -> None:
    if handover.status != status:
        raise InvalidState(
            'INVALID_STATUS',
            handover_id=handover.pk,
            current=handover.status,
            expected=status,
        )


def _transition(handover: Handover, expected: str, **changes) -> Handover:
    """
    Move handover from expected to a new status in one statement.

    Raises:
        ConcurrencyConflict: If the stored status is no longer expected
    """
    changes.setdefault('updated_at', timezone.now())
    updated = Handover.objects.filter(pk=handover.pk, status=expected).update(**changes)
    if not updated:
        raise ConcurrencyConflict(
            'CONCURRENT_MODIFICATION',
            handover_id=handover.pk,
            expected=expected,
        )
    for field, value in changes.items():
        setattr(handover, field, value)
    return handover


class HandoverLifecycle:
    """Handover state machine with its stock effects."""

    @classmethod
    def request(cls, actor, product, quantity, reason, expected_return_date=None):
        """
        Employee asks for units of a product.

        Creates a PENDING handover for the actor. Stock is untouched
        until a manager approves.

        Raises:
            PermissionDenied: Without can_request_handover
            ValidationFailed: Bad quantity or missing reason
            NotFound: Unknown product
        """
        actor.require('can_request_handover')
        check_quantity(quantity)
        reason = require_text(reason)
        product = resolve_product(product)

        now = timezone.now()
        handover = Handover.objects.create(
            product=product,
            employee=actor.user,
            quantity=quantity,
            status=HandoverStatus.PENDING,
            reason=reason,
            expected_return_date=expected_return_date,
            requested_at=now,
            requested_by=actor.user,
            created_at=now,
        )
        logger.info(
            "handover.requested",
            extra={
                "handover_id": handover.pk,
                "product_id": product.pk,
                "employee_id": actor.user_id,
                "qty": quantity,
            },
        )
        return handover

    @classmethod
    def direct_handover(cls, actor, product, employee, quantity, notes='',
                        reason='', expected_return_date=None):
        """
        Manager hands units straight to an employee, skipping the request.

        Creates a HANDED_OVER handover and debits stock.

        Raises:
            PermissionDenied: Without can_manage_products
            InsufficientStock: If product stock < quantity
            NotFound: Unknown product or employee
        """
        actor.require('can_manage_products')
        check_quantity(quantity)
        product = resolve_product(product)
        employee = resolve_employee(employee)

        with transaction.atomic():
            now = timezone.now()
            handover = Handover.objects.create(
                product=product,
                employee=employee,
                quantity=quantity,
                status=HandoverStatus.HANDED_OVER,
                reason=(reason or '').strip(),
                expected_return_date=expected_return_date,
                handed_over_at=now,
                handed_over_by=actor.user,
                approval_notes=(notes or '').strip(),
                created_at=now,
            )
            StockMovement.objects.create(
                product_id=product.pk,
                delta=-quantity,
                reason=f"Handover #{handover.pk}",
                handover=handover,
                user=actor.user,
            )

        logger.info(
            "handover.direct",
            extra={
                "handover_id": handover.pk,
                "product_id": product.pk,
                "employee_id": employee.pk,
                "qty": quantity,
                "by": actor.user_id,
            },
        )
        return handover

    @classmethod
    @retry_on_conflict
    def approve(cls, actor, handover_id, notes=''):
        """
        Approve a pending request.

        Transition: PENDING -> HANDED_OVER, stock -= quantity

        Raises:
            InvalidState: If not PENDING
            InsufficientStock: If product stock < quantity
        """
        actor.require('can_manage_products')
        pk = parse_handover_id(handover_id)

        with transaction.atomic():
            handover = get_handover(pk)
            _expect(handover, HandoverStatus.PENDING)

            now = timezone.now()
            _transition(
                handover,
                HandoverStatus.PENDING,
                status=HandoverStatus.HANDED_OVER,
                decided_by=actor.user,
                decision_at=now,
                handed_over_by=actor.user,
                handed_over_at=now,
                approval_notes=(notes or '').strip(),
            )
            StockMovement.objects.create(
                product_id=handover.product_id,
                delta=-handover.quantity,
                reason=f"Handover #{handover.pk}",
                handover=handover,
                user=actor.user,
            )

        logger.info(
            "handover.approved",
            extra={"handover_id": pk, "qty": handover.quantity, "by": actor.user_id},
        )
        return handover

    @classmethod
    @retry_on_conflict
    def reject(cls, actor, handover_id, reason):
        """
        Decline a pending request.

        Transition: PENDING -> REJECTED, no stock change

        Raises:
            ValidationFailed('REASON_REQUIRED'): If reason is empty
            InvalidState: If not PENDING
        """
        actor.require('can_manage_products')
        reason = require_text(reason)
        pk = parse_handover_id(handover_id)

        with transaction.atomic():
            handover = get_handover(pk)
            _expect(handover, HandoverStatus.PENDING)
            _transition(
                handover,
                HandoverStatus.PENDING,
                status=HandoverStatus.REJECTED,
                decided_by=actor.user,
                decision_at=timezone.now(),
                rejection_reason=reason,
            )

        logger.info(
            "handover.rejected",
            extra={"handover_id": pk, "reason": reason, "by": actor.user_id},
        )
        return handover

    @classmethod
    @retry_on_conflict
    def return_items(cls, actor, handover_id, quantity=None, notes=''):
        """
        Take handed-over units back into stock.

        Managers may record any return; employees with can_return_handover
        only their own. Returns are all-or-nothing: quantity defaults to
        the handed-over quantity and must equal it.

        Transition: HANDED_OVER -> RETURNED, stock += quantity

        Raises:
            PermissionDenied: Not a manager and not the owning employee
            ValidationFailed: Quantity missing, too big or partial
            InvalidState: If not HANDED_OVER
        """
        if not actor.can('can_manage_products'):
            actor.require('can_return_handover')
        pk = parse_handover_id(handover_id)

        with transaction.atomic():
            handover = get_handover(pk)

            if not actor.can('can_manage_products') and handover.employee_id != actor.user_id:
                raise PermissionDenied(
                    'NOT_ALLOWED',
                    handover_id=pk,
                    user_id=actor.user_id,
                )

            returned = handover.quantity if quantity is None else check_quantity(quantity)
            if returned > handover.quantity:
                raise ValidationFailed(
                    'RETURN_EXCEEDS_QUANTITY',
                    requested=returned,
                    borrowed=handover.quantity,
                )
            if returned < handover.quantity:
                raise ValidationFailed(
                    'PARTIAL_RETURN_UNSUPPORTED',
                    requested=returned,
                    borrowed=handover.quantity,
                )

            _expect(handover, HandoverStatus.HANDED_OVER)
            _transition(
                handover,
                HandoverStatus.HANDED_OVER,
                status=HandoverStatus.RETURNED,
                returned_at=timezone.now(),
                returned_by=actor.user,
                returned_quantity=returned,
                return_notes=(notes or '').strip(),
            )
            StockMovement.objects.create(
                product_id=handover.product_id,
                delta=returned,
                reason=f"Return of handover #{handover.pk}",
                handover=handover,
                user=actor.user,
            )

        logger.info(
            "handover.returned",
            extra={"handover_id": pk, "qty": returned, "by": actor.user_id},
        )
        return handover

    @classmethod
    @retry_on_conflict
    def delete(cls, actor, handover_id):
        """
        Remove a handover in any status.

        A HANDED_OVER handover gives its quantity back to stock before it
        disappears; other statuses never held stock. Irreversible.

        Returns:
            The deleted Handover (no longer in the database)
        """
        actor.require('can_manage_products')
        pk = parse_handover_id(handover_id)

        with transaction.atomic():
            handover = get_handover(pk)
            status = handover.status

            _, per_model = Handover.objects.filter(pk=pk, status=status).delete()
            if not per_model.get(Handover._meta.label, 0):
                raise ConcurrencyConflict(
                    'CONCURRENT_MODIFICATION',
                    handover_id=pk,
                    expected=status,
                )

            restored = 0
            if status in HandoverStatus.holding_stock():
                restored = handover.quantity
                StockMovement.objects.create(
                    product_id=handover.product_id,
                    delta=restored,
                    reason=f"Deleted handover #{pk}",
                    user=actor.user,
                    metadata={'handover_id': pk, 'status': status},
                )

        logger.info(
            "handover.deleted",
            extra={
                "handover_id": pk,
                "status": status,
                "restored": restored,
                "by": actor.user_id,
            },
        )
        return handover
