"""
Handover queries — read-only operations.

All methods are classmethods and use no locking.
"""

from handoverman.exceptions import ValidationFailed
from handoverman.models.enums import HandoverStatus
from handoverman.models.handover import Handover
from handoverman.services.lookups import product_pk


class HandoverQueries:
    """Read-only handover query methods."""

    @classmethod
    def for_employee(cls, employee, status: str | None = None):
        """Handovers of one employee, newest first ("my handovers")."""
        qs = Handover.objects.for_employee(employee).select_related('product')
        if status:
            if status not in HandoverStatus.values:
                raise ValidationFailed('INVALID_FIELD', fields=['status'], value=status)
            qs = qs.filter(status=status)
        return qs

    @classmethod
    def pending(cls):
        """Requests awaiting a manager's decision, oldest first."""
        return (
            Handover.objects.pending()
            .select_related('product', 'employee')
            .order_by('requested_at', 'pk')
        )

    @classmethod
    def outstanding(cls, product=None):
        """Handovers whose units are currently with employees."""
        qs = Handover.objects.outstanding().select_related('product', 'employee')
        if product is not None:
            qs = qs.filter(product_id=product_pk(product))
        return qs

    @classmethod
    def outstanding_quantity(cls, product) -> int:
        """
        Units of product currently handed over.

        stock_quantity + outstanding_quantity is what stock would be
        without any handovers.
        """
        return Handover.objects.filter(product_id=product_pk(product)).outstanding_quantity()

    @classmethod
    def counts_by_status(cls) -> dict[str, int]:
        """Number of handovers per status, every status present."""
        from django.db.models import Count

        counts = dict.fromkeys(HandoverStatus.values, 0)
        rows = Handover.objects.values('status').annotate(n=Count('pk')).order_by()
        for row in rows:
            counts[row['status']] = row['n']
        return counts
