"""
Identifier allocator — dense, recycled sequential IDs.

Hands out small human-facing integers ("product #12") and takes back the
ones freed by deletions, so the visible ID space has no permanent gaps.

Usage:
    allocator = IdentifierAllocator('product')

    allocator.acquire()   # 1, 2, 3 ...
    allocator.release(2)  # 2 goes to the recycled pool
    allocator.acquire()   # 2 (smallest recycled first)
    allocator.peek()      # AllocatorStatus(counter=3, recycled_count=0, live_range=(1, 3))

The allocator keeps no state in memory. Counter and pool live in
IdentifierSequence / RecycledIdentifier, and every operation is a single
atomic statement against them, so two concurrent acquire() calls can
never return the same value.
"""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q

from handoverman.conf import handoverman_settings
from handoverman.exceptions import AllocatorError
from handoverman.models.sequence import IdentifierSequence, RecycledIdentifier

logger = logging.getLogger('handoverman')


@dataclass(frozen=True)
class AllocatorStatus:
    """Read-only snapshot of an allocator."""

    counter: int
    recycled_count: int
    live_range: tuple[int, int] | None
    recycled: tuple[int, ...] = ()


@dataclass(frozen=True)
class ResyncResult:
    """Outcome of IdentifierAllocator.resync()."""

    counter_before: int
    counter_after: int
    dropped: tuple[int, ...]


class IdentifierAllocator:
    """
    Allocator bound to one named sequence.

    Pass an instance to whatever needs to create or delete identified
    records (see ProductCatalog); there is no module-level allocator.
    """

    def __init__(self, sequence: str | None = None):
        self.sequence = sequence or handoverman_settings.PRODUCT_SEQUENCE

    def __repr__(self) -> str:
        return f"IdentifierAllocator({self.sequence!r})"

    # ══════════════════════════════════════════════════════════════
    # HOT PATH
    # ══════════════════════════════════════════════════════════════

    def acquire(self) -> int:
        """
        Take the next identifier.

        Smallest recycled value first; otherwise the counter is
        incremented and its new value returned.

        Raises:
            AllocatorError('ALLOCATOR_UNAVAILABLE'): If storage fails and
                ALLOW_FALLBACK_IDENTIFIER is off
        """
        value, _ = self._acquire()
        return value

    def assign(self, obj) -> int:
        """
        Give obj a sequential_id unless it already has one.

        Sets obj.sequential_id_fallback when the value came from the
        degraded path. Does not save obj.
        """
        if obj.sequential_id:
            return obj.sequential_id
        value, fallback = self._acquire()
        obj.sequential_id = value
        obj.sequential_id_fallback = fallback
        return value

    def release(self, value: int) -> None:
        """
        Return an identifier to the recycled pool.

        Raises:
            AllocatorError('UNKNOWN_IDENTIFIER'): If value was never issued
            AllocatorError('ALREADY_RELEASED'): If value is already pooled
        """
        if value is None or value <= 0 or value > self._counter():
            raise AllocatorError('UNKNOWN_IDENTIFIER', sequence=self.sequence, value=value)

        try:
            with transaction.atomic():
                RecycledIdentifier.objects.create(sequence=self.sequence, value=value)
        except IntegrityError:
            logger.error(
                "allocator.double_release",
                extra={"sequence": self.sequence, "value": value},
            )
            raise AllocatorError('ALREADY_RELEASED', sequence=self.sequence, value=value) from None

        logger.info(
            "allocator.released",
            extra={"sequence": self.sequence, "value": value},
        )

    def claim(self, value: int) -> int:
        """
        Take a specific identifier chosen by the caller.

        In one transaction the value leaves the recycled pool and the
        counter is raised to at least value, so it can later be released
        and will never be issued again while live. Checking that no
        record already holds value is the caller's job.

        Raises:
            AllocatorError('UNKNOWN_IDENTIFIER'): If value is not positive
        """
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise AllocatorError('UNKNOWN_IDENTIFIER', sequence=self.sequence, value=value)

        with transaction.atomic():
            IdentifierSequence.objects.get_or_create(name=self.sequence)
            IdentifierSequence.objects.filter(
                name=self.sequence, value__lt=value,
            ).update(value=value)
            unpooled, _ = RecycledIdentifier.objects.filter(
                sequence=self.sequence, value=value,
            ).delete()

        logger.info(
            "allocator.claimed",
            extra={"sequence": self.sequence, "value": value, "from_pool": bool(unpooled)},
        )
        return value

    def _acquire(self) -> tuple[int, bool]:
        try:
            with transaction.atomic():
                value = self._pop_recycled()
                if value is not None:
                    logger.info(
                        "allocator.recycled",
                        extra={"sequence": self.sequence, "value": value},
                    )
                    return value, False

                value = self._increment()
                logger.info(
                    "allocator.issued",
                    extra={"sequence": self.sequence, "value": value},
                )
                return value, False
        except DatabaseError as exc:
            if not handoverman_settings.ALLOW_FALLBACK_IDENTIFIER:
                logger.error(
                    "allocator.unavailable",
                    extra={"sequence": self.sequence, "error": str(exc)},
                )
                raise AllocatorError('ALLOCATOR_UNAVAILABLE', sequence=self.sequence) from exc

        # Degraded mode: not recycled, not counted, may collide later
        value = int(time.time())
        logger.warning(
            "allocator.fallback",
            extra={"sequence": self.sequence, "value": value},
        )
        return value, True

    def _pop_recycled(self) -> int | None:
        """Compare-and-delete the smallest pooled value."""
        pool = RecycledIdentifier.objects.filter(sequence=self.sequence)
        while True:
            candidate = pool.order_by('value', 'released_at').values_list('pk', 'value').first()
            if candidate is None:
                return None
            pk, value = candidate
            deleted, _ = RecycledIdentifier.objects.filter(pk=pk).delete()
            if deleted:
                return value
            # Someone else took it between the read and the delete

    def _increment(self) -> int:
        IdentifierSequence.objects.get_or_create(name=self.sequence)
        IdentifierSequence.objects.filter(name=self.sequence).update(value=F('value') + 1)
        return IdentifierSequence.objects.values_list('value', flat=True).get(name=self.sequence)

    def _counter(self) -> int:
        value = (
            IdentifierSequence.objects.filter(name=self.sequence)
            .values_list('value', flat=True)
            .first()
        )
        return value or 0

    def _pool(self) -> list[int]:
        return list(
            RecycledIdentifier.objects.filter(sequence=self.sequence)
            .order_by('value')
            .values_list('value', flat=True)
        )

    # ══════════════════════════════════════════════════════════════
    # DIAGNOSTICS & TOOLING
    # ══════════════════════════════════════════════════════════════

    def peek(self) -> AllocatorStatus:
        """
        Snapshot of the counter and the pool.

        live_range is (lowest, highest) among issued values that are not
        in the recycled pool, or None when nothing is live.
        """
        counter = self._counter()
        pool = self._pool()
        pooled = set(pool)

        live = [v for v in range(1, counter + 1) if v not in pooled]
        live_range = (live[0], live[-1]) if live else None

        return AllocatorStatus(
            counter=counter,
            recycled_count=len(pool),
            live_range=live_range,
            recycled=tuple(pool),
        )

    def resync(self, assigned: Iterable[int]) -> ResyncResult:
        """
        Repair allocator state against the values actually in use.

        - Raises the counter to the highest assigned value (never lowers it)
        - Drops pooled values that are assigned or above the counter

        Args:
            assigned: Identifiers currently held by live records
        """
        assigned = {v for v in assigned if v}

        with transaction.atomic():
            IdentifierSequence.objects.get_or_create(name=self.sequence)
            before = self._counter()
            floor = max(assigned, default=0)
            if floor > before:
                IdentifierSequence.objects.filter(
                    name=self.sequence, value__lt=floor,
                ).update(value=floor)
            after = self._counter()

            stale = RecycledIdentifier.objects.filter(sequence=self.sequence).filter(
                Q(value__in=assigned) | Q(value__gt=after)
            )
            dropped = tuple(sorted(stale.values_list('value', flat=True)))
            stale.delete()

        if before != after or dropped:
            logger.warning(
                "allocator.resynced",
                extra={
                    "sequence": self.sequence,
                    "counter_before": before,
                    "counter_after": after,
                    "dropped": list(dropped),
                },
            )
        return ResyncResult(counter_before=before, counter_after=after, dropped=dropped)

    def clear_recycled(self) -> int:
        """Empty the recycled pool. Returns number of values dropped."""
        count, _ = RecycledIdentifier.objects.filter(sequence=self.sequence).delete()
        if count:
            logger.warning(
                "allocator.pool_cleared",
                extra={"sequence": self.sequence, "dropped": count},
            )
        return count
