"""
Tests for IdentifierAllocator.
"""

import pytest
from django.db import DatabaseError

from handoverman.allocator import IdentifierAllocator
from handoverman.exceptions import AllocatorError
from handoverman.models import IdentifierSequence, Product, RecycledIdentifier


pytestmark = pytest.mark.django_db


class TestAcquire:
    """Tests for allocator.acquire()."""

    def test_fresh_sequence_starts_at_one(self, allocator):
        """First acquire on an empty sequence returns 1."""
        assert allocator.acquire() == 1
        assert allocator.acquire() == 2
        assert allocator.acquire() == 3

    def test_counter_is_persisted(self, allocator):
        """Counter lives in IdentifierSequence, not in the instance."""
        allocator.acquire()
        allocator.acquire()

        assert IdentifierSequence.objects.get(name='product').value == 2
        assert IdentifierAllocator('product').acquire() == 3

    def test_sequences_are_independent(self):
        """Each named sequence has its own counter and pool."""
        products = IdentifierAllocator('product')
        tools = IdentifierAllocator('tool')

        assert products.acquire() == 1
        assert products.acquire() == 2
        assert tools.acquire() == 1

        products.release(1)
        assert tools.acquire() == 2

    def test_recycled_value_is_reused_first(self, allocator):
        """A released value comes back before the counter moves."""
        for _ in range(3):
            allocator.acquire()
        allocator.release(2)

        assert allocator.acquire() == 2
        assert allocator.acquire() == 4

    def test_smallest_recycled_value_first(self, allocator):
        """Pool is drained in ascending order."""
        for _ in range(5):
            allocator.acquire()
        allocator.release(4)
        allocator.release(2)

        assert allocator.acquire() == 2
        assert allocator.acquire() == 4
        assert allocator.acquire() == 6

    def test_no_value_issued_twice(self, allocator):
        """Interleaved acquire/release never hands out a live value."""
        live = {allocator.acquire() for _ in range(5)}
        for value in (1, 3, 5):
            allocator.release(value)
            live.discard(value)

        for _ in range(4):
            value = allocator.acquire()
            assert value not in live
            live.add(value)

        assert live == {1, 2, 3, 4, 5, 6}


class TestRelease:
    """Tests for allocator.release()."""

    def test_release_puts_value_in_pool(self, allocator):
        allocator.acquire()
        allocator.release(1)

        assert list(
            RecycledIdentifier.objects.filter(sequence='product').values_list('value', flat=True)
        ) == [1]

    def test_release_does_not_lower_counter(self, allocator):
        """Releasing the highest value keeps the counter."""
        allocator.acquire()
        allocator.acquire()
        allocator.release(2)

        assert allocator.peek().counter == 2

    def test_double_release_raises(self, allocator):
        """The same value cannot sit in the pool twice."""
        allocator.acquire()
        allocator.release(1)

        with pytest.raises(AllocatorError) as exc:
            allocator.release(1)

        assert exc.value.code == 'ALREADY_RELEASED'
        assert RecycledIdentifier.objects.filter(sequence='product', value=1).count() == 1

    @pytest.mark.parametrize('value', [0, -1, 3, None])
    def test_release_unknown_value_raises(self, allocator, value):
        """Values outside 1..counter were never issued."""
        allocator.acquire()
        allocator.acquire()

        with pytest.raises(AllocatorError) as exc:
            allocator.release(value)

        assert exc.value.code == 'UNKNOWN_IDENTIFIER'


class TestPeek:
    """Tests for allocator.peek()."""

    def test_peek_empty(self, allocator):
        status = allocator.peek()

        assert status.counter == 0
        assert status.recycled_count == 0
        assert status.live_range is None

    def test_peek_reports_live_range(self, allocator):
        """live_range skips pooled values at both ends."""
        for _ in range(5):
            allocator.acquire()
        allocator.release(1)
        allocator.release(5)
        allocator.release(3)

        status = allocator.peek()

        assert status.counter == 5
        assert status.recycled_count == 3
        assert status.recycled == (1, 3, 5)
        assert status.live_range == (2, 4)

    def test_peek_everything_released(self, allocator):
        allocator.acquire()
        allocator.release(1)

        assert allocator.peek().live_range is None

    def test_peek_has_no_side_effects(self, allocator):
        allocator.acquire()
        allocator.peek()
        allocator.peek()

        assert allocator.acquire() == 2


class TestResync:
    """Tests for allocator.resync() and clear_recycled()."""

    def test_resync_raises_counter(self, allocator):
        """Counter catches up with IDs assigned outside the allocator."""
        allocator.acquire()

        result = allocator.resync([1, 7, 4])

        assert result.counter_before == 1
        assert result.counter_after == 7
        assert allocator.acquire() == 8

    def test_resync_never_lowers_counter(self, allocator):
        for _ in range(5):
            allocator.acquire()

        result = allocator.resync([2])

        assert result.counter_after == 5

    def test_resync_drops_pooled_values_in_use(self, allocator):
        """A pooled value that is also assigned would be issued twice."""
        for _ in range(4):
            allocator.acquire()
        allocator.release(2)
        allocator.release(3)

        result = allocator.resync([1, 2, 4])

        assert result.dropped == (2,)
        assert allocator.peek().recycled == (3,)

    def test_resync_creates_missing_sequence(self):
        allocator = IdentifierAllocator('fresh')

        result = allocator.resync([])

        assert result.counter_after == 0
        assert IdentifierSequence.objects.filter(name='fresh').exists()

    def test_clear_recycled(self, allocator):
        for _ in range(3):
            allocator.acquire()
        allocator.release(1)
        allocator.release(2)

        assert allocator.clear_recycled() == 2
        assert allocator.peek().recycled_count == 0
        assert allocator.acquire() == 4


class TestClaim:
    """Tests for allocator.claim()."""

    def test_claim_raises_counter(self, allocator):
        allocator.claim(7)

        assert allocator.peek().counter == 7
        assert allocator.acquire() == 8

    def test_claim_below_counter_keeps_it(self, allocator):
        for _ in range(5):
            allocator.acquire()

        allocator.claim(3)

        assert allocator.peek().counter == 5

    def test_claim_removes_value_from_pool(self, allocator):
        for _ in range(3):
            allocator.acquire()
        allocator.release(2)

        allocator.claim(2)

        assert allocator.peek().recycled_count == 0
        assert allocator.acquire() == 4

    def test_claimed_value_can_be_released(self, allocator):
        allocator.claim(9)
        allocator.release(9)

        assert allocator.peek().recycled == (9,)

    @pytest.mark.parametrize('value', [0, -3, None, '5', True])
    def test_claim_invalid_value(self, allocator, value):
        with pytest.raises(AllocatorError) as exc:
            allocator.claim(value)

        assert exc.value.code == 'UNKNOWN_IDENTIFIER'


class TestAssign:
    """Tests for allocator.assign()."""

    def test_assign_sets_sequential_id(self, allocator):
        product = Product(name='Hammer')

        assert allocator.assign(product) == 1
        assert product.sequential_id == 1
        assert product.sequential_id_fallback is False

    def test_assign_keeps_existing_id(self, allocator):
        product = Product(name='Hammer', sequential_id=42)

        assert allocator.assign(product) == 42
        assert allocator.peek().counter == 0


class TestStorageFailure:
    """Tests for the allocator when its storage fails."""

    @pytest.fixture
    def broken_storage(self, monkeypatch):
        def fail(self):
            raise DatabaseError('sequence table unavailable')

        monkeypatch.setattr(IdentifierAllocator, '_pop_recycled', fail)

    def test_failure_raises_by_default(self, allocator, broken_storage):
        with pytest.raises(AllocatorError) as exc:
            allocator.acquire()

        assert exc.value.code == 'ALLOCATOR_UNAVAILABLE'

    def test_fallback_identifier_when_enabled(self, allocator, broken_storage, settings):
        """Degraded mode hands out a flagged, non-recycled value."""
        settings.HANDOVERMAN = {'ALLOW_FALLBACK_IDENTIFIER': True}
        product = Product(name='Hammer')

        value = allocator.assign(product)

        assert value > 1_000_000_000
        assert product.sequential_id_fallback is True
        assert allocator.peek().counter == 0
