"""
Management command to inspect and repair product ID allocation.

Usage:
    python manage.py manage_product_ids            # status
    python manage.py manage_product_ids --resync   # counter >= highest ID, prune pool
    python manage.py manage_product_ids --clear    # empty the recycled pool
"""

from django.core.management.base import BaseCommand

from handoverman.allocator import IdentifierAllocator
from handoverman.models import Product


def find_gaps(values: list[int]) -> list[tuple[int, int]]:
    """Missing ranges between consecutive sorted values."""
    gaps = []
    for low, high in zip(values, values[1:]):
        if high - low > 1:
            gaps.append((low + 1, high - 1))
    return gaps


class Command(BaseCommand):
    """Product ID allocator maintenance."""

    help = 'Shows product ID allocation status and repairs the allocator'

    def add_arguments(self, parser):
        parser.add_argument(
            '--sequence',
            default=None,
            help='Sequence name (defaults to HANDOVERMAN["PRODUCT_SEQUENCE"])',
        )
        parser.add_argument(
            '--resync',
            action='store_true',
            help='Raise the counter to the highest product ID and prune the recycled pool',
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Drop every recycled ID',
        )

    def handle(self, *args, **options):
        allocator = IdentifierAllocator(options['sequence'])
        assigned = list(
            Product.objects.filter(sequential_id__isnull=False, sequential_id_fallback=False)
            .order_by('sequential_id')
            .values_list('sequential_id', flat=True)
        )

        if options['resync']:
            result = allocator.resync(assigned)
            self.stdout.write(self.style.SUCCESS(
                f'Counter {result.counter_before} -> {result.counter_after}, '
                f'{len(result.dropped)} recycled ID(s) dropped'
            ))

        if options['clear']:
            count = allocator.clear_recycled()
            self.stdout.write(self.style.SUCCESS(f'{count} recycled ID(s) cleared'))

        status = allocator.peek()
        fallback = Product.objects.filter(sequential_id_fallback=True).count()

        self.stdout.write(f'Sequence: {allocator.sequence}')
        self.stdout.write(f'Counter: {status.counter}')
        self.stdout.write(f'Products: {len(assigned) + fallback}')
        self.stdout.write(f'Recycled IDs available: {status.recycled_count}')
        if status.recycled:
            self.stdout.write('Recycled IDs: ' + ', '.join(str(v) for v in status.recycled))

        if assigned:
            self.stdout.write(f'Product ID range: {assigned[0]} - {assigned[-1]}')
            gaps = find_gaps(assigned)
            if gaps:
                self.stdout.write('Gaps in product IDs: ' + ', '.join(
                    f'{low}' if low == high else f'{low} - {high}' for low, high in gaps
                ))
            else:
                self.stdout.write('No gaps in product IDs')

        if fallback:
            self.stdout.write(self.style.WARNING(
                f'{fallback} product(s) carry a fallback ID; reassign them manually'
            ))
