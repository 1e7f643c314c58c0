"""
Identifier sequence models — persisted allocator state.

One IdentifierSequence row per named sequence holds the counter; the
RecycledIdentifier rows sharing its name form the recycled pool.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class IdentifierSequence(models.Model):
    """
    Counter of a named sequence.

    value is the highest identifier ever issued fresh. It only grows:
    releases go to the recycled pool and never decrement it.
    """

    name = models.SlugField(
        primary_key=True,
        max_length=50,
        verbose_name=_('Name'),
    )
    value = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Counter'),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Identifier sequence')
        verbose_name_plural = _('Identifier sequences')

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


class RecycledIdentifier(models.Model):
    """Identifier freed by a deletion, waiting to be reissued."""

    sequence = models.SlugField(max_length=50, verbose_name=_('Sequence'))
    value = models.PositiveIntegerField(verbose_name=_('Identifier'))
    released_at = models.DateTimeField(default=timezone.now, verbose_name=_('Released at'))

    class Meta:
        verbose_name = _('Recycled identifier')
        verbose_name_plural = _('Recycled identifiers')
        ordering = ['sequence', 'value', 'released_at']
        constraints = [
            models.UniqueConstraint(
                fields=['sequence', 'value'],
                name='unique_recycled_identifier',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.sequence}:{self.value}"
