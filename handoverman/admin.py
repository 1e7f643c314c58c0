"""
Handoverman Admin.

Stock and handover status only change through the services, so the
admin routes every write through them:
- Product: descriptive fields editable, stock read-only, deletion via
  ProductCatalog (recycles the sequential ID)
- Handover: read-only with "approve" action, deletion via Handovers
- StockMovement: read-only audit trail
- IdentifierSequence / RecycledIdentifier: read-only allocator state
"""

import logging

from django.contrib import admin, messages
from django.http import HttpResponseRedirect
from django.urls import reverse
from django.utils.translation import gettext_lazy as _

from handoverman.exceptions import InventoryError
from handoverman.models import (
    EmployeeProfile,
    Handover,
    HandoverStatus,
    IdentifierSequence,
    Product,
    RecycledIdentifier,
    StockMovement,
)
from handoverman.permissions import Actor

logger = logging.getLogger(__name__)


class ReadOnlyAdmin(admin.ModelAdmin):
    """Admin without add/change/delete."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# PRODUCT ADMIN
# =========================================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin — stock is read-only, deletion recycles the ID."""

    list_display = ['sequential_id', 'name', 'status', 'stock_quantity', 'min_stock',
                    'unit', 'is_low_stock_display']
    list_filter = ['status', 'unit']
    search_fields = ['name', 'description', '=sequential_id']
    actions = ['delete_products']
    readonly_fields = ['sequential_id', 'sequential_id_fallback', 'stock_quantity',
                       'last_restocked_at', 'created_by', 'updated_by', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        # New products need an allocated ID: use ProductCatalog.create()
        return False

    @admin.display(description=_('Low stock?'), boolean=True)
    def is_low_stock_display(self, obj):
        return obj.is_low_stock

    def save_model(self, request, obj, form, change):
        from handoverman.services.catalog import ProductCatalog

        fields = {name: form.cleaned_data[name] for name in form.changed_data}
        if fields:
            ProductCatalog().update(Actor.for_user(request.user), obj, **fields)

    def has_delete_permission(self, request, obj=None):
        if not super().has_delete_permission(request, obj):
            return False
        # Units still handed out would vanish from stock accounting
        return obj is None or not obj.handovers.outstanding().exists()

    def get_deleted_objects(self, objs, request):
        deleted, model_count, _, protected = super().get_deleted_objects(objs, request)
        # Ledger and handover history are removed by ProductCatalog.delete()
        return deleted, model_count, set(), protected

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    def delete_model(self, request, obj):
        from handoverman.services.catalog import ProductCatalog

        try:
            ProductCatalog().delete(Actor.for_user(request.user), obj)
        except InventoryError as exc:
            request._inventory_error = exc

    def response_delete(self, request, obj_display, obj_id):
        error = getattr(request, '_inventory_error', None)
        if error is None:
            return super().response_delete(request, obj_display, obj_id)
        self.message_user(request, error.message, level=messages.ERROR)
        return HttpResponseRedirect(reverse('admin:handoverman_product_changelist'))

    @admin.action(description=_('Delete selected products (recycles their IDs)'))
    def delete_products(self, request, queryset):
        from handoverman.services.catalog import ProductCatalog

        catalog = ProductCatalog()
        actor = Actor.for_user(request.user)
        count = 0
        for product in queryset:
            try:
                catalog.delete(actor, product)
                count += 1
            except InventoryError as exc:
                self.message_user(request, f"{product}: {exc.message}", level=messages.ERROR)

        self.message_user(request, _('{count} product(s) deleted.').format(count=count))


# =========================================================================
# HANDOVER ADMIN (read-only with approve action)
# =========================================================================

@admin.register(Handover)
class HandoverAdmin(ReadOnlyAdmin):
    """Handover admin — read-only, transitions via actions."""

    list_display = ['id', 'product', 'employee', 'quantity', 'status',
                    'requested_at', 'handed_over_at', 'returned_at']
    list_filter = ['status']
    search_fields = ['product__name', 'employee__username', 'reason']
    actions = ['approve_handovers', 'delete_handovers']

    @admin.action(description=_('Approve selected pending handovers'))
    def approve_handovers(self, request, queryset):
        from handoverman import handovers

        actor = Actor.for_user(request.user)
        count = 0
        for handover in queryset.filter(status=HandoverStatus.PENDING):
            try:
                handovers.approve(actor, handover.pk, notes='Approved via admin')
                count += 1
            except InventoryError as exc:
                logger.warning("approve_handovers: failed to approve %s: %s", handover.handover_id, exc)

        self.message_user(request, _('{count} handover(s) approved.').format(count=count))

    @admin.action(description=_('Delete selected handovers (restores stock)'))
    def delete_handovers(self, request, queryset):
        from handoverman import handovers

        actor = Actor.for_user(request.user)
        count = 0
        for handover in queryset:
            try:
                handovers.delete(actor, handover.pk)
                count += 1
            except InventoryError as exc:
                logger.warning("delete_handovers: failed to delete %s: %s", handover.handover_id, exc)

        self.message_user(request, _('{count} handover(s) deleted.').format(count=count))


# =========================================================================
# STOCK MOVEMENT ADMIN (read-only audit trail)
# =========================================================================

@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdmin):
    """Movement admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'product', 'delta', 'reason', 'user']
    list_filter = ['timestamp', 'user']
    search_fields = ['reason', 'product__name']
    date_hierarchy = 'timestamp'


# =========================================================================
# ALLOCATOR STATE (read-only)
# =========================================================================

@admin.register(IdentifierSequence)
class IdentifierSequenceAdmin(ReadOnlyAdmin):
    list_display = ['name', 'value', 'updated_at']


@admin.register(RecycledIdentifier)
class RecycledIdentifierAdmin(ReadOnlyAdmin):
    list_display = ['sequence', 'value', 'released_at']
    list_filter = ['sequence']


@admin.register(EmployeeProfile)
class EmployeeProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'phone']
    list_filter = ['role']
    search_fields = ['user__username', 'user__email']
