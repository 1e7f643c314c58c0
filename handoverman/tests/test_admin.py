"""
Tests for the product admin delete paths.
"""

import pytest
from django.contrib import admin
from django.contrib.messages import get_messages
from django.urls import reverse

from handoverman import handovers
from handoverman.exceptions import InvalidState
from handoverman.models import Product
from handoverman.services.catalog import ProductCatalog


pytestmark = pytest.mark.django_db


def messages_of(response):
    return [str(m) for m in get_messages(response.wsgi_request)]


@pytest.fixture
def admin_site_client(client, admin_user):
    client.force_login(admin_user)
    return client


@pytest.fixture
def handed_over(product, employee, manager):
    handover = handovers.request(employee, product, 2, reason='x')
    return handovers.approve(manager, handover.pk)


def delete_url(product):
    return reverse('admin:handoverman_product_delete', args=[product.pk])


class TestDeleteView:
    """Tests for the single-product delete page."""

    def test_delete_recycles_id(self, admin_site_client, product, allocator):
        """Ledger rows do not block the delete; the ID goes to the pool."""
        response = admin_site_client.post(delete_url(product), {'post': 'yes'})

        assert response.status_code == 302
        assert not Product.objects.filter(pk=product.pk).exists()
        assert allocator.peek().recycled == (product.sequential_id,)

    def test_delete_blocked_while_handed_over(self, admin_site_client, product, handed_over):
        response = admin_site_client.post(delete_url(product), {'post': 'yes'})

        assert response.status_code == 403
        assert Product.objects.filter(pk=product.pk).exists()

    def test_failed_delete_reports_only_the_error(self, admin_site_client, product, monkeypatch):
        def refuse(self, actor, product):
            raise InvalidState('PRODUCT_IN_USE', product_id=product.pk)

        monkeypatch.setattr(ProductCatalog, 'delete', refuse)

        response = admin_site_client.post(delete_url(product), {'post': 'yes'})

        assert response.status_code == 302
        assert response.url == reverse('admin:handoverman_product_changelist')
        assert messages_of(response) == ['Product has units handed over to employees']
        assert Product.objects.filter(pk=product.pk).exists()


class TestDeleteAction:
    """Tests for the bulk delete action."""

    def test_bulk_delete_skips_products_in_use(self, admin_site_client, catalog, manager,
                                               product, handed_over):
        free = catalog.create(manager, 'Tape')

        response = admin_site_client.post(
            reverse('admin:handoverman_product_changelist'),
            {'action': 'delete_products', '_selected_action': [product.pk, free.pk], 'index': 0},
        )

        assert response.status_code == 302
        assert not Product.objects.filter(pk=free.pk).exists()
        assert Product.objects.filter(pk=product.pk).exists()
        messages = messages_of(response)
        assert f'{product}: Product has units handed over to employees' in messages
        assert '1 product(s) deleted.' in messages

    def test_default_delete_action_removed(self, rf, admin_user):
        """Bulk deletes only go through ProductCatalog."""
        request = rf.get('/')
        request.user = admin_user

        actions = admin.site._registry[Product].get_actions(request)

        assert 'delete_selected' not in actions
        assert 'delete_products' in actions
