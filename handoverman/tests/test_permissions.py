"""
Tests for roles, capabilities and errors.
"""

import pytest

from handoverman.exceptions import InsufficientStock, NotFound, PermissionDenied
from handoverman.models import EmployeeProfile, Role
from handoverman.permissions import Actor, Capabilities, role_for_user
from handoverman.tests.conftest import make_user


pytestmark = pytest.mark.django_db


class TestRoles:
    """Tests for role resolution."""

    def test_superuser_is_admin(self, admin_user):
        assert role_for_user(admin_user) == Role.ADMIN

    def test_profile_role(self, manager_user):
        assert role_for_user(manager_user) == Role.MANAGER

    def test_user_without_profile_gets_default_role(self):
        user = make_user('nobody')

        assert role_for_user(user) == Role.EMPLOYEE

    def test_default_role_is_configurable(self, settings):
        settings.HANDOVERMAN = {'DEFAULT_ROLE': 'manager'}
        user = make_user('nobody')

        assert role_for_user(user) == Role.MANAGER

    def test_role_change_takes_effect(self, employee_user):
        EmployeeProfile.objects.filter(user=employee_user).update(role=Role.MANAGER)
        employee_user.refresh_from_db()
        employee_user.inventory_profile.refresh_from_db()

        assert Actor.for_user(employee_user).can('can_manage_products')


class TestCapabilities:
    """Tests for role-derived capability flags."""

    def test_admin_can_everything(self):
        caps = Capabilities.for_role(Role.ADMIN)

        assert all(caps.as_dict().values())

    def test_manager(self):
        caps = Capabilities.for_role(Role.MANAGER)

        assert caps.can_manage_products
        assert caps.can_delete_products
        assert not caps.can_manage_users
        assert not caps.can_request_handover

    def test_employee(self):
        caps = Capabilities.for_role(Role.EMPLOYEE)

        assert caps.as_dict() == {
            'can_view_products': True,
            'can_add_products': False,
            'can_edit_products': False,
            'can_delete_products': False,
            'can_manage_products': False,
            'can_manage_users': False,
            'can_request_handover': True,
            'can_return_handover': True,
        }

    def test_unknown_role_is_view_only(self):
        caps = Capabilities.for_role('visitor')

        assert caps == Capabilities()

    def test_require_raises(self, employee):
        with pytest.raises(PermissionDenied) as exc:
            employee.require('can_delete_products')

        assert exc.value.code == 'NOT_ALLOWED'
        assert exc.value.http_status == 403
        assert exc.value.data['capability'] == 'can_delete_products'


class TestErrors:
    """Tests for structured error payloads."""

    def test_as_dict(self):
        error = InsufficientStock('INSUFFICIENT_STOCK', available=2, requested=5)

        assert error.as_dict() == {
            'code': 'INSUFFICIENT_STOCK',
            'message': 'Not enough stock for this operation',
            'data': {'available': 2, 'requested': 5},
        }
        assert error.kind == 'InsufficientStock'

    def test_custom_message(self):
        error = NotFound('PRODUCT_NOT_FOUND', 'No such drill', product_id=7)

        assert str(error) == 'No such drill'
        assert error.http_status == 404
