"""
Pytest fixtures for Handoverman tests.
"""

import pytest
from django.contrib.auth import get_user_model

from handoverman.allocator import IdentifierAllocator
from handoverman.models import EmployeeProfile, Role
from handoverman.permissions import Actor
from handoverman.services.catalog import ProductCatalog


User = get_user_model()


def make_user(username, role=None, **kwargs):
    user = User.objects.create_user(username=username, password='testpass123', **kwargs)
    if role is not None:
        EmployeeProfile.objects.create(user=user, role=role)
    return user


@pytest.fixture
def manager_user(db):
    """Create a user with the manager role."""
    return make_user('manager', Role.MANAGER)


@pytest.fixture
def employee_user(db):
    """Create a user with the employee role."""
    return make_user('alice', Role.EMPLOYEE)


@pytest.fixture
def other_employee_user(db):
    """Create a second employee."""
    return make_user('bob', Role.EMPLOYEE)


@pytest.fixture
def admin_user(db):
    """Create a superuser (always resolves to admin)."""
    return User.objects.create_superuser(username='root', password='testpass123')


@pytest.fixture
def manager(manager_user):
    return Actor.for_user(manager_user)


@pytest.fixture
def employee(employee_user):
    return Actor.for_user(employee_user)


@pytest.fixture
def other_employee(other_employee_user):
    return Actor.for_user(other_employee_user)


@pytest.fixture
def admin(admin_user):
    return Actor.for_user(admin_user)


@pytest.fixture
def allocator(db):
    """Allocator on the default product sequence."""
    return IdentifierAllocator()


@pytest.fixture
def catalog(allocator):
    return ProductCatalog(allocator)


@pytest.fixture
def product(catalog, manager):
    """Create a product with 10 units in stock."""
    return catalog.create(manager, 'Cordless Drill', stock_quantity=10, location='Shelf A')


@pytest.fixture
def empty_product(catalog, manager):
    """Create a product without stock."""
    return catalog.create(manager, 'Safety Goggles')
