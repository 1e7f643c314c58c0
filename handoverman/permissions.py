"""
Role-derived capabilities.

Services never inspect roles directly. They receive an Actor carrying
already-resolved boolean capability flags and call actor.require().

Usage:
    actor = Actor.for_user(request.user)
    handovers.approve(actor, handover_id)
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from handoverman.conf import handoverman_settings
from handoverman.exceptions import PermissionDenied
from handoverman.models.enums import Role


@dataclass(frozen=True)
class Capabilities:
    """Boolean capability flags of a caller."""

    can_view_products: bool = True
    can_add_products: bool = False
    can_edit_products: bool = False
    can_delete_products: bool = False
    can_manage_products: bool = False
    can_manage_users: bool = False
    can_request_handover: bool = False
    can_return_handover: bool = False

    @classmethod
    def for_role(cls, role: str) -> Capabilities:
        """Capabilities granted to a role. Unknown roles get view-only."""
        return ROLE_CAPABILITIES.get(role, cls())

    def as_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


ROLE_CAPABILITIES = {
    Role.ADMIN: Capabilities(
        can_add_products=True,
        can_edit_products=True,
        can_delete_products=True,
        can_manage_products=True,
        can_manage_users=True,
        can_request_handover=True,
        can_return_handover=True,
    ),
    Role.MANAGER: Capabilities(
        can_add_products=True,
        can_edit_products=True,
        can_delete_products=True,
        can_manage_products=True,
    ),
    Role.EMPLOYEE: Capabilities(
        can_request_handover=True,
        can_return_handover=True,
    ),
}


def role_for_user(user) -> str:
    """Resolve the inventory role of an auth user."""
    if getattr(user, 'is_superuser', False):
        return Role.ADMIN
    profile = getattr(user, 'inventory_profile', None)
    if profile is not None:
        return profile.role
    return handoverman_settings.DEFAULT_ROLE


@dataclass(frozen=True)
class Actor:
    """The user performing an operation, with resolved capabilities."""

    user: object
    capabilities: Capabilities

    @classmethod
    def for_user(cls, user) -> Actor:
        return cls(user=user, capabilities=Capabilities.for_role(role_for_user(user)))

    @classmethod
    def with_role(cls, user, role: str) -> Actor:
        return cls(user=user, capabilities=Capabilities.for_role(role))

    @property
    def user_id(self):
        return getattr(self.user, 'pk', None)

    def can(self, capability: str) -> bool:
        return bool(getattr(self.capabilities, capability, False))

    def require(self, capability: str) -> None:
        """
        Raises:
            PermissionDenied('NOT_ALLOWED'): If the capability is missing
        """
        if not self.can(capability):
            raise PermissionDenied('NOT_ALLOWED', capability=capability, user_id=self.user_id)
