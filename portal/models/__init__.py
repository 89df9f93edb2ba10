"""Portal models - re-exports all models and Base.metadata."""

from .base import AuditMixin, Base, ContactScopeMixin, TimestampMixin, UUIDMixin
from .role import CompanyContactRole
from .role_assignment import CompanyRoleAssignment
from .shop_session import ShopSession

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "AuditMixin",
    "ContactScopeMixin",
    "CompanyContactRole",
    "CompanyRoleAssignment",
    "ShopSession",
]
