"""Cached company-contact role assignments mirrored from Shopify."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, ContactScopeMixin, TimestampMixin, UUIDMixin


class CompanyRoleAssignment(UUIDMixin, ContactScopeMixin, TimestampMixin, AuditMixin, Base):
    __tablename__ = "company_role_assignment"

    # NULL means the role applies to the whole company.
    company_location_id: Mapped[str | None] = mapped_column(String(100), default=None)
    role_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("company_contact_role.id", ondelete="RESTRICT")
    )
    external_assignment_id: Mapped[str | None] = mapped_column(
        String(100), default=None, index=True
    )

    role: Mapped["CompanyContactRole"] = relationship(  # noqa: F821
        back_populates="assignments"
    )

    @property
    def is_location_scoped(self) -> bool:
        return self.company_location_id is not None

    def __repr__(self) -> str:
        scope = self.company_location_id or "company"
        return f"<CompanyRoleAssignment {self.company_contact_id!r} role={self.role_id!r} scope={scope!r}>"


# One row per (company, store, location, contact). The location is coalesced so
# that two company-wide (NULL location) rows also collide.
Index(
    "uq_role_assignment_scope",
    CompanyRoleAssignment.company_id,
    CompanyRoleAssignment.store_name,
    func.coalesce(CompanyRoleAssignment.company_location_id, ""),
    CompanyRoleAssignment.company_contact_id,
    unique=True,
)
