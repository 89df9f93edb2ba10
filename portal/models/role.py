"""Company contact role catalog."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class CompanyContactRole(TimestampMixin, Base):
    __tablename__ = "company_contact_role"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    note: Mapped[str | None] = mapped_column(Text, default=None)

    assignments: Mapped[list["CompanyRoleAssignment"]] = relationship(  # noqa: F821
        back_populates="role"
    )

    def __repr__(self) -> str:
        return f"<CompanyContactRole {self.id!r} {self.name!r}>"
