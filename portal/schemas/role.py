"""Role catalog, cached role-assignment and role administration schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..config import settings
from .customer import CAMEL, StoreName


class RoleResponse(BaseModel):
    id: str
    name: str
    note: str = ""

    model_config = {"from_attributes": True}

    @field_validator("note", mode="before")
    @classmethod
    def _blank_note(cls, value):
        return value or ""


class RoleListResponse(BaseModel):
    roles: list[RoleResponse] = []


class RoleAssignmentResponse(BaseModel):
    id: uuid.UUID
    company_contact_id: str
    company_id: str
    store_name: str
    company_location_id: str | None = None
    role_id: str
    external_assignment_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


class RoleSyncResult(BaseModel):
    total: int = 0
    created: int = 0
    skipped: int = 0
    errors: list[str] = []


# ---------------------------------------------------------------------------
# Role administration
# ---------------------------------------------------------------------------


class RoleAssignmentItem(BaseModel):
    """One desired role: either at a company location or company-wide."""

    role_id: str = Field(min_length=1)
    company_location_id: str | None = None
    company_id: str | None = None

    model_config = {**CAMEL, "extra": "forbid"}

    @model_validator(mode="after")
    def _one_scope(self):
        if (self.company_location_id is None) == (self.company_id is None):
            raise ValueError("Exactly one of companyLocationId or companyId is required")
        if self.company_id is not None and self.role_id != settings.admin_role_id:
            raise ValueError("Company-wide assignments must use the admin role")
        return self


class RoleAssignmentUpdate(BaseModel):
    """Body of a role-assignment change; the list replaces the contact's current set."""

    store_name: StoreName
    customer_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    role_assignments: list[RoleAssignmentItem]

    model_config = {**CAMEL, "extra": "forbid"}

    @model_validator(mode="after")
    def _consistent_scopes(self):
        scopes = [a.company_location_id for a in self.role_assignments]
        if len(scopes) != len(set(scopes)):
            raise ValueError("Each location (and the company) may appear only once")
        for assignment in self.role_assignments:
            if assignment.company_id is not None and assignment.company_id != self.company_id:
                raise ValueError("Company-wide assignment must target companyId")
        return self


class RoleAssignmentRequest(RoleAssignmentUpdate):
    company_contact_id: str = Field(min_length=1)


class RoleChangeResult(BaseModel):
    created: int = 0
    updated: int = 0
    deleted: int = 0
    unchanged: int = 0


class ContactDeleteResponse(BaseModel):
    success: bool = True
    message: str = "Company contact deleted successfully"
    deleted_assignments: int = 0

    model_config = CAMEL
