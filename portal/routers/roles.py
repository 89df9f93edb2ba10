"""Role catalog, cached role-assignment and contact role administration routes.

Contact ids are Shopify gids (``gid://shopify/CompanyContact/1``) and contain
slashes, so they are matched with the ``path`` converter. Clients may send
them raw or percent-encoded.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from b2bkit.api import normalize_store_domain

from ..database import get_db
from ..schemas.role import (
    ContactDeleteResponse,
    RoleAssignmentRequest,
    RoleAssignmentResponse,
    RoleAssignmentUpdate,
    RoleChangeResult,
    RoleListResponse,
    RoleResponse,
)
from ..services import contact_role_svc, role_assignment_svc, role_svc

router = APIRouter(prefix="/api/v1", tags=["roles"])


@router.get("/roles", response_model=RoleListResponse)
async def list_roles(db: AsyncSession = Depends(get_db)):
    roles = await role_svc.list_roles(db)
    return RoleListResponse(roles=[RoleResponse.model_validate(r) for r in roles])


@router.get(
    "/company-contacts/{contact_id:path}/role-assignments",
    response_model=list[RoleAssignmentResponse],
    response_model_by_alias=True,
)
async def contact_role_assignments(
    contact_id: str,
    company_id: str = Query(alias="companyId"),
    store_name: str = Query(alias="storeName"),
    db: AsyncSession = Depends(get_db),
):
    rows = await role_assignment_svc.find_all_by_contact_and_company(
        db, contact_id, company_id, normalize_store_domain(store_name), with_role=False
    )
    return [RoleAssignmentResponse.model_validate(row) for row in rows]


@router.put(
    "/company-contacts/{contact_id:path}/role-assignments",
    response_model=RoleChangeResult,
)
async def replace_contact_role_assignments(
    contact_id: str,
    body: RoleAssignmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    request = RoleAssignmentRequest(company_contact_id=contact_id, **body.model_dump())
    return await contact_role_svc.apply_role_assignments(db, request)


@router.delete(
    "/company-contacts/{contact_id:path}",
    response_model=ContactDeleteResponse,
    response_model_by_alias=True,
)
async def delete_company_contact(
    contact_id: str,
    company_id: str = Query(alias="companyId"),
    store_name: str = Query(alias="storeName"),
    db: AsyncSession = Depends(get_db),
):
    deleted = await contact_role_svc.delete_contact(
        db, store_name=store_name, company_id=company_id, company_contact_id=contact_id
    )
    return ContactDeleteResponse(deleted_assignments=deleted)
