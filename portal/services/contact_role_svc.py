"""Company contact role administration.

Applies an admin's desired set of roles for a contact to both Shopify and the
local role cache, and removes a contact together with its roles. Location
roles live in Shopify (as company contact role assignments) and are mirrored
locally with their external id. Company-wide admin roles exist only locally.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from b2bkit.api import normalize_store_domain

from ..config import settings
from ..errors import RoleAssignmentsNotFoundError, RoleNotFoundError, ShopifyResponseError
from ..models.role_assignment import CompanyRoleAssignment
from ..schemas.role import RoleAssignmentRequest, RoleChangeResult
from . import role_assignment_svc, role_svc, shopify_svc

logger = logging.getLogger(__name__)


class CompanyRoleTarget(Protocol):
    async def contact_roles(self, company_location_id: str) -> list[dict[str, Any]]: ...

    async def assign_location_role(
        self, company_location_id: str, company_contact_id: str, company_contact_role_id: str
    ) -> list[str]: ...

    async def revoke_contact_role(self, company_contact_id: str, assignment_id: str) -> str | None: ...

    async def delete_contact(self, company_contact_id: str) -> str | None: ...


def shopify_role_name(role_id: str) -> str:
    """Name of the Shopify contact role that backs a local role id."""
    if role_id == settings.admin_role_id:
        return settings.shopify_admin_role_name
    return settings.shopify_member_role_name


async def _shopify_role_id(shopify: CompanyRoleTarget, company_location_id: str, role_id: str) -> str:
    wanted = shopify_role_name(role_id).lower()
    for node in await shopify.contact_roles(company_location_id):
        if (node.get("name") or "").lower() == wanted and node.get("id"):
            return node["id"]
    raise ShopifyResponseError(
        f"Shopify role '{shopify_role_name(role_id)}' not found for location {company_location_id}"
    )


async def _assign_in_shopify(
    shopify: CompanyRoleTarget, company_location_id: str, company_contact_id: str, role_id: str
) -> str | None:
    shopify_role = await _shopify_role_id(shopify, company_location_id, role_id)
    created = await shopify.assign_location_role(company_location_id, company_contact_id, shopify_role)
    return created[0] if created else None


async def _revoke_in_shopify(shopify: CompanyRoleTarget, row: CompanyRoleAssignment) -> None:
    if row.external_assignment_id:
        await shopify.revoke_contact_role(row.company_contact_id, row.external_assignment_id)


async def apply_role_assignments(
    db: AsyncSession,
    request: RoleAssignmentRequest,
    *,
    shopify: CompanyRoleTarget | None = None,
) -> RoleChangeResult:
    """Make the contact's roles in the company equal ``request.role_assignments``.

    Scopes missing from the request are revoked and deleted, an empty list
    revokes everything. A changed location role is revoked in Shopify and
    assigned again with the new Shopify role.

    Raises:
        RoleNotFoundError: A requested role id is not in the catalog.
        ShopifyResponseError: The company has no Shopify role for the requested role.
        ShopifyUserError: Shopify rejected an assignment or revocation.
    """
    if shopify is None:
        async with await shopify_svc.get_shopify_client(db, request.store_name) as client:
            return await apply_role_assignments(db, request, shopify=client.companies)

    for role_id in sorted({a.role_id for a in request.role_assignments}):
        if await role_svc.get_role(db, role_id) is None:
            raise RoleNotFoundError(role_id)

    contact_id = request.company_contact_id
    existing = await role_assignment_svc.find_all_by_contact_and_company(
        db, contact_id, request.company_id, request.store_name, with_role=False
    )
    current = {row.company_location_id: row for row in existing}
    desired = {a.company_location_id: a for a in request.role_assignments}
    result = RoleChangeResult()

    for location_id, row in current.items():
        if location_id in desired:
            continue
        await _revoke_in_shopify(shopify, row)
        await role_assignment_svc.delete_role_assignment(db, row.id)
        result.deleted += 1

    for location_id, wanted in desired.items():
        row = current.get(location_id)
        if row is not None and row.role_id == wanted.role_id:
            result.unchanged += 1
            continue

        external_id = None
        if location_id is not None:
            if row is not None:
                await _revoke_in_shopify(shopify, row)
            external_id = await _assign_in_shopify(shopify, location_id, contact_id, wanted.role_id)

        if row is None:
            await role_assignment_svc.assign_role(
                db,
                store_name=request.store_name,
                company_id=request.company_id,
                company_contact_id=contact_id,
                role_id=wanted.role_id,
                customer_id=request.customer_id,
                company_location_id=location_id,
                external_assignment_id=external_id,
            )
            result.created += 1
        else:
            await role_assignment_svc.update_role_assignment(
                db,
                store_name=request.store_name,
                company_id=request.company_id,
                company_location_id=location_id,
                company_contact_id=contact_id,
                new_role_id=wanted.role_id,
                customer_id=request.customer_id,
                external_assignment_id=external_id,
            )
            result.updated += 1

    logger.info(
        "Role change for contact %s by %s: %d created, %d updated, %d deleted, %d unchanged",
        contact_id, request.customer_id,
        result.created, result.updated, result.deleted, result.unchanged,
    )
    return result


async def delete_contact(
    db: AsyncSession,
    *,
    store_name: str,
    company_id: str,
    company_contact_id: str,
    shopify: CompanyRoleTarget | None = None,
) -> int:
    """Revoke the contact's roles, delete the contact in Shopify, then drop its cached rows.

    Returns the number of cached assignments removed.
    """
    store_name = normalize_store_domain(store_name)
    if shopify is None:
        async with await shopify_svc.get_shopify_client(db, store_name) as client:
            return await delete_contact(
                db,
                store_name=store_name,
                company_id=company_id,
                company_contact_id=company_contact_id,
                shopify=client.companies,
            )

    rows = await role_assignment_svc.find_all_by_contact_and_company(
        db, company_contact_id, company_id, store_name, with_role=False
    )
    if not rows:
        raise RoleAssignmentsNotFoundError(company_contact_id)

    for row in rows:
        await _revoke_in_shopify(shopify, row)
    await shopify.delete_contact(company_contact_id)
    deleted = await role_assignment_svc.delete_all_by_contact_and_company(
        db, company_contact_id, company_id, store_name
    )
    logger.info("Deleted company contact %s and %d cached roles", company_contact_id, deleted)
    return deleted
