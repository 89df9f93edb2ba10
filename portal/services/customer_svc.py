"""Customer details service - resolves a B2B customer and keeps the role cache in sync.

Shopify is the source of truth for role assignments. The local
``company_role_assignment`` table is a shadow that is topped up with any
assignment Shopify reports but the cache has not seen yet.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import (
    CustomerNotFoundError,
    NoCompanyContactError,
    NoRolesAssignedError,
    ShopifyResponseError,
)
from ..models.role_assignment import CompanyRoleAssignment
from ..schemas.customer import (
    CompanyInfo,
    CompanyRole,
    CustomerDetailsRequest,
    CustomerDetailsResponse,
    CustomerDetailsResult,
    CustomerInfo,
    ExternalRoleAssignment,
    LocationRole,
    ShopifyCustomer,
)
from ..schemas.role import RoleSyncResult
from . import role_assignment_svc, shopify_svc

logger = logging.getLogger(__name__)


class CustomerSource(Protocol):
    async def get_details(self, customer_id: str) -> dict[str, Any] | None: ...


def assignment_key(
    company_id: str,
    store_name: str,
    company_location_id: str | None,
    company_contact_id: str,
) -> str:
    """Composite identity of an assignment scope."""
    return "|".join(
        [company_id, store_name, company_location_id or "null", company_contact_id]
    )


def row_key(row: CompanyRoleAssignment) -> str:
    return assignment_key(
        row.company_id, row.store_name, row.company_location_id, row.company_contact_id
    )


def role_id_for_name(role_name: str) -> str:
    """Map a Shopify role name onto the two-tier local catalog."""
    if "admin" in role_name.lower():
        return settings.admin_role_id
    return settings.member_role_id


def parse_customer(raw: dict[str, Any]) -> ShopifyCustomer:
    try:
        return ShopifyCustomer.model_validate(raw)
    except ValidationError as e:
        logger.error("Unexpected Shopify customer payload: %s", e)
        raise ShopifyResponseError(f"Malformed customer payload from Shopify: {e.error_count()} errors")


async def _fetch_customer(
    db: AsyncSession, request: CustomerDetailsRequest, shopify: CustomerSource | None
) -> dict[str, Any] | None:
    if shopify is not None:
        return await shopify.get_details(request.customer_id)
    return await shopify_svc.fetch_customer_details(db, request.store_name, request.customer_id)


async def sync_role_assignments(
    db: AsyncSession,
    assignments: Iterable[ExternalRoleAssignment],
    *,
    customer_id: str,
    store_name: str,
    company_contact_id: str,
    company_id: str,
) -> RoleSyncResult:
    """Insert the external assignments whose scope is not cached yet.

    Failures are rolled back and reported in ``errors``; nothing is raised.
    """
    assignments = list(assignments)
    result = RoleSyncResult(total=len(assignments))

    try:
        existing = await role_assignment_svc.find_all_by_contact_and_company(
            db, company_contact_id, company_id, store_name, with_role=False
        )
        seen = {row_key(row) for row in existing}

        rows: list[dict[str, Any]] = []
        for assignment in assignments:
            key = assignment_key(
                company_id, store_name, assignment.company_location_id, company_contact_id
            )
            if key in seen:
                result.skipped += 1
                continue
            seen.add(key)
            rows.append(
                {
                    "company_contact_id": company_contact_id,
                    "company_id": company_id,
                    "store_name": store_name,
                    "company_location_id": assignment.company_location_id,
                    "role_id": role_id_for_name(assignment.role_name),
                    "external_assignment_id": assignment.assignment_id,
                    "created_by": customer_id,
                    "updated_by": customer_id,
                }
            )

        if rows:
            inserted = await role_assignment_svc.bulk_create_with_skip_duplicates(db, rows)
            # Some drivers cannot report a rowcount for insert-or-ignore.
            created = len(rows) if inserted < 0 else inserted
            result.created = created
            result.skipped += len(rows) - created
        logger.info(
            "Role sync for contact %s: %d created, %d skipped",
            company_contact_id, result.created, result.skipped,
        )
    except Exception as e:
        await db.rollback()
        logger.error("Role assignment sync failed for contact %s: %s", company_contact_id, e)
        result.errors.append(f"Role assignment sync failed: {e}")

    return result


def _shape_role(
    row: CompanyRoleAssignment,
    by_external_id: dict[str, ExternalRoleAssignment],
    company_id: str,
) -> LocationRole | CompanyRole:
    name = row.role.name if row.role is not None else row.role_id
    if row.company_location_id:
        external = by_external_id.get(row.external_assignment_id or "")
        return LocationRole(
            id=row.role_id,
            name=name,
            company_location_id=row.company_location_id,
            company_location_name=external.company_location_name if external else None,
        )
    return CompanyRole(id=row.role_id, name=name, company_id=company_id)


async def get_customer_details(
    db: AsyncSession,
    request: CustomerDetailsRequest,
    *,
    shopify: CustomerSource | None = None,
) -> CustomerDetailsResult:
    """Resolve customer, company and roles, syncing the role cache on the way.

    Raises:
        CustomerNotFoundError: Shopify has no such customer.
        NoCompanyContactError: The customer belongs to no company.
        NoRolesAssignedError: Shopify reports no role assignments.
        ShopSessionNotFoundError: No access token is stored for the store.
    """
    logger.info("Fetching customer details for %s on %s", request.customer_id, request.store_name)

    raw = await _fetch_customer(db, request, shopify)
    if not raw:
        raise CustomerNotFoundError(request.customer_id)
    customer = parse_customer(raw)

    if not customer.company_contact_profiles:
        logger.warning("Customer %s has no company contact profile", customer.id)
        raise NoCompanyContactError(customer.id)
    profile = customer.company_contact_profiles[0]

    external = profile.assignments()
    if not external:
        logger.warning("Customer %s has no role assignments in Shopify", customer.id)
        raise NoRolesAssignedError(customer.id)

    company_id = profile.company.id
    cached = await role_assignment_svc.find_all_by_contact_and_company(
        db, profile.id, company_id, request.store_name
    )
    if cached:
        known = {row.external_assignment_id for row in cached}
        missing = [a for a in external if a.assignment_id not in known]
    else:
        missing = external

    warnings: list[str] = []
    if missing:
        sync = await sync_role_assignments(
            db,
            missing,
            customer_id=request.customer_id,
            store_name=request.store_name,
            company_contact_id=profile.id,
            company_id=company_id,
        )
        if sync.errors:
            logger.warning(
                "Role sync failed for %s, continuing with cached roles", request.customer_id
            )
            warnings.extend(sync.errors)
        cached = await role_assignment_svc.find_all_by_contact_and_company(
            db, profile.id, company_id, request.store_name
        )

    by_external_id = {a.assignment_id: a for a in external}
    data = CustomerDetailsResponse(
        customer=CustomerInfo(
            id=customer.id,
            first_name=customer.first_name,
            last_name=customer.last_name,
            email=customer.email,
            phone=customer.phone,
            state=customer.state,
            company_id=company_id,
            company_contact_id=profile.id,
        ),
        company=CompanyInfo(id=company_id, name=profile.company.name),
        roles=[_shape_role(row, by_external_id, company_id) for row in cached],
    )
    logger.info("Resolved customer %s with %d roles", customer.id, len(data.roles))
    return CustomerDetailsResult(data=data, warnings=warnings)
