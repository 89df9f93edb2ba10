"""Role-assignment repository - the local cache of Shopify role assignments."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.role_assignment import CompanyRoleAssignment

logger = logging.getLogger(__name__)

ASSIGNMENT_FIELDS = (
    "company_contact_id",
    "company_id",
    "store_name",
    "role_id",
    "company_location_id",
    "external_assignment_id",
    "created_by",
    "updated_by",
)


def _location_clause(company_location_id: str | None):
    if company_location_id is None:
        return CompanyRoleAssignment.company_location_id.is_(None)
    return CompanyRoleAssignment.company_location_id == company_location_id


def _normalize_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Give every row the same column set so they fit one multi-VALUES insert."""
    return [
        {"id": uuid.uuid4(), **{field: row.get(field) for field in ASSIGNMENT_FIELDS}}
        for row in rows
    ]


async def find_all_by_contact_and_company(
    db: AsyncSession,
    company_contact_id: str,
    company_id: str,
    store_name: str,
    *,
    with_role: bool = True,
) -> list[CompanyRoleAssignment]:
    """All cached assignments for a contact within a company on a store."""
    stmt = select(CompanyRoleAssignment).where(
        CompanyRoleAssignment.company_contact_id == company_contact_id,
        CompanyRoleAssignment.company_id == company_id,
        CompanyRoleAssignment.store_name == store_name,
    )
    if with_role:
        stmt = stmt.options(selectinload(CompanyRoleAssignment.role)).execution_options(
            populate_existing=True
        )
    # Company-wide row first, then locations by id.
    stmt = stmt.order_by(
        CompanyRoleAssignment.company_location_id.is_not(None),
        CompanyRoleAssignment.company_location_id,
        CompanyRoleAssignment.external_assignment_id,
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def find_by_contact_and_location(
    db: AsyncSession,
    company_contact_id: str,
    company_location_id: str | None,
    company_id: str,
    store_name: str,
) -> CompanyRoleAssignment | None:
    stmt = select(CompanyRoleAssignment).where(
        CompanyRoleAssignment.company_contact_id == company_contact_id,
        CompanyRoleAssignment.company_id == company_id,
        CompanyRoleAssignment.store_name == store_name,
        _location_clause(company_location_id),
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def assign_role(
    db: AsyncSession,
    *,
    store_name: str,
    company_id: str,
    company_contact_id: str,
    role_id: str,
    customer_id: str,
    company_location_id: str | None = None,
    external_assignment_id: str | None = None,
) -> CompanyRoleAssignment:
    """Create a single assignment."""
    assignment = CompanyRoleAssignment(
        store_name=store_name,
        company_id=company_id,
        company_contact_id=company_contact_id,
        company_location_id=company_location_id,
        role_id=role_id,
        external_assignment_id=external_assignment_id,
        created_by=customer_id,
        updated_by=customer_id,
    )
    db.add(assignment)
    await db.commit()
    await db.refresh(assignment)
    logger.info(
        "Assigned role %s to contact %s (company %s, location %s)",
        role_id, company_contact_id, company_id, company_location_id,
    )
    return assignment


async def update_role_assignment(
    db: AsyncSession,
    *,
    store_name: str,
    company_id: str,
    company_location_id: str | None,
    company_contact_id: str,
    new_role_id: str,
    customer_id: str,
    external_assignment_id: str | None = None,
) -> CompanyRoleAssignment | None:
    """Change the role on an existing scope. Returns None if the scope has no row."""
    assignment = await find_by_contact_and_location(
        db, company_contact_id, company_location_id, company_id, store_name
    )
    if not assignment:
        return None

    old_role_id = assignment.role_id
    assignment.role_id = new_role_id
    assignment.updated_by = customer_id
    if external_assignment_id is not None:
        assignment.external_assignment_id = external_assignment_id
    await db.commit()
    await db.refresh(assignment)
    logger.info(
        "Updated role assignment %s: %s -> %s", assignment.id, old_role_id, new_role_id
    )
    return assignment


async def delete_all_by_contact_and_company(
    db: AsyncSession, company_contact_id: str, company_id: str, store_name: str
) -> int:
    stmt = delete(CompanyRoleAssignment).where(
        CompanyRoleAssignment.company_contact_id == company_contact_id,
        CompanyRoleAssignment.company_id == company_id,
        CompanyRoleAssignment.store_name == store_name,
    )
    result = await db.execute(stmt)
    await db.commit()
    deleted = result.rowcount or 0
    logger.info("Deleted %d role assignments for contact %s", deleted, company_contact_id)
    return deleted


async def delete_role_assignment(db: AsyncSession, assignment_id: uuid.UUID) -> bool:
    """Delete one assignment. Returns True if found and deleted."""
    assignment = await db.get(CompanyRoleAssignment, assignment_id)
    if not assignment:
        return False
    await db.delete(assignment)
    await db.commit()
    return True


async def bulk_create_with_skip_duplicates(db: AsyncSession, rows: list[dict[str, Any]]) -> int:
    """Insert rows, silently skipping any whose scope already exists.

    Returns the driver-reported row count, which may be -1 where unsupported.
    """
    if not rows:
        return 0

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(CompanyRoleAssignment)
    elif dialect == "sqlite":
        stmt = sqlite_insert(CompanyRoleAssignment)
    else:
        raise NotImplementedError(f"insert-or-ignore not supported on {dialect}")

    stmt = stmt.values(_normalize_rows(rows)).on_conflict_do_nothing()
    result = await db.execute(stmt)
    await db.commit()
    return getattr(result, "rowcount", -1)
