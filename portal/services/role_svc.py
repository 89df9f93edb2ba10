"""Role catalog service."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.role import CompanyContactRole

logger = logging.getLogger(__name__)

DEFAULT_ROLE_NOTES = {
    "admin": "Manages the company, its locations and its contacts.",
    "member": "Places orders for assigned locations.",
}


async def list_roles(db: AsyncSession) -> list[CompanyContactRole]:
    stmt = select(CompanyContactRole).order_by(CompanyContactRole.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_role(db: AsyncSession, role_id: str) -> CompanyContactRole | None:
    return await db.get(CompanyContactRole, role_id)


async def get_role_by_name(db: AsyncSession, name: str) -> CompanyContactRole | None:
    stmt = select(CompanyContactRole).where(CompanyContactRole.name == name)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def seed_default_roles(db: AsyncSession) -> list[CompanyContactRole]:
    """Create the admin and member roles if missing. Returns the roles created."""
    notes = {
        settings.admin_role_id: DEFAULT_ROLE_NOTES["admin"],
        settings.member_role_id: DEFAULT_ROLE_NOTES["member"],
    }
    created: list[CompanyContactRole] = []
    for role_id, name in settings.default_roles.items():
        if await get_role(db, role_id):
            continue
        role = CompanyContactRole(id=role_id, name=name, note=notes.get(role_id))
        db.add(role)
        created.append(role)

    if created:
        await db.commit()
        logger.info("Seeded roles: %s", ", ".join(r.name for r in created))
    return created
