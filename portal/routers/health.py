"""Liveness and readiness checks for the portal service."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from b2bkit import __version__

from ..config import settings
from ..database import get_db
from ..models.role import CompanyContactRole

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "portal", "version": __version__}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Ready once the database answers and both catalog roles are seeded."""
    result = await db.execute(select(CompanyContactRole.id))
    seeded = set(result.scalars().all())
    missing = sorted(set(settings.default_roles) - seeded)
    if missing:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "service": "portal", "missingRoles": missing},
        )
    return {"status": "ready", "service": "portal"}
