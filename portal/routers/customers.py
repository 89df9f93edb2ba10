"""Customer details routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.customer import CustomerDetailsPayload, CustomerDetailsRequest
from ..services import customer_svc

router = APIRouter(prefix="/api/v1/customers", tags=["customers"])


@router.post(
    "/details",
    response_model=CustomerDetailsPayload,
    response_model_by_alias=True,
)
async def customer_details(
    request: CustomerDetailsRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await customer_svc.get_customer_details(db, request)
    return result.to_payload()
