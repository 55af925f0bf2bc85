from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db
from app.schemas.subscription_schema import ExpirationSummary
from app.services.expiration_summary_service import expiration_summary_service

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.get(
    "/admin/subscriptions/expiration-summary",
    response_model=ExpirationSummary,
    summary="Upcoming and past vendor subscription expirations",
    description="Counts of ACTIVE subscriptions ending within 7 and 30 days and of EXPIRED subscriptions. Returns zeros when the datastore cannot be read.",
)
async def get_expiration_summary(db: AsyncSession = Depends(get_db)):
    return await expiration_summary_service.get_expiration_summary(db)
