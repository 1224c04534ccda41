"""
Fund API Router.

Live NAV and ownership, computed from the ledger on every request.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel
from decimal import Decimal

from fundbook.core.database import get_db
from fundbook.services.snapshot_service import SnapshotService

router = APIRouter()

# ---------- Pydantic Schemas ----------

class AssetTypeBreakdownSchema(BaseModel):
    type: str
    count: int
    total_value: Decimal

    class Config:
        from_attributes = True


class CurrencyBreakdownSchema(BaseModel):
    currency: str
    total_amount: Decimal

    class Config:
        from_attributes = True


class LiabilityBreakdownSchema(BaseModel):
    id: int
    name: str
    current_balance: Decimal

    class Config:
        from_attributes = True


class NavSchema(BaseModel):
    as_of: date
    total_asset_value: Decimal
    total_bank_balance: Decimal
    total_liabilities: Decimal
    nav: Decimal
    asset_breakdown: list[AssetTypeBreakdownSchema] = []
    bank_breakdown: list[CurrencyBreakdownSchema] = []
    liability_breakdown: list[LiabilityBreakdownSchema] = []

    class Config:
        from_attributes = True


class OwnershipSchema(BaseModel):
    investor_id: int
    name: str
    email: Optional[str]
    total_deposits: Decimal
    total_withdrawals: Decimal
    capital_amount: Decimal
    ownership_percent: Decimal

    class Config:
        from_attributes = True


# ---------- Endpoints ----------

@router.get("/nav", response_model=NavSchema)
async def get_nav(
    as_of: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
):
    """Current (or as-of-date) NAV with breakdowns."""
    return await SnapshotService(db).calculate_nav(as_of)


@router.get("/ownership", response_model=list[OwnershipSchema])
async def get_ownership(
    as_of: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
):
    """Capital and ownership percentage per investor."""
    return await SnapshotService(db).calculate_ownership(as_of)
