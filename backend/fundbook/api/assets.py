"""
Assets API Router.
"""
import datetime as dt
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel
from decimal import Decimal

from fundbook.core.database import get_db
from fundbook.models.enums import AssetEventType
from fundbook.services.asset_service import AssetService

router = APIRouter()

# ---------- Pydantic Schemas ----------

class AssetEventSchema(BaseModel):
    id: int
    asset_id: int
    type: str
    amount: Optional[Decimal]
    date: dt.date
    note: Optional[str]

    class Config:
        from_attributes = True


class AssetSchema(BaseModel):
    id: int
    name: str
    type: str
    status: str
    current_value: Decimal
    acquired_price: Optional[Decimal]
    acquired_date: Optional[dt.date]
    sale_price: Optional[Decimal]
    sale_date: Optional[dt.date]
    realized_pnl: Optional[Decimal] = None

    class Config:
        from_attributes = True


class RecordEventRequest(BaseModel):
    type: AssetEventType
    amount: Optional[Decimal] = None
    date: Optional[dt.date] = None
    note: Optional[str] = None


class SellAssetRequest(BaseModel):
    sale_price: Decimal
    sale_date: Optional[dt.date] = None


# ---------- Endpoints ----------

@router.post("/{asset_id}/events", response_model=AssetEventSchema, status_code=status.HTTP_201_CREATED)
async def record_asset_event(
    asset_id: int,
    payload: RecordEventRequest,
    db: AsyncSession = Depends(get_db)
):
    """Append an event to an asset and apply it to its current value."""
    return await AssetService(db).record_event(
        asset_id,
        payload.type,
        amount=payload.amount,
        event_date=payload.date,
        note=payload.note,
    )


@router.post("/{asset_id}/rebuild", response_model=AssetSchema)
async def rebuild_asset_value(
    asset_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Recompute current value by replaying the event history from the acquisition price."""
    return await AssetService(db).rebuild_value(asset_id)


@router.post("/{asset_id}/sell", response_model=AssetSchema)
async def sell_asset(
    asset_id: int,
    payload: SellAssetRequest,
    db: AsyncSession = Depends(get_db)
):
    """Mark an asset as sold."""
    service = AssetService(db)
    asset = await service.sell_asset(asset_id, payload.sale_price, payload.sale_date)
    result = AssetSchema.model_validate(asset)
    result.realized_pnl = service.realized_pnl(asset)
    return result
