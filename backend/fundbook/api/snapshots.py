"""
Snapshots API Router.

Snapshots are created and deleted here but never updated.
"""
import datetime as dt
from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field
from decimal import Decimal

from fundbook.core.config import settings
from fundbook.core.database import get_db
from fundbook.services.snapshot_service import SnapshotService

router = APIRouter()
investors_router = APIRouter()

# ---------- Pydantic Schemas ----------

class InvestorSnapshotSchema(BaseModel):
    id: int
    snapshot_id: int
    investor_id: int
    capital_amount: Decimal
    ownership_percent: Decimal
    performance_fee: Optional[Decimal]

    class Config:
        from_attributes = True


class SnapshotSchema(BaseModel):
    id: int
    date: dt.date
    total_asset_value: Decimal
    total_bank_balance: Decimal
    total_liabilities: Decimal
    nav: Decimal
    performance_fee_rate: Optional[Decimal]
    total_performance_fee: Optional[Decimal]
    profit_base: Optional[str]
    created_at: dt.datetime
    investor_snapshots: list[InvestorSnapshotSchema] = []

    class Config:
        from_attributes = True


class SnapshotPageSchema(BaseModel):
    items: list[SnapshotSchema]
    page: int
    limit: int
    total: int
    total_pages: int

    class Config:
        from_attributes = True


class InvestorSnapshotHistorySchema(InvestorSnapshotSchema):
    snapshot_date: dt.date
    snapshot_nav: Decimal


class CreateSnapshotRequest(BaseModel):
    date: Optional[dt.date] = None
    performance_fee_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    profit: Optional[Decimal] = None
    profit_base: Optional[Literal["capital", "high_water_mark"]] = None


# ---------- Endpoints ----------

@router.post("", response_model=SnapshotSchema, status_code=status.HTTP_201_CREATED)
async def create_snapshot(
    payload: CreateSnapshotRequest,
    db: AsyncSession = Depends(get_db)
):
    """Compute NAV, ownership and fees now and persist them as one snapshot."""
    service = SnapshotService(db)
    return await service.create_snapshot(
        snapshot_date=payload.date,
        performance_fee_rate=payload.performance_fee_rate,
        profit=payload.profit,
        profit_base=payload.profit_base,
    )


@router.get("", response_model=SnapshotPageSchema)
async def list_snapshots(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=settings.SNAPSHOT_PAGE_SIZE_MAX),
    date_from: Optional[dt.date] = None,
    date_to: Optional[dt.date] = None,
    sort_by: Literal["date", "nav", "created_at"] = "date",
    sort_order: Literal["asc", "desc"] = "desc",
    db: AsyncSession = Depends(get_db)
):
    """List stored snapshots, newest first by default."""
    return await SnapshotService(db).list_snapshots(
        page=page,
        limit=limit,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/latest", response_model=Optional[SnapshotSchema])
async def get_latest_snapshot(db: AsyncSession = Depends(get_db)):
    """Get the most recent snapshot, or null when none exist."""
    return await SnapshotService(db).get_latest_snapshot()


@router.get("/{snapshot_id}", response_model=SnapshotSchema)
async def get_snapshot(
    snapshot_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await SnapshotService(db).get_snapshot(snapshot_id)


@router.delete("/{snapshot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_snapshot(
    snapshot_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Delete a snapshot and its investor rows."""
    await SnapshotService(db).delete_snapshot(snapshot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@investors_router.get("/{investor_id}/snapshots", response_model=list[InvestorSnapshotHistorySchema])
async def get_investor_snapshots(
    investor_id: int,
    db: AsyncSession = Depends(get_db)
):
    """One investor's capital, ownership and fee across all snapshots."""
    rows = await SnapshotService(db).get_investor_snapshots(investor_id)
    return [
        InvestorSnapshotHistorySchema(
            id=row.id,
            snapshot_id=row.snapshot_id,
            investor_id=row.investor_id,
            capital_amount=row.capital_amount,
            ownership_percent=row.ownership_percent,
            performance_fee=row.performance_fee,
            snapshot_date=row.snapshot.date,
            snapshot_nav=row.snapshot.nav,
        )
        for row in rows
    ]
