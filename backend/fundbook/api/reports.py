"""
Reports API Router.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel
from decimal import Decimal

from fundbook.api.fund import NavSchema
from fundbook.core.database import get_db
from fundbook.services.report_service import CashflowGrouping, ReportService

router = APIRouter()

# ---------- Pydantic Schemas ----------

class PeriodFeeSchema(BaseModel):
    period: str
    total_fee: Decimal
    snapshot_count: int

    class Config:
        from_attributes = True


class PerformanceFeeSummarySchema(BaseModel):
    total_collected: Decimal
    average_rate: Optional[Decimal]
    by_period: list[PeriodFeeSchema] = []

    class Config:
        from_attributes = True


class PerformanceReportSchema(BaseModel):
    date_from: Optional[date]
    date_to: Optional[date]
    current_snapshot_nav: Optional[Decimal]
    previous_snapshot_nav: Optional[Decimal]
    nav_change: Optional[Decimal]
    nav_change_percent: Optional[Decimal]
    current: NavSchema
    total_realized_pnl: Decimal
    total_unrealized_pnl: Decimal
    sold_asset_count: int
    performance_fees: PerformanceFeeSummarySchema

    class Config:
        from_attributes = True


class BalanceAnalysisSchema(BaseModel):
    as_of: date
    nav: Decimal
    total_capital: Decimal
    difference: Decimal
    difference_percent: Decimal
    is_balanced: bool
    has_unrealized_gains: bool
    has_unrealized_losses: bool

    class Config:
        from_attributes = True


class InvestorReportRowSchema(BaseModel):
    investor_id: int
    name: str
    email: Optional[str]
    total_deposits: Decimal
    total_withdrawals: Decimal
    capital_amount: Decimal
    ownership_percent: Decimal
    last_activity: Optional[date]

    class Config:
        from_attributes = True


class CapitalBucketSchema(BaseModel):
    range: str
    count: int
    percentage: Decimal

    class Config:
        from_attributes = True


class InvestorReportSchema(BaseModel):
    date_from: Optional[date]
    date_to: date
    total_investors: int
    total_capital: Decimal
    average_capital: Decimal
    investors: list[InvestorReportRowSchema] = []
    capital_distribution: list[CapitalBucketSchema] = []

    class Config:
        from_attributes = True


class PeriodCashflowSchema(BaseModel):
    period: str
    inflows: Decimal
    outflows: Decimal
    net_flow: Decimal

    class Config:
        from_attributes = True


class CashflowReportSchema(BaseModel):
    date_from: Optional[date]
    date_to: date
    group_by: CashflowGrouping
    deposits: Decimal
    withdrawals: Decimal
    asset_payments_in: Decimal
    asset_payments_out: Decimal
    total_inflows: Decimal
    total_outflows: Decimal
    net_cashflow: Decimal
    by_period: list[PeriodCashflowSchema] = []

    class Config:
        from_attributes = True


# ---------- Endpoints ----------

@router.get("/performance", response_model=PerformanceReportSchema)
async def get_performance_report(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
):
    """NAV movement between snapshots, P&L and performance fees collected."""
    return await ReportService(db).performance_report(date_from, date_to)


@router.get("/balance", response_model=BalanceAnalysisSchema)
async def get_balance_analysis(
    as_of: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
):
    """Live NAV compared with total investor capital."""
    return await ReportService(db).balance_analysis(as_of)


@router.get("/investors", response_model=InvestorReportSchema)
async def get_investor_report(
    investor_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
):
    """Capital, ownership and last activity per investor."""
    return await ReportService(db).investor_report(investor_id, date_from, date_to)


@router.get("/cashflow", response_model=CashflowReportSchema)
async def get_cashflow_report(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    group_by: CashflowGrouping = CashflowGrouping.MONTH,
    db: AsyncSession = Depends(get_db)
):
    """Investor cashflows and asset payments grouped by month, quarter or year."""
    return await ReportService(db).cashflow_report(date_from, date_to, group_by)
