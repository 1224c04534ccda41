import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fundbook.models.asset import Asset, AssetEvent
from fundbook.models.bank_balance import BankBalance
from fundbook.models.enums import AssetEventType, AssetStatus, CashflowType
from fundbook.models.investor import Investor, InvestorCashflow
from fundbook.models.liability import Liability
from fundbook.services.ledger.base import LedgerReader, latest_per_account
from fundbook.services.ledger.records import (
    AssetEventRecord,
    AssetRecord,
    BankBalanceRecord,
    CashflowRecord,
    InvestorRecord,
    LiabilityRecord,
)

logger = logging.getLogger(__name__)


class SqlLedgerReader(LedgerReader):
    """LedgerReader over an AsyncSession. Issues SELECTs only."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_assets(self, as_of: date) -> List[AssetRecord]:
        stmt = (
            select(Asset)
            .where(
                or_(
                    Asset.status != AssetStatus.SOLD.value,
                    and_(Asset.sale_date.is_not(None), Asset.sale_date > as_of),
                ),
                or_(Asset.acquired_date.is_(None), Asset.acquired_date <= as_of),
            )
            .order_by(Asset.id)
        )
        result = await self.session.execute(stmt)
        return [_asset_record(row) for row in result.scalars()]

    async def all_assets(self) -> List[AssetRecord]:
        result = await self.session.execute(select(Asset).order_by(Asset.id))
        return [_asset_record(row) for row in result.scalars()]

    async def liabilities(self, as_of: date) -> List[LiabilityRecord]:
        # Balances are maintained in place; as_of cannot roll them back
        result = await self.session.execute(select(Liability).order_by(Liability.id))
        return [
            LiabilityRecord(
                id=row.id,
                name=row.name,
                current_balance=row.current_balance,
                interest_rate=row.interest_rate,
                maturity_date=row.maturity_date,
            )
            for row in result.scalars()
        ]

    async def latest_bank_balances_per_account(self, as_of: date) -> List[BankBalanceRecord]:
        stmt = (
            select(BankBalance)
            .where(BankBalance.date <= as_of)
            .order_by(BankBalance.date, BankBalance.id)
        )
        result = await self.session.execute(stmt)
        rows = [
            BankBalanceRecord(
                id=row.id,
                account_name=row.account_name,
                bank_name=row.bank_name,
                amount=row.amount,
                currency=row.currency,
                date=row.date,
            )
            for row in result.scalars()
        ]
        latest = latest_per_account(rows, as_of)
        logger.debug("Bank balances: %d rows reduced to %d accounts", len(rows), len(latest))
        return latest

    async def cashflows(self, upto_date: date) -> List[CashflowRecord]:
        stmt = (
            select(InvestorCashflow)
            .where(InvestorCashflow.date <= upto_date)
            .order_by(InvestorCashflow.date, InvestorCashflow.id)
        )
        result = await self.session.execute(stmt)
        return [
            CashflowRecord(
                id=row.id,
                investor_id=row.investor_id,
                type=CashflowType(row.type),
                amount=row.amount,
                date=row.date,
                note=row.note,
            )
            for row in result.scalars()
        ]

    async def investors(self) -> List[InvestorRecord]:
        result = await self.session.execute(select(Investor).order_by(Investor.id))
        return [
            InvestorRecord(id=row.id, name=row.name, email=row.email)
            for row in result.scalars()
        ]

    async def asset_events(self, asset_id: int) -> List[AssetEventRecord]:
        stmt = (
            select(AssetEvent)
            .where(AssetEvent.asset_id == asset_id)
            .order_by(AssetEvent.date, AssetEvent.id)
        )
        result = await self.session.execute(stmt)
        return [_event_record(row) for row in result.scalars()]

    async def payment_events(self, date_from: Optional[date], date_to: date) -> List[AssetEventRecord]:
        stmt = select(AssetEvent).where(
            AssetEvent.type.in_([AssetEventType.PAYMENT_IN.value, AssetEventType.PAYMENT_OUT.value]),
            AssetEvent.date <= date_to,
        )
        if date_from is not None:
            stmt = stmt.where(AssetEvent.date >= date_from)
        result = await self.session.execute(stmt.order_by(AssetEvent.date, AssetEvent.id))
        return [_event_record(row) for row in result.scalars()]


def _asset_record(row: Asset) -> AssetRecord:
    return AssetRecord(
        id=row.id,
        name=row.name,
        type=row.type,
        current_value=row.current_value,
        status=AssetStatus(row.status),
        acquired_price=row.acquired_price,
        acquired_date=row.acquired_date,
        sale_price=row.sale_price,
        sale_date=row.sale_date,
    )


def _event_record(row: AssetEvent) -> AssetEventRecord:
    return AssetEventRecord(
        id=row.id,
        asset_id=row.asset_id,
        type=AssetEventType(row.type),
        date=row.date,
        amount=row.amount,
        note=row.note,
    )
