"""
Snapshot Service.

Computes NAV, ownership and performance fees at a date and persists them as one
PeriodSnapshot plus one InvestorSnapshot per investor inside a single transaction.
A snapshot is either fully committed or not written at all; nothing in between
is ever visible to readers. Snapshots are immutable once committed.
"""

import logging
import math
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Sequence

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from fundbook.core.config import settings
from fundbook.core.database import AsyncSessionLocal
from fundbook.core.errors import (
    ConsistencyError,
    NotFoundError,
    SnapshotConflictError,
    ValidationError,
)
from fundbook.core.money import Money, MoneyLike, sum_money
from fundbook.models.enums import ProfitBase
from fundbook.models.investor import Investor
from fundbook.models.period_snapshot import InvestorSnapshot, PeriodSnapshot
from fundbook.services.ledger import SqlLedgerReader
from fundbook.services.nav_calculator import NavCalculation, NavCalculator
from fundbook.services.ownership_calculator import InvestorOwnership, OwnershipCalculator
from fundbook.services.performance_fee import FeeAllocation, PerformanceFeeAllocator

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "date": PeriodSnapshot.date,
    "nav": PeriodSnapshot.nav,
    "created_at": PeriodSnapshot.created_at,
}


@dataclass
class SnapshotPage:
    items: List[PeriodSnapshot]
    page: int
    limit: int
    total: int
    total_pages: int


class SnapshotService:
    """
    Snapshot creation and retrieval.

    Uses the provided session or opens its own per call.
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.session = session
        self.clock = clock
        self.fee_allocator = PerformanceFeeAllocator()

    # ---------- Calculations ----------

    async def calculate_nav(self, as_of: Optional[date] = None) -> NavCalculation:
        async with self._get_session() as session:
            return await NavCalculator(SqlLedgerReader(session), self.clock).calculate(as_of)

    async def calculate_ownership(self, as_of: Optional[date] = None) -> List[InvestorOwnership]:
        async with self._get_session() as session:
            return await OwnershipCalculator(SqlLedgerReader(session), self.clock).calculate(as_of)

    # ---------- Snapshot creation ----------

    async def create_snapshot(
        self,
        snapshot_date: Optional[date] = None,
        performance_fee_rate: Optional[MoneyLike] = None,
        profit: Optional[MoneyLike] = None,
        profit_base: Optional[str] = None,
    ) -> PeriodSnapshot:
        """
        Compute and persist a snapshot at snapshot_date (default: today).

        Args:
            snapshot_date: Date the snapshot describes
            performance_fee_rate: Fee rate in percent (20 means 20%); no fee when None
            profit: Profit to charge the fee on; derived from profit_base when None
            profit_base: "capital" or "high_water_mark" (default from settings)

        Returns:
            The committed PeriodSnapshot with its investor_snapshots loaded

        Raises:
            SnapshotConflictError: A snapshot exists for the date and duplicates are disabled
            ConsistencyError: Not every investor row was persisted; nothing is committed
        """
        snapshot_date = snapshot_date or self.clock()

        async with self._get_session() as session:
            if not settings.ALLOW_DUPLICATE_SNAPSHOT_DATES:
                existing_id = await self._existing_snapshot_id(session, snapshot_date)
                if existing_id is not None:
                    raise SnapshotConflictError(
                        f"Snapshot for {snapshot_date.isoformat()} already exists",
                        {"date": snapshot_date.isoformat(), "snapshot_id": existing_id},
                    )

            reader = SqlLedgerReader(session)
            nav = await NavCalculator(reader, self.clock).calculate(snapshot_date)
            ownerships = await OwnershipCalculator(reader, self.clock).calculate(snapshot_date)

            fees: Optional[FeeAllocation] = None
            base: Optional[ProfitBase] = None
            if performance_fee_rate is not None:
                base, profit_amount = await self._resolve_profit(
                    session, nav, ownerships, snapshot_date, profit, profit_base
                )
                fees = self.fee_allocator.allocate(profit_amount, performance_fee_rate, ownerships)

            try:
                snapshot = await self._insert_period_snapshot(session, snapshot_date, nav, fees, base)
                await self._insert_investor_snapshots(session, snapshot, ownerships, fees)
                await self._verify_investor_rows(session, snapshot, len(ownerships))
                await session.commit()
            except Exception as exc:
                await session.rollback()
                logger.exception("Snapshot creation for %s rolled back: %s", snapshot_date, exc)
                raise

            logger.info(
                "Snapshot created: id=%s date=%s nav=%s investors=%d fee=%s",
                snapshot.id,
                snapshot_date,
                nav.nav,
                len(ownerships),
                fees.total_performance_fee if fees else None,
            )
            return await self._load_snapshot(session, snapshot.id)

    async def _resolve_profit(
        self,
        session: AsyncSession,
        nav: NavCalculation,
        ownerships: Sequence[InvestorOwnership],
        snapshot_date: date,
        profit: Optional[MoneyLike],
        profit_base: Optional[str],
    ) -> tuple[ProfitBase, Money]:
        if profit is not None:
            return ProfitBase.EXPLICIT, Money(profit)

        try:
            base = ProfitBase(profit_base or settings.PERFORMANCE_FEE_PROFIT_BASE)
        except ValueError:
            raise ValidationError(
                f"Unsupported profit base: {profit_base}", {"profit_base": profit_base}
            )
        if base == ProfitBase.EXPLICIT:
            raise ValidationError("profit is required when profit_base is 'explicit'")

        total_capital = sum_money(o.capital_amount for o in ownerships)
        reference = total_capital
        if base == ProfitBase.HIGH_WATER_MARK:
            high_water_mark = await session.scalar(
                select(func.max(PeriodSnapshot.nav)).where(PeriodSnapshot.date <= snapshot_date)
            )
            if high_water_mark is not None:
                reference = Money(high_water_mark)

        return base, Money(nav.nav).subtract(reference)

    async def _existing_snapshot_id(self, session: AsyncSession, snapshot_date: date) -> Optional[int]:
        return await session.scalar(
            select(PeriodSnapshot.id).where(PeriodSnapshot.date == snapshot_date).limit(1)
        )

    async def _insert_period_snapshot(
        self,
        session: AsyncSession,
        snapshot_date: date,
        nav: NavCalculation,
        fees: Optional[FeeAllocation],
        base: Optional[ProfitBase],
    ) -> PeriodSnapshot:
        snapshot = PeriodSnapshot(
            date=snapshot_date,
            total_asset_value=nav.total_asset_value,
            total_bank_balance=nav.total_bank_balance,
            total_liabilities=nav.total_liabilities,
            nav=nav.nav,
            performance_fee_rate=fees.fee_rate if fees else None,
            total_performance_fee=fees.total_performance_fee if fees else None,
            profit_base=base.value if base else None,
            investor_snapshots=[],
        )
        session.add(snapshot)
        await session.flush()
        return snapshot

    async def _insert_investor_snapshots(
        self,
        session: AsyncSession,
        snapshot: PeriodSnapshot,
        ownerships: Sequence[InvestorOwnership],
        fees: Optional[FeeAllocation],
    ) -> None:
        for ownership in ownerships:
            snapshot.investor_snapshots.append(
                InvestorSnapshot(
                    investor_id=ownership.investor_id,
                    capital_amount=ownership.capital_amount,
                    ownership_percent=ownership.ownership_percent,
                    performance_fee=fees.fee_for(ownership.investor_id) if fees else None,
                )
            )
        await session.flush()

    async def _verify_investor_rows(
        self, session: AsyncSession, snapshot: PeriodSnapshot, expected: int
    ) -> None:
        persisted = await session.scalar(
            select(func.count())
            .select_from(InvestorSnapshot)
            .where(InvestorSnapshot.snapshot_id == snapshot.id)
        )
        if persisted != expected:
            raise ConsistencyError(
                "Snapshot investor rows incomplete",
                {"snapshot_id": snapshot.id, "expected": expected, "persisted": persisted},
            )

    # ---------- Retrieval ----------

    async def list_snapshots(
        self,
        page: int = 1,
        limit: int = 20,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        sort_by: str = "date",
        sort_order: str = "desc",
    ) -> SnapshotPage:
        """Stored snapshots, paginated. Read-only; nothing is recomputed."""
        if page < 1:
            raise ValidationError("page must be >= 1", {"page": page})
        if limit < 1 or limit > settings.SNAPSHOT_PAGE_SIZE_MAX:
            raise ValidationError(
                f"limit must be between 1 and {settings.SNAPSHOT_PAGE_SIZE_MAX}", {"limit": limit}
            )
        if sort_by not in SORTABLE_COLUMNS:
            raise ValidationError(f"Cannot sort by {sort_by}", {"sort_by": sort_by})
        if sort_order not in ("asc", "desc"):
            raise ValidationError("sort_order must be asc or desc", {"sort_order": sort_order})

        filters = []
        if date_from is not None:
            filters.append(PeriodSnapshot.date >= date_from)
        if date_to is not None:
            filters.append(PeriodSnapshot.date <= date_to)

        direction = asc if sort_order == "asc" else desc
        async with self._get_session() as session:
            total = await session.scalar(
                select(func.count()).select_from(PeriodSnapshot).where(*filters)
            )
            stmt = (
                select(PeriodSnapshot)
                .where(*filters)
                .order_by(direction(SORTABLE_COLUMNS[sort_by]), direction(PeriodSnapshot.id))
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await session.execute(stmt)
            items = list(result.scalars().all())

        return SnapshotPage(
            items=items,
            page=page,
            limit=limit,
            total=total or 0,
            total_pages=math.ceil((total or 0) / limit),
        )

    async def get_snapshot(self, snapshot_id: int) -> PeriodSnapshot:
        async with self._get_session() as session:
            return await self._load_snapshot(session, snapshot_id)

    async def get_latest_snapshot(self) -> Optional[PeriodSnapshot]:
        async with self._get_session() as session:
            stmt = (
                select(PeriodSnapshot)
                .order_by(PeriodSnapshot.date.desc(), PeriodSnapshot.id.desc())
                .limit(1)
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def get_investor_snapshots(self, investor_id: int) -> List[InvestorSnapshot]:
        """One investor's rows across all snapshots, newest snapshot first."""
        async with self._get_session() as session:
            investor = await session.get(Investor, investor_id)
            if investor is None:
                raise NotFoundError("Investor", investor_id)

            stmt = (
                select(InvestorSnapshot)
                .join(InvestorSnapshot.snapshot)
                .options(contains_eager(InvestorSnapshot.snapshot))
                .where(InvestorSnapshot.investor_id == investor_id)
                .order_by(PeriodSnapshot.date.desc(), PeriodSnapshot.id.desc())
            )
            result = await session.execute(stmt)
            return list(result.unique().scalars().all())

    async def delete_snapshot(self, snapshot_id: int) -> None:
        """Delete a snapshot together with its investor rows."""
        async with self._get_session() as session:
            snapshot = await self._load_snapshot(session, snapshot_id)
            await session.delete(snapshot)
            await session.flush()
            logger.info("Snapshot deleted: id=%s date=%s", snapshot_id, snapshot.date)

    async def _load_snapshot(self, session: AsyncSession, snapshot_id: int) -> PeriodSnapshot:
        stmt = (
            select(PeriodSnapshot)
            .where(PeriodSnapshot.id == snapshot_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        snapshot = result.scalar_one_or_none()
        if snapshot is None:
            raise NotFoundError("Snapshot", snapshot_id)
        return snapshot

    @asynccontextmanager
    async def _get_session(self):
        """Get database session, using provided one or creating new."""
        if self.session is not None:
            yield self.session
        else:
            async with AsyncSessionLocal() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
