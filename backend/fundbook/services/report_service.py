"""
Report Service.

Read-only summaries built on stored snapshots and the live ledger:
- Performance report (NAV movement between snapshots, realized/unrealized P&L, fees)
- Balance analysis (live NAV against total investor capital)
- Investor report (per-investor capital and ownership, capital distribution)
- Cashflow report (investor cashflows and asset payments grouped by period)
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fundbook.core.database import AsyncSessionLocal
from fundbook.core.errors import NotFoundError, ValidationError
from fundbook.core.money import Money, sum_money
from fundbook.models.enums import AssetEventType, CashflowType
from fundbook.models.period_snapshot import PeriodSnapshot
from fundbook.services.asset_service import AssetService
from fundbook.services.ledger import CashflowRecord, SqlLedgerReader, is_active_on
from fundbook.services.nav_calculator import NavCalculation, NavCalculator
from fundbook.services.ownership_calculator import OwnershipCalculator

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("1")

# (label, lower bound inclusive, upper bound exclusive); None means unbounded
CAPITAL_RANGES: List[Tuple[str, Decimal, Optional[Decimal]]] = [
    ("€0 - €10k", Decimal("0"), Decimal("10000")),
    ("€10k - €50k", Decimal("10000"), Decimal("50000")),
    ("€50k - €100k", Decimal("50000"), Decimal("100000")),
    ("€100k - €500k", Decimal("100000"), Decimal("500000")),
    ("€500k+", Decimal("500000"), None),
]


class CashflowGrouping(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    def period_key(self, on: date) -> str:
        if self is CashflowGrouping.YEAR:
            return str(on.year)
        if self is CashflowGrouping.QUARTER:
            return f"{on.year}-Q{(on.month - 1) // 3 + 1}"
        return on.strftime("%Y-%m")


@dataclass
class PeriodFee:
    period: str  # YYYY-MM
    total_fee: Decimal
    snapshot_count: int


@dataclass
class PerformanceFeeSummary:
    total_collected: Decimal
    average_rate: Optional[Decimal]
    by_period: List[PeriodFee] = field(default_factory=list)


@dataclass
class PerformanceReport:
    date_from: Optional[date]
    date_to: Optional[date]
    current_snapshot_nav: Optional[Decimal]
    previous_snapshot_nav: Optional[Decimal]
    nav_change: Optional[Decimal]
    nav_change_percent: Optional[Decimal]
    current: NavCalculation
    total_realized_pnl: Decimal
    total_unrealized_pnl: Decimal
    sold_asset_count: int
    performance_fees: PerformanceFeeSummary


@dataclass
class BalanceAnalysis:
    as_of: date
    nav: Decimal
    total_capital: Decimal
    difference: Decimal
    difference_percent: Decimal
    is_balanced: bool
    has_unrealized_gains: bool
    has_unrealized_losses: bool


@dataclass
class InvestorReportRow:
    investor_id: int
    name: str
    email: Optional[str]
    total_deposits: Decimal
    total_withdrawals: Decimal
    capital_amount: Decimal
    ownership_percent: Decimal
    last_activity: Optional[date]


@dataclass
class CapitalBucket:
    range: str
    count: int
    percentage: Decimal


@dataclass
class InvestorReport:
    date_from: Optional[date]
    date_to: date
    total_investors: int
    total_capital: Decimal
    average_capital: Decimal
    investors: List[InvestorReportRow] = field(default_factory=list)
    capital_distribution: List[CapitalBucket] = field(default_factory=list)


@dataclass
class PeriodCashflow:
    period: str
    inflows: Decimal
    outflows: Decimal
    net_flow: Decimal


@dataclass
class CashflowReport:
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
    by_period: List[PeriodCashflow] = field(default_factory=list)


class ReportService:

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.session = session
        self.clock = clock

    async def performance_report(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> PerformanceReport:
        async with self._get_session() as session:
            reader = SqlLedgerReader(session)

            stmt = select(PeriodSnapshot)
            if date_from is not None:
                stmt = stmt.where(PeriodSnapshot.date >= date_from)
            if date_to is not None:
                stmt = stmt.where(PeriodSnapshot.date <= date_to)
            stmt = stmt.order_by(PeriodSnapshot.date.desc(), PeriodSnapshot.id.desc())
            result = await session.execute(stmt)
            snapshots = list(result.scalars().all())

            current_nav = snapshots[0].nav if snapshots else None
            previous_nav = snapshots[1].nav if len(snapshots) > 1 else None
            nav_change = None
            nav_change_percent = None
            if current_nav is not None and previous_nav is not None:
                change = Money(current_nav).subtract(previous_nav)
                nav_change = change.round().to_decimal()
                if not Money(previous_nav).is_zero():
                    nav_change_percent = (
                        change.divide(Money(previous_nav).abs()).multiply(100).round(2).to_decimal()
                    )

            as_of = date_to or self.clock()
            current = await NavCalculator(reader, self.clock).calculate(as_of)

            # Realized P&L counts sales inside the window; unrealized uses the holdings at as_of
            assets = await reader.all_assets()
            sold = [
                a for a in assets
                if a.is_sold
                and a.sale_date is not None
                and a.sale_date <= as_of
                and (date_from is None or a.sale_date >= date_from)
            ]
            realized = sum_money(
                pnl for pnl in (AssetService.realized_pnl(a) for a in sold) if pnl is not None
            )
            unrealized = sum_money(
                Money(a.current_value).subtract(
                    a.acquired_price if a.acquired_price is not None else a.current_value
                )
                for a in assets
                if is_active_on(a, as_of)
            )

            report = PerformanceReport(
                date_from=date_from,
                date_to=date_to,
                current_snapshot_nav=current_nav,
                previous_snapshot_nav=previous_nav,
                nav_change=nav_change,
                nav_change_percent=nav_change_percent,
                current=current,
                total_realized_pnl=realized.round().to_decimal(),
                total_unrealized_pnl=unrealized.round().to_decimal(),
                sold_asset_count=len(sold),
                performance_fees=self._fee_summary(snapshots),
            )
            logger.debug(
                "Performance report: %d snapshots, %d sold assets", len(snapshots), len(sold)
            )
            return report

    def _fee_summary(self, snapshots: List[PeriodSnapshot]) -> PerformanceFeeSummary:
        charged = [
            s for s in snapshots
            if s.total_performance_fee is not None and Money(s.total_performance_fee).is_positive()
        ]
        if not charged:
            return PerformanceFeeSummary(total_collected=Money(0).round().to_decimal(), average_rate=None)

        by_period: Dict[str, List[PeriodSnapshot]] = {}
        for snapshot in charged:
            by_period.setdefault(snapshot.date.strftime("%Y-%m"), []).append(snapshot)

        rates = [s.performance_fee_rate for s in charged if s.performance_fee_rate is not None]
        average_rate = (
            sum_money(rates).divide(len(rates)).round().to_decimal() if rates else None
        )

        return PerformanceFeeSummary(
            total_collected=sum_money(s.total_performance_fee for s in charged).round().to_decimal(),
            average_rate=average_rate,
            by_period=[
                PeriodFee(
                    period=period,
                    total_fee=sum_money(s.total_performance_fee for s in items).round().to_decimal(),
                    snapshot_count=len(items),
                )
                for period, items in sorted(by_period.items())
            ],
        )

    async def balance_analysis(self, as_of: Optional[date] = None) -> BalanceAnalysis:
        """Compare live NAV with the capital investors have put in."""
        as_of = as_of or self.clock()
        async with self._get_session() as session:
            reader = SqlLedgerReader(session)
            nav = await NavCalculator(reader, self.clock).calculate(as_of)
            ownerships = await OwnershipCalculator(reader, self.clock).calculate(as_of)

        total_capital = sum_money(o.capital_amount for o in ownerships).round()
        difference = Money(nav.nav).subtract(total_capital).round()
        if total_capital.is_positive():
            difference_percent = difference.divide(total_capital).multiply(100).round(2)
        else:
            difference_percent = Money(0).round(2)

        return BalanceAnalysis(
            as_of=as_of,
            nav=nav.nav,
            total_capital=total_capital.to_decimal(),
            difference=difference.to_decimal(),
            difference_percent=difference_percent.to_decimal(),
            is_balanced=difference.abs() < BALANCE_TOLERANCE,
            has_unrealized_gains=difference.is_positive(),
            has_unrealized_losses=difference.is_negative(),
        )

    async def investor_report(
        self,
        investor_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> InvestorReport:
        """
        Capital and ownership per investor from the cashflows inside the window.

        ownership_percent is measured against the capital of every investor;
        investor_id narrows the rows and the totals, not the denominator.
        """
        date_to = date_to or self.clock()
        async with self._get_session() as session:
            reader = SqlLedgerReader(session)
            investors = await reader.investors()
            cashflows = await self._cashflows_between(reader, date_from, date_to)

        if investor_id is not None and all(inv.id != investor_id for inv in investors):
            raise NotFoundError("Investor", investor_id)

        last_activity: Dict[int, date] = {}
        for cf in cashflows:
            last_activity[cf.investor_id] = cf.date

        ownerships = OwnershipCalculator(reader, self.clock).compute(investors, cashflows)
        rows = [
            InvestorReportRow(
                investor_id=o.investor_id,
                name=o.name,
                email=o.email,
                total_deposits=o.total_deposits,
                total_withdrawals=o.total_withdrawals,
                capital_amount=o.capital_amount,
                ownership_percent=o.ownership_percent,
                last_activity=last_activity.get(o.investor_id),
            )
            for o in ownerships
            if investor_id is None or o.investor_id == investor_id
        ]

        total_capital = sum_money(r.capital_amount for r in rows).round()
        average_capital = total_capital.divide(len(rows)).round() if rows else Money(0).round()

        logger.debug("Investor report: %d investors, %d cashflows", len(rows), len(cashflows))
        return InvestorReport(
            date_from=date_from,
            date_to=date_to,
            total_investors=len(rows),
            total_capital=total_capital.to_decimal(),
            average_capital=average_capital.to_decimal(),
            investors=rows,
            capital_distribution=self._capital_distribution(rows),
        )

    def _capital_distribution(self, rows: List[InvestorReportRow]) -> List[CapitalBucket]:
        # Negative capital falls outside every range
        buckets = []
        for label, lower, upper in CAPITAL_RANGES:
            count = sum(
                1 for r in rows
                if r.capital_amount >= lower and (upper is None or r.capital_amount < upper)
            )
            if rows:
                percentage = Money(count).divide(len(rows)).multiply(100).round(2)
            else:
                percentage = Money(0).round(2)
            buckets.append(CapitalBucket(range=label, count=count, percentage=percentage.to_decimal()))
        return buckets

    async def cashflow_report(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        group_by: Union[CashflowGrouping, str] = CashflowGrouping.MONTH,
    ) -> CashflowReport:
        """
        Money moving in and out of the fund: investor deposits and asset
        PAYMENT_IN events are inflows, withdrawals and PAYMENT_OUT events outflows.
        """
        try:
            group_by = CashflowGrouping(group_by)
        except ValueError:
            raise ValidationError("Unsupported cashflow grouping", {"group_by": str(group_by)})

        date_to = date_to or self.clock()
        async with self._get_session() as session:
            reader = SqlLedgerReader(session)
            cashflows = await self._cashflows_between(reader, date_from, date_to)
            payments = await reader.payment_events(date_from, date_to)

        deposits = [(cf.date, Money(cf.amount)) for cf in cashflows if cf.type == CashflowType.DEPOSIT]
        withdrawals = [(cf.date, Money(cf.amount)) for cf in cashflows if cf.type == CashflowType.WITHDRAWAL]
        payments_in = [
            (e.date, Money(e.amount))
            for e in payments
            if e.type == AssetEventType.PAYMENT_IN and e.amount is not None
        ]
        payments_out = [
            (e.date, Money(e.amount).abs())
            for e in payments
            if e.type == AssetEventType.PAYMENT_OUT and e.amount is not None
        ]

        periods: Dict[str, List[Money]] = {}
        for on, amount in deposits + payments_in:
            periods.setdefault(group_by.period_key(on), [Money(0), Money(0)])[0] += amount
        for on, amount in withdrawals + payments_out:
            periods.setdefault(group_by.period_key(on), [Money(0), Money(0)])[1] += amount

        total_inflows = sum_money(a for _, a in deposits + payments_in).round()
        total_outflows = sum_money(a for _, a in withdrawals + payments_out).round()

        return CashflowReport(
            date_from=date_from,
            date_to=date_to,
            group_by=group_by,
            deposits=sum_money(a for _, a in deposits).round().to_decimal(),
            withdrawals=sum_money(a for _, a in withdrawals).round().to_decimal(),
            asset_payments_in=sum_money(a for _, a in payments_in).round().to_decimal(),
            asset_payments_out=sum_money(a for _, a in payments_out).round().to_decimal(),
            total_inflows=total_inflows.to_decimal(),
            total_outflows=total_outflows.to_decimal(),
            net_cashflow=total_inflows.subtract(total_outflows).round().to_decimal(),
            by_period=[
                PeriodCashflow(
                    period=period,
                    inflows=inflows.round().to_decimal(),
                    outflows=outflows.round().to_decimal(),
                    net_flow=inflows.subtract(outflows).round().to_decimal(),
                )
                for period, (inflows, outflows) in sorted(periods.items())
            ],
        )

    async def _cashflows_between(
        self, reader: SqlLedgerReader, date_from: Optional[date], date_to: date
    ) -> List[CashflowRecord]:
        cashflows = await reader.cashflows(date_to)
        if date_from is None:
            return cashflows
        return [cf for cf in cashflows if cf.date >= date_from]

    @asynccontextmanager
    async def _get_session(self):
        """Get database session, using provided one or creating new."""
        if self.session is not None:
            yield self.session
        else:
            async with AsyncSessionLocal() as session:
                try:
                    yield session
                finally:
                    await session.close()
