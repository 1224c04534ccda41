"""Shared test fixtures for fundbook."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fundbook.core.database import Base
from fundbook.models import (
    Asset,
    BankBalance,
    Investor,
    InvestorCashflow,
    Liability,
)
from fundbook.models.enums import AssetEventType, AssetStatus, AssetType, CashflowType
from fundbook.services.ledger import (
    AssetEventRecord,
    AssetRecord,
    BankBalanceRecord,
    CashflowRecord,
    InvestorRecord,
    LedgerReader,
    LiabilityRecord,
    is_active_on,
    latest_per_account,
)

AS_OF = date(2024, 6, 30)


class FakeLedgerReader(LedgerReader):
    """In-memory ledger for calculator tests."""

    def __init__(
        self,
        assets: Optional[List[AssetRecord]] = None,
        liabilities: Optional[List[LiabilityRecord]] = None,
        bank_balances: Optional[List[BankBalanceRecord]] = None,
        investors: Optional[List[InvestorRecord]] = None,
        cashflows: Optional[List[CashflowRecord]] = None,
        events: Optional[List[AssetEventRecord]] = None,
    ):
        self._assets = assets or []
        self._liabilities = liabilities or []
        self._bank_balances = bank_balances or []
        self._investors = investors or []
        self._cashflows = cashflows or []
        self._events = events or []
        self.calls = 0

    async def active_assets(self, as_of):
        self.calls += 1
        return [a for a in self._assets if is_active_on(a, as_of)]

    async def all_assets(self):
        return list(self._assets)

    async def liabilities(self, as_of):
        return list(self._liabilities)

    async def latest_bank_balances_per_account(self, as_of):
        return latest_per_account(self._bank_balances, as_of)

    async def cashflows(self, upto_date):
        return sorted(
            (cf for cf in self._cashflows if cf.date <= upto_date),
            key=lambda cf: (cf.date, cf.id),
        )

    async def investors(self):
        return list(self._investors)

    async def asset_events(self, asset_id):
        return sorted(
            (e for e in self._events if e.asset_id == asset_id),
            key=lambda e: (e.date, e.id),
        )

    async def payment_events(self, date_from, date_to):
        return sorted(
            (
                e for e in self._events
                if e.type in (AssetEventType.PAYMENT_IN, AssetEventType.PAYMENT_OUT)
                and (date_from is None or e.date >= date_from)
                and e.date <= date_to
            ),
            key=lambda e: (e.date, e.id),
        )


def asset_record(id, value, status=AssetStatus.ACTIVE, type="real_estate", **kwargs) -> AssetRecord:
    return AssetRecord(
        id=id,
        name=f"Asset {id}",
        type=type,
        current_value=Decimal(value),
        status=status,
        **kwargs,
    )


def balance_record(id, account, amount, on, bank=None, currency="EUR") -> BankBalanceRecord:
    return BankBalanceRecord(
        id=id,
        account_name=account,
        bank_name=bank,
        amount=Decimal(amount),
        currency=currency,
        date=on,
    )


def deposit(id, investor_id, amount, on=date(2024, 1, 15)) -> CashflowRecord:
    return CashflowRecord(
        id=id, investor_id=investor_id, type=CashflowType.DEPOSIT, amount=Decimal(amount), date=on
    )


def withdrawal(id, investor_id, amount, on=date(2024, 3, 15)) -> CashflowRecord:
    return CashflowRecord(
        id=id, investor_id=investor_id, type=CashflowType.WITHDRAWAL, amount=Decimal(amount), date=on
    )


@pytest.fixture
def scenario_reader():
    """NAV 475000 fund owned 150000 / 175000 by two investors."""
    return FakeLedgerReader(
        assets=[asset_record(1, "500000")],
        bank_balances=[balance_record(1, "Main", "225000", date(2024, 6, 1))],
        liabilities=[LiabilityRecord(id=1, name="Bank loan", current_balance=Decimal("250000"))],
        investors=[
            InvestorRecord(id=1, name="Alice", email="alice@example.com"),
            InvestorRecord(id=2, name="Bob", email="bob@example.com"),
        ],
        cashflows=[deposit(1, 1, "150000"), deposit(2, 2, "175000")],
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fundbook.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


async def seed_fund(session: AsyncSession) -> dict:
    """
    Persist the NAV 475000 scenario:
    one active asset, one sold asset, a bank account with two dated balances,
    one liability and two investors with 150000 / 175000 capital.
    """
    house = Asset(
        name="Office building",
        type=AssetType.REAL_ESTATE.value,
        current_value=Decimal("500000"),
        status=AssetStatus.ACTIVE.value,
        acquired_price=Decimal("450000"),
        acquired_date=date(2023, 5, 1),
    )
    car = Asset(
        name="Company car",
        type=AssetType.VEHICLE.value,
        current_value=Decimal("0"),
        status=AssetStatus.SOLD.value,
        acquired_price=Decimal("30000"),
        acquired_date=date(2023, 1, 10),
        sale_price=Decimal("32000"),
        sale_date=date(2024, 2, 1),
    )
    alice = Investor(name="Alice", email="alice@example.com")
    bob = Investor(name="Bob", email="bob@example.com")
    session.add_all(
        [
            house,
            car,
            alice,
            bob,
            BankBalance(account_name="Main", bank_name="Tatra", amount=Decimal("100000"), date=date(2024, 1, 31)),
            BankBalance(account_name="Main", bank_name="Tatra", amount=Decimal("225000"), date=date(2024, 5, 31)),
            Liability(name="Bank loan", current_balance=Decimal("250000")),
        ]
    )
    await session.flush()
    session.add_all(
        [
            InvestorCashflow(investor_id=alice.id, type=CashflowType.DEPOSIT.value, amount=Decimal("200000"), date=date(2024, 1, 15)),
            InvestorCashflow(investor_id=alice.id, type=CashflowType.WITHDRAWAL.value, amount=Decimal("50000"), date=date(2024, 3, 1)),
            InvestorCashflow(investor_id=bob.id, type=CashflowType.DEPOSIT.value, amount=Decimal("175000"), date=date(2024, 1, 20)),
        ]
    )
    await session.commit()
    return {"house": house, "car": car, "alice": alice, "bob": bob}


@pytest_asyncio.fixture
async def seeded(session):
    return await seed_fund(session)
