"""
NAV Calculator.

NAV = sum(active asset values) + sum(latest bank balance per account) - sum(liabilities)

Bank balances in different currencies are summed flat without FX conversion;
the per-currency breakdown exposes the mix to callers.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from fundbook.core.money import Money, sum_money
from fundbook.services.ledger import (
    AssetRecord,
    BankBalanceRecord,
    LedgerReader,
    LiabilityRecord,
)


@dataclass(frozen=True)
class AssetTypeBreakdown:
    type: str
    count: int
    total_value: Decimal


@dataclass(frozen=True)
class CurrencyBreakdown:
    currency: str
    total_amount: Decimal


@dataclass(frozen=True)
class LiabilityBreakdown:
    id: int
    name: str
    current_balance: Decimal


@dataclass(frozen=True)
class NavCalculation:
    as_of: date
    total_asset_value: Decimal
    total_bank_balance: Decimal
    total_liabilities: Decimal
    nav: Decimal
    asset_breakdown: List[AssetTypeBreakdown] = field(default_factory=list)
    bank_breakdown: List[CurrencyBreakdown] = field(default_factory=list)
    liability_breakdown: List[LiabilityBreakdown] = field(default_factory=list)


class NavCalculator:
    """
    Derives NAV figures from a LedgerReader at a point in time.
    Reads only; repeated calls with the same as_of and ledger return equal results.
    """

    def __init__(self, reader: LedgerReader, clock: Callable[[], date] = date.today):
        self.reader = reader
        self.clock = clock

    async def calculate(self, as_of: Optional[date] = None) -> NavCalculation:
        as_of = as_of or self.clock()
        assets = await self.reader.active_assets(as_of)
        bank_balances = await self.reader.latest_bank_balances_per_account(as_of)
        liabilities = await self.reader.liabilities(as_of)
        return self.compute(assets, bank_balances, liabilities, as_of)

    def compute(
        self,
        assets: Sequence[AssetRecord],
        bank_balances: Sequence[BankBalanceRecord],
        liabilities: Sequence[LiabilityRecord],
        as_of: date,
    ) -> NavCalculation:
        # Totals are rounded first so nav is exactly their signed sum
        total_assets = sum_money(a.current_value for a in assets).round()
        total_bank = sum_money(b.amount for b in bank_balances).round()
        total_liabilities = sum_money(l.current_balance for l in liabilities).round()
        nav = total_assets.add(total_bank).subtract(total_liabilities)

        return NavCalculation(
            as_of=as_of,
            total_asset_value=total_assets.to_decimal(),
            total_bank_balance=total_bank.to_decimal(),
            total_liabilities=total_liabilities.to_decimal(),
            nav=nav.to_decimal(),
            asset_breakdown=self._asset_breakdown(assets),
            bank_breakdown=self._bank_breakdown(bank_balances),
            liability_breakdown=[
                LiabilityBreakdown(
                    id=l.id,
                    name=l.name,
                    current_balance=Money(l.current_balance).round().to_decimal(),
                )
                for l in liabilities
            ],
        )

    def _asset_breakdown(self, assets: Sequence[AssetRecord]) -> List[AssetTypeBreakdown]:
        counts: dict[str, int] = {}
        totals: dict[str, Money] = {}
        for asset in assets:
            counts[asset.type] = counts.get(asset.type, 0) + 1
            totals[asset.type] = totals.get(asset.type, Money(0)).add(asset.current_value)
        return [
            AssetTypeBreakdown(
                type=asset_type,
                count=counts[asset_type],
                total_value=totals[asset_type].round().to_decimal(),
            )
            for asset_type in sorted(counts)
        ]

    def _bank_breakdown(self, balances: Sequence[BankBalanceRecord]) -> List[CurrencyBreakdown]:
        totals: dict[str, Money] = {}
        for balance in balances:
            totals[balance.currency] = totals.get(balance.currency, Money(0)).add(balance.amount)
        return [
            CurrencyBreakdown(currency=currency, total_amount=totals[currency].round().to_decimal())
            for currency in sorted(totals)
        ]
