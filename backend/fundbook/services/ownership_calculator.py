"""
Ownership Calculator.

Each investor's capital basis is deposits minus withdrawals to date; ownership is
that basis as a share of total fund capital. Percentages are rounded independently
per investor (HALF_EVEN, 6 dp) with no residual correction, so their sum differs
from 100 by at most N * 10^-6 for N investors.

When total capital is positive but one investor has withdrawn more than they
deposited, that investor gets a negative percentage and the rest sum to more than 100.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence

from fundbook.core.errors import NotFoundError
from fundbook.core.money import Money, sum_money
from fundbook.models.enums import CashflowType
from fundbook.services.ledger import CashflowRecord, InvestorRecord, LedgerReader


@dataclass(frozen=True)
class InvestorOwnership:
    investor_id: int
    name: str
    email: Optional[str]
    total_deposits: Decimal
    total_withdrawals: Decimal
    capital_amount: Decimal
    ownership_percent: Decimal


def ownership_tolerance(investor_count: int) -> Decimal:
    """Maximum deviation of sum(ownership_percent) from 100."""
    return Decimal(investor_count) * Decimal("0.000001")


class OwnershipCalculator:

    def __init__(self, reader: LedgerReader, clock: Callable[[], date] = date.today):
        self.reader = reader
        self.clock = clock

    async def calculate(self, as_of: Optional[date] = None) -> List[InvestorOwnership]:
        as_of = as_of or self.clock()
        investors = await self.reader.investors()
        cashflows = await self.reader.cashflows(as_of)
        return self.compute(investors, [cf for cf in cashflows if cf.date <= as_of])

    def compute(
        self,
        investors: Sequence[InvestorRecord],
        cashflows: Sequence[CashflowRecord],
    ) -> List[InvestorOwnership]:
        deposits: Dict[int, Money] = {inv.id: Money(0) for inv in investors}
        withdrawals: Dict[int, Money] = {inv.id: Money(0) for inv in investors}

        for cf in cashflows:
            if cf.investor_id not in deposits:
                raise NotFoundError("Investor", cf.investor_id)
            if cf.type == CashflowType.DEPOSIT:
                deposits[cf.investor_id] = deposits[cf.investor_id].add(cf.amount)
            else:
                withdrawals[cf.investor_id] = withdrawals[cf.investor_id].add(cf.amount)

        capital = {
            inv.id: deposits[inv.id].subtract(withdrawals[inv.id]) for inv in investors
        }
        total_capital = sum_money(capital.values())

        ownerships = []
        for inv in sorted(investors, key=lambda i: i.id):
            ownerships.append(
                InvestorOwnership(
                    investor_id=inv.id,
                    name=inv.name,
                    email=inv.email,
                    total_deposits=deposits[inv.id].round().to_decimal(),
                    total_withdrawals=withdrawals[inv.id].round().to_decimal(),
                    capital_amount=capital[inv.id].round().to_decimal(),
                    ownership_percent=self._percent(capital[inv.id], total_capital),
                )
            )
        return ownerships

    def _percent(self, capital: Money, total_capital: Money) -> Decimal:
        # A fund with no (or negative) capital has no ownership to distribute
        if not total_capital.is_positive():
            return Money(0).round().to_decimal()
        return capital.divide(total_capital).multiply(100).round().to_decimal()
