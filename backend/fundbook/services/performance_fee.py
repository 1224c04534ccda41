"""
Performance Fee Allocator.

Applies a fee rate to a caller-supplied profit and splits the fee across
investors by ownership percentage. The allocator never derives profit itself.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional, Sequence

from fundbook.core.errors import ValidationError
from fundbook.core.money import Money, MoneyLike
from fundbook.services.ownership_calculator import InvestorOwnership


@dataclass(frozen=True)
class FeeAllocation:
    """
    fee_rate None/0 -> no fee applies (total and shares None).
    profit <= 0 -> fee applies but nothing is charged (total and shares 0).
    """
    fee_rate: Optional[Decimal]
    profit: Decimal
    total_performance_fee: Optional[Decimal]
    investor_fees: Dict[int, Optional[Decimal]] = field(default_factory=dict)

    def fee_for(self, investor_id: int) -> Optional[Decimal]:
        return self.investor_fees.get(investor_id)


class PerformanceFeeAllocator:

    def allocate(
        self,
        profit: MoneyLike,
        fee_rate: Optional[MoneyLike],
        ownerships: Sequence[InvestorOwnership],
    ) -> FeeAllocation:
        profit_money = Money(profit)
        rate = self._validate_rate(fee_rate)

        if rate is None or rate.is_zero():
            return FeeAllocation(
                fee_rate=rate.to_decimal() if rate is not None else None,
                profit=profit_money.to_decimal(),
                total_performance_fee=None,
                investor_fees={o.investor_id: None for o in ownerships},
            )

        # No negative (clawback) fees
        if not profit_money.is_positive():
            zero = Money(0).round().to_decimal()
            return FeeAllocation(
                fee_rate=rate.to_decimal(),
                profit=profit_money.to_decimal(),
                total_performance_fee=zero,
                investor_fees={o.investor_id: zero for o in ownerships},
            )

        total_fee = profit_money.percentage(rate).round()
        investor_fees = {
            o.investor_id: total_fee.percentage(o.ownership_percent).round().to_decimal()
            for o in ownerships
        }
        return FeeAllocation(
            fee_rate=rate.to_decimal(),
            profit=profit_money.to_decimal(),
            total_performance_fee=total_fee.to_decimal(),
            investor_fees=investor_fees,
        )

    def _validate_rate(self, fee_rate: Optional[MoneyLike]) -> Optional[Money]:
        if fee_rate is None:
            return None
        rate = Money(fee_rate)
        if rate.is_negative() or rate > 100:
            raise ValidationError(
                "Performance fee rate must be between 0 and 100",
                {"performance_fee_rate": str(fee_rate)},
            )
        return rate
