"""Tests for OwnershipCalculator."""

from decimal import Decimal

import pytest

from fundbook.core.errors import NotFoundError
from fundbook.services.ledger import InvestorRecord
from fundbook.services.ownership_calculator import OwnershipCalculator, ownership_tolerance

from conftest import AS_OF, FakeLedgerReader, deposit, withdrawal

INVESTORS = [
    InvestorRecord(id=1, name="Alice"),
    InvestorRecord(id=2, name="Bob"),
    InvestorRecord(id=3, name="Carol"),
]


class TestOwnershipCalculator:
    @pytest.mark.asyncio
    async def test_two_investor_scenario(self, scenario_reader):
        result = await OwnershipCalculator(scenario_reader).calculate(AS_OF)

        assert [o.investor_id for o in result] == [1, 2]
        assert result[0].capital_amount == Decimal("150000")
        assert result[1].capital_amount == Decimal("175000")
        assert result[0].ownership_percent == Decimal("46.153846")
        assert result[1].ownership_percent == Decimal("53.846154")

    @pytest.mark.asyncio
    async def test_sum_within_tolerance(self):
        reader = FakeLedgerReader(
            investors=INVESTORS,
            cashflows=[deposit(1, 1, "1"), deposit(2, 2, "1"), deposit(3, 3, "1")],
        )
        result = await OwnershipCalculator(reader).calculate(AS_OF)

        assert all(o.ownership_percent == Decimal("33.333333") for o in result)
        total = sum(o.ownership_percent for o in result)
        assert abs(total - Decimal("100")) <= ownership_tolerance(len(result))

    @pytest.mark.asyncio
    async def test_withdrawals_reduce_capital(self):
        reader = FakeLedgerReader(
            investors=INVESTORS[:2],
            cashflows=[deposit(1, 1, "200000"), withdrawal(2, 1, "50000"), deposit(3, 2, "150000")],
        )
        result = await OwnershipCalculator(reader).calculate(AS_OF)
        alice = result[0]
        assert alice.total_deposits == Decimal("200000")
        assert alice.total_withdrawals == Decimal("50000")
        assert alice.capital_amount == Decimal("150000")
        assert alice.ownership_percent == Decimal("50")

    @pytest.mark.asyncio
    async def test_zero_investors(self):
        assert await OwnershipCalculator(FakeLedgerReader()).calculate(AS_OF) == []

    @pytest.mark.asyncio
    async def test_zero_capital_gives_zero_percent(self):
        reader = FakeLedgerReader(
            investors=INVESTORS[:2],
            cashflows=[deposit(1, 1, "100"), withdrawal(2, 1, "100")],
        )
        result = await OwnershipCalculator(reader).calculate(AS_OF)
        assert [o.ownership_percent for o in result] == [Decimal("0"), Decimal("0")]

    @pytest.mark.asyncio
    async def test_overdrawn_investor_gets_negative_share(self):
        reader = FakeLedgerReader(
            investors=INVESTORS[:2],
            cashflows=[deposit(1, 1, "100"), withdrawal(2, 1, "150"), deposit(3, 2, "100")],
        )
        result = await OwnershipCalculator(reader).calculate(AS_OF)

        assert [o.capital_amount for o in result] == [Decimal("-50"), Decimal("100")]
        assert [o.ownership_percent for o in result] == [Decimal("-100"), Decimal("200")]
        assert sum(o.ownership_percent for o in result) == Decimal("100")

    @pytest.mark.asyncio
    async def test_future_cashflows_ignored(self):
        reader = FakeLedgerReader(
            investors=INVESTORS[:2],
            cashflows=[deposit(1, 1, "100"), deposit(2, 2, "100", on=AS_OF.replace(year=2025))],
        )
        result = await OwnershipCalculator(reader).calculate(AS_OF)
        assert result[0].ownership_percent == Decimal("100")
        assert result[1].capital_amount == Decimal("0")

    def test_unknown_investor_in_cashflows(self):
        calculator = OwnershipCalculator(FakeLedgerReader())
        with pytest.raises(NotFoundError):
            calculator.compute(INVESTORS[:1], [deposit(1, 99, "10")])

    def test_tolerance(self):
        assert ownership_tolerance(3) == Decimal("0.000003")
