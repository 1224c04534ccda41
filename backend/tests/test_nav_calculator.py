"""Tests for NavCalculator."""

from datetime import date
from decimal import Decimal

import pytest

from fundbook.models.enums import AssetStatus
from fundbook.services.ledger import LiabilityRecord, SqlLedgerReader
from fundbook.services.nav_calculator import NavCalculator

from conftest import AS_OF, FakeLedgerReader, asset_record, balance_record


class TestNavCalculator:
    @pytest.mark.asyncio
    async def test_scenario_nav(self, scenario_reader):
        result = await NavCalculator(scenario_reader).calculate(AS_OF)

        assert result.total_asset_value == Decimal("500000")
        assert result.total_bank_balance == Decimal("225000")
        assert result.total_liabilities == Decimal("250000")
        assert result.nav == Decimal("475000")
        assert result.as_of == AS_OF

    @pytest.mark.asyncio
    async def test_nav_is_exact_signed_sum(self):
        reader = FakeLedgerReader(
            assets=[asset_record(1, "100.1234564"), asset_record(2, "0.0000004")],
            bank_balances=[balance_record(1, "A", "33.3333335", date(2024, 1, 1))],
            liabilities=[LiabilityRecord(id=1, name="L", current_balance=Decimal("10.0000005"))],
        )
        result = await NavCalculator(reader).calculate(AS_OF)
        assert result.nav == (
            result.total_asset_value + result.total_bank_balance - result.total_liabilities
        )
        assert result.nav.as_tuple().exponent == -6

    @pytest.mark.asyncio
    async def test_empty_ledger(self):
        result = await NavCalculator(FakeLedgerReader()).calculate(AS_OF)
        assert result.nav == Decimal("0")
        assert result.asset_breakdown == []
        assert result.bank_breakdown == []

    @pytest.mark.asyncio
    async def test_sold_assets_excluded(self):
        reader = FakeLedgerReader(
            assets=[
                asset_record(1, "1000"),
                asset_record(2, "5000", status=AssetStatus.SOLD, sale_price=Decimal("6000"), sale_date=date(2024, 1, 1)),
            ],
        )
        result = await NavCalculator(reader).calculate(AS_OF)
        assert result.total_asset_value == Decimal("1000")

    @pytest.mark.asyncio
    async def test_bank_balance_not_double_counted(self):
        reader = FakeLedgerReader(
            bank_balances=[
                balance_record(1, "A", "100", date(2024, 1, 1)),
                balance_record(2, "A", "150", date(2024, 2, 1)),
            ],
        )
        result = await NavCalculator(reader).calculate(AS_OF)
        assert result.total_bank_balance == Decimal("150")

    @pytest.mark.asyncio
    async def test_mixed_currencies_summed_flat(self):
        reader = FakeLedgerReader(
            bank_balances=[
                balance_record(1, "EUR account", "100", date(2024, 1, 1)),
                balance_record(2, "USD account", "50", date(2024, 1, 1), currency="USD"),
            ],
        )
        result = await NavCalculator(reader).calculate(AS_OF)
        assert result.total_bank_balance == Decimal("150")
        assert [(c.currency, c.total_amount) for c in result.bank_breakdown] == [
            ("EUR", Decimal("100")),
            ("USD", Decimal("50")),
        ]

    @pytest.mark.asyncio
    async def test_asset_breakdown_by_type(self):
        reader = FakeLedgerReader(
            assets=[
                asset_record(1, "100", type="stock"),
                asset_record(2, "200", type="loan"),
                asset_record(3, "300", type="stock"),
            ],
        )
        result = await NavCalculator(reader).calculate(AS_OF)
        assert [(b.type, b.count, b.total_value) for b in result.asset_breakdown] == [
            ("loan", 1, Decimal("200")),
            ("stock", 2, Decimal("400")),
        ]

    @pytest.mark.asyncio
    async def test_reads_are_idempotent(self, scenario_reader):
        calculator = NavCalculator(scenario_reader)
        first = await calculator.calculate(AS_OF)
        second = await calculator.calculate(AS_OF)
        assert first == second

    @pytest.mark.asyncio
    async def test_default_as_of_uses_clock(self, scenario_reader):
        result = await NavCalculator(scenario_reader, clock=lambda: date(2024, 12, 31)).calculate()
        assert result.as_of == date(2024, 12, 31)

    @pytest.mark.asyncio
    async def test_sql_reader_scenario(self, session, seeded):
        result = await NavCalculator(SqlLedgerReader(session)).calculate(AS_OF)
        assert result.nav == Decimal("475000")
        assert [l.name for l in result.liability_breakdown] == ["Bank loan"]
