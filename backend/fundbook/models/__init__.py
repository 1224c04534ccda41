# Base
from fundbook.models.base import TimestampMixin, IdMixin

# Ledger
from fundbook.models.asset import Asset, AssetEvent
from fundbook.models.liability import Liability
from fundbook.models.bank_balance import BankBalance
from fundbook.models.investor import Investor, InvestorCashflow

# Snapshots
from fundbook.models.period_snapshot import PeriodSnapshot, InvestorSnapshot

__all__ = [
    "TimestampMixin",
    "IdMixin",
    "Asset",
    "AssetEvent",
    "Liability",
    "BankBalance",
    "Investor",
    "InvestorCashflow",
    "PeriodSnapshot",
    "InvestorSnapshot",
]
