from fundbook.services.ledger.base import LedgerReader, is_active_on, latest_per_account
from fundbook.services.ledger.records import (
    AssetEventRecord,
    AssetRecord,
    BankBalanceRecord,
    CashflowRecord,
    InvestorRecord,
    LiabilityRecord,
)
from fundbook.services.ledger.sql_reader import SqlLedgerReader

__all__ = [
    "LedgerReader",
    "SqlLedgerReader",
    "AssetRecord",
    "AssetEventRecord",
    "LiabilityRecord",
    "BankBalanceRecord",
    "InvestorRecord",
    "CashflowRecord",
    "latest_per_account",
    "is_active_on",
]
