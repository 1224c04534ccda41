from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, List, Optional

from fundbook.services.ledger.records import (
    AssetEventRecord,
    AssetRecord,
    BankBalanceRecord,
    CashflowRecord,
    InvestorRecord,
    LiabilityRecord,
)


class LedgerReader(ABC):
    """Read-only access to the fund ledger. Implementations must not mutate state."""

    @abstractmethod
    async def active_assets(self, as_of: date) -> List[AssetRecord]:
        """Assets not sold as of the date (sale_date after as_of counts as unsold)."""
        pass

    @abstractmethod
    async def all_assets(self) -> List[AssetRecord]:
        """Every asset regardless of status."""
        pass

    @abstractmethod
    async def liabilities(self, as_of: date) -> List[LiabilityRecord]:
        pass

    @abstractmethod
    async def latest_bank_balances_per_account(self, as_of: date) -> List[BankBalanceRecord]:
        """
        One row per (account_name, bank_name): the latest dated on or before as_of.
        Never several historical rows of the same account.
        """
        pass

    @abstractmethod
    async def cashflows(self, upto_date: date) -> List[CashflowRecord]:
        """Investor cashflows dated on or before upto_date, in (date, id) order."""
        pass

    @abstractmethod
    async def investors(self) -> List[InvestorRecord]:
        pass

    @abstractmethod
    async def asset_events(self, asset_id: int) -> List[AssetEventRecord]:
        """Events of one asset in chronological (date, id) order."""
        pass

    @abstractmethod
    async def payment_events(self, date_from: Optional[date], date_to: date) -> List[AssetEventRecord]:
        """PAYMENT_IN and PAYMENT_OUT events of every asset dated within the range, in (date, id) order."""
        pass


def latest_per_account(balances: Iterable[BankBalanceRecord], as_of: date) -> List[BankBalanceRecord]:
    """
    Reduce dated balance rows to the latest row per account on or before as_of.
    Ties on the same date go to the highest id (last recorded).
    """
    latest: dict[tuple, BankBalanceRecord] = {}
    for balance in balances:
        if balance.date > as_of:
            continue
        current = latest.get(balance.account_key)
        if current is None or (balance.date, balance.id) > (current.date, current.id):
            latest[balance.account_key] = balance
    return sorted(latest.values(), key=lambda b: (b.account_name, b.bank_name or ""))


def is_active_on(asset: AssetRecord, as_of: date) -> bool:
    """Whether an asset was held on as_of: acquired by then and not yet sold."""
    if asset.acquired_date is not None and asset.acquired_date > as_of:
        return False
    if asset.is_sold:
        return asset.sale_date is not None and asset.sale_date > as_of
    return True
