"""
Typed, immutable records crossing from persistence into the calculators.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from fundbook.models.enums import AssetEventType, AssetStatus, CashflowType


@dataclass(frozen=True)
class AssetRecord:
    id: int
    name: str
    type: str
    current_value: Decimal
    status: AssetStatus
    acquired_price: Optional[Decimal] = None
    acquired_date: Optional[date] = None
    sale_price: Optional[Decimal] = None
    sale_date: Optional[date] = None

    @property
    def is_sold(self) -> bool:
        return self.status == AssetStatus.SOLD


@dataclass(frozen=True)
class AssetEventRecord:
    id: int
    asset_id: int
    type: AssetEventType
    date: date
    amount: Optional[Decimal] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class LiabilityRecord:
    id: int
    name: str
    current_balance: Decimal
    interest_rate: Optional[Decimal] = None
    maturity_date: Optional[date] = None


@dataclass(frozen=True)
class BankBalanceRecord:
    id: int
    account_name: str
    bank_name: Optional[str]
    amount: Decimal
    currency: str
    date: date

    @property
    def account_key(self) -> tuple[str, Optional[str]]:
        return (self.account_name, self.bank_name)


@dataclass(frozen=True)
class InvestorRecord:
    id: int
    name: str
    email: Optional[str] = None


@dataclass(frozen=True)
class CashflowRecord:
    id: int
    investor_id: int
    type: CashflowType
    amount: Decimal
    date: date
    note: Optional[str] = None
