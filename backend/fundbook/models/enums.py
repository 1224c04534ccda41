"""
Enumerations stored as plain strings in the database.
"""
from enum import Enum


class AssetType(str, Enum):
    LOAN = "loan"
    REAL_ESTATE = "real_estate"
    VEHICLE = "vehicle"
    STOCK = "stock"
    INVENTORY = "inventory"
    SHARE_IN_COMPANY = "share_in_company"


class AssetStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"


class AssetEventType(str, Enum):
    VALUATION = "VALUATION"
    PAYMENT_IN = "PAYMENT_IN"
    PAYMENT_OUT = "PAYMENT_OUT"
    CAPEX = "CAPEX"
    NOTE = "NOTE"
    SALE = "SALE"

    # Loan assets
    LOAN_DISBURSEMENT = "LOAN_DISBURSEMENT"
    INTEREST_ACCRUAL = "INTEREST_ACCRUAL"
    INTEREST_PAYMENT = "INTEREST_PAYMENT"
    PRINCIPAL_PAYMENT = "PRINCIPAL_PAYMENT"
    LOAN_REPAYMENT = "LOAN_REPAYMENT"
    DEFAULT = "DEFAULT"


class CashflowType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


class ProfitBase(str, Enum):
    """How the snapshot writer derives the profit a performance fee is charged on."""

    CAPITAL = "capital"  # NAV minus total investor capital
    HIGH_WATER_MARK = "high_water_mark"  # NAV minus highest earlier snapshot NAV
    EXPLICIT = "explicit"  # profit supplied by the caller
