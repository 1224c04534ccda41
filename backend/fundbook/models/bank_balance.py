from sqlalchemy import Column, String, Date, Numeric, Index
from fundbook.core.database import Base
from fundbook.models.base import IdMixin, TimestampMixin


class BankBalance(Base, IdMixin, TimestampMixin):
    """
    Dated balance of a bank account. Several rows per account accumulate
    over time; only the latest one per (account_name, bank_name) is current.
    """
    __tablename__ = "bank_balances"
    __table_args__ = (
        Index("ix_bank_balances_account_date", "account_name", "bank_name", "date"),
    )

    account_name = Column(String(200), nullable=False)
    bank_name = Column(String(200))
    amount = Column(Numeric(20, 6), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    date = Column(Date, nullable=False)
