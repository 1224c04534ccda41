from sqlalchemy import CheckConstraint, Column, String, Date, Numeric, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from fundbook.core.database import Base
from fundbook.models.base import IdMixin, TimestampMixin


class Investor(Base, IdMixin, TimestampMixin):
    __tablename__ = "investors"

    name = Column(String(200), nullable=False)
    email = Column(String(200), unique=True)

    cashflows = relationship("InvestorCashflow", back_populates="investor")


class InvestorCashflow(Base, IdMixin, TimestampMixin):
    """
    Append-only investor deposit/withdrawal. amount is always positive;
    type carries the direction.
    """
    __tablename__ = "investor_cashflows"
    __table_args__ = (
        Index("ix_investor_cashflows_investor_date", "investor_id", "date"),
        CheckConstraint("type IN ('DEPOSIT', 'WITHDRAWAL')", name="ck_investor_cashflows_type"),
        CheckConstraint("amount > 0", name="ck_investor_cashflows_amount_positive"),
    )

    investor_id = Column(Integer, ForeignKey("investors.id"), nullable=False)
    type = Column(String(20), nullable=False)
    amount = Column(Numeric(20, 6), nullable=False)
    date = Column(Date, nullable=False)
    note = Column(Text)

    investor = relationship("Investor", back_populates="cashflows")
