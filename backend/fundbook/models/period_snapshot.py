"""
Frozen point-in-time NAV statements and their per-investor rows.
"""

from sqlalchemy import Column, String, Date, Numeric, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from fundbook.core.database import Base
from fundbook.models.base import IdMixin, TimestampMixin


class PeriodSnapshot(Base, IdMixin, TimestampMixin):
    """
    Immutable NAV snapshot. nav == total_asset_value + total_bank_balance - total_liabilities.
    No uniqueness on date: several snapshots may share one.
    """
    __tablename__ = "period_snapshots"

    date = Column(Date, nullable=False, index=True)
    total_asset_value = Column(Numeric(20, 6), nullable=False)
    total_bank_balance = Column(Numeric(20, 6), nullable=False)
    total_liabilities = Column(Numeric(20, 6), nullable=False)
    nav = Column(Numeric(20, 6), nullable=False)
    performance_fee_rate = Column(Numeric(10, 6))
    total_performance_fee = Column(Numeric(20, 6))
    profit_base = Column(String(20))

    investor_snapshots = relationship(
        "InvestorSnapshot",
        back_populates="snapshot",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="InvestorSnapshot.investor_id",
    )


class InvestorSnapshot(Base, IdMixin, TimestampMixin):
    """
    One investor's capital, ownership and fee share within a PeriodSnapshot.
    """
    __tablename__ = "investor_snapshots"
    __table_args__ = (
        Index("ix_investor_snapshots_investor", "investor_id"),
    )

    snapshot_id = Column(
        Integer,
        ForeignKey("period_snapshots.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    investor_id = Column(Integer, ForeignKey("investors.id"), nullable=False)
    capital_amount = Column(Numeric(20, 6), nullable=False)
    ownership_percent = Column(Numeric(10, 6), nullable=False)
    performance_fee = Column(Numeric(20, 6))

    snapshot = relationship("PeriodSnapshot", back_populates="investor_snapshots")
