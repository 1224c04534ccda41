from sqlalchemy import Column, String, Date, Numeric, Text
from fundbook.core.database import Base
from fundbook.models.base import IdMixin, TimestampMixin


class Liability(Base, IdMixin, TimestampMixin):
    """
    Fund liability. Balance is updated in place, not event-sourced.
    """
    __tablename__ = "liabilities"

    name = Column(String(200), nullable=False)
    description = Column(Text)
    current_balance = Column(Numeric(20, 6), nullable=False, default=0)
    interest_rate = Column(Numeric(10, 6))
    maturity_date = Column(Date)
