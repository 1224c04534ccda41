from sqlalchemy import CheckConstraint, Column, String, Date, Numeric, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from fundbook.core.database import Base
from fundbook.models.base import IdMixin, TimestampMixin
from fundbook.models.enums import AssetStatus


class Asset(Base, IdMixin, TimestampMixin):
    """
    Fund asset. ACTIVE assets count toward NAV at current_value;
    SOLD is terminal and carries sale_price/sale_date.
    """
    __tablename__ = "assets"
    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE', 'SOLD')", name="ck_assets_status"),
        CheckConstraint(
            "status <> 'SOLD' OR (sale_price IS NOT NULL AND sale_date IS NOT NULL)",
            name="ck_assets_sold_has_sale",
        ),
    )

    name = Column(String(200), nullable=False)
    type = Column(String(30), nullable=False)
    description = Column(Text)
    current_value = Column(Numeric(20, 6), nullable=False, default=0)
    status = Column(String(10), nullable=False, default=AssetStatus.ACTIVE.value, index=True)
    acquired_price = Column(Numeric(20, 6))
    acquired_date = Column(Date)
    sale_price = Column(Numeric(20, 6))
    sale_date = Column(Date)

    events = relationship(
        "AssetEvent",
        back_populates="asset",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AssetEvent.date",
    )


class AssetEvent(Base, IdMixin, TimestampMixin):
    """
    Append-only valuation/payment/capex history of one asset.
    """
    __tablename__ = "asset_events"
    __table_args__ = (
        Index("ix_asset_events_asset_date", "asset_id", "date"),
    )

    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False)
    amount = Column(Numeric(20, 6))
    date = Column(Date, nullable=False)
    note = Column(Text)

    asset = relationship("Asset", back_populates="events")
