"""
Asset Service.

Appends asset events, applies each one to current_value and
moves assets through their one-way ACTIVE -> SOLD lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fundbook.core.database import AsyncSessionLocal
from fundbook.core.errors import InvalidOperationError, NotFoundError, ValidationError
from fundbook.core.money import Money, MoneyLike
from fundbook.models.asset import Asset, AssetEvent
from fundbook.models.enums import AssetEventType, AssetStatus
from fundbook.services.asset_valuation import apply_event, replay_value
from fundbook.services.ledger import SqlLedgerReader

logger = logging.getLogger(__name__)


class AssetService:

    def __init__(self, session: Optional[AsyncSession] = None):
        self.session = session

    @staticmethod
    def realized_pnl(asset) -> Optional[Decimal]:
        """sale_price - acquired_price for a sold asset, None when either is unknown."""
        if asset.sale_price is None or asset.acquired_price is None:
            return None
        return Money(asset.sale_price).subtract(asset.acquired_price).round().to_decimal()

    async def get_asset(self, asset_id: int) -> Asset:
        async with self._get_session() as session:
            return await self._load_asset(session, asset_id)

    async def record_event(
        self,
        asset_id: int,
        event_type: AssetEventType,
        amount: Optional[MoneyLike] = None,
        event_date: Optional[date] = None,
        note: Optional[str] = None,
    ) -> AssetEvent:
        """
        Append an event to an active asset and apply it to current_value.

        SALE events are only written by sell_asset.
        """
        event_type = AssetEventType(event_type)
        if event_type == AssetEventType.SALE:
            raise ValidationError("Use the sell operation to record a sale", {"type": event_type.value})

        async with self._get_session() as session:
            asset = await self._load_asset(session, asset_id)
            if asset.status == AssetStatus.SOLD.value:
                raise InvalidOperationError(
                    "Cannot record events on a sold asset", {"asset_id": asset_id}
                )

            event = AssetEvent(
                asset_id=asset.id,
                type=event_type.value,
                amount=Money(amount).round().to_decimal() if amount is not None else None,
                date=event_date or date.today(),
                note=note,
            )
            session.add(event)
            await session.flush()

            asset.current_value = (
                apply_event(asset.current_value, event_type, event.amount).round().to_decimal()
            )
            await session.flush()

            logger.info(
                "Asset %s event %s recorded, current_value=%s",
                asset.id,
                event_type.value,
                asset.current_value,
            )
            return event

    async def rebuild_value(self, asset_id: int) -> Asset:
        """Recompute current_value by replaying the full event history from acquired_price."""
        async with self._get_session() as session:
            asset = await self._load_asset(session, asset_id)
            events = await SqlLedgerReader(session).asset_events(asset.id)
            asset.current_value = replay_value(asset.acquired_price, events).to_decimal()
            await session.flush()

            logger.info(
                "Asset %s rebuilt from %d events, current_value=%s",
                asset.id,
                len(events),
                asset.current_value,
            )
            return asset

    async def sell_asset(
        self,
        asset_id: int,
        sale_price: MoneyLike,
        sale_date: Optional[date] = None,
    ) -> Asset:
        """Mark an asset SOLD. Selling is terminal and happens at most once."""
        price = Money(sale_price).round()
        if price.is_negative():
            raise ValidationError("Sale price cannot be negative", {"sale_price": str(price)})

        async with self._get_session() as session:
            asset = await self._load_asset(session, asset_id)
            if asset.status == AssetStatus.SOLD.value:
                raise InvalidOperationError("Asset is already sold", {"asset_id": asset_id})

            sale_date = sale_date or date.today()
            asset.status = AssetStatus.SOLD.value
            asset.sale_price = price.to_decimal()
            asset.sale_date = sale_date
            session.add(
                AssetEvent(
                    asset_id=asset.id,
                    type=AssetEventType.SALE.value,
                    amount=price.to_decimal(),
                    date=sale_date,
                )
            )
            await session.flush()

            logger.info(
                "Asset %s sold on %s for %s (realized P&L %s)",
                asset.id,
                sale_date,
                price,
                self.realized_pnl(asset),
            )
            return asset

    async def _load_asset(self, session: AsyncSession, asset_id: int) -> Asset:
        asset = await session.get(Asset, asset_id)
        if asset is None:
            raise NotFoundError("Asset", asset_id)
        return asset

    @asynccontextmanager
    async def _get_session(self):
        """Get database session, using provided one or creating new."""
        if self.session is not None:
            yield self.session
        else:
            async with AsyncSessionLocal() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
