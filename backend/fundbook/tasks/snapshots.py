"""
Period snapshot tasks.

Month-end snapshot creation, triggered by celery beat on the first of the month.
"""
import asyncio
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from fundbook.core.config import settings
from fundbook.core.database import AsyncSessionLocal
from fundbook.core.logging import get_logger
from fundbook.scheduler.celery_app import app
from fundbook.services.snapshot_service import SnapshotService

logger = get_logger(__name__)


def previous_month_end(today: date) -> date:
    """Last day of the month before today's month."""
    return today.replace(day=1) - timedelta(days=1)


async def _create_period_snapshot_async(
    snapshot_date: date,
    performance_fee_rate: Optional[Decimal],
    session_factory=AsyncSessionLocal,
) -> dict:
    """Async implementation of period snapshot creation."""
    async with session_factory() as session:
        service = SnapshotService(session)
        snapshot = await service.create_snapshot(
            snapshot_date=snapshot_date,
            performance_fee_rate=performance_fee_rate,
        )
        return {
            "status": "created",
            "snapshot_id": snapshot.id,
            "date": str(snapshot.date),
            "nav": str(snapshot.nav),
            "investors": len(snapshot.investor_snapshots),
            "total_performance_fee": (
                str(snapshot.total_performance_fee)
                if snapshot.total_performance_fee is not None
                else None
            ),
        }


@app.task(name="fundbook.tasks.snapshots.create_period_snapshot")
def create_period_snapshot(
    snapshot_date: str | None = None,
    performance_fee_rate: str | None = None,
) -> dict:
    """
    Scheduled task to snapshot the fund.

    Args:
        snapshot_date: ISO date; defaults to the previous month end
        performance_fee_rate: Fee rate in percent; defaults to DEFAULT_PERFORMANCE_FEE_RATE
    """
    target_date = (
        date.fromisoformat(snapshot_date) if snapshot_date else previous_month_end(date.today())
    )
    rate = (
        Decimal(performance_fee_rate)
        if performance_fee_rate is not None
        else settings.DEFAULT_PERFORMANCE_FEE_RATE
    )

    logger.info("Creating period snapshot for %s (fee rate %s)", target_date, rate)
    result = asyncio.run(_create_period_snapshot_async(target_date, rate))
    logger.info(
        "Period snapshot %s created for %s: NAV=%s",
        result["snapshot_id"],
        result["date"],
        result["nav"],
    )
    return result
