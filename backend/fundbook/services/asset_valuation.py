"""
Asset value derivation from the event history.

Recording an event applies it to the stored current_value. A full rebuild
replays every event on top of the acquisition price in chronological order.
"""
from typing import Iterable, Optional

from fundbook.core.money import Money, MoneyLike
from fundbook.models.enums import AssetEventType
from fundbook.services.ledger import AssetEventRecord

_ADDS = {
    AssetEventType.PAYMENT_IN,
    AssetEventType.CAPEX,
    AssetEventType.LOAN_DISBURSEMENT,
    AssetEventType.INTEREST_ACCRUAL,
}
_SUBTRACTS = {
    AssetEventType.PAYMENT_OUT,
    AssetEventType.INTEREST_PAYMENT,
    AssetEventType.PRINCIPAL_PAYMENT,
    AssetEventType.LOAN_REPAYMENT,
}


def apply_event(
    value: MoneyLike,
    event_type: AssetEventType,
    amount: Optional[MoneyLike],
) -> Money:
    """Return the asset value after one event."""
    current = Money(value)
    event_type = AssetEventType(event_type)

    if event_type == AssetEventType.VALUATION:
        return Money(amount) if amount is not None else current
    if event_type == AssetEventType.DEFAULT:
        return Money(amount) if amount is not None else Money(0)
    if amount is None:
        return current
    if event_type in _ADDS:
        return current.add(amount)
    if event_type in _SUBTRACTS:
        return current.subtract(Money(amount).abs())
    # NOTE, SALE
    return current


def replay_value(base: Optional[MoneyLike], events: Iterable[AssetEventRecord]) -> Money:
    value = Money(base if base is not None else 0)
    for event in sorted(events, key=lambda e: (e.date, e.id)):
        value = apply_event(value, event.type, event.amount)
    return value.round()
