"""
Derived-counter rules shared by both storage backends.

WHAT: Pure functions describing how a mutation of one entity changes the
cached aggregates on another.

WHY: The in-memory and database backends apply these rules in their own
medium (attribute assignment vs. SQL UPDATE). Keeping the arithmetic in
one place keeps the two backends observably identical.
"""

from typing import Dict, Iterable, Optional, Tuple

from derra.models.business import BusinessStatus
from derra.models.subscription import SubscriptionStatus


def rounded_mean(ratings: Iterable[Optional[int]]) -> Optional[int]:
    """
    Mean of the non-null ratings rounded to the nearest integer, halves up.

    Returns None when there is no rating at all, in which case the
    business keeps its current rating.

    >>> rounded_mean([5, 4, 5])
    5
    >>> rounded_mean([4, 5])
    5
    >>> rounded_mean([None, None]) is None
    True
    """
    values = [r for r in ratings if r is not None]
    if not values:
        return None
    return rounded_ratio(sum(values), len(values))


def rounded_ratio(total: int, count: int) -> int:
    """Integer round-half-up of total / count for non-negative totals."""
    return (2 * total + count) // (2 * count)


def category_count_deltas(
    before: Optional[Tuple[int, bool]],
    after: Optional[Tuple[int, bool]],
) -> Dict[int, int]:
    """
    Changes to Category.business_count caused by a business mutation.

    Each side is ``(category_id, is_active)`` or None when the business
    does not exist on that side (creation). Only active businesses count,
    so a soft delete, a reactivation, and a category move are all
    expressed as -1 on the old side and +1 on the new side.

    >>> category_count_deltas(None, (1, True))
    {1: 1}
    >>> category_count_deltas((1, True), (1, False))
    {1: -1}
    >>> category_count_deltas((1, True), (2, True))
    {1: -1, 2: 1}
    >>> category_count_deltas((1, True), (1, True))
    {}
    """
    deltas: Dict[int, int] = {}
    if before is not None and before[1]:
        deltas[before[0]] = deltas.get(before[0], 0) - 1
    if after is not None and after[1]:
        deltas[after[0]] = deltas.get(after[0], 0) + 1
    return {category_id: delta for category_id, delta in deltas.items() if delta != 0}


def floored(value: Optional[int], delta: int) -> int:
    """Apply delta to a counter without letting it drop below zero."""
    return max(0, (value or 0) + delta)


def subscription_business_updates(subscription, changes: Optional[Dict] = None) -> Dict:
    """
    Business fields forced by a subscription insert or update.

    A fresh insert (changes is None) always marks the business paid and
    active and points it at the subscription's order. An update forces
    the business to follow the resulting status (active or canceled) and
    propagates a new period end.

    Args:
        subscription: Subscription record after the insert/merge
        changes: The partial that was merged, or None for a fresh insert

    Returns:
        Field values to apply to the subscription's business (may be empty)
    """
    if changes is None:
        return {
            "is_paid": True,
            "status": BusinessStatus.ACTIVE,
            "subscription_id": subscription.external_order_id,
            "subscription_expires_at": subscription.current_period_end,
        }

    updates: Dict = {}
    if "status" in changes:
        if subscription.status == SubscriptionStatus.ACTIVE:
            updates.update(
                is_paid=True,
                status=BusinessStatus.ACTIVE,
                subscription_id=subscription.external_order_id,
            )
        elif subscription.status == SubscriptionStatus.CANCELED:
            updates.update(is_paid=False, status=BusinessStatus.INACTIVE)

    if changes.get("current_period_end") is not None:
        updates["subscription_expires_at"] = changes["current_period_end"]

    return updates
