"""
Quadrant classification and priority scoring.

Pure functions over item traits. The score combines the trait weights, a
capped age bonus and the item's latest tournament score.
"""

import math
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Item

SECONDS_PER_DAY = 24 * 60 * 60
IMPORTANT_WEIGHT = 2
URGENT_WEIGHT = 1
AGE_BONUS_PER_DAY = 0.1
MAX_AGE_BONUS = 2.0
OVERDUE_AFTER_DAYS = 7


def classify(important: bool, urgent: bool) -> int:
    """
    Map the trait pair to a quadrant.

    Returns:
        1: Important & Urgent (Do First)
        2: Important & Not Urgent (Schedule)
        3: Not Important & Urgent (Delegate)
        4: Not Important & Not Urgent (Eliminate)
    """
    if important and urgent:
        return 1
    if important:
        return 2
    if urgent:
        return 3
    return 4


def age_in_days(item: "Item", now: float | None = None) -> int:
    """Whole days since creation; a partially elapsed day counts as one."""
    current = time.time() if now is None else now
    elapsed = max(0.0, current - item.created)
    return math.ceil(elapsed / SECONDS_PER_DAY)


def priority_score(item: "Item", now: float | None = None) -> float:
    """Higher means more urgent to act on."""
    base = IMPORTANT_WEIGHT * int(item.important) + URGENT_WEIGHT * int(item.urgent)
    age_bonus = min(age_in_days(item, now) * AGE_BONUS_PER_DAY, MAX_AGE_BONUS)
    return base + age_bonus + item.tournament_score


def is_overdue(item: "Item", now: float | None = None) -> bool:
    """Quadrant 1 items left open for more than a week."""
    return (
        item.quadrant == 1
        and age_in_days(item, now) > OVERDUE_AFTER_DAYS
        and not item.completed
    )
