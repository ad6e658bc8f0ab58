"""Candidate selection: which words enter today's review session."""
import random
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Iterable, Optional, Union

from vocab_tutor.models import ReviewItem

OVERDUE_AFTER = timedelta(hours=24)
SMALL_POOL_SIZE = 20
LOW_ACCURACY_THRESHOLD = 0.8

# (max pool size, session cap); pools above the last bound use DEFAULT_CAP.
SESSION_CAPS = [(50, 25), (100, 30)]
DEFAULT_CAP = 40


class Tier(IntEnum):
    NEW = 0
    OVERDUE = 1
    DUE = 2
    NOT_YET_DUE = 3


def _make_rng(rng: Union[random.Random, int, None]) -> random.Random:
    if isinstance(rng, random.Random):
        return rng
    return random.Random(rng)


def session_limit(pool_size: int) -> int:
    """Maximum session length for a pool of the given size."""
    if pool_size <= SMALL_POOL_SIZE:
        return pool_size
    for bound, cap in SESSION_CAPS:
        if pool_size <= bound:
            return cap
    return DEFAULT_CAP


def classify(item: ReviewItem, now: datetime) -> Tier:
    memory = item.memory
    if memory.is_new:
        return Tier.NEW
    if memory.next_review_at is None:
        return Tier.DUE
    if memory.next_review_at < now - OVERDUE_AFTER:
        return Tier.OVERDUE
    if memory.next_review_at <= now:
        return Tier.DUE
    return Tier.NOT_YET_DUE


def _unique(pool: Iterable[ReviewItem]) -> list[ReviewItem]:
    seen = set()
    items = []
    for item in pool:
        if item.item_id in seen:
            continue
        seen.add(item.item_id)
        items.append(item)
    return items


def due_count(pool: Iterable[ReviewItem], now: datetime) -> int:
    return sum(1 for item in _unique(pool) if classify(item, now) is not Tier.NOT_YET_DUE)


def select(
    pool: Iterable[ReviewItem],
    now: datetime,
    limit: Optional[int] = None,
    rng: Union[random.Random, int, None] = None,
) -> list[ReviewItem]:
    """Build a bounded, priority-ordered review list.

    New words come first, then words overdue by more than a day (most overdue
    first), then words that are simply due. Words not yet due only fill the
    remaining slots, weakest first. ``rng`` breaks ties and shuffles the new and
    filler blocks; it never decides inclusion.
    """
    items = _unique(pool)
    if not items:
        return []
    rng = _make_rng(rng)
    cap = session_limit(len(items))
    if limit is not None:
        cap = min(cap, max(limit, 0))
    if cap == 0:
        return []

    tiers: dict[Tier, list[ReviewItem]] = {tier: [] for tier in Tier}
    for item in items:
        tiers[classify(item, now)].append(item)

    # Random secondary key keeps equal primary keys from following pool order.
    jitter = {item.item_id: rng.random() for item in items}

    new = sorted(tiers[Tier.NEW], key=lambda i: jitter[i.item_id])
    overdue = sorted(
        tiers[Tier.OVERDUE],
        key=lambda i: (i.memory.next_review_at, jitter[i.item_id]),
    )
    due = sorted(
        tiers[Tier.DUE],
        key=lambda i: (i.memory.next_review_at or now, jitter[i.item_id]),
    )

    selected_new = new[:cap]
    selected_due = (overdue + due)[: cap - len(selected_new)]

    fillers: list[ReviewItem] = []
    shortfall = cap - len(selected_new) - len(selected_due)
    if shortfall > 0:
        candidates = tiers[Tier.NOT_YET_DUE]
        if len(items) > SMALL_POOL_SIZE:
            candidates = [i for i in candidates if i.memory.accuracy < LOW_ACCURACY_THRESHOLD]
        candidates = sorted(candidates, key=lambda i: (i.memory.accuracy, jitter[i.item_id]))
        fillers = candidates[:shortfall]

    rng.shuffle(selected_new)
    rng.shuffle(fillers)
    return selected_new + selected_due + fillers
