"""Forgetting-curve spaced repetition scheduler (FSRS-style)."""
import math
from dataclasses import replace
from datetime import datetime, timedelta

from vocab_tutor.models import MIN_STABILITY, MemoryModel, MemoryState, Rating

# Fixed weight vector. w0-w3 initial stability, w4-w7 difficulty,
# w8-w10 growth after success, w11-w14 recovery after a lapse,
# w15 hard penalty, w16 easy bonus, w17 reserved for short-term scheduling.
W = (
    0.4072, 1.1829, 3.1262, 15.4722,
    7.2102, 0.5316, 1.0651, 0.0589,
    1.5330, 0.1636, 1.0120,
    1.9395, 0.1100, 0.3246, 1.5870,
    0.2272, 2.8755,
    2.2035,
)

MAX_INTERVAL_DAYS = 365
SECONDS_PER_DAY = 86400.0

AGAIN_DELAY = timedelta(minutes=1)
NEW_HARD_DELAY = timedelta(minutes=5)
LEARNING_HARD_DELAY = timedelta(minutes=10)

DIFFICULTY_STEP_AGAIN = 0.1
DIFFICULTY_STEP_HARD = 0.05
DIFFICULTY_STEP_EASY = -0.05

# Minimum absolute stability growth on a successful review.
MIN_GROWTH = {Rating.HARD: 0.1, Rating.GOOD: 0.5, Rating.EASY: 1.0}


def _clamp_difficulty(d: float) -> float:
    return max(0.0, min(1.0, d))


def initial_difficulty(rating: Rating) -> float:
    d = W[4] - math.exp(W[5] * (rating - 1)) + 1
    return _clamp_difficulty(d / 10.0)


def initial_stability(rating: Rating) -> float:
    return max(W[rating - 1], MIN_STABILITY)


def next_review_at(stability: float, now: datetime) -> datetime:
    """Stability-day interval, clamped to [0.5, 365] days."""
    days = min(max(stability, MIN_STABILITY), MAX_INTERVAL_DAYS)
    return now + timedelta(days=days)


def elapsed_days(model: MemoryModel, now: datetime) -> float:
    if model.last_review_at is None:
        return 0.0
    return max((now - model.last_review_at).total_seconds() / SECONDS_PER_DAY, 0.0)


def retrievability(model: MemoryModel, now: datetime) -> float:
    """Estimated probability of recall at ``now``."""
    stability = max(model.stability, MIN_STABILITY)
    return (1 + elapsed_days(model, now) / (9 * stability)) ** -1


def success_stability_factor(difficulty: float, stability: float, r: float, rating: Rating) -> float:
    penalty = 1.0
    if rating is Rating.HARD:
        penalty = W[15]
    elif rating is Rating.EASY:
        penalty = W[16]
    return 1 + (
        math.exp(W[8])
        * (11 - difficulty * 10)
        * stability ** -W[9]
        * (math.exp((1 - r) * W[10]) - 1)
        * penalty
    )


def lapse_stability(difficulty: float, stability: float, r: float) -> float:
    s = (
        W[11]
        * max(difficulty, 0.01) ** -W[12]
        * ((stability + 1) ** W[13] - 1)
        * math.exp((1 - r) * W[14])
    )
    return max(min(s, stability), MIN_STABILITY)


def _schedule_new(m: MemoryModel, rating: Rating, now: datetime) -> MemoryModel:
    stability = initial_stability(rating)
    m = replace(m, difficulty=initial_difficulty(rating), stability=stability)
    if rating is Rating.AGAIN:
        return replace(m, state=MemoryState.LEARNING, next_review_at=now + AGAIN_DELAY)
    if rating is Rating.HARD:
        return replace(m, state=MemoryState.LEARNING, next_review_at=now + NEW_HARD_DELAY)
    if rating is Rating.GOOD:
        return replace(m, state=MemoryState.LEARNING, next_review_at=next_review_at(stability, now))
    return replace(m, state=MemoryState.REVIEW, next_review_at=next_review_at(stability, now))


def _schedule_learning(m: MemoryModel, rating: Rating, now: datetime) -> MemoryModel:
    if rating is Rating.AGAIN:
        lapses = m.lapse_count + (1 if m.state is MemoryState.RELEARNING else 0)
        return replace(
            m,
            stability=max(m.stability * 0.5, MIN_STABILITY),
            difficulty=_clamp_difficulty(m.difficulty + DIFFICULTY_STEP_AGAIN),
            lapse_count=lapses,
            next_review_at=now + AGAIN_DELAY,
        )
    if rating is Rating.HARD:
        return replace(
            m,
            stability=max(m.stability * 1.2, MIN_STABILITY),
            difficulty=_clamp_difficulty(m.difficulty + DIFFICULTY_STEP_HARD),
            next_review_at=now + LEARNING_HARD_DELAY,
        )
    if rating is Rating.GOOD:
        stability = max(m.stability * 2.5, 1.0)
        difficulty = m.difficulty
    else:
        stability = max(m.stability * 3.5, 2.0)
        difficulty = _clamp_difficulty(m.difficulty + DIFFICULTY_STEP_EASY)
    return replace(
        m,
        state=MemoryState.REVIEW,
        stability=stability,
        difficulty=difficulty,
        next_review_at=next_review_at(stability, now),
    )


def _schedule_review(m: MemoryModel, rating: Rating, now: datetime) -> MemoryModel:
    r = retrievability(m, now)
    if rating is Rating.AGAIN:
        difficulty = _clamp_difficulty(m.difficulty + DIFFICULTY_STEP_AGAIN)
        return replace(
            m,
            state=MemoryState.RELEARNING,
            lapse_count=m.lapse_count + 1,
            difficulty=difficulty,
            stability=lapse_stability(difficulty, m.stability, r),
            next_review_at=now + AGAIN_DELAY,
        )

    difficulty = m.difficulty
    if rating is Rating.HARD:
        difficulty = _clamp_difficulty(difficulty + DIFFICULTY_STEP_HARD)
    elif rating is Rating.EASY:
        difficulty = _clamp_difficulty(difficulty + DIFFICULTY_STEP_EASY)
    grown = m.stability * success_stability_factor(difficulty, m.stability, r, rating)
    stability = max(grown, m.stability + MIN_GROWTH[rating])
    return replace(
        m,
        difficulty=difficulty,
        stability=stability,
        next_review_at=next_review_at(stability, now),
    )


def schedule(model: MemoryModel, rating: Rating, now: datetime) -> MemoryModel:
    """Advance a memory model by one review.

    Args:
        model: Current memory state. Out-of-range numbers are clamped, not rejected.
        rating: How well the word was recalled.
        now: Review time.

    Returns:
        A new MemoryModel; ``model`` is left untouched.
    """
    rating = Rating(rating)
    m = model.clamped()
    if m.state is MemoryState.NEW:
        m = _schedule_new(m, rating, now)
    elif m.state in (MemoryState.LEARNING, MemoryState.RELEARNING):
        m = _schedule_learning(m, rating, now)
    else:
        m = _schedule_review(m, rating, now)
    return replace(m, last_review_at=now, repetition_count=m.repetition_count + 1)
