"""Apply answers to the scheduler and tally session results."""
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional, Protocol

from vocab_tutor.fsrs import schedule
from vocab_tutor.models import AnswerOutcome, MemoryModel, Rating, ReviewItem, SessionStats

logger = logging.getLogger(__name__)


class ItemStore(Protocol):
    """Persistence collaborator: loads the word pool and writes back updated words."""

    def load_items(self) -> list[ReviewItem]: ...

    def save_item(self, item: ReviewItem) -> None: ...


def rating_for_response(correct: bool) -> Rating:
    return Rating.GOOD if correct else Rating.AGAIN


def rating_for_matching_errors(errors: int) -> Rating:
    """Map mismatches made on one word of a matching set to a rating."""
    if errors <= 0:
        return Rating.EASY
    if errors == 1:
        return Rating.GOOD
    if errors == 2:
        return Rating.HARD
    return Rating.AGAIN


class ReviewRecorder:
    """Records one session's answers.

    Each answer is scheduled immediately. A word answered twice in the same
    session is rescheduled from its pre-session state with the worse rating,
    so it advances exactly once per session.
    """

    def __init__(self, store=None, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or datetime.now
        self._outcomes: list[AnswerOutcome] = []
        self._baseline: dict[str, ReviewItem] = {}
        self._applied: dict[str, Rating] = {}

    @property
    def outcomes(self) -> list[AnswerOutcome]:
        return list(self._outcomes)

    def record_answer(self, item: ReviewItem, rating: Rating, now: Optional[datetime] = None) -> tuple[MemoryModel, bool]:
        rating = Rating(rating)
        now = now or self.clock()
        baseline = self._baseline.setdefault(item.item_id, item)
        effective = min(rating, self._applied.get(item.item_id, rating))
        self._applied[item.item_id] = effective

        updated = schedule(baseline.memory, effective, now)
        is_correct = rating.is_correct
        self._outcomes.append(AnswerOutcome(item_id=item.item_id, rating=rating, is_correct=is_correct))
        logger.debug(
            "%s rated %s: %s -> %s, next review %s",
            item.item_id, rating.name, baseline.memory.state.value, updated.state.value,
            updated.next_review_at,
        )

        if self.store is not None:
            self.store.save_item(baseline.with_memory(updated))
            log_review = getattr(self.store, "log_review", None)
            if log_review is not None:
                log_review(item.item_id, rating, is_correct, now)
        return updated, is_correct

    def record_skip(self, item: ReviewItem) -> None:
        self._outcomes.append(AnswerOutcome(item_id=item.item_id, rating=None))

    def finalize(self) -> SessionStats:
        return finalize(self._outcomes)


def finalize(outcomes: Iterable[AnswerOutcome]) -> SessionStats:
    """Reduce recorded outcomes to session statistics."""
    stats = SessionStats()
    item_ids = set()
    for outcome in outcomes:
        stats.total += 1
        item_ids.add(outcome.item_id)
        if outcome.skipped:
            stats.skipped += 1
        elif outcome.is_correct:
            stats.correct += 1
        else:
            stats.wrong += 1
    answered = stats.correct + stats.wrong
    stats.accuracy = round(stats.correct / answered, 4) if answered else 0.0
    stats.items = len(item_ids)
    return stats
