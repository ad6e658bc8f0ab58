"""Review session start-up and user settings."""
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from vocab_tutor.db import get_connection
from vocab_tutor.models import ReviewItem, SessionQuestion
from vocab_tutor.questions import generate
from vocab_tutor.recorder import ItemStore
from vocab_tutor.selector import select

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUESTIONS = 15


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_max_questions(db_path: str) -> int:
    return int(get_setting(db_path, "max_questions", str(DEFAULT_MAX_QUESTIONS)))


def get_session_limit(db_path: str) -> int | None:
    value = get_setting(db_path, "session_limit")
    return int(value) if value else None


@dataclass
class ReviewSession:
    items: list[ReviewItem]
    questions: list[SessionQuestion]
    started_at: datetime
    rng: random.Random = field(repr=False, default_factory=random.Random)

    def item(self, item_id: str) -> ReviewItem:
        for item in self.items:
            if item.item_id == item_id:
                return item
        raise KeyError(item_id)


def start_session(
    store: ItemStore,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
    max_questions: int = DEFAULT_MAX_QUESTIONS,
    seed: Union[random.Random, int, None] = None,
) -> ReviewSession:
    """Load the pool, pick today's words and build their questions."""
    now = now or datetime.now()
    rng = seed if isinstance(seed, random.Random) else random.Random(seed)
    pool = store.load_items()
    items = select(pool, now, limit=limit, rng=rng)
    questions = generate(items, max_questions=max_questions, rng=rng)
    logger.info(
        "Session started: %d of %d words selected, %d questions", len(items), len(pool), len(questions)
    )
    return ReviewSession(items=items, questions=questions, started_at=now, rng=rng)
