"""SQLite-backed wordbook: loads the review pool and writes back updated words."""
import json
import logging
import uuid
from datetime import datetime
from typing import Optional

from vocab_tutor.db import DEFAULT_DB_PATH, get_connection
from vocab_tutor.models import (
    Example, MemoryModel, MemoryState, Rating, ReviewItem, SessionStats, WordContent,
)

logger = logging.getLogger(__name__)


class WordNotFoundError(LookupError):
    pass


class DuplicateWordError(ValueError):
    pass


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_state(value: Optional[str]) -> MemoryState:
    try:
        return MemoryState(value)
    except ValueError:
        logger.warning("Unknown memory state %r, treating as new", value)
        return MemoryState.NEW


def row_to_item(row) -> ReviewItem:
    examples = tuple(
        Example(sentence=e["sentence"], translation=e.get("translation", ""))
        for e in json.loads(row["examples"] or "[]")
    )
    content = WordContent(
        word=row["word"],
        definition=row["definition"],
        part_of_speech=row["part_of_speech"] or "",
        phonetic=row["phonetic"] or "",
        examples=examples,
        synonyms=tuple(json.loads(row["synonyms"] or "[]")),
    )
    memory = MemoryModel(
        state=_parse_state(row["state"]),
        stability=row["stability"] if row["stability"] is not None else 0.5,
        difficulty=row["difficulty"] if row["difficulty"] is not None else 0.3,
        last_review_at=_parse_time(row["last_review_at"]),
        next_review_at=_parse_time(row["next_review_at"]),
        repetition_count=row["repetition_count"] or 0,
        lapse_count=row["lapse_count"] or 0,
    )
    return ReviewItem(item_id=row["id"], content=content, memory=memory.clamped())


class WordbookStore:
    """Persistence provider for the review core."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path

    def load_items(self) -> list[ReviewItem]:
        conn = get_connection(self.db_path)
        rows = conn.execute("SELECT * FROM words ORDER BY added_at, word").fetchall()
        conn.close()
        return [row_to_item(r) for r in rows]

    def get_item(self, item_id: str) -> ReviewItem:
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT * FROM words WHERE id = ?", (item_id,)).fetchone()
        conn.close()
        if row is None:
            raise WordNotFoundError(item_id)
        return row_to_item(row)

    def find_word(self, word: str) -> Optional[ReviewItem]:
        conn = get_connection(self.db_path)
        row = conn.execute(
            "SELECT * FROM words WHERE word = ? COLLATE NOCASE", (word.strip(),)
        ).fetchone()
        conn.close()
        return row_to_item(row) if row else None

    def add_word(self, content: WordContent, source: str = "manual", item_id: Optional[str] = None) -> ReviewItem:
        if self.find_word(content.word) is not None:
            raise DuplicateWordError(content.word)
        item = ReviewItem(item_id=item_id or uuid.uuid4().hex, content=content)
        conn = get_connection(self.db_path)
        conn.execute(
            """INSERT INTO words (id, word, definition, part_of_speech, phonetic, examples, synonyms, source, added_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                item.item_id, content.word.strip(), content.definition, content.part_of_speech,
                content.phonetic,
                json.dumps([{"sentence": e.sentence, "translation": e.translation} for e in content.examples]),
                json.dumps(list(content.synonyms)),
                source, datetime.now().isoformat(),
            ),
        )
        conn.commit()
        conn.close()
        logger.info("Added %r to the wordbook", content.word)
        return item

    def save_item(self, item: ReviewItem) -> None:
        m = item.memory
        conn = get_connection(self.db_path)
        cur = conn.execute(
            """UPDATE words SET state=?, stability=?, difficulty=?, last_review_at=?, next_review_at=?,
            repetition_count=?, lapse_count=? WHERE id=?""",
            (
                m.state.value, m.stability, m.difficulty, _format_time(m.last_review_at),
                _format_time(m.next_review_at), m.repetition_count, m.lapse_count, item.item_id,
            ),
        )
        changed = cur.rowcount
        conn.commit()
        conn.close()
        if changed == 0:
            raise WordNotFoundError(item.item_id)

    def delete_word(self, item_id: str) -> None:
        conn = get_connection(self.db_path)
        cur = conn.execute("DELETE FROM words WHERE id = ?", (item_id,))
        changed = cur.rowcount
        conn.commit()
        conn.close()
        if changed == 0:
            raise WordNotFoundError(item_id)

    def log_review(self, item_id: str, rating: Rating, is_correct: bool, reviewed_at: datetime) -> None:
        conn = get_connection(self.db_path)
        conn.execute(
            "INSERT INTO review_log (word_id, rating, is_correct, reviewed_at) VALUES (?, ?, ?, ?)",
            (item_id, int(rating), int(is_correct), reviewed_at.isoformat()),
        )
        conn.commit()
        conn.close()

    def save_session_stats(self, stats: SessionStats, completed_at: Optional[datetime] = None) -> None:
        conn = get_connection(self.db_path)
        conn.execute(
            """INSERT INTO review_sessions (total, correct, wrong, skipped, accuracy, items, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                stats.total, stats.correct, stats.wrong, stats.skipped, stats.accuracy, stats.items,
                (completed_at or datetime.now()).isoformat(),
            ),
        )
        conn.commit()
        conn.close()
