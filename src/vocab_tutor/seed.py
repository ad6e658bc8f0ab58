"""Seed the wordbook with a starter word list."""
import json
import logging
from pathlib import Path

from vocab_tutor.db import get_connection
from vocab_tutor.importer import content_from_dict
from vocab_tutor.wordbook import WordbookStore

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the wordbook already holds any words."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM words").fetchone()[0]
    conn.close()
    return count > 0


def load_seed_words() -> list[dict]:
    data = json.loads((CONTENT_DIR / "words.json").read_text(encoding="utf-8"))
    return data["words"]


def seed_words(db_path: str) -> int:
    """Insert the starter words from words.json. Returns how many were added."""
    store = WordbookStore(db_path)
    entries = load_seed_words()
    for i, entry in enumerate(entries, 1):
        store.add_word(content_from_dict(entry), source="seeded", item_id=f"seed-{i:03d}")
    logger.info("Seeded %d words", len(entries))
    return len(entries)


def seed_all(db_path: str) -> None:
    if is_seeded(db_path):
        return
    seed_words(db_path)
