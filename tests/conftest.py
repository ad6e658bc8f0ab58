from datetime import datetime

import pytest

from vocab_tutor.models import Example, MemoryModel, ReviewItem, WordContent


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_wordbook.db")
    return db_path


@pytest.fixture
def now():
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def make_item():
    """Factory for review items: make_item("w1", state=..., next_review_at=...)."""
    def _make(item_id, word=None, example=True, **memory):
        word = word or f"word{item_id}"
        content = WordContent(
            word=word,
            definition=f"meaning of {word}",
            part_of_speech="n.",
            examples=(Example(sentence=f"This {word} is useful.", translation="..."),) if example else (),
        )
        return ReviewItem(item_id=item_id, content=content, memory=MemoryModel(**memory))
    return _make
