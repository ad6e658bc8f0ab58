# tests/test_dashboard.py
from datetime import timedelta

from vocab_tutor.db import init_db
from vocab_tutor.seed import seed_all
from vocab_tutor.models import MemoryState, Rating, SessionStats
from vocab_tutor.recorder import ReviewRecorder
from vocab_tutor.wordbook import WordbookStore
from vocab_tutor.dashboard import (
    calc_retention_score, get_retention_label, get_retention_color, get_wordbook_stats,
    get_study_stats, time_until_next_review,
)


def test_retention_score_zero_with_no_data(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    score = calc_retention_score(tmp_db)
    assert score == 0.0


def test_retention_label():
    assert get_retention_label(85) == "STRONG"
    assert get_retention_label(70) == "STEADY"
    assert get_retention_label(55) == "SHAKY"
    assert get_retention_label(40) == "FADING"


def test_retention_color():
    assert get_retention_color(90) == "green"
    assert get_retention_color(10) == "red"


def test_retention_score_with_data(tmp_db, now):
    init_db(tmp_db)
    seed_all(tmp_db)
    store = WordbookStore(tmp_db)
    recorder = ReviewRecorder(store)
    for item in store.load_items()[:5]:
        recorder.record_answer(item, Rating.GOOD, now=now)
    score = calc_retention_score(tmp_db, now=now + timedelta(hours=1))
    assert 0 < score <= 100


def test_time_until_next_review(make_item, now):
    assert time_until_next_review(make_item("a"), now) == "due"
    assert time_until_next_review(make_item("b", next_review_at=now - timedelta(days=1)), now) == "due"
    assert time_until_next_review(make_item("c", next_review_at=now + timedelta(seconds=30)), now) == "1m"
    assert time_until_next_review(make_item("d", next_review_at=now + timedelta(minutes=10)), now) == "10m"
    assert time_until_next_review(make_item("e", next_review_at=now + timedelta(hours=5)), now) == "5h"
    assert time_until_next_review(make_item("f", next_review_at=now + timedelta(days=12)), now) == "12d"


def test_get_wordbook_stats(tmp_db, now):
    init_db(tmp_db)
    seed_all(tmp_db)
    store = WordbookStore(tmp_db)
    item = store.load_items()[0]
    ReviewRecorder(store).record_answer(item, Rating.EASY, now=now)
    stats = get_wordbook_stats(tmp_db, now=now)
    assert stats["total_words"] == 24
    assert stats["by_state"][MemoryState.NEW.value] == 23
    assert stats["by_state"][MemoryState.REVIEW.value] == 1
    assert stats["need_review"] == 23
    assert stats["lapses"] == 0


def test_get_study_stats(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    stats = get_study_stats(tmp_db)
    assert stats == {"sessions_completed": 0, "reviews_logged": 0, "avg_session_accuracy": 0.0}
    WordbookStore(tmp_db).save_session_stats(SessionStats(total=10, correct=7, wrong=3, accuracy=0.7, items=10))
    stats = get_study_stats(tmp_db)
    assert stats["sessions_completed"] == 1
    assert stats["avg_session_accuracy"] == 70.0
