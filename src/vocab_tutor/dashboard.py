"""Wordbook dashboard: retention scoring and statistics."""
from datetime import datetime

from vocab_tutor.db import get_connection
from vocab_tutor.fsrs import retrievability
from vocab_tutor.models import MemoryState, ReviewItem
from vocab_tutor.selector import due_count
from vocab_tutor.wordbook import WordbookStore


def get_retention_label(score: float) -> str:
    if score >= 85:
        return "STRONG"
    elif score >= 70:
        return "STEADY"
    elif score >= 50:
        return "SHAKY"
    return "FADING"


def get_retention_color(score: float) -> str:
    if score >= 85:
        return "green"
    elif score >= 70:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def time_until_next_review(item: ReviewItem, now: datetime) -> str:
    """Short human label such as 'due', '5m', '3h' or '12d'."""
    nxt = item.memory.next_review_at
    if nxt is None or nxt <= now:
        return "due"
    seconds = (nxt - now).total_seconds()
    if seconds < 3600:
        return f"{max(1, int(seconds // 60))}m"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h"
    return f"{int(seconds // 86400)}d"


def _review_accuracy(db_path: str) -> float:
    conn = get_connection(db_path)
    row = conn.execute("SELECT COUNT(*) as t, SUM(is_correct) as c FROM review_log").fetchone()
    conn.close()
    if not row["t"]:
        return 0.0
    return (row["c"] / row["t"]) * 100


def _mean_retrievability(items: list[ReviewItem], now: datetime) -> float:
    reviewed = [i for i in items if not i.memory.is_new]
    if not reviewed:
        return 0.0
    return sum(retrievability(i.memory, now) for i in reviewed) / len(reviewed) * 100


def calc_retention_score(db_path: str, now: datetime | None = None) -> float:
    now = now or datetime.now()
    items = WordbookStore(db_path).load_items()
    accuracy = _review_accuracy(db_path)
    recall = _mean_retrievability(items, now)
    # Weighted: answer accuracy 60%, current estimated recall 40%
    return round(accuracy * 0.6 + recall * 0.4, 1)


def get_wordbook_stats(db_path: str, now: datetime | None = None) -> dict:
    now = now or datetime.now()
    items = WordbookStore(db_path).load_items()
    by_state = {state.value: 0 for state in MemoryState}
    for item in items:
        by_state[item.memory.state.value] += 1
    return {
        "total_words": len(items),
        "need_review": due_count(items, now),
        "by_state": by_state,
        "lapses": sum(i.memory.lapse_count for i in items),
    }


def get_study_stats(db_path: str) -> dict:
    conn = get_connection(db_path)
    sessions = conn.execute("SELECT COUNT(*) FROM review_sessions").fetchone()[0]
    reviews = conn.execute("SELECT COUNT(*) FROM review_log").fetchone()[0]
    avg_row = conn.execute("SELECT AVG(accuracy) * 100 as avg FROM review_sessions").fetchone()
    avg_accuracy = round(avg_row["avg"], 1) if avg_row["avg"] else 0.0
    conn.close()
    return {
        "sessions_completed": sessions,
        "reviews_logged": reviews,
        "avg_session_accuracy": avg_accuracy,
    }
