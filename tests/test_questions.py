# tests/test_questions.py
import random
from collections import Counter

import pytest

from vocab_tutor.models import (
    ClozeFromExample, MatchingSet, MemoryState, QuestionKind, RecognitionBackward,
    RecognitionForward, SpellFromAudio,
)
from vocab_tutor.questions import (
    generate, generate_retry, single_question, blank_out, normalize_pos, ALLOWED_KINDS, BLANK,
)


def test_generate_empty_returns_empty():
    assert generate([], 15) == []


def test_generate_zero_max_returns_empty(make_item):
    assert generate([make_item("a")], 0) == []


def test_fifteen_new_words_scenario(make_item):
    items = [make_item(str(i)) for i in range(15)]
    questions = generate(items, 15, rng=4)
    matching = [q for q in questions if isinstance(q, MatchingSet)]
    singles = [q for q in questions if not isinstance(q, MatchingSet)]
    assert len(matching) == 1
    assert len(matching[0].pairs) == 6
    assert isinstance(questions[0], MatchingSet)
    assert len(singles) == 9
    assert all(isinstance(q, (RecognitionForward, RecognitionBackward)) for q in singles)
    covered = set(matching[0].item_ids) | {q.item_id for q in singles}
    assert covered == {i.item_id for i in items}


def test_three_items_get_no_matching(make_item):
    items = [make_item(str(i)) for i in range(3)]
    questions = generate(items, 15, rng=0)
    assert len(questions) == 3
    assert not any(isinstance(q, MatchingSet) for q in questions)


def test_four_items_form_one_matching(make_item):
    items = [make_item(str(i)) for i in range(4)]
    questions = generate(items, 15, rng=0)
    assert len(questions) == 1
    assert questions[0].item_ids == ("0", "1", "2", "3")


def test_max_questions_respected(make_item):
    items = [make_item(str(i), state=MemoryState.REVIEW) for i in range(30)]
    for limit in (1, 5, 12):
        assert len(generate(items, limit, rng=1)) == limit


def test_second_matching_recycles_reviewed_words(make_item):
    items = [make_item(str(i), state=MemoryState.REVIEW) for i in range(12)]
    questions = generate(items, 15, rng=9)
    matching = [q for q in questions if isinstance(q, MatchingSet)]
    assert len(questions) == 8
    assert len(matching) == 2
    assert set(matching[0].item_ids).isdisjoint(matching[1].item_ids)
    assert len(matching[1].pairs) == 6


def test_no_second_matching_when_at_limit(make_item):
    items = [make_item(str(i), state=MemoryState.REVIEW) for i in range(12)]
    questions = generate(items, 7, rng=9)
    assert sum(isinstance(q, MatchingSet) for q in questions) == 1


@pytest.mark.parametrize("state", list(MemoryState))
def test_shapes_respect_state_allow_list(make_item, state):
    items = [make_item(str(i), state=state) for i in range(40)]
    rng = random.Random(0)
    kinds = {single_question(item, items, rng).kind for item in items}
    assert kinds <= set(ALLOWED_KINDS[state])


def test_review_words_get_every_single_shape(make_item):
    items = [make_item(str(i), state=MemoryState.REVIEW) for i in range(60)]
    rng = random.Random(3)
    kinds = Counter(single_question(item, items, rng).kind for item in items)
    assert set(kinds) == set(ALLOWED_KINDS[MemoryState.REVIEW])


def test_no_cloze_without_example(make_item):
    items = [make_item(str(i), state=MemoryState.REVIEW, example=False) for i in range(60)]
    questions = generate(items, 60, rng=5) + generate_retry(items, rng=5)
    assert not any(isinstance(q, ClozeFromExample) for q in questions)


def test_forced_cloze_falls_back_to_recognition(make_item):
    item = make_item("a", example=False)
    q = single_question(item, [item], rng=0, kind=QuestionKind.CLOZE_FROM_EXAMPLE)
    assert isinstance(q, RecognitionForward)


def test_cloze_blanks_the_word(make_item):
    item = make_item("a", word="candid", state=MemoryState.REVIEW)
    q = single_question(item, [item], rng=0, kind=QuestionKind.CLOZE_FROM_EXAMPLE)
    assert isinstance(q, ClozeFromExample)
    assert BLANK in q.sentence
    assert "candid" not in q.sentence
    assert q.is_correct("Candid")


def test_blank_out_whole_words_only():
    assert blank_out("Candid talk is candid.", "candid") == f"{BLANK} talk is {BLANK}."
    assert blank_out("He emphasized it.", "emphasize") is None


def test_spell_question_fields(make_item):
    item = make_item("a", word="seldom")
    q = single_question(item, [item], rng=0, kind=QuestionKind.SPELL_FROM_AUDIO)
    assert isinstance(q, SpellFromAudio)
    assert q.answer == "seldom"
    assert q.definition == "meaning of seldom"
    assert q.item_ids == ("a",)


def test_recognition_options_contain_answer_once(make_item):
    items = [make_item(str(i)) for i in range(6)]
    rng = random.Random(8)
    for item in items:
        for kind in (QuestionKind.RECOGNITION_FORWARD, QuestionKind.RECOGNITION_BACKWARD):
            q = single_question(item, items, rng, kind=kind)
            assert len(q.options) == 4
            assert len(set(q.options)) == 4
            assert q.options.count(q.answer) == 1


def test_recognition_uses_fallback_pool_for_lonely_word(make_item):
    item = make_item("a", word="obstacle")
    q = single_question(item, [item], rng=1, kind=QuestionKind.RECOGNITION_BACKWARD)
    assert len(q.options) == 4
    assert "obstacle" in q.options


def test_generate_is_deterministic_for_a_seed(make_item):
    items = [make_item(str(i), state=MemoryState.REVIEW) for i in range(12)]
    assert generate(items, 15, rng=21) == generate(items, 15, rng=21)


def test_generate_retry_one_question_per_word(make_item):
    items = [make_item(str(i), state=MemoryState.REVIEW) for i in range(5)]
    questions = generate_retry(items, rng=2)
    assert [q.item_id for q in questions] == [i.item_id for i in items]
    assert not any(isinstance(q, (SpellFromAudio, MatchingSet)) for q in questions)


@pytest.mark.parametrize("pos,expected", [
    ("adj.", "adj."), ("Adjective", "adj."), ("adv", "adv."), ("noun", "n."), ("verb", "v."), ("", "v."),
])
def test_normalize_pos(pos, expected):
    assert normalize_pos(pos) == expected
