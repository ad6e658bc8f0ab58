"""Session question generation: turns selected words into exercises."""
import random
import re
from typing import Optional, Sequence, Union

from vocab_tutor.models import (
    ClozeFromExample, MatchingPair, MatchingSet, MemoryState, QuestionKind,
    RecognitionBackward, RecognitionForward, ReviewItem, SessionQuestion, SpellFromAudio,
)

BLANK = "______"
MATCHING_MIN = 4
MATCHING_MAX = 6
SECOND_MATCHING_MIN_COVERED = 8
OPTION_COUNT = 4

ALLOWED_KINDS = {
    MemoryState.NEW: (QuestionKind.RECOGNITION_FORWARD, QuestionKind.RECOGNITION_BACKWARD),
    MemoryState.RELEARNING: (QuestionKind.RECOGNITION_FORWARD, QuestionKind.RECOGNITION_BACKWARD),
    MemoryState.LEARNING: (
        QuestionKind.RECOGNITION_FORWARD, QuestionKind.RECOGNITION_BACKWARD,
        QuestionKind.CLOZE_FROM_EXAMPLE,
    ),
    MemoryState.REVIEW: (
        QuestionKind.RECOGNITION_FORWARD, QuestionKind.RECOGNITION_BACKWARD,
        QuestionKind.CLOZE_FROM_EXAMPLE, QuestionKind.SPELL_FROM_AUDIO,
    ),
}

RETRY_KINDS = (
    QuestionKind.RECOGNITION_FORWARD, QuestionKind.RECOGNITION_BACKWARD,
    QuestionKind.CLOZE_FROM_EXAMPLE,
)

# Distractors used when the session itself doesn't offer enough.
FALLBACK_DEFINITIONS = {
    "adj.": ["obvious", "relevant", "sufficient", "frequent", "cautious", "vague", "strict",
             "flexible", "fragile", "particular", "complicated", "necessary", "reasonable",
             "sensitive", "independent"],
    "n.": ["an obstacle", "a tendency", "a phenomenon", "the essence", "a feature", "a structure",
           "a mechanism", "a strategy", "a principle", "a concept", "a goal", "a resource",
           "a method", "a factor", "a standard"],
    "v.": ["to obtain", "to maintain", "to promote", "to weaken", "to ignore", "to explore",
           "to evaluate", "to reveal", "to transform", "to achieve", "to establish",
           "to provide", "to develop", "to improve", "to reduce"],
    "adv.": ["obviously", "frequently", "gradually", "approximately", "occasionally",
             "thoroughly", "immediately", "considerably", "almost", "entirely"],
}

FALLBACK_WORDS = {
    "adj.": ["relevant", "abundant", "frequent", "obvious", "cautious", "vague", "strict",
             "flexible", "fragile", "specific", "complex", "essential", "reasonable",
             "sensitive", "independent"],
    "n.": ["obstacle", "tendency", "phenomenon", "essence", "feature", "structure", "mechanism",
           "strategy", "principle", "concept", "objective", "resource", "method", "factor",
           "standard"],
    "v.": ["obtain", "maintain", "promote", "undermine", "neglect", "explore", "evaluate",
           "reveal", "transform", "accomplish", "establish", "provide", "develop", "improve",
           "reduce"],
    "adv.": ["obviously", "frequently", "gradually", "approximately", "occasionally",
             "thoroughly", "immediately", "considerably", "almost", "entirely"],
}


def normalize_pos(pos: str) -> str:
    lower = pos.lower()
    if "adj" in lower:
        return "adj."
    if "adv" in lower:
        return "adv."
    if "n" in lower:
        return "n."
    return "v."


def _pick_options(correct: str, session: Sequence[str], fallback: Sequence[str], rng: random.Random) -> tuple[str, ...]:
    taken = {correct.lower()}
    distractors = []
    for pool in (rng.sample(list(session), len(session)), rng.sample(list(fallback), len(fallback))):
        for text in pool:
            if len(distractors) >= OPTION_COUNT - 1:
                break
            if text and text.lower() not in taken:
                taken.add(text.lower())
                distractors.append(text)
    options = [correct] + distractors
    rng.shuffle(options)
    return tuple(options)


def recognition_forward(item: ReviewItem, others: Sequence[ReviewItem], rng: random.Random) -> RecognitionForward:
    content = item.content
    session = [o.content.definition for o in others if o.item_id != item.item_id]
    fallback = FALLBACK_DEFINITIONS[normalize_pos(content.part_of_speech)]
    return RecognitionForward(
        item_id=item.item_id,
        answer=content.definition,
        prompt=content.word,
        options=_pick_options(content.definition, session, fallback, rng),
    )


def recognition_backward(item: ReviewItem, others: Sequence[ReviewItem], rng: random.Random) -> RecognitionBackward:
    content = item.content
    session = list(content.synonyms[:2]) + [o.content.word for o in others if o.item_id != item.item_id]
    fallback = FALLBACK_WORDS[normalize_pos(content.part_of_speech)]
    return RecognitionBackward(
        item_id=item.item_id,
        answer=content.word,
        prompt=content.definition,
        options=_pick_options(content.word, session, fallback, rng),
    )


def blank_out(sentence: str, word: str) -> Optional[str]:
    """Replace whole-word occurrences of ``word`` with a blank, or None if absent."""
    pattern = re.compile(r"\b" + re.escape(word) + r"\b", re.IGNORECASE)
    blanked, count = pattern.subn(BLANK, sentence)
    return blanked if count else None


def cloze_from_example(item: ReviewItem) -> Optional[ClozeFromExample]:
    content = item.content
    for example in content.examples:
        blanked = blank_out(example.sentence, content.word)
        if blanked:
            return ClozeFromExample(
                item_id=item.item_id,
                answer=content.word,
                sentence=blanked,
                translation=example.translation,
            )
    return None


def spell_from_audio(item: ReviewItem) -> SpellFromAudio:
    content = item.content
    return SpellFromAudio(
        item_id=item.item_id,
        answer=content.word,
        definition=content.definition,
        phonetic=content.phonetic,
    )


def matching_set(items: Sequence[ReviewItem]) -> MatchingSet:
    return MatchingSet(pairs=tuple(
        MatchingPair(item_id=i.item_id, word=i.content.word, definition=i.content.definition)
        for i in items
    ))


def single_question(
    item: ReviewItem,
    others: Sequence[ReviewItem] = (),
    rng: Union[random.Random, int, None] = None,
    kind: Optional[QuestionKind] = None,
) -> SessionQuestion:
    """One question for one word; the shape follows its memory state unless ``kind`` is given."""
    if not isinstance(rng, random.Random):
        rng = random.Random(rng)
    if kind is None:
        kind = rng.choice(ALLOWED_KINDS[item.memory.state])
    if kind is QuestionKind.CLOZE_FROM_EXAMPLE:
        cloze = cloze_from_example(item)
        if cloze is not None:
            return cloze
        kind = QuestionKind.RECOGNITION_FORWARD
    if kind is QuestionKind.SPELL_FROM_AUDIO:
        return spell_from_audio(item)
    if kind is QuestionKind.RECOGNITION_BACKWARD:
        return recognition_backward(item, others, rng)
    return recognition_forward(item, others, rng)


def generate(
    items: Sequence[ReviewItem],
    max_questions: int = 15,
    rng: Union[random.Random, int, None] = None,
) -> list[SessionQuestion]:
    """Generate an ordered, mixed-shape question list for a review session."""
    if not items or max_questions <= 0:
        return []
    if not isinstance(rng, random.Random):
        rng = random.Random(rng)
    items = list(items)
    questions: list[SessionQuestion] = []
    remaining = items
    covered = set()

    if len(items) >= MATCHING_MIN:
        batch = items[:min(MATCHING_MAX, len(items))]
        first = matching_set(batch)
        questions.append(first)
        covered.update(first.item_ids)
        remaining = items[len(batch):]

    individually_covered = []
    for item in remaining:
        if len(questions) >= max_questions:
            break
        questions.append(single_question(item, items, rng))
        covered.add(item.item_id)
        individually_covered.append(item)

    if len(questions) < max_questions and len(covered) >= SECOND_MATCHING_MIN_COVERED:
        # Only words already past first exposure are worth recycling.
        recyclable = [i for i in individually_covered if i.memory.state is not MemoryState.NEW]
        if len(recyclable) >= MATCHING_MIN:
            rng.shuffle(recyclable)
            questions.append(matching_set(recyclable[:MATCHING_MAX]))

    return questions


def generate_retry(
    items: Sequence[ReviewItem],
    rng: Union[random.Random, int, None] = None,
) -> list[SessionQuestion]:
    """One more question per missed word, in a recognition or cloze shape."""
    if not isinstance(rng, random.Random):
        rng = random.Random(rng)
    return [single_question(item, items, rng, kind=rng.choice(RETRY_KINDS)) for item in items]
