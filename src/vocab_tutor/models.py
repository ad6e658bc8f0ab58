"""Data classes for the wordbook and review-session domain model."""
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional, Union


class MemoryState(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


class Rating(IntEnum):
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @property
    def is_correct(self) -> bool:
        return self is not Rating.AGAIN


MIN_STABILITY = 0.5


@dataclass(frozen=True)
class MemoryModel:
    """Learning state of one word. Replaced, never mutated, on every review."""
    state: MemoryState = MemoryState.NEW
    stability: float = MIN_STABILITY
    difficulty: float = 0.3
    last_review_at: Optional[datetime] = None
    next_review_at: Optional[datetime] = None
    repetition_count: int = 0
    lapse_count: int = 0

    def clamped(self) -> "MemoryModel":
        """Return a copy with numeric fields forced back into their valid ranges."""
        stability = self.stability
        if not isinstance(stability, (int, float)) or not math.isfinite(stability) or stability < MIN_STABILITY:
            stability = MIN_STABILITY
        difficulty = self.difficulty
        if not isinstance(difficulty, (int, float)) or not math.isfinite(difficulty):
            difficulty = 0.3
        difficulty = max(0.0, min(1.0, difficulty))
        return replace(
            self,
            stability=float(stability),
            difficulty=float(difficulty),
            repetition_count=max(0, self.repetition_count),
            lapse_count=max(0, self.lapse_count),
        )

    @property
    def is_new(self) -> bool:
        return self.state is MemoryState.NEW and self.last_review_at is None

    @property
    def accuracy(self) -> float:
        if self.repetition_count <= 0:
            return 1.0
        return max(0.0, 1.0 - self.lapse_count / self.repetition_count)


@dataclass(frozen=True)
class Example:
    sentence: str
    translation: str = ""


@dataclass(frozen=True)
class WordContent:
    word: str
    definition: str
    part_of_speech: str = ""
    phonetic: str = ""
    examples: tuple[Example, ...] = ()
    synonyms: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReviewItem:
    item_id: str
    content: WordContent
    memory: MemoryModel = field(default_factory=MemoryModel)

    def with_memory(self, memory: MemoryModel) -> "ReviewItem":
        return replace(self, memory=memory)


class QuestionKind(str, Enum):
    RECOGNITION_FORWARD = "recognition_forward"
    RECOGNITION_BACKWARD = "recognition_backward"
    CLOZE_FROM_EXAMPLE = "cloze_from_example"
    SPELL_FROM_AUDIO = "spell_from_audio"
    MATCHING_SET = "matching_set"


def _normalize(text: str) -> str:
    return " ".join(text.split()).lower()


@dataclass(frozen=True)
class _SingleItemQuestion:
    item_id: str
    answer: str

    @property
    def item_ids(self) -> tuple[str, ...]:
        return (self.item_id,)

    def is_correct(self, response: str) -> bool:
        return _normalize(response) == _normalize(self.answer)


@dataclass(frozen=True)
class RecognitionForward(_SingleItemQuestion):
    """Show the word, pick its definition."""
    prompt: str = ""
    options: tuple[str, ...] = ()
    kind: QuestionKind = field(default=QuestionKind.RECOGNITION_FORWARD, init=False)


@dataclass(frozen=True)
class RecognitionBackward(_SingleItemQuestion):
    """Show the definition, pick the word."""
    prompt: str = ""
    options: tuple[str, ...] = ()
    kind: QuestionKind = field(default=QuestionKind.RECOGNITION_BACKWARD, init=False)


@dataclass(frozen=True)
class ClozeFromExample(_SingleItemQuestion):
    sentence: str = ""  # contains BLANK where the word was
    translation: str = ""
    kind: QuestionKind = field(default=QuestionKind.CLOZE_FROM_EXAMPLE, init=False)


@dataclass(frozen=True)
class SpellFromAudio(_SingleItemQuestion):
    definition: str = ""
    phonetic: str = ""
    kind: QuestionKind = field(default=QuestionKind.SPELL_FROM_AUDIO, init=False)


@dataclass(frozen=True)
class MatchingPair:
    item_id: str
    word: str
    definition: str


@dataclass(frozen=True)
class MatchingSet:
    pairs: tuple[MatchingPair, ...]
    kind: QuestionKind = field(default=QuestionKind.MATCHING_SET, init=False)

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(p.item_id for p in self.pairs)

    def is_match(self, item_id: str, definition: str) -> bool:
        for pair in self.pairs:
            if pair.item_id == item_id:
                return _normalize(pair.definition) == _normalize(definition)
        return False


SessionQuestion = Union[
    RecognitionForward, RecognitionBackward, ClozeFromExample, SpellFromAudio, MatchingSet
]


@dataclass(frozen=True)
class AnswerOutcome:
    item_id: str
    rating: Optional[Rating]  # None when skipped
    is_correct: bool = False

    @property
    def skipped(self) -> bool:
        return self.rating is None


@dataclass
class SessionStats:
    total: int = 0
    correct: int = 0
    wrong: int = 0
    skipped: int = 0
    accuracy: float = 0.0
    items: int = 0
