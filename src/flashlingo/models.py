import math
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class Difficulty(str, Enum):
    NORMAL = "normal"
    HARD = "hard"


class Direction(str, Enum):
    PRIMARY_TO_SECONDARY = "primary-to-secondary"
    SECONDARY_TO_PRIMARY = "secondary-to-primary"


class SortMethod(str, Enum):
    DEFAULT = "default"
    ALPHABETICAL = "alphabetical"
    DIFFICULTY = "difficulty"
    RECENTLY_LEARNED = "recently-learned"
    SPACED_REPETITION = "spaced-repetition"


class VocabularyItem(BaseModel):
    primary_text: str
    secondary_text: str
    phonetic: Optional[str] = None
    tip: Optional[str] = None
    difficulty: Difficulty = Difficulty.NORMAL

    @computed_field
    @property
    def id(self) -> str:
        return self.primary_text

    def prompt(self, direction: Direction) -> str:
        if direction == Direction.PRIMARY_TO_SECONDARY:
            return self.primary_text
        return self.secondary_text

    def answer(self, direction: Direction) -> str:
        if direction == Direction.PRIMARY_TO_SECONDARY:
            return self.secondary_text
        return self.primary_text


class ReviewHistoryEntry(BaseModel):
    timestamp: datetime
    was_correct: bool
    interval_at_time: int


class ReviewRecord(BaseModel):
    interval: int = Field(default=1, ge=1)
    ease: float = Field(default=2.5, ge=1.3)
    review_count: int = Field(default=0, ge=0)
    last_reviewed_at: Optional[datetime] = None
    next_due_at: datetime
    success_rate: float = Field(default=1.0, ge=0.0, le=1.0)
    history: List[ReviewHistoryEntry] = Field(default_factory=list)


class LearningStatistics(BaseModel):
    total_items: int
    items_with_records: int
    progress_percent: int
    average_success_rate: float
    last_reviewed_at: Optional[datetime] = None


class Flashcard(BaseModel):
    id: str
    prompt: str
    answer: str
    phonetic: Optional[str] = None
    tip: Optional[str] = None
    difficulty: Difficulty = Difficulty.NORMAL

    @classmethod
    def from_item(cls, item: VocabularyItem, direction: Direction) -> "Flashcard":
        return cls(
            id=item.id,
            prompt=item.prompt(direction),
            answer=item.answer(direction),
            phonetic=item.phonetic,
            tip=item.tip,
            difficulty=item.difficulty,
        )


class ReviewRequest(BaseModel):
    """Either a self-assessed was_correct or a typed answer to grade."""

    item_id: str
    was_correct: Optional[bool] = None
    answer: Optional[str] = None
    direction: Direction = Direction.PRIMARY_TO_SECONDARY


class ReviewOutcome(BaseModel):
    item_id: str
    was_correct: Optional[bool] = None
    skipped: bool = False
    correct_answer: Optional[str] = None
    record: Optional[ReviewRecord] = None


class MultipleChoiceQuestion(BaseModel):
    id: str
    prompt: str
    options: List[str]


class SessionStats(BaseModel):
    total_sessions: int = 0
    total_correct: int = 0
    total_answered: int = 0
    total_time_secs: int = 0
    current_streak: int = 0
    best_streak: int = 0
    words_learned: Dict[str, int] = Field(default_factory=dict)
    last_session_date: Optional[date] = None

    @computed_field
    @property
    def accuracy_percent(self) -> int:
        if self.total_answered == 0:
            return 0
        return int(math.floor(self.total_correct / self.total_answered * 100 + 0.5))


class SessionResult(BaseModel):
    correct: int = Field(ge=0)
    total: int = Field(ge=0)
