import logging
import random
from typing import Optional

from fastapi import Request

from .config import Settings
from .grading import grade_answer, is_skipped, multiple_choice_options
from .models import Difficulty, Direction, MultipleChoiceQuestion, ReviewOutcome, ReviewRecord
from .persistence import ReviewStateStore, SessionStatsStore
from .scheduler import SchedulingEngine
from .session_stats import SessionTracker
from .vocabulary import VocabularyStore

logger = logging.getLogger(__name__)


class AppContext:
    """Holds the single vocabulary store, scheduler and session tracker of a running app."""

    def __init__(self, settings: Settings, rng: Optional[random.Random] = None):
        self.settings = settings
        self.rng = rng or random.Random()
        self.vocabulary = VocabularyStore(
            settings.CATALOG_FILE,
            primary_language=settings.PRIMARY_LANGUAGE,
            secondary_language=settings.SECONDARY_LANGUAGE,
            rng=self.rng,
        )
        self.state_store = ReviewStateStore(settings.db_path)
        self.scheduler = SchedulingEngine(
            self.vocabulary,
            self.state_store,
            rng=self.rng,
            history_limit=settings.HISTORY_LIMIT,
        )
        self.sessions = SessionTracker(SessionStatsStore(settings.db_path))

    def restore(self) -> None:
        self.scheduler.restore()
        self.sessions.restore()

    def record_answer(self, item_id: str, was_correct: bool) -> ReviewRecord:
        """Records a review and flags the item hard once it keeps being missed."""
        record = self.scheduler.record_review(item_id, was_correct)
        if self.scheduler.is_struggling(record):
            item = self.vocabulary.find_by_id(item_id)
            if item is not None and item.difficulty != Difficulty.HARD:
                self.vocabulary.mark_difficult(item_id)
                logger.info(f'"{item_id}" flagged hard after repeated misses')
        return record

    def grade_review(self, item_id: str, answer: str, direction: Direction) -> Optional[ReviewOutcome]:
        """
        Grades a typed answer and records it.

        An empty answer counts as skipped and leaves the schedule alone.
        Returns None for an id that is not in the catalog.
        """
        item = self.vocabulary.find_by_id(item_id)
        if item is None:
            return None
        correct_answer = item.answer(direction)
        if is_skipped(answer):
            return ReviewOutcome(item_id=item_id, skipped=True, correct_answer=correct_answer)

        was_correct = grade_answer(answer, item, direction)
        record = self.record_answer(item_id, was_correct)
        return ReviewOutcome(
            item_id=item_id, was_correct=was_correct, correct_answer=correct_answer, record=record
        )

    def multiple_choice(self, item_id: str, direction: Direction) -> Optional[MultipleChoiceQuestion]:
        item = self.vocabulary.find_by_id(item_id)
        if item is None:
            return None
        return multiple_choice_options(item, self.vocabulary.all(), direction, self.rng)

    def mark_difficult(self, item_id: str) -> Optional[ReviewRecord]:
        if not self.vocabulary.mark_difficult(item_id):
            return None
        return self.scheduler.mark_difficult(item_id)

    def mark_learned(self, item_id: str) -> Optional[ReviewRecord]:
        if self.vocabulary.find_by_id(item_id) is None:
            return None
        record = self.scheduler.mark_learned(item_id)
        self.sessions.mark_word_learned(item_id)
        return record


def get_context(request: Request) -> AppContext:
    return request.app.state.context
