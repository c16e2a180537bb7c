import logging
import math
import random
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from .errors import PersistenceError
from .models import (
    Difficulty,
    LearningStatistics,
    ReviewHistoryEntry,
    ReviewRecord,
    VocabularyItem,
)
from .persistence import ReviewStateStore
from .vocabulary import VocabularyStore

logger = logging.getLogger(__name__)

DEFAULT_EASE = 2.5
DIFFICULT_START_EASE = 1.5
MIN_EASE = 1.3
EASE_BONUS = 0.1
EASE_PENALTY = 0.2
DIFFICULT_EASE_PENALTY = 0.1
STRUGGLING_SUCCESS_RATE = 0.6
STRUGGLING_MIN_REVIEWS = 2
MAX_INTERVAL_DAYS = timedelta.max.days


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def due_date(now: datetime, days: int) -> datetime:
    """now + days, clamped to datetime.max once long streaks outgrow the calendar."""
    try:
        return now + timedelta(days=days)
    except OverflowError:
        return datetime.max


class SchedulingEngine:
    """
    Simplified SM-2 scheduler.

    Owns one ReviewRecord per item id and writes the full record set through
    to the state store after every mutation. Catalog-dependent queries
    assume the vocabulary store has been loaded.
    """

    def __init__(
        self,
        vocabulary: VocabularyStore,
        state_store: ReviewStateStore,
        clock: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
        history_limit: int = 50,
    ):
        self.vocabulary = vocabulary
        self.state_store = state_store
        self.clock = clock
        self.rng = rng or random.Random()
        self.history_limit = history_limit
        self._records: Dict[str, ReviewRecord] = {}
        self.pending_save = False

    def restore(self) -> None:
        """Reads persisted review state. Called once at startup."""
        self._records = self.state_store.load()
        logger.info(f"Restored review state for {len(self._records)} items")

    def _persist(self) -> None:
        try:
            self.state_store.save(self._records)
        except PersistenceError as e:
            self.pending_save = True
            logger.error(f"Review state not saved, keeping in-memory state: {e}")
        else:
            self.pending_save = False

    def _new_record(self, now: datetime, ease: float = DEFAULT_EASE) -> ReviewRecord:
        return ReviewRecord(interval=1, ease=ease, review_count=0, next_due_at=due_date(now, 1))

    def calculate_interval(self, review_count: int, interval: int, ease: float) -> int:
        """Returns number of days until the next review after a correct answer."""
        if review_count == 1:
            return 1
        elif review_count == 2:
            return 6
        else:
            return min(MAX_INTERVAL_DAYS, round_half_up(min(interval, MAX_INTERVAL_DAYS) * ease))

    def calculate_success_rate(self, history: List[ReviewHistoryEntry], was_correct: bool) -> float:
        if not history:
            return 1.0 if was_correct else 0.0
        correct = sum(1 for entry in history if entry.was_correct)
        return correct / len(history)

    def get_record(self, item_id: str) -> Optional[ReviewRecord]:
        return self._records.get(item_id)

    def records(self) -> Dict[str, ReviewRecord]:
        return dict(self._records)

    def last_reviewed(self) -> Dict[str, Optional[datetime]]:
        return {item_id: record.last_reviewed_at for item_id, record in self._records.items()}

    def record_review(self, item_id: str, was_correct: bool) -> ReviewRecord:
        now = self.clock()
        record = self._records.get(item_id)
        if record is None:
            record = self._new_record(now)

        # New values are computed before the record is touched.
        review_count = record.review_count + 1
        history = record.history + [
            ReviewHistoryEntry(timestamp=now, was_correct=was_correct, interval_at_time=record.interval)
        ]
        history = history[-self.history_limit:]
        success_rate = self.calculate_success_rate(history, was_correct)

        if was_correct:
            interval = self.calculate_interval(review_count, record.interval, record.ease)
            ease = max(MIN_EASE, record.ease + EASE_BONUS)
        else:
            interval = 1
            ease = max(MIN_EASE, record.ease - EASE_PENALTY)
        next_due_at = due_date(now, interval)

        record.review_count = review_count
        record.history = history
        record.success_rate = success_rate
        record.interval = interval
        record.ease = ease
        record.last_reviewed_at = now
        record.next_due_at = next_due_at
        self._records[item_id] = record

        self._persist()
        return record

    def mark_difficult(self, item_id: str) -> ReviewRecord:
        now = self.clock()
        record = self._records.get(item_id)
        if record is None:
            record = self._new_record(now, ease=DIFFICULT_START_EASE)
            self._records[item_id] = record
        else:
            interval = max(1, record.interval // 2)
            record.next_due_at = due_date(now, interval)
            record.interval = interval
            record.ease = max(MIN_EASE, record.ease - DIFFICULT_EASE_PENALTY)

        self._persist()
        return record

    def mark_learned(self, item_id: str) -> ReviewRecord:
        record = self._records.get(item_id)
        if record is not None:
            return record
        record = self._new_record(self.clock())
        self._records[item_id] = record
        self._persist()
        return record

    def get_due_items(
        self, catalog: Optional[Sequence[VocabularyItem]] = None, desired_count: int = 10
    ) -> List[VocabularyItem]:
        """
        Selects up to desired_count items for a review session.

        Overdue items come first; the remainder is filled with items that
        have never been scheduled. The result is shuffled.
        """
        if catalog is None:
            catalog = self.vocabulary.all()
        desired_count = max(0, desired_count)
        now = self.clock()
        by_id = {item.id: item for item in catalog}

        due_items = []
        for item_id, record in self._records.items():
            if record.next_due_at <= now and item_id in by_id:
                due_items.append(by_id[item_id])

        if len(due_items) < desired_count:
            new_items = [item for item_id, item in by_id.items() if item_id not in self._records]
            self.rng.shuffle(new_items)
            due_items.extend(new_items[: desired_count - len(due_items)])

        self.rng.shuffle(due_items)
        return due_items[:desired_count]

    def is_struggling(self, record: ReviewRecord) -> bool:
        return (
            record.review_count > STRUGGLING_MIN_REVIEWS
            and record.success_rate < STRUGGLING_SUCCESS_RATE
        )

    def difficult_items(
        self, catalog: Optional[Sequence[VocabularyItem]] = None, count: int = 10
    ) -> List[VocabularyItem]:
        if catalog is None:
            catalog = self.vocabulary.all()
        count = max(0, count)

        difficult = []
        for item in catalog:
            record = self._records.get(item.id)
            if item.difficulty == Difficulty.HARD or (record is not None and self.is_struggling(record)):
                difficult.append(item)

        self.rng.shuffle(difficult)
        return difficult[:count]

    def reset(self) -> None:
        self._records = {}
        logger.info("All review progress has been reset")
        self._persist()

    def statistics(self, catalog: Optional[Sequence[VocabularyItem]] = None) -> LearningStatistics:
        if catalog is None:
            catalog = self.vocabulary.all()
        total_items = len(catalog)
        items_with_records = len(self._records)
        scheduled_in_catalog = sum(1 for item in catalog if item.id in self._records)

        reviewed = [record for record in self._records.values() if record.review_count > 0]
        average_success_rate = (
            sum(record.success_rate for record in reviewed) / len(reviewed) if reviewed else 0.0
        )
        review_times = [r.last_reviewed_at for r in self._records.values() if r.last_reviewed_at is not None]

        return LearningStatistics(
            total_items=total_items,
            items_with_records=items_with_records,
            progress_percent=round_half_up(scheduled_in_catalog / total_items * 100) if total_items else 0,
            average_success_rate=average_success_rate,
            last_reviewed_at=max(review_times) if review_times else None,
        )
