import logging
from datetime import datetime
from typing import Callable, Optional

from .errors import PersistenceError
from .models import SessionStats
from .persistence import SessionStatsStore

logger = logging.getLogger(__name__)

STREAK_THRESHOLD = 0.6


class SessionTracker:
    """
    Practice-session totals: sessions, answers, time spent and the daily streak.

    A session counts toward the streak when at least 60% of its answers were
    correct; a session with no correct answers breaks it, and so does a gap of
    more than one day between sessions.
    """

    def __init__(self, store: SessionStatsStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock
        self.stats = SessionStats()
        self.session_started_at: Optional[datetime] = None
        self.pending_save = False

    def restore(self) -> None:
        self.stats = self.store.load()

    def _persist(self) -> None:
        try:
            self.store.save(self.stats)
        except PersistenceError as e:
            self.pending_save = True
            logger.error(f"Session stats not saved, keeping in-memory state: {e}")
        else:
            self.pending_save = False

    def start_session(self) -> SessionStats:
        now = self.clock()
        today = now.date()
        last = self.stats.last_session_date
        if last is not None and (today - last).days > 1:
            self.stats.current_streak = 0

        self.stats.last_session_date = today
        self.session_started_at = now
        self._persist()
        return self.stats

    def end_session(self, correct: int, total: int) -> SessionStats:
        if self.session_started_at is None:
            return self.stats

        elapsed = self.clock() - self.session_started_at
        self.stats.total_sessions += 1
        self.stats.total_correct += correct
        self.stats.total_answered += total
        self.stats.total_time_secs += max(0, round(elapsed.total_seconds()))

        if total and correct / total >= STREAK_THRESHOLD:
            self.stats.current_streak += 1
            self.stats.best_streak = max(self.stats.best_streak, self.stats.current_streak)
        elif correct == 0:
            self.stats.current_streak = 0

        self.session_started_at = None
        self._persist()
        return self.stats

    def mark_word_learned(self, item_id: str) -> None:
        self.stats.words_learned[item_id] = self.stats.words_learned.get(item_id, 0) + 1
        self._persist()

    @property
    def unique_words_learned(self) -> int:
        return len(self.stats.words_learned)

    def reset(self) -> SessionStats:
        self.stats = SessionStats()
        self.session_started_at = None
        self._persist()
        return self.stats
