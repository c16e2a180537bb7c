from .errors import LoadError, PersistenceError
from .models import Difficulty, ReviewRecord, VocabularyItem
from .scheduler import SchedulingEngine
from .vocabulary import VocabularyStore

__all__ = [
    "Difficulty",
    "LoadError",
    "PersistenceError",
    "ReviewRecord",
    "SchedulingEngine",
    "VocabularyItem",
    "VocabularyStore",
]
