import json
import random
from datetime import datetime, timedelta

import pytest

from flashlingo.config import Settings
from flashlingo.persistence import ReviewStateStore
from flashlingo.scheduler import SchedulingEngine
from flashlingo.vocabulary import VocabularyStore

CATALOG = [
    {"french": "chat", "german": "Katze", "phonetic": "ʃa", "tip": "Le chat dort."},
    {"french": "chien", "german": "Hund"},
    {"french": "maison", "german": "Haus", "tip": "Feminine: la maison"},
]


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "vocabulary.json"
    path.write_text(json.dumps(CATALOG, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def vocabulary(catalog_file):
    store = VocabularyStore(str(catalog_file), rng=random.Random(7))
    store.load()
    return store


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 30, 15, 123456))


@pytest.fixture
def state_store(tmp_path):
    return ReviewStateStore(str(tmp_path / "db" / "state.db"))


@pytest.fixture
def engine(vocabulary, state_store, clock):
    return SchedulingEngine(vocabulary, state_store, clock=clock, rng=random.Random(42))


@pytest.fixture
def test_settings(tmp_path, catalog_file):
    settings = Settings()
    settings.LOG_DIR = str(tmp_path / "log")
    settings.DB_DIR = str(tmp_path / "db")
    settings.CATALOG_FILE = str(catalog_file)
    settings.STATIC_DIR = str(tmp_path / "static")
    return settings
