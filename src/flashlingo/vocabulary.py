import logging
import os
import random
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd
from pydantic import ValidationError

from .errors import LoadError
from .models import Difficulty, Direction, SortMethod, VocabularyItem

logger = logging.getLogger(__name__)

OPTIONAL_COLUMNS = ("phonetic", "tip", "difficulty")


class VocabularyStore:
    """Owns the vocabulary catalog and the per-item difficulty flags."""

    def __init__(
        self,
        catalog_path: str,
        primary_language: str = "french",
        secondary_language: str = "german",
        rng: Optional[random.Random] = None,
    ):
        self.catalog_path = catalog_path
        self.primary_language = primary_language
        self.secondary_language = secondary_language
        self.rng = rng or random.Random()
        self._items: List[VocabularyItem] = []
        self._by_id: Dict[str, VocabularyItem] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> List[VocabularyItem]:
        """
        Reads the catalog file and replaces the in-memory catalog.

        Raises LoadError when the file is missing, unreadable or malformed.
        The previous catalog is left untouched on failure.
        """
        df = self._read_frame()
        df = df.rename(columns=self._column_aliases())

        if df.empty:
            items = []
        else:
            missing = [c for c in ("primary_text", "secondary_text") if c not in df.columns]
            if missing:
                raise LoadError(f"Catalog {self.catalog_path} is missing columns: {missing}")
            items = self._build_items(df)

        by_id: Dict[str, VocabularyItem] = {}
        for item in items:
            if item.id in by_id:
                raise LoadError(f'Catalog entry "{item.id}" appears more than once.')
            by_id[item.id] = item

        self._items = items
        self._by_id = by_id
        self._loaded = True
        logger.info(f"Loaded {len(items)} vocabulary items from {self.catalog_path}")
        return list(items)

    def _read_frame(self) -> pd.DataFrame:
        extension = os.path.splitext(self.catalog_path)[1].lower()
        try:
            if extension == ".csv":
                return pd.read_csv(
                    self.catalog_path,
                    encoding="utf-8",
                    dtype=str,
                    keep_default_na=False,
                    na_values=[""],
                )
            return pd.read_json(
                self.catalog_path,
                orient="records",
                dtype=False,
                convert_dates=False,
                encoding="utf-8",
            )
        except (OSError, ValueError) as e:
            raise LoadError(f"Failed to load {self.catalog_path}: {e}") from e

    def _column_aliases(self) -> Dict[str, str]:
        return {
            self.primary_language: "primary_text",
            self.secondary_language: "secondary_text",
            "primaryText": "primary_text",
            "secondaryText": "secondary_text",
        }

    def _build_items(self, df: pd.DataFrame) -> List[VocabularyItem]:
        columns = ["primary_text", "secondary_text"] + [c for c in OPTIONAL_COLUMNS if c in df.columns]
        df = df[columns].astype(object)
        df = df.where(df.notna(), None)

        items = []
        for position, row in enumerate(df.to_dict("records")):
            if row.get("difficulty") is None:
                row.pop("difficulty", None)
            try:
                items.append(VocabularyItem.model_validate(row))
            except ValidationError as e:
                raise LoadError(f"Invalid catalog entry #{position}: {e}") from e
        return items

    def all(self) -> List[VocabularyItem]:
        return list(self._items)

    def find_by_id(self, item_id: str) -> Optional[VocabularyItem]:
        return self._by_id.get(item_id)

    def search(self, query: str) -> List[VocabularyItem]:
        if not query:
            return []
        needle = query.lower()
        return [
            item
            for item in self._items
            if needle in item.primary_text.lower()
            or needle in item.secondary_text.lower()
            or (item.tip and needle in item.tip.lower())
        ]

    def mark_difficult(self, item_id: str) -> bool:
        item = self._by_id.get(item_id)
        if item is None:
            return False
        item.difficulty = Difficulty.HARD
        return True

    def random_items(self, count: int) -> List[VocabularyItem]:
        count = max(0, min(count, len(self._items)))
        return self.rng.sample(self._items, count)

    def sorted_items(
        self,
        method: SortMethod = SortMethod.DEFAULT,
        direction: Direction = Direction.PRIMARY_TO_SECONDARY,
        last_reviewed: Optional[Dict[str, Optional[datetime]]] = None,
    ) -> List[VocabularyItem]:
        """Catalog ordered for browsing. Spaced-repetition order is the scheduler's job."""
        items = list(self._items)
        if method == SortMethod.ALPHABETICAL:
            items.sort(key=lambda item: item.prompt(direction).casefold())
        elif method == SortMethod.DIFFICULTY:
            items.sort(key=lambda item: item.difficulty != Difficulty.HARD)
        elif method == SortMethod.RECENTLY_LEARNED:
            last_reviewed = last_reviewed or {}
            items.sort(
                key=lambda item: last_reviewed.get(item.id) or datetime.min,
                reverse=True,
            )
        return items
