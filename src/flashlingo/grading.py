import random
import re
from typing import List, Sequence

from .models import Direction, MultipleChoiceQuestion, VocabularyItem

PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")
WHITESPACE = re.compile(r"\s+")
NUM_DISTRACTORS = 3


def normalize_answer(answer: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    answer = PUNCTUATION.sub("", answer.lower())
    return WHITESPACE.sub(" ", answer).strip()


def is_skipped(answer: str) -> bool:
    return answer.strip() == ""


def grade_answer(answer: str, item: VocabularyItem, direction: Direction) -> bool:
    return normalize_answer(answer) == normalize_answer(item.answer(direction))


def multiple_choice_options(
    item: VocabularyItem,
    catalog: Sequence[VocabularyItem],
    direction: Direction,
    rng: random.Random,
) -> MultipleChoiceQuestion:
    """The correct answer plus up to three distinct distractors, shuffled."""
    correct_answer = item.answer(direction)
    others = sorted({other.answer(direction) for other in catalog} - {correct_answer})

    if len(others) < NUM_DISTRACTORS:
        incorrect = others
    else:
        incorrect = rng.sample(others, NUM_DISTRACTORS)

    options: List[str] = [correct_answer] + incorrect
    rng.shuffle(options)
    return MultipleChoiceQuestion(id=item.id, prompt=item.prompt(direction), options=options)
