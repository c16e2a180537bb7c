import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .context import AppContext, get_context
from .errors import LoadError
from .models import Direction, Flashcard, ReviewOutcome, ReviewRequest, SessionResult, SortMethod

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def catalog_unavailable() -> JSONResponse:
    return JSONResponse({"error": "Vocabulary not loaded"}, status_code=503)


# --- Vocabulary ---


@router.get("/vocabulary")
async def list_vocabulary(
    sort: SortMethod = SortMethod.DEFAULT,
    direction: Direction = Direction.PRIMARY_TO_SECONDARY,
    context: AppContext = Depends(get_context),
):
    if not context.vocabulary.loaded:
        return catalog_unavailable()
    if sort == SortMethod.SPACED_REPETITION:
        return context.scheduler.get_due_items(desired_count=context.settings.REVIEW_BATCH_SIZE)
    return context.vocabulary.sorted_items(sort, direction, context.scheduler.last_reviewed())


@router.get("/vocabulary/search")
async def search_vocabulary(q: str = "", context: AppContext = Depends(get_context)):
    return context.vocabulary.search(q)


@router.post("/vocabulary/reload")
async def reload_vocabulary(context: AppContext = Depends(get_context)):
    try:
        items = context.vocabulary.load()
    except LoadError as e:
        logger.error(f"Vocabulary reload failed: {e}")
        return JSONResponse({"error": "Failed to load vocabulary data"}, status_code=500)
    return {"status": "success", "count": len(items)}


@router.post("/vocabulary/{item_id}/difficult")
async def mark_difficult(item_id: str, context: AppContext = Depends(get_context)):
    record = context.mark_difficult(item_id)
    if record is None:
        return JSONResponse({"error": "Unknown word"}, status_code=404)
    return record


@router.post("/vocabulary/{item_id}/learned")
async def mark_learned(item_id: str, context: AppContext = Depends(get_context)):
    record = context.mark_learned(item_id)
    if record is None:
        return JSONResponse({"error": "Unknown word"}, status_code=404)
    return record


# --- Review sessions ---


@router.get("/review/due")
async def due_flashcards(
    count: Optional[int] = None,
    direction: Direction = Direction.PRIMARY_TO_SECONDARY,
    context: AppContext = Depends(get_context),
):
    if not context.vocabulary.loaded:
        return catalog_unavailable()
    if count is None:
        count = context.settings.REVIEW_BATCH_SIZE
    items = context.scheduler.get_due_items(desired_count=count)
    return [Flashcard.from_item(item, direction) for item in items]


@router.get("/review/difficult")
async def difficult_flashcards(
    count: Optional[int] = None,
    direction: Direction = Direction.PRIMARY_TO_SECONDARY,
    context: AppContext = Depends(get_context),
):
    if not context.vocabulary.loaded:
        return catalog_unavailable()
    if count is None:
        count = context.settings.REVIEW_BATCH_SIZE
    items = context.scheduler.difficult_items(count=count)
    return [Flashcard.from_item(item, direction) for item in items]


@router.post("/review")
async def submit_review(review: ReviewRequest, context: AppContext = Depends(get_context)):
    if not context.vocabulary.loaded:
        return catalog_unavailable()
    if context.vocabulary.find_by_id(review.item_id) is None:
        return JSONResponse({"error": "Unknown word"}, status_code=404)

    if review.answer is not None:
        return context.grade_review(review.item_id, review.answer, review.direction)
    if review.was_correct is None:
        return JSONResponse({"error": "Either answer or was_correct is required"}, status_code=400)

    record = context.record_answer(review.item_id, review.was_correct)
    return ReviewOutcome(item_id=review.item_id, was_correct=review.was_correct, record=record)


@router.get("/review/{item_id}/options")
async def multiple_choice(
    item_id: str,
    direction: Direction = Direction.PRIMARY_TO_SECONDARY,
    context: AppContext = Depends(get_context),
):
    question = context.multiple_choice(item_id, direction)
    if question is None:
        return JSONResponse({"error": "Unknown word"}, status_code=404)
    return question


@router.get("/review/{item_id}")
async def get_review_record(item_id: str, context: AppContext = Depends(get_context)):
    record = context.scheduler.get_record(item_id)
    if record is None:
        return JSONResponse({"error": "No review record"}, status_code=404)
    return record


# --- Progress ---


@router.get("/statistics")
async def get_statistics(context: AppContext = Depends(get_context)):
    return context.scheduler.statistics()


@router.post("/reset")
async def reset_progress(context: AppContext = Depends(get_context)):
    context.scheduler.reset()
    return {"status": "success"}


# --- Practice sessions ---


@router.post("/session/start")
async def start_session(context: AppContext = Depends(get_context)):
    return context.sessions.start_session()


@router.post("/session/end")
async def end_session(result: SessionResult, context: AppContext = Depends(get_context)):
    if result.correct > result.total:
        return JSONResponse({"error": "correct cannot exceed total"}, status_code=400)
    return context.sessions.end_session(result.correct, result.total)


@router.get("/session/stats")
async def session_stats(context: AppContext = Depends(get_context)):
    return context.sessions.stats


@router.post("/session/reset")
async def reset_session_stats(context: AppContext = Depends(get_context)):
    context.sessions.reset()
    return {"status": "success"}
