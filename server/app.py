"""FastAPI server for deutschweg application."""

import logging
import os
import random

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional, Union

logger = logging.getLogger(__name__)

from core.catalog import load_catalog
from core.config import LEVELS
from core.interfaces import Storage
from core.models import Category
from core.session import QuizMode, EmptyPoolError, SessionStateError
from core.trainer import Trainer, SessionFilter

from server.file_storage import FileStorage


# Pydantic models for API
class StartSessionRequest(BaseModel):
    mode: str
    level: Optional[str] = None
    categories: Optional[list[str]] = None


class AnswerRequest(BaseModel):
    # Flashcards may be self-graded with a plain boolean
    answer: Union[bool, str]
    context: Optional[str] = None


class StartSessionResponse(BaseModel):
    mode: str
    queue_length: int


class QuestionResponse(BaseModel):
    finished: bool
    question: Optional[dict] = None
    remaining: int = 0
    summary: Optional[dict] = None


class AnswerResponse(BaseModel):
    correct: bool
    correct_answer: str
    repetition_rank: int
    next_review_at: str


class AdvanceResponse(BaseModel):
    finished: bool
    summary: Optional[dict] = None


class StatusResponse(BaseModel):
    due_count: int
    total_items: int
    items_by_category: dict
    session_active: bool
    session_mode: Optional[str]
    session_remaining: int


# Global state (single learner, single trainer)
trainer: Trainer = None


def create_storage() -> Storage:
    """Pick the storage backend from DEUTSCHWEG_STORAGE (file or postgres)."""
    storage_type = os.environ.get('DEUTSCHWEG_STORAGE', 'file')
    if storage_type == 'postgres':
        # Only import psycopg2 when asked for it
        from server.postgres_storage import PostgresStorage
        logger.info("Using PostgreSQL storage")
        return PostgresStorage()
    logger.info("Using file storage")
    return FileStorage()


def resolve_seed(storage: Storage) -> int | None:
    """RNG seed from DEUTSCHWEG_SEED, then the config file's random_seed."""
    seed = os.environ.get('DEUTSCHWEG_SEED')
    if seed is None:
        seed = storage.load_config().get('random_seed')
    if seed is None:
        return None
    try:
        return int(seed)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-integer random seed {seed!r}")
        return None


def init_trainer(storage: Storage, rng: random.Random = None, clock=None) -> Trainer:
    """Build the global trainer: load the catalog, snapshot it, load review state."""
    global trainer
    trainer = Trainer(load_catalog(), storage, rng=rng, clock=clock)
    trainer.snapshot_catalog()
    created = trainer.load()
    logger.info(f"Trainer ready: {len(trainer.catalog)} items, {created} new, "
                f"{trainer.due_count()} due")
    return trainer


app = FastAPI(title="DeutschWeg API", description="German vocabulary practice API")


@app.on_event("startup")
async def startup():
    """Initialize storage and the trainer on startup."""
    if trainer is not None:
        return
    storage = create_storage()
    seed = resolve_seed(storage)
    init_trainer(storage, rng=random.Random(seed) if seed is not None else None)


@app.on_event("shutdown")
async def shutdown():
    """Flush any review state that failed to save."""
    if trainer is not None:
        trainer.close()


def get_trainer() -> Trainer:
    if trainer is None:
        raise HTTPException(status_code=503, detail="Trainer not initialized")
    return trainer


def parse_mode(value: str) -> QuizMode:
    try:
        return QuizMode(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown mode: {value}")


def parse_category(value: str) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown category: {value}")


@app.get("/")
async def root():
    """Health check."""
    return {"service": "deutschweg", "status": "ok"}


@app.get("/api/status", response_model=StatusResponse)
async def get_status():
    """Dashboard: due count and catalog size."""
    return StatusResponse(**get_trainer().status())


@app.get("/api/modes")
async def list_modes():
    """List quiz modes with the categories each applies to."""
    return {
        "modes": [
            {"mode": mode.value, "categories": sorted(c.value for c in mode.categories)}
            for mode in QuizMode
        ],
        "levels": LEVELS,
        "categories": [{"key": c.value, "name": c.display_name} for c in Category],
    }


@app.post("/api/session/start", response_model=StartSessionResponse)
async def start_session(request: StartSessionRequest):
    """Start a quiz session. 409 if nothing matches."""
    mode = parse_mode(request.mode)
    categories = [parse_category(c) for c in request.categories] if request.categories else None
    session_filter = SessionFilter(level=request.level, categories=categories)
    try:
        queue_length = get_trainer().start_session(mode, session_filter)
    except EmptyPoolError:
        raise HTTPException(status_code=409, detail="No items to practice for this category right now!")
    logger.info(f"Started {mode.value} session with {queue_length} items")
    return StartSessionResponse(mode=mode.value, queue_length=queue_length)


@app.get("/api/session/question", response_model=QuestionResponse)
async def get_question():
    """Current question of the active session."""
    t = get_trainer()
    try:
        question = t.current_question()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if question is None:
        summary = t.last_summary.to_dict() if t.last_summary else None
        return QuestionResponse(finished=True, summary=summary)
    return QuestionResponse(
        finished=False,
        question=question.to_dict(),
        remaining=t.session.remaining if t.session else 0
    )


@app.post("/api/session/answer", response_model=AnswerResponse)
async def submit_answer(request: AnswerRequest):
    """Grade an answer for the current question."""
    try:
        result = get_trainer().submit_answer(request.answer, request.context)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    state = result.review_state
    return AnswerResponse(
        correct=result.correct,
        correct_answer=result.correct_answer,
        repetition_rank=state.repetition_rank,
        next_review_at=state.next_review_at.isoformat()
    )


@app.post("/api/session/advance", response_model=AdvanceResponse)
async def advance():
    """Move on to the next question."""
    try:
        summary = get_trainer().advance()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return AdvanceResponse(finished=summary is not None,
                           summary=summary.to_dict() if summary else None)


@app.post("/api/session/known", response_model=AdvanceResponse)
async def mark_known():
    """Mark the current item as already known and move on."""
    try:
        summary = get_trainer().mark_current_known()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return AdvanceResponse(finished=summary is not None,
                           summary=summary.to_dict() if summary else None)


@app.post("/api/session/end", response_model=AdvanceResponse)
async def end_session():
    """Leave the current session early."""
    summary = get_trainer().end_session()
    return AdvanceResponse(finished=True, summary=summary.to_dict() if summary else None)


@app.get("/api/items/{item_id}")
async def get_item(item_id: str):
    """Details for the "know more" view."""
    details = get_trainer().item_details(item_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return details


@app.get("/api/catalog/{category}")
async def list_catalog(category: str, level: Optional[str] = None):
    """List items of a category, optionally for one level."""
    cat = parse_category(category)
    return {"category": cat.value, "name": cat.display_name, "level": level,
            "items": get_trainer().list_items(cat, level)}


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
