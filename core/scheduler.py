"""Spaced-repetition scheduling.

Correct answers climb one rank, wrong answers drop two, so an item that was
missed comes back sooner than one that was merely answered right.
"""

from datetime import datetime, timedelta

from .config import (
    REVIEW_INTERVAL_HOURS, FALLBACK_INTERVAL_HOURS,
    KNOWN_RANK, KNOWN_INTERVAL_DAYS, INCORRECT_RANK_PENALTY
)
from .models import ReviewState
from .utils import utc_now


def review_delay(rank: int) -> timedelta:
    """Delay until the next review for a repetition rank."""
    rank = max(0, rank)
    if rank < len(REVIEW_INTERVAL_HOURS):
        return timedelta(hours=REVIEW_INTERVAL_HOURS[rank])
    return timedelta(hours=FALLBACK_INTERVAL_HOURS)


def next_rank(rank: int, was_correct: bool) -> int:
    if was_correct:
        return rank + 1
    return max(0, rank - INCORRECT_RANK_PENALTY)


def schedule(state: ReviewState, was_correct: bool, now: datetime = None) -> ReviewState:
    """Return the state after one graded review. The input is not modified."""
    now = now or utc_now()
    rank = next_rank(state.repetition_rank, was_correct)
    return state.copy(repetition_rank=rank, next_review_at=now + review_delay(rank))


def mark_known(state: ReviewState, now: datetime = None) -> ReviewState:
    """Learner claims mastery without being quizzed."""
    now = now or utc_now()
    return state.copy(
        repetition_rank=KNOWN_RANK,
        next_review_at=now + timedelta(days=KNOWN_INTERVAL_DAYS)
    )



def is_due(state: ReviewState, now: datetime = None) -> bool:
    return state.is_due(now or utc_now())
