from .models import Category, LexicalItem, ReviewState, Catalog
from .interfaces import Storage
from .catalog import VOCABULARY, load_catalog, persist_vocabulary_if_missing
from .matching import is_exact_match, is_meaning_match, is_translation_match, is_perfect_match
from .scheduler import schedule, mark_known, review_delay
from .review_store import ReviewStore
from .session import (
    QuizSession, QuizMode, QuestionKind, SessionState, Question, AnswerResult,
    SessionSummary, EmptyPoolError, SessionStateError
)
from .trainer import Trainer, SessionFilter
from .config import (
    REVIEW_INTERVAL_HOURS, FALLBACK_INTERVAL_HOURS,
    KNOWN_RANK, KNOWN_INTERVAL_DAYS, REVIEW_STATE_NAMESPACE
)

__all__ = [
    'Category', 'LexicalItem', 'ReviewState', 'Catalog',
    'Storage',
    'VOCABULARY', 'load_catalog', 'persist_vocabulary_if_missing',
    'is_exact_match', 'is_meaning_match', 'is_translation_match', 'is_perfect_match',
    'schedule', 'mark_known', 'review_delay',
    'ReviewStore',
    'QuizSession', 'QuizMode', 'QuestionKind', 'SessionState', 'Question', 'AnswerResult',
    'SessionSummary', 'EmptyPoolError', 'SessionStateError',
    'Trainer', 'SessionFilter',
    'REVIEW_INTERVAL_HOURS', 'FALLBACK_INTERVAL_HOURS',
    'KNOWN_RANK', 'KNOWN_INTERVAL_DAYS', 'REVIEW_STATE_NAMESPACE'
]
