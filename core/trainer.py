"""Trainer: the single entry point the UI layers talk to.

Owns the catalog, the review store and at most one active QuizSession.
Every public method takes the same lock, so callers on several threads
see one operation at a time.
"""

import logging
import random
import threading

from .catalog import persist_vocabulary_if_missing
from .interfaces import Storage
from .models import Catalog, Category, LexicalItem, ReviewState
from .review_store import ReviewStore
from .session import (
    QuizSession, QuizMode, Question, AnswerResult, SessionSummary,
    EmptyPoolError, SessionStateError
)
from .utils import utc_now

logger = logging.getLogger(__name__)


class SessionFilter:
    """Optional narrowing of a session's pool by level and category."""

    def __init__(self, level: str = None, categories=None):
        self.level = level
        self.categories = frozenset(Category(c) for c in categories) if categories else None

    def matches(self, item: LexicalItem) -> bool:
        if self.level and item.level != self.level:
            return False
        if self.categories and item.category not in self.categories:
            return False
        return True

    def to_dict(self) -> dict:
        return {
            'level': self.level,
            'categories': sorted(c.value for c in self.categories) if self.categories else None,
        }


class Trainer:
    def __init__(self, catalog: Catalog, storage: Storage, rng: random.Random = None, clock=None):
        self.catalog = catalog
        self.storage = storage
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.store = ReviewStore(storage, catalog)
        self.session: QuizSession | None = None
        self.last_summary: SessionSummary | None = None
        self._lock = threading.Lock()

    def load(self) -> int:
        """Load and reconcile review state. Returns the number of new states."""
        with self._lock:
            return self.store.load(now=self.clock())

    def snapshot_catalog(self) -> bool:
        """Write the vocabulary snapshot once; failures are logged, never raised."""
        try:
            return persist_vocabulary_if_missing(self.storage, self.catalog)
        except Exception as e:
            logger.warning(f"Vocabulary snapshot skipped: {e}")
            return False

    def close(self) -> None:
        """Flush pending review state, then release the storage."""
        with self._lock:
            if not self.store.flush():
                logger.error("Review state could not be saved on close")
            self.storage.close()

    # Pool selection

    def select_pool(self, mode: QuizMode, session_filter: SessionFilter = None) -> list[ReviewState]:
        session_filter = session_filter or SessionFilter()
        if mode is QuizMode.REVIEW:
            candidates = self.store.due_states(self.clock())
        else:
            candidates = self.store.known_states()
        pool = []
        for state in candidates:
            item = self.catalog.get(state.id)
            if item is None or item.category not in mode.categories:
                continue
            if session_filter.matches(item):
                pool.append(state)
        return pool

    # Session control surface

    def start_session(self, mode: QuizMode, session_filter: SessionFilter = None) -> int:
        """Start a new session, discarding any active one. Returns the queue length.

        Raises EmptyPoolError (with no state change) when nothing matches.
        """
        with self._lock:
            pool = self.select_pool(mode, session_filter)
            if not pool:
                raise EmptyPoolError(mode, session_filter)
            if self.session is not None:
                self.session.end()
            session = QuizSession(self.catalog, self.store, rng=self.rng, clock=self.clock)
            session.start(mode, pool)
            self.session = session
            return len(session.queue)

    def _active_session(self) -> QuizSession:
        if self.session is None or not self.session.is_active:
            raise SessionStateError("No active session")
        return self.session

    def current_question(self) -> Question | None:
        """Current question, or None if skipping unaskable items ended the session."""
        with self._lock:
            session = self._active_session()
            question = session.current_question()
            if question is None:
                self._finish(session)
            return question

    def submit_answer(self, raw, context=None) -> AnswerResult:
        with self._lock:
            return self._active_session().submit_answer(raw, context)

    def advance(self) -> SessionSummary | None:
        """Next question. Returns the summary when the session is over."""
        with self._lock:
            session = self._active_session()
            if session.advance():
                return self._finish(session)
            return None

    def mark_current_known(self) -> SessionSummary | None:
        with self._lock:
            session = self._active_session()
            if session.mark_current_known():
                return self._finish(session)
            return None

    def end_session(self) -> SessionSummary | None:
        with self._lock:
            if self.session is None:
                return None
            session = self.session
            session.end()
            return self._finish(session)

    def _finish(self, session: QuizSession) -> SessionSummary:
        self.session = None
        self.last_summary = session.summary()
        return self.last_summary

    def due_count(self) -> int:
        with self._lock:
            return self.store.due_count(self.clock())

    # Catalog views

    def item_details(self, item_id: str) -> dict | None:
        item = self.catalog.get(item_id)
        if item is None:
            return None
        details = item.to_dict()
        details['category'] = item.category.value
        details['title'] = item.german or 'Details'
        details.setdefault('details', 'No details available for this item.')
        state = self.store.get(item_id)
        if state is not None:
            details['review_state'] = state.to_dict()
        return details

    def list_items(self, category: Category, level: str = None) -> list[dict]:
        return [item.to_dict() for item in self.catalog.items(category, level)]

    def status(self) -> dict:
        with self._lock:
            session = self.session
            return {
                'due_count': self.store.due_count(self.clock()),
                'total_items': len(self.catalog),
                'items_by_category': self.catalog.count_by_category(),
                'session_active': session is not None and session.is_active,
                'session_mode': session.mode.value if session is not None and session.mode else None,
                'session_remaining': session.remaining if session is not None else 0,
            }
