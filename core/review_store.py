"""Persisted mapping from item id to review state."""

import logging
from datetime import datetime

from .config import REVIEW_STATE_NAMESPACE
from .interfaces import Storage
from .models import Catalog, ReviewState
from .scheduler import is_due
from .utils import utc_now

logger = logging.getLogger(__name__)


class ReviewStore:
    """Holds review states in memory and writes them through to storage.

    A failed write leaves the store dirty; the next save or flush() retries it.
    """

    def __init__(self, storage: Storage, catalog: Catalog, namespace: str = REVIEW_STATE_NAMESPACE):
        self.storage = storage
        self.catalog = catalog
        self.namespace = namespace
        self._states: dict[str, ReviewState] = {}
        self._dirty = False

    @property
    def dirty(self) -> bool:
        return self._dirty

    def load(self, now: datetime = None) -> int:
        """Load persisted states and reconcile them with the catalog.

        Returns the number of states created for new catalog items.
        """
        now = now or utc_now()
        self._states = self._parse(self.storage.load_state(self.namespace))
        created = self.reconcile(now)
        self.save()
        return created

    def _parse(self, blob) -> dict[str, ReviewState]:
        if blob is None:
            return {}
        if not isinstance(blob, dict):
            logger.warning(f"Persisted review state is not a mapping ({type(blob).__name__}), starting fresh")
            return {}
        states = {}
        for key, data in blob.items():
            try:
                state = ReviewState.from_dict(data)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Dropping malformed review state {key!r}: {e}")
                continue
            states[state.id] = state
        return states

    def reconcile(self, now: datetime) -> int:
        """Create missing states (rank 0, due now) and re-sync category/level.

        States whose item left the catalog are kept but never offered.
        """
        created = 0
        for item in self.catalog:
            state = self._states.get(item.id)
            if state is None:
                self._states[item.id] = ReviewState(item.id, item.category, item.level, 0, now)
                created += 1
            elif state.category is not item.category or state.level != item.level:
                self._states[item.id] = state.copy(category=item.category, level=item.level)
        orphans = len(self._states) - len(self.catalog)
        if orphans > 0:
            logger.info(f"{orphans} review states have no catalog entry and will be ignored")
        if created:
            logger.info(f"Created {created} review states for new catalog items")
        return created

    def to_dict(self) -> dict:
        return {item_id: state.to_dict() for item_id, state in self._states.items()}

    def save(self) -> bool:
        """Write all states through. Returns False if the write failed."""
        try:
            self.storage.save_state(self.to_dict(), self.namespace)
        except Exception as e:
            logger.error(f"Failed to save review state, will retry: {e}")
            self._dirty = True
            return False
        self._dirty = False
        return True

    def flush(self) -> bool:
        """Retry a pending write, if any."""
        if self._dirty:
            return self.save()
        return True

    def get(self, item_id: str) -> ReviewState | None:
        return self._states.get(item_id)

    def put(self, state: ReviewState) -> None:
        """Replace a state in memory and persist."""
        self._states[state.id] = state
        self.save()

    def __len__(self) -> int:
        return len(self._states)

    def known_states(self) -> list[ReviewState]:
        """States that still have a catalog entry."""
        return [s for s in self._states.values() if s.id in self.catalog]

    def due_states(self, now: datetime = None) -> list[ReviewState]:
        now = now or utc_now()
        return [s for s in self.known_states() if is_due(s, now)]

    def due_count(self, now: datetime = None) -> int:
        return len(self.due_states(now))
