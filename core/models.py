"""Domain models for deutschweg application."""

import logging
from datetime import datetime
from enum import Enum

from .utils import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


class Category(Enum):
    """Grammatical category of a lexical item. Values are the catalog keys."""

    NOUN = 'nouns'
    VERB = 'verbs'
    MODAL_VERB = 'modalVerbs'
    IRREGULAR_VERB = 'irregularVerbs'
    SEPARABLE_VERB = 'separableVerbs'

    @property
    def is_verb(self) -> bool:
        return self is not Category.NOUN

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]


_CATEGORY_DISPLAY_NAMES = {
    Category.NOUN: 'Nouns',
    Category.VERB: 'Verbs',
    Category.MODAL_VERB: 'Modal Verbs',
    Category.IRREGULAR_VERB: 'Irregular Verbs',
    Category.SEPARABLE_VERB: 'Separable Verbs',
}

VERB_CATEGORIES = frozenset(c for c in Category if c.is_verb)


class LexicalItem:
    """A single vocabulary entry. Read-only once the catalog is loaded."""

    def __init__(self, id: str, category: Category, level: str, english: str = '',
                 accepted_meanings: list[str] = None, details: str = None,
                 example: dict = None, word: str = None, article: str = None,
                 plural: str = None, infinitive: str = None, conjugation: dict = None,
                 verb_type: str = None, partizip_ii: str = None, perfect_aux: str = None,
                 prefix: str = None, base_verb: str = None, usage: dict = None):
        self.id = id
        self.category = category
        self.level = level
        self.english = english
        self.accepted_meanings = list(accepted_meanings) if accepted_meanings else [english]
        self.details = details
        self.example = example
        # Nouns
        self.word = word
        self.article = article
        self.plural = plural
        # Verbs
        self.infinitive = infinitive
        self.conjugation = dict(conjugation or {})
        self._verb_type = verb_type
        self.partizip_ii = partizip_ii
        self.perfect_aux = perfect_aux
        self.prefix = prefix
        self.base_verb = base_verb
        self.usage = usage

    @property
    def verb_type(self) -> str | None:
        """'regular' or 'irregular'. Untyped verbs count as irregular."""
        if not self.category.is_verb:
            return None
        if self.category is Category.IRREGULAR_VERB:
            return 'irregular'
        return self._verb_type or 'irregular'

    @property
    def german(self) -> str:
        """Bare German headword: infinitive for verbs, word for nouns."""
        return self.infinitive or self.word or ''

    @property
    def display_german(self) -> str:
        """Headword as taught, with the article for nouns."""
        if self.category is Category.NOUN and self.article:
            return f"{self.article} {self.word}"
        return self.german

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'level': self.level,
            'english': self.english,
            'accepted_meanings': self.accepted_meanings,
        }
        optional = {
            'details': self.details,
            'example': self.example,
            'word': self.word,
            'article': self.article,
            'plural': self.plural,
            'infinitive': self.infinitive,
            'conjugation': self.conjugation or None,
            'verb_type': self._verb_type,
            'partizip_ii': self.partizip_ii,
            'perfect_aux': self.perfect_aux,
            'prefix': self.prefix,
            'base_verb': self.base_verb,
            'usage': self.usage,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, category: Category, data: dict) -> 'LexicalItem':
        return cls(
            id=data['id'],
            category=category,
            level=data.get('level', 'A1'),
            english=data.get('english', ''),
            accepted_meanings=data.get('accepted_meanings'),
            details=data.get('details'),
            example=data.get('example'),
            word=data.get('word'),
            article=data.get('article'),
            plural=data.get('plural'),
            infinitive=data.get('infinitive'),
            conjugation=data.get('conjugation'),
            verb_type=data.get('verb_type'),
            partizip_ii=data.get('partizip_ii'),
            perfect_aux=data.get('perfect_aux'),
            prefix=data.get('prefix'),
            base_verb=data.get('base_verb'),
            usage=data.get('usage'),
        )

    def __repr__(self) -> str:
        return f"LexicalItem({self.id!r}, {self.category.value}, {self.level})"


class ReviewState:
    """Spaced-repetition progress for one lexical item."""

    def __init__(self, id: str, category: Category, level: str,
                 repetition_rank: int = 0, next_review_at: datetime = None):
        self.id = id
        self.category = category
        self.level = level
        self.repetition_rank = repetition_rank
        self.next_review_at = next_review_at

    def copy(self, **changes) -> 'ReviewState':
        fields = {
            'id': self.id,
            'category': self.category,
            'level': self.level,
            'repetition_rank': self.repetition_rank,
            'next_review_at': self.next_review_at,
        }
        fields.update(changes)
        return ReviewState(**fields)

    def is_due(self, now: datetime) -> bool:
        return self.next_review_at is None or self.next_review_at <= now

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'category': self.category.value,
            'level': self.level,
            'repetition_rank': self.repetition_rank,
            'next_review_at': format_timestamp(self.next_review_at) if self.next_review_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ReviewState':
        """Build from a persisted dict, accepting the legacy browser keys
        (type, srsLevel, nextReview)."""
        category = Category(data.get('category', data.get('type')))
        rank = data.get('repetition_rank', data.get('srsLevel', 0)) or 0
        if not isinstance(rank, int) or isinstance(rank, bool) or rank < 0:
            raise ValueError(f"Invalid repetition rank: {rank!r}")
        raw_due = data.get('next_review_at', data.get('nextReview'))
        next_review_at = parse_timestamp(raw_due) if raw_due is not None else None
        return cls(data['id'], category, data.get('level'), rank, next_review_at)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ReviewState):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (f"ReviewState({self.id!r}, rank={self.repetition_rank}, "
                f"next_review_at={self.next_review_at})")


class Catalog:
    """Read-only collection of lexical items grouped by category."""

    def __init__(self, items: list[LexicalItem]):
        self._items = {}
        self._by_category = {c: [] for c in Category}
        for item in items:
            if item.id in self._items:
                logger.warning(f"Duplicate catalog id {item.id!r}, keeping the first")
                continue
            self._items[item.id] = item
            self._by_category[item.category].append(item)

    @classmethod
    def from_dict(cls, data: dict) -> 'Catalog':
        """Build from {category_key: [record, ...]}."""
        items = []
        for key, records in data.items():
            try:
                category = Category(key)
            except ValueError:
                logger.warning(f"Ignoring unknown catalog category {key!r}")
                continue
            items.extend(LexicalItem.from_dict(category, record) for record in records)
        return cls(items)

    def to_dict(self) -> dict:
        return {c.value: [item.to_dict() for item in self._by_category[c]] for c in Category}

    def get(self, item_id: str) -> LexicalItem | None:
        return self._items.get(item_id)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items.values())

    def items(self, category: Category = None, level: str = None) -> list[LexicalItem]:
        """Items in catalog order, optionally filtered by category and level."""
        source = self._by_category[category] if category else self._items.values()
        return [item for item in source if level is None or item.level == level]

    def count_by_category(self) -> dict[str, int]:
        return {c.value: len(self._by_category[c]) for c in Category}
