"""Quiz session state machine.

A QuizSession walks a shuffled queue of review states. For each slot it
resolves the catalog item, builds a question (choosing the question kind
at display time in review mode), grades the learner's answer and hands the
outcome to the scheduler.
"""

import logging
import random
from enum import Enum

from .config import (
    GENDER_CHOICES, VERB_TYPE_CHOICES, FLASHCARD_CHOICES,
    PERFECT_PERSONS, PERFECT_AUX_FORMS
)
from .matching import is_exact_match, is_meaning_match, is_translation_match, is_perfect_match
from .models import Category, VERB_CATEGORIES, Catalog, LexicalItem, ReviewState
from .review_store import ReviewStore
from .scheduler import schedule, mark_known
from .utils import utc_now

logger = logging.getLogger(__name__)


class EmptyPoolError(Exception):
    """No items match the requested session."""

    def __init__(self, mode, session_filter=None):
        self.mode = mode
        self.session_filter = session_filter
        super().__init__(f"No items to practice for {getattr(mode, 'value', mode)}")


class SessionStateError(RuntimeError):
    """Operation not valid in the session's current state."""


class SessionState(Enum):
    IDLE = 'idle'
    ACTIVE = 'active'
    FINISHED = 'finished'


class QuizMode(Enum):
    REVIEW = 'review'
    FLASHCARD_DE_EN = 'flashcard-de-en'
    FLASHCARD_EN_DE = 'flashcard-en-de'
    NOUN_GENDER = 'noun-gender'
    NOUN_PLURAL = 'noun-plural'
    VERB_CONJUGATION = 'verb-conjugation'
    VERB_TYPE = 'verb-type'
    MEANING = 'meaning'
    TRANSLATION = 'translation'
    PREFIX = 'prefix'
    PARTIZIP = 'partizip'
    PERFECT = 'perfect'
    USAGE = 'usage'

    @property
    def categories(self) -> frozenset:
        """Categories this mode can ask about."""
        return MODE_CATEGORIES[self]


class QuestionKind(Enum):
    NOUN_GENDER = 'noun-gender'
    NOUN_PLURAL = 'noun-plural'
    VERB_CONJUGATION = 'verb-conjugation'
    VERB_TYPE = 'verb-type'
    FLASHCARD_DE_EN = 'flashcard-de-en'
    FLASHCARD_EN_DE = 'flashcard-en-de'
    MEANING = 'meaning'
    TRANSLATION = 'translation'
    PREFIX = 'prefix'
    PARTIZIP = 'partizip'
    PERFECT = 'perfect'
    USAGE = 'usage'


ALL_CATEGORIES = frozenset(Category)

MODE_CATEGORIES = {
    QuizMode.REVIEW: ALL_CATEGORIES,
    QuizMode.FLASHCARD_DE_EN: ALL_CATEGORIES,
    QuizMode.FLASHCARD_EN_DE: ALL_CATEGORIES,
    QuizMode.NOUN_GENDER: frozenset({Category.NOUN}),
    QuizMode.NOUN_PLURAL: frozenset({Category.NOUN}),
    QuizMode.VERB_CONJUGATION: VERB_CATEGORIES,
    QuizMode.VERB_TYPE: frozenset({Category.VERB, Category.IRREGULAR_VERB}),
    QuizMode.MEANING: ALL_CATEGORIES,
    QuizMode.TRANSLATION: ALL_CATEGORIES,
    QuizMode.PREFIX: frozenset({Category.SEPARABLE_VERB}),
    QuizMode.PARTIZIP: frozenset({Category.IRREGULAR_VERB}),
    QuizMode.PERFECT: frozenset({Category.IRREGULAR_VERB}),
    QuizMode.USAGE: frozenset({Category.MODAL_VERB, Category.SEPARABLE_VERB}),
}

# Review mode picks one of these per question, with equal probability
REVIEW_KINDS = {
    Category.NOUN: (QuestionKind.NOUN_GENDER, QuestionKind.NOUN_PLURAL),
    Category.VERB: (QuestionKind.VERB_CONJUGATION, QuestionKind.VERB_TYPE),
    Category.IRREGULAR_VERB: (QuestionKind.VERB_CONJUGATION, QuestionKind.VERB_TYPE),
    Category.MODAL_VERB: (QuestionKind.VERB_CONJUGATION, QuestionKind.MEANING),
    Category.SEPARABLE_VERB: (QuestionKind.VERB_CONJUGATION, QuestionKind.PREFIX),
}

# Kinds answered by pressing one of a fixed set of buttons
CHOICE_KINDS = {
    QuestionKind.NOUN_GENDER: GENDER_CHOICES,
    QuestionKind.VERB_TYPE: VERB_TYPE_CHOICES,
    QuestionKind.FLASHCARD_DE_EN: FLASHCARD_CHOICES,
    QuestionKind.FLASHCARD_EN_DE: FLASHCARD_CHOICES,
}

SELF_GRADED_CORRECT = {'correct', 'knew', 'yes', 'true'}


class Question:
    """A concrete question for one queue slot."""

    def __init__(self, item: LexicalItem, kind: QuestionKind, prompt: str, answer: str,
                 instruction: str = '', display_answer: str = None, context: dict = None,
                 front: str = None, back: str = None):
        self.item = item
        self.kind = kind
        self.prompt = prompt
        self.instruction = instruction
        self.answer = answer
        self.display_answer = display_answer or answer
        self.context = context or {}
        self.front = front
        self.back = back
        self.answered = False

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def choices(self) -> list[str] | None:
        choices = CHOICE_KINDS.get(self.kind)
        return list(choices) if choices else None

    def to_dict(self) -> dict:
        """Public view of the question. The expected answer is left out
        except for flashcards, whose back side is part of the card."""
        return {
            'item_id': self.item.id,
            'kind': self.kind.value,
            'category': self.item.category.value,
            'level': self.item.level,
            'prompt': self.prompt,
            'instruction': self.instruction,
            'choices': self.choices,
            'context': self.context,
            'front': self.front,
            'back': self.back,
        }


class AnswerResult:
    def __init__(self, correct: bool, correct_answer: str, review_state: ReviewState):
        self.correct = correct
        self.correct_answer = correct_answer
        self.review_state = review_state

    def to_dict(self) -> dict:
        return {
            'correct': self.correct,
            'correct_answer': self.correct_answer,
            'review_state': self.review_state.to_dict(),
        }


class SessionSummary:
    def __init__(self, mode: QuizMode, total: int, answered: int, correct: int,
                 known: int, skipped: int):
        self.mode = mode
        self.total = total
        self.answered = answered
        self.correct = correct
        self.known = known
        self.skipped = skipped

    def to_dict(self) -> dict:
        return {
            'mode': self.mode.value if self.mode else None,
            'total': self.total,
            'answered': self.answered,
            'correct': self.correct,
            'known': self.known,
            'skipped': self.skipped,
        }


def build_question(item: LexicalItem, kind: QuestionKind, rng: random.Random) -> Question | None:
    """Build a question of the given kind, or None if the item lacks the data for it."""
    german = item.german
    if kind is QuestionKind.NOUN_GENDER:
        if not item.article:
            return None
        return Question(item, kind, item.word, item.article,
                        instruction='What is the gender?',
                        display_answer=f"{item.article} {item.word}")
    if kind is QuestionKind.NOUN_PLURAL:
        if not item.plural:
            return None
        return Question(item, kind, item.display_german, item.plural,
                        instruction='What is the plural form?',
                        display_answer=f"die {item.plural}")
    if kind is QuestionKind.VERB_CONJUGATION:
        if not item.conjugation:
            return None
        pronoun = rng.choice(list(item.conjugation))
        return Question(item, kind, f"{pronoun} + {german}", item.conjugation[pronoun],
                        instruction='Conjugate the verb.', context={'pronoun': pronoun})
    if kind is QuestionKind.VERB_TYPE:
        if not item.verb_type:
            return None
        return Question(item, kind, german, item.verb_type,
                        instruction='Is this verb regular or irregular?',
                        display_answer=f"It's {item.verb_type}.")
    if kind in (QuestionKind.FLASHCARD_DE_EN, QuestionKind.FLASHCARD_EN_DE):
        de_to_en = kind is QuestionKind.FLASHCARD_DE_EN
        front = item.display_german if de_to_en else item.english
        back = item.english if de_to_en else item.display_german
        return Question(item, kind, front, back, instruction='Flip the card, then grade yourself.',
                        front=front, back=back)
    if kind is QuestionKind.MEANING:
        return Question(item, kind, german, item.english,
                        instruction=f"What is the English meaning of {german}?")
    if kind is QuestionKind.TRANSLATION:
        return Question(item, kind, item.english, item.display_german,
                        instruction=f"Type the German for '{item.english}'.")
    if kind is QuestionKind.PREFIX:
        if not item.prefix:
            return None
        return Question(item, kind, german, item.prefix,
                        instruction=f"What is the prefix of {german}?")
    if kind is QuestionKind.PARTIZIP:
        if not item.partizip_ii:
            return None
        return Question(item, kind, german, item.partizip_ii,
                        instruction=f"What is the Partizip II of {german}?")
    if kind is QuestionKind.PERFECT:
        if not item.partizip_ii:
            return None
        person = rng.choice(PERFECT_PERSONS)
        aux = PERFECT_AUX_FORMS.get(item.perfect_aux, PERFECT_AUX_FORMS['haben'])[person]
        return Question(item, kind, f"{person} + {german}", f"{person} {aux} {item.partizip_ii}",
                        instruction=f"Form the perfect tense: {person} + auxiliary + partizip.",
                        context={'person': person, 'aux': aux})
    if kind is QuestionKind.USAGE:
        if item.usage:
            prompt = item.usage['prompt']
            if item.usage.get('english'):
                prompt = f"{prompt} ({item.usage['english']})"
            return Question(item, kind, prompt, item.usage['answer'],
                            instruction=f"Use the correct form of {german}.")
        if 'ich' not in item.conjugation:
            return None
        return Question(item, kind, f"Ich ___ ({german})", item.conjugation['ich'],
                        instruction=f"Use the correct form of {german}.")
    return None


def grade(question: Question, raw, context=None) -> tuple[bool, str]:
    """Grade a raw answer. Returns (correct, canonical answer for display)."""
    kind = question.kind
    item = question.item
    if kind in (QuestionKind.FLASHCARD_DE_EN, QuestionKind.FLASHCARD_EN_DE):
        if isinstance(raw, bool):
            return raw, question.display_answer
        return str(raw or '').strip().lower() in SELF_GRADED_CORRECT, question.display_answer

    raw = '' if raw is None else str(raw)
    if kind in (QuestionKind.NOUN_GENDER, QuestionKind.VERB_TYPE):
        return raw.strip().casefold() == question.answer.casefold(), question.display_answer
    if kind is QuestionKind.MEANING:
        return is_meaning_match(raw, item.accepted_meanings), question.display_answer
    if kind is QuestionKind.TRANSLATION:
        return is_translation_match(raw, question.answer), question.display_answer
    if kind is QuestionKind.PERFECT:
        ctx = question.context
        return (is_perfect_match(raw, ctx['person'], ctx['aux'], item.partizip_ii),
                question.display_answer)
    if kind is QuestionKind.VERB_CONJUGATION and context in item.conjugation:
        expected = item.conjugation[context]
        return is_exact_match(raw, expected), expected
    return is_exact_match(raw, question.answer), question.display_answer


class QuizSession:
    """One run through a queue of review states. Construct a fresh one per session."""

    def __init__(self, catalog: Catalog, store: ReviewStore, rng: random.Random = None, clock=None):
        self.catalog = catalog
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.mode = None
        self.queue: list[ReviewState] = []
        self.cursor = -1
        self.state = SessionState.IDLE
        self._question = None
        self.answered = 0
        self.correct = 0
        self.known = 0
        self.skipped = 0

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def remaining(self) -> int:
        if not self.is_active:
            return 0
        return len(self.queue) - self.cursor

    def _require_active(self, operation: str) -> None:
        if not self.is_active:
            raise SessionStateError(f"{operation} needs an active session (state: {self.state.value})")

    def start(self, mode: QuizMode, pool: list[ReviewState]) -> None:
        if self.is_active:
            raise SessionStateError("Session already active; end it first")
        if not pool:
            raise EmptyPoolError(mode)
        queue = list(pool)
        self.rng.shuffle(queue)
        self.mode = mode
        self.queue = queue
        self.cursor = 0
        self._question = None
        self.answered = self.correct = self.known = self.skipped = 0
        self.state = SessionState.ACTIVE
        logger.info(f"Session started: mode={mode.value}, {len(queue)} items")

    def _kind_for(self, item: LexicalItem) -> QuestionKind:
        if self.mode is QuizMode.REVIEW:
            return self.rng.choice(REVIEW_KINDS[item.category])
        return QuestionKind(self.mode.value)

    def current_question(self) -> Question | None:
        """Question for the current slot, or None once the queue is exhausted.

        Slots whose item is gone from the catalog, or cannot be asked in
        this mode, are skipped.
        """
        self._require_active('current_question')
        while self.is_active:
            if self._question is not None:
                return self._question
            slot = self.queue[self.cursor]
            item = self.catalog.get(slot.id)
            question = build_question(item, self._kind_for(item), self.rng) if item else None
            if question is None:
                logger.debug(f"Skipping unaskable item {slot.id!r}")
                self.skipped += 1
                self.advance()
                continue
            self._question = question
        return None

    def _current_review_state(self) -> ReviewState:
        slot = self.queue[self.cursor]
        return self.store.get(slot.id) or slot

    def submit_answer(self, raw, context=None) -> AnswerResult:
        """Grade an answer for the current question and reschedule its item.

        Does not move to the next question.
        """
        self._require_active('submit_answer')
        question = self.current_question()
        if question is None:
            raise SessionStateError("No question left to answer")
        if question.answered:
            raise SessionStateError(f"Question for {question.item_id!r} already answered")
        correct, correct_answer = grade(question, raw, context)
        question.answered = True
        new_state = schedule(self._current_review_state(), correct, now=self.clock())
        self.store.put(new_state)
        self.answered += 1
        if correct:
            self.correct += 1
        logger.debug(f"Answer for {question.item_id}: correct={correct}, "
                     f"rank={new_state.repetition_rank}")
        return AnswerResult(correct, correct_answer, new_state)

    def advance(self) -> bool:
        """Move to the next slot. Returns True if that ended the session."""
        self._require_active('advance')
        self.cursor += 1
        self._question = None
        if self.cursor < len(self.queue):
            return False
        self.state = SessionState.FINISHED
        logger.info(f"Session finished: {self.correct}/{self.answered} correct")
        self._reset()
        return True

    def mark_current_known(self) -> bool:
        """Mark the current item as mastered, then advance.

        Unaskable slots ahead of the cursor are skipped first and left untouched.
        Returns True if the session is over.
        """
        self._require_active('mark_current_known')
        if self.current_question() is None:
            return True
        self.store.put(mark_known(self._current_review_state(), now=self.clock()))
        self.known += 1
        return self.advance()

    def end(self) -> None:
        """Leave the session from any state. Review states are untouched."""
        if self.is_active:
            logger.info(f"Session ended early at {self.cursor}/{len(self.queue)}")
        self._reset()

    def _reset(self) -> None:
        self.cursor = -1
        self._question = None
        self.state = SessionState.IDLE

    def summary(self) -> SessionSummary:
        return SessionSummary(self.mode, len(self.queue), self.answered, self.correct,
                              self.known, self.skipped)
