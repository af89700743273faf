"""Tests for quiz sessions and the trainer control surface."""

import random
import unittest
from datetime import timedelta

from core.models import Category, ReviewState
from core.review_store import ReviewStore
from core.scheduler import schedule
from core.session import (
    QuizSession, QuizMode, QuestionKind, SessionState,
    EmptyPoolError, SessionStateError, build_question, grade
)
from core.trainer import Trainer, SessionFilter
from core.catalog import VOCABULARY, load_catalog
from core.config import REVIEW_STATE_NAMESPACE, KNOWN_RANK

from test_core import MockStorage, make_catalog, NOW


def fixed_clock():
    return NOW


class FirstChoiceRandom(random.Random):
    """Seeded RNG that always picks the first option, so review asks the first kind."""

    def choice(self, seq):
        return seq[0]


def answer_for(question):
    """Expected answer and context for a question, as a learner who knows it would type."""
    if question.kind in (QuestionKind.FLASHCARD_DE_EN, QuestionKind.FLASHCARD_EN_DE):
        return True, None
    if question.kind is QuestionKind.MEANING:
        return question.item.accepted_meanings[0], None
    return question.answer, question.context.get('pronoun')


class TestBuildQuestion(unittest.TestCase):
    """Tests for question construction per kind."""

    def setUp(self):
        self.catalog = make_catalog()
        self.rng = random.Random(7)

    def test_noun_gender(self):
        question = build_question(self.catalog.get('n-apfel'), QuestionKind.NOUN_GENDER, self.rng)
        self.assertEqual(question.prompt, 'Apfel')
        self.assertEqual(question.answer, 'der')
        self.assertEqual(question.choices, ['der', 'die', 'das'])
        self.assertNotIn('answer', question.to_dict())

    def test_noun_plural(self):
        question = build_question(self.catalog.get('n-apfel'), QuestionKind.NOUN_PLURAL, self.rng)
        self.assertEqual(question.answer, 'Äpfel')
        self.assertEqual(question.display_answer, 'die Äpfel')

    def test_conjugation_picks_a_pronoun(self):
        item = self.catalog.get('v-sprechen')
        question = build_question(item, QuestionKind.VERB_CONJUGATION, self.rng)
        pronoun = question.context['pronoun']
        self.assertEqual(question.answer, item.conjugation[pronoun])
        self.assertTrue(question.prompt.startswith(pronoun))

    def test_perfect_uses_item_auxiliary(self):
        item = self.catalog.get('iv-gehen')
        question = build_question(item, QuestionKind.PERFECT, self.rng)
        self.assertIn(question.context['aux'], ('bin', 'bist'))
        self.assertTrue(question.answer.endswith('gegangen'))

    def test_usage_with_item_sentence(self):
        question = build_question(self.catalog.get('sv-anrufen'), QuestionKind.USAGE, self.rng)
        self.assertEqual(question.answer, 'rufe an')
        self.assertIn('Ich ___ dich ___.', question.prompt)

    def test_usage_falls_back_to_ich_form(self):
        item = self.catalog.get('mv-sollen')
        question = build_question(item, QuestionKind.USAGE, self.rng)
        self.assertEqual(question.answer, item.conjugation['ich'])

    def test_prefix(self):
        question = build_question(self.catalog.get('sv-einkaufen'), QuestionKind.PREFIX, self.rng)
        self.assertEqual(question.answer, 'ein')

    def test_missing_data_is_unaskable(self):
        noun = self.catalog.get('n-apfel')
        self.assertIsNone(build_question(noun, QuestionKind.PREFIX, self.rng))
        self.assertIsNone(build_question(noun, QuestionKind.VERB_CONJUGATION, self.rng))
        self.assertIsNone(build_question(self.catalog.get('v-machen'), QuestionKind.PARTIZIP, self.rng))

    def test_flashcard_sides(self):
        item = self.catalog.get('n-haus')
        de_en = build_question(item, QuestionKind.FLASHCARD_DE_EN, self.rng)
        en_de = build_question(item, QuestionKind.FLASHCARD_EN_DE, self.rng)
        self.assertEqual((de_en.front, de_en.back), ('das Haus', 'house'))
        self.assertEqual((en_de.front, en_de.back), ('house', 'das Haus'))


class TestGrade(unittest.TestCase):
    """Tests for grading raw answers."""

    def setUp(self):
        self.catalog = make_catalog()
        self.rng = random.Random(3)

    def question(self, item_id, kind):
        return build_question(self.catalog.get(item_id), kind, self.rng)

    def test_gender_is_case_insensitive(self):
        question = self.question('n-haus', QuestionKind.NOUN_GENDER)
        self.assertEqual(grade(question, ' DAS ')[0], True)
        self.assertEqual(grade(question, 'der')[0], False)

    def test_verb_type(self):
        self.assertTrue(grade(self.question('v-machen', QuestionKind.VERB_TYPE), 'regular')[0])
        self.assertTrue(grade(self.question('iv-essen', QuestionKind.VERB_TYPE), 'irregular')[0])
        self.assertFalse(grade(self.question('v-lesen', QuestionKind.VERB_TYPE), 'regular')[0])

    def test_flashcard_self_grade(self):
        question = self.question('n-haus', QuestionKind.FLASHCARD_DE_EN)
        self.assertTrue(grade(question, True)[0])
        self.assertTrue(grade(question, 'knew')[0])
        self.assertFalse(grade(question, 'wrong')[0])
        self.assertFalse(grade(question, False)[0])

    def test_conjugation_with_explicit_pronoun(self):
        question = self.question('v-lesen', QuestionKind.VERB_CONJUGATION)
        correct, shown = grade(question, 'liest', context='du')
        self.assertTrue(correct)
        self.assertEqual(shown, 'liest')

    def test_meaning_accepts_any_gloss(self):
        question = self.question('mv-moechten', QuestionKind.MEANING)
        self.assertTrue(grade(question, 'would like')[0])
        self.assertFalse(grade(question, 'banana')[0])

    def test_translation(self):
        question = self.question('n-stadt', QuestionKind.TRANSLATION)
        self.assertTrue(grade(question, 'die Stadt')[0])
        self.assertTrue(grade(question, 'stadt')[0])
        self.assertFalse(grade(question, '')[0])

    def test_partizip(self):
        question = self.question('iv-fahren', QuestionKind.PARTIZIP)
        self.assertTrue(grade(question, 'gefahren')[0])


class TestQuizSession(unittest.TestCase):
    """Tests for the session state machine."""

    def setUp(self):
        self.storage = MockStorage()
        self.catalog = make_catalog('nouns')
        self.store = ReviewStore(self.storage, self.catalog)
        self.store.load(now=NOW)
        self.session = QuizSession(self.catalog, self.store, rng=random.Random(1), clock=fixed_clock)

    def pool(self, *ids):
        return [self.store.get(item_id) for item_id in ids]

    def test_starts_idle(self):
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertEqual(self.session.cursor, -1)
        with self.assertRaises(SessionStateError):
            self.session.current_question()

    def test_empty_pool(self):
        with self.assertRaises(EmptyPoolError):
            self.session.start(QuizMode.NOUN_GENDER, [])
        self.assertEqual(self.session.state, SessionState.IDLE)

    def test_correct_gender_schedules_four_hours(self):
        self.session.start(QuizMode.NOUN_GENDER, self.pool('n-apfel'))
        question = self.session.current_question()
        self.assertEqual(question.kind, QuestionKind.NOUN_GENDER)

        result = self.session.submit_answer('der')
        self.assertTrue(result.correct)
        self.assertEqual(result.review_state.repetition_rank, 1)
        self.assertEqual(result.review_state.next_review_at, NOW + timedelta(hours=4))
        self.assertEqual(self.store.get('n-apfel').repetition_rank, 1)
        saved = self.storage.states[REVIEW_STATE_NAMESPACE]['n-apfel']
        self.assertEqual(saved['repetition_rank'], 1)

    def test_wrong_answer_drops_two_ranks(self):
        self.store.put(self.store.get('n-apfel').copy(repetition_rank=3))
        self.session.start(QuizMode.NOUN_GENDER, self.pool('n-apfel'))
        result = self.session.submit_answer('die')
        self.assertFalse(result.correct)
        self.assertEqual(result.correct_answer, 'der Apfel')
        self.assertEqual(result.review_state.repetition_rank, 1)

    def test_submit_does_not_advance(self):
        self.session.start(QuizMode.NOUN_GENDER, self.pool('n-apfel', 'n-haus'))
        before = self.session.current_question()
        self.session.submit_answer('der')
        self.assertIs(self.session.current_question(), before)
        self.assertEqual(self.session.cursor, 0)

    def test_double_submit_rejected(self):
        self.session.start(QuizMode.NOUN_GENDER, self.pool('n-apfel'))
        self.session.submit_answer('der')
        with self.assertRaises(SessionStateError):
            self.session.submit_answer('der')
        self.assertEqual(self.store.get('n-apfel').repetition_rank, 1)

    def test_advance_to_end(self):
        self.session.start(QuizMode.NOUN_PLURAL, self.pool('n-apfel', 'n-haus'))
        self.assertFalse(self.session.advance())
        self.assertTrue(self.session.advance())
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertEqual(self.session.cursor, -1)
        with self.assertRaises(SessionStateError):
            self.session.advance()

    def test_review_kind_fixed_until_advance(self):
        self.session.start(QuizMode.REVIEW, self.pool('n-apfel'))
        first = self.session.current_question()
        for _ in range(5):
            self.assertIs(self.session.current_question(), first)
        self.assertIn(first.kind, (QuestionKind.NOUN_GENDER, QuestionKind.NOUN_PLURAL))

    def test_start_while_active_rejected(self):
        self.session.start(QuizMode.NOUN_GENDER, self.pool('n-apfel'))
        with self.assertRaises(SessionStateError):
            self.session.start(QuizMode.NOUN_GENDER, self.pool('n-haus'))

    def test_seeded_review_is_deterministic(self):
        def run(seed):
            session = QuizSession(self.catalog, self.store, rng=random.Random(seed), clock=fixed_clock)
            session.start(QuizMode.REVIEW, self.store.due_states(NOW))
            asked = []
            while True:
                question = session.current_question()
                asked.append((question.item_id, question.kind))
                if session.advance():
                    return asked
        self.assertEqual(run(11), run(11))

    def test_orphan_slot_is_skipped(self):
        orphan = ReviewState('n-gone', Category.NOUN, 'A1', 0, NOW)
        self.session.start(QuizMode.FLASHCARD_DE_EN, [orphan, self.store.get('n-apfel')])
        asked = []
        while self.session.is_active:
            question = self.session.current_question()
            if question is None:
                break
            asked.append(question.item_id)
            self.session.submit_answer(True)
            self.session.advance()
        self.assertEqual(asked, ['n-apfel'])
        self.assertEqual(self.session.summary().skipped, 1)
        self.assertEqual(self.session.state, SessionState.IDLE)

    def test_mark_known_skips_orphan_slot(self):
        orphan = ReviewState('n-gone', Category.NOUN, 'A1', 0, NOW)
        self.session.start(QuizMode.NOUN_GENDER, [orphan])
        self.assertTrue(self.session.mark_current_known())
        self.assertIsNone(self.store.get('n-gone'))
        self.assertNotIn('n-gone', self.storage.states[REVIEW_STATE_NAMESPACE])
        summary = self.session.summary()
        self.assertEqual((summary.known, summary.skipped), (0, 1))

    def test_mark_known_after_orphan_marks_real_item(self):
        orphan = ReviewState('n-gone', Category.NOUN, 'A1', 0, NOW)
        self.session.start(QuizMode.NOUN_GENDER, [orphan, self.store.get('n-apfel')])
        finished = False
        while not finished:
            finished = self.session.mark_current_known()
        self.assertIsNone(self.store.get('n-gone'))
        self.assertEqual(self.store.get('n-apfel').repetition_rank, KNOWN_RANK)
        self.assertEqual(self.session.summary().known, 1)

    def test_mark_known(self):
        self.session.start(QuizMode.NOUN_GENDER, self.pool('n-apfel', 'n-haus'))
        item_id = self.session.current_question().item_id
        finished = self.session.mark_current_known()
        self.assertFalse(finished)
        state = self.store.get(item_id)
        self.assertEqual(state.repetition_rank, KNOWN_RANK)
        self.assertEqual(state.next_review_at, NOW + timedelta(days=30))
        self.assertEqual(self.session.summary().known, 1)

    def test_end_leaves_states_untouched(self):
        self.session.start(QuizMode.NOUN_GENDER, self.pool('n-apfel'))
        self.session.current_question()
        self.session.end()
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertEqual(self.store.get('n-apfel').repetition_rank, 0)


class TestTrainer(unittest.TestCase):
    """End-to-end tests through the trainer."""

    def setUp(self):
        self.storage = MockStorage()
        self.catalog = make_catalog()
        self.trainer = Trainer(self.catalog, self.storage, rng=random.Random(42), clock=fixed_clock)
        self.trainer.load()

    def defer_all(self):
        for state in self.trainer.store.known_states():
            self.trainer.store.put(schedule(state.copy(repetition_rank=2), True, now=NOW))

    def test_everything_due_after_first_load(self):
        self.assertEqual(self.trainer.due_count(), len(self.catalog))

    def test_empty_review_pool(self):
        self.defer_all()
        self.assertEqual(self.trainer.due_count(), 0)
        with self.assertRaises(EmptyPoolError):
            self.trainer.start_session(QuizMode.REVIEW)
        self.assertIsNone(self.trainer.session)

    def test_empty_pool_keeps_running_session(self):
        self.trainer.start_session(QuizMode.FLASHCARD_DE_EN)
        self.defer_all()
        with self.assertRaises(EmptyPoolError):
            self.trainer.start_session(QuizMode.REVIEW)
        self.assertTrue(self.trainer.session.is_active)
        self.assertEqual(self.trainer.session.mode, QuizMode.FLASHCARD_DE_EN)

    def test_practice_modes_ignore_due_dates(self):
        self.defer_all()
        length = self.trainer.start_session(QuizMode.NOUN_GENDER)
        self.assertEqual(length, len(self.catalog.items(Category.NOUN)))

    def test_mode_restricts_categories(self):
        pool = self.trainer.select_pool(QuizMode.PARTIZIP)
        self.assertTrue(pool)
        self.assertTrue(all(s.category is Category.IRREGULAR_VERB for s in pool))

    def test_filter_by_level_and_category(self):
        session_filter = SessionFilter(level='A2', categories=['nouns'])
        pool = self.trainer.select_pool(QuizMode.FLASHCARD_EN_DE, session_filter)
        self.assertEqual(len(pool), len(self.catalog.items(Category.NOUN, 'A2')))
        self.assertTrue(all(s.level == 'A2' for s in pool))

    def test_flashcard_session_of_three(self):
        catalog = load_catalog({'nouns': VOCABULARY['nouns'][:3]})
        trainer = Trainer(catalog, MockStorage(), rng=random.Random(5), clock=fixed_clock)
        trainer.load()
        self.assertEqual(trainer.start_session(QuizMode.FLASHCARD_DE_EN), 3)

        summary = None
        advances = 0
        while summary is None:
            trainer.current_question()
            trainer.submit_answer(True)
            summary = trainer.advance()
            advances += 1
        self.assertEqual(advances, 3)
        self.assertIsNone(trainer.session)
        self.assertEqual(summary.answered, 3)
        self.assertEqual(summary.correct, 3)
        self.assertIs(trainer.last_summary, summary)
        with self.assertRaises(SessionStateError):
            trainer.current_question()

    def test_review_of_one_noun_with_correct_article(self):
        catalog = load_catalog({'nouns': [VOCABULARY['nouns'][0]]})
        trainer = Trainer(catalog, MockStorage(), rng=FirstChoiceRandom(0), clock=fixed_clock)
        trainer.load()
        self.assertEqual(trainer.start_session(QuizMode.REVIEW), 1)

        question = trainer.current_question()
        self.assertEqual(question.kind, QuestionKind.NOUN_GENDER)
        result = trainer.submit_answer('der')
        self.assertTrue(result.correct)
        self.assertEqual(result.review_state.repetition_rank, 1)
        self.assertEqual(result.review_state.next_review_at, NOW + timedelta(hours=4))
        self.assertIsNotNone(trainer.advance())
        self.assertEqual(trainer.due_count(), 0)

    def test_review_session_answered_correctly(self):
        self.trainer.start_session(QuizMode.REVIEW, SessionFilter(categories=['verbs']))
        total = len(self.catalog.items(Category.VERB))
        summary = None
        while summary is None:
            question = self.trainer.current_question()
            answer, context = answer_for(question)
            result = self.trainer.submit_answer(answer, context)
            self.assertTrue(result.correct, f"{question.item_id} {question.kind}")
            summary = self.trainer.advance()
        self.assertEqual(summary.correct, total)
        self.assertEqual(self.trainer.due_count(), len(self.catalog) - total)

    def test_mark_known_through_trainer(self):
        self.trainer.start_session(QuizMode.NOUN_PLURAL)
        item_id = self.trainer.current_question().item_id
        self.trainer.mark_current_known()
        self.assertEqual(self.trainer.store.get(item_id).repetition_rank, KNOWN_RANK)
        self.assertEqual(self.trainer.due_count(), len(self.catalog) - 1)

    def test_end_session_without_session(self):
        self.assertIsNone(self.trainer.end_session())
        with self.assertRaises(SessionStateError):
            self.trainer.submit_answer('der')

    def test_item_details(self):
        details = self.trainer.item_details('iv-fahren')
        self.assertEqual(details['title'], 'fahren')
        self.assertEqual(details['category'], 'irregularVerbs')
        self.assertEqual(details['review_state']['repetition_rank'], 0)
        self.assertIsNone(self.trainer.item_details('missing'))

    def test_status(self):
        status = self.trainer.status()
        self.assertEqual(status['total_items'], len(self.catalog))
        self.assertFalse(status['session_active'])
        self.trainer.start_session(QuizMode.MEANING)
        status = self.trainer.status()
        self.assertTrue(status['session_active'])
        self.assertEqual(status['session_mode'], 'meaning')

    def test_close_flushes_and_closes_storage(self):
        self.storage.fail_saves = True
        self.trainer.start_session(QuizMode.NOUN_GENDER)
        self.trainer.submit_answer(self.trainer.current_question().answer)
        self.assertTrue(self.trainer.store.dirty)

        self.storage.fail_saves = False
        self.trainer.close()
        self.assertFalse(self.trainer.store.dirty)
        self.assertTrue(self.storage.closed)

    def test_snapshot_failure_is_not_fatal(self):
        def broken():
            raise OSError("read-only")
        self.storage.save_vocabulary_snapshot = lambda snapshot: broken()
        self.assertFalse(self.trainer.snapshot_catalog())

    def test_progress_survives_restart(self):
        self.trainer.start_session(QuizMode.NOUN_GENDER)
        question = self.trainer.current_question()
        self.trainer.submit_answer(question.answer)

        restarted = Trainer(self.catalog, self.storage, rng=random.Random(0), clock=fixed_clock)
        self.assertEqual(restarted.load(), 0)
        self.assertEqual(restarted.store.get(question.item_id).repetition_rank, 1)


if __name__ == '__main__':
    unittest.main()
