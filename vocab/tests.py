"""
Unit tests for the vocabulary application.

Test organization:
- SRS*Tests: Pure function tests for the SM-2 scheduler
- *ModelTests: Django model tests for WordProgress and LearnerProfile
- Repository/Session/Stats tests: persistence and the review session driver
- *ViewTests: JSON API views
- LoadVocabularyCommandTests: the load_vocabulary management command
"""

import json
import math
import os
import tempfile
import zoneinfo
from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO

from django.contrib.auth.models import User
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, Client
from django.urls import reverse
from django.utils import timezone

from . import srs
from .models import Word, Example, WordProgress, ReviewLog, LearnerProfile
from .repository import ReviewStateRepository
from .session import build_review_queue, submit_review, get_or_create_profile
from .stats import dashboard_stats


REVIEW_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


# =============================================================================
# SRS Algorithm Tests
# =============================================================================

class SRSEaseFactorTests(TestCase):
    """Tests for ease factor calculation."""

    def test_perfect_response_increases_ease(self):
        """Quality 5 (perfect) adds 0.1."""
        self.assertAlmostEqual(srs.calculate_ease_factor(2.5, quality=5), 2.6, places=6)

    def test_good_response_maintains_ease(self):
        """Quality 4 (good) is neutral."""
        self.assertEqual(srs.calculate_ease_factor(2.5, quality=4), 2.5)

    def test_hard_response_decreases_ease(self):
        """Quality 3 (hard but correct) slightly decreases ease."""
        self.assertAlmostEqual(srs.calculate_ease_factor(2.5, quality=3), 2.36, places=6)

    def test_wrong_responses_decrease_ease(self):
        """Qualities 0-2 decrease ease by the formula amounts."""
        expected = {0: 1.7, 1: 1.96, 2: 2.18}
        for quality, ease in expected.items():
            self.assertAlmostEqual(
                srs.calculate_ease_factor(2.5, quality=quality), ease, places=6,
                msg=f"Quality {quality}"
            )

    def test_ease_never_below_minimum(self):
        """Ease factor is floored at exactly 1.3."""
        ease = srs.DEFAULT_EASE_FACTOR
        for _ in range(10):
            ease = srs.calculate_ease_factor(ease, quality=0)
        self.assertEqual(ease, srs.MIN_EASE_FACTOR)


class SRSIntervalTests(TestCase):
    """Tests for interval calculation."""

    def test_first_successful_review(self):
        interval, reps = srs.calculate_interval(
            current_interval=0, repetitions=0, ease_factor=2.5, quality=4
        )
        self.assertEqual(interval, srs.FIRST_INTERVAL)
        self.assertEqual(reps, 1)

    def test_second_successful_review(self):
        interval, reps = srs.calculate_interval(
            current_interval=1, repetitions=1, ease_factor=2.5, quality=4
        )
        self.assertEqual(interval, srs.SECOND_INTERVAL)
        self.assertEqual(reps, 2)

    def test_subsequent_review_uses_ease_factor(self):
        interval, reps = srs.calculate_interval(
            current_interval=6, repetitions=2, ease_factor=2.5, quality=4
        )
        self.assertEqual(interval, 15)
        self.assertEqual(reps, 3)

    def test_half_interval_rounds_up(self):
        """5 * 2.5 = 12.5 rounds to 13, not to the even 12."""
        interval, _ = srs.calculate_interval(
            current_interval=5, repetitions=2, ease_factor=2.5, quality=5
        )
        self.assertEqual(interval, 13)

    def test_fractional_interval_rounds_to_nearest(self):
        interval, _ = srs.calculate_interval(
            current_interval=6, repetitions=2, ease_factor=2.6, quality=5
        )
        self.assertEqual(interval, 16)  # 15.6
        interval, _ = srs.calculate_interval(
            current_interval=10, repetitions=3, ease_factor=1.3, quality=3
        )
        self.assertEqual(interval, 13)

    def test_failed_review_resets_progress(self):
        for quality in [0, 1, 2]:
            interval, reps = srs.calculate_interval(
                current_interval=30, repetitions=5, ease_factor=2.5, quality=quality
            )
            self.assertEqual(interval, 1, f"Quality {quality} should reset interval")
            self.assertEqual(reps, 0, f"Quality {quality} should reset repetitions")

    def test_boundary_quality_3_is_success(self):
        interval, reps = srs.calculate_interval(
            current_interval=0, repetitions=0, ease_factor=2.5, quality=3
        )
        self.assertEqual(reps, 1)

    def test_interval_never_below_one(self):
        """A zero interval with a review streak still schedules a day out."""
        interval, reps = srs.calculate_interval(
            current_interval=0, repetitions=2, ease_factor=2.5, quality=4
        )
        self.assertEqual(interval, 1)
        self.assertEqual(reps, 3)


class SRSScheduleTests(TestCase):
    """Tests for the schedule entry point."""

    def test_absent_state_is_treated_as_new(self):
        state = srs.schedule(None, quality=4, item_id='w1', now=REVIEW_TIME)
        self.assertEqual(state.item_id, 'w1')
        self.assertEqual(state.interval, 1)
        self.assertEqual(state.repetitions, 1)
        self.assertEqual(state.ease_factor, 2.5)

    def test_absent_state_matches_explicit_default(self):
        for quality in range(6):
            self.assertEqual(
                srs.schedule(None, quality, item_id=7, now=REVIEW_TIME),
                srs.schedule(srs.ReviewState.new(7), quality, now=REVIEW_TIME),
            )

    def test_default_state(self):
        state = srs.ReviewState.new('w1')
        self.assertEqual(state.ease_factor, 2.5)
        self.assertEqual(state.interval, 0)
        self.assertEqual(state.repetitions, 0)
        self.assertIsNone(state.next_review_at)

    def test_item_id_is_carried_forward(self):
        previous = srs.ReviewState('word-42', ease_factor=2.0, interval=6, repetitions=2)
        state = srs.schedule(previous, quality=4, item_id='ignored', now=REVIEW_TIME)
        self.assertEqual(state.item_id, 'word-42')

    def test_third_success_fixed_sequence(self):
        previous = srs.ReviewState('w', ease_factor=2.5, interval=6, repetitions=2)
        state = srs.schedule(previous, quality=4, now=REVIEW_TIME)
        self.assertEqual(state.ease_factor, 2.5)
        self.assertEqual(state.interval, 15)
        self.assertEqual(state.repetitions, 3)

    def test_growth_uses_ease_before_update(self):
        """Quality 5 grows by the old ease (2.5), then raises ease to 2.6."""
        previous = srs.ReviewState('w', ease_factor=2.5, interval=6, repetitions=2)
        state = srs.schedule(previous, quality=5, now=REVIEW_TIME)
        self.assertEqual(state.interval, 15)
        self.assertAlmostEqual(state.ease_factor, 2.6, places=6)

    def test_lapse_resets_but_keeps_decayed_ease(self):
        previous = srs.ReviewState('w', ease_factor=2.5, interval=40, repetitions=4)
        for quality in [0, 1, 2]:
            state = srs.schedule(previous, quality, now=REVIEW_TIME)
            self.assertEqual(state.repetitions, 0)
            self.assertEqual(state.interval, 1)
            self.assertLess(state.ease_factor, 2.5)
            self.assertEqual(state.band, srs.ReviewBand.LAPSED)

    def test_ease_never_below_minimum_for_any_quality(self):
        for ease in [1.3, 1.4, 1.9, 2.5, 3.0]:
            for quality in range(6):
                previous = srs.ReviewState('w', ease_factor=ease, interval=10, repetitions=3)
                state = srs.schedule(previous, quality, now=REVIEW_TIME)
                self.assertGreaterEqual(state.ease_factor, srs.MIN_EASE_FACTOR)
                self.assertGreaterEqual(state.interval, 1)

    def test_learning_progression(self):
        """New word rated [4, 4, 4, 2]."""
        state = None
        now = REVIEW_TIME
        intervals, repetitions, eases = [], [], []
        for quality in [4, 4, 4, 2]:
            state = srs.schedule(state, quality, item_id='w', now=now)
            intervals.append(state.interval)
            repetitions.append(state.repetitions)
            eases.append(state.ease_factor)
            now = state.next_review_at

        self.assertEqual(intervals, [1, 6, 15, 1])
        self.assertEqual(repetitions, [1, 2, 3, 0])
        self.assertEqual(eases[:3], [2.5, 2.5, 2.5])
        self.assertAlmostEqual(eases[3], 2.18, places=6)

    def test_deterministic(self):
        previous = srs.ReviewState('w', ease_factor=2.2, interval=9, repetitions=3)
        first = srs.schedule(previous, quality=3, now=REVIEW_TIME)
        second = srs.schedule(previous, quality=3, now=REVIEW_TIME)
        self.assertEqual(first, second)

    def test_not_idempotent_on_own_output(self):
        once = srs.schedule(None, quality=4, item_id='w', now=REVIEW_TIME)
        twice = srs.schedule(once, quality=4, now=REVIEW_TIME)
        self.assertNotEqual(once, twice)
        self.assertEqual(twice.interval, 6)

    def test_previous_state_is_not_modified(self):
        previous = srs.ReviewState('w', ease_factor=2.5, interval=6, repetitions=2)
        srs.schedule(previous, quality=0, now=REVIEW_TIME)
        self.assertEqual(previous, srs.ReviewState('w', ease_factor=2.5, interval=6, repetitions=2))

    def test_next_review_is_interval_days_later(self):
        previous = srs.ReviewState('w', ease_factor=2.5, interval=6, repetitions=2)
        state = srs.schedule(previous, quality=4, now=REVIEW_TIME)
        self.assertEqual(state.next_review_at, REVIEW_TIME + timedelta(days=15))

    def test_next_review_ignores_dst(self):
        """Days are fixed 24h spans even across a daylight saving change."""
        new_york = zoneinfo.ZoneInfo('America/New_York')
        now = datetime(2025, 3, 8, 12, 0, tzinfo=new_york)  # DST starts 2025-03-09
        state = srs.schedule(None, quality=4, item_id='w', now=now)
        self.assertEqual(state.next_review_at.timestamp() - now.timestamp(), 86400)

    def test_naive_now_is_used_as_given(self):
        now = datetime(2025, 1, 31, 8, 0)
        state = srs.schedule(None, quality=4, item_id='w', now=now)
        self.assertEqual(state.next_review_at, datetime(2025, 2, 1, 8, 0))

    def test_defaults_to_current_time(self):
        before = datetime.now(dt_timezone.utc)
        state = srs.schedule(None, quality=4, item_id='w')
        after = datetime.now(dt_timezone.utc)
        self.assertGreaterEqual(state.next_review_at, before + timedelta(days=1))
        self.assertLessEqual(state.next_review_at, after + timedelta(days=1))


class SRSValidationTests(TestCase):
    """Tests for input validation."""

    def test_quality_out_of_range(self):
        for quality in [-1, 6, 100]:
            with self.assertRaises(srs.InvalidInput):
                srs.schedule(None, quality)

    def test_quality_must_be_integer(self):
        for quality in [4.0, '4', None, True]:
            with self.assertRaises(srs.InvalidInput):
                srs.schedule(None, quality)

    def test_invalid_input_is_value_error(self):
        with self.assertRaises(ValueError):
            srs.schedule(None, 7)

    def test_rejects_non_finite_ease(self):
        for ease in [math.nan, math.inf, -math.inf]:
            with self.assertRaises(srs.InvalidInput):
                srs.schedule(srs.ReviewState('w', ease_factor=ease), 4)

    def test_rejects_negative_fields(self):
        bad_states = [
            srs.ReviewState('w', ease_factor=-1.0),
            srs.ReviewState('w', interval=-1),
            srs.ReviewState('w', repetitions=-2),
        ]
        for state in bad_states:
            with self.assertRaises(srs.InvalidInput):
                srs.schedule(state, 4)

    def test_rejects_fractional_counts(self):
        with self.assertRaises(srs.InvalidInput):
            srs.schedule(srs.ReviewState('w', interval=1.5, repetitions=2), 4)
        with self.assertRaises(srs.InvalidInput):
            srs.schedule(srs.ReviewState('w', repetitions=1.0), 4)


class SRSRatingTests(TestCase):
    """Tests for flashcard button mapping."""

    def test_button_qualities(self):
        self.assertEqual(srs.rating_to_quality('again'), 0)
        self.assertEqual(srs.rating_to_quality('hard'), 3)
        self.assertEqual(srs.rating_to_quality('good'), 4)
        self.assertEqual(srs.rating_to_quality('easy'), 5)

    def test_case_insensitive(self):
        self.assertEqual(srs.rating_to_quality(' Easy '), 5)

    def test_unknown_rating(self):
        with self.assertRaises(srs.InvalidInput):
            srs.rating_to_quality('perfect')


class SRSDueTests(TestCase):
    """Tests for due checks and bands."""

    def test_due_when_now_reaches_next_review(self):
        state = srs.ReviewState('w', interval=1, repetitions=1, next_review_at=REVIEW_TIME)
        self.assertTrue(srs.is_due(state, REVIEW_TIME))
        self.assertTrue(srs.is_due(state, REVIEW_TIME + timedelta(seconds=1)))
        self.assertFalse(srs.is_due(state, REVIEW_TIME - timedelta(seconds=1)))

    def test_unscheduled_state_is_not_due(self):
        self.assertFalse(srs.is_due(srs.ReviewState.new('w'), REVIEW_TIME))

    def test_get_items_due_sorted_oldest_first(self):
        late = srs.ReviewState('late', next_review_at=REVIEW_TIME - timedelta(hours=1))
        early = srs.ReviewState('early', next_review_at=REVIEW_TIME - timedelta(days=2))
        future = srs.ReviewState('future', next_review_at=REVIEW_TIME + timedelta(days=1))
        new = srs.ReviewState.new('new')
        due = srs.get_items_due([late, future, new, early], now=REVIEW_TIME)
        self.assertEqual([s.item_id for s in due], ['early', 'late'])

    def test_bands(self):
        self.assertEqual(srs.ReviewState('w').band, srs.ReviewBand.NEW)
        self.assertEqual(srs.ReviewState('w', interval=1, repetitions=1).band, srs.ReviewBand.LEARNING)
        self.assertEqual(srs.ReviewState('w', interval=6, repetitions=2).band, srs.ReviewBand.REVIEWING)
        self.assertEqual(srs.ReviewState('w', interval=1, repetitions=0).band, srs.ReviewBand.LAPSED)


# =============================================================================
# Model Tests
# =============================================================================

def make_word(text='house', **kwargs):
    return Word.objects.create(text=text, translation=kwargs.pop('translation', 'ev'), **kwargs)


class WordProgressModelTests(TestCase):
    """Tests for the WordProgress model."""

    def setUp(self):
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        self.word = make_word()
        self.progress = WordProgress.objects.create(user=self.user, word=self.word)

    def test_defaults(self):
        self.assertEqual(self.progress.ease_factor, 2.5)
        self.assertEqual(self.progress.interval, 0)
        self.assertEqual(self.progress.repetitions, 0)
        self.assertEqual(self.progress.band, srs.ReviewBand.NEW)

    def test_to_state(self):
        state = self.progress.to_state()
        self.assertEqual(state.item_id, self.word.pk)
        self.assertEqual(state.next_review_at, self.progress.next_review)

    def test_apply_state(self):
        self.progress.apply_state(srs.ReviewState(
            self.word.pk, ease_factor=2.36, interval=6, repetitions=2, next_review_at=REVIEW_TIME
        ))
        self.progress.save()
        self.progress.refresh_from_db()
        self.assertEqual(self.progress.interval, 6)
        self.assertEqual(self.progress.repetitions, 2)
        self.assertAlmostEqual(self.progress.ease_factor, 2.36)
        self.assertEqual(self.progress.next_review, REVIEW_TIME)

    def test_is_due(self):
        self.progress.next_review = timezone.now() - timedelta(hours=1)
        self.assertTrue(self.progress.is_due())
        self.progress.next_review = timezone.now() + timedelta(hours=1)
        self.assertFalse(self.progress.is_due())

    def test_str(self):
        self.assertEqual(str(self.progress), 'house for testuser')


class LearnerProfileModelTests(TestCase):
    """Tests for streak tracking."""

    def setUp(self):
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        self.profile = get_or_create_profile(self.user)
        self.today = timezone.localdate()

    def test_defaults_from_settings(self):
        self.assertEqual(self.profile.new_words_per_session, 10)
        self.assertEqual(self.profile.max_reviews_per_session, 0)

    def test_first_study_starts_streak(self):
        self.profile.update_streak(self.today)
        self.assertEqual(self.profile.current_streak, 1)
        self.assertEqual(self.profile.last_study_date, self.today)

    def test_same_day_no_change(self):
        self.profile.update_streak(self.today)
        self.profile.update_streak(self.today)
        self.assertEqual(self.profile.current_streak, 1)

    def test_consecutive_days_extend_streak(self):
        self.profile.update_streak(self.today - timedelta(days=2))
        self.profile.update_streak(self.today - timedelta(days=1))
        self.profile.update_streak(self.today)
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.current_streak, 3)
        self.assertEqual(self.profile.longest_streak, 3)

    def test_gap_restarts_streak(self):
        self.profile.update_streak(self.today - timedelta(days=5))
        self.profile.update_streak(self.today - timedelta(days=4))
        self.profile.update_streak(self.today)
        self.assertEqual(self.profile.current_streak, 1)
        self.assertEqual(self.profile.longest_streak, 2)


# =============================================================================
# Repository, Session and Stats Tests
# =============================================================================

class ReviewStateRepositoryTests(TestCase):
    """Tests for ReviewStateRepository."""

    def setUp(self):
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        self.other = User.objects.create_user(username='other', password='testpass123')
        self.word = make_word('house')
        self.repository = ReviewStateRepository(self.user)

    def test_get_unseen_word_returns_none(self):
        self.assertIsNone(self.repository.get(self.word))

    def test_save_then_get(self):
        state = srs.schedule(None, 4, item_id=self.word.pk, now=REVIEW_TIME)
        self.repository.save(self.word, state, reviewed_at=REVIEW_TIME)
        self.assertEqual(self.repository.get(self.word), state)

    def test_last_writer_wins(self):
        first = srs.schedule(None, 4, item_id=self.word.pk, now=REVIEW_TIME)
        second = srs.schedule(None, 0, item_id=self.word.pk, now=REVIEW_TIME + timedelta(hours=1))
        self.repository.save(self.word, first)
        progress = self.repository.save(self.word, second)
        self.assertEqual(WordProgress.objects.filter(user=self.user, word=self.word).count(), 1)
        self.assertEqual(progress.repetitions, 0)
        self.assertEqual(self.repository.get(self.word), second)

    def test_states_are_per_user(self):
        self.repository.save(self.word, srs.schedule(None, 4, item_id=self.word.pk))
        self.assertIsNone(ReviewStateRepository(self.other).get(self.word))

    def test_due_and_unseen(self):
        due_word = make_word('cat')
        later_word = make_word('dog')
        make_word('tree')
        now = timezone.now()
        self.repository.save(due_word, srs.ReviewState(due_word.pk, interval=1, repetitions=1,
                                                       next_review_at=now - timedelta(hours=1)))
        self.repository.save(later_word, srs.ReviewState(later_word.pk, interval=1, repetitions=1,
                                                         next_review_at=now + timedelta(days=1)))

        self.assertEqual([p.word for p in self.repository.due(now)], [due_word])
        self.assertEqual(
            sorted(w.text for w in self.repository.unseen_words()), ['house', 'tree']
        )


class ReviewSessionTests(TestCase):
    """Tests for the review session driver."""

    def setUp(self):
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        self.words = [make_word(text) for text in ['apple', 'bread', 'cheese', 'dough']]

    def test_submit_review_creates_progress_and_log(self):
        word = self.words[0]
        state, log = submit_review(self.user, word, 4, now=REVIEW_TIME)

        self.assertEqual(state.interval, 1)
        self.assertEqual(state.repetitions, 1)
        self.assertEqual(state.next_review_at, REVIEW_TIME + timedelta(days=1))
        progress = WordProgress.objects.get(user=self.user, word=word)
        self.assertEqual(progress.last_reviewed, REVIEW_TIME)
        self.assertIsInstance(log, ReviewLog)
        self.assertEqual(log.progress, progress)
        self.assertEqual(log.ease_factor_before, 2.5)
        self.assertEqual(log.interval_before, 0)
        self.assertEqual(log.interval_after, 1)

    def test_learning_progression_is_persisted(self):
        word = self.words[0]
        now = REVIEW_TIME
        intervals = []
        for quality in [4, 4, 4, 2]:
            state, _ = submit_review(self.user, word, quality, now=now)
            intervals.append(state.interval)
            now = state.next_review_at

        progress = WordProgress.objects.get(user=self.user, word=word)
        self.assertEqual(intervals, [1, 6, 15, 1])
        self.assertEqual(progress.repetitions, 0)
        self.assertAlmostEqual(progress.ease_factor, 2.18)
        self.assertEqual(progress.review_logs.count(), 4)

    def test_invalid_quality_writes_nothing(self):
        with self.assertRaises(srs.InvalidInput):
            submit_review(self.user, self.words[0], 9, now=REVIEW_TIME)
        self.assertFalse(WordProgress.objects.exists())
        self.assertFalse(ReviewLog.objects.exists())

    def test_words_learned_counts_first_success_only(self):
        word = self.words[0]
        submit_review(self.user, word, 2, now=REVIEW_TIME)
        self.assertEqual(get_or_create_profile(self.user).words_learned, 0)
        submit_review(self.user, word, 4, now=REVIEW_TIME)
        submit_review(self.user, word, 5, now=REVIEW_TIME)
        self.assertEqual(get_or_create_profile(self.user).words_learned, 1)

    def test_review_updates_streak(self):
        submit_review(self.user, self.words[0], 4, now=REVIEW_TIME)
        profile = get_or_create_profile(self.user)
        self.assertEqual(profile.current_streak, 1)
        self.assertEqual(profile.last_study_date, timezone.localdate(REVIEW_TIME))

    def test_queue_lists_due_words_before_new(self):
        now = timezone.now()
        submit_review(self.user, self.words[1], 4, now=now - timedelta(days=2))

        queue = build_review_queue(self.user, now=now)
        self.assertEqual(queue[0].word, self.words[1])
        self.assertFalse(queue[0].is_new)
        self.assertEqual(queue[0].state.repetitions, 1)
        self.assertEqual([item.word.text for item in queue[1:]], ['apple', 'cheese', 'dough'])
        self.assertTrue(all(item.is_new for item in queue[1:]))

    def test_queue_excludes_words_not_yet_due(self):
        now = timezone.now()
        submit_review(self.user, self.words[0], 4, now=now)
        queue = build_review_queue(self.user, now=now)
        self.assertNotIn(self.words[0], [item.word for item in queue])

    def test_queue_respects_session_limits(self):
        now = timezone.now()
        for word in self.words[:3]:
            submit_review(self.user, word, 4, now=now - timedelta(days=3))
        profile = get_or_create_profile(self.user)
        profile.max_reviews_per_session = 2
        profile.new_words_per_session = 0
        profile.save()

        queue = build_review_queue(self.user, now=now)
        self.assertEqual(len(queue), 2)
        self.assertFalse(any(item.is_new for item in queue))


class DashboardStatsTests(TestCase):
    """Tests for dashboard statistics."""

    def setUp(self):
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        self.words = [make_word(text) for text in ['apple', 'bread', 'cheese']]

    def test_empty_stats(self):
        stats = dashboard_stats(self.user)
        self.assertEqual(stats['total_words'], 3)
        self.assertEqual(stats['new'], 3)
        self.assertEqual(stats['due_now'], 0)
        self.assertEqual(stats['retention_rate'], 0)
        self.assertEqual(stats['avg_ease'], 2.5)
        self.assertEqual(stats['streak'], 0)
        self.assertEqual(len(stats['forecast']), 7)
        self.assertEqual(len(stats['words_added']), 7)
        self.assertEqual(stats['words_added'][-1]['words'], 3)

    def test_stats_after_reviews(self):
        now = timezone.now()
        submit_review(self.user, self.words[0], 4, now=now - timedelta(days=1))
        submit_review(self.user, self.words[1], 0, now=now)

        stats = dashboard_stats(self.user, now=now)
        self.assertEqual(stats['due_now'], 1)
        self.assertEqual(stats['new'], 1)
        self.assertEqual(stats['words_learned'], 1)
        self.assertEqual(stats['total_reviews'], 2)
        self.assertEqual(stats['retention_rate'], 50.0)
        self.assertEqual(stats['struggling'], 1)  # ease 1.7 after blackout
        self.assertEqual(stats['bands']['learning'], 1)
        self.assertEqual(stats['bands']['lapsed'], 1)
        self.assertEqual(stats['bands']['new'], 1)
        self.assertEqual(stats['streak'], 2)  # studied yesterday and today
        self.assertEqual(stats['forecast'][0]['count'], 1)

    def test_forecast_today_includes_words_due_later_today(self):
        now = datetime(2025, 1, 1, 8, 0, tzinfo=dt_timezone.utc)
        # Reviewed yesterday at noon, so due today at noon
        submit_review(self.user, self.words[0], 4, now=now - timedelta(hours=20))
        # Due tomorrow morning
        submit_review(self.user, self.words[1], 4, now=now)

        stats = dashboard_stats(self.user, now=now)
        self.assertEqual(stats['due_now'], 0)
        self.assertEqual(stats['forecast'][0]['count'], 1)
        self.assertEqual(stats['forecast'][1]['count'], 1)
        self.assertEqual(sum(day['count'] for day in stats['forecast']), 2)


# =============================================================================
# View Tests
# =============================================================================

class ReviewViewTests(TestCase):
    """Tests for review API views."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        self.word = make_word('house', pronunciation='/haʊs/')
        Example.objects.create(word=self.word, sentence='This is my house.', translation='Bu benim evim.')
        self.client.login(username='testuser', password='testpass123')

    def post_review(self, pk, payload):
        return self.client.post(
            reverse('review_word', kwargs={'pk': pk}),
            data=payload if isinstance(payload, str) else json.dumps(payload),
            content_type='application/json'
        )

    def test_queue_requires_login(self):
        self.client.logout()
        response = self.client.get(reverse('review_queue'))
        self.assertEqual(response.status_code, 302)

    def test_queue_lists_new_words(self):
        response = self.client.get(reverse('review_queue'))
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['total'], 1)
        self.assertEqual(data['new'], 1)
        self.assertEqual(data['words'][0]['text'], 'house')
        self.assertTrue(data['words'][0]['is_new'])
        self.assertEqual(data['words'][0]['examples'][0]['sentence'], 'This is my house.')

    def test_review_with_quality(self):
        response = self.post_review(self.word.pk, {'quality': 4})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['interval'], 1)
        self.assertEqual(data['repetitions'], 1)
        self.assertEqual(data['band'], 'learning')
        self.assertIn('next_review', data)

    def test_review_with_rating(self):
        response = self.post_review(self.word.pk, {'rating': 'easy'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['quality'], 5)
        self.assertEqual(response.json()['ease_factor'], 2.6)

    def test_review_invalid_quality(self):
        response = self.post_review(self.word.pk, {'quality': 10})
        self.assertEqual(response.status_code, 400)
        self.assertIn('between 0 and 5', response.json()['error'])
        self.assertFalse(WordProgress.objects.exists())

    def test_review_unknown_rating(self):
        response = self.post_review(self.word.pk, {'rating': 'perfect'})
        self.assertEqual(response.status_code, 400)

    def test_review_missing_quality(self):
        response = self.post_review(self.word.pk, {})
        self.assertEqual(response.status_code, 400)

    def test_review_invalid_json(self):
        response = self.post_review(self.word.pk, 'not json')
        self.assertEqual(response.status_code, 400)

    def test_review_unknown_word(self):
        response = self.post_review(self.word.pk + 100, {'quality': 4})
        self.assertEqual(response.status_code, 404)

    def test_review_requires_post(self):
        response = self.client.get(reverse('review_word', kwargs={'pk': self.word.pk}))
        self.assertEqual(response.status_code, 405)


class DashboardViewTests(TestCase):
    """Tests for the dashboard view."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='testuser', password='testpass123')

    def test_dashboard_requires_login(self):
        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, 302)

    def test_dashboard_returns_stats(self):
        make_word('house')
        self.client.login(username='testuser', password='testpass123')
        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['total_words'], 1)
        self.assertIn('forecast', data)
        self.assertIn('bands', data)


class VocabularyViewTests(TestCase):
    """Tests for vocabulary list, export and import."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        self.client.login(username='testuser', password='testpass123')
        make_word('house', translation='ev', difficulty='A1')
        make_word('run', translation='koşmak', part_of_speech='verb', difficulty='A2',
                  past='ran', past_participle='run')
        make_word('ubiquitous', translation='her yerde olan', part_of_speech='adjective', difficulty='C1')

    def test_list_all(self):
        data = self.client.get(reverse('word_list')).json()
        self.assertEqual(data['count'], 3)

    def test_filter_by_search_text_or_translation(self):
        data = self.client.get(reverse('word_list'), {'q': 'HOU'}).json()
        self.assertEqual([w['text'] for w in data['words']], ['house'])
        data = self.client.get(reverse('word_list'), {'q': 'koş'}).json()
        self.assertEqual([w['text'] for w in data['words']], ['run'])

    def test_filter_by_level_and_pos(self):
        data = self.client.get(reverse('word_list'), {'level': 'C1'}).json()
        self.assertEqual([w['text'] for w in data['words']], ['ubiquitous'])
        data = self.client.get(reverse('word_list'), {'pos': 'verb', 'level': 'All'}).json()
        self.assertEqual([w['text'] for w in data['words']], ['run'])
        self.assertEqual(data['words'][0]['forms']['past'], 'ran')

    def test_list_includes_progress(self):
        word = Word.objects.get(text='house')
        submit_review(self.user, word, 4)
        data = self.client.get(reverse('word_list'), {'q': 'house'}).json()
        self.assertEqual(data['words'][0]['progress']['band'], 'learning')

    def test_export(self):
        response = self.client.get(reverse('word_export'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment', response['Content-Disposition'])
        data = json.loads(response.content)
        self.assertEqual(len(data['words']), 3)

    def test_import_body(self):
        payload = {'words': [
            {'text': 'book', 'part_of_speech': 'noun', 'translation': 'kitap',
             'examples': [{'sentence': 'I read a book.', 'translation': 'Bir kitap okudum.'}]},
            {'text': 'house', 'part_of_speech': 'noun'},
            {'definition': 'no text'},
        ]}
        response = self.client.post(
            reverse('word_import'), data=json.dumps(payload), content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['created'], 1)
        self.assertEqual(response.json()['skipped'], 2)
        self.assertEqual(Word.objects.get(text='book').examples.count(), 1)

    def test_import_rejects_malformed(self):
        response = self.client.post(
            reverse('word_import'), data='{"name": "x"}', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            reverse('word_import'), data='nope', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_import_null_optional_fields(self):
        """Null optional fields become empty strings instead of failing the import."""
        payload = {'words': [
            {'text': 'ok'},
            {'text': 'bad', 'translation': None, 'pronunciation': None, 'definition': None,
             'forms': None, 'examples': [{'sentence': 'A bad day.', 'translation': None}]},
            {'text': 'worse', 'part_of_speech': 'adjective', 'examples': 5},
        ]}
        response = self.client.post(
            reverse('word_import'), data=json.dumps(payload), content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['created'], 3)
        bad = Word.objects.get(text='bad')
        self.assertEqual(bad.translation, '')
        self.assertEqual(bad.pronunciation, '')
        self.assertEqual(bad.examples.get().translation, '')
        self.assertTrue(Word.objects.filter(text='ok').exists())
        self.assertEqual(Word.objects.get(text='worse').examples.count(), 0)

    def test_create_word(self):
        payload = {
            'text': 'write', 'part_of_speech': 'verb', 'translation': 'yazmak', 'difficulty': 'A2',
            'forms': {'past': 'wrote', 'past_participle': 'written'},
            'examples': [{'sentence': 'Write your name.', 'translation': 'Adını yaz.'}],
        }
        response = self.client.post(
            reverse('word_list'), data=json.dumps(payload), content_type='application/json'
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['text'], 'write')
        self.assertEqual(data['forms']['past_participle'], 'written')
        self.assertEqual(data['examples'][0]['sentence'], 'Write your name.')
        self.assertTrue(Word.objects.filter(text='write', part_of_speech='verb').exists())

    def test_create_word_with_null_fields(self):
        response = self.client.post(
            reverse('word_list'), data=json.dumps({'text': 'pen', 'translation': None}),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Word.objects.get(text='pen').translation, '')

    def test_create_word_rejects_duplicate_and_missing_text(self):
        response = self.client.post(
            reverse('word_list'), data=json.dumps({'text': 'house'}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('already exists', response.json()['error'])
        response = self.client.post(
            reverse('word_list'), data=json.dumps({'translation': 'x'}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            reverse('word_list'), data='[1, 2]', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Word.objects.count(), 3)


class HealthCheckTests(TestCase):

    def test_health_check(self):
        response = Client().get(reverse('health_check'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'healthy')


# =============================================================================
# Management Command Tests
# =============================================================================

class LoadVocabularyCommandTests(TestCase):
    """Tests for the load_vocabulary command."""

    def setUp(self):
        self.document = {'words': [
            {'text': 'water', 'part_of_speech': 'noun', 'difficulty': 'A1', 'translation': 'su'},
            {'text': 'go', 'part_of_speech': 'verb', 'difficulty': 'Z9',
             'forms': {'past': 'went', 'past_participle': 'gone'}},
        ]}
        handle, self.path = tempfile.mkstemp(suffix='.json')
        with os.fdopen(handle, 'w', encoding='utf-8') as f:
            json.dump(self.document, f)

    def tearDown(self):
        os.remove(self.path)

    def test_loads_words(self):
        out = StringIO()
        call_command('load_vocabulary', self.path, stdout=out)
        self.assertIn('Imported 2 word(s)', out.getvalue())
        go = Word.objects.get(text='go')
        self.assertEqual(go.past_participle, 'gone')
        self.assertEqual(go.difficulty, 'A1')  # unknown level falls back

    def test_skips_existing(self):
        call_command('load_vocabulary', self.path, stdout=StringIO())
        out = StringIO()
        call_command('load_vocabulary', self.path, stdout=out)
        self.assertIn('Imported 0 word(s), skipped 2', out.getvalue())
        self.assertEqual(Word.objects.count(), 2)

    def test_dry_run_writes_nothing(self):
        out = StringIO()
        call_command('load_vocabulary', self.path, '--dry-run', stdout=out)
        self.assertIn('[DRY RUN] Would import 2 word(s)', out.getvalue())
        self.assertEqual(Word.objects.count(), 0)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('load_vocabulary', self.path + '.missing', stdout=StringIO())

    def test_null_optional_fields_are_loaded_as_empty(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'words': [
                {'text': 'ok'},
                {'text': 'bad', 'translation': None, 'definition': None, 'examples': 5},
            ]}, f)
        out = StringIO()
        call_command('load_vocabulary', self.path, stdout=out)
        self.assertIn('Imported 2 word(s), skipped 0', out.getvalue())
        self.assertEqual(Word.objects.get(text='bad').translation, '')
        self.assertTrue(Word.objects.filter(text='ok').exists())
