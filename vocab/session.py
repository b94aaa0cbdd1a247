"""
Review session driver.

Selects the words a learner should review, feeds each rating through the SM-2
scheduler in ``vocab.srs`` and persists the result.
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from . import srs
from .models import LearnerProfile, ReviewLog
from .repository import ReviewStateRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueItem:
    """A word waiting in a review session."""
    word: object
    state: srs.ReviewState | None = None

    @property
    def is_new(self):
        return self.state is None


def get_or_create_profile(user):
    """Get or create the learner profile."""
    profile, _ = LearnerProfile.objects.get_or_create(user=user)
    return profile


def build_review_queue(user, now=None):
    """
    Build the list of words for a review session.

    All due words come first (capped by max_reviews_per_session when it is
    set), followed by up to new_words_per_session words never reviewed.
    """
    if now is None:
        now = timezone.now()
    profile = get_or_create_profile(user)
    repository = ReviewStateRepository(user)

    due = repository.due(now)
    if profile.max_reviews_per_session > 0:
        due = due[:profile.max_reviews_per_session]
    due_items = [QueueItem(word=progress.word, state=progress.to_state()) for progress in due]

    new_words = list(repository.unseen_words()[:max(0, profile.new_words_per_session)])
    new_items = [QueueItem(word=word) for word in new_words]

    logger.debug(
        "Review queue for %s: %d due, %d new",
        user.username, len(due_items), len(new_items)
    )
    return due_items + new_items


@transaction.atomic
def submit_review(user, word, quality, now=None):
    """
    Record a review of a word and reschedule it.

    Args:
        user: The learner
        word: The reviewed Word
        quality: Quality of recall (0-5)
        now: Time of the review (defaults to now)

    Returns:
        Tuple of (new ReviewState, ReviewLog)

    Raises:
        srs.InvalidInput: quality out of range or corrupt stored state
    """
    if now is None:
        now = timezone.now()
    repository = ReviewStateRepository(user)

    previous = repository.get(word)
    state = srs.schedule(previous, quality, item_id=word.pk, now=now)
    before = previous or srs.ReviewState.new(word.pk)

    progress = repository.save(word, state, reviewed_at=now)
    first_success = (
        quality >= srs.PASSING_QUALITY
        and not progress.review_logs.filter(quality__gte=srs.PASSING_QUALITY).exists()
    )
    log = ReviewLog.objects.create(
        progress=progress,
        quality=quality,
        ease_factor_before=before.ease_factor,
        ease_factor_after=state.ease_factor,
        interval_before=before.interval,
        interval_after=state.interval,
        reviewed_at=now,
    )

    profile = get_or_create_profile(user)
    if first_success:
        profile.words_learned += 1
        profile.save(update_fields=['words_learned', 'updated_at'])
    profile.update_streak(timezone.localdate(now))

    logger.info(
        "Reviewed '%s' for %s: quality=%d interval=%d->%d ease=%.2f->%.2f",
        word.text, user.username, quality,
        before.interval, state.interval, before.ease_factor, state.ease_factor
    )
    return state, log
