"""Repository for per-learner review states."""

from django.utils import timezone

from .models import Word, WordProgress


class ReviewStateRepository:
    """Reads and writes ReviewState values for one learner."""

    def __init__(self, user):
        self.user = user

    def get(self, word):
        """
        Find the review state of a word.

        Returns:
            ReviewState if the learner has reviewed the word, None otherwise
        """
        progress = WordProgress.objects.filter(user=self.user, word=word).first()
        return progress.to_state() if progress else None

    def save(self, word, state, reviewed_at=None):
        """
        Store a review state, replacing whatever was stored before.

        Concurrent saves for the same word resolve as last writer wins.

        Returns:
            The WordProgress row holding the state
        """
        progress, _ = WordProgress.objects.get_or_create(user=self.user, word=word)
        progress.apply_state(state)
        progress.last_reviewed = reviewed_at or timezone.now()
        progress.save()
        return progress

    def due(self, now=None):
        """Progress rows due for review, oldest first."""
        return WordProgress.objects.filter(
            user=self.user,
            next_review__lte=now or timezone.now(),
        ).select_related('word').order_by('next_review')

    def unseen_words(self):
        """Words the learner has never reviewed."""
        return Word.objects.exclude(progress__user=self.user)
