from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

from . import srs


def default_new_words_per_session():
    return getattr(settings, 'VOCAB_NEW_WORDS_PER_SESSION', 10)


def default_max_reviews_per_session():
    return getattr(settings, 'VOCAB_MAX_REVIEWS_PER_SESSION', 0)


class Word(models.Model):
    """A vocabulary entry."""

    class PartOfSpeech(models.TextChoices):
        NOUN = 'noun', 'Noun'
        VERB = 'verb', 'Verb'
        ADJECTIVE = 'adjective', 'Adjective'
        ADVERB = 'adverb', 'Adverb'
        PREPOSITION = 'preposition', 'Preposition'

    class Level(models.TextChoices):
        A1 = 'A1', 'A1 Beginner'
        A2 = 'A2', 'A2 Elementary'
        B1 = 'B1', 'B1 Intermediate'
        B2 = 'B2', 'B2 Upper Intermediate'
        C1 = 'C1', 'C1 Advanced'
        C2 = 'C2', 'C2 Proficient'

    text = models.CharField(max_length=200)
    part_of_speech = models.CharField(
        max_length=20,
        choices=PartOfSpeech.choices,
        default=PartOfSpeech.NOUN
    )
    pronunciation = models.CharField(max_length=200, blank=True)
    definition = models.TextField(blank=True)
    # Irregular verb forms
    past = models.CharField(max_length=200, blank=True)
    past_participle = models.CharField(max_length=200, blank=True)
    translation = models.CharField(max_length=200, blank=True)
    difficulty = models.CharField(
        max_length=2,
        choices=Level.choices,
        default=Level.A1
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['text']
        unique_together = ['text', 'part_of_speech']

    def __str__(self):
        return self.text


class Example(models.Model):
    """An example sentence using a word."""
    word = models.ForeignKey(Word, on_delete=models.CASCADE, related_name='examples')
    sentence = models.TextField()
    translation = models.TextField(blank=True)

    class Meta:
        ordering = ['pk']

    def __str__(self):
        return f"{self.sentence[:50]}..."


class WordProgress(models.Model):
    """Persisted SM-2 scheduling state of a word for one learner."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='word_progress')
    word = models.ForeignKey(Word, on_delete=models.CASCADE, related_name='progress')

    ease_factor = models.FloatField(default=srs.DEFAULT_EASE_FACTOR)
    interval = models.IntegerField(default=0)  # Days until next review
    repetitions = models.IntegerField(default=0)  # Successful reviews in a row
    next_review = models.DateTimeField(default=timezone.now)
    last_reviewed = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['next_review']
        unique_together = ['user', 'word']
        verbose_name_plural = 'Word progress'

    def __str__(self):
        return f"{self.word} for {self.user.username}"

    @property
    def band(self):
        return self.to_state().band

    def is_due(self, now=None):
        """Check if the word is due for review."""
        return self.next_review <= (now or timezone.now())

    def to_state(self):
        """Return the scheduler view of this row."""
        return srs.ReviewState(
            item_id=self.word_id,
            ease_factor=self.ease_factor,
            interval=self.interval,
            repetitions=self.repetitions,
            next_review_at=self.next_review,
        )

    def apply_state(self, state):
        """Copy scheduling fields from a ReviewState. Does not save."""
        self.ease_factor = state.ease_factor
        self.interval = state.interval
        self.repetitions = state.repetitions
        self.next_review = state.next_review_at


class ReviewLog(models.Model):
    """Log of word reviews for statistics."""
    progress = models.ForeignKey(WordProgress, on_delete=models.CASCADE, related_name='review_logs')
    quality = models.IntegerField()
    ease_factor_before = models.FloatField()
    ease_factor_after = models.FloatField()
    interval_before = models.IntegerField()
    interval_after = models.IntegerField()
    reviewed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-reviewed_at']

    def __str__(self):
        return f"{self.progress.word} q={self.quality} at {self.reviewed_at}"

    @property
    def passed(self):
        return self.quality >= srs.PASSING_QUALITY


class LearnerProfile(models.Model):
    """Per-learner session limits and study statistics."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='learner_profile')
    new_words_per_session = models.IntegerField(default=default_new_words_per_session)
    max_reviews_per_session = models.IntegerField(default=default_max_reviews_per_session)  # 0 = unlimited

    words_learned = models.IntegerField(default=0)
    current_streak = models.IntegerField(default=0)
    longest_streak = models.IntegerField(default=0)
    last_study_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Profile for {self.user.username}"

    def update_streak(self, today=None):
        """Update streak based on the study date and last study date."""
        if today is None:
            today = timezone.localdate()

        if self.last_study_date == today:
            return
        if self.last_study_date == today - timedelta(days=1):
            self.current_streak += 1
        else:
            # First session or streak broken
            self.current_streak = 1
        self.last_study_date = today

        if self.current_streak > self.longest_streak:
            self.longest_streak = self.current_streak

        self.save(update_fields=['current_streak', 'longest_streak', 'last_study_date', 'updated_at'])
