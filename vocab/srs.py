"""
Spaced Repetition System (SRS) scheduler for vocabulary review.

This module implements the SM-2 algorithm, originally developed by Piotr Wozniak
for SuperMemo. Given the previous scheduling state of a word (or nothing, for a
word that was never reviewed) and a self-reported recall quality, it returns the
new scheduling state.

Everything here is pure: no database access, no logging and no reading of the
clock except through the ``now`` argument. Persistence lives in
``vocab.repository`` and the review session driver in ``vocab.session``.
"""

import enum
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Tuple


# Quality rating constants
QUALITY_BLACKOUT = 0       # Complete blackout, no recognition
QUALITY_WRONG_EASY = 1     # Wrong, but answer seemed easy once seen
QUALITY_WRONG_HARD = 2     # Wrong, but remembered upon seeing answer
QUALITY_HARD = 3           # Correct, but with significant difficulty
QUALITY_GOOD = 4           # Correct, with some hesitation
QUALITY_EASY = 5           # Perfect response, immediate recall

PASSING_QUALITY = QUALITY_HARD

# Algorithm constants
MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
FIRST_INTERVAL = 1         # First successful review: 1 day
SECOND_INTERVAL = 6        # Second successful review: 6 days

# Fixed-length day; no calendar or DST adjustment.
DAY = timedelta(days=1)

# Flashcard buttons and the quality each one reports.
RATINGS = {
    'again': QUALITY_BLACKOUT,
    'hard': QUALITY_HARD,
    'good': QUALITY_GOOD,
    'easy': QUALITY_EASY,
}


class InvalidInput(ValueError):
    """Raised when a quality rating or a prior review state is out of range."""


class ReviewBand(str, enum.Enum):
    """Qualitative stage of a word in the review cycle."""
    NEW = 'new'
    LEARNING = 'learning'
    REVIEWING = 'reviewing'
    LAPSED = 'lapsed'


@dataclass(frozen=True)
class ReviewState:
    """Immutable scheduling state of one learner-word pair."""
    item_id: Any
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0  # days
    repetitions: int = 0
    next_review_at: datetime | None = None

    @classmethod
    def new(cls, item_id=None):
        """State of a word that has never been reviewed."""
        return cls(item_id=item_id)

    @property
    def band(self) -> ReviewBand:
        if self.repetitions >= 2:
            return ReviewBand.REVIEWING
        if self.repetitions == 1:
            return ReviewBand.LEARNING
        if self.interval > 0:
            return ReviewBand.LAPSED
        return ReviewBand.NEW


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def validate_quality(quality) -> int:
    """Return quality unchanged if it is an integer in [0, 5]."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInput(f"Quality must be an integer, got {quality!r}")
    if quality < QUALITY_BLACKOUT or quality > QUALITY_EASY:
        raise InvalidInput(f"Quality must be between 0 and 5, got {quality}")
    return quality


def validate_state(state: ReviewState) -> ReviewState:
    """Reject prior states carrying non-finite or negative numbers."""
    ease = state.ease_factor
    if isinstance(ease, bool) or not isinstance(ease, (int, float)):
        raise InvalidInput(f"Ease factor must be a number, got {ease!r}")
    if not math.isfinite(ease) or ease < 0:
        raise InvalidInput(f"Ease factor must be finite and non-negative, got {ease}")

    for name in ('interval', 'repetitions'):
        value = getattr(state, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInput(f"{name.capitalize()} must be an integer, got {value!r}")
        if value < 0:
            raise InvalidInput(f"{name.capitalize()} must be non-negative, got {value}")
    return state


def rating_to_quality(rating: str) -> int:
    """Map a flashcard button name ("again", "hard", "good", "easy") to a quality."""
    try:
        return RATINGS[str(rating).strip().lower()]
    except KeyError:
        raise InvalidInput(
            f"Unknown rating {rating!r}, expected one of {', '.join(RATINGS)}"
        ) from None


def calculate_ease_factor(current_ease: float, quality: int) -> float:
    """
    Calculate the new ease factor after a review.

    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3.

    The same adjustment applies to passing and failing reviews.
    """
    adjustment = 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
    return max(MIN_EASE_FACTOR, current_ease + adjustment)


def calculate_interval(
    current_interval: int,
    repetitions: int,
    ease_factor: float,
    quality: int
) -> Tuple[int, int]:
    """
    Calculate the next interval and repetition count.

    Returns tuple of (new_interval, new_repetitions). Growth past the second
    review multiplies by the ease factor held *before* this review's update.
    """
    if quality < PASSING_QUALITY:
        return (FIRST_INTERVAL, 0)

    if repetitions == 0:
        new_interval = FIRST_INTERVAL
    elif repetitions == 1:
        new_interval = SECOND_INTERVAL
    else:
        new_interval = round_half_up(current_interval * ease_factor)

    return (max(FIRST_INTERVAL, new_interval), repetitions + 1)


def schedule(
    previous: ReviewState | None,
    quality: int,
    item_id=None,
    now: datetime | None = None
) -> ReviewState:
    """
    Compute the scheduling state that follows a review.

    Args:
        previous: Prior state of the word, or None if it was never reviewed
        quality: Quality of recall (0-5)
        item_id: Identifier used when ``previous`` is None
        now: Time of the review (defaults to the current UTC time)

    Returns:
        A new ReviewState; ``previous`` is left untouched. An aware ``now``
        yields a UTC ``next_review_at``.

    Raises:
        InvalidInput: quality or prior state out of range
    """
    if previous is None:
        previous = ReviewState.new(item_id)
    validate_quality(quality)
    validate_state(previous)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        # Aware arithmetic in a DST zone adds wall-clock days, not elapsed time
        now = now.astimezone(timezone.utc)

    interval, repetitions = calculate_interval(
        previous.interval, previous.repetitions, previous.ease_factor, quality
    )
    return replace(
        previous,
        ease_factor=calculate_ease_factor(previous.ease_factor, quality),
        interval=interval,
        repetitions=repetitions,
        next_review_at=now + interval * DAY,
    )


def is_due(state: ReviewState, now: datetime | None = None) -> bool:
    """
    A word is due once ``now`` reaches its next review time.

    A state that was never scheduled is new, not due.
    """
    if state.next_review_at is None:
        return False
    if now is None:
        now = datetime.now(timezone.utc)
    return now >= state.next_review_at


def get_items_due(items: Iterable, now: datetime | None = None) -> List:
    """
    Filter items that are due for review.

    Args:
        items: Iterable of objects with a next_review_at attribute
        now: Current time (defaults to now)

    Returns:
        List of due items, sorted by next_review_at (oldest first)
    """
    if now is None:
        now = datetime.now(timezone.utc)

    due = [item for item in items if is_due(item, now)]
    return sorted(due, key=lambda item: item.next_review_at)
