"""Dashboard statistics."""

from datetime import datetime, time, timedelta

from django.conf import settings
from django.db.models import Avg
from django.utils import timezone

from . import srs
from .models import Word, WordProgress, ReviewLog
from .session import get_or_create_profile


def local_day_range(day):
    """
    Get the datetime range covering a date in the current timezone.

    Use with: queryset.filter(field__gte=start, field__lt=end)
    """
    tz = timezone.get_current_timezone()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def dashboard_stats(user, now=None):
    """Collect the numbers shown on a learner's dashboard."""
    if now is None:
        now = timezone.now()
    today = timezone.localdate(now)
    profile = get_or_create_profile(user)

    progress = WordProgress.objects.filter(user=user)
    reviews = ReviewLog.objects.filter(progress__user=user)

    total_words = Word.objects.count()
    due_now = progress.filter(next_review__lte=now).count()
    unseen = Word.objects.exclude(progress__user=user).count()

    # === PROGRESS ===
    bands = {
        srs.ReviewBand.NEW.value: unseen + progress.filter(repetitions=0, interval=0).count(),
        srs.ReviewBand.LEARNING.value: progress.filter(repetitions=1).count(),
        srs.ReviewBand.REVIEWING.value: progress.filter(repetitions__gte=2).count(),
        srs.ReviewBand.LAPSED.value: progress.filter(repetitions=0, interval__gt=0).count(),
    }

    total_reviews = reviews.count()
    correct_reviews = reviews.filter(quality__gte=srs.PASSING_QUALITY).count()
    retention_rate = round((correct_reviews / total_reviews * 100) if total_reviews > 0 else 0, 1)

    avg_ease = progress.aggregate(avg=Avg('ease_factor'))['avg'] or srs.DEFAULT_EASE_FACTOR
    struggling_ease = getattr(settings, 'VOCAB_STRUGGLING_EASE', 2.0)
    struggling = progress.filter(ease_factor__lt=struggling_ease).count()

    # Streak only counts if the learner studied today or yesterday
    if profile.last_study_date is not None and (today - profile.last_study_date).days <= 1:
        streak = profile.current_streak
    else:
        streak = 0

    today_start, today_end = local_day_range(today)
    reviews_today = reviews.filter(reviewed_at__gte=today_start, reviewed_at__lt=today_end).count()

    # === FORECAST ===
    forecast = []
    for i in range(7):
        day = today + timedelta(days=i)
        if i == 0:
            # Overdue words plus those coming due later today
            count = progress.filter(next_review__lt=today_end).count()
        else:
            day_start, day_end = local_day_range(day)
            count = progress.filter(next_review__gte=day_start, next_review__lt=day_end).count()
        forecast.append({
            'date': day.isoformat(),
            'day': 'Today' if i == 0 else ('Tomorrow' if i == 1 else day.strftime('%a')),
            'count': count,
        })

    # === WORDS ADDED, LAST 7 DAYS ===
    words_added = []
    for i in range(6, -1, -1):
        day = today - timedelta(days=i)
        day_start, day_end = local_day_range(day)
        words_added.append({
            'date': day.isoformat(),
            'day': day.strftime('%a'),
            'words': Word.objects.filter(created_at__gte=day_start, created_at__lt=day_end).count(),
        })

    return {
        'total_words': total_words,
        'words_learned': profile.words_learned,
        'due_now': due_now,
        'new': unseen,
        'bands': bands,
        'total_reviews': total_reviews,
        'reviews_today': reviews_today,
        'retention_rate': retention_rate,
        'avg_ease': round(avg_ease, 2),
        'struggling': struggling,
        'streak': streak,
        'longest_streak': profile.longest_streak,
        'forecast': forecast,
        'words_added': words_added,
    }
