"""Views package for the vocab app."""

from .dashboard import dashboard
from .review import review_queue, review_word
from .vocabulary import word_list, word_export, word_import
from .health import health_check

__all__ = [
    # Dashboard
    'dashboard',
    # Review
    'review_queue',
    'review_word',
    # Vocabulary
    'word_list',
    'word_export',
    'word_import',
    # Health
    'health_check',
]
