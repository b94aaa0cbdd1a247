"""Review session views."""

import json

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from .. import srs
from ..models import Word
from ..session import build_review_queue, submit_review
from .helpers import parse_json_body, serialize_word, serialize_state


@login_required
@require_GET
def review_queue(request):
    """Words due for review, followed by new words."""
    queue = build_review_queue(request.user)

    items = []
    for item in queue:
        data = serialize_word(item.word, item.state)
        data['is_new'] = item.is_new
        items.append(data)

    return JsonResponse({
        'total': len(items),
        'due': sum(1 for item in queue if not item.is_new),
        'new': sum(1 for item in queue if item.is_new),
        'words': items,
    })


@login_required
@require_POST
def review_word(request, pk):
    """
    Submit a review for a word.

    Accepts either {"quality": 0-5} or {"rating": "again"|"hard"|"good"|"easy"}.
    """
    word = get_object_or_404(Word, pk=pk)

    try:
        data = parse_json_body(request)
        if 'rating' in data:
            quality = srs.rating_to_quality(data['rating'])
        else:
            quality = data['quality']
            if isinstance(quality, str):
                quality = int(quality)
        state, log = submit_review(request.user, word, quality)
    except srs.InvalidInput as e:
        return JsonResponse({'error': str(e)}, status=400)
    except (json.JSONDecodeError, KeyError, ValueError, TypeError):
        return JsonResponse({'error': 'Invalid request'}, status=400)

    return JsonResponse({
        'success': True,
        'word': word.pk,
        'quality': log.quality,
        **serialize_state(state),
    })
