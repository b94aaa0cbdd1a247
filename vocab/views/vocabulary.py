"""Vocabulary list, export and import views."""

import json

from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_POST, require_http_methods

from ..importer import create_word, export_words, import_words
from ..models import Word, WordProgress
from .helpers import parse_json_body, serialize_word


@login_required
@require_http_methods(['GET', 'POST'])
def word_list(request):
    """
    List words, filtered by search text, CEFR level and part of speech.

    POST adds a single word, given in the export entry format.
    """
    if request.method == 'POST':
        try:
            word = create_word(parse_json_body(request))
        except ValueError as e:
            return JsonResponse({'error': f'Invalid word: {e}'}, status=400)
        return JsonResponse(serialize_word(word), status=201)

    words = Word.objects.prefetch_related('examples')

    search = request.GET.get('q', '').strip()
    if search:
        words = words.filter(Q(text__icontains=search) | Q(translation__icontains=search))

    level = request.GET.get('level', '')
    if level and level != 'All':
        words = words.filter(difficulty=level)

    pos = request.GET.get('pos', '')
    if pos and pos != 'All':
        words = words.filter(part_of_speech=pos)

    progress_by_word = {
        progress.word_id: progress.to_state()
        for progress in WordProgress.objects.filter(user=request.user, word__in=words)
    }

    return JsonResponse({
        'count': words.count(),
        'words': [serialize_word(word, progress_by_word.get(word.pk)) for word in words],
    })


@login_required
@require_GET
def word_export(request):
    """Export the vocabulary as a JSON file."""
    export_data = export_words(Word.objects.prefetch_related('examples'))

    response = HttpResponse(
        json.dumps(export_data, indent=2, ensure_ascii=False),
        content_type='application/json'
    )
    response['Content-Disposition'] = 'attachment; filename="vocabulary.json"'
    return response


@login_required
@require_POST
def word_import(request):
    """Import words from an uploaded JSON file or a JSON request body."""
    uploaded_file = request.FILES.get('file')

    try:
        if uploaded_file is not None:
            if not uploaded_file.name.endswith('.json'):
                return JsonResponse({'error': 'Please upload a JSON file.'}, status=400)
            content = uploaded_file.read().decode('utf-8')
        else:
            content = request.body.decode('utf-8')
        data = json.loads(content)
        created, skipped = import_words(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return JsonResponse({'error': f'Invalid JSON file: {e}'}, status=400)
    except ValueError as e:
        return JsonResponse({'error': f'Invalid vocabulary file: {e}'}, status=400)

    return JsonResponse({
        'success': True,
        'created': created,
        'skipped': skipped,
    })
