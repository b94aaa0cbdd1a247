"""Shared helper functions for views."""

import json


def parse_json_body(request):
    """Decode a JSON object request body. Raises ValueError when malformed."""
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValueError('Expected a JSON object')
    return data


def serialize_word(word, state=None):
    """JSON-ready representation of a word and, optionally, its review state."""
    data = {
        'id': word.pk,
        'text': word.text,
        'part_of_speech': word.part_of_speech,
        'pronunciation': word.pronunciation,
        'definition': word.definition,
        'forms': {
            'past': word.past,
            'past_participle': word.past_participle,
        },
        'translation': word.translation,
        'difficulty': word.difficulty,
        'examples': [
            {'sentence': example.sentence, 'translation': example.translation}
            for example in word.examples.all()
        ],
    }
    if state is not None:
        data['progress'] = serialize_state(state)
    return data


def serialize_state(state):
    return {
        'ease_factor': round(state.ease_factor, 2),
        'interval': state.interval,
        'repetitions': state.repetitions,
        'next_review': state.next_review_at.isoformat() if state.next_review_at else None,
        'band': state.band.value,
    }
