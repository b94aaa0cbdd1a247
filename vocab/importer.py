"""Vocabulary import and export in the JSON exchange format."""

import logging

from django.db import transaction
from django.utils import timezone

from .models import Word, Example

logger = logging.getLogger(__name__)

VALID_PARTS_OF_SPEECH = [choice[0] for choice in Word.PartOfSpeech.choices]
VALID_LEVELS = [choice[0] for choice in Word.Level.choices]


def export_words(words):
    """Build the export document for an iterable of words."""
    return {
        'exported_at': timezone.now().isoformat(),
        'words': [
            {
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
            for word in words
        ],
    }


def validate_document(data):
    """Raise ValueError unless data looks like an export document."""
    if not isinstance(data, dict):
        raise ValueError('expected a JSON object')
    if 'words' not in data or not isinstance(data['words'], list):
        raise ValueError('missing or invalid "words" field')


def clean_text(value):
    """Coerce an optional JSON string field; null becomes an empty string."""
    return '' if value is None else str(value).strip()


def clean_entry(entry):
    """
    Normalize one word entry of an export document.

    Returns:
        Tuple of (word fields, example list), or None when the entry has no text
    """
    if not isinstance(entry, dict) or not clean_text(entry.get('text')):
        return None

    part_of_speech = entry.get('part_of_speech')
    if part_of_speech not in VALID_PARTS_OF_SPEECH:
        part_of_speech = Word.PartOfSpeech.NOUN
    difficulty = entry.get('difficulty')
    if difficulty not in VALID_LEVELS:
        difficulty = Word.Level.A1
    forms = entry.get('forms')
    if not isinstance(forms, dict):
        forms = {}

    fields = {
        'text': clean_text(entry['text']),
        'part_of_speech': part_of_speech,
        'pronunciation': clean_text(entry.get('pronunciation')),
        'definition': clean_text(entry.get('definition')),
        'past': clean_text(forms.get('past')),
        'past_participle': clean_text(forms.get('past_participle')),
        'translation': clean_text(entry.get('translation')),
        'difficulty': difficulty,
    }

    examples = entry.get('examples')
    if not isinstance(examples, list):
        examples = []
    examples = [
        {
            'sentence': clean_text(example.get('sentence')),
            'translation': clean_text(example.get('translation')),
        }
        for example in examples
        if isinstance(example, dict) and clean_text(example.get('sentence'))
    ]
    return fields, examples


def _create(fields, examples):
    word = Word.objects.create(**fields)
    for example in examples:
        Example.objects.create(word=word, **example)
    return word


@transaction.atomic
def create_word(entry):
    """
    Create a single word from an entry in the export format.

    Raises:
        ValueError: the entry has no text or the word already exists
    """
    cleaned = clean_entry(entry)
    if cleaned is None:
        raise ValueError('missing "text" field')
    fields, examples = cleaned
    if Word.objects.filter(text=fields['text'], part_of_speech=fields['part_of_speech']).exists():
        raise ValueError(f"'{fields['text']}' ({fields['part_of_speech']}) already exists")

    word = _create(fields, examples)
    logger.info(f"Added word '{word.text}' ({word.part_of_speech})")
    return word


@transaction.atomic
def import_words(data, dry_run=False):
    """
    Create words (and their examples) from an export document.

    Entries without text and words that already exist (same text and part of
    speech) are skipped. Unknown parts of speech and levels fall back to the
    model defaults, and null optional fields are stored as empty strings.

    Returns:
        Tuple of (created, skipped)
    """
    validate_document(data)
    created = 0
    skipped = 0

    for entry in data['words']:
        cleaned = clean_entry(entry)
        if cleaned is None:
            skipped += 1
            continue
        fields, examples = cleaned

        if Word.objects.filter(text=fields['text'], part_of_speech=fields['part_of_speech']).exists():
            logger.info(f"Skipping existing word '{fields['text']}' ({fields['part_of_speech']})")
            skipped += 1
            continue

        created += 1
        if not dry_run:
            _create(fields, examples)

    logger.info(f"Imported {created} word(s), skipped {skipped}")
    return created, skipped
