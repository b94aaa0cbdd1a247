"""
Management command to load vocabulary from a JSON file.

    python manage.py load_vocabulary words.json [--dry-run]

The file uses the same format as the /api/words/export/ download. Words that
already exist (same text and part of speech) are skipped.
"""

import json
import logging

from django.core.management.base import BaseCommand, CommandError

from vocab.importer import import_words

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Load vocabulary words and examples from a JSON file'

    def add_arguments(self, parser):
        parser.add_argument('path', help='Path to the vocabulary JSON file')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would be imported without writing anything',
        )

    def handle(self, *args, **options):
        path = options['path']
        dry_run = options['dry_run']

        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        except OSError as e:
            raise CommandError(f"Cannot read {path}: {e}")
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CommandError(f"Invalid JSON in {path}: {e}")

        logger.info(f"Loading vocabulary from {path}" + (" (dry run)" if dry_run else ""))
        try:
            created, skipped = import_words(data, dry_run=dry_run)
        except ValueError as e:
            raise CommandError(f"Invalid vocabulary file: {e}")

        prefix = "[DRY RUN] Would import" if dry_run else "Imported"
        self.stdout.write(
            self.style.SUCCESS(f"{prefix} {created} word(s), skipped {skipped}")
        )
