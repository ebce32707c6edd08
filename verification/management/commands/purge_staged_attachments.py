"""
Delete staged wizard uploads that were never submitted or discarded.

Drafts live in the session, so an abandoned draft leaves its staged files
behind.  Anything older than the configured age is removed.

Usage:
    python manage.py purge_staged_attachments              # default age
    python manage.py purge_staged_attachments --hours 6
    python manage.py purge_staged_attachments --dry-run
"""

import time
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = 'Remove staged verification attachments older than the configured age'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hours', type=float,
            default=settings.WAQTI_CONFIG.get('stale_staging_hours', 24),
            help='Minimum age in hours before a staged file is removed',
        )
        parser.add_argument(
            '--dry-run', action='store_true',
            help='List what would be removed without deleting anything',
        )

    def handle(self, **options):
        staging_dir = Path(settings.WAQTI_CONFIG['staging_dir'])
        if not staging_dir.exists():
            self.stdout.write(f'Staging directory {staging_dir} does not exist, nothing to do.')
            return

        cutoff = time.time() - options['hours'] * 3600
        removed = 0
        freed = 0
        for path in staging_dir.iterdir():
            if not path.is_file() or path.stat().st_mtime > cutoff:
                continue
            size = path.stat().st_size
            if options['dry_run']:
                self.stdout.write(f'  would remove {path.name} ({size} bytes)')
            else:
                path.unlink(missing_ok=True)
            removed += 1
            freed += size

        verb = 'Would remove' if options['dry_run'] else 'Removed'
        self.stdout.write(self.style.SUCCESS(f'{verb} {removed} staged files ({freed} bytes).'))
