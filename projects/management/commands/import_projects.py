"""
Django management command to import projects from a CSV export.

Usage:
    python manage.py import_projects <path_to_projects.csv>
    python manage.py import_projects projects.csv --dry-run
    python manage.py import_projects projects.csv --yes
"""
import os

from django.core.management.base import BaseCommand, CommandError

from projects.exceptions import PersistenceError, RecordValidationError
from projects.importer import ProjectImporter, commit_import
from projects.repository import get_repository


class Command(BaseCommand):
    help = 'Import projects from a CSV file, geocoding each city'

    def add_arguments(self, parser):
        parser.add_argument(
            'csv_file',
            type=str,
            help='Path to the CSV file'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Validate and geocode every row without importing anything'
        )
        parser.add_argument(
            '--yes',
            action='store_true',
            help='Import projects whose titles already exist without asking'
        )

    def handle(self, *args, **options):
        csv_file = options['csv_file']
        dry_run = options['dry_run']

        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No data will be imported'))

        if not os.path.exists(csv_file):
            raise CommandError(f'File not found: {csv_file}')

        self.stdout.write(f'Reading file: {csv_file}')
        with open(csv_file, 'rb') as f:
            content = f.read()

        repository = get_repository()
        result = ProjectImporter().validate(content, repository.read_all())

        self.stdout.write(result.format_report())
        self.stdout.write(f'  Rows read: {result.rows_read}')
        self.stdout.write(f'  Ready: {len(result.records)}')

        if result.has_errors:
            raise CommandError(f'Import blocked: {len(result.errors)} error(s). Nothing was imported.')

        if dry_run:
            self.stdout.write(self.style.SUCCESS(
                f'DRY RUN complete. Would import: {len(result.records)}'
            ))
            return

        confirm = True if options['yes'] else self._confirm_duplicates
        try:
            outcome = commit_import(result, repository, confirm=confirm)
        except (PersistenceError, RecordValidationError) as e:
            raise CommandError(f'Import failed, nothing was imported: {e}')

        if outcome.status == 'declined':
            self.stdout.write(self.style.WARNING('Import cancelled. Nothing was imported.'))
        elif outcome.status == 'empty':
            self.stdout.write(self.style.WARNING('No projects found in file.'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Import complete! Imported: {outcome.created}'))

    def _confirm_duplicates(self, duplicates):
        self.stdout.write(self.style.WARNING(
            f'{len(duplicates)} project(s) have the same title as an existing project.'
        ))
        answer = input('Import them anyway? [y/N] ')
        return answer.strip().lower() in ('y', 'yes')
