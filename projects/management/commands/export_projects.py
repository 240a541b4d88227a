"""
Django management command to export projects as CSV.

Usage:
    python manage.py export_projects
    python manage.py export_projects -o projects.csv --sector education --status Active
"""
from django.core.management.base import BaseCommand, CommandError

from projects.exceptions import PersistenceError
from projects.exporter import export_filename, write_csv
from projects.filters import ProjectFilter
from projects.repository import get_repository


class Command(BaseCommand):
    help = 'Export projects to a CSV file that import_projects can read back'

    def add_arguments(self, parser):
        parser.add_argument(
            '-o', '--output',
            type=str,
            help='Output path (defaults to projects_export_<date>.csv; "-" writes to stdout)'
        )
        parser.add_argument(
            '--sector',
            action='append',
            default=[],
            help='Only export this market sector id (repeatable)'
        )
        parser.add_argument(
            '--status',
            action='append',
            default=[],
            help='Only export this status (repeatable)'
        )
        parser.add_argument(
            '--search',
            type=str,
            default='',
            help='Only export projects matching this text'
        )

    def handle(self, *args, **options):
        project_filter = ProjectFilter(
            market_sectors=options['sector'],
            statuses=options['status'],
            search=options['search'],
        )
        try:
            records = project_filter.apply(get_repository().read_all())
        except PersistenceError as e:
            raise CommandError(str(e))

        output = options['output'] or export_filename()
        if output == '-':
            write_csv(records, self.stdout)
            return

        with open(output, 'w', newline='', encoding='utf-8') as f:
            write_csv(records, f)
        self.stdout.write(self.style.SUCCESS(f'Exported {len(records)} project(s) to {output}'))
