"""
CSV import for portfolio projects.

Importing is two steps:

1. `ProjectImporter.validate()` reads the file, checks every row, geocodes
   each city and looks for titles that already exist. It never writes; it
   returns an `ImportResult` holding the clean records plus every error,
   warning and duplicate it found.
2. `commit_import()` refuses results with errors, asks for confirmation when
   there are duplicates, and only then hands the records to the repository.

Spreadsheets exported from different systems name the same column in
different ways, so every field is looked up through a list of synonyms.
"""
import csv
import io
import logging
import math
import random
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, List, Optional

from django.conf import settings
from django.core.exceptions import NON_FIELD_ERRORS, ValidationError

from portfolio.timezone_utils import get_current_year

from .exceptions import ImportFileError
from .market_sectors import DEFAULT_SECTOR, infer_market_sector, match_market_sector
from .models import Project
from .records import DEFAULT_STATUS, STATUSES, ProjectRecord
from .repository import record_to_row
from .services.geocoder import Geocoder, jitter

logger = logging.getLogger(__name__)

# Header row is line 1 and rows are counted from 1
ROW_OFFSET = 2

TITLE_COLUMNS = ('Long Name', 'Name', 'Title', 'Project Title')
CITY_COLUMNS = ('City',)
CLIENT_COLUMNS = ('Primary Client Name', 'Client')
ADDRESS_COLUMNS = ('Address', 'Address Description')
COMPENSATION_COLUMNS = ('Compensation', 'Project Value')
YEAR_COLUMNS = ('Year',)
PROJECT_MANAGER_COLUMNS = ('Project Manager Name', 'Project Manager')
DESCRIPTION_COLUMNS = ('Description',)
MINI_DESCRIPTION_COLUMNS = ('Mini Description', 'Short Description')
STATUS_COLUMNS = ('Status Description', 'Status')
SECTOR_COLUMNS = ('Market Sector', 'Sector')
PROJECT_TYPE_COLUMNS = ('Project Type Description', 'Project Type')
BUILDING_TYPE_COLUMNS = ('Building Type',)
IMAGE_COLUMNS = ('Image URLs', 'Images')

# Report labels for model fields that can reject an otherwise valid row
FIELD_LABELS = {
    'title': 'Title',
    'address': 'Address',
    'city': 'City',
    'client': 'Client',
    'project_manager': 'Project Manager',
    'building_type': 'Building Type',
    'compensation': 'Compensation',
    'year': 'Year',
    'latitude': 'Location',
    'longitude': 'Location',
    NON_FIELD_ERRORS: 'Row',
}

FLAG_POLICY_NONE = 'none'
FLAG_POLICY_RANDOM = 'random'
FLAG_POLICY_RULE = 'rule'
FLAG_POLICIES = (FLAG_POLICY_NONE, FLAG_POLICY_RANDOM, FLAG_POLICY_RULE)


@dataclass
class RowError:
    """A problem that blocks the import. `row` is None for file-level errors."""
    row: Optional[int]
    field: str
    value: Any
    message: str

    def to_dict(self):
        return {'row': self.row, 'field': self.field, 'value': self.value, 'message': self.message}


@dataclass
class RowWarning:
    """A problem fixed with a documented default; does not block the import."""
    row: int
    field: str
    value: Any
    message: str

    def to_dict(self):
        return {'row': self.row, 'field': self.field, 'value': self.value, 'message': self.message}


@dataclass
class DuplicateCandidate:
    row: int
    title: str
    existing: ProjectRecord

    def to_dict(self):
        return {
            'row': self.row,
            'title': self.title,
            'existing': {'id': self.existing.id, 'title': self.existing.title, 'city': self.existing.city},
        }


@dataclass
class ImportResult:
    records: List[ProjectRecord] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)
    warnings: List[RowWarning] = field(default_factory=list)
    duplicates: List[DuplicateCandidate] = field(default_factory=list)
    rows_read: int = 0

    @property
    def has_errors(self):
        return bool(self.errors)

    @property
    def needs_confirmation(self):
        return not self.errors and bool(self.duplicates)

    def errors_by_field(self):
        grouped = OrderedDict()
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error)
        return grouped

    def format_report(self):
        """Human-readable report of every error (grouped by field), duplicate and warning."""
        lines = []
        if self.errors:
            lines.append(f'Import blocked: {len(self.errors)} error(s) found.')
            for field_name, errors in self.errors_by_field().items():
                lines.append('')
                lines.append(f'{field_name}:')
                for error in errors:
                    where = f'Row {error.row}' if error.row is not None else 'File'
                    lines.append(f'  - {where}: {error.message}')

        if self.duplicates:
            lines.append('')
            lines.append(f'{len(self.duplicates)} possible duplicate(s):')
            for duplicate in self.duplicates:
                lines.append(
                    f'  - Row {duplicate.row}: "{duplicate.title}" matches existing project '
                    f'"{duplicate.existing.title}" ({duplicate.existing.city})'
                )

        if self.warnings:
            lines.append('')
            lines.append(f'{len(self.warnings)} warning(s):')
            for warning in self.warnings:
                lines.append(f'  - Row {warning.row} ({warning.field}): {warning.message}')

        if not lines:
            lines.append(f'{len(self.records)} project(s) ready to import.')
        return '\n'.join(lines).strip()

    def to_dict(self):
        return {
            'ready': len(self.records),
            'rows_read': self.rows_read,
            'errors': [error.to_dict() for error in self.errors],
            'warnings': [warning.to_dict() for warning in self.warnings],
            'duplicates': [duplicate.to_dict() for duplicate in self.duplicates],
            'report': self.format_report(),
        }


@dataclass
class ImportOutcome:
    """What commit_import did: 'imported', 'blocked', 'declined' or 'empty'."""
    status: str
    created: int
    result: ImportResult


def read_csv(content):
    """
    Parse CSV content into (headers, rows).

    Args:
        content: bytes, str, or a file-like object returning either

    Raises:
        ImportFileError: when the content is not decodable tabular data
    """
    if hasattr(content, 'read'):
        content = content.read()
    if isinstance(content, bytes):
        try:
            content = content.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise ImportFileError(f'File is not UTF-8 text: {e}') from e
    if content.startswith('\ufeff'):
        content = content[1:]

    if not content.strip():
        raise ImportFileError('File is empty.')

    try:
        reader = csv.DictReader(io.StringIO(content, newline=''))
        headers = [header.strip() for header in (reader.fieldnames or []) if header is not None]
        rows = list(reader)
    except csv.Error as e:
        raise ImportFileError(f'Could not parse CSV: {e}') from e

    if not any(headers):
        raise ImportFileError('File has no header row.')
    return headers, rows


def normalize_title(title):
    return (title or '').strip().lower()


def find_duplicate(title, existing_records):
    """Return the first existing record whose title matches (trimmed, case-insensitive)."""
    key = normalize_title(title)
    if not key:
        return None
    for record in existing_records:
        if normalize_title(record.title) == key:
            return record
    return None


def parse_compensation(value):
    """Parse '$1,250,000.00' style amounts. Raises ValueError."""
    cleaned = re.sub(r'[\s$,]', '', value)
    if cleaned.startswith('(') and cleaned.endswith(')'):
        cleaned = '-' + cleaned[1:-1]
    return float(cleaned)


def split_image_urls(value):
    return [url.strip() for url in re.split(r'[;|\n]', value) if url.strip()]


class _Row:
    """Case-insensitive access to one CSV row by column synonyms."""

    def __init__(self, raw):
        self.values = {}
        for key, value in raw.items():
            if key is None:
                continue
            self.values[key.strip().lower()] = (value or '').strip()

    def is_blank(self):
        return not any(self.values.values())

    def get(self, columns):
        """First non-blank value among the synonyms, or ''."""
        for column in columns:
            value = self.values.get(column.lower(), '')
            if value:
                return value
        return ''


class ProjectImporter:
    """
    Validates CSV rows and turns them into ProjectRecords.

    Args:
        geocoder: object with resolve(address, city) -> (lat, lon) | None
        flag_policy: how featured/recent are set: 'none', 'random' or 'rule'
        rng: random source for coordinate jitter and the 'random' policy
    """

    def __init__(self, geocoder=None, flag_policy=None, rng=None, current_year=None):
        self.geocoder = geocoder or Geocoder()
        self.flag_policy = flag_policy or settings.PORTFOLIO_IMPORT_FLAG_POLICY
        if self.flag_policy not in FLAG_POLICIES:
            raise ValueError(
                f'Unknown import flag policy "{self.flag_policy}". '
                f'Expected one of: {", ".join(FLAG_POLICIES)}'
            )
        self.rng = rng or random.Random()
        self.current_year = current_year or get_current_year()

    def validate(self, content, existing_records):
        """
        Check every row of a CSV file against the import rules.

        Errors accumulate across rows; a row with a missing required field, an
        unresolvable city or a value the database cannot hold is left out of
        `records` but later rows are still checked. Geocoding happens one row at a time, in file order.
        """
        result = ImportResult()
        existing_records = list(existing_records)

        try:
            _, rows = read_csv(content)
        except ImportFileError as e:
            result.errors.append(RowError(None, 'File', None, str(e)))
            return result

        for index, raw in enumerate(rows):
            row = _Row(raw)
            if row.is_blank():
                continue
            result.rows_read += 1
            record = self._validate_row(index + ROW_OFFSET, row, existing_records, result)
            if record is not None:
                result.records.append(record)

        logger.info(
            'Validated %d row(s): %d ready, %d error(s), %d warning(s), %d duplicate(s)',
            result.rows_read, len(result.records), len(result.errors),
            len(result.warnings), len(result.duplicates),
        )
        return result

    def _validate_row(self, row_number, row, existing_records, result):
        title = row.get(TITLE_COLUMNS)
        city = row.get(CITY_COLUMNS)
        client = row.get(CLIENT_COLUMNS)

        missing = False
        for field_name, value in (('Title', title), ('City', city), ('Client', client)):
            if not value:
                result.errors.append(RowError(row_number, field_name, value, f'{field_name} is required.'))
                missing = True
        if missing:
            return None

        duplicate = find_duplicate(title, existing_records)
        if duplicate is not None:
            result.duplicates.append(DuplicateCandidate(row_number, title, duplicate))

        coordinates = self.geocoder.resolve('', city)
        if coordinates is None:
            result.errors.append(RowError(
                row_number, 'Location', city, f'Could not find coordinates for city "{city}".'
            ))
            return None
        coordinates = jitter(coordinates, rng=self.rng)

        def warn(field_name, value, message):
            result.warnings.append(RowWarning(row_number, field_name, value, message))

        compensation = self._compensation(row, warn)
        year = self._year(row, warn)

        description = row.get(DESCRIPTION_COLUMNS)
        mini_description = row.get(MINI_DESCRIPTION_COLUMNS) or None
        if not description and not mini_description:
            description = title
            warn('Description', '', 'No description given; using the project title.')

        record = ProjectRecord(
            title=title,
            address=row.get(ADDRESS_COLUMNS),
            city=city,
            coordinates=coordinates,
            market_sector=self._market_sector(row, warn),
            building_type=row.get(BUILDING_TYPE_COLUMNS) or None,
            description=description,
            mini_description=mini_description,
            image_urls=split_image_urls(row.get(IMAGE_COLUMNS)),
            client=client,
            project_manager=row.get(PROJECT_MANAGER_COLUMNS),
            status=self._status(row, warn),
            compensation=compensation,
            year=year,
        )
        record.featured, record.recent = self._flags(record)
        if not self._fits_model(row_number, record, result):
            return None
        return record

    def _fits_model(self, row_number, record, result):
        """Check the record against the column limits the database enforces."""
        try:
            Project(**record_to_row(record)).full_clean(exclude=['id'])
        except ValidationError as e:
            for name, messages in e.message_dict.items():
                result.errors.append(RowError(
                    row_number, FIELD_LABELS.get(name, name), getattr(record, name, None), ' '.join(messages)
                ))
            return False
        return True

    def _compensation(self, row, warn):
        raw = row.get(COMPENSATION_COLUMNS)
        if not raw:
            return 0.0
        try:
            value = parse_compensation(raw)
        except ValueError:
            warn('Compensation', raw, f'"{raw}" is not a number; using 0.')
            return 0.0
        if not math.isfinite(value):
            warn('Compensation', raw, f'"{raw}" is not a number; using 0.')
            return 0.0
        if value < 0:
            warn('Compensation', raw, f'Compensation "{raw}" is negative; using 0.')
            return 0.0
        if round(value, 2) != value:
            value = round(value, 2)
            warn('Compensation', raw, f'Compensation "{raw}" has more than two decimal places; using {value:.2f}.')
        return value

    def _year(self, row, warn):
        raw = row.get(YEAR_COLUMNS)
        if not raw:
            return self.current_year
        try:
            return int(float(raw))
        except (ValueError, OverflowError):
            warn('Year', raw, f'"{raw}" is not a year; using {self.current_year}.')
            return self.current_year

    def _status(self, row, warn):
        raw = row.get(STATUS_COLUMNS)
        if not raw:
            return DEFAULT_STATUS
        for status in STATUSES:
            if raw.lower() == status.lower():
                return status
        warn('Status', raw, f'Unknown status "{raw}"; using {DEFAULT_STATUS}.')
        return DEFAULT_STATUS

    def _market_sector(self, row, warn):
        explicit = row.get(SECTOR_COLUMNS)
        if explicit:
            sector = match_market_sector(explicit)
            if sector is None:
                warn('Market Sector', explicit, f'Unknown market sector "{explicit}"; using {DEFAULT_SECTOR}.')
                return DEFAULT_SECTOR
            return sector

        project_type = row.get(PROJECT_TYPE_COLUMNS)
        if project_type:
            sector = infer_market_sector(project_type) or match_market_sector(project_type)
            if sector is None:
                warn('Market Sector', project_type,
                     f'Could not infer a market sector from "{project_type}"; using {DEFAULT_SECTOR}.')
                return DEFAULT_SECTOR
            return sector

        return DEFAULT_SECTOR

    def _flags(self, record):
        if self.flag_policy == FLAG_POLICY_RANDOM:
            return self.rng.random() > 0.8, self.rng.random() > 0.7
        if self.flag_policy == FLAG_POLICY_RULE:
            featured = record.compensation >= settings.PORTFOLIO_FEATURED_MIN_COMPENSATION
            recent = record.year is not None and record.year >= self.current_year - 1
            return featured, recent
        return False, False


def commit_import(result, repository, confirm=None):
    """
    Write a validated import, all or nothing at the error level.

    Args:
        result: ImportResult from ProjectImporter.validate()
        repository: ProjectRepository to write to
        confirm: True/False, or a callable taking the duplicate list and
                 returning True to proceed. Only consulted when duplicates exist.

    Returns:
        ImportOutcome
    """
    if result.has_errors:
        logger.info('Import refused: %d error(s)', len(result.errors))
        return ImportOutcome('blocked', 0, result)

    if result.duplicates:
        approved = confirm(result.duplicates) if callable(confirm) else bool(confirm)
        if not approved:
            logger.info('Import declined: %d duplicate(s) not confirmed', len(result.duplicates))
            return ImportOutcome('declined', 0, result)

    if not result.records:
        return ImportOutcome('empty', 0, result)

    created = repository.bulk_create(result.records)
    logger.info('Imported %d project(s)', created)
    return ImportOutcome('imported', created, result)
