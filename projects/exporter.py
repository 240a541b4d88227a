"""CSV export of project records."""
import csv
import io

from django.utils import timezone

from portfolio.timezone_utils import get_firm_timezone

EXPORT_COLUMNS = [
    'Project Title',
    'Address',
    'City',
    'Building Type',
    'Market Sector',
    'Description',
    'Mini Description',
    'Primary Client Name',
    'Project Manager Name',
    'Status Description',
    'Compensation',
    'Year',
    'Latitude',
    'Longitude',
]


def _format_number(value):
    value = float(value or 0)
    return str(int(value)) if value.is_integer() else str(value)


def record_to_row(record):
    return {
        'Project Title': record.title,
        'Address': record.address or '',
        'City': record.city,
        'Building Type': record.building_type or '',
        'Market Sector': record.market_sector,
        'Description': record.description or '',
        'Mini Description': record.mini_description or '',
        'Primary Client Name': record.client,
        'Project Manager Name': record.project_manager or '',
        'Status Description': record.status,
        'Compensation': _format_number(record.compensation),
        'Year': record.year if record.year is not None else '',
        'Latitude': record.coordinates[0],
        'Longitude': record.coordinates[1],
    }


def write_csv(records, stream):
    """Write records to a text stream, one row each, in the given order."""
    writer = csv.DictWriter(stream, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for record in records:
        writer.writerow(record_to_row(record))


def export_csv(records):
    """Return the CSV export of `records` as a string."""
    output = io.StringIO()
    write_csv(records, output)
    return output.getvalue()


def export_filename():
    today = timezone.now().astimezone(get_firm_timezone()).date()
    return f"projects_export_{today.isoformat()}.csv"
