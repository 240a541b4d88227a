"""
JSON API behind the project map.

Reads are public. Anything that changes data goes through the admin session
gate, and every mutation answers with the full, freshly re-read project list
so the map never patches its own copy.
"""
import json
import logging
from functools import wraps

import cloudinary.exceptions
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from portfolio.auth import admin_required, is_admin
from portfolio.timezone_utils import get_current_year

from .clustering import group_by_location
from .exceptions import (
    ImageValidationError,
    PersistenceError,
    ProjectNotFound,
    RecordValidationError,
)
from .exporter import export_csv, export_filename
from .filters import ProjectFilter, compute_stats, related_projects
from .images import store_image
from .importer import ProjectImporter, commit_import
from .market_sectors import MARKET_SECTORS, get_sector_color
from .records import ProjectRecord, changes_from_json
from .repository import get_repository
from .services.geocoder import Geocoder
from .services.geocoding_client import GeocodingClient

logger = logging.getLogger(__name__)


def _error(message, status, **extra):
    return JsonResponse({'success': False, 'error': message, **extra}, status=status)


def handle_portfolio_errors(view_func):
    """Turn repository and validation exceptions into JSON error responses."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except json.JSONDecodeError:
            return _error('Invalid JSON', 400)
        except RecordValidationError as e:
            return _error(str(e), 400, errors=e.errors)
        except ProjectNotFound:
            return _error('Project not found', 404)
        except PersistenceError as e:
            return _error(str(e), 500)
    return wrapper


def _serialize(records, request):
    include_compensation = is_admin(request)
    return [record.to_json(include_compensation=include_compensation) for record in records]


def _filtered(request, repository):
    return ProjectFilter.from_querydict(request.GET).apply(repository.read_all())


def _with_project_list(request, repository, status=200, **payload):
    """Response carrying the whole stored list alongside `payload`."""
    records = repository.read_all()
    return JsonResponse({
        'success': True,
        **payload,
        'projects': _serialize(records, request),
        'count': len(records),
    }, status=status)


def _load_json(request):
    if not request.body:
        return {}
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise RecordValidationError({'body': 'Expected a JSON object.'})
    return data


@require_http_methods(["GET"])
@handle_portfolio_errors
def project_list(request):
    """List projects, optionally filtered by sector, status and search text."""
    records = _filtered(request, get_repository())
    return JsonResponse({
        'success': True,
        'projects': _serialize(records, request),
        'count': len(records),
    })


@require_http_methods(["GET"])
@handle_portfolio_errors
def project_detail(request, project_id):
    """One project plus up to three related ones."""
    repository = get_repository()
    record = repository.read_one(project_id)
    if record is None:
        raise ProjectNotFound(project_id)

    related = related_projects(record, repository.read_all())
    return JsonResponse({
        'success': True,
        'project': record.to_json(include_compensation=is_admin(request)),
        'related': _serialize(related, request),
    })


@require_POST
@admin_required
@handle_portfolio_errors
def create_project(request):
    """Create a project, geocoding its address when no coordinates are sent."""
    data = _load_json(request)
    record = ProjectRecord.from_json(data)
    record.id = None
    if record.year is None:
        record.year = get_current_year()

    if record.coordinates is None:
        # Only spend a lookup on an otherwise valid record
        errors = record.with_changes(coordinates=(0.0, 0.0)).errors()
        if errors:
            raise RecordValidationError(errors)
        coordinates = Geocoder().resolve(record.address, record.city)
        if coordinates is None:
            return _error(
                f'Could not find coordinates for "{record.address or record.city}". '
                'Check the address and city, or enter coordinates manually.',
                400,
            )
        record.coordinates = coordinates

    repository = get_repository()
    project_id = repository.create(record)
    logger.info('Created project %s (%s)', project_id, record.title)
    return _with_project_list(
        request, repository, status=201,
        project=repository.read_one(project_id).to_json(),
    )


@require_http_methods(["PATCH", "POST"])
@admin_required
@handle_portfolio_errors
def update_project(request, project_id):
    """Merge the sent fields into a project. Re-geocodes when the location text changes."""
    repository = get_repository()
    current = repository.read_one(project_id)
    if current is None:
        raise ProjectNotFound(project_id)

    changes = changes_from_json(_load_json(request))
    location_changed = (
        changes.get('address', current.address) != current.address
        or changes.get('city', current.city) != current.city
    )
    if changes.get('coordinates') is None:
        changes.pop('coordinates', None)
        if location_changed:
            coordinates = Geocoder().resolve(
                changes.get('address', current.address),
                changes.get('city', current.city),
            )
            if coordinates is None:
                return _error('Could not find coordinates for the new location.', 400)
            changes['coordinates'] = coordinates

    updated = repository.update(project_id, changes)
    logger.info('Updated project %s', project_id)
    return _with_project_list(request, repository, project=updated.to_json())


@require_http_methods(["DELETE", "POST"])
@admin_required
@handle_portfolio_errors
def delete_project(request, project_id):
    repository = get_repository()
    repository.delete(project_id)
    logger.info('Deleted project %s', project_id)
    return _with_project_list(request, repository)


@require_POST
@admin_required
@handle_portfolio_errors
def bulk_delete_projects(request):
    """Delete every project in `ids`. Unknown ids are reported, not fatal."""
    ids = _load_json(request).get('ids') or []
    if not isinstance(ids, list):
        return _error('ids must be a list', 400)

    repository = get_repository()
    deleted = 0
    not_found = []
    for project_id in ids:
        try:
            repository.delete(project_id)
            deleted += 1
        except ProjectNotFound:
            not_found.append(project_id)

    logger.info('Bulk deleted %d project(s), %d not found', deleted, len(not_found))
    return _with_project_list(request, repository, deleted=deleted, not_found=not_found)


@require_POST
@admin_required
@handle_portfolio_errors
def import_projects(request):
    """
    Import a CSV upload (multipart field `file`).

    422 when any row has an error (nothing is written), 409 when titles
    already exist and `confirm_duplicates` was not set, 200 otherwise.
    """
    upload = request.FILES.get('file')
    if upload is None:
        return _error('No file uploaded', 400)

    confirm = request.POST.get('confirm_duplicates', '').strip().lower() in ('1', 'true', 'yes', 'on')

    repository = get_repository()
    result = ProjectImporter().validate(upload.read(), repository.read_all())
    outcome = commit_import(result, repository, confirm=confirm)

    if outcome.status == 'blocked':
        return _error('Import blocked by errors', 422, result=result.to_dict())
    if outcome.status == 'declined':
        return _error('Some projects already exist. Confirm to import them anyway.', 409,
                      result=result.to_dict())

    return _with_project_list(
        request, repository,
        imported=outcome.created,
        result=result.to_dict(),
    )


@require_http_methods(["GET"])
@admin_required
@handle_portfolio_errors
def export_projects(request):
    """Download the filtered list as CSV."""
    records = _filtered(request, get_repository())
    response = HttpResponse(export_csv(records), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{export_filename()}"'
    return response


@require_http_methods(["GET"])
@handle_portfolio_errors
def project_clusters(request):
    """Marker groups for the map; each group is drawn at its seed's position."""
    records = _filtered(request, get_repository())
    include_compensation = is_admin(request)
    clusters = []
    for group in group_by_location(records):
        seed = group[0]
        clusters.append({
            'coordinates': [seed.coordinates[0], seed.coordinates[1]],
            'count': len(group),
            'color': get_sector_color(seed.market_sector),
            'projects': [record.to_json(include_compensation=include_compensation) for record in group],
        })
    return JsonResponse({'success': True, 'clusters': clusters})


@require_http_methods(["GET"])
@handle_portfolio_errors
def project_stats(request):
    records = _filtered(request, get_repository())
    return JsonResponse({
        'success': True,
        'stats': compute_stats(records, include_financials=is_admin(request)),
    })


@require_http_methods(["GET"])
def sector_list(request):
    return JsonResponse({
        'success': True,
        'sectors': [sector.to_dict() for sector in MARKET_SECTORS],
    })


@require_POST
@admin_required
def upload_image(request):
    """Store an uploaded image (multipart field `image`) and return its URL."""
    upload = request.FILES.get('image')
    if upload is None:
        return _error('No image uploaded', 400)

    try:
        url = store_image(upload, request.POST.get('title', ''))
    except ImageValidationError as e:
        return _error(str(e), 400)
    except cloudinary.exceptions.Error as e:
        logger.error('Image upload failed: %s', e)
        return _error(f'Image upload failed: {e}', 502)
    return JsonResponse({'success': True, 'url': url})


@require_http_methods(["GET"])
@admin_required
def geocode_suggest(request):
    """Address autocomplete for the project form."""
    query = request.GET.get('q', '').strip()
    suggestions = GeocodingClient().suggest(query) if query else []
    return JsonResponse({'success': True, 'suggestions': suggestions})
