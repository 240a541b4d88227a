"""
Project persistence behind a narrow interface.

Views, commands and the importer only talk to a `ProjectRepository`, so the
storage technology can change without touching import or clustering code.
`DjangoProjectRepository` stores records through the ORM and owns the
mapping between `ProjectRecord` and the snake_case row schema.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from .exceptions import PersistenceError, ProjectNotFound, RecordValidationError
from .models import Project
from .records import ProjectRecord

logger = logging.getLogger(__name__)


def record_to_row(record):
    """Map a record to model field values, splitting the coordinate pair."""
    try:
        compensation = Decimal(str(record.compensation or 0))
    except InvalidOperation:
        compensation = Decimal('0')
    return {
        'title': record.title,
        'address': record.address or '',
        'city': record.city,
        'latitude': float(record.coordinates[0]),
        'longitude': float(record.coordinates[1]),
        'market_sector': record.market_sector,
        'building_type': record.building_type or None,
        'description': record.description,
        'mini_description': record.mini_description or None,
        'image_urls': list(record.image_urls or []),
        'client': record.client,
        'project_manager': record.project_manager or '',
        'status': record.status,
        'compensation': compensation,
        'year': record.year,
        'featured': bool(record.featured),
        'recent': bool(record.recent),
    }


def row_to_record(project):
    """Map a stored Project back to a record, recomposing coordinates."""
    return ProjectRecord(
        id=str(project.id),
        title=project.title,
        address=project.address or '',
        city=project.city,
        coordinates=(float(project.latitude), float(project.longitude)),
        market_sector=project.market_sector,
        building_type=project.building_type or None,
        description=project.description,
        mini_description=project.mini_description or None,
        image_urls=list(project.image_urls or []),
        client=project.client,
        project_manager=project.project_manager or '',
        status=project.status,
        compensation=float(project.compensation or 0),
        year=project.year,
        featured=bool(project.featured),
        recent=bool(project.recent),
    )


class ProjectRepository:
    """Interface every project store implements."""

    def create(self, record):
        """Store a new record and return its assigned id."""
        raise NotImplementedError

    def read_all(self):
        """Return every record, newest first."""
        raise NotImplementedError

    def read_one(self, project_id):
        """Return one record, or None when it does not exist."""
        raise NotImplementedError

    def update(self, project_id, changes):
        """Merge `changes` into the stored record and overwrite it."""
        raise NotImplementedError

    def delete(self, project_id):
        raise NotImplementedError

    def bulk_create(self, records):
        """Store many records. Partial failure behaviour is store-defined."""
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError


class DjangoProjectRepository(ProjectRepository):
    """ProjectRepository backed by the Django ORM."""

    def _build(self, record):
        record.validate()
        project = Project(**record_to_row(record))
        try:
            project.full_clean(exclude=['id'])
        except ValidationError as e:
            raise RecordValidationError(
                {field: ' '.join(messages) for field, messages in e.message_dict.items()}
            ) from e
        return project

    def create(self, record):
        project = self._build(record)
        try:
            project.save(force_insert=True)
        except DatabaseError as e:
            logger.exception('Error adding project %r', record.title)
            raise PersistenceError(f'Failed to add project: {e}') from e
        return str(project.id)

    def read_all(self):
        try:
            return [row_to_record(project) for project in Project.objects.all().order_by('-created_at')]
        except DatabaseError as e:
            logger.exception('Error fetching projects')
            raise PersistenceError(f'Failed to fetch projects: {e}') from e

    def read_one(self, project_id):
        try:
            project = Project.objects.filter(pk=project_id).first()
        except (ValidationError, ValueError):
            # Not a UUID, so it cannot exist
            return None
        except DatabaseError as e:
            logger.exception('Error fetching project %s', project_id)
            raise PersistenceError(f'Failed to fetch project: {e}') from e
        return row_to_record(project) if project else None

    def update(self, project_id, changes):
        current = self.read_one(project_id)
        if current is None:
            raise ProjectNotFound(f'Project {project_id} not found')

        changes = {name: value for name, value in changes.items() if name != 'id'}
        updated = current.with_changes(**changes)
        self._build(updated)
        try:
            project = Project.objects.get(pk=current.id)
            for name, value in record_to_row(updated).items():
                setattr(project, name, value)
            project.save()
        except Project.DoesNotExist:
            raise ProjectNotFound(f'Project {project_id} not found')
        except DatabaseError as e:
            logger.exception('Error updating project %s', project_id)
            raise PersistenceError(f'Failed to update project: {e}') from e
        return updated

    def delete(self, project_id):
        try:
            deleted, _ = Project.objects.filter(pk=project_id).delete()
        except (ValidationError, ValueError):
            deleted = 0
        except DatabaseError as e:
            logger.exception('Error deleting project %s', project_id)
            raise PersistenceError(f'Failed to delete project: {e}') from e
        if not deleted:
            raise ProjectNotFound(f'Project {project_id} not found')

    def bulk_create(self, records):
        if not records:
            return 0
        projects = [self._build(record) for record in records]
        try:
            with transaction.atomic():
                Project.objects.bulk_create(projects)
        except DatabaseError as e:
            logger.exception('Error bulk adding %d projects', len(projects))
            raise PersistenceError(f'Failed to import projects: {e}') from e
        return len(projects)

    def clear(self):
        try:
            deleted, _ = Project.objects.all().delete()
        except DatabaseError as e:
            logger.exception('Error clearing projects')
            raise PersistenceError(f'Failed to clear projects: {e}') from e
        return deleted


def get_repository():
    """Repository used by views and management commands."""
    return DjangoProjectRepository()
