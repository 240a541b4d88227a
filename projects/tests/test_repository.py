"""Tests for the ORM-backed project repository."""
import uuid
from datetime import timedelta

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from unittest import mock

from projects.exceptions import PersistenceError, ProjectNotFound, RecordValidationError
from projects.models import Project
from projects.repository import DjangoProjectRepository, record_to_row, row_to_record
from projects.tests.test_records import make_record


class RowMappingTests(TestCase):

    def test_coordinates_are_split_and_recomposed(self):
        record = make_record(coordinates=(43.0184, -73.8190), image_urls=['a.jpg'])
        row = record_to_row(record)
        self.assertEqual(row['latitude'], 43.0184)
        self.assertEqual(row['longitude'], -73.8190)
        self.assertNotIn('coordinates', row)

        project = Project.objects.create(**row)
        self.assertEqual(project.coordinates, (43.0184, -73.8190))
        restored = row_to_record(project)
        self.assertEqual(restored.coordinates, (43.0184, -73.8190))
        self.assertEqual(restored.id, str(project.id))
        self.assertEqual(restored.image_urls, ['a.jpg'])


class DjangoProjectRepositoryTests(TestCase):

    def setUp(self):
        self.repository = DjangoProjectRepository()

    def test_create_assigns_an_id(self):
        project_id = self.repository.create(make_record(title='Library'))
        self.assertEqual(Project.objects.get().title, 'Library')
        self.assertEqual(str(Project.objects.get().id), project_id)

    def test_create_rejects_invalid_records(self):
        with self.assertRaises(RecordValidationError):
            self.repository.create(make_record(title='', coordinates=(100, 0)))
        self.assertEqual(Project.objects.count(), 0)

    def test_read_all_is_newest_first(self):
        first = self.repository.create(make_record(title='First'))
        self.repository.create(make_record(title='Second'))
        Project.objects.filter(pk=first).update(created_at=timezone.now() - timedelta(days=1))
        self.assertEqual([r.title for r in self.repository.read_all()], ['Second', 'First'])

    def test_read_one(self):
        project_id = self.repository.create(make_record(title='Library'))
        self.assertEqual(self.repository.read_one(project_id).title, 'Library')
        self.assertIsNone(self.repository.read_one(uuid.uuid4()))
        self.assertIsNone(self.repository.read_one('not-a-uuid'))

    def test_update_merges_changes(self):
        project_id = self.repository.create(make_record(title='Library', year=2020))
        updated = self.repository.update(project_id, {'status': 'Dormant'})

        self.assertEqual(updated.status, 'Dormant')
        self.assertEqual(updated.year, 2020)
        self.assertEqual(Project.objects.get().status, 'Dormant')

    def test_update_validates(self):
        project_id = self.repository.create(make_record())
        with self.assertRaises(RecordValidationError):
            self.repository.update(project_id, {'status': 'Pending'})
        self.assertEqual(Project.objects.get().status, 'Active')

    def test_update_missing(self):
        with self.assertRaises(ProjectNotFound):
            self.repository.update(uuid.uuid4(), {'title': 'x'})

    def test_delete(self):
        project_id = self.repository.create(make_record())
        self.repository.delete(project_id)
        self.assertEqual(Project.objects.count(), 0)
        with self.assertRaises(ProjectNotFound):
            self.repository.delete(project_id)

    def test_bulk_create(self):
        count = self.repository.bulk_create([make_record(title='A'), make_record(title='B')])
        self.assertEqual(count, 2)
        self.assertEqual(Project.objects.count(), 2)

    def test_bulk_create_validates_before_writing(self):
        with self.assertRaises(RecordValidationError):
            self.repository.bulk_create([make_record(title='A'), make_record(client='')])
        self.assertEqual(Project.objects.count(), 0)

    def test_clear(self):
        self.repository.bulk_create([make_record(title='A'), make_record(title='B')])
        self.repository.clear()
        self.assertEqual(self.repository.read_all(), [])

    @mock.patch('projects.repository.Project.objects')
    def test_database_errors_become_persistence_errors(self, mock_objects):
        mock_objects.all.side_effect = DatabaseError('connection lost')
        with self.assertRaises(PersistenceError):
            self.repository.read_all()
