"""
Django management command to load sample projects into an empty database.

Usage:
    python manage.py seed_projects
"""
from django.core.management.base import BaseCommand

from projects.records import ProjectRecord
from projects.repository import get_repository

SAMPLE_PROJECTS = [
    ProjectRecord(
        title='BMPC BMPI NN801 Electronic Network',
        address='Knolls',
        city='West Milton',
        coordinates=(43.0184, -73.8190),
        market_sector='industrial',
        building_type='Manufacturing Facility',
        description=(
            'State-of-the-art industrial facility featuring advanced electronic network '
            'infrastructure for marine propulsion systems.'
        ),
        image_urls=[
            'https://images.pexels.com/photos/236705/pexels-photo-236705.jpeg',
            'https://images.pexels.com/photos/256381/pexels-photo-256381.jpeg',
        ],
        client='Fluor Marine Propulsion, LLC',
        project_manager='Andrea DeLany, CBCP',
        status='Active',
        compensation=114600,
        year=2024,
        featured=True,
        recent=True,
    ),
    ProjectRecord(
        title='Parks Horse Island Additional Design Services',
        address='Thousand Islands Reg',
        city='Sackets Harbor',
        coordinates=(43.9469, -76.1188),
        market_sector='parks',
        building_type='Visitor Center',
        description=(
            'Design services for recreational facility enhancement, focusing on visitor '
            'experience and environmental preservation.'
        ),
        image_urls=[
            'https://images.pexels.com/photos/417074/pexels-photo-417074.jpeg',
            'https://images.pexels.com/photos/1029604/pexels-photo-1029604.jpeg',
        ],
        client='New York State Office of Parks, Recreation & Historic Preservation',
        project_manager='Thomas Ascienzo, LEED AP BD+C',
        status='Active',
        compensation=180251,
        year=2024,
        featured=False,
        recent=True,
    ),
    ProjectRecord(
        title='Excelsior Park Townhouses - Phase 2',
        address='Excelsior Park',
        city='Saratoga Springs',
        coordinates=(43.0831, -73.7845),
        market_sector='housing',
        building_type='Townhouse Complex',
        description=(
            'Townhome development with energy-efficient design. This phase adds 24 units '
            'to the community.'
        ),
        image_urls=[
            'https://images.pexels.com/photos/323780/pexels-photo-323780.jpeg',
            'https://images.pexels.com/photos/1396122/pexels-photo-1396122.jpeg',
        ],
        client='Witt Construction, Inc.',
        project_manager='Jace Brown, R.A.',
        status='Active',
        compensation=141000,
        year=2024,
        featured=True,
        recent=False,
    ),
]


class Command(BaseCommand):
    help = 'Insert sample projects when the projects table is empty'

    def handle(self, *args, **options):
        repository = get_repository()

        existing = repository.read_all()
        if existing:
            self.stdout.write(self.style.WARNING(
                f'Database already has {len(existing)} project(s); nothing seeded.'
            ))
            return

        created = repository.bulk_create([record.with_changes() for record in SAMPLE_PROJECTS])
        self.stdout.write(self.style.SUCCESS(f'Seeded {created} sample project(s)'))
