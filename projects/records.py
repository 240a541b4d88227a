"""
In-memory project records and their JSON (camelCase) wire shape.

`ProjectRecord` is what the importer, the clustering code and the views pass
around. The map client speaks camelCase with a `coordinates` pair; the
repository translates records to and from the snake_case storage schema.
"""
from dataclasses import dataclass, field, fields, replace
from typing import List, Optional, Tuple

from .exceptions import RecordValidationError
from .market_sectors import DEFAULT_SECTOR, SECTOR_IDS

STATUSES = ('Active', 'Inactive', 'Dormant')
DEFAULT_STATUS = 'Active'

# camelCase wire name -> record attribute
JSON_FIELDS = {
    'title': 'title',
    'address': 'address',
    'city': 'city',
    'coordinates': 'coordinates',
    'marketSector': 'market_sector',
    'buildingType': 'building_type',
    'description': 'description',
    'miniDescription': 'mini_description',
    'imageUrls': 'image_urls',
    'client': 'client',
    'projectManager': 'project_manager',
    'status': 'status',
    'compensation': 'compensation',
    'year': 'year',
    'featured': 'featured',
    'recent': 'recent',
}


def is_valid_coordinates(lat, lon):
    """True when both values are real numbers inside Earth bounds."""
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        return False
    if lat != lat or lon != lon:  # NaN
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


@dataclass
class ProjectRecord:
    title: str
    city: str
    client: str
    coordinates: Tuple[float, float]
    description: str = ''
    address: str = ''
    market_sector: str = DEFAULT_SECTOR
    building_type: Optional[str] = None
    mini_description: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)
    project_manager: str = ''
    status: str = DEFAULT_STATUS
    compensation: float = 0.0
    year: Optional[int] = None
    featured: bool = False
    recent: bool = False
    id: Optional[str] = None

    @property
    def latitude(self):
        return self.coordinates[0]

    @property
    def longitude(self):
        return self.coordinates[1]

    @property
    def display_description(self):
        """Long description, or the mini description when it is blank."""
        if self.description and self.description.strip():
            return self.description
        return self.mini_description or ''

    def errors(self):
        """Return {field: message} for every broken invariant."""
        errors = {}
        for name in ('title', 'city', 'client'):
            value = getattr(self, name)
            if not value or not str(value).strip():
                errors[name] = 'This field is required.'
        if not self.display_description.strip():
            errors['description'] = 'A description or mini description is required.'
        if not self.coordinates or len(self.coordinates) != 2 or not is_valid_coordinates(*self.coordinates):
            errors['coordinates'] = 'Coordinates must be a (latitude, longitude) pair within Earth bounds.'
        if self.status not in STATUSES:
            errors['status'] = f'Status must be one of {", ".join(STATUSES)}.'
        if self.market_sector not in SECTOR_IDS:
            errors['marketSector'] = f'Unknown market sector "{self.market_sector}".'
        try:
            if float(self.compensation) < 0:
                errors['compensation'] = 'Compensation cannot be negative.'
        except (TypeError, ValueError):
            errors['compensation'] = 'Compensation must be a number.'
        if self.year is not None and (isinstance(self.year, bool) or not isinstance(self.year, int)):
            errors['year'] = 'Year must be an integer.'
        return errors

    def validate(self):
        errors = self.errors()
        if errors:
            raise RecordValidationError(errors)
        return self

    def with_changes(self, **changes):
        return replace(self, **changes)

    def to_json(self, include_compensation=True):
        """Serialize to the camelCase shape used by the map client."""
        data = {'id': str(self.id) if self.id is not None else None}
        for json_name, attr in JSON_FIELDS.items():
            data[json_name] = getattr(self, attr)
        data['coordinates'] = [self.coordinates[0], self.coordinates[1]]
        data['imageUrls'] = list(self.image_urls)
        data['compensation'] = float(self.compensation)
        if not include_compensation:
            del data['compensation']
        return data

    @classmethod
    def from_json(cls, data):
        """Build a record from the camelCase shape, applying defaults."""
        values = changes_from_json(data)
        for name in ('title', 'city', 'client', 'description', 'address', 'project_manager'):
            values.setdefault(name, '')
        values.setdefault('coordinates', None)
        if data.get('id'):
            values['id'] = str(data['id'])
        return cls(**values)


RECORD_FIELDS = {f.name for f in fields(ProjectRecord)}


def _coerce_coordinates(value):
    if value is None:
        return None
    try:
        lat, lon = value
        return (float(lat), float(lon))
    except (TypeError, ValueError):
        raise RecordValidationError({'coordinates': 'Coordinates must be a [latitude, longitude] pair.'})


def changes_from_json(data):
    """
    Translate a partial camelCase payload into record attribute changes.

    Unknown keys are ignored. Types are coerced where the wire format is
    loose (numbers sent as strings by HTML forms).
    """
    changes = {}
    for json_name, attr in JSON_FIELDS.items():
        if json_name not in data:
            continue
        value = data[json_name]

        if attr == 'coordinates':
            value = _coerce_coordinates(value)
        elif attr == 'compensation':
            try:
                value = float(value) if value not in (None, '') else 0.0
            except (TypeError, ValueError):
                raise RecordValidationError({'compensation': 'Compensation must be a number.'})
        elif attr == 'year':
            try:
                if isinstance(value, bool):
                    raise TypeError(value)
                value = int(value) if value not in (None, '') else None
            except (TypeError, ValueError):
                raise RecordValidationError({'year': 'Year must be an integer.'})
        elif attr in ('featured', 'recent'):
            if isinstance(value, str):
                value = value.strip().lower() in ('1', 'true', 'yes', 'on')
            else:
                value = bool(value)
        elif attr == 'image_urls':
            value = [str(url) for url in (value or []) if url]
        elif attr in ('building_type', 'mini_description'):
            value = value.strip() if isinstance(value, str) and value.strip() else None
        elif isinstance(value, str):
            value = value.strip()

        changes[attr] = value
    return changes
