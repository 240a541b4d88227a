"""
Filtering, search and summary figures over project records.

The map page filters the full record list in memory: by market sector, by
status and by a free-text query across the descriptive fields.
"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class ProjectFilter:
    market_sectors: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)
    search: str = ''

    @classmethod
    def from_querydict(cls, params):
        """Build a filter from request.GET (`sector` and `status` may repeat, `q` is the search)."""
        def values(name):
            items = []
            for value in params.getlist(name):
                items.extend(part.strip() for part in value.split(',') if part.strip())
            return items

        return cls(
            market_sectors=values('sector'),
            statuses=values('status'),
            search=params.get('q', '').strip(),
        )

    def matches(self, record):
        if self.market_sectors and record.market_sector not in self.market_sectors:
            return False
        if self.statuses and record.status not in self.statuses:
            return False
        if self.search.strip():
            query = self.search.strip().lower()
            haystack = [
                record.title,
                record.city,
                record.client,
                record.description,
                record.building_type or '',
            ]
            if not any(query in (value or '').lower() for value in haystack):
                return False
        return True

    def apply(self, records):
        return [record for record in records if self.matches(record)]


def compute_stats(records, include_financials=True):
    """Summary figures shown above the map."""
    total = sum(float(record.compensation or 0) for record in records)
    stats = {
        'count': len(records),
        'active_projects': sum(1 for record in records if record.status == 'Active'),
        'cities': len({record.city for record in records}),
    }
    if include_financials:
        stats['total_value'] = total
        stats['average_value'] = round(total / len(records)) if records else 0
    return stats


def related_projects(project, records, limit=3):
    """Up to `limit` other projects in the same city or market sector, in list order."""
    related = [
        record for record in records
        if record.id != project.id
        and (record.city == project.city or record.market_sector == project.market_sector)
    ]
    return related[:limit]
