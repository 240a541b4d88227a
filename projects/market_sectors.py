"""
Market sectors used to classify and colour project pins.

The sector list is fixed; imported CSV files name sectors loosely, so
`match_market_sector` accepts ids, display names and a handful of synonyms,
and `infer_market_sector` falls back to keywords in a free-text project type.
"""
import re
from dataclasses import dataclass


DEFAULT_SECTOR = 'commercial'
DEFAULT_COLOR = '#6d0020'


@dataclass(frozen=True)
class MarketSector:
    id: str
    name: str
    color: str

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'color': self.color}


MARKET_SECTORS = [
    MarketSector('commercial', 'Commercial', '#6d0020'),
    MarketSector('education', 'Education', '#f7941d'),
    MarketSector('government', 'Government', '#91982c'),
    MarketSector('manufacturing', 'Manufacturing & Distribution', '#dc2626'),
    MarketSector('mixed-use', 'Mixed Use', '#7c3aed'),
    MarketSector('parks', 'Parks & Recreation', '#059669'),
    MarketSector('housing', 'Housing', '#0891b2'),
    MarketSector('professional', 'Professional Offices', '#64748b'),
    MarketSector('industrial', 'Industrial/Manufacturing', '#ea580c'),
    MarketSector('research', 'Research and Development', '#8b5cf6'),
]

SECTOR_IDS = [sector.id for sector in MARKET_SECTORS]

SECTOR_CHOICES = [(sector.id, sector.name) for sector in MARKET_SECTORS]

# Normalized alternative spellings seen in exported spreadsheets
SECTOR_SYNONYMS = {
    'retail': 'commercial',
    'hospitality': 'commercial',
    'hotel': 'commercial',
    'k12': 'education',
    'higher education': 'education',
    'academic': 'education',
    'school': 'education',
    'university': 'education',
    'municipal': 'government',
    'federal': 'government',
    'state': 'government',
    'public': 'government',
    'distribution': 'manufacturing',
    'warehouse': 'manufacturing',
    'logistics': 'manufacturing',
    'mixed': 'mixed-use',
    'mixed use': 'mixed-use',
    'park': 'parks',
    'recreation': 'parks',
    'residential': 'housing',
    'multifamily': 'housing',
    'multi family': 'housing',
    'apartments': 'housing',
    'office': 'professional',
    'offices': 'professional',
    'professional office': 'professional',
    'administrative': 'professional',
    'industry': 'industrial',
    'r&d': 'research',
    'r and d': 'research',
    'laboratory': 'research',
    'lab': 'research',
}

# Checked in order; first hit wins
SECTOR_KEYWORDS = [
    (('housing', 'residential'), 'housing'),
    (('parks', 'recreation'), 'parks'),
    (('industrial', 'manufacturing'), 'industrial'),
    (('academic', 'education'), 'education'),
    (('office', 'administrative'), 'professional'),
    (('research', 'development'), 'research'),
    (('mixed',), 'mixed-use'),
    (('commercial',), 'commercial'),
    (('government',), 'government'),
]


def _normalize(value):
    value = value.strip().lower().replace('_', ' ').replace('-', ' ').replace('/', ' ')
    return re.sub(r'\s+', ' ', value)


def get_sector(sector_id):
    """Return the MarketSector with this id, or None."""
    for sector in MARKET_SECTORS:
        if sector.id == sector_id:
            return sector
    return None


def get_sector_color(sector_id):
    sector = get_sector(sector_id)
    return sector.color if sector else DEFAULT_COLOR


def match_market_sector(value):
    """
    Match a loosely written sector against the known sectors.

    Ids, display names and synonyms are compared case-insensitively with
    dashes, underscores and repeated spaces folded. Returns the sector id or
    None when nothing matches.
    """
    if not value or not value.strip():
        return None

    normalized = _normalize(value)

    for sector in MARKET_SECTORS:
        if normalized == _normalize(sector.id) or normalized == _normalize(sector.name):
            return sector.id

    # "Parks and Recreation" vs "Parks & Recreation"
    ampersand_folded = normalized.replace(' and ', ' & ')
    for sector in MARKET_SECTORS:
        if ampersand_folded == _normalize(sector.name):
            return sector.id

    return SECTOR_SYNONYMS.get(normalized)


def infer_market_sector(description):
    """
    Guess a sector from a free-text project type description.

    Returns the sector id, or None when no keyword matches.
    """
    if not description:
        return None

    text = description.lower()
    for keywords, sector_id in SECTOR_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return sector_id
    return None
