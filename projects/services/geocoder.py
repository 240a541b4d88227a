"""
Location resolution policy layered over the raw geocoding client.

A lookup walks a fixed chain of attempts and stops at the first hit:

    EXACT          "address, city" (or just the city)
    DISAMBIGUATED  a configured alias for cities known to be ambiguous
    STATE_SWEEP    "city, <state>" for each configured neighbouring state
    BARE_CITY      the city name alone, jittered so pins do not stack
    FAILED         nothing resolved

Attempts that would repeat a query already sent are skipped.
"""
import logging
import random
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from django.conf import settings

from .geocoding_client import GeocodingClient

logger = logging.getLogger(__name__)

EXACT = 'exact'
DISAMBIGUATED = 'disambiguated'
STATE_SWEEP = 'state_sweep'
BARE_CITY = 'bare_city'
FAILED = 'failed'

# Roughly half a kilometre either way
JITTER_DEGREES = 0.005

_STATE_NAMES = {
    'NY': 'new york',
    'VT': 'vermont',
    'MA': 'massachusetts',
    'CT': 'connecticut',
    'NJ': 'new jersey',
    'PA': 'pennsylvania',
    'NH': 'new hampshire',
    'ME': 'maine',
    'RI': 'rhode island',
}


def _mentions(term, text):
    """True when `term` appears in `text` as a whole word or phrase."""
    return re.search(rf'(^|[\s,]){re.escape(term.lower())}($|[\s,.])', text) is not None


def jitter(coordinates, amount=JITTER_DEGREES, rng=random):
    """Offset a coordinate pair by up to `amount` degrees on each axis, clamped to Earth bounds."""
    lat, lon = coordinates
    lat = lat + rng.uniform(-amount, amount)
    lon = lon + rng.uniform(-amount, amount)
    return (max(-90.0, min(90.0, lat)), max(-180.0, min(180.0, lon)))


@dataclass
class Attempt:
    state: str
    query: str
    found: bool


class Geocoder:
    """Resolve (address, city) pairs with disambiguation and state fallbacks."""

    def __init__(self, client=None, states=None, city_aliases=None, rng=None):
        self.client = client or GeocodingClient()
        self.states = list(states if states is not None else settings.PORTFOLIO_GEOCODER_STATES)
        aliases = city_aliases if city_aliases is not None else settings.PORTFOLIO_CITY_ALIASES
        self.city_aliases = {key.strip().lower(): value for key, value in aliases.items()}
        self.rng = rng or random.Random()
        self.trace: List[Attempt] = []

    def _names_state(self, city):
        """True when the city string already carries a state qualifier."""
        lowered = city.lower()
        for code, name in _STATE_NAMES.items():
            if _mentions(code, lowered) or _mentions(name, lowered):
                return True
        return any(_mentions(state, lowered) for state in self.states)

    def _plan(self, address, city):
        """Yield (state, query) pairs in resolution order."""
        address = (address or '').strip()
        city = (city or '').strip()

        yield EXACT, f"{address}, {city}" if address and city else (address or city)

        if not city:
            return

        alias = self.city_aliases.get(city.lower())
        if alias:
            yield DISAMBIGUATED, f"{address}, {alias}" if address else alias

        if not self._names_state(city):
            for state in self.states:
                yield STATE_SWEEP, f"{city}, {state}"

        yield BARE_CITY, city

    def resolve(self, address: str, city: str) -> Optional[Tuple[float, float]]:
        """
        Resolve a location.

        Returns:
            (latitude, longitude) or None when every attempt failed.
            The attempts made are left in `self.trace`.
        """
        self.trace = []
        tried = set()

        for state, query in self._plan(address, city):
            if not query or query.lower() in tried:
                continue
            tried.add(query.lower())

            coordinates = self.client.search(query)
            self.trace.append(Attempt(state, query, coordinates is not None))
            if coordinates is None:
                continue

            if state == BARE_CITY:
                coordinates = jitter(coordinates, rng=self.rng)
            logger.debug('Resolved %r via %s: %s', query, state, coordinates)
            return coordinates

        self.trace.append(Attempt(FAILED, '', False))
        logger.warning('Could not geocode address=%r city=%r', address, city)
        return None
