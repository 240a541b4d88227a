"""
Nominatim geocoding client.

Turns free-text addresses into (latitude, longitude) pairs and back, using the
OpenStreetMap Nominatim search API (or any server speaking the same protocol).

Lookups never raise to callers: network errors, non-2xx responses and
malformed payloads are logged and reported as "not found" (None).
"""
import logging
import time
from typing import Dict, List, Optional, Tuple

import requests
from django.conf import settings

from projects.exceptions import GeocodingError
from projects.records import is_valid_coordinates

logger = logging.getLogger(__name__)


class GeocodingClient:
    """Client for a Nominatim-compatible geocoding API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        min_interval: Optional[float] = None,
    ):
        """
        Initialize the geocoding client.

        Args:
            base_url: API root (defaults to PORTFOLIO_GEOCODER_URL)
            user_agent: Identifying User-Agent, required by Nominatim's usage policy
            timeout: Per-request timeout in seconds
            min_interval: Minimum seconds between two requests from this client
        """
        self.base_url = (base_url or settings.PORTFOLIO_GEOCODER_URL).rstrip('/')
        self.user_agent = user_agent or settings.PORTFOLIO_GEOCODER_USER_AGENT
        self.timeout = timeout if timeout is not None else settings.PORTFOLIO_GEOCODER_TIMEOUT
        self.min_interval = (
            min_interval if min_interval is not None else settings.PORTFOLIO_GEOCODER_MIN_INTERVAL
        )
        self._last_request_at = None

    def _throttle(self):
        if not self.min_interval or self._last_request_at is None:
            return
        elapsed = time.monotonic() - self._last_request_at
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)

    def _make_request(self, endpoint: str, params: Dict):
        """
        Make a GET request to the geocoding API.

        Args:
            endpoint: API endpoint (e.g., '/search')
            params: Query parameters (format=json is added)

        Returns:
            Decoded JSON payload

        Raises:
            GeocodingError: on any transport, HTTP or decoding failure
        """
        self._throttle()
        url = f"{self.base_url}{endpoint}"
        headers = {'User-Agent': self.user_agent}

        try:
            response = requests.get(
                url,
                params={'format': 'json', **params},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise GeocodingError(f'Geocoding request failed: {e}') from e
        except ValueError as e:
            raise GeocodingError(f'Geocoding response was not JSON: {e}') from e
        finally:
            self._last_request_at = time.monotonic()

    def search(self, query: str) -> Optional[Tuple[float, float]]:
        """
        Look up a free-text query.

        Args:
            query: Address, city or any place description

        Returns:
            (latitude, longitude) of the best match, or None
        """
        if not query or not query.strip():
            return None

        try:
            data = self._make_request('/search', {'q': query.strip(), 'limit': 1, 'addressdetails': 1})
        except GeocodingError as e:
            logger.warning('Geocoding error for %r: %s', query, e)
            return None

        return self._parse_search_result(query, data)

    def _parse_search_result(self, query: str, data) -> Optional[Tuple[float, float]]:
        if not isinstance(data, list) or not data:
            logger.info('No geocoding match for %r', query)
            return None

        first = data[0]
        try:
            lat = float(first['lat'])
            lon = float(first['lon'])
        except (KeyError, TypeError, ValueError):
            logger.warning('Malformed geocoding result for %r: %r', query, first)
            return None

        if not is_valid_coordinates(lat, lon):
            logger.warning('Geocoding result out of bounds for %r: %s, %s', query, lat, lon)
            return None
        return (lat, lon)

    def geocode(self, address: str, city: str) -> Optional[Tuple[float, float]]:
        """Resolve 'address, city' (or just the city when no address is given)."""
        full_address = f"{address}, {city}" if address and address.strip() else (city or '')
        return self.search(full_address)

    def reverse(self, lat: float, lon: float) -> Optional[str]:
        """
        Find the display name of the place at a coordinate.

        Returns:
            Display name string, or None
        """
        if not is_valid_coordinates(lat, lon):
            return None

        try:
            data = self._make_request('/reverse', {'lat': lat, 'lon': lon, 'addressdetails': 1})
        except GeocodingError as e:
            logger.warning('Reverse geocoding error for %s, %s: %s', lat, lon, e)
            return None

        if isinstance(data, dict) and data.get('display_name'):
            return data['display_name']
        return None

    def suggest(self, query: str, limit: int = 5) -> List[Dict]:
        """
        Return up to `limit` candidate places for address autocompletion.

        Each candidate has 'display_name' and 'coordinates'.
        """
        if not query or len(query.strip()) < 3:
            return []

        try:
            data = self._make_request('/search', {'q': query.strip(), 'limit': limit, 'addressdetails': 1})
        except GeocodingError as e:
            logger.warning('Address suggestion error for %r: %s', query, e)
            return []

        suggestions = []
        for item in data if isinstance(data, list) else []:
            try:
                lat = float(item['lat'])
                lon = float(item['lon'])
            except (KeyError, TypeError, ValueError):
                continue
            suggestions.append({
                'display_name': item.get('display_name', ''),
                'coordinates': [lat, lon],
            })
        return suggestions
