"""
Tests for the geocoding client and the location resolution chain.

No test talks to the network: requests.get is mocked for the client, and
the resolver is given a fake client that answers from a table.
"""
import random

import requests
from django.test import SimpleTestCase
from unittest import mock

from projects.services.geocoder import (
    BARE_CITY,
    DISAMBIGUATED,
    EXACT,
    FAILED,
    JITTER_DEGREES,
    STATE_SWEEP,
    Geocoder,
    jitter,
)
from projects.services.geocoding_client import GeocodingClient


def fake_response(payload, status_code=200):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f'{status_code} Error', response=response
        )
    return response


class GeocodingClientTests(SimpleTestCase):

    def setUp(self):
        self.client = GeocodingClient(
            base_url='https://geo.example.com/',
            user_agent='portfolio-tests',
            timeout=5,
            min_interval=0,
        )

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_search_returns_first_match(self, mock_get):
        mock_get.return_value = fake_response([{'lat': '42.6526', 'lon': '-73.7562'}])

        self.assertEqual(self.client.search('Albany, NY'), (42.6526, -73.7562))

        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], 'https://geo.example.com/search')
        self.assertEqual(kwargs['params']['q'], 'Albany, NY')
        self.assertEqual(kwargs['params']['format'], 'json')
        self.assertEqual(kwargs['headers']['User-Agent'], 'portfolio-tests')
        self.assertEqual(kwargs['timeout'], 5)

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_search_no_match(self, mock_get):
        mock_get.return_value = fake_response([])
        self.assertIsNone(self.client.search('Nowhere'))

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_search_blank_query_makes_no_request(self, mock_get):
        self.assertIsNone(self.client.search('  '))
        mock_get.assert_not_called()

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_network_error_is_not_found(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError('Failed to connect')
        self.assertIsNone(self.client.search('Albany'))

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_http_error_is_not_found(self, mock_get):
        mock_get.return_value = fake_response([], status_code=503)
        self.assertIsNone(self.client.search('Albany'))

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_malformed_payload_is_not_found(self, mock_get):
        mock_get.return_value = fake_response([{'lat': 'north'}])
        self.assertIsNone(self.client.search('Albany'))

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_out_of_bounds_result_is_not_found(self, mock_get):
        mock_get.return_value = fake_response([{'lat': '95', 'lon': '0'}])
        self.assertIsNone(self.client.search('Albany'))

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_geocode_joins_address_and_city(self, mock_get):
        mock_get.return_value = fake_response([{'lat': '1', 'lon': '2'}])
        self.client.geocode('1 Main St', 'Troy')
        self.assertEqual(mock_get.call_args[1]['params']['q'], '1 Main St, Troy')

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_reverse(self, mock_get):
        mock_get.return_value = fake_response({'display_name': 'Albany, New York'})
        self.assertEqual(self.client.reverse(42.65, -73.75), 'Albany, New York')
        self.assertTrue(mock_get.call_args[0][0].endswith('/reverse'))

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_suggest(self, mock_get):
        mock_get.return_value = fake_response([
            {'display_name': 'Albany, NY', 'lat': '42.65', 'lon': '-73.75'},
            {'display_name': 'Broken'},
        ])
        suggestions = self.client.suggest('Alban')
        self.assertEqual(suggestions, [{'display_name': 'Albany, NY', 'coordinates': [42.65, -73.75]}])

    @mock.patch('projects.services.geocoding_client.requests.get')
    def test_suggest_needs_three_characters(self, mock_get):
        self.assertEqual(self.client.suggest('Al'), [])
        mock_get.assert_not_called()


class TableClient:
    """Answers search() from a dict and records every query."""

    def __init__(self, answers):
        self.answers = answers
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        return self.answers.get(query)


class GeocoderTests(SimpleTestCase):

    def make_geocoder(self, answers, aliases=None):
        return Geocoder(
            client=TableClient(answers),
            states=['NY', 'VT', 'MA'],
            city_aliases=aliases or {},
            rng=random.Random(7),
        )

    def test_exact_match_stops_the_chain(self):
        geocoder = self.make_geocoder({'1 Main St, Troy': (42.7, -73.7)})
        self.assertEqual(geocoder.resolve('1 Main St', 'Troy'), (42.7, -73.7))
        self.assertEqual([attempt.state for attempt in geocoder.trace], [EXACT])

    def test_alias_is_tried_before_state_sweep(self):
        geocoder = self.make_geocoder(
            {'Rome, Oneida County, NY': (43.21, -75.45)},
            aliases={'Rome': 'Rome, Oneida County, NY'},
        )
        self.assertEqual(geocoder.resolve('', 'Rome'), (43.21, -75.45))
        self.assertEqual([attempt.state for attempt in geocoder.trace], [EXACT, DISAMBIGUATED])

    def test_state_sweep_in_configured_order(self):
        geocoder = self.make_geocoder({'Bennington, VT': (42.88, -73.19)})
        self.assertEqual(geocoder.resolve('', 'Bennington'), (42.88, -73.19))
        self.assertEqual(geocoder.client.queries, ['Bennington', 'Bennington, NY', 'Bennington, VT'])
        self.assertEqual(geocoder.trace[-1].state, STATE_SWEEP)

    def test_city_naming_a_state_skips_the_sweep(self):
        geocoder = self.make_geocoder({})
        self.assertIsNone(geocoder.resolve('', 'Albany, NY'))
        self.assertEqual(geocoder.client.queries, ['Albany, NY'])

    def test_state_names_only_match_whole_words(self):
        geocoder = self.make_geocoder({'Germaine, NY': (42.9, -74.0), 'New Yorkshire, VT': (43.0, -73.0)})

        self.assertEqual(geocoder.resolve('', 'Germaine'), (42.9, -74.0))
        self.assertEqual(geocoder.resolve('', 'New Yorkshire'), (43.0, -73.0))
        self.assertEqual(
            geocoder.client.queries,
            ['Germaine', 'Germaine, NY', 'New Yorkshire', 'New Yorkshire, NY', 'New Yorkshire, VT'],
        )

    def test_full_state_name_skips_the_sweep(self):
        geocoder = self.make_geocoder({})
        self.assertIsNone(geocoder.resolve('', 'Portland, Maine'))
        self.assertEqual(geocoder.client.queries, ['Portland, Maine'])

    def test_bare_city_fallback_is_jittered(self):
        geocoder = self.make_geocoder({'Saratoga Springs': (43.08, -73.78)})
        lat, lon = geocoder.resolve('Excelsior Park', 'Saratoga Springs')

        states = [attempt.state for attempt in geocoder.trace]
        self.assertEqual(states[0], EXACT)
        self.assertEqual(states[-1], BARE_CITY)
        self.assertLessEqual(abs(lat - 43.08), JITTER_DEGREES)
        self.assertLessEqual(abs(lon - -73.78), JITTER_DEGREES)

    def test_repeated_queries_are_not_sent_twice(self):
        geocoder = self.make_geocoder({})
        geocoder.resolve('', 'Nowhere')
        self.assertEqual(len(geocoder.client.queries), len(set(geocoder.client.queries)))
        # EXACT and BARE_CITY are the same query without an address
        self.assertEqual(geocoder.client.queries.count('Nowhere'), 1)

    def test_failure_is_recorded(self):
        geocoder = self.make_geocoder({})
        self.assertIsNone(geocoder.resolve('1 Main St', 'Nowhere'))
        self.assertEqual(geocoder.trace[-1].state, FAILED)
        self.assertEqual(
            geocoder.client.queries,
            ['1 Main St, Nowhere', 'Nowhere, NY', 'Nowhere, VT', 'Nowhere, MA', 'Nowhere'],
        )


class JitterTests(SimpleTestCase):

    def test_stays_within_amount(self):
        rng = random.Random(1)
        for _ in range(100):
            lat, lon = jitter((42.0, -73.0), rng=rng)
            self.assertLessEqual(abs(lat - 42.0), JITTER_DEGREES)
            self.assertLessEqual(abs(lon - -73.0), JITTER_DEGREES)

    def test_clamped_to_earth_bounds(self):
        rng = random.Random(3)
        for _ in range(50):
            lat, lon = jitter((90.0, 180.0), rng=rng)
            self.assertLessEqual(lat, 90.0)
            self.assertLessEqual(lon, 180.0)
