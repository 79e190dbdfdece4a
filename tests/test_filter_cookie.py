"""Tests for advanced search filter persistence."""

from urllib.parse import quote

from starlette.requests import Request
from starlette.responses import Response

from duech.filter_cookie import (
    COOKIE_MAX_AGE,
    COOKIE_NAME,
    AdvancedSearchFilters,
    clear_filters,
    filters_changed,
    parse_filters,
    read_filters,
    serialize_filters,
    write_filters,
)


def request_with_cookie(value):
    headers = [(b'cookie', f'{COOKIE_NAME}={value}'.encode())]
    return Request({'type': 'http', 'method': 'GET', 'path': '/', 'headers': headers, 'query_string': b''})


def test_round_trip_through_cookie():
    filters = AdvancedSearchFilters(query='ñeque', selectedCategories=['m'], selectedLetters=['ñ'])
    assert read_filters(request_with_cookie(serialize_filters(filters))) == filters


class TestParseFilters:
    """Malformed cookies fall back to empty filters"""

    def test_missing(self):
        assert parse_filters(None).is_empty

    def test_invalid_json(self):
        assert parse_filters('%7Bnot-json').is_empty

    def test_wrong_shape(self):
        bad = quote('{"query": "fome", "selectedCategories": "adj", "selectedStyles": [],'
                    ' "selectedOrigins": [], "selectedLetters": []}')
        assert parse_filters(bad) == AdvancedSearchFilters()

    def test_non_string_items(self):
        bad = quote('{"query": "", "selectedCategories": [1], "selectedStyles": [],'
                    ' "selectedOrigins": [], "selectedLetters": []}')
        assert parse_filters(bad).is_empty

    def test_missing_query(self):
        assert parse_filters(quote('{"selectedCategories": []}')).is_empty


def test_write_and_clear_cookie():
    response = Response()
    write_filters(response, AdvancedSearchFilters(query='fome'))
    header = response.headers['set-cookie']
    assert header.startswith(f'{COOKIE_NAME}=')
    assert f'Max-Age={COOKIE_MAX_AGE}' in header
    assert 'SameSite=lax' in header

    cleared = Response()
    clear_filters(cleared)
    assert 'Max-Age=0' in cleared.headers['set-cookie']


def test_filters_changed():
    base = AdvancedSearchFilters(selectedCategories=['adj', 'm'])
    assert not filters_changed(base, AdvancedSearchFilters(query='otra', selectedCategories=['adj', 'm']))
    assert filters_changed(base, AdvancedSearchFilters(selectedCategories=['m', 'adj']))
    assert filters_changed(base, AdvancedSearchFilters(selectedCategories=['adj']))
    assert filters_changed(base, AdvancedSearchFilters(selectedCategories=['adj', 'm'], selectedLetters=['a']))
