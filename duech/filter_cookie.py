#!/usr/bin/env python3
"""Advanced search filter persistence in a client cookie."""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import List, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

COOKIE_NAME = 'duech_advanced_search_filters'
COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days

_LIST_FIELDS = ('selectedCategories', 'selectedStyles', 'selectedOrigins', 'selectedLetters')


@dataclass
class AdvancedSearchFilters:
    query: str = ''
    selectedCategories: List[str] = field(default_factory=list)
    selectedStyles: List[str] = field(default_factory=list)
    selectedOrigins: List[str] = field(default_factory=list)
    selectedLetters: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.query and not any(getattr(self, name) for name in _LIST_FIELDS)


def parse_filters(raw: Optional[str]) -> AdvancedSearchFilters:
    """Decode the cookie value; any malformed value yields empty filters"""
    if not raw:
        return AdvancedSearchFilters()
    try:
        data = json.loads(unquote(raw))
    except (ValueError, TypeError) as e:
        logger.warning(f"Error reading advanced search filters cookie: {e}")
        return AdvancedSearchFilters()

    if not isinstance(data, dict) or not isinstance(data.get('query'), str):
        return AdvancedSearchFilters()
    lists = {}
    for name in _LIST_FIELDS:
        value = data.get(name)
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            return AdvancedSearchFilters()
        lists[name] = value
    return AdvancedSearchFilters(query=data['query'], **lists)


def serialize_filters(filters: AdvancedSearchFilters) -> str:
    return quote(json.dumps(asdict(filters), ensure_ascii=False, separators=(',', ':')))


def read_filters(request) -> AdvancedSearchFilters:
    return parse_filters(request.cookies.get(COOKIE_NAME))


def write_filters(response, filters: AdvancedSearchFilters):
    response.set_cookie(
        key=COOKIE_NAME,
        value=serialize_filters(filters),
        max_age=COOKIE_MAX_AGE,
        path='/',
        samesite='lax',
    )


def clear_filters(response):
    response.delete_cookie(key=COOKIE_NAME, path='/', samesite='lax')


def filters_changed(previous: AdvancedSearchFilters, current: AdvancedSearchFilters) -> bool:
    """True when any filter list differs in length or order (the query is not compared)"""
    return any(getattr(previous, name) != getattr(current, name) for name in _LIST_FIELDS)
