#!/usr/bin/env python3
"""
Dictionary search and filtering engine
Filters an in-memory corpus of entries, ranks matches and paginates results
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .definitions import (
    Meaning,
    Pagination,
    SearchFilters,
    SearchMetadata,
    SearchResult,
    Word,
    resolve_user_id,
    spanish_sort_key,
)

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 100
MAX_FILTER_OPTIONS = 10
MAX_LIMIT = 1000
DEFAULT_LIMIT = 20
META_ONLY_VALUES = ('true', '1')

MATCH_ORDER = {'exact': 0, 'partial': 1, 'filter': 2}


class SearchValidationError(ValueError):
    """Raised when search parameters are out of bounds"""
    pass


@dataclass
class SearchRequest:
    filters: SearchFilters
    page: int
    limit: int
    meta_only: bool = False


def parse_list_param(value: Optional[str]) -> List[str]:
    """Parse a comma-separated parameter into a list of non-empty values"""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def parse_integer(value: Optional[str], fallback: int) -> int:
    if not value:
        return fallback
    try:
        return int(value.strip(), 10)
    except ValueError:
        return fallback


def parse_search_request(params: Mapping[str, str]) -> SearchRequest:
    """Validate raw query-string parameters and build a search request"""
    query = (params.get('q') or '').strip()
    if len(query) > MAX_QUERY_LENGTH:
        raise SearchValidationError("Query too long")

    lists = {
        name: parse_list_param(params.get(name))
        for name in ('categories', 'styles', 'origins', 'letters', 'assignedTo')
    }
    if any(len(values) > MAX_FILTER_OPTIONS for values in lists.values()):
        raise SearchValidationError("Too many filter options")

    # An explicit (even empty) status is kept; absent means every status
    status = params.get('status')

    meta_only = (params.get('metaOnly') or '').lower() in META_ONLY_VALUES
    page = max(parse_integer(params.get('page'), 1), 1)
    limit = max(min(parse_integer(params.get('limit'), DEFAULT_LIMIT), MAX_LIMIT), 1)

    filters = SearchFilters(
        query=query,
        categories=lists['categories'],
        styles=lists['styles'],
        origins=lists['origins'],
        letters=lists['letters'],
        status=status,
        assigned_to=lists['assignedTo'],
    )
    return SearchRequest(filters=filters, page=page, limit=limit, meta_only=meta_only)


def match_type(lemma: str, query: Optional[str]) -> str:
    if not query:
        return 'filter'
    normalized_query = query.casefold()
    normalized_lemma = lemma.casefold()
    if normalized_lemma == normalized_query:
        return 'exact'
    if normalized_query in normalized_lemma:
        return 'partial'
    return 'filter'


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.casefold() in haystack.casefold()


def _assigned_ids(values: Sequence[str]) -> Set[int]:
    ids = set()
    for value in values:
        user_id = resolve_user_id(value)
        if user_id is not None:
            ids.add(user_id)
    return ids


def meaning_matches(meaning: Meaning, filters: SearchFilters, lemma_hit: bool = False) -> bool:
    """Text, origin, category and style conditions checked on a single meaning"""
    if filters.query and not lemma_hit and not _contains(meaning.meaning, filters.query):
        return False
    if filters.origins and not any(_contains(meaning.origin, origin) for origin in filters.origins):
        return False
    if filters.categories and not set(filters.categories).intersection(meaning.categories):
        return False
    if filters.styles and not set(filters.styles).intersection(meaning.styles):
        return False
    return True


def word_matches(word: Word, filters: SearchFilters, assigned_ids: Optional[Set[int]] = None) -> bool:
    """
    AND across filter kinds, OR within the values of one kind.
    Meaning-level conditions must all hold on the same meaning; a lemma
    match stands in for the meaning text.
    """
    if filters.status and word.status != filters.status:
        return False

    if assigned_ids and word.assigned_to not in assigned_ids:
        return False

    if filters.letters:
        letters = {letter.lower() for letter in filters.letters}
        if word.letter.lower() not in letters:
            return False

    lemma_hit = bool(filters.query) and _contains(word.lemma, filters.query)
    if not word.meanings:
        if filters.origins or filters.categories or filters.styles:
            return False
        return not filters.query or lemma_hit

    return any(meaning_matches(m, filters, lemma_hit) for m in word.meanings)


def search_words(words: Iterable[Word], filters: SearchFilters) -> List[SearchResult]:
    """Filter the corpus and rank results: exact, partial, then filter-only matches"""
    assigned_ids = _assigned_ids(filters.assigned_to)
    if filters.assigned_to and not assigned_ids:
        logger.debug(f"Ignoring non-numeric assignedTo values: {filters.assigned_to}")

    results = [
        SearchResult(
            word=word,
            letter=word.letter,
            match_type=match_type(word.lemma, filters.query),
            status=word.status,
        )
        for word in words
        if word_matches(word, filters, assigned_ids)
    ]
    results.sort(key=lambda r: (MATCH_ORDER[r.match_type], spanish_sort_key(r.word.lemma)))
    return results


def paginate(results: Sequence[Any], page: int, limit: int) -> Tuple[List[Any], Pagination]:
    total = len(results)
    start = (page - 1) * limit
    end = start + limit
    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
        has_next=end < total,
        has_prev=page > 1,
    )
    return list(results[start:end]), pagination


def collect_metadata(words: Iterable[Word]) -> SearchMetadata:
    """Distinct categories, styles and origins present in the corpus"""
    categories: Set[str] = set()
    styles: Set[str] = set()
    origins: Set[str] = set()
    for word in words:
        for meaning in word.meanings:
            categories.update(meaning.categories)
            styles.update(meaning.styles)
            if meaning.origin:
                origins.add(meaning.origin)
    return SearchMetadata(
        categories=sorted(categories, key=spanish_sort_key),
        styles=sorted(styles, key=spanish_sort_key),
        origins=sorted(origins, key=spanish_sort_key),
    )


def letter_counts(words: Iterable[Word]) -> List[Dict[str, Any]]:
    counts = Counter(word.letter for word in words)
    return [
        {'letter': letter, 'count': counts[letter]}
        for letter in sorted(counts, key=spanish_sort_key)
    ]


def dictionary_stats(words: Sequence[Word]) -> Dict[str, Any]:
    by_letter = letter_counts(words)
    return {
        'total_words': len(words),
        'total_meanings': sum(len(word.meanings) for word in words),
        'total_letters': len(by_letter),
        'words_by_letter': {entry['letter']: entry['count'] for entry in by_letter},
    }
