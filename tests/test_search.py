"""Tests for the search and filtering engine."""

import pytest

from duech.definitions import Meaning, SearchFilters, Word
from duech.search import (
    MAX_LIMIT,
    SearchValidationError,
    collect_metadata,
    dictionary_stats,
    letter_counts,
    match_type,
    paginate,
    parse_list_param,
    parse_search_request,
    search_words,
)


def make_word(lemma, text='Definición', status='published', categories=None, styles=None,
              origin=None, assigned_to=None):
    meaning = Meaning(number=1, meaning=text, categories=categories or [], styles=styles or [],
                      origin=origin)
    return Word(lemma=lemma, meanings=[meaning], status=status, assigned_to=assigned_to)


@pytest.fixture
def words():
    return [
        make_word('fomeque', 'Algo aburrido', categories=['adj']),
        make_word('latero', 'Que es fome', categories=['adj'], styles=['espon']),
        make_word('fome', 'Aburrido', categories=['adj'], styles=['espon']),
        make_word('once', 'Merienda', categories=['f']),
        make_word('ñeque', 'Fuerza', categories=['m'], styles=['espon'], origin='Quechua'),
        make_word('nana', 'Empleada', categories=['f']),
        make_word('guagua', 'Niño de pecho', categories=['f'], origin='quechua'),
        make_word('pololo', 'Novio', status='draft', categories=['m'], assigned_to=2),
    ]


def lemmas(results):
    return [result.word.lemma for result in results]


def test_parse_list_param():
    assert parse_list_param(' a, ,b ,') == ['a', 'b']
    assert parse_list_param(None) == []
    assert parse_list_param('') == []


def test_match_type():
    assert match_type('Fome', 'fome') == 'exact'
    assert match_type('fomeque', 'FOME') == 'partial'
    assert match_type('bacán', 'fome') == 'filter'
    assert match_type('bacán', None) == 'filter'
    assert match_type('bacán', '') == 'filter'


class TestSearchWords:
    """Filtering and ranking of dictionary entries"""

    def test_ranks_exact_then_partial_then_definition_matches(self, words):
        results = search_words(words, SearchFilters(query='fome'))
        assert lemmas(results) == ['fome', 'fomeque', 'latero']
        assert [r.match_type for r in results] == ['exact', 'partial', 'filter']

    def test_orders_with_spanish_collation(self, words):
        results = search_words(words, SearchFilters(letters=['n', 'ñ', 'o']))
        assert lemmas(results) == ['nana', 'ñeque', 'once']

    def test_no_status_means_every_status(self, words):
        assert 'pololo' in lemmas(search_words(words, SearchFilters()))

    def test_status_filter(self, words):
        assert lemmas(search_words(words, SearchFilters(status='draft'))) == ['pololo']
        assert 'pololo' not in lemmas(search_words(words, SearchFilters(status='published')))

    def test_empty_status_means_every_status(self, words):
        assert len(search_words(words, SearchFilters(status=''))) == len(words)

    def test_letters_are_case_insensitive(self, words):
        assert lemmas(search_words(words, SearchFilters(letters=['G']))) == ['guagua']

    def test_origin_substring(self, words):
        results = search_words(words, SearchFilters(origins=['QUECH']))
        assert lemmas(results) == ['guagua', 'ñeque']

    def test_or_within_kind_and_across_kinds(self, words):
        either = search_words(words, SearchFilters(categories=['f', 'm']))
        assert set(lemmas(either)) == {'once', 'ñeque', 'nana', 'guagua', 'pololo'}

        both = search_words(words, SearchFilters(categories=['f', 'm'], styles=['espon']))
        assert lemmas(both) == ['ñeque']

    def test_assigned_to(self, words):
        assert lemmas(search_words(words, SearchFilters(assigned_to=['2', 'x']))) == ['pololo']

    def test_non_numeric_assignees_are_ignored(self, words):
        assert len(search_words(words, SearchFilters(assigned_to=['nobody']))) == len(words)

    def test_query_is_case_insensitive_in_definitions(self, words):
        assert lemmas(search_words(words, SearchFilters(query='MERIENDA'))) == ['once']

    def test_meaning_filters_hold_on_the_same_meaning(self):
        chala = Word(lemma='chala', meanings=[
            Meaning(number=1, meaning='Sandalia', categories=['f']),
            Meaning(number=2, meaning='Ordinario, de mal gusto', styles=['vulgar']),
        ])
        assert search_words([chala], SearchFilters(categories=['f'], styles=['vulgar'])) == []
        assert lemmas(search_words([chala], SearchFilters(categories=['f']))) == ['chala']
        assert lemmas(search_words([chala], SearchFilters(styles=['vulgar']))) == ['chala']

    def test_definition_text_and_filters_share_a_meaning(self):
        chala = Word(lemma='chala', meanings=[
            Meaning(number=1, meaning='Sandalia', categories=['f']),
            Meaning(number=2, meaning='Ordinario', categories=['adj']),
        ])
        assert search_words([chala], SearchFilters(query='ordinario', categories=['f'])) == []
        assert lemmas(search_words([chala], SearchFilters(query='sandalia', categories=['f']))) == ['chala']

    def test_lemma_match_stands_in_for_definition_text(self):
        chala = Word(lemma='chala', meanings=[
            Meaning(number=1, meaning='Sandalia', categories=['f'], origin='Quechua'),
        ])
        results = search_words([chala], SearchFilters(query='chala', origins=['quechua']))
        assert [r.match_type for r in results] == ['exact']

    def test_word_without_meanings(self):
        bare = Word(lemma='cototo')
        assert lemmas(search_words([bare], SearchFilters(query='coto'))) == ['cototo']
        assert search_words([bare], SearchFilters(query='chichón')) == []
        assert search_words([bare], SearchFilters(categories=['m'])) == []


class TestPagination:

    def test_middle_page(self):
        items, pagination = paginate(list(range(45)), page=2, limit=20)
        assert items == list(range(20, 40))
        assert pagination.total == 45
        assert pagination.total_pages == 3
        assert pagination.has_next
        assert pagination.has_prev

    def test_last_page(self):
        items, pagination = paginate(list(range(45)), page=3, limit=20)
        assert items == list(range(40, 45))
        assert not pagination.has_next

    def test_empty(self):
        items, pagination = paginate([], page=1, limit=20)
        assert items == []
        assert pagination.total_pages == 0
        assert not pagination.has_next
        assert not pagination.has_prev

    def test_to_dict_keys(self):
        _, pagination = paginate([1, 2, 3], page=1, limit=2)
        assert pagination.to_dict() == {
            'page': 1, 'limit': 2, 'total': 3, 'totalPages': 2, 'hasNext': True, 'hasPrev': False,
        }


class TestParseSearchRequest:
    """Validation of raw query-string parameters"""

    def test_defaults(self):
        request = parse_search_request({})
        assert request.page == 1
        assert request.limit == 20
        assert request.filters.status is None
        assert request.filters.query == ''
        assert not request.meta_only

    def test_query_too_long(self):
        with pytest.raises(SearchValidationError, match='Query too long'):
            parse_search_request({'q': 'a' * 101})

    def test_query_at_limit(self):
        assert parse_search_request({'q': 'a' * 100}).filters.query == 'a' * 100

    def test_too_many_filter_options(self):
        values = ','.join(f'c{i}' for i in range(11))
        with pytest.raises(SearchValidationError, match='Too many filter options'):
            parse_search_request({'categories': values})

    def test_limit_and_page_are_clamped(self):
        assert parse_search_request({'limit': '5000'}).limit == MAX_LIMIT
        assert parse_search_request({'limit': '0'}).limit == 1
        assert parse_search_request({'limit': 'abc'}).limit == 20
        assert parse_search_request({'page': '-3'}).page == 1

    def test_explicit_empty_status_is_kept(self):
        assert parse_search_request({'status': ''}).filters.status == ''

    def test_lists_and_meta_only(self):
        request = parse_search_request({'letters': 'a,b', 'assignedTo': '1,2', 'metaOnly': 'true'})
        assert request.filters.letters == ['a', 'b']
        assert request.filters.assigned_to == ['1', '2']
        assert request.meta_only


def test_collect_metadata(words):
    metadata = collect_metadata(words)
    assert metadata.categories == ['adj', 'f', 'm']
    assert metadata.styles == ['espon']
    assert metadata.origins == ['Quechua', 'quechua']


def test_letter_counts_and_stats(words):
    counts = letter_counts(words)
    assert counts[0] == {'letter': 'f', 'count': 2}
    assert [entry['letter'] for entry in counts] == ['f', 'g', 'l', 'n', 'ñ', 'o', 'p']

    stats = dictionary_stats(words)
    assert stats['total_words'] == 8
    assert stats['total_meanings'] == 8
    assert stats['total_letters'] == 7
    assert stats['words_by_letter']['ñ'] == 1
