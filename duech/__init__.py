"""
Core components of the Chilean Spanish usage dictionary (DUECh).

This package contains the building blocks shared by the web application and the CLI:
- Configuration, database connection pooling and storage backends
- Search and filtering over dictionary entries
- Sessions, roles and editor-mode routing
- Word of the day selection and search filter persistence
"""

from .config import get_auth_config, get_database_config, get_site_config
from .definitions import LETTERS, SearchFilters, SessionUser, User, Word, WordNote
from .repository import DictionaryError, get_repository, set_repository
from .search import SearchValidationError, parse_search_request, search_words
from .word_of_the_day import WordOfTheDayError, get_word_of_the_day

__all__ = [
    'get_auth_config',
    'get_database_config',
    'get_site_config',
    'LETTERS',
    'SearchFilters',
    'SessionUser',
    'User',
    'Word',
    'WordNote',
    'DictionaryError',
    'get_repository',
    'set_repository',
    'SearchValidationError',
    'parse_search_request',
    'search_words',
    'WordOfTheDayError',
    'get_word_of_the_day',
]
