#!/usr/bin/env python3
"""
Word of the Day
Deterministic daily pick: the date seeds both the letter and the entry
"""

import logging
from datetime import date, datetime, timezone
from threading import Lock
from typing import Dict, Optional, Union
from weakref import WeakKeyDictionary

from .definitions import LETTERS, PUBLISHED_STATUS, Word, spanish_sort_key
from .repository import DictionaryRepository

logger = logging.getLogger(__name__)

FALLBACK_LETTER = 'o'
UINT32 = 2 ** 32


class WordOfTheDayError(Exception):
    pass


def hash_seed(seed: str) -> int:
    value = 0
    for char in seed:
        value = (value * 31 + ord(char)) % UINT32
    return value


def seed_for(day: Union[date, datetime, None] = None) -> str:
    """YYYY-MM-DD of the day, UTC for aware datetimes"""
    if day is None:
        day = datetime.now(timezone.utc)
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(timezone.utc)
        day = day.date()
    return day.isoformat()


class WordOfTheDaySelector:
    """Selects and memoizes the daily entry per seed"""

    def __init__(self, repository: DictionaryRepository, cache: Optional[Dict[str, Word]] = None):
        self.repository = repository
        self._cache: Dict[str, Word] = {} if cache is None else cache
        self._lock = Lock()

    def clear_cache(self):
        with self._lock:
            self._cache.clear()

    def select(self, day: Union[date, datetime, None] = None) -> Word:
        seed = seed_for(day)
        with self._lock:
            cached = self._cache.get(seed)
        if cached is not None:
            return cached

        letter = LETTERS[hash_seed(seed) % len(LETTERS)]
        pool = self.repository.list_words(status=PUBLISHED_STATUS, letter=letter)
        if not pool:
            logger.info(f"No published words for letter '{letter}', falling back to '{FALLBACK_LETTER}'")
            letter = FALLBACK_LETTER
            pool = self.repository.list_words(status=PUBLISHED_STATUS, letter=letter)

        if not pool:
            raise WordOfTheDayError(
                f"No se encontraron palabras para la fecha {seed} (letra={letter})"
            )

        pool.sort(key=lambda word: spanish_sort_key(word.lemma))
        chosen = pool[hash_seed(f"{seed}:{letter}") % len(pool)]

        with self._lock:
            self._cache[seed] = chosen
        logger.info(f"Word of the day for {seed}: {chosen.lemma}")
        return chosen


# Per-repository caches; entries go away with their repository
_caches: "WeakKeyDictionary[DictionaryRepository, Dict[str, Word]]" = WeakKeyDictionary()
_caches_lock = Lock()


def get_word_of_the_day(repository: DictionaryRepository,
                        day: Union[date, datetime, None] = None) -> Optional[Word]:
    """Convenience wrapper sharing one memo per live repository"""
    with _caches_lock:
        cache = _caches.setdefault(repository, {})
    return WordOfTheDaySelector(repository, cache).select(day)
