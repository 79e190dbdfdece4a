#!/usr/bin/env python3
"""
Dictionary storage layer
Repository interface, domain errors and the JSON-file backed corpus store
"""

import copy
import json
import logging
import os
import random
import tempfile
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional, Union

from .config import get_site_config
from .definitions import (
    DEFAULT_ROLE,
    PUBLISHED_STATUS,
    User,
    Word,
    WordNote,
    letter_for,
    spanish_sort_key,
)

logger = logging.getLogger(__name__)


class DictionaryError(Exception):
    """Base error for dictionary storage operations"""
    pass


class WordNotFoundError(DictionaryError):
    pass


class DuplicateLemmaError(DictionaryError):
    pass


class DuplicateUserError(DictionaryError):
    pass


class InvalidWordError(DictionaryError):
    pass


class _Unset:
    def __repr__(self):
        return 'UNSET'


UNSET: Any = _Unset()


class DictionaryRepository:
    """Storage interface shared by the JSON and PostgreSQL backends"""

    def list_words(self, status: Optional[str] = None, letter: Optional[str] = None) -> List[Word]:
        raise NotImplementedError

    def get_word(self, lemma: str, include_drafts: bool = False) -> Optional[Word]:
        raise NotImplementedError

    def random_word(self) -> Optional[Word]:
        raise NotImplementedError

    def create_word(self, word: Word, created_by: Optional[int] = None) -> Word:
        raise NotImplementedError

    def update_word(self, prev_lemma: str, word: Word,
                    status: Any = UNSET, assigned_to: Any = UNSET) -> Word:
        raise NotImplementedError

    def delete_word(self, lemma: str) -> None:
        raise NotImplementedError

    def add_note(self, lemma: str, note: str, user_id: Optional[int] = None) -> WordNote:
        raise NotImplementedError

    def list_notes(self, lemma: str) -> List[WordNote]:
        raise NotImplementedError

    def get_user_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_user_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def list_users(self) -> List[User]:
        raise NotImplementedError

    def create_user(self, username: str, email: Optional[str], password_hash: str,
                    role: str = DEFAULT_ROLE) -> User:
        raise NotImplementedError

    @staticmethod
    def prepare_new_word(word: Word) -> Word:
        """Normalize lemma, root and letter before inserting"""
        lemma = (word.lemma or '').strip()
        if not lemma:
            raise InvalidWordError("El lema es obligatorio")
        prepared = copy.deepcopy(word)
        prepared.lemma = lemma
        prepared.root = (word.root or '').strip()
        prepared.letter = letter_for(lemma, word.letter)
        return prepared


def _flatten_letter_groups(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Accept the {name, description, value: [{letter, values: [...]}]} export"""
    records = []
    for group in data.get('value', []):
        if not isinstance(group, dict):
            continue
        for record in group.get('values', []):
            if isinstance(record, dict):
                merged = {'letter': group.get('letter'), 'status': PUBLISHED_STATUS}
                merged.update(record)
                records.append(merged)
    return records


class JsonDictionaryRepository(DictionaryRepository):
    """
    In-memory corpus persisted to a JSON file
    Used for local development, demos and tests
    """

    def __init__(self, path: Optional[Union[str, Path]] = None,
                 data: Optional[Dict[str, Any]] = None):
        self.path = Path(path) if path else None
        self._lock = RLock()
        self._words: Dict[int, Word] = {}
        self._users: Dict[int, User] = {}
        self._notes: Dict[int, WordNote] = {}

        if data is None and self.path and self.path.exists():
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            logger.info(f"Loaded dictionary corpus from {self.path}")
        self._load(data or {})

    def _load(self, data: Dict[str, Any]):
        word_records = data.get('words')
        if word_records is None and 'value' in data:
            word_records = _flatten_letter_groups(data)

        for index, record in enumerate(word_records or [], 1):
            word = Word.from_dict(record)
            if not word.lemma:
                logger.warning(f"Skipping corpus record {index} without lemma")
                continue
            if word.id is None:
                word.id = index
            if 'status' not in record:
                word.status = PUBLISHED_STATUS
            self._words[word.id] = word

        for record in data.get('users', []):
            user = User(
                id=record['id'],
                username=record['username'],
                email=record.get('email'),
                role=record.get('role', DEFAULT_ROLE),
                created_at=_parse_ts(record.get('createdAt')),
                updated_at=_parse_ts(record.get('updatedAt')),
                password_hash=record.get('passwordHash'),
            )
            self._users[user.id] = user

        for record in data.get('notes', []):
            note = WordNote(
                id=record['id'],
                word_id=record['wordId'],
                note=record['note'],
                created_at=_parse_ts(record.get('createdAt')),
                user_id=record.get('userId'),
                resolved=bool(record.get('resolved', False)),
            )
            self._notes[note.id] = note

        logger.info(
            f"Corpus ready: {len(self._words)} words, {len(self._users)} users, "
            f"{len(self._notes)} notes"
        )

    def to_data(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'words': [word.to_dict() for word in self._words.values()],
                'users': [
                    dict(user.to_dict(), passwordHash=user.password_hash)
                    for user in self._users.values()
                ],
                'notes': [
                    {
                        'id': note.id,
                        'wordId': note.word_id,
                        'userId': note.user_id,
                        'note': note.note,
                        'resolved': note.resolved,
                        'createdAt': note.created_at.isoformat(),
                    }
                    for note in self._notes.values()
                ],
            }

    def _save(self):
        if not self.path:
            return
        payload = self.to_data()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            os.unlink(tmp_name)
            raise

    def _find(self, lemma: str) -> Optional[Word]:
        for word in self._words.values():
            if word.lemma == lemma:
                return word
        return None

    def list_words(self, status: Optional[str] = None, letter: Optional[str] = None) -> List[Word]:
        with self._lock:
            words = [
                copy.deepcopy(word) for word in self._words.values()
                if (status is None or word.status == status)
                and (letter is None or word.letter == letter.lower())
            ]
        words.sort(key=lambda w: spanish_sort_key(w.lemma))
        return words

    def get_word(self, lemma: str, include_drafts: bool = False) -> Optional[Word]:
        with self._lock:
            word = self._find(lemma)
            if word is None or (not include_drafts and not word.is_published):
                return None
            return copy.deepcopy(word)

    def random_word(self) -> Optional[Word]:
        published = self.list_words(status=PUBLISHED_STATUS)
        return random.choice(published) if published else None

    def create_word(self, word: Word, created_by: Optional[int] = None) -> Word:
        prepared = self.prepare_new_word(word)
        with self._lock:
            if self._find(prepared.lemma) is not None:
                raise DuplicateLemmaError(f'Ya existe una palabra con el lema "{prepared.lemma}"')
            now = datetime.now()
            prepared.id = max(self._words, default=0) + 1
            prepared.created_by = created_by if created_by is not None else prepared.created_by
            prepared.created_at = now
            prepared.updated_at = now
            self._words[prepared.id] = prepared
            self._save()
            logger.info(f"Created word '{prepared.lemma}' (id={prepared.id})")
            return copy.deepcopy(prepared)

    def update_word(self, prev_lemma: str, word: Word,
                    status: Any = UNSET, assigned_to: Any = UNSET) -> Word:
        with self._lock:
            existing = self._find(prev_lemma)
            if existing is None:
                raise WordNotFoundError(f"Word not found: {prev_lemma}")
            lemma = (word.lemma or '').strip() or existing.lemma
            if lemma != existing.lemma and self._find(lemma) is not None:
                raise DuplicateLemmaError(f'Ya existe una palabra con el lema "{lemma}"')

            existing.lemma = lemma
            existing.root = (word.root or '').strip()
            existing.letter = letter_for(lemma, word.letter if word.lemma else None)
            existing.variant = word.variant
            existing.meanings = copy.deepcopy(word.meanings)
            if status is not UNSET and status:
                existing.status = status
            if assigned_to is not UNSET:
                existing.assigned_to = assigned_to
            existing.updated_at = datetime.now()
            self._save()
            return copy.deepcopy(existing)

    def delete_word(self, lemma: str) -> None:
        with self._lock:
            existing = self._find(lemma)
            if existing is None:
                raise WordNotFoundError(f"Word not found: {lemma}")
            del self._words[existing.id]
            for note_id in [n.id for n in self._notes.values() if n.word_id == existing.id]:
                del self._notes[note_id]
            self._save()

    def add_note(self, lemma: str, note: str, user_id: Optional[int] = None) -> WordNote:
        with self._lock:
            existing = self._find(lemma)
            if existing is None:
                raise WordNotFoundError(f"Word not found: {lemma}")
            user = self._users.get(user_id) if user_id is not None else None
            created = WordNote(
                id=max(self._notes, default=0) + 1,
                word_id=existing.id,
                note=note,
                created_at=datetime.now(),
                user_id=user.id if user else None,
                username=user.username if user else None,
            )
            self._notes[created.id] = created
            self._save()
            return copy.deepcopy(created)

    def list_notes(self, lemma: str) -> List[WordNote]:
        with self._lock:
            existing = self._find(lemma)
            if existing is None:
                return []
            notes = []
            for note in self._notes.values():
                if note.word_id != existing.id:
                    continue
                item = copy.deepcopy(note)
                user = self._users.get(note.user_id)
                item.username = user.username if user else None
                notes.append(item)
        notes.sort(key=lambda n: (n.created_at, n.id), reverse=True)
        return notes

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return copy.deepcopy(user)
        return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email and user.email.lower() == email.lower():
                    return copy.deepcopy(user)
        return None

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    def list_users(self) -> List[User]:
        with self._lock:
            return [copy.deepcopy(user) for user in sorted(self._users.values(), key=lambda u: u.id)]

    def create_user(self, username: str, email: Optional[str], password_hash: str,
                    role: str = DEFAULT_ROLE) -> User:
        with self._lock:
            if self.get_user_by_username(username):
                raise DuplicateUserError("Username already exists")
            if email and self.get_user_by_email(email):
                raise DuplicateUserError("Email already exists")
            now = datetime.now()
            user = User(
                id=max(self._users, default=0) + 1,
                username=username,
                email=email or None,
                role=role,
                created_at=now,
                updated_at=now,
                password_hash=password_hash,
            )
            self._users[user.id] = user
            self._save()
            return copy.deepcopy(user)


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return datetime.now()


_repository: Optional[DictionaryRepository] = None
_repository_lock = RLock()


def get_repository() -> DictionaryRepository:
    """Return the configured backend: JSON corpus when DUECH_DATA_FILE is set, else PostgreSQL"""
    global _repository
    if _repository is None:
        with _repository_lock:
            if _repository is None:
                site = get_site_config()
                if site.data_file:
                    _repository = JsonDictionaryRepository(site.data_file)
                else:
                    from .pg_repository import PostgresDictionaryRepository
                    _repository = PostgresDictionaryRepository()
    return _repository


def set_repository(repository: Optional[DictionaryRepository]) -> None:
    global _repository
    _repository = repository
