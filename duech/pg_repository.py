#!/usr/bin/env python3
"""
PostgreSQL dictionary repository
Raw SQL over the pooled psycopg connection manager
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from psycopg import errors as pg_errors
from psycopg.types.json import Jsonb

from .database_manager import DatabaseManager, get_database_manager
from .definitions import (
    DEFAULT_ROLE,
    PUBLISHED_STATUS,
    Example,
    Meaning,
    User,
    Word,
    WordNote,
    letter_for,
)
from .repository import (
    UNSET,
    DictionaryRepository,
    DuplicateLemmaError,
    DuplicateUserError,
    WordNotFoundError,
)

logger = logging.getLogger(__name__)

WORD_COLUMNS = """
    w.id, w.lemma, w.root, w.letter, w.variant, w.status,
    w.created_by, w.assigned_to, w.created_at, w.updated_at
"""

USER_COLUMNS = "id, username, email, role, created_at, updated_at, password_hash"


class PostgresDictionaryRepository(DictionaryRepository):
    """Dictionary storage backed by the users/words/meanings/notes tables"""

    def __init__(self, manager: Optional[DatabaseManager] = None):
        self._manager = manager

    @property
    def manager(self) -> DatabaseManager:
        if self._manager is None:
            self._manager = get_database_manager()
        return self._manager

    def _cursor(self, autocommit: bool = False):
        return self.manager.get_cursor(dictionary=True, autocommit=autocommit)

    @staticmethod
    def _row_to_word(row: Dict[str, Any]) -> Word:
        return Word(
            id=row['id'],
            lemma=row['lemma'],
            root=row.get('root') or '',
            letter=row['letter'],
            variant=row.get('variant'),
            status=row['status'],
            created_by=row.get('created_by'),
            assigned_to=row.get('assigned_to'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    @staticmethod
    def _row_to_meaning(row: Dict[str, Any]) -> Meaning:
        examples = [Example.from_dict(item) for item in (row.get('examples') or [])]
        return Meaning(
            number=row['number'],
            meaning=row['meaning'],
            origin=row.get('origin'),
            categories=list(row.get('categories') or []),
            styles=list(row.get('styles') or []),
            observation=row.get('observation'),
            remission=row.get('remission'),
            examples=[example for example in examples if example is not None],
            expressions=list(row.get('expressions') or []),
        )

    @staticmethod
    def _row_to_user(row: Optional[Dict[str, Any]]) -> Optional[User]:
        if not row:
            return None
        return User(
            id=row['id'],
            username=row['username'],
            email=row.get('email'),
            role=row['role'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at'),
            password_hash=row.get('password_hash'),
        )

    def _attach_meanings(self, cursor, words: Sequence[Word]) -> List[Word]:
        if not words:
            return list(words)
        cursor.execute(
            """
            SELECT word_id, number, origin, meaning, observation, remission,
                   categories, styles, examples, expressions
            FROM meanings
            WHERE word_id = ANY(%s)
            ORDER BY word_id, number
            """,
            ([word.id for word in words],),
        )
        grouped: Dict[int, List[Meaning]] = defaultdict(list)
        for row in cursor.fetchall():
            grouped[row['word_id']].append(self._row_to_meaning(row))
        for word in words:
            word.meanings = grouped.get(word.id, [])
        return list(words)

    def list_words(self, status: Optional[str] = None, letter: Optional[str] = None) -> List[Word]:
        sql = f"SELECT {WORD_COLUMNS} FROM words w WHERE 1=1"
        params: List[Any] = []
        if status is not None:
            sql += " AND w.status = %s"
            params.append(status)
        if letter is not None:
            sql += " AND w.letter = %s"
            params.append(letter.lower())
        sql += " ORDER BY LOWER(w.lemma) ASC"

        with self._cursor() as cursor:
            cursor.execute(sql, params)
            words = [self._row_to_word(row) for row in cursor.fetchall()]
            return self._attach_meanings(cursor, words)

    def get_word(self, lemma: str, include_drafts: bool = False) -> Optional[Word]:
        sql = f"SELECT {WORD_COLUMNS} FROM words w WHERE w.lemma = %s"
        params: List[Any] = [lemma]
        if not include_drafts:
            sql += " AND w.status = %s"
            params.append(PUBLISHED_STATUS)

        with self._cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            if not row:
                return None
            return self._attach_meanings(cursor, [self._row_to_word(row)])[0]

    def random_word(self) -> Optional[Word]:
        with self._cursor() as cursor:
            cursor.execute(
                f"SELECT {WORD_COLUMNS} FROM words w WHERE w.status = %s ORDER BY RANDOM() LIMIT 1",
                (PUBLISHED_STATUS,),
            )
            row = cursor.fetchone()
            if not row:
                return None
            return self._attach_meanings(cursor, [self._row_to_word(row)])[0]

    @staticmethod
    def _insert_meanings(cursor, word_id: int, meanings: Sequence[Meaning]):
        if not meanings:
            return
        cursor.executemany(
            """
            INSERT INTO meanings (word_id, number, origin, meaning, observation, remission,
                                  categories, styles, examples, expressions)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            [
                (
                    word_id,
                    m.number,
                    m.origin,
                    m.meaning,
                    m.observation,
                    m.remission,
                    m.categories or None,
                    m.styles or None,
                    Jsonb([example.to_dict() for example in m.examples]) if m.examples else None,
                    m.expressions or None,
                )
                for m in meanings
            ],
        )

    def create_word(self, word: Word, created_by: Optional[int] = None) -> Word:
        prepared = self.prepare_new_word(word)
        if created_by is not None:
            prepared.created_by = created_by
        try:
            with self._cursor() as cursor:
                cursor.execute("SELECT 1 FROM words WHERE lemma = %s", (prepared.lemma,))
                if cursor.fetchone():
                    raise DuplicateLemmaError(
                        f'Ya existe una palabra con el lema "{prepared.lemma}"'
                    )
                cursor.execute(
                    """
                    INSERT INTO words (lemma, root, letter, variant, status, created_by, assigned_to)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING id, created_at, updated_at
                    """,
                    (
                        prepared.lemma,
                        prepared.root or None,
                        prepared.letter,
                        prepared.variant,
                        prepared.status,
                        prepared.created_by,
                        prepared.assigned_to,
                    ),
                )
                row = cursor.fetchone()
                prepared.id = row['id']
                prepared.created_at = row['created_at']
                prepared.updated_at = row['updated_at']
                self._insert_meanings(cursor, prepared.id, prepared.meanings)
        except pg_errors.UniqueViolation:
            raise DuplicateLemmaError(f'Ya existe una palabra con el lema "{prepared.lemma}"')
        logger.info(f"Created word '{prepared.lemma}' (id={prepared.id})")
        return prepared

    def update_word(self, prev_lemma: str, word: Word,
                    status: Any = UNSET, assigned_to: Any = UNSET) -> Word:
        with self._cursor() as cursor:
            cursor.execute(f"SELECT {WORD_COLUMNS} FROM words w WHERE w.lemma = %s", (prev_lemma,))
            row = cursor.fetchone()
            if not row:
                raise WordNotFoundError(f"Word not found: {prev_lemma}")
            existing = self._row_to_word(row)

            lemma = (word.lemma or '').strip() or existing.lemma
            if lemma != existing.lemma:
                cursor.execute("SELECT 1 FROM words WHERE lemma = %s", (lemma,))
                if cursor.fetchone():
                    raise DuplicateLemmaError(f'Ya existe una palabra con el lema "{lemma}"')

            updates = ["lemma = %s", "root = %s", "letter = %s", "variant = %s",
                       "updated_at = CURRENT_TIMESTAMP"]
            values: List[Any] = [
                lemma,
                (word.root or '').strip() or None,
                letter_for(lemma, word.letter if word.lemma else None),
                word.variant,
            ]
            if status is not UNSET and status:
                updates.append("status = %s")
                values.append(status)
            if assigned_to is not UNSET:
                updates.append("assigned_to = %s")
                values.append(assigned_to)
            values.append(existing.id)

            cursor.execute(f"UPDATE words SET {', '.join(updates)} WHERE id = %s", values)
            cursor.execute("DELETE FROM meanings WHERE word_id = %s", (existing.id,))
            self._insert_meanings(cursor, existing.id, word.meanings)

        return self.get_word(lemma, include_drafts=True)

    def delete_word(self, lemma: str) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM words WHERE lemma = %s", (lemma,))
            if cursor.rowcount == 0:
                raise WordNotFoundError(f"Word not found: {lemma}")

    def add_note(self, lemma: str, note: str, user_id: Optional[int] = None) -> WordNote:
        with self._cursor() as cursor:
            cursor.execute("SELECT id FROM words WHERE lemma = %s", (lemma,))
            row = cursor.fetchone()
            if not row:
                raise WordNotFoundError(f"Word not found: {lemma}")
            word_id = row['id']
            cursor.execute(
                """
                INSERT INTO notes (word_id, user_id, note)
                VALUES (%s, (SELECT id FROM users WHERE id = %s), %s)
                RETURNING id, user_id, note, resolved, created_at
                """,
                (word_id, user_id, note),
            )
            created = cursor.fetchone()
            username = None
            if created['user_id'] is not None:
                cursor.execute("SELECT username FROM users WHERE id = %s", (created['user_id'],))
                user_row = cursor.fetchone()
                username = user_row['username'] if user_row else None

        return WordNote(
            id=created['id'],
            word_id=word_id,
            note=created['note'],
            created_at=created['created_at'],
            user_id=created['user_id'],
            username=username,
            resolved=created['resolved'],
        )

    def list_notes(self, lemma: str) -> List[WordNote]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT n.id, n.word_id, n.note, n.resolved, n.created_at,
                       u.id AS user_id, u.username
                FROM notes n
                JOIN words w ON w.id = n.word_id
                LEFT JOIN users u ON u.id = n.user_id
                WHERE w.lemma = %s
                ORDER BY n.created_at DESC, n.id DESC
                """,
                (lemma,),
            )
            rows = cursor.fetchall()
        return [
            WordNote(
                id=row['id'],
                word_id=row['word_id'],
                note=row['note'],
                created_at=row['created_at'],
                user_id=row.get('user_id'),
                username=row.get('username'),
                resolved=row['resolved'],
            )
            for row in rows
        ]

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._cursor() as cursor:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE username = %s", (username,))
            return self._row_to_user(cursor.fetchone())

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._cursor() as cursor:
            cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE LOWER(email) = LOWER(%s)", (email,)
            )
            return self._row_to_user(cursor.fetchone())

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._cursor() as cursor:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            return self._row_to_user(cursor.fetchone())

    def list_users(self) -> List[User]:
        with self._cursor() as cursor:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY id")
            return [self._row_to_user(row) for row in cursor.fetchall()]

    def create_user(self, username: str, email: Optional[str], password_hash: str,
                    role: str = DEFAULT_ROLE) -> User:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT 1 FROM users WHERE username = %s OR (email IS NOT NULL AND email = %s)",
                (username, email),
            )
            if cursor.fetchone():
                raise DuplicateUserError("Username or email already exists")
            cursor.execute(
                f"""
                INSERT INTO users (username, email, password_hash, role)
                VALUES (%s, %s, %s, %s)
                RETURNING {USER_COLUMNS}
                """,
                (username, email or None, password_hash, role),
            )
            return self._row_to_user(cursor.fetchone())
