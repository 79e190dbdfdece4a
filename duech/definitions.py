#!/usr/bin/env python3
"""
Type definitions for the Chilean Spanish Dictionary (DUECh)
Entries, meanings, editorial notes, users and search payloads
"""

import unicodedata
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

LETTERS = list('abcdefghijklmnñopqrstuvwxyz')

PUBLISHED_STATUS = 'published'
DEFAULT_NEW_STATUS = 'included'
DRAFT_STATUS = 'draft'

STATUS_OPTIONS = [
    {'value': 'imported', 'label': 'Importado'},
    {'value': 'included', 'label': 'Incorporado'},
    {'value': 'preredacted', 'label': 'Prerredactada'},
    {'value': 'redacted', 'label': 'Redactado'},
    {'value': 'reviewed', 'label': 'Revisado por comisión'},
    {'value': 'published', 'label': 'Publicado'},
    {'value': 'archaic', 'label': 'Arcaico'},
    {'value': 'quarantined', 'label': 'Cuarentena'},
]
STATUS_VALUES = frozenset(option['value'] for option in STATUS_OPTIONS)

ROLES = ('lexicographer', 'editor', 'admin', 'superadmin')
EDITOR_ROLES = frozenset(ROLES)
ADMIN_ROLES = frozenset({'admin', 'superadmin'})
DEFAULT_ROLE = 'lexicographer'

GRAMMATICAL_CATEGORIES: Dict[str, str] = {
    'adj': 'Adjetivo',
    'adj/adv': 'Adjetivo/Adverbio',
    'adj/sust': 'Adjetivo/Sustantivo',
    'adv': 'Adverbio',
    'fórm': 'Fórmula',
    'interj': 'Interjección',
    'loc': 'Locución',
    'loc sust/adj': 'Locución sustantiva/adjetiva',
    'loc adj': 'Locución adjetiva',
    'loc adj/adv': 'Locución adjetiva/adverbial',
    'loc adj/sust': 'Locución adjetiva/sustantiva',
    'loc adv': 'Locución adverbial',
    'loc interj': 'Locución interjectiva',
    'loc sust': 'Locución sustantiva',
    'marc': 'Marcador discursivo',
    'disc': 'Marcador discursivo',
    'sust': 'Sustantivo/Adjetivo',
    'f': 'Sustantivo femenino',
    'm': 'Sustantivo masculino',
    'm o f': 'Sustantivo masculino o femenino',
    'm-f': 'Sustantivo masculino-femenino',
    'm y f': 'Sustantivo masculino y femenino',
    'm pl': 'Sustantivo masculino plural',
    'f pl': 'Sustantivo femenino plural',
    'intr': 'Verbo intransitivo',
    'tr': 'Verbo transitivo',
}

USAGE_STYLES: Dict[str, str] = {
    'espon': 'Espontáneo',
    'fest': 'Festivo',
    'vulgar': 'Vulgar',
    'hist': 'Histórico',
    'esm': 'Esmerado',
    'p. us.': 'Poco usado',
    'p': 'Poco usado',
    'us': 'Usado',
}

REGIONAL_MARKERS: Dict[str, str] = {
    '(Norte)': 'Norte de Chile',
}

# Placeholder written into the tilde slot so ñ collates after every n-word
_ENYE_MARK = '\x00'


def spanish_sort_key(text: Optional[str]) -> tuple:
    """Collation key: case and accent insensitive, ñ between n and o"""
    lowered = unicodedata.normalize('NFC', text or '').lower().replace('ñ', _ENYE_MARK)
    stripped = ''.join(
        ch for ch in unicodedata.normalize('NFD', lowered) if not unicodedata.combining(ch)
    )
    return (stripped.replace(_ENYE_MARK, 'n{'), text or '')


def letter_for(lemma: str, requested: Optional[str] = None) -> str:
    requested = (requested or '').strip()
    source = requested or (lemma or '').strip()
    return unicodedata.normalize('NFC', source[:1] or 'a').lower()


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def resolve_user_id(raw_value: Any) -> Optional[int]:
    """Accept an int, a numeric string, or a list holding one of those"""
    if isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, int):
        return raw_value
    if isinstance(raw_value, str):
        try:
            return int(raw_value.strip(), 10)
        except ValueError:
            return None
    if isinstance(raw_value, list) and raw_value:
        return resolve_user_id(raw_value[0])
    return None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Example:
    value: str
    author: Optional[str] = None
    title: Optional[str] = None
    source: Optional[str] = None
    date: Optional[str] = None
    page: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional['Example']:
        if isinstance(data, str) and data.strip():
            return cls(value=data)
        if not isinstance(data, dict) or not isinstance(data.get('value'), str):
            return None
        return cls(
            value=data['value'],
            author=_optional_str(data.get('author')),
            title=_optional_str(data.get('title')),
            source=_optional_str(data.get('source')),
            date=_optional_str(data.get('date')),
            page=_optional_str(data.get('page')),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {'value': self.value}
        for key in ('author', 'title', 'source', 'date', 'page'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


def _examples_from(raw: Any) -> List[Example]:
    items = raw if isinstance(raw, list) else ([raw] if raw else [])
    examples = []
    for item in items:
        example = Example.from_dict(item)
        if example is not None:
            examples.append(example)
    return examples


@dataclass
class Meaning:
    """One numbered sense of a lemma"""
    number: int
    meaning: str
    origin: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    observation: Optional[str] = None
    remission: Optional[str] = None
    examples: List[Example] = field(default_factory=list)
    expressions: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], position: int) -> 'Meaning':
        number = data.get('number')
        if not isinstance(number, int) or isinstance(number, bool):
            number = position
        text = data.get('meaning')
        if not isinstance(text, str) or not text.strip():
            text = f"Definición {number}"
        raw_examples = data['examples'] if 'examples' in data else data.get('example')
        return cls(
            number=number,
            meaning=text,
            origin=_optional_str(data.get('origin')),
            categories=_str_list(data.get('categories')),
            styles=_str_list(data.get('styles')),
            observation=_optional_str(data.get('observation')),
            remission=_optional_str(data.get('remission')),
            examples=_examples_from(raw_examples),
            expressions=_str_list(data.get('expressions')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number': self.number,
            'meaning': self.meaning,
            'origin': self.origin,
            'categories': list(self.categories),
            'styles': list(self.styles),
            'observation': self.observation,
            'remission': self.remission,
            'examples': [example.to_dict() for example in self.examples],
            'expressions': list(self.expressions),
        }


def meanings_from(raw: Any) -> List[Meaning]:
    if not isinstance(raw, list):
        return []
    dicts = [item for item in raw if isinstance(item, dict)]
    return [Meaning.from_dict(item, index) for index, item in enumerate(dicts, 1)]


@dataclass
class Word:
    lemma: str
    root: str = ''
    letter: str = ''
    meanings: List[Meaning] = field(default_factory=list)
    status: str = DRAFT_STATUS
    variant: Optional[str] = None
    id: Optional[int] = None
    created_by: Optional[int] = None
    assigned_to: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.letter:
            self.letter = letter_for(self.lemma)

    @property
    def is_published(self) -> bool:
        return self.status == PUBLISHED_STATUS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Word':
        """Build a word from an API payload or a stored JSON record"""
        lemma = data.get('lemma')
        lemma = lemma.strip() if isinstance(lemma, str) else ''
        raw_meanings = data['values'] if 'values' in data else data.get('meanings')
        letter = data.get('letter')
        status = data.get('status')
        return cls(
            lemma=lemma,
            root=data.get('root') if isinstance(data.get('root'), str) else '',
            letter=letter_for(lemma, letter if isinstance(letter, str) else None),
            meanings=meanings_from(raw_meanings),
            status=status if isinstance(status, str) and status else DRAFT_STATUS,
            variant=_optional_str(data.get('variant')),
            id=data.get('id') if isinstance(data.get('id'), int) else None,
            created_by=resolve_user_id(data.get('createdBy')),
            assigned_to=resolve_user_id(data.get('assignedTo')),
            created_at=_parse_datetime(data.get('createdAt')),
            updated_at=_parse_datetime(data.get('updatedAt')),
        )

    def to_dict(self, include_editorial: bool = True) -> Dict[str, Any]:
        data = {
            'lemma': self.lemma,
            'root': self.root or self.lemma,
            'letter': self.letter,
            'variant': self.variant,
            'values': [meaning.to_dict() for meaning in self.meanings],
        }
        if include_editorial:
            data.update({
                'id': self.id,
                'status': self.status,
                'createdBy': self.created_by,
                'assignedTo': self.assigned_to,
                'createdAt': _iso(self.created_at),
                'updatedAt': _iso(self.updated_at),
            })
        return data


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


@dataclass
class WordNote:
    """Editorial comment attached to a word"""
    id: int
    word_id: int
    note: str
    created_at: datetime
    user_id: Optional[int] = None
    username: Optional[str] = None
    resolved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        user = None
        if self.user_id is not None or self.username:
            user = {'id': self.user_id, 'username': self.username}
        return {
            'id': self.id,
            'note': self.note,
            'createdAt': _iso(self.created_at),
            'user': user,
            'resolved': self.resolved,
        }


@dataclass
class User:
    id: int
    username: str
    email: Optional[str]
    role: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    password_hash: Optional[str] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


@dataclass
class SessionUser:
    id: str
    email: str
    name: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_editor(self) -> bool:
        return self.role in EDITOR_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def user_id(self) -> Optional[int]:
        return resolve_user_id(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'email': self.email, 'name': self.name, 'role': self.role}


@dataclass
class SearchFilters:
    query: str = ''
    categories: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    origins: List[str] = field(default_factory=list)
    letters: List[str] = field(default_factory=list)
    status: Optional[str] = None
    assigned_to: List[str] = field(default_factory=list)


@dataclass
class SearchResult:
    word: Word
    letter: str
    match_type: str
    status: Optional[str] = None

    def to_dict(self, include_editorial: bool = False) -> Dict[str, Any]:
        data = {
            'word': self.word.to_dict(include_editorial=include_editorial),
            'letter': self.letter,
            'matchType': self.match_type,
        }
        if include_editorial:
            data['status'] = self.status
        return data


@dataclass
class SearchMetadata:
    categories: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    origins: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'categories': list(self.categories),
            'styles': list(self.styles),
            'origins': list(self.origins),
        }


@dataclass
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'page': self.page,
            'limit': self.limit,
            'total': self.total,
            'totalPages': self.total_pages,
            'hasNext': self.has_next,
            'hasPrev': self.has_prev,
        }
