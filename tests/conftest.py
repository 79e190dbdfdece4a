"""Shared fixtures: isolated configuration, an in-memory corpus and HTTP clients."""

import copy
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from duech.auth import create_token, hash_password  # noqa: E402
from duech.config import reset_config  # noqa: E402
from duech.definitions import SessionUser  # noqa: E402
from duech.rate_limiting import rate_limiter  # noqa: E402
from duech.repository import JsonDictionaryRepository, set_repository  # noqa: E402

CONFIG_ENV_VARS = [
    'DB_HOST', 'DB_PORT', 'DB_NAME', 'DB_USER', 'DB_PASSWORD', 'DB_SCHEMA',
    'DB_POOL_SIZE', 'DB_TIMEOUT', 'AUTH_SECRET', 'SECRET_KEY', 'SESSION_MAX_AGE',
    'DEMO_USER_EMAIL', 'DEMO_USER_PASSWORD', 'DEMO_USER_ENABLED', 'EDITOR_HOST',
    'PUBLIC_HOST', 'EDITOR_PATH_PREFIX', 'DUECH_DATA_FILE', 'LOG_LEVEL', 'DUECH_ENV',
]

PASSWORD = 'secreto123'


def _meaning(text, categories=None, styles=None, origin=None, **extra):
    data = {'number': 1, 'meaning': text, 'categories': categories or [], 'styles': styles or []}
    if origin:
        data['origin'] = origin
    data.update(extra)
    return data


def build_corpus(password_hash):
    return {
        'words': [
            {'id': 1, 'lemma': 'al tiro', 'status': 'published',
             'values': [_meaning('Inmediatamente, en el acto.', ['loc adv'], ['espon'])]},
            {'id': 2, 'lemma': 'bacán', 'status': 'published',
             'values': [_meaning('Excelente, muy bueno.', ['adj'], ['espon'], origin='Lunfardo')]},
            {'id': 3, 'lemma': 'cachai', 'status': 'published',
             'values': [_meaning('Pide confirmación de lo dicho.', ['marc'], ['espon'])]},
            {'id': 4, 'lemma': 'cuático', 'status': 'redacted', 'assignedTo': 2,
             'values': [_meaning('Exagerado, fuera de lo común.', ['adj'], ['espon'])]},
            {'id': 5, 'lemma': 'fome', 'status': 'published',
             'values': [_meaning('Aburrido, sin gracia.', ['adj'], ['espon'])]},
            {'id': 6, 'lemma': 'guagua', 'status': 'published',
             'values': [_meaning('Niño de pecho.', ['f'], origin='Quechua')]},
            {'id': 7, 'lemma': 'nana', 'status': 'published',
             'values': [_meaning('Empleada doméstica.', ['f'])]},
            {'id': 8, 'lemma': 'ñeque', 'status': 'published',
             'values': [_meaning('Fuerza, energía.', ['m'], ['espon'], origin='Quechua')]},
            {'id': 9, 'lemma': 'once', 'status': 'published',
             'values': [_meaning('Comida ligera de la tarde.', ['f'])]},
            {'id': 10, 'lemma': 'pololo', 'status': 'imported', 'assignedTo': 1,
             'values': [_meaning('Novio.', ['m'])]},
        ],
        'users': [
            {'id': 1, 'username': 'ana', 'email': 'ana@duech.cl', 'role': 'editor',
             'passwordHash': password_hash, 'createdAt': '2024-01-01T10:00:00'},
            {'id': 2, 'username': 'beto', 'email': 'beto@duech.cl', 'role': 'lexicographer',
             'passwordHash': password_hash, 'createdAt': '2024-01-02T10:00:00'},
            {'id': 3, 'username': 'carla', 'email': 'carla@duech.cl', 'role': 'admin',
             'passwordHash': password_hash, 'createdAt': '2024-01-03T10:00:00'},
        ],
        'notes': [
            {'id': 1, 'wordId': 4, 'userId': 1, 'note': 'Revisar acepción',
             'createdAt': '2024-02-01T09:00:00'},
        ],
    }


PUBLISHED_LEMMAS = ['al tiro', 'bacán', 'cachai', 'fome', 'guagua', 'nana', 'ñeque', 'once']


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('AUTH_SECRET', 'test-secret')
    reset_config()
    rate_limiter.reset()
    yield
    set_repository(None)
    reset_config()


@pytest.fixture(scope='session')
def password_hash():
    return hash_password(PASSWORD)


@pytest.fixture
def corpus(password_hash):
    return copy.deepcopy(build_corpus(password_hash))


@pytest.fixture
def repository(corpus):
    repo = JsonDictionaryRepository(data=corpus)
    set_repository(repo)
    return repo


@pytest.fixture
def app(repository):
    from duech_web.app import app as web_app
    return web_app


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app, base_url='http://localhost') as test_client:
        yield test_client


@pytest.fixture
def editor_client(app):
    from fastapi.testclient import TestClient
    with TestClient(app, base_url='http://editor.localhost') as test_client:
        yield test_client


def session_token(user_id='1', email='ana@duech.cl', name='ana', role='editor'):
    return create_token(SessionUser(id=user_id, email=email, name=name, role=role))


def login(test_client, **user):
    test_client.cookies.set('duech_session', session_token(**user))
    return test_client
