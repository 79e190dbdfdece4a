"""Tests for editor-mode access resolution."""

import pytest

from duech.config import SiteConfig
from duech.editor_mode import (
    AccessContext,
    hostname_of,
    is_editor_path_access,
    login_redirect_url,
    normalize_editor_path,
    resolve_access,
    should_bypass,
)

SITE = SiteConfig()


def test_hostname_of():
    assert hostname_of('Editor.Localhost:3000') == 'editor.localhost'
    assert hostname_of(None) == ''


@pytest.mark.parametrize('path, expected', [
    ('/editor', '/'),
    ('/editor/', '/'),
    ('/editor/buscar', '/buscar'),
    ('/editor/palabra/al%20tiro', '/palabra/al%20tiro'),
    ('/buscar', '/buscar'),
])
def test_normalize_editor_path(path, expected):
    assert normalize_editor_path(path, SITE) == expected


@pytest.mark.parametrize('path, expected', [
    ('/static/styles.css', True),
    ('/api/search', True),
    ('/login', True),
    ('/favicon.ico', True),
    ('/logo.PNG', True),
    ('/buscar', False),
    ('/', False),
    ('/login/extra', False),
])
def test_should_bypass(path, expected):
    assert should_bypass(path) is expected


def test_editor_path_only_on_plain_host():
    assert is_editor_path_access('localhost', '/editor/buscar', SITE)
    assert is_editor_path_access('localhost', '/editor', SITE)
    assert not is_editor_path_access('localhost', '/editorial', SITE)
    assert not is_editor_path_access('example.cl', '/editor/buscar', SITE)


class TestResolveAccess:
    """Editor mode from subdomain or path prefix"""

    def test_public(self):
        access = resolve_access('localhost', '/buscar', SITE)
        assert not access.editor_mode
        assert access.base_path == ''
        assert not access.rewritten

    def test_editor_subdomain(self):
        access = resolve_access('editor.localhost', '/buscar', SITE)
        assert access.editor_mode
        assert access.base_path == ''
        assert access.path == '/buscar'

    def test_editor_path_prefix(self):
        access = resolve_access('localhost', '/editor/palabra/fome', SITE)
        assert access.editor_mode
        assert access.base_path == '/editor'
        assert access.path == '/palabra/fome'
        assert access.rewritten

    def test_custom_prefix(self):
        site = SiteConfig(editor_path_prefix='/panel/')
        access = resolve_access('localhost', '/panel', site)
        assert access.editor_mode
        assert access.base_path == '/panel'
        assert access.path == '/'


class TestUrls:

    def test_url_for(self):
        assert AccessContext(True, '/editor', '/', '/editor').url_for('/buscar') == '/editor/buscar'
        assert AccessContext(True, '/editor', '/', '/editor').url_for('/') == '/editor'
        assert AccessContext(False, '', '/', '/').url_for('acerca') == '/acerca'

    def test_login_redirect_keeps_original_path(self):
        access = resolve_access('localhost', '/editor/buscar', SITE)
        assert login_redirect_url(access) == '/editor/login?redirectTo=%2Feditor%2Fbuscar'

    def test_login_redirect_on_subdomain(self):
        access = resolve_access('editor.localhost', '/palabra/fome', SITE)
        assert login_redirect_url(access) == '/login?redirectTo=%2Fpalabra%2Ffome'
