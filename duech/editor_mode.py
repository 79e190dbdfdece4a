#!/usr/bin/env python3
"""
Editor mode routing
Resolves public vs editor access from the host and path, rewrites /editor paths
and gates editor pages behind a session with an editor role
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from .auth import get_session_user
from .config import SiteConfig, get_site_config
from .definitions import EDITOR_ROLES

logger = logging.getLogger(__name__)

STATIC_FILE_RE = re.compile(r'\.(ico|png|jpg|jpeg|gif|svg|webp|css|js|woff|woff2|ttf|eot)$', re.IGNORECASE)

EDITOR_MODE_HEADER = 'x-editor-mode'
EDITOR_BASE_PATH_HEADER = 'x-editor-base-path'


@dataclass
class AccessContext:
    editor_mode: bool
    base_path: str
    path: str
    original_path: str

    @property
    def rewritten(self) -> bool:
        return self.path != self.original_path

    def url_for(self, path: str) -> str:
        """Prefix an application path with the editor base path"""
        if not path.startswith('/'):
            path = f"/{path}"
        if not self.base_path:
            return path
        return self.base_path if path == '/' else f"{self.base_path}{path}"


def hostname_of(host_header: Optional[str]) -> str:
    return (host_header or '').split(':')[0].lower()


def should_bypass(pathname: str) -> bool:
    return (
        pathname.startswith('/static/')
        or pathname.startswith('/api/')
        or pathname == '/login'
        or bool(STATIC_FILE_RE.search(pathname))
    )


def is_editor_path_access(hostname: str, pathname: str, site: Optional[SiteConfig] = None) -> bool:
    """Path-prefixed editor access is only honored on the plain host"""
    site = site or get_site_config()
    if hostname != site.localhost:
        return False
    prefix = site.editor_path_prefix
    return pathname == prefix or pathname.startswith(f"{prefix}/")


def normalize_editor_path(pathname: str, site: Optional[SiteConfig] = None) -> str:
    site = site or get_site_config()
    prefix = site.editor_path_prefix
    if pathname in (prefix, f"{prefix}/"):
        return '/'
    if pathname.startswith(f"{prefix}/"):
        normalized = pathname[len(prefix):]
        return normalized if normalized.startswith('/') else f"/{normalized}"
    return pathname


def resolve_access(hostname: str, pathname: str, site: Optional[SiteConfig] = None) -> AccessContext:
    site = site or get_site_config()
    editor_path = is_editor_path_access(hostname, pathname, site)
    path = normalize_editor_path(pathname, site) if editor_path else pathname
    return AccessContext(
        editor_mode=editor_path or hostname == site.editor_host,
        base_path=site.editor_path_prefix if editor_path else '',
        path=path,
        original_path=pathname,
    )


def get_access_context(request: Request) -> AccessContext:
    access = getattr(request.state, 'access', None)
    if access is None:
        access = resolve_access(hostname_of(request.headers.get('host')), request.url.path)
    return access


def is_editor_request(request: Request) -> bool:
    return get_access_context(request).editor_mode


def login_redirect_url(access: AccessContext) -> str:
    login_path = f"{access.base_path}/login" if access.base_path else '/login'
    target = access.original_path if access.base_path else access.path
    return f"{login_path}?{urlencode({'redirectTo': target})}"


class EditorModeMiddleware(BaseHTTPMiddleware):
    """Rewrites /editor requests and requires an editor session in editor mode"""

    def __init__(self, app, site: Optional[SiteConfig] = None):
        super().__init__(app)
        self._site = site

    async def dispatch(self, request: Request, call_next):
        site = self._site or get_site_config()
        access = resolve_access(hostname_of(request.headers.get('host')), request.url.path, site)
        request.state.access = access

        if access.rewritten:
            request.scope['path'] = access.path
            request.scope['raw_path'] = access.path.encode('utf-8')

        if access.editor_mode and not should_bypass(access.path):
            user = get_session_user(request)
            if user is None or user.role not in EDITOR_ROLES:
                logger.info(f"Redirecting unauthenticated editor request for {access.original_path}")
                return self._with_headers(
                    RedirectResponse(url=login_redirect_url(access), status_code=307), access
                )
            request.state.session_user = user

        response = await call_next(request)
        return self._with_headers(response, access)

    @staticmethod
    def _with_headers(response, access: AccessContext):
        response.headers[EDITOR_MODE_HEADER] = 'true' if access.editor_mode else 'false'
        response.headers[EDITOR_BASE_PATH_HEADER] = access.base_path
        return response
