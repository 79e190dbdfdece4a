#!/usr/bin/env python3
"""
Authentication and Session Management
Password hashing, signed session cookies and role membership checks
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import logging

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import AuthConfig, get_auth_config
from .definitions import DEFAULT_ROLE, ROLES, SessionUser, User
from .repository import DictionaryRepository, get_repository

logger = logging.getLogger(__name__)

BCRYPT_MAX_LENGTH = 72
DEMO_USER_ID = '0'

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


class AuthenticationError(Exception):
    """Raised when credentials or user data are invalid"""
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password[:BCRYPT_MAX_LENGTH])


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password[:BCRYPT_MAX_LENGTH], hashed_password)
    except ValueError:
        logger.warning("Stored password hash is not a recognized bcrypt hash")
        return False


def create_token(user: SessionUser, max_age: Optional[int] = None,
                 config: Optional[AuthConfig] = None,
                 now: Optional[datetime] = None) -> str:
    """Create a signed session token for the user"""
    config = config or get_auth_config()
    issued = now or datetime.now(timezone.utc)
    lifetime = timedelta(seconds=max_age if max_age is not None else config.session_max_age)
    payload = {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'role': user.role,
        'iat': int(issued.timestamp()),
        'exp': int((issued + lifetime).timestamp()),
    }
    return jwt.encode(payload, config.secret_key, algorithm=config.algorithm)


def verify_token(token: Optional[str], config: Optional[AuthConfig] = None) -> Optional[Dict[str, Any]]:
    """Decode a session token; None when malformed, tampered with or expired"""
    if not token:
        return None
    config = config or get_auth_config()
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
    except JWTError as e:
        logger.debug(f"Rejected session token: {e}")
        return None
    if payload.get('id') in (None, ''):
        return None
    return payload


def session_from_payload(payload: Dict[str, Any]) -> SessionUser:
    return SessionUser(
        id=str(payload['id']),
        email=payload.get('email') or '',
        name=payload.get('name'),
        role=payload.get('role'),
    )


def session_user_for(user: User) -> SessionUser:
    return SessionUser(
        id=str(user.id),
        email=user.email or user.username,
        name=user.username,
        role=user.role,
    )


def token_from_request(request, config: Optional[AuthConfig] = None) -> Optional[str]:
    """Session token from the session cookie, or a Bearer Authorization header"""
    config = config or get_auth_config()
    token = request.cookies.get(config.cookie_name)
    if token:
        return token
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


def get_session_user(request, config: Optional[AuthConfig] = None) -> Optional[SessionUser]:
    payload = verify_token(token_from_request(request, config), config)
    return session_from_payload(payload) if payload else None


def set_session_cookie(response, user: SessionUser, max_age: Optional[int] = None,
                       config: Optional[AuthConfig] = None) -> str:
    config = config or get_auth_config()
    max_age = max_age if max_age is not None else config.session_max_age
    token = create_token(user, max_age, config)
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        max_age=max_age,
        path='/',
        httponly=True,
        samesite='lax',
        secure=config.secure_cookies,
    )
    return token


def clear_session_cookie(response, config: Optional[AuthConfig] = None):
    config = config or get_auth_config()
    response.delete_cookie(
        key=config.cookie_name,
        path='/',
        httponly=True,
        samesite='lax',
        secure=config.secure_cookies,
    )


class UserManager:
    """Handles user lookups, creation and credential checks"""

    def __init__(self, repository: Optional[DictionaryRepository] = None,
                 config: Optional[AuthConfig] = None):
        self._repository = repository
        self._config = config

    @property
    def repository(self) -> DictionaryRepository:
        return self._repository or get_repository()

    @property
    def config(self) -> AuthConfig:
        return self._config or get_auth_config()

    def authenticate(self, identifier: str, password: str) -> Optional[SessionUser]:
        """Match the identifier as email, then username; fall back to the demo account"""
        identifier = (identifier or '').strip().lower()
        if not identifier or not password:
            return None

        user = self.repository.get_user_by_email(identifier)
        if user is None:
            user = self.repository.get_user_by_username(identifier)

        if user and verify_password(password, user.password_hash):
            logger.info(f"User '{user.username}' authenticated")
            return session_user_for(user)

        config = self.config
        if (
            config.demo_user_enabled
            and identifier == config.demo_user_email.lower()
            and password == config.demo_user_password
        ):
            logger.info("Demo user authenticated")
            return SessionUser(id=DEMO_USER_ID, email=config.demo_user_email,
                               name='Admin', role='admin')

        logger.info(f"Failed login for '{identifier}'")
        return None

    def create_user(self, username: str, email: Optional[str], password: str,
                    role: str = DEFAULT_ROLE) -> User:
        username = (username or '').strip().lower()
        if not username:
            raise AuthenticationError("Username is required")
        if len(password or '') < 6:
            raise AuthenticationError("Password must be at least 6 characters long")
        if role not in ROLES:
            raise AuthenticationError(f"Unknown role: {role}")
        email = (email or '').strip().lower() or None
        return self.repository.create_user(username, email, hash_password(password), role)


user_manager = UserManager()
