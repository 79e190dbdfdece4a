#!/usr/bin/env python3
"""
FastAPI dependencies for sessions and editorial permissions
"""

from typing import Optional

from fastapi import HTTPException, Request, status

from duech.auth import get_session_user
from duech.definitions import SessionUser
from duech.editor_mode import is_editor_request


async def get_optional_session_user(request: Request) -> Optional[SessionUser]:
    """Get the session user if authenticated, None otherwise"""
    user = getattr(request.state, 'session_user', None)
    if user is None:
        user = get_session_user(request)
    return user


async def require_session_user(request: Request) -> SessionUser:
    user = await get_optional_session_user(request)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


async def require_editor(request: Request) -> SessionUser:
    """Session user with an editor role, in editor mode"""
    user = await require_session_user(request)
    if not is_editor_request(request) or not user.is_editor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Editor access required",
        )
    return user


async def require_admin(request: Request) -> SessionUser:
    user = await require_session_user(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    return user
