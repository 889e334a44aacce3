# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from folio.auth.session import SessionManager
from folio.config import Settings
from folio.core.errors import AuthenticationError


@dataclass(frozen=True)
class CurrentUser:
    id: str
    username: str
    is_admin: bool


def load_user_from_request(request: Request) -> Optional[CurrentUser]:
    """Resolve the session cookie to a user; None if the session or the user is gone."""
    settings: Settings = request.app.state.settings
    token = request.cookies.get(settings.cookie_name, "")
    if not token:
        return None
    user_id = request.app.state.sessions.resolve(token)
    if not user_id:
        return None
    u = request.app.state.store.get_user(user_id)
    if u is None:
        return None
    return CurrentUser(id=u.id, username=u.username, is_admin=u.is_admin)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    if hasattr(request.state, "user"):
        return request.state.user
    return load_user_from_request(request)


def require_user(request: Request) -> CurrentUser:
    """Gate for mutation and privileged-read routes (any authenticated user passes)."""
    u = current_user_optional(request)
    if u:
        return u
    raise AuthenticationError("Unauthorized")


def cookie_settings(settings: Settings, sessions: SessionManager) -> dict:
    """Cookie attributes; Max-Age follows the lifetime of the sessions it carries."""
    return {
        "httponly": True,
        "samesite": "lax",
        "secure": settings.cookie_secure,
        "max_age": sessions.max_age,
    }
