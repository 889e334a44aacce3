# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from folio.auth.passwords import burn_verification, hash_password, verify_password
from folio.infra.store import EntityStore
from folio.models import User

LOGGER = logging.getLogger(__name__)


def authenticate(store: EntityStore, username: str, password: str) -> Optional[User]:
    """Return the user for a valid username/password pair, else None.

    The caller cannot tell an unknown username from a wrong password.
    """
    u = (username or "").strip()
    if not u or not password:
        return None
    user = store.get_user_by_username(u)
    if user is None:
        burn_verification(password)
        return None
    if not verify_password(user.password_hash, password):
        return None
    return user


def register_user(store: EntityStore, username: str, password: str, *, is_admin: bool = True) -> User:
    """Hash the password and create the user (admin by default)."""
    return store.create_user(username, hash_password(password), is_admin=is_admin)


def ensure_admin(store: EntityStore, username: str, password: str) -> Optional[User]:
    """Create the admin user if it does not exist yet. Returns the new user, or None if it already existed."""
    if not username or not password:
        return None
    if store.get_user_by_username(username) is not None:
        return None
    user = register_user(store, username, password)
    LOGGER.info("Admin user ensured username=%s", username)
    return user
