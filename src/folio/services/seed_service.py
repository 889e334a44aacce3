# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Load sample or initial content into a store from a YAML mapping.

Sections (all optional): ``users``, ``about``, ``projects``, ``skills``.
Seeding is safe to repeat: existing users and about info are kept, and a
collection that already has rows is left alone.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Type

import yaml
from pydantic import ValidationError as PydanticValidationError

from folio.auth.passwords import hash_password
from folio.core.errors import ValidationError
from folio.core.mapping import PROJECTS, SKILLS
from folio.infra.store import EntityStore
from folio.schemas import AboutUpdate, Payload, ProjectCreate, SkillCreate

LOGGER = logging.getLogger(__name__)


def load_seed_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Seed file not found: {p}")
    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValidationError(f"Seed file {p} must contain a mapping at top level")
    return raw


def _validated(schema: Type[Payload], data: Any, where: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{where}: expected a mapping")
    try:
        return schema.model_validate(data).to_fields()
    except PydanticValidationError as e:
        err = ValidationError.from_errors(e.errors())
        raise ValidationError(f"{where}: {err.message}", err.details)


def _seed_users(store: EntityStore, users: Any, admin_password: Optional[str]) -> int:
    if not users:
        return 0
    if not isinstance(users, dict):
        raise ValidationError("users: expected a mapping of username -> settings")
    created = 0
    for uname, udata in users.items():
        username = str(uname or "").strip()
        if not username or store.get_user_by_username(username) is not None:
            continue
        udata = udata if isinstance(udata, dict) else {}
        ph = str(udata.get("password_hash") or "").strip()
        if not ph:
            plain = str(udata.get("password") or "") or (admin_password or "")
            if not plain:
                raise ValidationError(f"users.{username}: provide password, password_hash or an admin password")
            ph = hash_password(plain)
        store.create_user(username, ph, is_admin=bool(udata.get("is_admin", True)))
        created += 1
    return created


def seed_store(store: EntityStore, data: Dict[str, Any], *, admin_password: Optional[str] = None) -> Dict[str, int]:
    """Apply a seed mapping to the store. Returns counts of created rows per section."""
    summary = {"users": 0, "about": 0, "projects": 0, "skills": 0}
    data = data or {}

    summary["users"] = _seed_users(store, data.get("users"), admin_password)

    about = data.get("about")
    if about and store.get_about() is None:
        store.upsert_about(_validated(AboutUpdate, about, "about"))
        summary["about"] = 1

    for kind, schema in ((PROJECTS, ProjectCreate), (SKILLS, SkillCreate)):
        entries = data.get(kind) or []
        if not entries:
            continue
        if not isinstance(entries, list):
            raise ValidationError(f"{kind}: expected a list")
        if store.list(kind):
            LOGGER.info("Seed skipped %s: collection is not empty", kind)
            continue
        rows = [_validated(schema, e, f"{kind}[{i}]") for i, e in enumerate(entries)]
        for row in rows:
            store.create(kind, row)
        summary[kind] = len(rows)

    LOGGER.info(
        "Seed applied users=%d about=%d projects=%d skills=%d",
        summary["users"],
        summary["about"],
        summary["projects"],
        summary["skills"],
    )
    return summary
