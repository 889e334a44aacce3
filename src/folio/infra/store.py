# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Entity store contract and the in-memory backend.

``EntityStore`` implements every public operation on top of four row-level
primitives (``_rows``, ``_insert``, ``_replace``, ``_remove``). Backends only
move plain dict rows; record models are built here.
"""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic.alias_generators import to_camel

from folio.core.errors import ValidationError
from folio.core.mapping import ABOUT, CONTENT_KINDS, MESSAGES, USERS, EntitySpec, require_spec
from folio.core.utils import has_control_chars, new_id, utcnow
from folio.models import ABOUT_ID, AboutInfo, ApiModel, User

LOGGER = logging.getLogger(__name__)

# Defaults applied on create, before the caller's fields
CREATE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "projects": {"featured": False, "order": 0},
    "skills": {"order": 0},
    "messages": {"read": False, "subject": None},
}


def _content_spec(kind: str) -> EntitySpec:
    spec = require_spec(kind)
    if spec.kind not in CONTENT_KINDS:
        raise ValueError(f"'{kind}' does not support generic CRUD")
    return spec


def _check_storable(fields: Dict[str, Any]) -> None:
    for col, value in fields.items():
        if has_control_chars(value):
            raise ValidationError(f"{to_camel(col)} contains unsupported control characters")


def _sort_key(spec: EntitySpec):
    def key(record: ApiModel):
        return tuple(getattr(record, f) for f in spec.order_by)

    return key


class EntityStore(ABC):
    """Typed CRUD over projects, skills, contact messages, about info and users."""

    def __init__(self) -> None:
        self._lock = threading.RLock()

    # ------------------ Backend primitives ------------------

    @abstractmethod
    def _rows(self, spec: EntitySpec) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def _insert(self, spec: EntitySpec, row: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _replace(self, spec: EntitySpec, row: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def _remove(self, spec: EntitySpec, record_id: str) -> bool:
        ...

    def _find(self, spec: EntitySpec, record_id: str) -> Optional[Dict[str, Any]]:
        rid = str(record_id or "")
        for row in self._rows(spec):
            if str(row.get("id")) == rid:
                return row
        return None

    # ------------------ Content kinds ------------------

    def list(self, kind: str) -> List[ApiModel]:
        spec = _content_spec(kind)
        records = [spec.model.model_validate(r) for r in self._rows(spec)]
        return sorted(records, key=_sort_key(spec))

    def get(self, kind: str, record_id: str) -> Optional[ApiModel]:
        spec = _content_spec(kind)
        row = self._find(spec, record_id)
        return spec.model.model_validate(row) if row is not None else None

    def create(self, kind: str, fields: Dict[str, Any]) -> ApiModel:
        spec = _content_spec(kind)
        row: Dict[str, Any] = dict(CREATE_DEFAULTS.get(spec.kind, {}))
        row.update(fields or {})
        _check_storable(row)
        row["id"] = new_id()
        if "created_at" in spec.columns:
            row["created_at"] = utcnow()
        record = spec.model.model_validate(row)
        with self._lock:
            self._insert(spec, record.model_dump())
        LOGGER.info("%s created id=%s", spec.label, record.id)
        return record

    def update(self, kind: str, record_id: str, fields: Dict[str, Any]) -> Optional[ApiModel]:
        spec = _content_spec(kind)
        changes = {k: v for k, v in (fields or {}).items() if k in spec.columns and k not in ("id", "created_at")}
        _check_storable(changes)
        with self._lock:
            row = self._find(spec, record_id)
            if row is None:
                return None
            merged = {**row, **changes}
            record = spec.model.model_validate(merged)
            if changes:
                self._replace(spec, record.model_dump())
        if changes:
            LOGGER.info("%s updated id=%s fields=%s", spec.label, record.id, ",".join(sorted(changes)))
        return record

    def delete(self, kind: str, record_id: str) -> bool:
        spec = _content_spec(kind)
        with self._lock:
            removed = self._remove(spec, str(record_id or ""))
        if removed:
            LOGGER.info("%s deleted id=%s", spec.label, record_id)
        return removed

    def mark_read(self, message_id: str) -> bool:
        """Set read=true on a contact message. Returns False if it does not exist."""
        spec = require_spec(MESSAGES)
        with self._lock:
            row = self._find(spec, message_id)
            if row is None:
                return False
            if not row.get("read"):
                self._replace(spec, {**row, "read": True})
        return True

    # ------------------ About (singleton) ------------------

    def get_about(self) -> Optional[AboutInfo]:
        row = self._find(require_spec(ABOUT), ABOUT_ID)
        return AboutInfo.model_validate(row) if row is not None else None

    def upsert_about(self, fields: Dict[str, Any]) -> AboutInfo:
        """Create the 'main' about record if absent, else merge fields into it."""
        spec = require_spec(ABOUT)
        changes = {k: v for k, v in (fields or {}).items() if k in spec.columns and k not in ("id", "updated_at")}
        _check_storable(changes)
        with self._lock:
            existing = self._find(spec, ABOUT_ID)
            base = dict(existing) if existing is not None else {}
            record = AboutInfo.model_validate({**base, **changes, "id": ABOUT_ID, "updated_at": utcnow()})
            if existing is None:
                self._insert(spec, record.model_dump())
            else:
                self._replace(spec, record.model_dump())
        LOGGER.info("About info %s", "created" if existing is None else "updated")
        return record

    # ------------------ Users ------------------

    def list_users(self) -> List[User]:
        spec = require_spec(USERS)
        users = [User.model_validate(r) for r in self._rows(spec)]
        return sorted(users, key=_sort_key(spec))

    def get_user(self, user_id: str) -> Optional[User]:
        row = self._find(require_spec(USERS), user_id)
        return User.model_validate(row) if row is not None else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive username match."""
        if not username:
            return None
        for row in self._rows(require_spec(USERS)):
            if row.get("username") == username:
                return User.model_validate(row)
        return None

    def create_user(self, username: str, password_hash: str, *, is_admin: bool = True) -> User:
        username = (username or "").strip()
        if not username:
            raise ValidationError("username is required")
        if not password_hash:
            raise ValidationError("password hash is required")
        _check_storable({"username": username})
        spec = require_spec(USERS)
        with self._lock:
            if self.get_user_by_username(username) is not None:
                raise ValidationError(f"Username '{username}' already exists")
            user = User(id=new_id(), username=username, password_hash=password_hash, is_admin=is_admin)
            self._insert(spec, user.model_dump())
        LOGGER.info("User created username=%s", username)
        return user


class MemoryStore(EntityStore):
    """Rows held in per-kind dictionaries. State lives as long as the process."""

    def __init__(self) -> None:
        super().__init__()
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _table(self, spec: EntitySpec) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(spec.kind, {})

    def _rows(self, spec: EntitySpec) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._table(spec).values()]

    def _insert(self, spec: EntitySpec, row: Dict[str, Any]) -> None:
        table = self._table(spec)
        if row["id"] in table:
            raise ValueError(f"{spec.label} '{row['id']}' already exists")
        table[row["id"]] = copy.deepcopy(row)

    def _replace(self, spec: EntitySpec, row: Dict[str, Any]) -> bool:
        table = self._table(spec)
        if row["id"] not in table:
            return False
        table[row["id"]] = copy.deepcopy(row)
        return True

    def _remove(self, spec: EntitySpec, record_id: str) -> bool:
        return self._table(spec).pop(record_id, None) is not None
