# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Any, Dict, List

from folio.core.errors import NotFoundError
from folio.core.mapping import ABOUT, MESSAGES, require_spec
from folio.infra.store import EntityStore
from folio.models import AboutInfo, ApiModel


def _not_found(kind: str) -> NotFoundError:
    return NotFoundError(f"{require_spec(kind).label} not found")


def list_records(store: EntityStore, kind: str) -> List[ApiModel]:
    return store.list(kind)


def get_record(store: EntityStore, kind: str, record_id: str) -> ApiModel:
    record = store.get(kind, record_id)
    if record is None:
        raise _not_found(kind)
    return record


def create_record(store: EntityStore, kind: str, fields: Dict[str, Any]) -> ApiModel:
    """Create a record from already-validated fields."""
    return store.create(kind, fields)


def update_record(store: EntityStore, kind: str, record_id: str, fields: Dict[str, Any]) -> ApiModel:
    """Merge the provided fields into an existing record; others stay unchanged."""
    record = store.update(kind, record_id, fields)
    if record is None:
        raise _not_found(kind)
    return record


def delete_record(store: EntityStore, kind: str, record_id: str) -> str:
    if not store.delete(kind, record_id):
        raise _not_found(kind)
    return f"{require_spec(kind).label} deleted successfully"


def mark_message_read(store: EntityStore, message_id: str) -> str:
    if not store.mark_read(message_id):
        raise _not_found(MESSAGES)
    return "Message marked as read"


def get_about(store: EntityStore) -> AboutInfo:
    info = store.get_about()
    if info is None:
        raise _not_found(ABOUT)
    return info


def save_about(store: EntityStore, fields: Dict[str, Any]) -> AboutInfo:
    return store.upsert_about(fields)
