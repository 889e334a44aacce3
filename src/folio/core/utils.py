# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def none_if_blank(value: Any) -> Optional[str]:
    """Trim a text value; empty strings become None."""
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def has_control_chars(value: Any) -> bool:
    """True for text holding control characters a workbook cell cannot store (tab and newlines are fine)."""
    values = value if isinstance(value, (list, tuple)) else [value]
    return any(isinstance(v, str) and ILLEGAL_CHARACTERS_RE.search(v) is not None for v in values)


def as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if not s:
        return default
    return s in TRUE_VALUES


def env_str(name: str, default: str = "") -> str:
    return str(os.getenv(name, default) or "").strip()


def env_bool(name: str, default: bool = False) -> bool:
    return as_bool(os.getenv(name), default)


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got '{raw}'")


def norm_key(s: Any) -> str:
    """Normalise a header/field key to a stable snake_case-like lower format."""
    return str(s or "").strip().replace(" ", "_").replace("-", "_").lower()


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Normalise dataframe column names with norm_key."""
    df = df.copy()
    df.columns = pd.Index(df.columns).map(norm_key)
    return df
