# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Entity store persisted to an Excel workbook.

One sheet per kind, header row first. Writes go through openpyxl (one load/save
per mutation, under the store lock); reads go through pandas.
"""

from __future__ import annotations

import json
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from openpyxl import Workbook, load_workbook

from folio.core.mapping import ENTITIES, EntitySpec
from folio.core.utils import as_bool, norm_key, normalize_columns
from folio.infra.store import EntityStore


def ensure_workbook(path: str) -> bool:
    """Create the workbook, missing sheets and missing headers. Returns True if anything was written."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    created = not p.exists()
    wb = Workbook() if created else load_workbook(path)
    default_sheet = wb.active if created else None
    changed = created

    for spec in ENTITIES.values():
        if spec.sheet not in wb.sheetnames:
            ws = wb.create_sheet(spec.sheet)
            for idx, col in enumerate(spec.columns, start=1):
                ws.cell(row=1, column=idx).value = col
            changed = True
            continue
        ws = wb[spec.sheet]
        headers = _headers(ws)
        for col in spec.columns:
            if col not in headers:
                ws.cell(row=1, column=ws.max_column + 1).value = col
                changed = True

    if default_sheet is not None:
        wb.remove(default_sheet)
    if changed:
        wb.save(path)
    return changed


def backup_workbook(path: str) -> str:
    """Create a timestamped .bak copy next to the workbook file."""
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    src = Path(path)
    dst = src.with_suffix(src.suffix + f".bak_{ts}")
    shutil.copy2(src, dst)
    return str(dst)


def read_sheet(path: str, sheet: str) -> pd.DataFrame:
    """Read a sheet into a normalised dataframe of strings ('' for empty cells).

    No NA detection: text such as "NA" or "null" comes back unchanged.
    """
    df = pd.read_excel(path, sheet_name=sheet, dtype=str, keep_default_na=False, na_values=[]).fillna("")
    return normalize_columns(df)


def _headers(ws) -> Dict[str, int]:
    """Normalised header -> column index."""
    headers: Dict[str, int] = {}
    for col in range(1, ws.max_column + 1):
        v = ws.cell(row=1, column=col).value
        if v is None:
            continue
        headers[norm_key(v)] = col
    return headers


def _find_row(ws, col_id: int, record_id: str) -> Optional[int]:
    for row in range(2, ws.max_row + 1):
        v = ws.cell(row=row, column=col_id).value
        if str(v or "") == record_id:
            return row
    return None


def _to_cell(value: Any, col_type: str) -> Any:
    if value is None:
        return None
    if col_type == "json":
        return json.dumps(list(value), ensure_ascii=False)
    if col_type == "bool":
        return "true" if value else "false"
    if col_type == "datetime":
        return value.isoformat() if isinstance(value, datetime) else str(value)
    if col_type == "int":
        return int(value)
    return str(value)


def _from_cell(raw: Any, col_type: str) -> Any:
    s = "" if raw is None else str(raw)
    if col_type == "json":
        return json.loads(s) if s else []
    if col_type == "bool":
        return as_bool(s, False)
    if not s:
        return None
    if col_type == "int":
        return int(float(s))
    return s


class WorkbookStore(EntityStore):
    def __init__(self, path: str):
        super().__init__()
        self.path = str(Path(path).resolve())
        with self._lock:
            ensure_workbook(self.path)

    def _sheet(self, wb, spec: EntitySpec):
        if spec.sheet not in wb.sheetnames:
            raise ValueError(f"Sheet '{spec.sheet}' is missing from {self.path}")
        ws = wb[spec.sheet]
        headers = _headers(ws)
        if "id" not in headers:
            raise ValueError(f"Sheet '{spec.sheet}' has no 'id' column")
        return ws, headers

    def _write_row(self, ws, headers: Dict[str, int], row_idx: int, spec: EntitySpec, row: Dict[str, Any]) -> None:
        for col, col_type in spec.columns.items():
            if col not in headers:
                continue
            cell = ws.cell(row=row_idx, column=headers[col])
            cell.value = _to_cell(row.get(col), col_type)
            if isinstance(cell.value, str):
                # Text stays text, even with a leading '='
                cell.data_type = "s"

    def _rows(self, spec: EntitySpec) -> List[Dict[str, Any]]:
        with self._lock:
            df = read_sheet(self.path, spec.sheet)
        out: List[Dict[str, Any]] = []
        for raw in df.to_dict(orient="records"):
            if not str(raw.get("id", "")).strip():
                continue
            out.append({col: _from_cell(raw.get(col), col_type) for col, col_type in spec.columns.items()})
        return out

    def _insert(self, spec: EntitySpec, row: Dict[str, Any]) -> None:
        wb = load_workbook(self.path)
        ws, headers = self._sheet(wb, spec)
        col_id = headers["id"]

        # Last data row by scanning the id column (skips trailing formatted rows)
        last = 1
        for r in range(2, ws.max_row + 1):
            v = ws.cell(row=r, column=col_id).value
            if str(v or "").strip():
                last = r
                if str(v) == row["id"]:
                    raise ValueError(f"{spec.label} '{row['id']}' already exists")

        self._write_row(ws, headers, last + 1, spec, row)
        wb.save(self.path)

    def _replace(self, spec: EntitySpec, row: Dict[str, Any]) -> bool:
        wb = load_workbook(self.path)
        ws, headers = self._sheet(wb, spec)
        found = _find_row(ws, headers["id"], str(row["id"]))
        if found is None:
            return False
        self._write_row(ws, headers, found, spec, row)
        wb.save(self.path)
        return True

    def _remove(self, spec: EntitySpec, record_id: str) -> bool:
        wb = load_workbook(self.path)
        ws, headers = self._sheet(wb, spec)
        found = _find_row(ws, headers["id"], record_id)
        if found is None:
            return False
        ws.delete_rows(found)
        wb.save(self.path)
        return True
