# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by the store, services and HTTP layer.

Each error carries the HTTP status it maps to and a message that is safe to
return to clients.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

VALUE_ERROR_PREFIX = "Value error, "


class FolioError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(FolioError):
    status_code = 400
    default_message = "Validation error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.details = list(details or [])

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        if self.details:
            out["details"] = self.details
        return out

    @classmethod
    def from_errors(cls, errors: Iterable[Dict[str, Any]]) -> "ValidationError":
        message, details = format_validation_errors(errors)
        return cls(message, details)


class NotFoundError(FolioError):
    status_code = 404
    default_message = "Not found"


class AuthenticationError(FolioError):
    status_code = 401
    default_message = "Unauthorized"


class UnexpectedError(FolioError):
    status_code = 500


def _field_path(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in (loc or ())]
    if parts and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    return ".".join(parts)


def _clean_message(msg: str) -> str:
    msg = str(msg or "").strip()
    if msg.startswith(VALUE_ERROR_PREFIX):
        msg = msg[len(VALUE_ERROR_PREFIX):]
    return msg


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> Tuple[str, List[Dict[str, str]]]:
    """Turn pydantic error dicts into one readable sentence plus per-field details.

    Example: ``Validation error: proficiency must be between 1 and 100 at "proficiency"``
    """
    details: List[Dict[str, str]] = []
    parts: List[str] = []
    for err in errors or []:
        field = _field_path(err.get("loc", ()))
        msg = _clean_message(err.get("msg", ""))
        details.append({"field": field, "message": msg})
        parts.append(f'{msg} at "{field}"' if field else msg)
    if not parts:
        return ValidationError.default_message, details
    return "Validation error: " + "; ".join(parts), details
