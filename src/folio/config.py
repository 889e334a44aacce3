# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from folio.core.utils import env_bool, env_int, env_str

THIRTY_DAYS_SECONDS = 30 * 24 * 60 * 60
ONE_DAY_SECONDS = 24 * 60 * 60

STORE_BACKENDS = {"memory", "workbook"}


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str = "development"
    cookie_name: str = "folio_session"
    cookie_secure: bool = False
    session_max_age: int = THIRTY_DAYS_SECONDS
    session_prune_interval: int = ONE_DAY_SECONDS
    store_backend: str = "memory"
    workbook_path: str = "data/portfolio.xlsx"
    seed_path: str = ""
    admin_username: str = ""
    admin_password: str = ""
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def load_settings() -> Settings:
    """Read settings from the environment.

    A missing session secret is fatal: there is no fallback key.
    """
    secret = env_str("SESSION_SECRET") or env_str("FOLIO_SECRET_KEY")
    if not secret:
        raise RuntimeError("SESSION_SECRET (or FOLIO_SECRET_KEY) must be set")

    env = env_str("FOLIO_ENV", "development").lower() or "development"

    backend = env_str("FOLIO_STORE", "memory").lower() or "memory"
    if backend not in STORE_BACKENDS:
        raise RuntimeError(f"FOLIO_STORE must be one of {sorted(STORE_BACKENDS)}, got '{backend}'")

    return Settings(
        secret_key=secret,
        env=env,
        cookie_name=env_str("FOLIO_COOKIE_NAME", "folio_session") or "folio_session",
        cookie_secure=env_bool("FOLIO_COOKIE_SECURE", env == "production"),
        session_max_age=env_int("FOLIO_SESSION_MAX_AGE", THIRTY_DAYS_SECONDS),
        session_prune_interval=env_int("FOLIO_SESSION_PRUNE_INTERVAL", ONE_DAY_SECONDS),
        store_backend=backend,
        workbook_path=str(Path(env_str("FOLIO_WORKBOOK_PATH", "data/portfolio.xlsx")).resolve()),
        seed_path=env_str("FOLIO_SEED_PATH"),
        admin_username=env_str("FOLIO_ADMIN_USERNAME"),
        admin_password=env_str("FOLIO_ADMIN_PASSWORD"),
        log_level=env_str("FOLIO_LOG_LEVEL", "INFO") or "INFO",
        log_json=env_bool("FOLIO_LOG_JSON", False),
    )
