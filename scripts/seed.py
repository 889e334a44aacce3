#!/usr/bin/env python3
from __future__ import annotations

import sys
from getpass import getpass
from pathlib import Path

from folio.app import build_store
from folio.config import load_settings
from folio.infra.workbook_store import backup_workbook
from folio.services.seed_service import load_seed_file, seed_store

DEFAULT_SEED_PATH = Path(__file__).resolve().parents[1] / "data" / "seed.yml"


def main() -> None:
    settings = load_settings()
    if settings.store_backend == "memory":
        raise SystemExit("FOLIO_STORE=memory does not persist; set FOLIO_STORE=workbook (or use FOLIO_SEED_PATH)")

    seed_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEED_PATH
    data = load_seed_file(str(seed_path))

    admin_password = settings.admin_password
    if data.get("users") and not admin_password:
        admin_password = getpass("Password for seeded users without one: ")

    if Path(settings.workbook_path).exists():
        print(f"Backup -> {backup_workbook(settings.workbook_path)}")

    store = build_store(settings)
    summary = seed_store(store, data, admin_password=admin_password or None)
    for section, count in summary.items():
        print(f"{section}: {count} created")


if __name__ == "__main__":
    main()
