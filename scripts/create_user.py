#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from folio.app import build_store
from folio.auth.users import register_user
from folio.config import load_settings


def main() -> None:
    settings = load_settings()
    if settings.store_backend == "memory":
        raise SystemExit("FOLIO_STORE=memory does not persist users; set FOLIO_STORE=workbook")
    store = build_store(settings)

    username = input("Username: ").strip()
    if store.get_user_by_username(username) is not None:
        raise SystemExit(f"User '{username}' already exists")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    user = register_user(store, username, pw1)
    print(f"OK -> {user.username} ({settings.workbook_path})")


if __name__ == "__main__":
    main()
