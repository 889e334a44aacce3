# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- Credential verification against the entity store's users
- Server-side sessions behind signed, opaque cookie tokens (itsdangerous)
"""
