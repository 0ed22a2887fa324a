# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication.

This package provides:
- Password hashing/verification (argon2)
- The credential pipeline: registration, login, account updates
- Server side sessions referenced by a signed cookie (itsdangerous)
"""
