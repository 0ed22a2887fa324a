# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
import string

ID_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
PASSWORD_ALPHABET = ID_ALPHABET + "!@#$%^&*()_-=+/?[]{}|<>~;:,."


def generate_id(prefix: str, length: int) -> str:
    """Return ``<prefix>_<length random alphanumerics>``."""
    body = "".join(secrets.choice(ID_ALPHABET) for _ in range(length))
    return f"{prefix}_{body}"


def generate_password(length: int = 16) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
