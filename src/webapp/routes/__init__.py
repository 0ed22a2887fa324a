# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP handlers, one router per gate stage:

- ``public``: reachable by anyone
- ``secure``: behind the login gate
- ``admin``: behind the login and admin gates
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def safe_next(next_url: str) -> str:
    """Only local paths are accepted as redirect targets."""
    n = (next_url or "").strip()
    if not n.startswith("/") or n.startswith("//") or "\\" in n:
        return "/"
    return n


def with_flash(url: str, message: str) -> str:
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "flash"]
    query.append(("flash", message))
    return urlunsplit(("", "", parts.path or "/", urlencode(query), parts.fragment))
