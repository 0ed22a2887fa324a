# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""User list export for the admin API (json, yaml, csv, xml).

Password hashes are never part of an export.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Dict, Iterable, List, Tuple
from xml.etree import ElementTree as ET

import yaml

from webapp.models import User
from webapp.stores import SessionStore

FORMATS = ("json", "yaml", "csv", "xml")


def user_rows(users: Iterable[User], sessions: SessionStore) -> List[dict]:
    return [
        {
            "id": u.id,
            "username": u.username,
            "email": u.email,
            "role": u.role.value,
            "sessions": [s.id for s in sessions.find_by_user(u.id)],
        }
        for u in users
    ]


def _csv(rows: List[dict]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["ID", "Username", "Email", "Role", "Sessions"])
    for r in rows:
        writer.writerow([r["id"], r["username"], r["email"], r["role"], "\n".join(r["sessions"])])
    return buf.getvalue()


def _xml(rows: List[dict]) -> str:
    root = ET.Element("users")
    for r in rows:
        el = ET.SubElement(root, "user")
        for key in ("id", "username", "email", "role"):
            ET.SubElement(el, key).text = r[key]
        sessions = ET.SubElement(el, "sessions")
        for sid in r["sessions"]:
            ET.SubElement(sessions, "session").text = sid
    ET.indent(root, space="    ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True).decode("utf-8")


def encode_users(rows: List[dict], fmt: str = "json") -> Tuple[str, str, Dict[str, str]]:
    """Return (body, media type, extra headers) for the requested format."""
    f = (fmt or "json").strip().lower()
    if f == "csv":
        return _csv(rows), "text/csv", {"Content-Disposition": "attachment;filename=users.csv"}
    if f == "yaml":
        return yaml.safe_dump(rows, sort_keys=False, allow_unicode=True), "text/yaml", {}
    if f == "xml":
        return _xml(rows), "application/xml", {}
    return json.dumps(rows, indent=4, ensure_ascii=False), "application/json", {}
