# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""YAML file backed stores.

Each store keeps the whole document in memory and rewrites the file on every
``save``/``delete``. A per-store lock serializes access inside one process;
several processes sharing the same files are NOT supported.
"""

from __future__ import annotations

import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar

import yaml

from webapp.errors import InfrastructureError
from webapp.models import DEFAULT_LANGUAGE, Role, Session, User, UserConfig, as_utc

FORMAT_VERSION = 1

R = TypeVar("R")


class _YamlStore(Generic[R]):
    section = ""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._records: Dict[str, R] = self._load()

    # -- (de)serialization, per store --
    def _decode(self, key: str, data: Dict[str, Any]) -> R:
        raise NotImplementedError

    def _encode(self, record: R) -> Dict[str, Any]:
        raise NotImplementedError

    def _key(self, record: R) -> str:
        raise NotImplementedError

    # -- file handling --
    def _load(self) -> Dict[str, R]:
        if not self.path.exists():
            return {}
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise InfrastructureError(f"Unable to read {self.path}: {e}") from e
        section = (raw.get(self.section) or {}) if isinstance(raw, dict) else {}
        out: Dict[str, R] = {}
        for key, data in section.items():
            k = str(key).strip()
            if not k or not isinstance(data, dict):
                continue
            try:
                out[k] = self._decode(k, data)
            except (TypeError, ValueError) as e:
                raise InfrastructureError(f"Corrupt record {k!r} in {self.path}: {e}") from e
        return out

    def dump(self, records: Optional[Dict[str, R]] = None) -> str:
        with self._lock:
            records = self._records if records is None else records
            doc = {
                "version": FORMAT_VERSION,
                self.section: {k: self._encode(records[k]) for k in sorted(records)},
            }
        return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)

    def _write(self, records: Dict[str, R]) -> None:
        contents = self.dump(records)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(contents)
                os.chmod(tmp, 0o660)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise InfrastructureError(f"Unable to write {self.path}: {e}") from e

    # -- common operations --
    def _find(self, key: str) -> Optional[R]:
        with self._lock:
            return self._records.get(key)

    def _values(self) -> List[R]:
        with self._lock:
            return list(self._records.values())

    # The in-memory map is only replaced once the file is written.
    def save(self, record: R) -> None:
        with self._lock:
            records = dict(self._records)
            records[self._key(record)] = record
            self._write(records)
            self._records = records

    def delete(self, record: R) -> None:
        with self._lock:
            records = dict(self._records)
            if records.pop(self._key(record), None) is None:
                return
            self._write(records)
            self._records = records


class FileUserStore(_YamlStore[User]):
    section = "users"

    def _decode(self, key: str, data: Dict[str, Any]) -> User:
        return User(
            id=key,
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
            password_hash=str(data.get("password_hash") or ""),
            role=Role.parse(data.get("role")),
        )

    def _encode(self, user: User) -> Dict[str, Any]:
        return {
            "username": user.username,
            "email": user.email,
            "password_hash": user.password_hash,
            "role": user.role.value,
        }

    def _key(self, user: User) -> str:
        return user.id

    def find(self, user_id: str) -> Optional[User]:
        return self._find(user_id)

    def find_by_username(self, username: str) -> Optional[User]:
        name = (username or "").lower()
        if not name:
            return None
        for u in self._values():
            if u.username.lower() == name:
                return u
        return None

    def find_by_email(self, email: str) -> Optional[User]:
        mail = (email or "").lower()
        if not mail:
            return None
        for u in self._values():
            if u.email.lower() == mail:
                return u
        return None

    def all(self) -> List[User]:
        return sorted(self._values(), key=lambda u: u.username.lower())


class FileSessionStore(_YamlStore[Session]):
    section = "sessions"

    def _decode(self, key: str, data: Dict[str, Any]) -> Session:
        expiry = data.get("expiry")
        if not isinstance(expiry, datetime):
            expiry = datetime.fromisoformat(str(expiry))
        return Session(id=key, user_id=str(data.get("user_id") or ""), expiry=as_utc(expiry))

    def _encode(self, session: Session) -> Dict[str, Any]:
        return {"user_id": session.user_id, "expiry": as_utc(session.expiry).isoformat()}

    def _key(self, session: Session) -> str:
        return session.id

    def find(self, session_id: str) -> Optional[Session]:
        return self._find(session_id)

    def find_by_user(self, user_id: str) -> List[Session]:
        if not user_id:
            return []
        return [s for s in self._values() if s.user_id == user_id]


class FileUserConfigStore(_YamlStore[UserConfig]):
    section = "userconfigs"

    def _decode(self, key: str, data: Dict[str, Any]) -> UserConfig:
        return UserConfig(
            user_id=key,
            language=str(data.get("language") or DEFAULT_LANGUAGE),
            dark_mode=bool(data.get("dark_mode", False)),
        )

    def _encode(self, config: UserConfig) -> Dict[str, Any]:
        return {"language": config.language, "dark_mode": config.dark_mode}

    def _key(self, config: UserConfig) -> str:
        return config.user_id

    def find(self, user_id: str) -> Optional[UserConfig]:
        return self._find(user_id)

    def all(self) -> List[UserConfig]:
        return self._values()
