# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

DEFAULT_LANGUAGE = "en"


class Role(str, Enum):
    STANDARD = "standard"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        v = (value or "").strip().lower()
        for role in cls:
            if role.value == v:
                return role
        return cls.STANDARD


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str
    password_hash: str = ""
    role: Role = Role.STANDARD

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class Session:
    """Server side proof of a login, referenced by the session cookie.

    A session with an empty ``user_id`` is anonymous and never authenticates
    a request.
    """

    id: str
    expiry: datetime
    user_id: str = ""

    @property
    def anonymous(self) -> bool:
        return not self.user_id

    def expired(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return now >= self.expiry


@dataclass(frozen=True)
class UserConfig:
    user_id: str
    language: str = DEFAULT_LANGUAGE
    dark_mode: bool = False


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by some databases) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
