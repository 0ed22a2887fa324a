# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Storage contracts and backend selection.

Two interchangeable backends implement the same contracts:
- ``files``: one YAML document per store in the data directory
- ``db``: SQLAlchemy tables in any database reachable by URL

Lookups that find nothing return ``None``; ``save`` is an upsert keyed by the
primary id; storage failures raise ``InfrastructureError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from webapp.models import Session, User, UserConfig

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    def find(self, user_id: str) -> Optional[User]: ...

    def find_by_username(self, username: str) -> Optional[User]: ...

    def find_by_email(self, email: str) -> Optional[User]: ...

    def all(self) -> List[User]: ...

    def save(self, user: User) -> None: ...

    def delete(self, user: User) -> None: ...


class SessionStore(Protocol):
    def find(self, session_id: str) -> Optional[Session]: ...

    def find_by_user(self, user_id: str) -> List[Session]: ...

    def save(self, session: Session) -> None: ...

    def delete(self, session: Session) -> None: ...


class UserConfigStore(Protocol):
    def find(self, user_id: str) -> Optional[UserConfig]: ...

    def all(self) -> List[UserConfig]: ...

    def save(self, config: UserConfig) -> None: ...

    def delete(self, config: UserConfig) -> None: ...


@dataclass(frozen=True)
class Stores:
    users: UserStore
    sessions: SessionStore
    userconfigs: UserConfigStore


def uses_files(db_connector: str) -> bool:
    return (db_connector or "").strip().lower() in {"", "files"}


def build_stores(*, db_connector: str, data_directory: Path) -> Stores:
    """Create the three stores for the configured backend."""
    if uses_files(db_connector):
        from webapp.stores.files import FileSessionStore, FileUserConfigStore, FileUserStore

        data_directory = Path(data_directory)
        stores = Stores(
            users=FileUserStore(data_directory / "users.yaml"),
            sessions=FileSessionStore(data_directory / "sessions.yaml"),
            userconfigs=FileUserConfigStore(data_directory / "userconfigs.yaml"),
        )
        logger.info("File storage backend created in %s", data_directory)
        return stores

    from webapp.stores.db import Database, DBSessionStore, DBUserConfigStore, DBUserStore

    database = Database(db_connector)
    stores = Stores(
        users=DBUserStore(database),
        sessions=DBSessionStore(database),
        userconfigs=DBUserConfigStore(database),
    )
    logger.info("Database storage backend created (%s)", database.url_for_log)
    return stores
