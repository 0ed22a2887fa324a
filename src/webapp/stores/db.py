# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Relational stores (SQLAlchemy 2.x ORM).

The schema is created idempotently the first time a ``Database`` is used.
``save`` relies on ``Session.merge`` so the last writer wins; there are no
optimistic concurrency tokens.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.orm import Session as DBSession

from webapp.errors import InfrastructureError
from webapp.models import DEFAULT_LANGUAGE, Role, Session, User, UserConfig, as_utc


class Base(DeclarativeBase):
    """Base class for the ORM rows."""


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=Role.STANDARD.value)


class SessionRow(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    userid: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    expiry: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class UserConfigRow(Base):
    __tablename__ = "userconfigs"

    userid: Mapped[str] = mapped_column(String(255), primary_key=True)
    language: Mapped[str] = mapped_column(String(8), nullable=False, default=DEFAULT_LANGUAGE)
    darkmode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Database:
    """Engine + session factory shared by the three stores."""

    def __init__(self, url: str, *, engine: Optional[Engine] = None):
        self.url = url
        self._engine = engine
        self._factory: Optional[sessionmaker[DBSession]] = None
        self._lock = threading.Lock()

    @property
    def url_for_log(self) -> str:
        try:
            return make_url(self.url).render_as_string(hide_password=True)
        except SQLAlchemyError:
            return "<unparseable url>"

    def _get_factory(self) -> sessionmaker[DBSession]:
        with self._lock:
            if self._factory is None:
                try:
                    if self._engine is None:
                        self._engine = create_engine(self.url, future=True)
                    Base.metadata.create_all(bind=self._engine)
                except SQLAlchemyError as e:
                    raise InfrastructureError(f"Unable to create database schema: {e}") from e
                self._factory = sessionmaker(bind=self._engine, autoflush=False, expire_on_commit=False)
            return self._factory

    def create_schema(self) -> None:
        self._get_factory()

    @contextmanager
    def session(self) -> Iterator[DBSession]:
        """Provide a transactional scope; database errors become InfrastructureError."""
        db = self._get_factory()()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise InfrastructureError(f"Database error: {e}") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()


def _to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password,
        role=Role.parse(row.role),
    )


def _to_session(row: SessionRow) -> Session:
    return Session(id=row.id, user_id=row.userid or "", expiry=as_utc(row.expiry))


def _to_userconfig(row: UserConfigRow) -> UserConfig:
    return UserConfig(user_id=row.userid, language=row.language or DEFAULT_LANGUAGE, dark_mode=bool(row.darkmode))


class DBUserStore:
    def __init__(self, database: Database):
        self.db = database
        database.create_schema()

    def find(self, user_id: str) -> Optional[User]:
        with self.db.session() as s:
            row = s.get(UserRow, user_id)
            return _to_user(row) if row else None

    def _find_by(self, column, value: str) -> Optional[User]:
        v = (value or "").lower()
        if not v:
            return None
        with self.db.session() as s:
            row = s.scalars(select(UserRow).where(func.lower(column) == v).limit(1)).first()
            return _to_user(row) if row else None

    def find_by_username(self, username: str) -> Optional[User]:
        return self._find_by(UserRow.username, username)

    def find_by_email(self, email: str) -> Optional[User]:
        return self._find_by(UserRow.email, email)

    def all(self) -> List[User]:
        with self.db.session() as s:
            rows = s.scalars(select(UserRow).order_by(func.lower(UserRow.username))).all()
            return [_to_user(r) for r in rows]

    def save(self, user: User) -> None:
        with self.db.session() as s:
            s.merge(
                UserRow(
                    id=user.id,
                    username=user.username,
                    email=user.email,
                    password=user.password_hash,
                    role=user.role.value,
                )
            )

    def delete(self, user: User) -> None:
        with self.db.session() as s:
            row = s.get(UserRow, user.id)
            if row is not None:
                s.delete(row)


class DBSessionStore:
    def __init__(self, database: Database):
        self.db = database
        database.create_schema()

    def find(self, session_id: str) -> Optional[Session]:
        with self.db.session() as s:
            row = s.get(SessionRow, session_id)
            return _to_session(row) if row else None

    def find_by_user(self, user_id: str) -> List[Session]:
        if not user_id:
            return []
        with self.db.session() as s:
            rows = s.scalars(select(SessionRow).where(SessionRow.userid == user_id)).all()
            return [_to_session(r) for r in rows]

    def save(self, session: Session) -> None:
        with self.db.session() as s:
            s.merge(SessionRow(id=session.id, userid=session.user_id, expiry=as_utc(session.expiry)))

    def delete(self, session: Session) -> None:
        with self.db.session() as s:
            row = s.get(SessionRow, session.id)
            if row is not None:
                s.delete(row)


class DBUserConfigStore:
    def __init__(self, database: Database):
        self.db = database
        database.create_schema()

    def find(self, user_id: str) -> Optional[UserConfig]:
        with self.db.session() as s:
            row = s.get(UserConfigRow, user_id)
            return _to_userconfig(row) if row else None

    def all(self) -> List[UserConfig]:
        with self.db.session() as s:
            return [_to_userconfig(r) for r in s.scalars(select(UserConfigRow)).all()]

    def save(self, config: UserConfig) -> None:
        with self.db.session() as s:
            s.merge(UserConfigRow(userid=config.user_id, language=config.language, darkmode=config.dark_mode))

    def delete(self, config: UserConfig) -> None:
        with self.db.session() as s:
            row = s.get(UserConfigRow, config.user_id)
            if row is not None:
                s.delete(row)
