# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server side sessions bound to a signed cookie.

The cookie only carries the session id (signed with itsdangerous so that
forged ids are rejected before touching the store). The store is the source
of truth: expiry is checked on every lookup and expired sessions are purged
lazily.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import Request, Response
from itsdangerous import BadSignature, Signer

from webapp.ids import generate_id
from webapp.models import Session, User, utcnow
from webapp.stores import SessionStore

logger = logging.getLogger(__name__)

SESSION_ID_LENGTH = 20
SESSION_DURATION = timedelta(days=3)
SIGNER_SALT = "webapp.session.v1"


class SessionEngine:
    def __init__(
        self,
        store: SessionStore,
        *,
        cookie_name: str,
        secret_key: str,
        cookie_secure: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.cookie_name = cookie_name
        self.cookie_secure = cookie_secure
        self._signer = Signer(secret_key, salt=SIGNER_SALT)
        self._clock = clock

    def _cookie_value(self, session_id: str) -> str:
        return self._signer.sign(session_id).decode("utf-8")

    def _session_id_from(self, token: str) -> Optional[str]:
        if not token:
            return None
        try:
            return self._signer.unsign(token).decode("utf-8")
        except BadSignature:
            return None

    def issue(self, response: Response) -> Session:
        """Create a new anonymous session and set its cookie; not persisted yet."""
        session = Session(
            id=generate_id("sess", SESSION_ID_LENGTH),
            expiry=self._clock() + SESSION_DURATION,
        )
        response.set_cookie(
            self.cookie_name,
            self._cookie_value(session.id),
            expires=session.expiry,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self.cookie_secure,
        )
        return session

    def resolve(self, request: Request) -> Optional[Session]:
        session_id = self._session_id_from(request.cookies.get(self.cookie_name, ""))
        if not session_id:
            return None

        session = self.store.find(session_id)
        if session is None:
            return None

        if session.expired(self._clock()):
            self.store.delete(session)
            logger.debug("Purged expired session %s", session.id)
            return None

        return session

    def resolve_or_issue(self, request: Request, response: Response) -> Session:
        session = self.resolve(request)
        if session is None:
            session = self.issue(response)
        return session

    def attach(self, session: Session, user: User) -> Session:
        active = replace(session, user_id=user.id)
        self.store.save(active)
        return active

    def login(self, request: Request, response: Response, user: User) -> Session:
        return self.attach(self.resolve_or_issue(request, response), user)

    def destroy(self, session: Session) -> None:
        self.store.delete(session)

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(self.cookie_name, path="/")
