# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from fastapi import HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from webapp.models import Session, User
from webapp.services import get_services

_UNRESOLVED = object()


def load_user_from_request(request: Request) -> Optional[User]:
    services = get_services(request)
    session = services.sessions.resolve(request)
    request.state.session = session
    if session is None or session.anonymous:
        return None
    return services.stores.users.find(session.user_id)


def current_user_optional(request: Request) -> Optional[User]:
    """The logged-in user, resolved once per request and cached on request.state."""
    u = getattr(request.state, "user", _UNRESOLVED)
    if u is not _UNRESOLVED:
        return u
    u = load_user_from_request(request)
    request.state.user = u
    return u


def current_session(request: Request) -> Optional[Session]:
    current_user_optional(request)
    return getattr(request.state, "session", None)


def next_url_for(request: Request) -> str:
    next_url = str(request.url.path)
    if request.url.query:
        next_url += "?" + request.url.query
    return next_url


# ------------------ Gates ------------------
# A gate returns None to let the request through, or the response that ends it.


def require_login(request: Request) -> Optional[Response]:
    if current_user_optional(request) is not None:
        return None
    return RedirectResponse(url="/login?" + urlencode({"next": next_url_for(request)}), status_code=302)


def require_admin(request: Request) -> Optional[Response]:
    u = current_user_optional(request)
    if u is not None and u.is_admin:
        return None
    return RedirectResponse(url="/", status_code=302)


# ------------------ Handler dependencies ------------------


def require_user(request: Request) -> User:
    u = current_user_optional(request)
    if u is None:
        # Only reachable if a handler is mounted outside the gate chain.
        raise HTTPException(status_code=302, headers={"Location": "/login?" + urlencode({"next": next_url_for(request)})})
    return u
