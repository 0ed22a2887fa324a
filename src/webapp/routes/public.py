# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from webapp.errors import ValidationError
from webapp.rendering import render, translate_for
from webapp.routes import safe_next, with_flash
from webapp.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()
# Only mounted when open registration is enabled.
registration_router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    return render(request, "index/home")


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request, next: str = ""):
    return render(request, "sessions/new", {"next": next})


@router.post("/login")
def login_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    next: str = Form(""),
    services: Services = Depends(get_services),
):
    try:
        user = services.credentials.authenticate(username, password)
    except ValidationError as e:
        logger.info("Failed login attempt for username %r", username)
        return render(
            request,
            "sessions/new",
            {"username": username, "next": next, "error": translate_for(request, e.message_key)},
        )

    resp = RedirectResponse(
        url=with_flash(safe_next(next), translate_for(request, "flash.signed_in")),
        status_code=302,
    )
    services.sessions.login(request, resp, user)
    logger.info("User %s signed in", user.id)
    return resp


@registration_router.get("/register", response_class=HTMLResponse)
def register_get(request: Request):
    return render(request, "users/new")


@registration_router.post("/register")
def register_post(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    services: Services = Depends(get_services),
):
    try:
        user = services.credentials.register_user(username, email, password)
    except ValidationError as e:
        return render(
            request,
            "users/new",
            {"username": username, "email": email, "error": translate_for(request, e.message_key)},
        )

    services.stores.users.save(user)
    logger.info("Registered user %s (%s)", user.id, user.username)

    resp = RedirectResponse(url=with_flash("/", translate_for(request, "flash.user_created")), status_code=302)
    services.sessions.login(request, resp, user)
    return resp
