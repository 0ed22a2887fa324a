# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from webapp.errors import ValidationError
from webapp.models import User, UserConfig
from webapp.permissions import current_session, require_user
from webapp.rendering import render, translate_for
from webapp.routes import with_flash
from webapp.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


def userconfig_json(config: UserConfig) -> dict:
    return {"userID": config.user_id, "language": config.language, "darkMode": config.dark_mode}


@router.get("/signout", response_class=HTMLResponse)
def signout(request: Request, services: Services = Depends(get_services)):
    session = current_session(request)
    if session is not None:
        services.sessions.destroy(session)
        logger.info("User %s signed out", session.user_id)
    request.state.user = None
    resp = render(request, "sessions/destroy")
    services.sessions.clear_cookie(resp)
    return resp


@router.get("/account", response_class=HTMLResponse)
def account_edit(request: Request, user: User = Depends(require_user)):
    return render(request, "users/edit", {"user": user, "action": "/account", "admin_override": user.is_admin})


@router.post("/account")
def account_update(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    currentPassword: str = Form(""),
    newPassword: str = Form(""),
    user: User = Depends(require_user),
    services: Services = Depends(get_services),
):
    try:
        updated = services.credentials.update_user(
            user, username, email, currentPassword, newPassword, is_admin_actor=user.is_admin
        )
    except ValidationError as e:
        return render(
            request,
            "users/edit",
            {
                "user": replace(user, username=username, email=email),
                "action": "/account",
                "admin_override": user.is_admin,
                "error": translate_for(request, e.message_key),
            },
        )

    services.stores.users.save(updated)
    logger.info("User %s updated their account", updated.id)
    return RedirectResponse(url=with_flash("/account", translate_for(request, "flash.user_updated")), status_code=302)


@router.get("/settings", response_class=HTMLResponse)
def settings_edit(
    request: Request,
    user: User = Depends(require_user),
    services: Services = Depends(get_services),
):
    return render(request, "userconfigs/edit", {"userconfig": services.userconfigs.find_or_default(user.id)})


@router.post("/settings")
def settings_update(
    request: Request,
    language: str = Form(""),
    darkmode: str = Form(""),
    user: User = Depends(require_user),
    services: Services = Depends(get_services),
):
    current = services.userconfigs.find_or_default(user.id)
    try:
        updated = services.userconfigs.update(current, language, darkmode == "dark")
    except ValidationError as e:
        return render(
            request,
            "userconfigs/edit",
            {"userconfig": current, "error": translate_for(request, e.message_key)},
        )

    services.stores.userconfigs.save(updated)
    logger.info("User %s updated settings (language=%s, dark_mode=%s)", user.id, updated.language, updated.dark_mode)
    message = services.translator.translate(updated.language, "flash.settings_updated")
    return RedirectResponse(url=with_flash("/", message), status_code=302)


@router.get("/api/v1/settings")
def settings_api(user: User = Depends(require_user), services: Services = Depends(get_services)):
    return JSONResponse(userconfig_json(services.userconfigs.find_or_default(user.id)))
