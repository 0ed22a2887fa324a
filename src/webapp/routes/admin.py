# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from webapp.errors import ValidationError
from webapp.export import FORMATS, encode_users, user_rows
from webapp.models import User
from webapp.permissions import require_user
from webapp.rendering import render, translate_for
from webapp.routes import with_flash
from webapp.routes.secure import userconfig_json
from webapp.services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


def _find_user_or_404(services: Services, user_id: str) -> User:
    u = services.stores.users.find(user_id)
    if u is None:
        logger.info("User %s not found", user_id)
        raise HTTPException(status_code=404, detail="user not found")
    return u


@router.get("/users", response_class=HTMLResponse)
def users_index(request: Request, services: Services = Depends(get_services)):
    rows = user_rows(services.stores.users.all(), services.stores.sessions)
    return render(request, "users/index", {"users": rows, "formats": FORMATS})


@router.get("/users/{user_id}", response_class=HTMLResponse)
def user_edit(request: Request, user_id: str, services: Services = Depends(get_services)):
    target = _find_user_or_404(services, user_id)
    return render(request, "users/edit", {"user": target, "action": f"/users/{target.id}", "admin_override": True})


@router.post("/users/{user_id}")
def user_update(
    request: Request,
    user_id: str,
    username: str = Form(""),
    email: str = Form(""),
    newPassword: str = Form(""),
    actor: User = Depends(require_user),
    services: Services = Depends(get_services),
):
    target = _find_user_or_404(services, user_id)
    try:
        updated = services.credentials.update_user(target, username, email, "", newPassword, is_admin_actor=True)
    except ValidationError as e:
        return render(
            request,
            "users/edit",
            {
                "user": replace(target, username=username, email=email),
                "action": f"/users/{target.id}",
                "admin_override": True,
                "error": translate_for(request, e.message_key),
            },
        )

    services.stores.users.save(updated)
    logger.info("Admin %s updated user %s", actor.id, updated.id)
    return RedirectResponse(
        url=with_flash(f"/users/{updated.id}", translate_for(request, "flash.user_updated")),
        status_code=302,
    )


@router.get("/api/v1/users")
def users_api(format: str = "json", services: Services = Depends(get_services)):
    rows = user_rows(services.stores.users.all(), services.stores.sessions)
    body, media_type, headers = encode_users(rows, format)
    return Response(content=body, media_type=media_type, headers=headers)


@router.delete("/api/v1/users/{user_id}")
def user_delete(user_id: str, actor: User = Depends(require_user), services: Services = Depends(get_services)):
    target = _find_user_or_404(services, user_id)

    # Three independent deletes; a failure in between leaves orphans behind.
    for session in services.stores.sessions.find_by_user(target.id):
        services.stores.sessions.delete(session)
    services.userconfigs.delete_for(target.id)
    services.stores.users.delete(target)

    logger.info("Admin %s deleted user %s (%s)", actor.id, target.id, target.username)
    return Response(status_code=204)


@router.get("/api/v1/settings/{user_id}")
def user_settings_api(user_id: str, services: Services = Depends(get_services)):
    target = _find_user_or_404(services, user_id)
    return JSONResponse(userconfig_json(services.userconfigs.find_or_default(target.id)))
