# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from fastapi import Request
from fastapi.templating import Jinja2Templates

from webapp.i18n import LanguageChoice
from webapp.models import UserConfig
from webapp.permissions import current_user_optional
from webapp.services import get_services

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _language(request: Request) -> Tuple[LanguageChoice, Optional[UserConfig]]:
    services = get_services(request)
    user = current_user_optional(request)
    config = services.userconfigs.find_or_default(user.id) if user else None
    return services.translator.resolve(request.query_params.get("lang"), config), config


def translate_for(request: Request, key: str, **params: Any) -> str:
    choice, _ = _language(request)
    return get_services(request).translator.translate(choice.language, key, **params)


def page_context(request: Request) -> Dict[str, Any]:
    """Context every page gets: user, language, flash, app name, dark mode."""
    services = get_services(request)
    user = current_user_optional(request)
    choice, config = _language(request)

    return {
        "request": request,
        "current_user": user,
        "open_registration": services.config.open_registration,
        "flash": request.query_params.get("flash", "") + choice.notice,
        "language": choice.language,
        "languages": services.translator.available_languages,
        "is_admin": bool(user and user.is_admin),
        "app_name": services.config.app_name,
        "dark_mode": bool(config and config.dark_mode),
        "t": partial(services.translator.translate, choice.language),
    }


def render(request: Request, page: str, ctx: Optional[Dict[str, Any]] = None, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the global page context."""
    merged = {**page_context(request), **(ctx or {})}
    return templates.TemplateResponse(request, f"{page}.html", merged, status_code=status_code)
