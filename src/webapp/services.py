# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process wide collaborators, built once at startup and kept on ``app.state``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import Request

from webapp.auth.credentials import CredentialEngine
from webapp.auth.sessions import SessionEngine
from webapp.config import AppConfig
from webapp.i18n import Translator
from webapp.stores import Stores, build_stores
from webapp.userconfigs import UserConfigService


@dataclass(frozen=True)
class Services:
    config: AppConfig
    stores: Stores
    credentials: CredentialEngine
    sessions: SessionEngine
    userconfigs: UserConfigService
    translator: Translator

    @classmethod
    def build(cls, config: AppConfig, *, stores: Optional[Stores] = None) -> "Services":
        if stores is None:
            stores = build_stores(db_connector=config.db_connector, data_directory=Path(config.data_directory))
        translator = Translator.from_directory(default_language=config.default_language)
        return cls(
            config=config,
            stores=stores,
            credentials=CredentialEngine(stores.users),
            sessions=SessionEngine(
                stores.sessions,
                cookie_name=config.app_name,
                secret_key=config.secret_key,
                cookie_secure=config.cookie_secure,
            ),
            userconfigs=UserConfigService(stores.userconfigs, translator),
            translator=translator,
        )


def get_services(request: Request) -> Services:
    return request.app.state.services
