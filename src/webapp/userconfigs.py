# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import replace

from webapp.errors import ValidationCode, ValidationError
from webapp.i18n import Translator
from webapp.models import UserConfig
from webapp.stores import UserConfigStore


class UserConfigService:
    """Per-user preferences; records are created lazily with defaults."""

    def __init__(self, store: UserConfigStore, translator: Translator):
        self.store = store
        self.translator = translator

    def find_or_default(self, user_id: str) -> UserConfig:
        config = self.store.find(user_id)
        if config is None:
            return UserConfig(user_id=user_id, language=self.translator.default_language)
        return config

    def update(self, config: UserConfig, language: str, dark_mode: bool) -> UserConfig:
        lang = (language or "").strip().lower()
        if not self.translator.is_available(lang):
            raise ValidationError(ValidationCode.LANGUAGE_UNAVAILABLE)
        return replace(config, language=lang, dark_mode=dark_mode)

    def delete_for(self, user_id: str) -> bool:
        config = self.store.find(user_id)
        if config is None:
            return False
        self.store.delete(config)
        return True
